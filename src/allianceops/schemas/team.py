"""Team request schemas."""

from pydantic import Field

from allianceops.schemas.base import BaseSchema

MAX_BATCH_TEAMS = 10


class TeamSiteBatchRequest(BaseSchema):
    """Body for fetching several team EPA timelines at once."""

    team_numbers: list[int] = Field(..., min_length=1, max_length=MAX_BATCH_TEAMS)
    year: int = Field(..., ge=2002)
