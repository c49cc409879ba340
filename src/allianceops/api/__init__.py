"""HTTP routes serving cached upstream data."""

from allianceops.api.routes import router

__all__ = ["router"]
