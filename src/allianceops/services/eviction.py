"""Capacity enforcement for the entry store."""

from allianceops.services.store import EntryStore


def enforce_capacity(store: EntryStore, max_size: int, keep: str | None = None) -> list[str]:
    """Evict least-recently-accessed entries until the store fits.

    Runs synchronously after each insertion. Ties on ``last_accessed_at``
    fall back to write order. ``keep`` is never evicted.

    Returns:
        The evicted keys, oldest first.
    """
    overflow = len(store) - max_size
    if overflow <= 0:
        return []

    candidates = [(key, entry) for key, entry in store.items() if key != keep]
    candidates.sort(key=lambda item: item[1].last_accessed_at)

    evicted = [key for key, _ in candidates[:overflow]]
    for key in evicted:
        store.remove(key)
    return evicted
