"""Interest profile lifecycle: archiving, restoring and applying deltas."""

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable

from briefing_curator.core.entities import InterestProfileEntry, ProfileDelta

ARCHIVE_SCORE_THRESHOLD = 0.2
ARCHIVE_AFTER = timedelta(days=90)


def is_archivable(entry: InterestProfileEntry, now: datetime) -> bool:
    """Low-scoring topics untouched for three months get archived."""
    return (
        not entry.is_archived
        and entry.score <= ARCHIVE_SCORE_THRESHOLD
        and entry.last_updated <= now - ARCHIVE_AFTER
    )


def archive_stale(
    entries: Iterable[InterestProfileEntry], now: datetime
) -> list[InterestProfileEntry]:
    """Return archived copies of every archivable entry."""
    return [replace(entry, archived_at=now) for entry in entries if is_archivable(entry, now)]


def restore(entry: InterestProfileEntry) -> InterestProfileEntry:
    """Bring an archived topic back into scoring and matching."""
    return replace(entry, archived_at=None)


def apply_deltas(
    entries: dict[str, InterestProfileEntry], deltas: Iterable[ProfileDelta]
) -> dict[str, InterestProfileEntry]:
    """Merge deltas into a topic -> entry map (last write wins per topic)."""
    merged = dict(entries)
    for delta in deltas:
        existing = merged.get(delta.topic)
        merged[delta.topic] = InterestProfileEntry(
            topic=delta.topic,
            score=delta.score,
            interaction_count=delta.interaction_count,
            last_updated=delta.last_updated,
            archived_at=existing.archived_at if existing else None,
        )
    return merged
