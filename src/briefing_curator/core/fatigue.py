"""Fatigue prevention: channel toggles, mute, inactivity reduction, repeats.

Each policy is a pure function over explicitly passed state. Reading and
writing the state is the caller's job.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from briefing_curator.core.entities import (
    Category,
    ContentItem,
    DigestEntry,
    ReactionEvent,
    TagState,
)
from briefing_curator.core.topics import extract_title_keywords

logger = logging.getLogger(__name__)

MAX_ITEM_REDUCTION = 4
ITEM_REDUCTION_STEP = 2
NO_REACTION_DAYS = 7
# Today plus the two previous briefings.
REPEAT_ISSUE_DAYS = 3
MIN_SHARED_TITLE_KEYWORDS = 2
MIN_CATEGORY_QUOTA = 1


# Channel enablement

def filter_enabled_channels(
    items: Iterable[ContentItem], channel_enabled: Mapping[Category, bool]
) -> list[ContentItem]:
    """Drop candidates of disabled channels. Unlisted channels stay enabled."""
    return [item for item in items if channel_enabled.get(item.category, True)]


# Mute window

def is_muted(mute_until: Optional[datetime], now: datetime) -> bool:
    return mute_until is not None and now < mute_until


def mute_until_for(days: int, now: datetime) -> Optional[datetime]:
    """Mute deadline for a "/mute N" request; N <= 0 clears the mute."""
    if days <= 0:
        return None
    return now + timedelta(days=days)


# Inactivity-driven reduction

def has_no_reaction_streak(
    reactions: Iterable[ReactionEvent], now: datetime, days: int = NO_REACTION_DAYS
) -> bool:
    """True when no reaction happened in the trailing window."""
    since = now - timedelta(days=days)
    return not any(since <= event.occurred_at <= now for event in reactions)


def next_item_reduction(current: int, no_reaction_streak: bool) -> int:
    """Grow the reduction by 2 (capped at 4) while the user stays inactive.

    Any reaction ends the inactivity period and the reduction resets.
    """
    if not no_reaction_streak:
        return 0
    return min(current + ITEM_REDUCTION_STEP, MAX_ITEM_REDUCTION)


def apply_item_reduction(quotas: Mapping[Category, int], reduction: int) -> dict[Category, int]:
    """Subtract `reduction` slots from the quota table.

    Slots are removed one at a time from the category with the largest
    remaining quota (earlier table entries first on ties), never taking a
    category below one item.
    """
    reduced = dict(quotas)
    for _ in range(max(0, reduction)):
        reducible = [c for c, q in reduced.items() if q > MIN_CATEGORY_QUOTA]
        if not reducible:
            break
        largest = max(reducible, key=lambda c: reduced[c])
        reduced[largest] -= 1
    return reduced


# Repeating-issue detection

def _is_same_story(current: ContentItem, current_keywords: list[str], past: ContentItem) -> bool:
    if current.tags.state is not TagState.UNKNOWN:
        # Tag-driven matching; an empty tag list never matches.
        return bool(current.tags.as_set() & past.tags.as_set())

    past_keywords = set(extract_title_keywords(past.title))
    shared = [keyword for keyword in current_keywords if keyword in past_keywords]
    return len(shared) >= MIN_SHARED_TITLE_KEYWORDS


def detect_repeating_issues(
    today: Iterable[ContentItem], prior_days: Sequence[Iterable[ContentItem]]
) -> set[str]:
    """Ids of today's items whose story ran on each of the prior 2 days.

    Args:
        today: Today's candidates
        prior_days: Previously selected item sets, most recent first

    Returns:
        Set of flagged item ids (empty when history is too short)
    """
    required = REPEAT_ISSUE_DAYS - 1
    if len(prior_days) < required:
        return set()

    window = [list(day) for day in prior_days[:required]]
    repeating = set()

    for item in today:
        if item.tags.state is TagState.NONE:
            continue
        keywords = [] if item.tags.is_known else extract_title_keywords(item.title)
        if not item.tags.is_known and not keywords:
            continue

        if all(any(_is_same_story(item, keywords, past) for past in day) for day in window):
            repeating.add(item.id)

    if repeating:
        logger.debug("Repeating issues: %s", sorted(repeating))
    return repeating


def mark_following(entry: DigestEntry) -> DigestEntry:
    """Annotate an entry as an ongoing story; it is never removed."""
    return replace(entry, is_following=True)
