"""Per-category quota selection of the daily briefing."""

import logging
from datetime import datetime, tzinfo
from typing import Iterable, Mapping, Optional

from briefing_curator.core.entities import (
    BriefingMode,
    Category,
    ContentItem,
    Digest,
    DigestEntry,
    DigestSection,
    KST,
)
from briefing_curator.core.fatigue import apply_item_reduction
from briefing_curator.core.serendipity import SerendipitySelector

logger = logging.getLogger(__name__)

BRIEFING_QUOTAS: dict[BriefingMode, dict[Category, int]] = {
    BriefingMode.WEEKDAY: {
        Category.TECH: 3,
        Category.WORLD: 2,
        Category.CULTURE: 1,
        Category.REGIONAL: 2,
    },
    BriefingMode.WEEKEND: {
        Category.TECH: 2,
        Category.WORLD: 1,
        Category.CULTURE: 1,
        Category.REGIONAL: 1,
    },
}

EXPLORATION_REASON = "exploration"


def is_weekend(now: datetime, tz: tzinfo = KST) -> bool:
    """Saturday or Sunday in the briefing's local timezone."""
    return now.astimezone(tz).weekday() >= 5


def mode_for(now: datetime, tz: tzinfo = KST) -> BriefingMode:
    return BriefingMode.WEEKEND if is_weekend(now, tz) else BriefingMode.WEEKDAY


def quotas_for(mode: BriefingMode, item_reduction: int = 0) -> dict[Category, int]:
    return apply_item_reduction(BRIEFING_QUOTAS[mode], item_reduction)


class BriefingSelector:
    """Select the main list by category quota and append one exploration item."""

    def __init__(self, serendipity: Optional[SerendipitySelector] = None) -> None:
        self.serendipity = serendipity or SerendipitySelector()

    def select_main(
        self, candidates: list[ContentItem], quotas: Mapping[Category, int]
    ) -> list[DigestEntry]:
        """Top `quota` items per category, categories in quota-table order.

        Equal scores keep the original candidate order (stable sort).
        Categories with fewer candidates contribute fewer items.
        """
        by_category: dict[Category, list[ContentItem]] = {}
        for item in candidates:
            by_category.setdefault(item.category, []).append(item)

        main = []
        for category, quota in quotas.items():
            ranked = sorted(
                by_category.get(category, []),
                key=lambda item: item.ranking_score,
                reverse=True,
            )
            for rank, item in enumerate(ranked[:max(0, quota)], 1):
                main.append(
                    DigestEntry(
                        item=item,
                        section=DigestSection.MAIN,
                        reason=f"{category.value} #{rank}",
                    )
                )
        return main

    def select(
        self,
        candidates: Iterable[ContentItem],
        profile: Mapping[str, float],
        mode: BriefingMode = BriefingMode.WEEKDAY,
        item_reduction: int = 0,
    ) -> Digest:
        """Build the digest for one briefing.

        Args:
            candidates: Scored candidates from enabled channels
            profile: Topic -> score snapshot for exploration weighting
            mode: Weekday or weekend quota table
            item_reduction: Fatigue reduction subtracted from the quotas
        """
        candidates = list(candidates)
        quotas = quotas_for(mode, item_reduction)
        main = self.select_main(candidates, quotas)

        main_ids = {entry.item.id for entry in main}
        remaining = [
            item
            for item in candidates
            if item.id not in main_ids and item.category is not Category.EXPLORATION
        ]
        picked = self.serendipity.select(remaining, profile, exclude_ids=main_ids)

        exploration = None
        if picked is not None:
            exploration = DigestEntry(
                item=picked,
                section=DigestSection.EXPLORATION,
                reason=EXPLORATION_REASON,
            )

        logger.info(
            "Selected %d main items (%s mode, reduction %d) and %s exploration item",
            len(main),
            mode.value,
            item_reduction,
            "one" if exploration else "no",
        )
        return Digest(main=main, exploration=exploration)
