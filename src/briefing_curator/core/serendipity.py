"""Exploration item selection.

One interest-adjacent item is injected into every digest so that the
briefing does not over-fit to already-known preferences. Candidates are
drawn with a roulette wheel whose weights favour topics the profile rates
low.
"""

import logging
import random
from dataclasses import replace
from typing import Callable, Iterable, Mapping, Optional

from briefing_curator.core.entities import Category, ContentItem
from briefing_curator.core.topics import normalize_topic

logger = logging.getLogger(__name__)

RandomSource = Callable[[], float]

BASE_RANDOMNESS = 0.2
UNTAGGED_INVERSE_WEIGHT = 1.0 + BASE_RANDOMNESS


def inverse_weight(tags: Iterable[str], profile: Mapping[str, float]) -> float:
    """Exploration weight: high for low-interest topics.

    Untagged content gets the maximal 1.2. Tags missing from the profile
    count as zero interest.
    """
    topics = [topic for topic in (normalize_topic(tag) for tag in tags) if topic is not None]
    if not topics:
        return UNTAGGED_INVERSE_WEIGHT

    average = sum(profile.get(topic, 0.0) for topic in topics) / len(topics)
    return 1.0 - average + BASE_RANDOMNESS


def is_exploration_item(content_id: str, items: Iterable[ContentItem]) -> bool:
    """Whether the given content id is the exploration pick of a digest."""
    for item in items:
        if item.id == content_id:
            return item.category is Category.EXPLORATION
    return False


class SerendipitySelector:
    """Inverse-weighted roulette-wheel sampler."""

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self.rng = rng or random.random

    def build_pool(
        self, candidates: Iterable[ContentItem], exclude_ids: Iterable[str] = ()
    ) -> list[ContentItem]:
        excluded = set(exclude_ids)
        return [
            item
            for item in candidates
            if item.id not in excluded and item.category is not Category.EXPLORATION
        ]

    def select(
        self,
        candidates: Iterable[ContentItem],
        profile: Mapping[str, float],
        exclude_ids: Iterable[str] = (),
    ) -> Optional[ContentItem]:
        """Pick one exploration item, or None when the pool is empty.

        Returns:
            Shallow copy of the picked item with category forced to exploration
        """
        pool = self.build_pool(candidates, exclude_ids)
        if not pool:
            return None

        weights = [inverse_weight(item.tags.values, profile) for item in pool]
        total = sum(weights)
        threshold = self.rng() * total

        accumulated = 0.0
        for item, weight in zip(pool, weights):
            accumulated += weight
            if accumulated > threshold:
                logger.debug("Exploration pick %s (weight %.2f of %.2f)", item.id, weight, total)
                return replace(item, category=Category.EXPLORATION)

        # Floating-point rounding left the walk short of the threshold.
        return replace(pool[-1], category=Category.EXPLORATION)
