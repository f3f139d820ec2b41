"""Relevance scoring and interest-profile learning."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Mapping, Optional

from briefing_curator.core.entities import (
    Category,
    ContentItem,
    InterestProfileEntry,
    ProfileDelta,
    ReactionEvent,
    ReactionType,
)
from briefing_curator.core.errors import ValidationError
from briefing_curator.core.topics import extract_topics, normalize_topic

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5
DEFAULT_RECENCY_HALF_LIFE_HOURS = 24.0

EMA_ALPHA = 0.1

REACTION_WEIGHTS: dict[ReactionType, float] = {
    ReactionType.POSITIVE: 1.0,
    ReactionType.SAVE: 0.8,
    ReactionType.MEMO: 0.8,
    ReactionType.OPEN: 0.5,
    ReactionType.CLICK: 0.4,
    ReactionType.SKIP: -0.3,
    ReactionType.NEGATIVE: -0.8,
}


@dataclass(frozen=True)
class ScoreWeights:
    """Blend weights for the composite score of one category."""

    interest: float
    context: float
    recency: float

    def __post_init__(self) -> None:
        if min(self.interest, self.context, self.recency) < 0:
            raise ValidationError("Score weights cannot be negative")
        if abs(self.interest + self.context + self.recency - 1.0) > 1e-6:
            raise ValidationError(
                f"Score weights must sum to 1.0, got {self.interest + self.context + self.recency:.3f}"
            )


DEFAULT_CATEGORY_WEIGHTS: dict[Category, ScoreWeights] = {
    Category.TECH: ScoreWeights(interest=0.6, context=0.3, recency=0.1),
    Category.WORLD: ScoreWeights(interest=0.5, context=0.2, recency=0.3),
    Category.CULTURE: ScoreWeights(interest=0.5, context=0.3, recency=0.2),
    Category.REGIONAL: ScoreWeights(interest=0.4, context=0.2, recency=0.4),
    Category.EXPLORATION: ScoreWeights(interest=0.6, context=0.3, recency=0.1),
}


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def active_scores(entries: Iterable[InterestProfileEntry]) -> dict[str, float]:
    """Topic -> score snapshot, leaving archived topics out."""
    return {entry.topic: entry.score for entry in entries if not entry.is_archived}


def interest_component(tags: Iterable[str], profile: Mapping[str, float]) -> float:
    """Mean profile score over the tags, 0.5 for every unmatched tag.

    Items without tags get the neutral 0.5 so novel topics are not
    penalized.
    """
    scores = [
        profile.get(topic, NEUTRAL_SCORE)
        for topic in (normalize_topic(tag) for tag in tags)
        if topic is not None
    ]
    if not scores:
        return NEUTRAL_SCORE
    return sum(scores) / len(scores)


def context_score(tags: Iterable[str], keywords: Iterable[str]) -> float:
    """Share of tags that match an active context keyword.

    A tag matches when it equals a keyword or either contains the other,
    ignoring case.
    """
    lower_tags = [tag.lower() for tag in tags]
    lower_keywords = {keyword.lower() for keyword in keywords if keyword}
    if not lower_tags or not lower_keywords:
        return 0.0

    matched = sum(
        1
        for tag in lower_tags
        if any(tag == kw or kw in tag or tag in kw for kw in lower_keywords)
    )
    return clamp(matched / len(lower_tags))


def recency_component(
    published_at: Optional[datetime],
    now: datetime,
    half_life_hours: float = DEFAULT_RECENCY_HALF_LIFE_HOURS,
) -> float:
    """Exponential decay by item age; unknown age is neutral."""
    if published_at is None:
        return NEUTRAL_SCORE
    age_hours = max(0.0, (now - published_at).total_seconds() / 3600)
    return 0.5 ** (age_hours / half_life_hours)


class ContentScorer:
    """Compute the composite relevance score of candidate items."""

    def __init__(
        self,
        category_weights: Optional[Mapping[Category, ScoreWeights]] = None,
        recency_half_life_hours: float = DEFAULT_RECENCY_HALF_LIFE_HOURS,
    ) -> None:
        if recency_half_life_hours <= 0:
            raise ValidationError("recency_half_life_hours must be positive")
        self.category_weights = dict(DEFAULT_CATEGORY_WEIGHTS)
        if category_weights:
            self.category_weights.update(category_weights)
        self.recency_half_life_hours = recency_half_life_hours

    def score(
        self,
        item: ContentItem,
        profile: Mapping[str, float],
        now: datetime,
        context: Optional[float] = None,
    ) -> float:
        """Score one item against a profile snapshot. Pure."""
        weights = self.category_weights[item.category]
        interest = interest_component(item.tags.values, profile)
        context_value = NEUTRAL_SCORE if context is None else clamp(context)
        recency = recency_component(item.published_at, now, self.recency_half_life_hours)

        return clamp(
            weights.interest * interest
            + weights.context * context_value
            + weights.recency * recency
        )

    def score_items(
        self,
        items: Iterable[ContentItem],
        profile: Mapping[str, float],
        now: datetime,
        context: Optional[Mapping[str, float]] = None,
    ) -> list[ContentItem]:
        """Return copies of the items with `score` filled in.

        Args:
            items: Candidate pool
            profile: Topic -> score snapshot (archived topics already removed)
            now: Reference time for recency
            context: Optional content id -> contextual-match signal
        """
        context = context or {}
        scored = [
            replace(item, score=self.score(item, profile, now, context.get(item.id)))
            for item in items
        ]
        logger.debug("Scored %d candidates", len(scored))
        return scored


class ScoreUpdater:
    """EMA learning update of the interest profile on each reaction."""

    def __init__(
        self,
        alpha: float = EMA_ALPHA,
        reaction_weights: Optional[Mapping[ReactionType, float]] = None,
    ) -> None:
        if not 0.0 < alpha <= 1.0:
            raise ValidationError(f"EMA alpha must be in (0, 1], got {alpha}")
        self.alpha = alpha
        self.reaction_weights = dict(REACTION_WEIGHTS)
        if reaction_weights:
            self.reaction_weights.update(reaction_weights)

    def next_score(self, current: float, reaction_type: ReactionType) -> float:
        weight = self.reaction_weights[reaction_type]
        return clamp(current + self.alpha * (weight - current))

    def apply(
        self,
        event: ReactionEvent,
        profile: Mapping[str, InterestProfileEntry],
        now: datetime,
    ) -> list[ProfileDelta]:
        """Compute per-topic deltas for one reaction.

        Unknown topics start at 0.5 with no interactions and then receive
        the same update. Archived topics are left untouched until restored.
        Topics are independent of each other; inputs are not mutated.
        """
        deltas = []

        for topic in extract_topics(event.topics):
            entry = profile.get(topic)
            if entry is not None and entry.is_archived:
                logger.debug("Skipping archived topic %r", topic)
                continue

            is_new = entry is None
            current = NEUTRAL_SCORE if is_new else entry.score
            count = 0 if is_new else entry.interaction_count

            deltas.append(
                ProfileDelta(
                    topic=topic,
                    score=self.next_score(current, event.reaction_type),
                    interaction_count=count + 1,
                    last_updated=now,
                    is_new=is_new,
                )
            )

        logger.debug(
            "Reaction %s on %s produced %d profile deltas",
            event.reaction_type.value,
            event.content_id,
            len(deltas),
        )
        return deltas
