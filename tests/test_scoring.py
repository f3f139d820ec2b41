"""Tests for content scoring and profile learning."""

import random
from datetime import datetime, timedelta, timezone

import pytest

from briefing_curator.core import (
    Category,
    ContentItem,
    ContentScorer,
    InterestProfileEntry,
    ReactionEvent,
    ReactionType,
    ScoreUpdater,
    ScoreWeights,
    Tags,
    ValidationError,
)
from briefing_curator.core.scoring import (
    EMA_ALPHA,
    REACTION_WEIGHTS,
    active_scores,
    context_score,
    interest_component,
    recency_component,
)

NOW = datetime(2026, 3, 9, 7, 0, tzinfo=timezone.utc)


def make_entry(topic: str, score: float, count: int = 0, archived: bool = False) -> InterestProfileEntry:
    return InterestProfileEntry(
        topic=topic,
        score=score,
        interaction_count=count,
        last_updated=NOW - timedelta(days=1),
        archived_at=NOW if archived else None,
    )


def make_event(reaction: ReactionType, *topics: str) -> ReactionEvent:
    return ReactionEvent(content_id="c-1", reaction_type=reaction, topics=topics, occurred_at=NOW)


def test_interest_component_mean_with_neutral_default() -> None:
    """Unmatched tags count as 0.5, not 0."""
    profile = {"ai": 0.8, "rust": 0.6}
    
    assert interest_component(["AI"], profile) == pytest.approx(0.8)
    assert interest_component(["AI", "Rust"], profile) == pytest.approx(0.7)
    assert interest_component(["AI", "Unknown"], profile) == pytest.approx(0.65)
    assert interest_component([], profile) == 0.5
    assert interest_component(["Unknown", "Other"], {}) == 0.5


def test_context_score() -> None:
    """Share of tags matching a context keyword, substring either way."""
    assert context_score(["Rust", "WebAssembly"], ["rust"]) == pytest.approx(0.5)
    assert context_score(["machine learning"], ["learning"]) == pytest.approx(1.0)
    assert context_score([], ["rust"]) == 0.0
    assert context_score(["rust"], []) == 0.0


def test_recency_component_decay() -> None:
    """Fresh items score 1, one half-life halves, unknown age is neutral."""
    assert recency_component(NOW, NOW) == pytest.approx(1.0)
    assert recency_component(NOW - timedelta(hours=24), NOW) == pytest.approx(0.5)
    assert recency_component(None, NOW) == 0.5
    # Items dated in the future are treated as brand new.
    assert recency_component(NOW + timedelta(hours=3), NOW) == pytest.approx(1.0)


def test_tech_score_blend() -> None:
    """Tech uses the 0.6:0.3:0.1 blend."""
    scorer = ContentScorer()
    item = ContentItem(
        id="t1",
        category=Category.TECH,
        title="Rust async runtimes",
        tags=Tags.of(["rust"]),
        published_at=NOW,
    )
    
    # 0.8 * 0.6 + 0.5 * 0.3 + 1.0 * 0.1 = 0.73
    assert scorer.score(item, {"rust": 0.8}, NOW, context=0.5) == pytest.approx(0.73)


def test_score_is_pure_and_bounded() -> None:
    """Scores stay in [0, 1] and inputs are untouched."""
    scorer = ContentScorer()
    items = [
        ContentItem(id=f"i{i}", category=category, title=f"Item {i}", tags=Tags.of(["x"]))
        for i, category in enumerate([Category.TECH, Category.WORLD, Category.CULTURE, Category.REGIONAL])
    ]
    profile = {"x": 1.0}
    
    scored = scorer.score_items(items, profile, NOW, context={"i0": 1.0})
    
    assert all(0.0 <= item.score <= 1.0 for item in scored)
    assert all(item.score is None for item in items)
    assert profile == {"x": 1.0}


def test_custom_weights_validated() -> None:
    """Weight triples must sum to one."""
    with pytest.raises(ValidationError, match="sum to 1.0"):
        ScoreWeights(interest=0.5, context=0.5, recency=0.5)
    
    scorer = ContentScorer({Category.WORLD: ScoreWeights(interest=1.0, context=0.0, recency=0.0)})
    item = ContentItem(id="w1", category=Category.WORLD, title="World", tags=Tags.of(["eu"]))
    assert scorer.score(item, {"eu": 0.9}, NOW) == pytest.approx(0.9)


def test_active_scores_skip_archived() -> None:
    """Archived topics are left out of the scoring snapshot."""
    entries = [make_entry("ai", 0.8), make_entry("crypto", 0.1, archived=True)]
    
    assert active_scores(entries) == {"ai": 0.8}


def test_reaction_weights_signs() -> None:
    """Positive reactions pull up, negative ones pull down."""
    assert EMA_ALPHA == 0.1
    assert REACTION_WEIGHTS[ReactionType.POSITIVE] > REACTION_WEIGHTS[ReactionType.SAVE] > 0
    assert REACTION_WEIGHTS[ReactionType.SKIP] < 0
    assert REACTION_WEIGHTS[ReactionType.NEGATIVE] < REACTION_WEIGHTS[ReactionType.SKIP]


def test_update_existing_topic_ema() -> None:
    """Positive reaction at 0.5 gives 0.55 and bumps the count."""
    updater = ScoreUpdater()
    profile = {"ai": make_entry("ai", 0.5, count=5)}
    
    deltas = updater.apply(make_event(ReactionType.POSITIVE, "AI"), profile, NOW)
    
    assert len(deltas) == 1
    assert deltas[0].topic == "ai"
    assert deltas[0].score == pytest.approx(0.55)
    assert deltas[0].interaction_count == 6
    assert deltas[0].last_updated == NOW
    assert not deltas[0].is_new
    # Input snapshot is not mutated
    assert profile["ai"].score == 0.5


def test_negative_reaction_lowers_score() -> None:
    """Dislike pulls the score down."""
    updater = ScoreUpdater()
    deltas = updater.apply(make_event(ReactionType.NEGATIVE, "ai"), {"ai": make_entry("ai", 0.7)}, NOW)
    
    assert deltas[0].score < 0.7


def test_new_topic_inserted_then_updated() -> None:
    """Unknown topics start at 0.5 / 0 before the update."""
    updater = ScoreUpdater()
    deltas = updater.apply(make_event(ReactionType.POSITIVE, "Quantum", "quantum "), {}, NOW)
    
    assert len(deltas) == 1
    assert deltas[0].is_new
    assert deltas[0].score == pytest.approx(0.55)
    assert deltas[0].interaction_count == 1


def test_archived_topic_not_updated() -> None:
    """Archived topics stay frozen until restored."""
    updater = ScoreUpdater()
    profile = {"crypto": make_entry("crypto", 0.1, archived=True)}
    
    assert updater.apply(make_event(ReactionType.POSITIVE, "crypto"), profile, NOW) == []


@pytest.mark.parametrize("start", [0.0, 0.01, 0.5, 0.99, 1.0])
def test_scores_stay_clamped_over_reaction_sequences(start: float) -> None:
    """Any reaction sequence keeps scores in [0, 1]."""
    updater = ScoreUpdater()
    rng = random.Random(42)
    entry = make_entry("ai", start)
    
    for _ in range(200):
        reaction = rng.choice(list(ReactionType))
        (delta,) = updater.apply(make_event(reaction, "ai"), {"ai": entry}, NOW)
        assert 0.0 <= delta.score <= 1.0
        entry = make_entry("ai", delta.score, delta.interaction_count)


def test_invalid_alpha() -> None:
    """Alpha must be in (0, 1]."""
    with pytest.raises(ValidationError):
        ScoreUpdater(alpha=0.0)
