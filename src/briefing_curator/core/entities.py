"""Core domain entities."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Optional

from briefing_curator.core.errors import ValidationError
from briefing_curator.core.topics import extract_topics


# Briefings follow Korean local time.
KST = timezone(timedelta(hours=9))


class Category(str, Enum):
    """Briefing channel a content item belongs to."""

    TECH = "tech"
    WORLD = "world"
    CULTURE = "culture"
    REGIONAL = "regional"
    EXPLORATION = "exploration"


class ReactionType(str, Enum):
    """User reaction to a delivered item."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    SAVE = "save"
    MEMO = "memo"
    OPEN = "open"
    CLICK = "click"
    SKIP = "skip"


class BriefingMode(str, Enum):
    """Digest size mode."""

    WEEKDAY = "weekday"
    WEEKEND = "weekend"


class TriggerType(str, Enum):
    """Real-time alert trigger."""

    WEATHER = "weather"
    KEYWORD_BREAKING = "keyword_breaking"
    WORLD_EMERGENCY = "world_emergency"
    CULTURE_TREND = "culture_trend"
    CONTEXT_MATCH = "context_match"

    @property
    def is_content_addressable(self) -> bool:
        """Whether alerts of this type refer to a specific content item."""
        return self is not TriggerType.WEATHER


class TagState(str, Enum):
    """Which of the three tag variants a `Tags` value holds."""

    UNKNOWN = "unknown"
    NONE = "none"
    PRESENT = "present"


@dataclass(frozen=True)
class Tags:
    """Tri-state tag field.

    ``unknown`` means the source never reported tags, ``empty`` means it
    reported that there are none. The two match differently when looking
    for repeating issues, so they are never conflated.
    """

    state: TagState
    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.state is not TagState.PRESENT and self.values:
            raise ValidationError(f"Tags in state {self.state.value} cannot carry values")
        if self.state is TagState.PRESENT and not self.values:
            raise ValidationError("Populated tags need at least one value")

    @classmethod
    def unknown(cls) -> "Tags":
        return cls(TagState.UNKNOWN)

    @classmethod
    def empty(cls) -> "Tags":
        return cls(TagState.NONE)

    @classmethod
    def of(cls, values: Iterable[str]) -> "Tags":
        """Build tags from values; an empty iterable yields `Tags.empty()`."""
        values = tuple(values)
        if not values:
            return cls.empty()
        return cls(TagState.PRESENT, values)

    @classmethod
    def from_raw(cls, raw: Optional[Iterable[str]]) -> "Tags":
        """Map a nullable list (as stored upstream) onto the three variants."""
        if raw is None:
            return cls.unknown()
        return cls.of(raw)

    @property
    def is_known(self) -> bool:
        return self.state is not TagState.UNKNOWN

    def as_set(self) -> frozenset[str]:
        return frozenset(self.values)

    def to_raw(self) -> Optional[list[str]]:
        if self.state is TagState.UNKNOWN:
            return None
        return list(self.values)


@dataclass
class ContentItem:
    """Candidate article for a briefing."""

    id: str
    category: Category
    title: str
    tags: Tags = field(default_factory=Tags.unknown)
    initial_score: float = 0.5
    published_at: Optional[datetime] = None
    score: Optional[float] = None
    extended_summary: Optional[str] = None
    why_important: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Content id cannot be empty")
        if not self.title:
            raise ValidationError("Title cannot be empty")
        if not isinstance(self.category, Category):
            raise ValidationError(f"Unknown category: {self.category!r}")
        if not 0.0 <= self.initial_score <= 1.0:
            raise ValidationError(f"initial_score must be in [0, 1], got {self.initial_score}")
        if self.score is not None and not 0.0 <= self.score <= 1.0:
            raise ValidationError(f"score must be in [0, 1], got {self.score}")

    @property
    def ranking_score(self) -> float:
        """Composite score when scored, otherwise the ingestion score."""
        return self.score if self.score is not None else self.initial_score


@dataclass
class InterestProfileEntry:
    """Learned interest in a single topic."""

    topic: str
    score: float
    interaction_count: int
    last_updated: datetime
    archived_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.topic:
            raise ValidationError("Topic cannot be empty")
        if not 0.0 <= self.score <= 1.0:
            raise ValidationError(f"Profile score must be in [0, 1], got {self.score}")
        if self.interaction_count < 0:
            raise ValidationError("interaction_count cannot be negative")

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None


@dataclass
class ReactionEvent:
    """User reaction to a delivered item."""

    content_id: str
    reaction_type: ReactionType
    topics: tuple[str, ...]
    occurred_at: datetime

    def __post_init__(self) -> None:
        if not self.content_id:
            raise ValidationError("Reaction content id cannot be empty")
        if not isinstance(self.reaction_type, ReactionType):
            raise ValidationError(f"Unknown reaction type: {self.reaction_type!r}")

    @classmethod
    def from_item(
        cls, item: ContentItem, reaction_type: ReactionType, occurred_at: datetime
    ) -> "ReactionEvent":
        """Create an event whose topics are derived from the item's tags."""
        return cls(
            content_id=item.id,
            reaction_type=reaction_type,
            topics=tuple(extract_topics(item.tags.values)),
            occurred_at=occurred_at,
        )


ALLOWED_ITEM_REDUCTIONS = (0, 2, 4)


@dataclass
class FatigueState:
    """Volume-throttling state owned by the persistence layer."""

    item_reduction: int = 0
    channel_enabled: dict[Category, bool] = field(default_factory=dict)
    mute_until: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.item_reduction not in ALLOWED_ITEM_REDUCTIONS:
            raise ValidationError(
                f"item_reduction must be one of {ALLOWED_ITEM_REDUCTIONS}, got {self.item_reduction}"
            )

    def is_channel_enabled(self, category: Category) -> bool:
        return self.channel_enabled.get(category, True)


_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def validate_hhmm(value: str) -> str:
    """Validate a "HH:MM" wall-clock string and return it."""
    if not isinstance(value, str) or not _HHMM.match(value):
        raise ValidationError(f"Expected HH:MM wall-clock time, got {value!r}")
    return value


@dataclass
class AlertSetting:
    """Per-trigger real-time alert configuration and counter."""

    trigger_type: TriggerType
    is_enabled: bool = True
    quiet_hours_start: str = "23:00"
    quiet_hours_end: str = "07:00"
    daily_count: int = 0
    last_triggered_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        validate_hhmm(self.quiet_hours_start)
        validate_hhmm(self.quiet_hours_end)
        if self.daily_count < 0:
            raise ValidationError("daily_count cannot be negative")


@dataclass
class AlertLogEntry:
    """A real-time alert that was sent."""

    trigger_type: TriggerType
    content_id: Optional[str]
    sent_at: datetime


@dataclass
class ProfileDelta:
    """Profile change for the persistence layer to apply."""

    topic: str
    score: float
    interaction_count: int
    last_updated: datetime
    is_new: bool = False


class DigestSection(str, Enum):
    """Part of the digest an entry belongs to."""

    MAIN = "main"
    EXPLORATION = "exploration"


@dataclass
class DigestEntry:
    """Entry in the briefing digest."""

    item: ContentItem
    section: DigestSection
    reason: str
    is_following: bool = False


@dataclass
class Digest:
    """Final briefing: ranked main list plus at most one exploration item."""

    main: list[DigestEntry] = field(default_factory=list)
    exploration: Optional[DigestEntry] = None

    @property
    def entries(self) -> list[DigestEntry]:
        entries = list(self.main)
        if self.exploration is not None:
            entries.append(self.exploration)
        return entries

    @property
    def items(self) -> list[ContentItem]:
        return [entry.item for entry in self.entries]

    def __len__(self) -> int:
        return len(self.main) + (1 if self.exploration is not None else 0)


class AlertReason(str, Enum):
    """Reason code attached to an alert decision."""

    ALLOWED = "allowed"
    DISABLED = "disabled"
    MUTED = "muted"
    QUIET_HOURS = "quiet_hours"
    DAILY_CAP = "daily_cap"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class AlertDecision:
    """Allow/deny outcome for a real-time alert."""

    allowed: bool
    reason: AlertReason
