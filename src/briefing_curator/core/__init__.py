"""Core domain layer."""

from briefing_curator.core.alerts import (
    AlertGuard,
    check_daily_alert_count,
    has_duplicate_alert,
    is_quiet_hours,
)
from briefing_curator.core.briefing import BRIEFING_QUOTAS, BriefingSelector, mode_for
from briefing_curator.core.entities import (
    KST,
    AlertDecision,
    AlertLogEntry,
    AlertReason,
    AlertSetting,
    BriefingMode,
    Category,
    ContentItem,
    Digest,
    DigestEntry,
    DigestSection,
    FatigueState,
    InterestProfileEntry,
    ProfileDelta,
    ReactionEvent,
    ReactionType,
    Tags,
    TagState,
    TriggerType,
)
from briefing_curator.core.errors import BriefingCuratorError, UpstreamUnavailable, ValidationError
from briefing_curator.core.fatigue import detect_repeating_issues
from briefing_curator.core.interfaces import (
    AlertLog,
    BriefingHistory,
    ProfileStore,
    ReactionLog,
    SettingsStore,
)
from briefing_curator.core.scoring import ContentScorer, ScoreUpdater, ScoreWeights
from briefing_curator.core.serendipity import SerendipitySelector

__all__ = [
    "KST",
    "AlertDecision",
    "AlertGuard",
    "AlertLog",
    "AlertLogEntry",
    "AlertReason",
    "AlertSetting",
    "BRIEFING_QUOTAS",
    "BriefingCuratorError",
    "BriefingHistory",
    "BriefingMode",
    "BriefingSelector",
    "Category",
    "ContentItem",
    "ContentScorer",
    "Digest",
    "DigestEntry",
    "DigestSection",
    "FatigueState",
    "InterestProfileEntry",
    "ProfileDelta",
    "ProfileStore",
    "ReactionEvent",
    "ReactionLog",
    "ReactionType",
    "ScoreUpdater",
    "ScoreWeights",
    "SerendipitySelector",
    "SettingsStore",
    "TagState",
    "Tags",
    "TriggerType",
    "UpstreamUnavailable",
    "ValidationError",
    "check_daily_alert_count",
    "detect_repeating_issues",
    "has_duplicate_alert",
    "is_quiet_hours",
    "mode_for",
]
