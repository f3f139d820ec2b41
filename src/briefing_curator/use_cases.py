"""Business logic use cases."""

import logging
import random
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Iterable, Mapping, Optional

from briefing_curator.core import (
    KST,
    AlertDecision,
    AlertGuard,
    AlertLog,
    AlertLogEntry,
    AlertReason,
    AlertSetting,
    BriefingHistory,
    BriefingMode,
    BriefingSelector,
    ContentItem,
    ContentScorer,
    Digest,
    FatigueState,
    InterestProfileEntry,
    ProfileDelta,
    ProfileStore,
    ReactionEvent,
    ReactionLog,
    ScoreUpdater,
    SerendipitySelector,
    SettingsStore,
    TriggerType,
    UpstreamUnavailable,
    detect_repeating_issues,
    mode_for,
)
from briefing_curator.core.alerts import next_daily_count
from briefing_curator.core.fatigue import (
    NO_REACTION_DAYS,
    REPEAT_ISSUE_DAYS,
    filter_enabled_channels,
    has_no_reaction_streak,
    is_muted,
    mark_following,
    next_item_reduction,
)
from briefing_curator.core.scoring import active_scores

logger = logging.getLogger(__name__)


@dataclass
class BriefingResult:
    """Outcome of one briefing tick."""

    digest: Digest
    mode: BriefingMode
    item_reduction: int
    muted: bool = False


@dataclass
class AlertCheckResult:
    """Alert decision plus the counter value to persist when allowed."""

    decision: AlertDecision
    next_daily_count: Optional[int] = None


class BriefingService:
    """Service for assembling the daily briefing."""

    def __init__(
        self,
        profile_store: ProfileStore,
        reaction_log: ReactionLog,
        history: BriefingHistory,
        settings_store: SettingsStore,
        scorer: Optional[ContentScorer] = None,
        tz: tzinfo = KST,
    ) -> None:
        self.profile_store = profile_store
        self.reaction_log = reaction_log
        self.history = history
        self.settings_store = settings_store
        self.scorer = scorer or ContentScorer()
        self.tz = tz

    def _load_fatigue_state(self) -> FatigueState:
        try:
            return self.settings_store.load_fatigue_state()
        except UpstreamUnavailable as e:
            logger.warning("Fatigue state unavailable, using defaults: %s", e)
            return FatigueState()

    def _load_profile(self) -> dict[str, InterestProfileEntry]:
        try:
            return self.profile_store.load_profile()
        except UpstreamUnavailable as e:
            logger.warning("Interest profile unavailable, scoring neutrally: %s", e)
            return {}

    def _has_no_reaction_streak(self, now: datetime) -> bool:
        try:
            reactions = self.reaction_log.list_reactions_since(now - timedelta(days=NO_REACTION_DAYS))
        except UpstreamUnavailable as e:
            # Unknown activity never shrinks the briefing.
            logger.warning("Reaction log unavailable, skipping inactivity check: %s", e)
            return False
        return has_no_reaction_streak(reactions, now)

    def _prior_selections(self, now: datetime) -> list[list[ContentItem]]:
        try:
            return self.history.recent_selections(
                before=now.astimezone(self.tz).date(), days=REPEAT_ISSUE_DAYS - 1
            )
        except UpstreamUnavailable as e:
            logger.warning("Briefing history unavailable, no repeat detection: %s", e)
            return []

    def run(
        self,
        candidates: Iterable[ContentItem],
        now: datetime,
        context: Optional[Mapping[str, float]] = None,
        mode: Optional[BriefingMode] = None,
        rng: Callable[[], float] = random.random,
    ) -> BriefingResult:
        """Run one briefing tick.

        Args:
            candidates: Raw candidate pool from ingestion
            now: Current time (timezone-aware)
            context: Optional content id -> contextual-match signal
            mode: Force a mode; by default weekend on local Saturday/Sunday
            rng: Uniform [0, 1) source for the exploration draw

        Returns:
            Briefing result; persisting the digest and reduction is up to the caller
        """
        mode = mode or mode_for(now, self.tz)
        state = self._load_fatigue_state()

        if is_muted(state.mute_until, now):
            logger.info("Briefing muted until %s", state.mute_until.isoformat())
            return BriefingResult(Digest(), mode, state.item_reduction, muted=True)

        pool = filter_enabled_channels(candidates, state.channel_enabled)
        profile = active_scores(self._load_profile().values())
        scored = self.scorer.score_items(pool, profile, now, context)

        reduction = next_item_reduction(state.item_reduction, self._has_no_reaction_streak(now))
        if reduction != state.item_reduction:
            logger.info("Item reduction changed %d -> %d", state.item_reduction, reduction)

        selector = BriefingSelector(SerendipitySelector(rng))
        digest = selector.select(scored, profile, mode=mode, item_reduction=reduction)

        repeating = detect_repeating_issues(digest.items, self._prior_selections(now))
        if repeating:
            digest.main = [
                mark_following(entry) if entry.item.id in repeating else entry
                for entry in digest.main
            ]
            if digest.exploration and digest.exploration.item.id in repeating:
                digest.exploration = mark_following(digest.exploration)

        return BriefingResult(digest, mode, reduction)

    def commit(self, result: BriefingResult, now: datetime) -> None:
        """Persist the digest selection and the new reduction."""
        if result.muted:
            return
        self.history.record_selection(now.astimezone(self.tz).date(), result.digest.items)
        state = self.settings_store.load_fatigue_state()
        self.settings_store.save_fatigue_state(replace(state, item_reduction=result.item_reduction))


class LearningService:
    """Service for learning the interest profile from reactions."""

    def __init__(
        self,
        profile_store: ProfileStore,
        reaction_log: ReactionLog,
        updater: Optional[ScoreUpdater] = None,
    ) -> None:
        self.profile_store = profile_store
        self.reaction_log = reaction_log
        self.updater = updater or ScoreUpdater()

    def record(self, event: ReactionEvent, now: datetime) -> list[ProfileDelta]:
        """Record a reaction and persist the resulting profile deltas."""
        profile = self.profile_store.load_profile()
        deltas = self.updater.apply(event, profile, now)
        self.reaction_log.record_reaction(event)
        if deltas:
            self.profile_store.apply_deltas(deltas)
        logger.info("Recorded %s on %s (%d topics)", event.reaction_type.value, event.content_id, len(deltas))
        return deltas


class AlertService:
    """Service for gating real-time alerts."""

    def __init__(
        self,
        settings_store: SettingsStore,
        alert_log: AlertLog,
        tz: tzinfo = KST,
        default_quiet_hours: tuple[str, str] = ("23:00", "07:00"),
    ) -> None:
        self.settings_store = settings_store
        self.alert_log = alert_log
        self.guard = AlertGuard(alert_log, tz)
        self.tz = tz
        self.default_quiet_hours = default_quiet_hours

    def _is_muted(self, now: datetime) -> bool:
        try:
            state = self.settings_store.load_fatigue_state()
        except UpstreamUnavailable as e:
            logger.warning("Mute state unavailable, assuming not muted: %s", e)
            return False
        return is_muted(state.mute_until, now)

    def _load_setting(self, trigger_type: TriggerType) -> AlertSetting:
        setting = self.settings_store.load_alert_setting(trigger_type)
        if setting is None:
            start, end = self.default_quiet_hours
            setting = AlertSetting(trigger_type, quiet_hours_start=start, quiet_hours_end=end)
        return setting

    def check(
        self, trigger_type: TriggerType, content_id: Optional[str], now: datetime
    ) -> AlertCheckResult:
        """Decide whether an alert may fire now."""
        try:
            setting = self._load_setting(trigger_type)
        except UpstreamUnavailable as e:
            logger.warning("Alert settings unavailable, denying alert: %s", e)
            setting = AlertSetting(trigger_type, is_enabled=False)

        if self._is_muted(now):
            logger.info("Alerts muted, skipping %s", trigger_type.value)
            return AlertCheckResult(AlertDecision(False, AlertReason.MUTED))

        decision = self.guard.evaluate(setting, content_id, now)
        if not decision.allowed:
            return AlertCheckResult(decision)
        return AlertCheckResult(decision, next_daily_count(setting, now, self.tz))

    def mark_sent(self, trigger_type: TriggerType, content_id: Optional[str], now: datetime) -> None:
        """Record a delivered alert and bump the trigger's daily counter."""
        setting = self._load_setting(trigger_type)
        self.alert_log.record_alert(AlertLogEntry(trigger_type, content_id, now))
        self.settings_store.save_alert_setting(
            replace(setting, daily_count=next_daily_count(setting, now, self.tz), last_triggered_at=now)
        )
