"""Guards for the real-time alert path.

The daily cap fails closed: when the alert log cannot be read, the alert
is denied. Duplicate suppression fails open: when the log cannot be read,
the alert is treated as new.
"""

import logging
from datetime import datetime, time, tzinfo
from typing import Iterable, Optional, Union

from briefing_curator.core.entities import (
    AlertDecision,
    AlertLogEntry,
    AlertReason,
    AlertSetting,
    KST,
    TriggerType,
    validate_hhmm,
)
from briefing_curator.core.errors import UpstreamUnavailable
from briefing_curator.core.interfaces import AlertLog

logger = logging.getLogger(__name__)

MAX_DAILY_ALERTS = 3


def _to_minutes(hhmm: str) -> int:
    hours, minutes = validate_hhmm(hhmm).split(":")
    return int(hours) * 60 + int(minutes)


def is_quiet_hours(start: str, end: str, now: Union[datetime, time]) -> bool:
    """Whether `now` falls in the quiet window [start, end).

    Windows with start after end wrap past midnight (e.g. 23:00-07:00).
    `now` is read as local wall-clock time.
    """
    start_minutes = _to_minutes(start)
    end_minutes = _to_minutes(end)
    now_minutes = now.hour * 60 + now.minute

    if start_minutes > end_minutes:
        return now_minutes >= start_minutes or now_minutes < end_minutes
    return start_minutes <= now_minutes < end_minutes


def check_daily_alert_count(sent_today: Iterable[AlertLogEntry]) -> bool:
    """Allowed while fewer than three alerts went out today."""
    return len(list(sent_today)) < MAX_DAILY_ALERTS


def has_duplicate_alert(
    trigger_type: TriggerType,
    content_id: Optional[str],
    sent_today: Iterable[AlertLogEntry],
) -> bool:
    """Whether the same alert already went out today.

    Content-addressable triggers also need a matching content id; triggers
    without one (weather) match on type alone.
    """
    match_content = content_id is not None and trigger_type.is_content_addressable
    for entry in sent_today:
        if entry.trigger_type is not trigger_type:
            continue
        if not match_content or entry.content_id == content_id:
            return True
    return False


def local_day_start(now: datetime, tz: tzinfo = KST) -> datetime:
    local = now.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def next_daily_count(setting: AlertSetting, now: datetime, tz: tzinfo = KST) -> int:
    """Counter value after sending one more alert, reset at the local day boundary."""
    count = setting.daily_count
    if setting.last_triggered_at is None or setting.last_triggered_at < local_day_start(now, tz):
        count = 0
    return count + 1


class AlertGuard:
    """Evaluate whether a real-time alert may fire."""

    def __init__(self, alert_log: AlertLog, tz: tzinfo = KST) -> None:
        self.alert_log = alert_log
        self.tz = tz

    def _sent_today(self, now: datetime) -> list[AlertLogEntry]:
        day_start = local_day_start(now, self.tz)
        return [entry for entry in self.alert_log.list_alerts_since(day_start) if entry.sent_at >= day_start]

    def check_daily_alert_count(self, now: datetime) -> bool:
        try:
            sent_today = self._sent_today(now)
        except UpstreamUnavailable as e:
            logger.warning("Alert log unavailable, treating daily cap as reached: %s", e)
            return False
        return check_daily_alert_count(sent_today)

    def has_duplicate_alert(
        self, trigger_type: TriggerType, content_id: Optional[str], now: datetime
    ) -> bool:
        try:
            sent_today = self._sent_today(now)
        except UpstreamUnavailable as e:
            logger.warning("Alert log unavailable, treating alert as new: %s", e)
            return False
        return has_duplicate_alert(trigger_type, content_id, sent_today)

    def evaluate(
        self,
        setting: AlertSetting,
        content_id: Optional[str],
        now: datetime,
    ) -> AlertDecision:
        """Run all guards in order: enabled, quiet hours, daily cap, duplicate."""
        if not setting.is_enabled:
            decision = AlertDecision(False, AlertReason.DISABLED)
        elif is_quiet_hours(setting.quiet_hours_start, setting.quiet_hours_end, now.astimezone(self.tz)):
            decision = AlertDecision(False, AlertReason.QUIET_HOURS)
        elif not self.check_daily_alert_count(now):
            decision = AlertDecision(False, AlertReason.DAILY_CAP)
        elif self.has_duplicate_alert(setting.trigger_type, content_id, now):
            decision = AlertDecision(False, AlertReason.DUPLICATE)
        else:
            decision = AlertDecision(True, AlertReason.ALLOWED)

        logger.info(
            "Alert %s (content %s): %s",
            setting.trigger_type.value,
            content_id or "-",
            decision.reason.value,
        )
        return decision
