"""Tests for real-time alert guards."""

from datetime import datetime, time, timedelta, timezone
from unittest.mock import Mock

import pytest

from briefing_curator.core import (
    AlertGuard,
    AlertLogEntry,
    AlertReason,
    AlertSetting,
    TriggerType,
    UpstreamUnavailable,
    ValidationError,
    check_daily_alert_count,
    has_duplicate_alert,
    is_quiet_hours,
)
from briefing_curator.core.alerts import local_day_start, next_daily_count

# 2026-03-09 12:00 in Seoul
NOW = datetime(2026, 3, 9, 3, 0, tzinfo=timezone.utc)


def sent(trigger: TriggerType, content_id=None, minutes_ago: int = 30) -> AlertLogEntry:
    return AlertLogEntry(trigger, content_id, NOW - timedelta(minutes=minutes_ago))


def make_guard(entries=None, error: Exception = None) -> AlertGuard:
    alert_log = Mock()
    if error is not None:
        alert_log.list_alerts_since.side_effect = error
    else:
        alert_log.list_alerts_since.return_value = entries or []
    return AlertGuard(alert_log)


@pytest.mark.parametrize(
    "start,end,now,expected",
    [
        ("23:00", "07:00", time(23, 30), True),
        ("23:00", "07:00", time(3, 0), True),
        ("23:00", "07:00", time(9, 0), False),
        ("23:00", "07:00", time(7, 0), False),
        ("23:00", "07:00", time(23, 0), True),
        ("09:00", "18:00", time(12, 0), True),
        ("09:00", "18:00", time(18, 0), False),
        ("09:00", "18:00", time(8, 59), False),
        ("12:00", "12:00", time(12, 0), False),
    ],
)
def test_quiet_hours(start: str, end: str, now: time, expected: bool) -> None:
    """Quiet window is [start, end) and wraps past midnight."""
    assert is_quiet_hours(start, end, now) is expected


def test_quiet_hours_rejects_bad_format() -> None:
    """Malformed wall-clock strings are invalid input."""
    with pytest.raises(ValidationError):
        is_quiet_hours("7:00", "23:00", time(12, 0))


def test_daily_alert_count() -> None:
    """Three alerts a day at most."""
    assert check_daily_alert_count([])
    assert check_daily_alert_count([sent(TriggerType.WEATHER)] * 2)
    assert not check_daily_alert_count([sent(TriggerType.WEATHER)] * 3)


def test_duplicate_content_alert() -> None:
    """Content triggers match on type and content id."""
    today = [sent(TriggerType.KEYWORD_BREAKING, "c1")]
    
    assert has_duplicate_alert(TriggerType.KEYWORD_BREAKING, "c1", today)
    assert not has_duplicate_alert(TriggerType.KEYWORD_BREAKING, "c2", today)
    assert not has_duplicate_alert(TriggerType.CULTURE_TREND, "c1", today)


def test_duplicate_weather_alert() -> None:
    """Weather matches on type alone."""
    today = [sent(TriggerType.WEATHER)]
    
    assert has_duplicate_alert(TriggerType.WEATHER, None, today)
    assert has_duplicate_alert(TriggerType.WEATHER, "ignored", today)
    assert not has_duplicate_alert(TriggerType.WEATHER, None, [])


def test_guard_counts_only_today() -> None:
    """Entries before local midnight do not count toward the cap."""
    # Local midnight is 15:00 UTC the day before; 13 hours ago is yesterday.
    old = [sent(TriggerType.WEATHER, minutes_ago=13 * 60)] * 3
    guard = make_guard(old)
    
    assert guard.check_daily_alert_count(NOW)
    guard.alert_log.list_alerts_since.assert_called_with(local_day_start(NOW))


def test_daily_cap_fails_closed() -> None:
    """An unreadable alert log denies the alert."""
    guard = make_guard(error=UpstreamUnavailable("alert_log"))
    
    assert guard.check_daily_alert_count(NOW) is False


def test_duplicate_check_fails_open() -> None:
    """An unreadable alert log treats the alert as new."""
    guard = make_guard(error=UpstreamUnavailable("alert_log"))
    
    assert guard.has_duplicate_alert(TriggerType.WEATHER, None, NOW) is False


def test_evaluate_allows_fresh_alert() -> None:
    """Enabled, outside quiet hours, under the cap and new."""
    decision = make_guard().evaluate(AlertSetting(TriggerType.WEATHER), None, NOW)
    
    assert decision.allowed
    assert decision.reason is AlertReason.ALLOWED


def test_evaluate_order() -> None:
    """Disabled wins over quiet hours, quiet hours over the cap, the cap over duplicates."""
    full_log = [sent(TriggerType.WEATHER)] * 3
    guard = make_guard(full_log)
    
    disabled = AlertSetting(TriggerType.WEATHER, is_enabled=False, quiet_hours_start="09:00", quiet_hours_end="18:00")
    quiet = AlertSetting(TriggerType.WEATHER, quiet_hours_start="09:00", quiet_hours_end="18:00")
    capped = AlertSetting(TriggerType.WEATHER)
    
    assert guard.evaluate(disabled, None, NOW).reason is AlertReason.DISABLED
    assert guard.evaluate(quiet, None, NOW).reason is AlertReason.QUIET_HOURS
    assert guard.evaluate(capped, None, NOW).reason is AlertReason.DAILY_CAP
    
    duplicate = make_guard([sent(TriggerType.WEATHER)]).evaluate(capped, None, NOW)
    assert duplicate.reason is AlertReason.DUPLICATE
    assert not duplicate.allowed


def test_evaluate_reads_quiet_hours_in_local_time() -> None:
    """23:30 Seoul time is quiet even though it is mid-afternoon UTC."""
    late_evening = datetime(2026, 3, 9, 14, 30, tzinfo=timezone.utc)
    
    decision = make_guard().evaluate(AlertSetting(TriggerType.WEATHER), None, late_evening)
    
    assert decision.reason is AlertReason.QUIET_HOURS


def test_next_daily_count_resets_on_new_day() -> None:
    """The counter restarts after local midnight."""
    today = AlertSetting(TriggerType.WEATHER, daily_count=2, last_triggered_at=NOW - timedelta(hours=1))
    yesterday = AlertSetting(TriggerType.WEATHER, daily_count=2, last_triggered_at=NOW - timedelta(hours=13))
    
    assert next_daily_count(today, NOW) == 3
    assert next_daily_count(yesterday, NOW) == 1
    assert next_daily_count(AlertSetting(TriggerType.WEATHER), NOW) == 1
