"""YAML-file state store for local runs."""

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from briefing_curator.core import (
    AlertLog,
    AlertLogEntry,
    AlertSetting,
    BriefingHistory,
    Category,
    ContentItem,
    FatigueState,
    InterestProfileEntry,
    ProfileDelta,
    ProfileStore,
    ReactionEvent,
    ReactionLog,
    ReactionType,
    SettingsStore,
    Tags,
    TriggerType,
    UpstreamUnavailable,
)
from briefing_curator.core.profile import apply_deltas

logger = logging.getLogger(__name__)


def _dt(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a stored timestamp; values without an offset are read as UTC."""
    if not value:
        return None
    # Unquoted YAML timestamps already load as datetimes.
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def item_to_dict(item: ContentItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "category": item.category.value,
        "title": item.title,
        "tags": item.tags.to_raw(),
        "initial_score": item.initial_score,
        "published_at": _iso(item.published_at),
        "score": item.score,
        "extended_summary": item.extended_summary,
        "why_important": item.why_important,
    }


def item_from_dict(data: dict[str, Any]) -> ContentItem:
    """Build an item from its stored form; a missing `tags` key means unknown."""
    return ContentItem(
        id=str(data["id"]),
        category=Category(data["category"]),
        title=data["title"],
        tags=Tags.from_raw(data.get("tags")),
        initial_score=float(data.get("initial_score", 0.5)),
        published_at=_dt(data.get("published_at")),
        score=data.get("score"),
        extended_summary=data.get("extended_summary"),
        why_important=data.get("why_important"),
    )


def load_candidates(path: Path) -> list[ContentItem]:
    """Load a candidate pool (a YAML list of items, or `{items: [...]}`)."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("items", [])
    return [item_from_dict(entry) for entry in data]


class YamlStateStore(ProfileStore, ReactionLog, BriefingHistory, SettingsStore, AlertLog):
    """Keep all curator state as YAML documents under one directory.

    Layout:
        profile.yaml      interest profile
        reactions.yaml    reaction events
        alert_log.yaml    sent alerts
        settings.yaml     fatigue state and alert settings
        history/          one file per briefing date
    """

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = storage_dir
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        (self.storage_dir / "history").mkdir(parents=True, exist_ok=True)

    def _read(self, name: str, default: Any) -> Any:
        path = self.storage_dir / name
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise UpstreamUnavailable(name, str(e)) from e
        return default if data is None else data

    def _write(self, name: str, data: Any) -> None:
        path = self.storage_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        logger.debug("Wrote %s", path)

    # Profile

    def load_profile(self) -> dict[str, InterestProfileEntry]:
        rows = self._read("profile.yaml", [])
        return {
            row["topic"]: InterestProfileEntry(
                topic=row["topic"],
                score=float(row["score"]),
                interaction_count=int(row.get("interaction_count", 0)),
                last_updated=_dt(row["last_updated"]),
                archived_at=_dt(row.get("archived_at")),
            )
            for row in rows
        }

    def save_profile(self, entries: dict[str, InterestProfileEntry]) -> None:
        self._write("profile.yaml", [
            {
                "topic": entry.topic,
                "score": entry.score,
                "interaction_count": entry.interaction_count,
                "last_updated": _iso(entry.last_updated),
                "archived_at": _iso(entry.archived_at),
            }
            for entry in entries.values()
        ])

    def apply_deltas(self, deltas: list[ProfileDelta]) -> None:
        self.save_profile(apply_deltas(self.load_profile(), deltas))

    # Reactions

    def list_reactions_since(self, since: datetime) -> list[ReactionEvent]:
        events = [
            ReactionEvent(
                content_id=row["content_id"],
                reaction_type=ReactionType(row["reaction_type"]),
                topics=tuple(row.get("topics", [])),
                occurred_at=_dt(row["occurred_at"]),
            )
            for row in self._read("reactions.yaml", [])
        ]
        return [event for event in events if event.occurred_at >= since]

    def record_reaction(self, event: ReactionEvent) -> None:
        rows = self._read("reactions.yaml", [])
        rows.append({
            "content_id": event.content_id,
            "reaction_type": event.reaction_type.value,
            "topics": list(event.topics),
            "occurred_at": _iso(event.occurred_at),
        })
        self._write("reactions.yaml", rows)

    # History

    def _history_files(self) -> list[tuple[date, Path]]:
        dated = []
        for path in (self.storage_dir / "history").glob("*.yaml"):
            try:
                dated.append((date.fromisoformat(path.stem), path))
            except ValueError:
                logger.warning("Ignoring history file without a date name: %s", path.name)
        return sorted(dated)

    def recent_selections(self, before: date, days: int) -> list[list[ContentItem]]:
        dated = self._history_files()
        selections = []
        for briefing_date, path in reversed(dated):
            if briefing_date >= before:
                continue
            if len(selections) >= days:
                break
            name = str(path.relative_to(self.storage_dir))
            try:
                selections.append([item_from_dict(row) for row in self._read(name, [])])
            except (KeyError, TypeError, ValueError) as e:
                raise UpstreamUnavailable(name, f"malformed entry: {e}") from e
        return selections

    def record_selection(self, briefing_date: date, items: list[ContentItem]) -> None:
        self._write(f"history/{briefing_date.isoformat()}.yaml", [item_to_dict(item) for item in items])

    # Settings

    def load_fatigue_state(self) -> FatigueState:
        data = self._read("settings.yaml", {}).get("fatigue", {})
        return FatigueState(
            item_reduction=int(data.get("item_reduction", 0)),
            channel_enabled={
                Category(name): bool(enabled)
                for name, enabled in data.get("channel_enabled", {}).items()
            },
            mute_until=_dt(data.get("mute_until")),
        )

    def save_fatigue_state(self, state: FatigueState) -> None:
        settings = self._read("settings.yaml", {})
        settings["fatigue"] = {
            "item_reduction": state.item_reduction,
            "channel_enabled": {c.value: enabled for c, enabled in state.channel_enabled.items()},
            "mute_until": _iso(state.mute_until),
        }
        self._write("settings.yaml", settings)

    def load_alert_setting(self, trigger_type: TriggerType) -> Optional[AlertSetting]:
        data = self._read("settings.yaml", {}).get("alerts", {}).get(trigger_type.value)
        if data is None:
            return None
        return AlertSetting(
            trigger_type=trigger_type,
            is_enabled=bool(data.get("is_enabled", True)),
            quiet_hours_start=data.get("quiet_hours_start", "23:00"),
            quiet_hours_end=data.get("quiet_hours_end", "07:00"),
            daily_count=int(data.get("daily_count", 0)),
            last_triggered_at=_dt(data.get("last_triggered_at")),
        )

    def save_alert_setting(self, setting: AlertSetting) -> None:
        settings = self._read("settings.yaml", {})
        settings.setdefault("alerts", {})[setting.trigger_type.value] = {
            "is_enabled": setting.is_enabled,
            "quiet_hours_start": setting.quiet_hours_start,
            "quiet_hours_end": setting.quiet_hours_end,
            "daily_count": setting.daily_count,
            "last_triggered_at": _iso(setting.last_triggered_at),
        }
        self._write("settings.yaml", settings)

    # Alert log

    def list_alerts_since(self, since: datetime) -> list[AlertLogEntry]:
        entries = [
            AlertLogEntry(
                trigger_type=TriggerType(row["trigger_type"]),
                content_id=row.get("content_id"),
                sent_at=_dt(row["sent_at"]),
            )
            for row in self._read("alert_log.yaml", [])
        ]
        return [entry for entry in entries if entry.sent_at >= since]

    def record_alert(self, entry: AlertLogEntry) -> None:
        rows = self._read("alert_log.yaml", [])
        rows.append({
            "trigger_type": entry.trigger_type.value,
            "content_id": entry.content_id,
            "sent_at": _iso(entry.sent_at),
        })
        self._write("alert_log.yaml", rows)
