"""Core interfaces for collaborators.

Adapters raise `UpstreamUnavailable` when a read fails; the services decide
whether that degrades to a neutral value or blocks the action.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional

from briefing_curator.core.entities import (
    AlertLogEntry,
    AlertSetting,
    ContentItem,
    FatigueState,
    InterestProfileEntry,
    ProfileDelta,
    ReactionEvent,
    TriggerType,
)


class ProfileStore(ABC):
    """Interface for the interest profile."""
    
    @abstractmethod
    def load_profile(self) -> dict[str, InterestProfileEntry]:
        """Load the full profile keyed by topic, archived entries included."""
        pass
    
    @abstractmethod
    def apply_deltas(self, deltas: list[ProfileDelta]) -> None:
        """Persist profile deltas (last write wins per topic)."""
        pass


class ReactionLog(ABC):
    """Interface for the reaction event stream."""
    
    @abstractmethod
    def list_reactions_since(self, since: datetime) -> list[ReactionEvent]:
        """Reactions that occurred at or after `since`."""
        pass
    
    @abstractmethod
    def record_reaction(self, event: ReactionEvent) -> None:
        pass


class BriefingHistory(ABC):
    """Interface for previously delivered briefings."""
    
    @abstractmethod
    def recent_selections(self, before: date, days: int) -> list[list[ContentItem]]:
        """Selected item sets of the `days` briefings before `before`, most recent first."""
        pass
    
    @abstractmethod
    def record_selection(self, briefing_date: date, items: list[ContentItem]) -> None:
        pass


class SettingsStore(ABC):
    """Interface for fatigue state and alert settings."""
    
    @abstractmethod
    def load_fatigue_state(self) -> FatigueState:
        pass
    
    @abstractmethod
    def save_fatigue_state(self, state: FatigueState) -> None:
        pass
    
    @abstractmethod
    def load_alert_setting(self, trigger_type: TriggerType) -> Optional[AlertSetting]:
        pass
    
    @abstractmethod
    def save_alert_setting(self, setting: AlertSetting) -> None:
        pass


class AlertLog(ABC):
    """Interface for the log of sent real-time alerts."""
    
    @abstractmethod
    def list_alerts_since(self, since: datetime) -> list[AlertLogEntry]:
        """Alerts sent at or after `since`."""
        pass
    
    @abstractmethod
    def record_alert(self, entry: AlertLogEntry) -> None:
        pass
