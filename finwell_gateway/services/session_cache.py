"""Per-user session cache for artifacts that could not be (or were not) persisted"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set
from finwell_gateway.domain.models import HealthFlag, Insight, SmartWin


@dataclass
class UserArtifacts:
    smart_wins: List[SmartWin] = field(default_factory=list)
    smart_wins_at: Optional[datetime] = None
    insights: List[Insight] = field(default_factory=list)
    insights_at: Optional[datetime] = None
    flags: Dict[str, HealthFlag] = field(default_factory=dict)  # by flag_id
    # Local transitions, applied on top of whatever the store returns
    dismissed_insight_ids: Set[str] = field(default_factory=set)
    resolved_flag_ids: Set[str] = field(default_factory=set)


class SessionCache:
    """
    Artifacts keyed by user, shared by reference with the engine.

    Entries are replaced only after a staleness decision; request or UI
    lifecycle never clears them.
    """

    def __init__(self) -> None:
        self._users: Dict[str, UserArtifacts] = {}

    def for_user(self, user_id: str) -> UserArtifacts:
        return self._users.setdefault(user_id, UserArtifacts())

    def put_smart_wins(self, user_id: str, wins: List[SmartWin], created_at: datetime) -> None:
        entry = self.for_user(user_id)
        entry.smart_wins = list(wins)
        entry.smart_wins_at = created_at

    def put_insights(self, user_id: str, insights: List[Insight], created_at: datetime) -> None:
        entry = self.for_user(user_id)
        entry.insights = list(insights)
        entry.insights_at = created_at

    def put_flags(self, user_id: str, flags: List[HealthFlag]) -> None:
        entry = self.for_user(user_id)
        for flag in flags:
            entry.flags[flag.flag_id] = flag

    def active_flags(self, user_id: str) -> List[HealthFlag]:
        entry = self.for_user(user_id)
        return [f for f in entry.flags.values() if f.is_active and f.flag_id not in entry.resolved_flag_ids]

    def current_insights(self, user_id: str) -> List[Insight]:
        entry = self.for_user(user_id)
        return [i for i in entry.insights if not i.dismissed and i.insight_id not in entry.dismissed_insight_ids]

    def invalidate(self, user_id: str, artifact: str) -> None:
        entry = self.for_user(user_id)
        if artifact == "smart_wins":
            entry.smart_wins, entry.smart_wins_at = [], None
        elif artifact == "insights":
            entry.insights, entry.insights_at = [], None

    def clear(self) -> None:
        self._users.clear()
