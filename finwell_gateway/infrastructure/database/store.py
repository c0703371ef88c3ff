"""Transactional artifact store used by the insight engine"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from finwell_gateway.domain.exceptions import PersistenceUnavailable
from finwell_gateway.domain.models import HealthFlag, HealthRule, Insight, SmartWin
from finwell_gateway.infrastructure.database.repositories import (
    FeedbackRepository,
    FlagRepository,
    InsightRepository,
    RuleRepository,
    SmartWinRepository,
)

logger = logging.getLogger(__name__)


class ArtifactStore:
    """
    Unit-of-work wrapper over the repositories.

    Every write commits on success and rolls back on failure. Any
    SQLAlchemy error surfaces as PersistenceUnavailable.
    """

    def __init__(self, db: Session):
        self.db = db
        self.rules = RuleRepository(db)
        self.flags = FlagRepository(db)
        self.insights = InsightRepository(db)
        self.smart_wins = SmartWinRepository(db)
        self.feedback = FeedbackRepository(db)

    @contextmanager
    def _unit(self, operation: str, commit: bool = True) -> Iterator[None]:
        try:
            yield
            if commit:
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceUnavailable(f"{operation} failed: {e}") from e

    def list_rules(self) -> List[HealthRule]:
        with self._unit("list_rules", commit=False):
            return self.rules.list_active()

    def active_flags(self, user_id: str) -> List[HealthFlag]:
        with self._unit("active_flags", commit=False):
            return self.flags.list_active(user_id)

    def save_flags(self, user_id: str, flags: List[HealthFlag]) -> None:
        with self._unit("save_flags"):
            self.flags.upsert(user_id, flags)

    def resolve_flag(self, user_id: str, flag_id: str, now: datetime) -> bool:
        with self._unit("resolve_flag"):
            return self.flags.resolve(user_id, flag_id, now)

    def current_insights(self, user_id: str, now: datetime) -> List[Insight]:
        with self._unit("current_insights", commit=False):
            return self.insights.list_current(user_id, now)

    def insights_created_at(self, user_id: str) -> Optional[datetime]:
        with self._unit("insights_created_at", commit=False):
            return self.insights.latest_created_at(user_id)

    def save_insights(self, user_id: str, insights: List[Insight], now: datetime) -> None:
        with self._unit("save_insights"):
            self.insights.replace_batch(user_id, insights, now)

    def dismiss_insight(self, user_id: str, insight_id: str) -> bool:
        with self._unit("dismiss_insight"):
            return self.insights.dismiss(user_id, insight_id)

    def current_smart_wins(self, user_id: str) -> List[SmartWin]:
        with self._unit("current_smart_wins", commit=False):
            return self.smart_wins.current_batch(user_id)

    def save_smart_wins(self, user_id: str, wins: List[SmartWin], now: datetime) -> None:
        with self._unit("save_smart_wins"):
            self.smart_wins.replace_batch(user_id, wins, now)

    def record_feedback(
        self,
        user_id: str,
        insight_id: str,
        feedback_type: str,
        rating: Optional[int] = None,
        feedback_text: Optional[str] = None,
    ) -> None:
        with self._unit("record_feedback"):
            self.feedback.create(user_id, insight_id, feedback_type, rating, feedback_text)
