"""Data access layer for rules, flags and generated artifacts"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from finwell_gateway.infrastructure.database.models import (
    HealthFlagRecord,
    HealthRuleRecord,
    InsightFeedbackRecord,
    InsightRecord,
    SmartWinRecord,
)
from finwell_gateway.domain.models import HealthFlag, HealthRule, Insight, SmartWin
from finwell_gateway.utils.date_utils import ensure_utc


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_utc(value) if value is not None else None


class RuleRepository:
    """Repository for the health rule catalog"""

    def __init__(self, db: Session):
        self.db = db

    def list_active(self) -> List[HealthRule]:
        records = (
            self.db.query(HealthRuleRecord)
            .filter(HealthRuleRecord.is_active.is_(True))
            .order_by(HealthRuleRecord.rule_id)
            .all()
        )
        return [
            HealthRule(
                rule_id=r.rule_id,
                category=r.rule_category,
                condition_logic=r.condition_logic or {},
                thresholds=r.threshold_values or {},
                severity=r.severity_level,
                recommended_actions=r.recommended_actions or [],
                name=r.rule_name or "",
                description=r.rule_description or "",
                auto_resolve=bool(r.auto_resolve),
            )
            for r in records
        ]

    def add(self, rule: HealthRule) -> None:
        self.db.merge(
            HealthRuleRecord(
                rule_id=rule.rule_id,
                rule_name=rule.name,
                rule_category=rule.category,
                rule_description=rule.description,
                condition_logic=rule.condition_logic,
                threshold_values=rule.thresholds,
                severity_level=rule.severity,
                recommended_actions=rule.recommended_actions,
                auto_resolve=rule.auto_resolve,
                is_active=True,
            )
        )
        self.db.flush()


class FlagRepository:
    """Repository for user health flags"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_domain(r: HealthFlagRecord) -> HealthFlag:
        return HealthFlag(
            flag_id=r.flag_id,
            rule_id=r.rule_id,
            status=r.flag_status,
            trigger_data=r.trigger_data or {},
            first_triggered_at=ensure_utc(r.first_triggered_at),
            last_evaluated_at=ensure_utc(r.last_evaluated_at),
            resolved_at=_utc(r.resolved_at),
        )

    def list_active(self, user_id: str) -> List[HealthFlag]:
        records = (
            self.db.query(HealthFlagRecord)
            .filter(HealthFlagRecord.user_id == user_id, HealthFlagRecord.flag_status == "active")
            .order_by(HealthFlagRecord.first_triggered_at)
            .all()
        )
        return [self._to_domain(r) for r in records]

    def upsert(self, user_id: str, flags: List[HealthFlag]) -> None:
        """Insert new flags and overwrite existing ones by flag_id"""
        for flag in flags:
            self.db.merge(
                HealthFlagRecord(
                    flag_id=flag.flag_id,
                    user_id=user_id,
                    rule_id=flag.rule_id,
                    flag_status=flag.status,
                    trigger_data=flag.trigger_data,
                    first_triggered_at=flag.first_triggered_at,
                    last_evaluated_at=flag.last_evaluated_at,
                    resolved_at=flag.resolved_at,
                )
            )
        self.db.flush()

    def resolve(self, user_id: str, flag_id: str, now: datetime) -> bool:
        """Mark an active flag resolved; False when no such active flag exists"""
        updated = (
            self.db.query(HealthFlagRecord)
            .filter(
                HealthFlagRecord.flag_id == flag_id,
                HealthFlagRecord.user_id == user_id,
                HealthFlagRecord.flag_status == "active",
            )
            .update({"flag_status": "resolved", "resolved_at": now, "last_evaluated_at": now})
        )
        return updated > 0


class InsightRepository:
    """Repository for financial insights"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _to_domain(r: InsightRecord) -> Insight:
        return Insight(
            insight_id=r.insight_id,
            type=r.insight_type,
            title=r.title,
            description=r.description,
            confidence_score=r.confidence_score,
            priority_level=r.priority_level,
            action_items=r.action_items or [],
            dismissed=r.is_dismissed,
            expires_at=_utc(r.expires_at),
            created_at=_utc(r.created_at),
            source=r.source,
        )

    def list_current(self, user_id: str, now: datetime) -> List[Insight]:
        """Undismissed, unexpired insights, newest first"""
        records = (
            self.db.query(InsightRecord)
            .filter(
                InsightRecord.user_id == user_id,
                InsightRecord.is_dismissed.is_(False),
                or_(InsightRecord.expires_at.is_(None), InsightRecord.expires_at > now),
            )
            .order_by(InsightRecord.created_at.desc())
            .all()
        )
        return [self._to_domain(r) for r in records]

    def latest_created_at(self, user_id: str) -> Optional[datetime]:
        record = (
            self.db.query(InsightRecord)
            .filter(InsightRecord.user_id == user_id)
            .order_by(InsightRecord.created_at.desc())
            .first()
        )
        return _utc(record.created_at) if record else None

    def replace_batch(self, user_id: str, insights: List[Insight], now: datetime) -> None:
        """Expire the current batch, then insert the new one"""
        (
            self.db.query(InsightRecord)
            .filter(InsightRecord.user_id == user_id, InsightRecord.expires_at.is_(None))
            .update({"expires_at": now})
        )
        for insight in insights:
            self.db.merge(
                InsightRecord(
                    insight_id=insight.insight_id,
                    user_id=user_id,
                    insight_type=insight.type,
                    title=insight.title,
                    description=insight.description,
                    confidence_score=insight.confidence_score,
                    priority_level=insight.priority_level,
                    action_items=insight.action_items,
                    source=insight.source,
                    is_dismissed=insight.dismissed,
                    expires_at=insight.expires_at,
                    created_at=insight.created_at or now,
                )
            )
        self.db.flush()

    def dismiss(self, user_id: str, insight_id: str) -> bool:
        updated = (
            self.db.query(InsightRecord)
            .filter(InsightRecord.insight_id == insight_id, InsightRecord.user_id == user_id)
            .update({"is_dismissed": True})
        )
        return updated > 0


class SmartWinRepository:
    """Repository for smart win batches"""

    def __init__(self, db: Session):
        self.db = db

    def current_batch(self, user_id: str) -> List[SmartWin]:
        records = (
            self.db.query(SmartWinRecord)
            .filter(SmartWinRecord.user_id == user_id, SmartWinRecord.expires_at.is_(None))
            .order_by(SmartWinRecord.created_at.desc())
            .all()
        )
        return [
            SmartWin(
                id=r.id,
                title=r.title,
                description=r.description,
                type=r.type,
                impact=r.impact,
                actionable=r.actionable,
                created_at=ensure_utc(r.created_at),
                action_text=r.action_text,
            )
            for r in records
        ]

    def replace_batch(self, user_id: str, wins: List[SmartWin], now: datetime) -> None:
        """Expire the current batch, then insert the new one"""
        (
            self.db.query(SmartWinRecord)
            .filter(SmartWinRecord.user_id == user_id, SmartWinRecord.expires_at.is_(None))
            .update({"expires_at": now})
        )
        for win in wins:
            self.db.merge(
                SmartWinRecord(
                    id=win.id,
                    user_id=user_id,
                    title=win.title,
                    description=win.description,
                    type=win.type,
                    impact=win.impact,
                    actionable=win.actionable,
                    action_text=win.action_text,
                    created_at=win.created_at,
                    expires_at=None,
                )
            )
        self.db.flush()


class FeedbackRepository:
    """Repository for insight feedback"""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: str,
        insight_id: str,
        feedback_type: str,
        rating: Optional[int],
        feedback_text: Optional[str],
    ) -> InsightFeedbackRecord:
        record = InsightFeedbackRecord(
            user_id=user_id,
            insight_id=insight_id,
            feedback_type=feedback_type,
            rating=rating,
            feedback_text=feedback_text,
            was_acted_upon=feedback_type == "helpful",
        )
        self.db.add(record)
        self.db.flush()
        return record
