"""SQLAlchemy ORM models for rules, flags and generated artifacts"""

from sqlalchemy import Column, String, Boolean, Float, DateTime, Integer, Text, JSON, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class HealthRuleRecord(Base):
    """Rule catalog entry"""

    __tablename__ = "financial_health_rules"

    rule_id = Column(String(64), primary_key=True)
    rule_name = Column(Text, nullable=False, default="")
    rule_category = Column(Text, nullable=False)
    rule_description = Column(Text, nullable=False, default="")
    condition_logic = Column(JSON, nullable=False)
    threshold_values = Column(JSON, nullable=True)
    severity_level = Column(Text, nullable=False, default="medium")
    recommended_actions = Column(JSON, nullable=True)
    auto_resolve = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class HealthFlagRecord(Base):
    """Per-user rule trigger state"""

    __tablename__ = "user_health_flags"
    __table_args__ = (Index("ix_user_health_flags_user_rule", "user_id", "rule_id"),)

    flag_id = Column(String(64), primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    rule_id = Column(String(64), nullable=False)
    flag_status = Column(Text, nullable=False, default="active")
    trigger_data = Column(JSON, nullable=True)
    first_triggered_at = Column(DateTime(timezone=True), nullable=False)
    last_evaluated_at = Column(DateTime(timezone=True), nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=True)


class InsightRecord(Base):
    """Generated financial insight"""

    __tablename__ = "financial_insights"

    insight_id = Column(String(64), primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    insight_type = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    confidence_score = Column(Float, nullable=False, default=0.8)
    priority_level = Column(Text, nullable=False, default="medium")
    action_items = Column(JSON, nullable=True)
    source = Column(Text, nullable=False, default="local")
    is_dismissed = Column(Boolean, nullable=False, default=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class SmartWinRecord(Base):
    """Smart win batch member; a batch is current while expires_at is null"""

    __tablename__ = "smart_wins"

    id = Column(String(64), primary_key=True)
    user_id = Column(Text, nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    impact = Column(Integer, nullable=True)
    actionable = Column(Boolean, nullable=False, default=True)
    action_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)


class InsightFeedbackRecord(Base):
    """User feedback on an insight"""

    __tablename__ = "ai_insight_feedback"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Text, nullable=False, index=True)
    insight_id = Column(String(64), nullable=False)
    feedback_type = Column(Text, nullable=False)
    rating = Column(Integer, nullable=True)
    feedback_text = Column(Text, nullable=True)
    was_acted_upon = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


ARTIFACT_TABLES = [
    HealthRuleRecord.__tablename__,
    HealthFlagRecord.__tablename__,
    InsightRecord.__tablename__,
    SmartWinRecord.__tablename__,
]
