"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional


class HealthMetricSchema(BaseModel):
    """One weighted sub-score"""

    name: str
    score: int = Field(..., ge=0, le=100)
    status: Literal["poor", "fair", "good", "excellent"]
    description: str
    recommendation: str
    weight: float


class HealthResponse(BaseModel):
    """Response for GET /v1/health-score"""

    user_id: str
    composite_score: int = Field(..., ge=0, le=100)
    metrics: List[HealthMetricSchema]


class SmartWinSchema(BaseModel):
    """Single smart win"""

    id: str
    title: str
    description: str
    type: Literal["savings", "spending", "investment", "goal", "opportunity"]
    impact: Optional[int] = None
    actionable: bool
    action_text: Optional[str] = None
    created_at: datetime
    expires_at: Optional[datetime] = None


class SmartWinsResponse(BaseModel):
    """Response for GET /v1/smart-wins"""

    user_id: str
    source: str
    persisted: bool
    smart_wins: List[SmartWinSchema]


class InsightSchema(BaseModel):
    """Single financial insight"""

    insight_id: str
    type: str
    title: str
    description: str
    confidence_score: float = Field(..., ge=0, le=1)
    priority_level: str
    action_items: List[Dict[str, Any]]
    dismissed: bool
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    source: str


class InsightsResponse(BaseModel):
    """Response for GET /v1/insights"""

    user_id: str
    source: str
    persisted: bool
    insights: List[InsightSchema]


class FlagSchema(BaseModel):
    """Single health flag"""

    flag_id: str
    rule_id: str
    status: Literal["active", "resolved"]
    trigger_data: Dict[str, Any]
    first_triggered_at: datetime
    last_evaluated_at: datetime
    resolved_at: Optional[datetime] = None


class FlagsResponse(BaseModel):
    """Response for GET /v1/flags"""

    user_id: str
    flags: List[FlagSchema]


class TransitionResponse(BaseModel):
    """Response for dismiss / resolve"""

    id: str
    applied_locally: bool
    persisted: bool


class FeedbackRequest(BaseModel):
    """Request body for POST /v1/insights/{insight_id}/feedback"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    feedback_type: str = Field(..., min_length=1, description="e.g. helpful, not_helpful")
    rating: Optional[int] = Field(None, ge=1, le=5)
    feedback_text: Optional[str] = None


class FeedbackResponse(BaseModel):
    """Response for POST /v1/insights/{insight_id}/feedback"""

    insight_id: str
    recorded: bool
