"""Insight endpoints - list, dismiss and feedback"""

from dataclasses import asdict
from typing import Optional
from fastapi import APIRouter, Depends, Query

from finwell_gateway.api.v1.schemas import (
    FeedbackRequest,
    FeedbackResponse,
    InsightSchema,
    InsightsResponse,
    TransitionResponse,
)
from finwell_gateway.api.dependencies import get_insight_engine
from finwell_gateway.services.insight_engine import InsightEngine

router = APIRouter()


@router.get("/insights", response_model=InsightsResponse)
async def get_insights(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    force: bool = Query(False, description="Regenerate even when the current batch is fresh"),
    priority: Optional[str] = Query(None, description="Only insights with this priority level"),
    insight_type: Optional[str] = Query(None, description="Only insights of this type"),
    limit: int = Query(20, ge=1, le=100),
    engine: InsightEngine = Depends(get_insight_engine),
):
    """Current, undismissed insights, regenerated when stale"""
    batch = await engine.insights(user_id, force=force)

    items = [i for i in batch.items if not i.dismissed]
    if priority:
        items = [i for i in items if i.priority_level == priority]
    if insight_type:
        items = [i for i in items if i.type == insight_type]

    return InsightsResponse(
        user_id=user_id,
        source=batch.source,
        persisted=batch.persisted,
        insights=[InsightSchema(**asdict(i)) for i in items[:limit]],
    )


@router.post("/insights/{insight_id}/dismiss", response_model=TransitionResponse)
async def dismiss_insight(
    insight_id: str,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    engine: InsightEngine = Depends(get_insight_engine),
):
    """Soft-delete an insight; always applied to the session even if the store is down"""
    result = await engine.dismiss_insight(user_id, insight_id)
    return TransitionResponse(**asdict(result))


@router.post("/insights/{insight_id}/feedback", response_model=FeedbackResponse)
async def record_feedback(
    insight_id: str,
    body: FeedbackRequest,
    engine: InsightEngine = Depends(get_insight_engine),
):
    recorded = await engine.record_feedback(
        body.user_id, insight_id, body.feedback_type, body.rating, body.feedback_text
    )
    return FeedbackResponse(insight_id=insight_id, recorded=recorded)
