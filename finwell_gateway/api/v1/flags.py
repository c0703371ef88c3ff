"""Health flag endpoints - evaluate and resolve"""

from dataclasses import asdict
from fastapi import APIRouter, Depends, Query

from finwell_gateway.api.v1.schemas import FlagSchema, FlagsResponse, TransitionResponse
from finwell_gateway.api.dependencies import get_insight_engine
from finwell_gateway.services.insight_engine import InsightEngine

router = APIRouter()


@router.get("/flags", response_model=FlagsResponse)
async def get_flags(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    engine: InsightEngine = Depends(get_insight_engine),
):
    """
    Evaluate the rule catalog against a fresh snapshot.

    Returns:
        Active flags only; empty when no catalog is available
    """
    flags = await engine.flags(user_id)
    return FlagsResponse(user_id=user_id, flags=[FlagSchema(**asdict(f)) for f in flags])


@router.post("/flags/{flag_id}/resolve", response_model=TransitionResponse)
async def resolve_flag(
    flag_id: str,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    engine: InsightEngine = Depends(get_insight_engine),
):
    result = await engine.resolve_flag(user_id, flag_id)
    return TransitionResponse(**asdict(result))
