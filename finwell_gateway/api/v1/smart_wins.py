"""GET /v1/smart-wins - Ranked opportunity recommendations"""

from dataclasses import asdict
from fastapi import APIRouter, Depends, Query

from finwell_gateway.api.v1.schemas import SmartWinSchema, SmartWinsResponse
from finwell_gateway.api.dependencies import get_insight_engine
from finwell_gateway.services.insight_engine import InsightEngine

router = APIRouter()


@router.get("/smart-wins", response_model=SmartWinsResponse)
async def get_smart_wins(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    force: bool = Query(False, description="Regenerate even when the current batch is fresh"),
    engine: InsightEngine = Depends(get_insight_engine),
):
    """
    Return the current smart wins batch, regenerating it when stale.

    Flow:
    1. Reuse the stored (or session) batch while the staleness policy allows
    2. Otherwise try remote generation, then local heuristics
    3. Persist the new batch, falling back to session memory
    """
    batch = await engine.smart_wins(user_id, force=force)
    return SmartWinsResponse(
        user_id=user_id,
        source=batch.source,
        persisted=batch.persisted,
        smart_wins=[SmartWinSchema(**asdict(w)) for w in batch.items],
    )
