"""Snapshot aggregation - fetch one user's collections concurrently"""

import asyncio
import logging
from datetime import datetime
from typing import List, Protocol
from finwell_gateway.domain.models import Account, Goal, Snapshot, Transaction
from finwell_gateway.infrastructure.observability.metrics import snapshot_source_failures_counter
from finwell_gateway.utils.date_utils import utc_now

logger = logging.getLogger(__name__)


class SnapshotSource(Protocol):
    async def get_accounts(self, user_id: str) -> List[Account]: ...

    async def get_goals(self, user_id: str) -> List[Goal]: ...

    async def get_transactions(self, user_id: str) -> List[Transaction]: ...


def _or_empty(collection: str, user_id: str, result) -> list:
    """A failed fetch counts as an empty collection, never an error"""
    if isinstance(result, BaseException):
        snapshot_source_failures_counter.labels(collection=collection).inc()
        logger.warning(
            f"Snapshot source unavailable: {result}",
            extra={"user_id": user_id, "collection": collection},
        )
        return []
    return list(result)


async def build_snapshot(
    source: SnapshotSource,
    user_id: str,
    now: datetime | None = None,
    history_months: int = 3,
) -> Snapshot:
    """
    Read accounts, goals and transactions as of call time.

    The three fetches run concurrently. DataUnavailableError (or any other
    failure) from one source leaves the others unaffected.
    """
    accounts, goals, transactions = await asyncio.gather(
        source.get_accounts(user_id),
        source.get_goals(user_id),
        source.get_transactions(user_id),
        return_exceptions=True,
    )
    return Snapshot(
        user_id=user_id,
        accounts=_or_empty("accounts", user_id, accounts),
        goals=_or_empty("goals", user_id, goals),
        transactions=_or_empty("transactions", user_id, transactions),
        taken_at=now or utc_now(),
        history_months=history_months,
    )
