"""Generation fallback chain - ordered strategies, first success wins"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar
from finwell_gateway.domain.exceptions import MalformedRemoteResponse
from finwell_gateway.infrastructure.observability.metrics import remote_failure_counter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Strategy(Generic[T]):
    """Named generation attempt; timeout bounds remote strategies"""

    name: str
    run: Callable[[], Awaitable[T]]
    timeout: Optional[float] = None


@dataclass
class Generated(Generic[T]):
    value: T
    source: str


def _failure_reason(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "timeout"
    if isinstance(error, MalformedRemoteResponse):
        return "malformed"
    return "error"


async def first_success(strategies: Sequence[Strategy[T]], default: T, artifact: str) -> Generated[T]:
    """
    Run strategies in order and return the first result.

    A strategy fails by raising (RemoteGenerationFailed, MalformedRemoteResponse,
    a timeout or anything else); the failure is logged and counted and the
    next strategy runs. When every strategy fails the default is returned
    with source "default". Never raises.
    """
    for strategy in strategies:
        try:
            if strategy.timeout is not None:
                value = await asyncio.wait_for(strategy.run(), timeout=strategy.timeout)
            else:
                value = await strategy.run()
            return Generated(value=value, source=strategy.name)
        except Exception as e:
            remote_failure_counter.labels(artifact=artifact, reason=_failure_reason(e)).inc()
            logger.warning(
                f"Generation strategy failed: {e!r}",
                extra={"artifact": artifact, "strategy": strategy.name},
            )
    return Generated(value=default, source="default")


def strategies_for(
    remote: Optional[Callable[[], Awaitable[T]]],
    local: Callable[[], Awaitable[T]],
    remote_timeout: float,
) -> List[Strategy[T]]:
    """Remote first when provisioned, then local"""
    chain: List[Strategy[T]] = []
    if remote is not None:
        chain.append(Strategy("remote", remote, timeout=remote_timeout))
    chain.append(Strategy("local", local))
    return chain
