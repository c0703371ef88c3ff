"""Unit tests for the generation fallback chain"""

import asyncio
from finwell_gateway.domain.exceptions import MalformedRemoteResponse, RemoteGenerationFailed
from finwell_gateway.services.fallback import Strategy, first_success, strategies_for


async def ok(value):
    return value


def fails(error):
    async def _run():
        raise error
    return _run


async def test_first_strategy_wins():
    result = await first_success(
        [Strategy("remote", lambda: ok(["remote"])), Strategy("local", lambda: ok(["local"]))],
        default=[],
        artifact="insights",
    )
    assert result.value == ["remote"]
    assert result.source == "remote"


async def test_falls_through_failures():
    result = await first_success(
        [
            Strategy("remote", fails(RemoteGenerationFailed("503"))),
            Strategy("backup", fails(MalformedRemoteResponse("no list"))),
            Strategy("local", lambda: ok(["local"])),
        ],
        default=[],
        artifact="insights",
    )
    assert result.source == "local"
    assert result.value == ["local"]


async def test_all_failures_return_default():
    result = await first_success(
        [Strategy("remote", fails(RemoteGenerationFailed("down"))), Strategy("local", fails(ValueError("bad")))],
        default=["tip"],
        artifact="smart_wins",
    )
    assert result.source == "default"
    assert result.value == ["tip"]


async def test_empty_chain_returns_default():
    result = await first_success([], default=[], artifact="insights")
    assert result.source == "default"


async def test_timeout_moves_to_next_strategy():
    async def slow():
        await asyncio.sleep(5)
        return ["late"]

    result = await first_success(
        [Strategy("remote", slow, timeout=0.01), Strategy("local", lambda: ok(["local"]))],
        default=[],
        artifact="insights",
    )
    assert result.source == "local"


def test_strategies_for_without_remote():
    chain = strategies_for(None, lambda: ok([]), remote_timeout=15)
    assert [s.name for s in chain] == ["local"]
    assert chain[0].timeout is None


def test_strategies_for_with_remote():
    chain = strategies_for(lambda: ok([]), lambda: ok([]), remote_timeout=15)
    assert [s.name for s in chain] == ["remote", "local"]
    assert chain[0].timeout == 15
