"""Unit tests for the aggregation and generation HTTP clients"""

import httpx
import pytest
from datetime import date
from finwell_gateway.domain.exceptions import DataUnavailableError, MalformedRemoteResponse, RemoteGenerationFailed
from finwell_gateway.infrastructure.clients.aggregator import AggregatorClient
from finwell_gateway.infrastructure.clients.generator import GeneratorClient
from finwell_gateway.utils.ids import sequential_ids


def transport(*responses):
    """Serve the given responses in order and record the requests"""
    queue = list(responses)
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        response = queue.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    mock = httpx.MockTransport(handler)
    mock.seen = seen
    return mock


def generator(mock, max_retries=2) -> GeneratorClient:
    client = GeneratorClient(base_url="http://gen.test", max_retries=max_retries, new_id=sequential_ids("gen"), transport=mock)
    client.backoff_base = 0
    return client


async def test_aggregator_parses_accounts():
    mock = transport(httpx.Response(200, json={"accounts": [
        {"id": "acc_1", "type": "depository", "subtype": "savings", "balance": "1500.50",
         "institution_name": "First Bank", "last_updated": "2026-10-01T10:00:00+00:00"},
    ]}))
    accounts = await AggregatorClient(base_url="http://agg.test", transport=mock).get_accounts("user_1")

    assert accounts[0].balance == 1500.5
    assert accounts[0].subtype == "savings"
    assert mock.seen[0].url.params["user_id"] == "user_1"
    assert mock.seen[0].url.path == "/accounts"


async def test_aggregator_parses_transactions_and_goals():
    client = AggregatorClient(base_url="http://agg.test", transport=transport(
        httpx.Response(200, json={"transactions": [
            {"id": 7, "account_id": "acc_1", "amount": -2500, "date": "2026-09-30", "category": "Payroll",
             "merchant_name": "Employer"},
        ]}),
        httpx.Response(200, json={"goals": [
            {"id": "g1", "name": "Emergency Fund", "target_amount": 10000, "saved_amount": 2500,
             "deadline": "2027-03-01", "category": "emergency"},
        ]}),
    ))

    transactions = await client.get_transactions("user_1")
    goals = await client.get_goals("user_1")

    assert transactions[0].id == "7"
    assert transactions[0].is_income
    assert transactions[0].category == ["Payroll"]
    assert transactions[0].name == "Employer"
    assert goals[0].deadline == date(2027, 3, 1)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, json={"accounts": [{"type": "depository"}]}),
        httpx.Response(200, text="not json"),
        httpx.ConnectError("refused"),
    ],
)
async def test_aggregator_failures_are_data_unavailable(response):
    client = AggregatorClient(base_url="http://agg.test", transport=transport(response))
    with pytest.raises(DataUnavailableError):
        await client.get_accounts("user_1")


async def test_generator_parses_smart_wins():
    mock = transport(httpx.Response(200, json={"smart_wins": [
        {"title": "Refinance", "description": "Lower your rate", "type": "savings", "impact": 812.6},
    ]}))
    wins = await generator(mock).generate_smart_wins("user_1", force=True)

    assert wins[0].id == "gen-1"
    assert wins[0].impact == 813
    assert mock.seen[0].url.path == "/generate-smart-wins"
    assert b'"forceGenerate":true' in mock.seen[0].content.replace(b" ", b"")


async def test_generator_accepts_bare_list():
    mock = transport(httpx.Response(200, json=[
        {"insight_id": "r1", "insight_type": "opportunity", "title": "Tip", "description": "Do it",
         "confidence_score": 1.7},
    ]))
    insights = await generator(mock).generate_insights("user_1")

    assert insights[0].insight_id == "r1"
    assert insights[0].confidence_score == 1.0
    assert insights[0].source == "remote"


async def test_generator_retries_server_errors():
    mock = transport(httpx.Response(503), httpx.Response(200, json={"insights": []}))
    assert await generator(mock).generate_insights("user_1") == []
    assert len(mock.seen) == 2


async def test_generator_gives_up_after_max_retries():
    mock = transport(httpx.Response(503), httpx.ConnectError("refused"))
    with pytest.raises(RemoteGenerationFailed):
        await generator(mock).generate_insights("user_1")
    assert len(mock.seen) == 2


async def test_generator_does_not_retry_client_errors():
    mock = transport(httpx.Response(400), httpx.Response(200, json={"insights": []}))
    with pytest.raises(RemoteGenerationFailed):
        await generator(mock).generate_insights("user_1")
    assert len(mock.seen) == 1


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json={"insights": "none"}),
        httpx.Response(200, json={"smart_wins": [{"title": "x", "description": "y", "type": "lottery"}]}),
        httpx.Response(200, json={"smart_wins": [{"title": None, "description": None, "type": "savings", "impact": 10}]}),
        httpx.Response(200, json={"insights": [{"title": "", "description": "y", "type": "opportunity"}]}),
        httpx.Response(200, json={"insights": [{"title": "x", "description": "y", "type": 3}]}),
        httpx.Response(200, json={"insights": [{"title": "x", "description": "y", "priority_level": ["high"]}]}),
        httpx.Response(200, json={"insights": [{"title": "x", "description": "y", "action_items": "do it"}]}),
    ],
)
async def test_generator_malformed_responses(response):
    client = generator(transport(response))
    with pytest.raises(MalformedRemoteResponse):
        if b"smart_wins" in response.content:
            await client.generate_smart_wins("user_1")
        else:
            await client.generate_insights("user_1")


async def test_generator_without_endpoint():
    with pytest.raises(RemoteGenerationFailed):
        await GeneratorClient(base_url="", transport=transport()).generate_insights("user_1")
