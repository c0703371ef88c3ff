"""Remote insight / smart-win generation client with retry logic"""

import httpx
import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional
from finwell_gateway.config import settings
from finwell_gateway.domain.exceptions import MalformedRemoteResponse, RemoteGenerationFailed
from finwell_gateway.domain.models import Insight, SmartWin
from finwell_gateway.infrastructure.observability.metrics import remote_latency_histogram
from finwell_gateway.utils.date_utils import utc_now
from finwell_gateway.utils.ids import IdGenerator, new_id as default_new_id

SMART_WIN_TYPES = {"savings", "spending", "investment", "goal", "opportunity"}


def _items(payload: Any, key: str) -> List[Dict[str, Any]]:
    """Accept {key: [...]} or a bare list; anything else is malformed"""
    items = payload.get(key) if isinstance(payload, dict) else payload
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise MalformedRemoteResponse(f"Expected a list of {key}")
    return items


def _text(raw: Dict[str, Any], key: str) -> str:
    value = raw[key]
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{key} must be a non-empty string")
    return value


def _optional_text(raw: Dict[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    return _text(raw, key) if raw.get(key) is not None else default


def _action_items(raw: Dict[str, Any]) -> List[str]:
    items = raw.get("action_items")
    if items is None:
        return []
    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise ValueError("action_items must be a list of strings")
    return list(items)


def parse_insights(payload: Any, new_id: IdGenerator, now: datetime) -> List[Insight]:
    try:
        insights = []
        for raw in _items(payload, "insights"):
            type_key = "insight_type" if raw.get("insight_type") is not None else "type"
            insights.append(
                Insight(
                    insight_id=str(raw.get("insight_id") or new_id()),
                    type=_optional_text(raw, type_key, "opportunity"),
                    title=_text(raw, "title"),
                    description=_text(raw, "description"),
                    confidence_score=min(1.0, max(0.0, float(raw.get("confidence_score", 0.8)))),
                    priority_level=_optional_text(raw, "priority_level", "medium"),
                    action_items=_action_items(raw),
                    created_at=now,
                    source="remote",
                )
            )
        return insights
    except (KeyError, ValueError, TypeError) as e:
        raise MalformedRemoteResponse(f"Invalid insight from generator: {e}") from e


def parse_smart_wins(payload: Any, new_id: IdGenerator, now: datetime) -> List[SmartWin]:
    try:
        wins = []
        for raw in _items(payload, "smart_wins"):
            if raw["type"] not in SMART_WIN_TYPES:
                raise ValueError(f"unknown smart win type {raw['type']!r}")
            impact = raw.get("impact")
            wins.append(
                SmartWin(
                    id=str(raw.get("id") or new_id()),
                    title=_text(raw, "title"),
                    description=_text(raw, "description"),
                    type=raw["type"],
                    impact=round(float(impact)) if impact is not None else None,
                    actionable=bool(raw.get("actionable", True)),
                    created_at=now,
                    action_text=_optional_text(raw, "action_text", None),
                )
            )
        return wins
    except (KeyError, ValueError, TypeError) as e:
        raise MalformedRemoteResponse(f"Invalid smart win from generator: {e}") from e


class GeneratorClient:
    """Client for the optional remote content generation service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        new_id: IdGenerator = default_new_id,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.generation_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries or settings.remote_generation_max_retries
        self.backoff_base = settings.remote_generation_backoff_base
        self.new_id = new_id
        self.transport = transport

    async def _post(self, path: str, user_id: str, force: bool) -> Any:
        """
        POST a generation request with retry.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base ...
        - Retries on 5xx errors and network failures, never on 4xx

        Raises:
            RemoteGenerationFailed: After the final attempt fails
            MalformedRemoteResponse: When the body is not JSON
        """
        if not self.base_url:
            raise RemoteGenerationFailed("Remote generation is not provisioned")

        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with remote_latency_histogram.time():
                        response = await client.post(
                            f"{self.base_url}/{path}",
                            json={"userId": user_id, "forceGenerate": force},
                        )
                        response.raise_for_status()
                    return response.json()

                except httpx.HTTPStatusError as e:
                    attempt += 1
                    if e.response.status_code < 500 or attempt >= self.max_retries:
                        raise RemoteGenerationFailed(f"Generator error: {e.response.status_code}") from e
                except httpx.RequestError as e:
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise RemoteGenerationFailed(f"Generator unreachable: {e}") from e
                except ValueError as e:
                    raise MalformedRemoteResponse(f"Generator returned non-JSON body: {e}") from e

                await asyncio.sleep(self.backoff_base * (2 ** (attempt - 1)))

    async def generate_insights(self, user_id: str, force: bool = False) -> List[Insight]:
        payload = await self._post("generate-insights", user_id, force)
        return parse_insights(payload, self.new_id, utc_now())

    async def generate_smart_wins(self, user_id: str, force: bool = False) -> List[SmartWin]:
        payload = await self._post("generate-smart-wins", user_id, force)
        return parse_smart_wins(payload, self.new_id, utc_now())
