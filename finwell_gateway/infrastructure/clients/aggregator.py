"""Aggregation service HTTP client for accounts, goals and transactions"""

import httpx
from datetime import date, datetime
from typing import Any, Callable, Dict, List, TypeVar
from finwell_gateway.domain.models import Account, Goal, Transaction
from finwell_gateway.domain.exceptions import DataUnavailableError
from finwell_gateway.config import settings

T = TypeVar("T")


def _optional_date(value: Any) -> date | None:
    return date.fromisoformat(value[:10]) if value else None


def _optional_datetime(value: Any) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def parse_account(raw: Dict[str, Any]) -> Account:
    return Account(
        id=str(raw["id"]),
        type=raw["type"],
        subtype=raw.get("subtype") or "",
        balance=float(raw.get("balance") or 0),
        institution_name=raw.get("institution_name") or "",
        last_updated=_optional_datetime(raw.get("last_updated")),
    )


def parse_goal(raw: Dict[str, Any]) -> Goal:
    return Goal(
        id=str(raw["id"]),
        name=raw["name"],
        target_amount=float(raw.get("target_amount") or 0),
        saved_amount=float(raw.get("saved_amount") or 0),
        deadline=_optional_date(raw.get("deadline")),
        category=raw.get("category") or "",
    )


def parse_transaction(raw: Dict[str, Any]) -> Transaction:
    category = raw.get("category") or []
    if isinstance(category, str):
        category = [category]
    return Transaction(
        id=str(raw["id"]),
        account_id=str(raw["account_id"]),
        amount=float(raw["amount"]),  # positive = expense, negative = income
        date=date.fromisoformat(raw["date"][:10]),
        category=list(category),
        name=raw.get("name") or raw.get("merchant_name") or "",
    )


class AggregatorClient:
    """Client for the external bank-data aggregation service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.aggregator_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _fetch(self, resource: str, user_id: str, parse: Callable[[Dict[str, Any]], T]) -> List[T]:
        """
        Fetch one collection for a user.

        Raises:
            DataUnavailableError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/{resource}",
                    params={"user_id": user_id},
                )
                response.raise_for_status()
                data = response.json()
                return [parse(item) for item in data.get(resource, [])]

            except httpx.TimeoutException as e:
                raise DataUnavailableError(f"Aggregator {resource} timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise DataUnavailableError(f"Aggregator {resource} error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise DataUnavailableError(f"Aggregator {resource} unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                raise DataUnavailableError(f"Invalid {resource} data from aggregator: {e}") from e

    async def get_accounts(self, user_id: str) -> List[Account]:
        return await self._fetch("accounts", user_id, parse_account)

    async def get_goals(self, user_id: str) -> List[Goal]:
        return await self._fetch("goals", user_id, parse_goal)

    async def get_transactions(self, user_id: str) -> List[Transaction]:
        """Transactions for the configured history window (settings.history_months)"""
        return await self._fetch("transactions", user_id, parse_transaction)
