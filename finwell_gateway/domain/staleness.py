"""Staleness scheduler - decides when generated artifacts must be rebuilt"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from finwell_gateway.utils.date_utils import ensure_utc, same_calendar_day


@dataclass(frozen=True)
class StalenessPolicy:
    """
    Regenerate when the last batch is old, or on the weekly refresh.

    Rules (either is sufficient):
    - age >= max_age
    - now is on refresh_weekday at or after refresh_hour, and the batch
      was not created on that same calendar day
    No prior batch is always due.
    """

    max_age: timedelta = timedelta(days=7)
    refresh_weekday: int = 0  # Monday
    refresh_hour: int = 8

    def in_refresh_window(self, now: datetime) -> bool:
        return now.weekday() == self.refresh_weekday and now.hour >= self.refresh_hour

    def is_due(self, created_at: Optional[datetime], now: datetime) -> bool:
        if created_at is None:
            return True

        created_at = ensure_utc(created_at)
        now = ensure_utc(now)

        if now - created_at >= self.max_age:
            return True

        return self.in_refresh_window(now) and not same_calendar_day(created_at, now)


def policy_from_settings(settings) -> StalenessPolicy:
    return StalenessPolicy(
        max_age=timedelta(days=settings.staleness_max_age_days),
        refresh_weekday=settings.refresh_weekday,
        refresh_hour=settings.refresh_hour,
    )
