"""Insight engine - orchestrates snapshot, scoring, flags, insights and smart wins per request"""

import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Generic, List, Optional, Tuple, TypeVar
from finwell_gateway.domain.exceptions import MalformedRemoteResponse, PersistenceUnavailable
from finwell_gateway.domain.flags import evaluate_flags, resolve_flag as resolve_flag_state
from finwell_gateway.domain.insights import generate_local_insights
from finwell_gateway.domain.models import HealthFlag, HealthReport, HealthRule, Insight, Snapshot, SmartWin, TransitionResult
from finwell_gateway.domain.scoring import DebtScorer, compute_health, debt_management_score
from finwell_gateway.domain.smart_wins import generate_smart_wins, pad_with_tips, rank_wins
from finwell_gateway.domain.staleness import StalenessPolicy
from finwell_gateway.infrastructure.capabilities import Capabilities
from finwell_gateway.infrastructure.clients.generator import GeneratorClient
from finwell_gateway.infrastructure.database.store import ArtifactStore
from finwell_gateway.infrastructure.observability.logging import log_generation, log_transition
from finwell_gateway.infrastructure.observability.metrics import (
    health_score_histogram,
    persistence_failure_counter,
    record_generation,
)
from finwell_gateway.services.fallback import first_success, strategies_for
from finwell_gateway.services.session_cache import SessionCache
from finwell_gateway.services.snapshot import SnapshotSource, build_snapshot
from finwell_gateway.utils.date_utils import utc_now
from finwell_gateway.utils.ids import IdGenerator, new_id as default_new_id

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ArtifactBatch(Generic[T]):
    """A batch of insights or smart wins plus where it came from"""

    items: List[T]
    source: str  # remote | local | default | stored | cache
    created_at: Optional[datetime]
    persisted: bool


class InsightEngine:
    """
    Per-request facade over the insight pipeline.

    Collaborators are injected: the snapshot source, an optional artifact
    store and remote generator (used only when the capability descriptor
    says they exist), the per-user session cache, the ID generator, the
    clock and the staleness policy. Public methods never raise.
    """

    def __init__(
        self,
        source: SnapshotSource,
        capabilities: Capabilities,
        cache: SessionCache,
        store: Optional[ArtifactStore] = None,
        generator: Optional[GeneratorClient] = None,
        policy: StalenessPolicy = StalenessPolicy(),
        new_id: IdGenerator = default_new_id,
        clock: Callable[[], datetime] = utc_now,
        debt_scorer: DebtScorer = debt_management_score,
        history_months: int = 3,
        remote_timeout: float = 15.0,
    ):
        self.source = source
        self.capabilities = capabilities
        self.cache = cache
        self.store = store if capabilities.persistence else None
        self.generator = generator if capabilities.remote_generation else None
        self.policy = policy
        self.new_id = new_id
        self.clock = clock
        self.debt_scorer = debt_scorer
        self.history_months = history_months
        self.remote_timeout = remote_timeout

    async def snapshot(self, user_id: str) -> Snapshot:
        return await build_snapshot(self.source, user_id, self.clock(), self.history_months)

    # Persistence helpers

    def _persist(self, artifact: str, user_id: str, write: Callable[[ArtifactStore], Optional[bool]]) -> bool:
        """Run a store write; False when there is no store, the write failed or matched nothing"""
        if self.store is None:
            return False
        try:
            return write(self.store) is not False
        except PersistenceUnavailable as e:
            persistence_failure_counter.labels(artifact=artifact).inc()
            logger.warning(
                f"Keeping {artifact} in session memory: {e}",
                extra={"user_id": user_id, "artifact": artifact},
            )
            return False

    def _read(self, artifact: str, user_id: str, read: Callable[[ArtifactStore], T]) -> Optional[T]:
        """Run a store read; None when there is no store or the read failed"""
        if self.store is None:
            return None
        try:
            return read(self.store)
        except PersistenceUnavailable as e:
            persistence_failure_counter.labels(artifact=artifact).inc()
            logger.warning(
                f"Store read failed for {artifact}, using session cache: {e}",
                extra={"user_id": user_id, "artifact": artifact},
            )
            return None

    # Health score

    async def health(self, user_id: str) -> HealthReport:
        snapshot = await self.snapshot(user_id)
        report = compute_health(snapshot, self.debt_scorer)
        health_score_histogram.observe(report.composite_score)
        return report

    # Flags

    def _rules(self, user_id: str) -> List[HealthRule]:
        return self._read("rules", user_id, lambda s: s.list_rules()) or []

    def _existing_flags(self, user_id: str) -> List[HealthFlag]:
        stored = self._read("flags", user_id, lambda s: s.active_flags(user_id))
        flags = stored if stored is not None else self.cache.active_flags(user_id)
        resolved = self.cache.for_user(user_id).resolved_flag_ids
        return [f for f in flags if f.flag_id not in resolved]

    def _evaluate(self, snapshot: Snapshot) -> Tuple[List[HealthFlag], List[HealthRule]]:
        user_id = snapshot.user_id
        rules = self._rules(user_id)
        existing = self._existing_flags(user_id)
        updated = evaluate_flags(snapshot, rules, existing, self.clock(), self.new_id)

        self.cache.put_flags(user_id, existing)
        self.cache.put_flags(user_id, updated)
        if updated:
            self._persist("flags", user_id, lambda s: s.save_flags(user_id, updated))

        merged = {f.flag_id: f for f in existing}
        merged.update({f.flag_id: f for f in updated})
        active = sorted((f for f in merged.values() if f.is_active), key=lambda f: f.first_triggered_at)
        return active, rules

    async def flags(self, user_id: str) -> List[HealthFlag]:
        """Evaluate the rule catalog for a user and return the active flags"""
        snapshot = await self.snapshot(user_id)
        active, _ = self._evaluate(snapshot)
        return active

    # Insights

    def _current_insights(self, user_id: str, now: datetime) -> Tuple[List[Insight], Optional[datetime], str]:
        stored = self._read("insights", user_id, lambda s: (s.current_insights(user_id, now), s.insights_created_at(user_id)))
        if stored is not None:
            dismissed = self.cache.for_user(user_id).dismissed_insight_ids
            items, created_at = stored
            return [i for i in items if i.insight_id not in dismissed], created_at, "stored"
        entry = self.cache.for_user(user_id)
        return self.cache.current_insights(user_id), entry.insights_at, "cache"

    async def insights(self, user_id: str, force: bool = False) -> ArtifactBatch[Insight]:
        """
        Current insights, regenerated when stale or forced.

        Remote generation first, local rules second. The new batch replaces
        the old one in the store, or in the session cache when the store is
        unavailable.
        """
        start_time = time.time()
        now = self.clock()
        existing, created_at, origin = self._current_insights(user_id, now)

        if not force and not self.policy.is_due(created_at, now):
            record_generation("insights", origin)
            return ArtifactBatch(existing, origin, created_at, persisted=origin == "stored")

        self.cache.invalidate(user_id, "insights")

        async def remote() -> List[Insight]:
            items = await self.generator.generate_insights(user_id, force)
            if not items:
                raise MalformedRemoteResponse("Generator returned no insights")
            return items

        async def local() -> List[Insight]:
            snapshot = await self.snapshot(user_id)
            active, rules = self._evaluate(snapshot)
            return generate_local_insights(snapshot, active, rules, now, self.new_id)

        generated = await first_success(
            strategies_for(remote if self.generator else None, local, self.remote_timeout),
            default=[],
            artifact="insights",
        )
        items = [replace(i, created_at=now) for i in generated.value]

        persisted = self._persist("insights", user_id, lambda s: s.save_insights(user_id, items, now))
        self.cache.put_insights(user_id, items, now)

        record_generation("insights", generated.source)
        log_generation(user_id, "insights", generated.source, len(items), persisted, (time.time() - start_time) * 1000)
        return ArtifactBatch(items, generated.source, now, persisted)

    async def dismiss_insight(self, user_id: str, insight_id: str) -> TransitionResult:
        """Dismiss locally first, then in the store when available"""
        entry = self.cache.for_user(user_id)
        entry.dismissed_insight_ids.add(insight_id)
        entry.insights = [replace(i, dismissed=True) if i.insight_id == insight_id else i for i in entry.insights]

        persisted = self._persist("insights", user_id, lambda s: s.dismiss_insight(user_id, insight_id))
        log_transition(user_id, "insight", insight_id, "dismissed", persisted)
        return TransitionResult(id=insight_id, applied_locally=True, persisted=persisted)

    async def record_feedback(
        self,
        user_id: str,
        insight_id: str,
        feedback_type: str,
        rating: Optional[int] = None,
        feedback_text: Optional[str] = None,
    ) -> bool:
        return self._persist(
            "feedback",
            user_id,
            lambda s: s.record_feedback(user_id, insight_id, feedback_type, rating, feedback_text),
        )

    # Smart wins

    def _current_smart_wins(self, user_id: str) -> Tuple[List[SmartWin], Optional[datetime], str]:
        stored = self._read("smart_wins", user_id, lambda s: s.current_smart_wins(user_id))
        if stored is not None:
            created_at = max((w.created_at for w in stored), default=None)
            return stored, created_at, "stored"
        entry = self.cache.for_user(user_id)
        return list(entry.smart_wins), entry.smart_wins_at, "cache"

    async def smart_wins(self, user_id: str, force: bool = False) -> ArtifactBatch[SmartWin]:
        """
        Current smart wins, regenerated when stale or forced.

        Reuses the existing batch while the staleness policy says it is
        fresh, so concurrent callers rarely trigger redundant remote calls.
        """
        start_time = time.time()
        now = self.clock()
        existing, created_at, origin = self._current_smart_wins(user_id)

        if existing and not force and not self.policy.is_due(created_at, now):
            record_generation("smart_wins", origin)
            return ArtifactBatch(existing, origin, created_at, persisted=origin == "stored")

        self.cache.invalidate(user_id, "smart_wins")

        async def remote() -> List[SmartWin]:
            wins = rank_wins(await self.generator.generate_smart_wins(user_id, force))
            if not wins:
                raise MalformedRemoteResponse("Generator returned no smart wins")
            return pad_with_tips(wins, now, self.new_id)

        async def local() -> List[SmartWin]:
            return generate_smart_wins(await self.snapshot(user_id), now, self.new_id)

        generated = await first_success(
            strategies_for(remote if self.generator else None, local, self.remote_timeout),
            default=pad_with_tips([], now, self.new_id),
            artifact="smart_wins",
        )
        wins = [replace(w, created_at=now) for w in generated.value]

        persisted = self._persist("smart_wins", user_id, lambda s: s.save_smart_wins(user_id, wins, now))
        self.cache.put_smart_wins(user_id, wins, now)

        record_generation("smart_wins", generated.source)
        log_generation(user_id, "smart_wins", generated.source, len(wins), persisted, (time.time() - start_time) * 1000)
        return ArtifactBatch(wins, generated.source, now, persisted)

    # Flag transitions

    async def resolve_flag(self, user_id: str, flag_id: str) -> TransitionResult:
        """Resolve locally first, then in the store when available"""
        now = self.clock()
        entry = self.cache.for_user(user_id)
        entry.resolved_flag_ids.add(flag_id)
        if flag_id in entry.flags:
            entry.flags[flag_id] = resolve_flag_state(entry.flags[flag_id], now)

        persisted = self._persist("flags", user_id, lambda s: s.resolve_flag(user_id, flag_id, now))
        log_transition(user_id, "flag", flag_id, "resolved", persisted)
        return TransitionResult(id=flag_id, applied_locally=True, persisted=persisted)
