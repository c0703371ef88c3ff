"""Unit tests for capability resolution and the session cache"""

from datetime import timedelta
from sqlalchemy import create_engine
from finwell_gateway.domain.models import HealthFlag, Insight
from finwell_gateway.infrastructure.capabilities import probe_persistence, resolve_capabilities
from finwell_gateway.infrastructure.database.models import Base
from finwell_gateway.services.session_cache import SessionCache


def test_persistence_requires_artifact_tables():
    engine = create_engine("sqlite://")
    assert probe_persistence(engine) is False

    Base.metadata.create_all(bind=engine)
    assert probe_persistence(engine) is True


def test_remote_generation_follows_configuration():
    engine = create_engine("sqlite://")
    assert resolve_capabilities(engine, "").remote_generation is False
    assert resolve_capabilities(engine, "http://gen.internal").remote_generation is True


def test_session_cache_is_per_user(now):
    cache = SessionCache()
    insight = Insight(insight_id="i1", type="opportunity", title="t", description="d",
                      confidence_score=0.5, priority_level="low")
    cache.put_insights("alice", [insight], now)

    assert [i.insight_id for i in cache.current_insights("alice")] == ["i1"]
    assert cache.current_insights("bob") == []

    cache.for_user("alice").dismissed_insight_ids.add("i1")
    assert cache.current_insights("alice") == []

    cache.invalidate("alice", "insights")
    assert cache.for_user("alice").insights_at is None


def test_session_cache_hides_resolved_flags(now):
    cache = SessionCache()
    flag = HealthFlag(flag_id="f1", rule_id="r1", status="active", trigger_data={},
                      first_triggered_at=now - timedelta(days=1), last_evaluated_at=now)
    cache.put_flags("alice", [flag])
    assert [f.flag_id for f in cache.active_flags("alice")] == ["f1"]

    cache.for_user("alice").resolved_flag_ids.add("f1")
    assert cache.active_flags("alice") == []
