"""Rule evaluation and health flag lifecycle"""

import logging
import operator
from dataclasses import asdict, replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
from finwell_gateway.domain.analysis import analyze_snapshot
from finwell_gateway.domain.models import HealthFlag, HealthRule, Snapshot, SnapshotMetrics
from finwell_gateway.domain.tuning import thresholds as tuned_thresholds
from finwell_gateway.utils.ids import IdGenerator, new_id as default_new_id

logger = logging.getLogger(__name__)

OPERATORS: Dict[str, Callable[[float, float], bool]] = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
    "eq": operator.eq,
    "ne": operator.ne,
}


def metric_table(metrics: SnapshotMetrics) -> Dict[str, float]:
    """Numeric metrics addressable from condition_logic"""
    table = asdict(metrics)
    table.pop("spending_by_category")
    return table


def _number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def resolve_threshold(rule: HealthRule, ref: Any) -> Optional[float]:
    """Numbers are literal; strings name a rule threshold, then the tuning table entry"""
    if isinstance(ref, (int, float)) and not isinstance(ref, bool):
        return float(ref)
    if not isinstance(ref, str):
        return None
    if isinstance(rule.thresholds, dict) and ref in rule.thresholds:
        return _number(rule.thresholds[ref])
    tuned = tuned_thresholds(rule.rule_id) or tuned_thresholds(rule.category)
    if ref in tuned:
        return _number(tuned[ref])
    return None


def _unevaluable(rule: HealthRule, condition: Any) -> bool:
    logger.warning(
        "Unevaluable rule condition",
        extra={"rule_id": rule.rule_id, "condition": repr(condition)[:200]},
    )
    return False


def evaluate_condition(
    condition: Dict[str, Any],
    rule: HealthRule,
    values: Dict[str, float],
    trigger_data: Dict[str, Any],
) -> bool:
    """
    Evaluate a condition tree against snapshot metric values.

    Leaves look like {"metric": "savings_rate", "operator": "lt", "threshold": "min_rate"}.
    Combinators: {"all": [...]}, {"any": [...]}, {"not": {...}}.
    Metric values referenced by the condition are recorded in trigger_data.
    Malformed nodes log a warning and evaluate to False.
    """
    if not isinstance(condition, dict):
        return _unevaluable(rule, condition)

    for combinator in ("all", "any"):
        if combinator in condition:
            children = condition[combinator]
            if isinstance(children, dict):
                children = [children]
            if not isinstance(children, list):
                return _unevaluable(rule, condition)
            results = [evaluate_condition(c, rule, values, trigger_data) for c in children]
            if combinator == "all":
                return bool(results) and all(results)
            return any(results)
    if "not" in condition:
        if not isinstance(condition["not"], dict):
            return _unevaluable(rule, condition)
        return not evaluate_condition(condition["not"], rule, values, trigger_data)

    metric = condition.get("metric")
    operator_name = condition.get("operator")
    compare = OPERATORS.get(operator_name) if isinstance(operator_name, str) else None
    threshold = resolve_threshold(rule, condition.get("threshold"))

    if not isinstance(metric, str) or metric not in values or compare is None or threshold is None:
        return _unevaluable(rule, condition)

    trigger_data[metric] = values[metric]
    return compare(values[metric], threshold)


def evaluate_rule(rule: HealthRule, values: Dict[str, float]) -> Tuple[bool, Dict[str, Any]]:
    trigger_data: Dict[str, Any] = {}
    return evaluate_condition(rule.condition_logic, rule, values, trigger_data), trigger_data


def evaluate_flags(
    snapshot: Snapshot,
    rules: Iterable[HealthRule],
    existing: Iterable[HealthFlag] = (),
    now: Optional[datetime] = None,
    new_id: IdGenerator = default_new_id,
) -> List[HealthFlag]:
    """
    Run the rule catalog against a snapshot and advance flag state.

    Per (user, rule):
    - inactive -> active when the condition holds (new flag)
    - active stays active, last_evaluated_at and trigger_data refreshed
    - active -> resolved when the condition no longer holds and the rule sets auto_resolve

    Returns the flags that were created or updated. An empty catalog
    returns an empty list. Pure: existing flags are not mutated.
    """
    now = now or snapshot.taken_at
    values = metric_table(analyze_snapshot(snapshot))
    active_by_rule = {f.rule_id: f for f in existing if f.is_active}

    flags: List[HealthFlag] = []
    for rule in rules:
        holds, trigger_data = evaluate_rule(rule, values)
        current = active_by_rule.get(rule.rule_id)

        if current is None:
            if holds:
                flags.append(
                    HealthFlag(
                        flag_id=new_id(),
                        rule_id=rule.rule_id,
                        status="active",
                        trigger_data=trigger_data,
                        first_triggered_at=now,
                        last_evaluated_at=now,
                    )
                )
            continue

        if holds or not rule.auto_resolve:
            flags.append(replace(current, trigger_data=trigger_data or current.trigger_data, last_evaluated_at=now))
        else:
            flags.append(replace(current, status="resolved", last_evaluated_at=now, resolved_at=now))

    return flags


def resolve_flag(flag: HealthFlag, now: datetime) -> HealthFlag:
    """Explicit (user) resolution of a flag"""
    if not flag.is_active:
        return flag
    return replace(flag, status="resolved", resolved_at=now, last_evaluated_at=now)
