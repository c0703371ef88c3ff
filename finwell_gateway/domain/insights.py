"""Rule-based insight generation used when remote generation is unavailable"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional
from finwell_gateway.domain.analysis import analyze_snapshot, savings_accounts
from finwell_gateway.domain.models import HealthFlag, HealthRule, Insight, Snapshot
from finwell_gateway.utils.ids import IdGenerator, new_id as default_new_id

SEVERITY_PRIORITY = {"critical": "high", "high": "high", "medium": "medium", "low": "low"}


def _spending_insight(category: str, amount: float) -> dict:
    return {
        "type": "spending_pattern",
        "title": f"High Spending in {category}",
        "description": (
            f"You spend about ${amount:,.2f} per month on {category}, "
            "which is your highest spending category."
        ),
        "priority_level": "medium",
        "confidence_score": 0.85,
        "action_items": [
            {"action": "review_spending", "description": f"Review your {category} expenses to identify potential savings."},
            {"action": "set_budget", "description": f"Consider setting a budget for {category} to keep spending in check."},
        ],
    }


def _savings_rate_insight(rate: float) -> dict:
    if rate < 20:
        return {
            "type": "budget_advice",
            "title": "Improve Your Savings Rate",
            "description": (
                f"Your current savings rate is {rate:.1f}%, which is below the recommended 20%. "
                "Increasing your savings rate can help you reach your financial goals faster."
            ),
            "priority_level": "high",
            "confidence_score": 0.9,
            "action_items": [
                {"action": "reduce_expenses", "description": "Identify non-essential expenses you can reduce."},
                {"action": "automate_savings", "description": "Set up automatic transfers to savings on payday."},
            ],
        }
    return {
        "type": "opportunity",
        "title": "Strong Savings Rate",
        "description": f"Your savings rate of {rate:.1f}% is above the recommended 20% of your income.",
        "priority_level": "low",
        "confidence_score": 0.9,
        "action_items": [
            {"action": "optimize_investments", "description": "Make your savings work harder by reviewing investments."},
        ],
    }


def _goal_progress_insight(progress: float) -> dict:
    on_track = progress >= 50
    action_items = [{"action": "review_goals", "description": "Check your goals still match your priorities."}]
    if not on_track:
        action_items.append(
            {"action": "increase_contributions", "description": "Increase monthly contributions to reach goals faster."}
        )
    return {
        "type": "goal_recommendation",
        "title": "Good Goal Progress" if on_track else "Boost Your Goal Progress",
        "description": (
            f"You're making excellent progress at {progress:.1f}% toward your financial goals."
            if on_track
            else f"Your goal progress is currently at {progress:.1f}%. Let's work on accelerating it."
        ),
        "priority_level": "high" if progress < 30 else "medium",
        "confidence_score": 0.8,
        "action_items": action_items,
    }


EMERGENCY_FUND_INSIGHT = {
    "type": "risk_alert",
    "title": "Start an Emergency Fund",
    "description": (
        "You don't appear to have an emergency fund. Financial experts recommend "
        "having 3-6 months of expenses saved for unexpected situations."
    ),
    "priority_level": "high",
    "confidence_score": 0.85,
    "action_items": [
        {"action": "create_emergency_fund", "description": "Create an emergency fund goal and start with $500."},
        {"action": "automate_savings", "description": "Automate transfers to build the fund consistently."},
    ],
}


def _flag_insight(flag: HealthFlag, rule: HealthRule) -> dict:
    return {
        "type": rule.category or "risk_alert",
        "title": rule.name or rule.rule_id,
        "description": rule.description or f"Rule {rule.rule_id} is currently triggered.",
        "priority_level": SEVERITY_PRIORITY.get(rule.severity, "medium"),
        "confidence_score": 0.9,
        "action_items": list(rule.recommended_actions),
    }


def generate_local_insights(
    snapshot: Snapshot,
    active_flags: Iterable[HealthFlag] = (),
    rules: Iterable[HealthRule] = (),
    now: Optional[datetime] = None,
    new_id: IdGenerator = default_new_id,
) -> List[Insight]:
    """
    Deterministic insights from the snapshot and active flags.

    Emits, when applicable: top spending category, savings rate, goal
    progress, missing emergency fund, then one insight per active flag
    whose rule is in the catalog.
    """
    now = now or snapshot.taken_at
    metrics = analyze_snapshot(snapshot)
    drafts: List[dict] = []

    if metrics.spending_by_category:
        category, amount = next(iter(metrics.spending_by_category.items()))
        drafts.append(_spending_insight(category, amount))

    if metrics.total_income > 0:
        drafts.append(_savings_rate_insight(metrics.savings_rate))

    if snapshot.goals:
        drafts.append(_goal_progress_insight(metrics.goal_progress))

    has_emergency_goal = any(
        "emergency" in g.name.lower() or g.category == "emergency" for g in snapshot.goals
    )
    if not has_emergency_goal and not savings_accounts(snapshot.accounts):
        drafts.append(EMERGENCY_FUND_INSIGHT)

    rules_by_id: Dict[str, HealthRule] = {r.rule_id: r for r in rules}
    for flag in active_flags:
        rule = rules_by_id.get(flag.rule_id)
        if flag.is_active and rule is not None:
            drafts.append(_flag_insight(flag, rule))

    return [
        Insight(
            insight_id=new_id(),
            type=d["type"],
            title=d["title"],
            description=d["description"],
            confidence_score=d["confidence_score"],
            priority_level=d["priority_level"],
            action_items=list(d["action_items"]),
            created_at=now,
            source="local",
        )
        for d in drafts
    ]
