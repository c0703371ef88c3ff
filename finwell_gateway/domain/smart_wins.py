"""Smart wins - table-driven opportunity heuristics"""

import math
from datetime import datetime
from typing import Callable, List, Optional
from finwell_gateway.domain.analysis import analyze_snapshot
from finwell_gateway.domain.models import Snapshot, SnapshotMetrics, SmartWin
from finwell_gateway.domain.tuning import thresholds, weights
from finwell_gateway.utils.date_utils import months_until
from finwell_gateway.utils.ids import IdGenerator, new_id as default_new_id

Heuristic = Callable[[Snapshot, SnapshotMetrics], Optional[dict]]


def excess_checking(snapshot: Snapshot, metrics: SnapshotMetrics) -> Optional[dict]:
    t = thresholds("excess_checking")
    total = metrics.total_checking
    if total <= t["min_balance"]:
        return None

    excess = total - t["keep_balance"]
    transfer = math.floor(excess / t["round_to"]) * t["round_to"]
    return {
        "title": "Optimize Excess Cash",
        "description": f"Move ${transfer:,.0f} from checking to high-yield savings for better returns",
        "type": "opportunity",
        "impact": math.floor(excess * weights("excess_checking")["yield_rate"]),
        "action_text": "Set up transfer",
    }


def subscription_audit(snapshot: Snapshot, metrics: SnapshotMetrics) -> Optional[dict]:
    t = thresholds("subscriptions")
    savings = metrics.subscription_spend * weights("subscriptions")["savings_share"]
    if savings <= t["min_monthly_savings"]:
        return None

    monthly = min(savings, t["max_monthly_savings"])
    return {
        "title": "Review Subscriptions",
        "description": (
            f"Most people save ${math.floor(monthly)}-{math.floor(monthly * 1.5)}/month "
            "by auditing recurring subscriptions"
        ),
        "type": "spending",
        "impact": math.floor(monthly * 12),
        "action_text": "Review subscriptions",
    }


def top_category_cut(snapshot: Snapshot, metrics: SnapshotMetrics) -> Optional[dict]:
    if not metrics.spending_by_category:
        return None

    category, amount = next(iter(metrics.spending_by_category.items()))
    if amount <= metrics.monthly_income * thresholds("top_category")["income_share"]:
        return None

    monthly_cut = amount * weights("top_category")["cut_share"]
    return {
        "title": f"Reduce {category} Spending",
        "description": f"Cutting {category} spending by 15% would save you ${math.floor(monthly_cut)} monthly",
        "type": "spending",
        "impact": math.floor(monthly_cut * 12),
        "action_text": "See spending breakdown",
    }


def goal_automation(snapshot: Snapshot, metrics: SnapshotMetrics) -> Optional[dict]:
    t = thresholds("goal_automation")
    today = snapshot.taken_at.date()
    monthly_needed = sum(
        max(0.0, g.target_amount - g.saved_amount) / months_until(g.deadline, today, t["days_per_month"])
        for g in snapshot.goals
        if g.deadline is not None
    )
    if monthly_needed <= t["min_monthly_amount"]:
        return None

    rounded = math.ceil(monthly_needed / t["round_to"]) * t["round_to"]
    return {
        "title": "Automate Goal Contributions",
        "description": f"Automatically save ${rounded:,} monthly to reach your goals faster",
        "type": "goal",
        "impact": None,
        "action_text": "Set up automation",
    }


def savings_rate_boost(snapshot: Snapshot, metrics: SnapshotMetrics) -> Optional[dict]:
    t = thresholds("savings_rate")
    income = metrics.monthly_income
    if income <= 0 or metrics.savings_rate >= t["target_rate"]:
        return None

    gap = income * t["target_rate"] / 100 - (income - metrics.monthly_spending)
    if gap <= t["min_gap"]:
        return None

    rounded = math.ceil(gap / t["round_to"]) * t["round_to"]
    return {
        "title": "Boost Your Savings Rate",
        "description": f"Saving an additional ${rounded:,}/month would get you to the recommended 20% savings rate",
        "type": "savings",
        "impact": rounded * 12,
        "action_text": "Create savings plan",
    }


def idle_cash_investment(snapshot: Snapshot, metrics: SnapshotMetrics) -> Optional[dict]:
    balance = metrics.total_balance
    if balance <= thresholds("idle_cash")["min_balance"]:
        return None
    if any(a.type == "investment" for a in snapshot.accounts):
        return None

    w = weights("idle_cash")
    invest = balance * w["invest_share"]
    annual = invest * w["expected_return"]
    return {
        "title": "Start Investing",
        "description": (
            f"Investing just 10% of your balance (${math.floor(invest):,}) could yield "
            f"${math.floor(annual):,} annually at 7% average return"
        ),
        "type": "investment",
        "impact": math.floor(annual),
        "action_text": "Explore investment options",
    }


# Evaluation order matters only for ties in impact
HEURISTICS: List[Heuristic] = [
    excess_checking,
    subscription_audit,
    top_category_cut,
    goal_automation,
    savings_rate_boost,
    idle_cash_investment,
]

EVERGREEN_TIPS: List[dict] = [
    {
        "title": "Track Your Spending",
        "description": "Most people find 10-15% in savings just by tracking expenses for 30 days",
        "type": "spending",
        "impact": None,
        "action_text": "Start tracking",
    },
    {
        "title": "Set Up Automatic Savings",
        "description": "Automating your savings can increase your savings rate by up to 20%",
        "type": "savings",
        "impact": None,
        "action_text": "Set up automation",
    },
    {
        "title": "Create an Emergency Fund",
        "description": "Start with $500 as a mini emergency fund to handle unexpected expenses",
        "type": "savings",
        "impact": None,
        "action_text": "Create fund",
    },
]


def _to_win(candidate: dict, now: datetime, new_id: IdGenerator) -> SmartWin:
    return SmartWin(
        id=new_id(),
        title=candidate["title"],
        description=candidate["description"],
        type=candidate["type"],
        impact=candidate["impact"],
        actionable=True,
        created_at=now,
        action_text=candidate["action_text"],
    )


def rank_wins(wins: List[SmartWin]) -> List[SmartWin]:
    """
    Drop duplicate titles, order by impact descending with impact-less
    items last, and keep at most max_wins.
    """
    seen = set()
    unique = []
    for win in wins:
        if win.title in seen:
            continue
        seen.add(win.title)
        unique.append(win)
    # sorted() is stable, so ties keep heuristic order
    ranked = sorted(unique, key=lambda w: (w.impact is None, -(w.impact or 0)))
    return ranked[: thresholds("smart_wins")["max_wins"]]


def pad_with_tips(wins: List[SmartWin], now: datetime, new_id: IdGenerator = default_new_id) -> List[SmartWin]:
    """Top up a ranked batch with evergreen tips not already present"""
    max_wins = thresholds("smart_wins")["max_wins"]
    padded = list(wins)
    titles = {w.title for w in padded}
    for tip in EVERGREEN_TIPS:
        if len(padded) >= max_wins:
            break
        if tip["title"] not in titles:
            padded.append(_to_win(tip, now, new_id))
    return padded


def generate_smart_wins(
    snapshot: Snapshot,
    now: Optional[datetime] = None,
    new_id: IdGenerator = default_new_id,
    heuristics: Optional[List[Heuristic]] = None,
) -> List[SmartWin]:
    """
    Main entry point: run the heuristic battery and return 1-3 ranked wins.

    Keeps the highest-impact candidates, then pads with evergreen tips so the
    batch is never empty. Pure and synchronous.
    """
    now = now or snapshot.taken_at
    metrics = analyze_snapshot(snapshot)
    battery = HEURISTICS if heuristics is None else heuristics

    candidates = [c for c in (h(snapshot, metrics) for h in battery) if c]
    ranked = rank_wins([_to_win(c, now, new_id) for c in candidates])
    return pad_with_tips(ranked, now, new_id)
