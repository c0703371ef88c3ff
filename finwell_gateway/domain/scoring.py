"""Health scoring engine - five weighted sub-scores and the composite score"""

import math
from typing import Callable, Dict, List, Tuple
from finwell_gateway.domain.analysis import analyze_snapshot, monthly_expenses, savings_accounts, total_income
from finwell_gateway.domain.models import HealthMetric, HealthReport, Snapshot
from finwell_gateway.domain.tuning import thresholds, weights

DebtScorer = Callable[[Snapshot], int]

WEIGHT_PERCENT: Dict[str, int] = weights("health_score")
WEIGHTS: Dict[str, float] = {name: pct / 100 for name, pct in WEIGHT_PERCENT.items()}

# name, description, recommendation below cutoff, recommendation at/above cutoff
METRIC_TEXT: Dict[str, Tuple[str, str, str, str]] = {
    "emergency_fund": (
        "Emergency Fund",
        "Your financial safety net for unexpected expenses",
        "Build an emergency fund covering 3-6 months of expenses",
        "Great job! Your emergency fund provides excellent protection",
    ),
    "savings_progress": (
        "Savings Progress",
        "How well you're progressing toward your financial goals",
        "Increase your savings rate to 20% of income for better financial health",
        "Excellent savings discipline! You're on track for financial success",
    ),
    "account_diversity": (
        "Account Diversity",
        "Variety of account types for different financial needs",
        "Consider opening different account types (checking, savings, investment)",
        "Good account diversity supports your financial flexibility",
    ),
    "debt_management": (
        "Debt Management",
        "Your debt level relative to income",
        "Focus on reducing high-interest debt and improving your debt-to-income ratio",
        "Your debt levels are well-managed. Continue making timely payments",
    ),
    "goal_achievement": (
        "Goal Progress",
        "Progress toward your financial objectives",
        "Set specific, measurable financial goals and track your progress",
        "Outstanding goal achievement! You're building wealth effectively",
    ),
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: float = 0, high: float = 100) -> int:
    return round_half_up(min(high, max(low, value)))


def emergency_fund_score(snapshot: Snapshot) -> int:
    """
    Months of expenses covered by savings accounts.

    Scoring:
    - >= 6 months: 100, >= 3 months: 80, >= 1 month: 60
    - below 1 month: max(30, months * 30)
    - no savings accounts: 40, no accounts at all: 30
    """
    t = thresholds("emergency_fund")
    if not snapshot.accounts:
        return t["no_accounts_score"]

    savings = savings_accounts(snapshot.accounts)
    if not savings:
        return t["no_savings_score"]

    months_covered = sum(a.balance for a in savings) / monthly_expenses(snapshot)

    if months_covered >= t["excellent_months"]:
        return 100
    if months_covered >= t["good_months"]:
        return 80
    if months_covered >= t["fair_months"]:
        return 60
    return clamp_score(max(t["floor_score"], months_covered * weights("emergency_fund")["points_per_month"]))


def savings_progress_score(snapshot: Snapshot) -> int:
    """Total saved / total target across goals, clamped to [20, 100]"""
    t = thresholds("savings_progress")
    if not snapshot.goals:
        return t["no_goals_score"]

    total_target = sum(g.target_amount for g in snapshot.goals)
    if total_target == 0:
        return t["zero_target_score"]

    total_saved = sum(g.saved_amount for g in snapshot.goals)
    return clamp_score(total_saved / total_target * 100, t["min_score"], t["max_score"])


def account_diversity_score(snapshot: Snapshot) -> int:
    """Distinct account subtypes: 4+ -> 100, 3 -> 80, 2 -> 60, otherwise 40"""
    if not snapshot.accounts:
        return thresholds("account_diversity")["no_accounts_score"]

    type_count = len({a.subtype for a in snapshot.accounts})
    table = weights("account_diversity")
    for min_types in sorted(table, reverse=True):
        if type_count >= min_types:
            return table[min_types]
    return table[min(table)]


def debt_management_score(snapshot: Snapshot) -> int:
    """
    Default debt scorer: credit/loan balances against annualized income.

    Without any credit or loan accounts there is no liability data and the
    tunable "no debt data" score is returned. Pass a different DebtScorer to
    compute_health() to replace this heuristic.
    """
    t = thresholds("debt_management")
    metrics = analyze_snapshot(snapshot)
    if not any(a.type in ("credit", "loan") for a in snapshot.accounts):
        return t["no_debt_data_score"]
    if metrics.total_debt == 0:
        return 100
    if total_income(snapshot.transactions) <= 0:
        return t["no_income_score"]

    w = weights("debt_management")
    for max_ratio, score in w["buckets"]:
        if metrics.debt_to_income <= max_ratio:
            return score
    return w["over_score"]


def goal_achievement_score(snapshot: Snapshot) -> int:
    """Average per-goal progress capped at 100; zero-target goals count as 0"""
    if not snapshot.goals:
        return thresholds("goal_achievement")["no_goals_score"]

    progress = [
        min(100.0, g.saved_amount / g.target_amount * 100) if g.target_amount else 0.0
        for g in snapshot.goals
    ]
    return clamp_score(sum(progress) / len(progress))


def score_status(score: int) -> str:
    t = thresholds("health_score")
    if score >= t["excellent"]:
        return "excellent"
    if score >= t["good"]:
        return "good"
    if score >= t["fair"]:
        return "fair"
    return "poor"


def build_metric(key: str, score: int) -> HealthMetric:
    name, description, low_text, high_text = METRIC_TEXT[key]
    cutoff = thresholds("health_score")["recommendation_cutoff"]
    return HealthMetric(
        name=name,
        score=score,
        status=score_status(score),
        description=description,
        recommendation=low_text if score < cutoff else high_text,
        weight=WEIGHTS[key],
    )


def composite_score(sub_scores: Dict[str, int]) -> int:
    """
    Weighted sum of sub-scores, rounded half-up.

    Computed in integer percent so 40.5 is never read back as 40.4999.
    """
    weighted = sum(WEIGHT_PERCENT[key] * score for key, score in sub_scores.items())
    return min(100, max(0, (weighted + 50) // 100))


def compute_health(snapshot: Snapshot, debt_scorer: DebtScorer = debt_management_score) -> HealthReport:
    """
    Main entry point: five sub-scores plus the composite health score.

    Pure and synchronous. Metrics are returned in a fixed order:
    Emergency Fund, Savings Progress, Account Diversity, Debt Management,
    Goal Progress.
    """
    sub_scores = {
        "emergency_fund": emergency_fund_score(snapshot),
        "savings_progress": savings_progress_score(snapshot),
        "account_diversity": account_diversity_score(snapshot),
        "debt_management": clamp_score(debt_scorer(snapshot)),
        "goal_achievement": goal_achievement_score(snapshot),
    }
    metrics: List[HealthMetric] = [build_metric(key, score) for key, score in sub_scores.items()]
    return HealthReport(composite_score=composite_score(sub_scores), metrics=metrics)
