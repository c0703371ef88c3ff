"""
Tuning table for every numeric threshold used by scoring, rules and smart wins.

Shape: {rule_name: {"thresholds": {...}, "weights": {...}}}. Values are
illustrative defaults, not audited financial models.
"""

from typing import Any, Dict

TUNING: Dict[str, Dict[str, Dict[str, Any]]] = {
    # Composite weights in percent; 25/20/15/20/20 -> 0.25, 0.20, 0.15, 0.20, 0.20
    "health_score": {
        "thresholds": {"excellent": 85, "good": 70, "fair": 50, "recommendation_cutoff": 70},
        "weights": {
            "emergency_fund": 25,
            "savings_progress": 20,
            "account_diversity": 15,
            "debt_management": 20,
            "goal_achievement": 20,
        },
    },
    "emergency_fund": {
        "thresholds": {
            "fallback_monthly_expenses": 3000,
            "excellent_months": 6,
            "good_months": 3,
            "fair_months": 1,
            "no_accounts_score": 30,
            "no_savings_score": 40,
            "floor_score": 30,
        },
        "weights": {"points_per_month": 30},
    },
    "savings_progress": {
        "thresholds": {"min_score": 20, "max_score": 100, "no_goals_score": 40, "zero_target_score": 50},
        "weights": {},
    },
    "account_diversity": {
        "thresholds": {"no_accounts_score": 20},
        # distinct subtypes -> score, highest matching key wins
        "weights": {4: 100, 3: 80, 2: 60, 1: 40},
    },
    "debt_management": {
        "thresholds": {"no_debt_data_score": 80, "no_income_score": 40},
        # (max debt-to-annual-income ratio, score), checked in order
        "weights": {"buckets": [(0.10, 100), (0.20, 85), (0.36, 70), (0.50, 50)], "over_score": 30},
    },
    "goal_achievement": {
        "thresholds": {"no_goals_score": 30},
        "weights": {},
    },
    # Smart wins
    "excess_checking": {
        "thresholds": {"min_balance": 5000, "keep_balance": 3000, "round_to": 100},
        "weights": {"yield_rate": 0.04},
    },
    "subscriptions": {
        "thresholds": {"min_monthly_savings": 20, "max_monthly_savings": 80},
        "weights": {"savings_share": 0.3},
        "patterns": {
            "categories": ["subscription", "entertainment", "recreation"],
            "names": ["subscription", "netflix", "spotify", "hulu"],
        },
    },
    "top_category": {
        "thresholds": {"income_share": 0.2},
        "weights": {"cut_share": 0.15},
    },
    "goal_automation": {
        "thresholds": {"min_monthly_amount": 100, "days_per_month": 30, "round_to": 100},
        "weights": {},
    },
    "savings_rate": {
        "thresholds": {"target_rate": 20, "min_gap": 100, "round_to": 50},
        "weights": {},
    },
    "idle_cash": {
        "thresholds": {"min_balance": 10000},
        "weights": {"invest_share": 0.1, "expected_return": 0.07},
    },
    "smart_wins": {
        "thresholds": {"max_wins": 3},
        "weights": {},
    },
}


def thresholds(rule_name: str) -> Dict[str, Any]:
    """Threshold block for a rule, empty when the rule is not tuned"""
    return TUNING.get(rule_name, {}).get("thresholds", {})


def weights(rule_name: str) -> Dict[Any, Any]:
    """Weight block for a rule, empty when the rule is not tuned"""
    return TUNING.get(rule_name, {}).get("weights", {})
