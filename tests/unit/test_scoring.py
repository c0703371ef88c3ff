"""Unit tests for health scoring logic"""

import pytest
from datetime import timedelta
from finwell_gateway.domain.models import Account, Goal, Transaction
from finwell_gateway.domain.scoring import (
    WEIGHT_PERCENT,
    WEIGHTS,
    account_diversity_score,
    composite_score,
    compute_health,
    debt_management_score,
    emergency_fund_score,
    goal_achievement_score,
    savings_progress_score,
    score_status,
)


def savings(balance: float, account_id: str = "sav") -> Account:
    return Account(id=account_id, type="depository", subtype="savings", balance=balance)


def test_weights_sum_to_one():
    assert sum(WEIGHT_PERCENT.values()) == 100
    assert sum(WEIGHTS.values()) == pytest.approx(1.0)
    assert WEIGHTS == {
        "emergency_fund": 0.25,
        "savings_progress": 0.20,
        "account_diversity": 0.15,
        "debt_management": 0.20,
        "goal_achievement": 0.20,
    }


def test_empty_snapshot_composite(make_snapshot):
    """No accounts, goals or transactions: 30*.25 + 40*.2 + 20*.15 + 80*.2 + 30*.2 = 40.5 -> 41"""
    report = compute_health(make_snapshot())

    assert report.composite_score == 41
    assert [m.name for m in report.metrics] == [
        "Emergency Fund",
        "Savings Progress",
        "Account Diversity",
        "Debt Management",
        "Goal Progress",
    ]
    assert [m.score for m in report.metrics] == [30, 40, 20, 80, 30]


def test_composite_rounds_half_up(make_snapshot):
    """Injected debt scorer: 7.5 + 8 + 3 + 12 + 6 = 36.5 -> 37"""
    report = compute_health(make_snapshot(), debt_scorer=lambda snapshot: 60)

    assert report.metrics[3].score == 60
    assert report.composite_score == 37


def test_composite_score_direct():
    assert composite_score({
        "emergency_fund": 100,
        "savings_progress": 100,
        "account_diversity": 100,
        "debt_management": 100,
        "goal_achievement": 100,
    }) == 100
    assert composite_score({
        "emergency_fund": 0,
        "savings_progress": 0,
        "account_diversity": 0,
        "debt_management": 0,
        "goal_achievement": 0,
    }) == 0


def test_out_of_range_debt_scorer_is_clamped(make_snapshot):
    report = compute_health(make_snapshot(), debt_scorer=lambda snapshot: 250)
    assert report.metrics[3].score == 100


def test_emergency_fund_six_months_without_transactions(make_snapshot):
    """18000 in savings against the 3000/month fallback covers 6 months"""
    assert emergency_fund_score(make_snapshot(accounts=[savings(18000)])) == 100


def test_emergency_fund_six_months_from_transactions(make_snapshot, now):
    transactions = [
        Transaction(id=f"t{i}", account_id="chk", amount=3000.0, date=now.date() - timedelta(days=30 * i), category=["Rent"])
        for i in range(3)
    ]
    snapshot = make_snapshot(accounts=[savings(18000)], transactions=transactions)
    assert emergency_fund_score(snapshot) == 100


@pytest.mark.parametrize(
    "balance,expected",
    [
        (9000, 80),  # 3 months
        (3000, 60),  # 1 month
        (1500, 30),  # half a month hits the floor
        (0, 30),
    ],
)
def test_emergency_fund_buckets(make_snapshot, balance, expected):
    assert emergency_fund_score(make_snapshot(accounts=[savings(balance)])) == expected


def test_emergency_fund_without_savings_account(make_snapshot):
    checking = Account(id="chk", type="depository", subtype="checking", balance=50000)
    assert emergency_fund_score(make_snapshot(accounts=[checking])) == 40


def test_savings_progress_two_goals(make_snapshot):
    """10000/15000 saved -> 67"""
    goals = [
        Goal(id="g1", name="House", target_amount=10000, saved_amount=10000),
        Goal(id="g2", name="Car", target_amount=5000, saved_amount=0),
    ]
    assert savings_progress_score(make_snapshot(goals=goals)) == 67


def test_savings_progress_clamped(make_snapshot):
    nothing_saved = [Goal(id="g1", name="House", target_amount=10000, saved_amount=0)]
    overfunded = [Goal(id="g1", name="House", target_amount=1000, saved_amount=5000)]
    zero_target = [Goal(id="g1", name="Someday", target_amount=0, saved_amount=0)]

    assert savings_progress_score(make_snapshot(goals=nothing_saved)) == 20
    assert savings_progress_score(make_snapshot(goals=overfunded)) == 100
    assert savings_progress_score(make_snapshot(goals=zero_target)) == 50


@pytest.mark.parametrize(
    "subtypes,expected",
    [
        (["checking"], 40),
        (["checking", "checking"], 40),
        (["checking", "savings"], 60),
        (["checking", "savings", "brokerage"], 80),
        (["checking", "savings", "brokerage", "credit card"], 100),
    ],
)
def test_account_diversity(make_snapshot, subtypes, expected):
    accounts = [
        Account(id=f"a{i}", type="depository", subtype=subtype, balance=100)
        for i, subtype in enumerate(subtypes)
    ]
    assert account_diversity_score(make_snapshot(accounts=accounts)) == expected


def test_debt_management_buckets(make_snapshot, sample_transactions):
    """6000/month income -> 72000 annual"""
    def with_card(balance):
        card = Account(id="cc", type="credit", subtype="credit card", balance=balance)
        return make_snapshot(accounts=[card], transactions=sample_transactions)

    assert debt_management_score(with_card(0)) == 100
    assert debt_management_score(with_card(-5000)) == 100  # 0.07
    assert debt_management_score(with_card(-10000)) == 85  # 0.14
    assert debt_management_score(with_card(-20000)) == 70  # 0.28
    assert debt_management_score(with_card(-30000)) == 50  # 0.42
    assert debt_management_score(with_card(-50000)) == 30  # 0.69


def test_debt_management_without_income(make_snapshot):
    loan = Account(id="loan", type="loan", subtype="student", balance=20000)
    assert debt_management_score(make_snapshot(accounts=[loan])) == 40


def test_goal_achievement_caps_each_goal(make_snapshot):
    goals = [
        Goal(id="g1", name="Done", target_amount=100, saved_amount=500),
        Goal(id="g2", name="Half", target_amount=100, saved_amount=50),
        Goal(id="g3", name="Unset", target_amount=0, saved_amount=10),
    ]
    # (100 + 50 + 0) / 3
    assert goal_achievement_score(make_snapshot(goals=goals)) == 50


def test_healthy_profile(make_snapshot, healthy_accounts, healthy_goals, sample_transactions):
    report = compute_health(
        make_snapshot(accounts=healthy_accounts, goals=healthy_goals, transactions=sample_transactions)
    )
    scores = {m.name: m.score for m in report.metrics}

    assert scores == {
        "Emergency Fund": 100,
        "Savings Progress": 74,
        "Account Diversity": 100,
        "Debt Management": 100,
        "Goal Progress": 65,
    }
    assert report.composite_score == 88
    assert all(0 <= m.score <= 100 for m in report.metrics)


def test_score_status_buckets():
    assert score_status(100) == "excellent"
    assert score_status(85) == "excellent"
    assert score_status(84) == "good"
    assert score_status(70) == "good"
    assert score_status(69) == "fair"
    assert score_status(50) == "fair"
    assert score_status(49) == "poor"


def test_recommendation_depends_on_cutoff(make_snapshot):
    report = compute_health(make_snapshot(accounts=[savings(18000)]))
    emergency = report.metrics[0]
    diversity = report.metrics[2]

    assert emergency.recommendation.startswith("Great job")
    assert diversity.score == 40
    assert diversity.recommendation.startswith("Consider opening")


def test_more_savings_never_lowers_composite(make_snapshot):
    previous = -1
    for balance in range(0, 30001, 1500):
        score = compute_health(make_snapshot(accounts=[savings(balance)])).composite_score
        assert score >= previous
        previous = score
