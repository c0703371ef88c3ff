"""Snapshot analysis - derive spending, income and balance aggregates"""

from typing import Dict, List
from finwell_gateway.domain.models import Account, Snapshot, SnapshotMetrics, Transaction
from finwell_gateway.domain.tuning import TUNING, thresholds

LIABILITY_TYPES = ("credit", "loan")


def savings_accounts(accounts: List[Account]) -> List[Account]:
    return [a for a in accounts if a.type == "depository" and a.subtype == "savings"]


def checking_accounts(accounts: List[Account]) -> List[Account]:
    return [a for a in accounts if a.type == "depository" and a.subtype == "checking"]


def total_spending(transactions: List[Transaction]) -> float:
    """Sum of expenses (positive amounts)"""
    return sum(t.amount for t in transactions if t.is_expense)


def total_income(transactions: List[Transaction]) -> float:
    """Sum of income (negative amounts), reported as a positive number"""
    return sum(-t.amount for t in transactions if t.is_income)


def spending_by_category(transactions: List[Transaction]) -> Dict[str, float]:
    """Expense totals per primary category, largest first"""
    totals: Dict[str, float] = {}
    for txn in transactions:
        if txn.is_expense:
            totals[txn.primary_category] = totals.get(txn.primary_category, 0.0) + txn.amount
    return dict(sorted(totals.items(), key=lambda item: item[1], reverse=True))


def is_subscription(txn: Transaction) -> bool:
    """Expense whose category or merchant name looks like a recurring subscription"""
    if not txn.is_expense:
        return False
    patterns = TUNING["subscriptions"]["patterns"]
    categories = [c.lower() for c in txn.category]
    if any(p in c for p in patterns["categories"] for c in categories):
        return True
    name = txn.name.lower()
    return any(p in name for p in patterns["names"])


def monthly_expenses(snapshot: Snapshot) -> float:
    """Average monthly spend, or the fallback constant when there is no expense data"""
    spend = total_spending(snapshot.transactions) / max(1, snapshot.history_months)
    return spend or float(thresholds("emergency_fund")["fallback_monthly_expenses"])


def analyze_snapshot(snapshot: Snapshot) -> SnapshotMetrics:
    """
    Compute the aggregate metrics every downstream component reads.

    Monthly figures divide window totals by snapshot.history_months.
    Liability balances count toward total_debt, never total_balance.
    """
    months = max(1, snapshot.history_months)
    accounts = snapshot.accounts

    total_balance = sum(a.balance for a in accounts if a.type not in LIABILITY_TYPES)
    total_savings = sum(a.balance for a in savings_accounts(accounts))
    total_checking = sum(a.balance for a in checking_accounts(accounts))
    total_debt = sum(abs(a.balance) for a in accounts if a.type in LIABILITY_TYPES)

    income = total_income(snapshot.transactions)
    spending = total_spending(snapshot.transactions)
    savings_rate = (income - spending) / income * 100 if income > 0 else 0.0

    total_target = sum(g.target_amount for g in snapshot.goals)
    total_saved = sum(g.saved_amount for g in snapshot.goals)
    goal_progress = total_saved / total_target * 100 if total_target > 0 else 0.0

    annual_income = income / months * 12
    debt_to_income = total_debt / annual_income if annual_income > 0 else 0.0

    return SnapshotMetrics(
        total_balance=total_balance,
        total_savings=total_savings,
        total_checking=total_checking,
        total_debt=total_debt,
        total_income=income,
        total_spending=spending,
        monthly_income=income / months,
        monthly_spending=spending / months,
        savings_rate=savings_rate,
        emergency_fund_months=total_savings / monthly_expenses(snapshot),
        goal_progress=goal_progress,
        subscription_spend=sum(t.amount for t in snapshot.transactions if is_subscription(t)) / months,
        debt_to_income=debt_to_income,
        account_count=len(accounts),
        goal_count=len(snapshot.goals),
        transaction_count=len(snapshot.transactions),
        spending_by_category={k: v / months for k, v in spending_by_category(snapshot.transactions).items()},
    )
