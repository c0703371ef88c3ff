"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Account:
    """Point-in-time account balance from the aggregation service"""

    id: str
    type: str  # "depository" | "investment" | "credit" | "loan"
    subtype: str  # "checking" | "savings" | ...
    balance: float
    institution_name: str = ""
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class Goal:
    """User savings goal"""

    id: str
    name: str
    target_amount: float
    saved_amount: float
    deadline: Optional[date] = None
    category: str = ""


@dataclass(frozen=True)
class Transaction:
    """Bank transaction. Positive amount = expense, negative amount = income."""

    id: str
    account_id: str
    amount: float
    date: date
    category: List[str] = field(default_factory=list)
    name: str = ""

    @property
    def is_expense(self) -> bool:
        return self.amount > 0

    @property
    def is_income(self) -> bool:
        return self.amount < 0

    @property
    def primary_category(self) -> str:
        return self.category[0] if self.category else "Other"


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of one user's accounts, goals and transactions"""

    user_id: str
    accounts: List[Account]
    goals: List[Goal]
    transactions: List[Transaction]
    taken_at: datetime
    history_months: int = 3


@dataclass
class SnapshotMetrics:
    """Aggregates derived from a snapshot, shared by rules and smart wins"""

    total_balance: float
    total_savings: float
    total_checking: float
    total_debt: float
    total_income: float
    total_spending: float
    monthly_income: float
    monthly_spending: float
    savings_rate: float  # percent, 0 when there is no income
    emergency_fund_months: float
    goal_progress: float  # percent across all goals
    subscription_spend: float  # monthly
    debt_to_income: float  # total debt / annual income, 0 when unknown
    account_count: int
    goal_count: int
    transaction_count: int
    spending_by_category: Dict[str, float] = field(default_factory=dict)  # monthly


@dataclass
class HealthMetric:
    """One weighted sub-score of the composite health score"""

    name: str
    score: int
    status: str  # "poor" | "fair" | "good" | "excellent"
    description: str
    recommendation: str
    weight: float


@dataclass
class HealthReport:
    """Composite score plus the five metrics it was built from"""

    composite_score: int
    metrics: List[HealthMetric]


@dataclass
class HealthRule:
    """Declarative rule from the rule catalog"""

    rule_id: str
    category: str
    condition_logic: Dict[str, Any]
    thresholds: Dict[str, float] = field(default_factory=dict)
    severity: str = "medium"
    recommended_actions: List[Dict[str, Any]] = field(default_factory=list)
    name: str = ""
    description: str = ""
    auto_resolve: bool = False


@dataclass
class HealthFlag:
    """Marker that a rule's condition holds (or held) for a user"""

    flag_id: str
    rule_id: str
    status: str  # "active" | "resolved"
    trigger_data: Dict[str, Any]
    first_triggered_at: datetime
    last_evaluated_at: datetime
    resolved_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"


@dataclass
class Insight:
    """Human-readable, dismissible explanation derived from flags and metrics"""

    insight_id: str
    type: str
    title: str
    description: str
    confidence_score: float
    priority_level: str  # "high" | "medium" | "low"
    action_items: List[Dict[str, Any]] = field(default_factory=list)
    dismissed: bool = False
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    source: str = "local"


@dataclass
class SmartWin:
    """Ranked, actionable recommendation with optional annual dollar impact"""

    id: str
    title: str
    description: str
    type: str  # "savings" | "spending" | "investment" | "goal" | "opportunity"
    impact: Optional[int]
    actionable: bool
    created_at: datetime
    action_text: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass
class TransitionResult:
    """Outcome of a dismiss/resolve operation"""

    id: str
    applied_locally: bool
    persisted: bool
