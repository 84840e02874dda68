"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

EXPENSE_CATEGORIES = (
    "Food",
    "Transport",
    "Housing",
    "Utilities",
    "Entertainment",
    "Health",
    "Shopping",
    "Groceries",
    "Debt",  # Repayment
    "Savings",  # Goal funding
    "Other",
)
INCOME_CATEGORIES = ("Salary", "Overtime", "Allowance", "Freelance", "Gift", "Investment")
CATEGORIES = EXPENSE_CATEGORIES + INCOME_CATEGORIES

# Money moved between the user's own buckets, not organic spending
TRANSFER_CATEGORIES = frozenset({"Debt", "Savings"})

TRANSACTION_TYPES = ("expense", "income")


@dataclass
class Debt:
    """Outstanding liability owned by the persistence layer"""

    id: str
    balance: float
    annual_rate: Optional[float] = None  # percent
    minimum_payment: Optional[float] = None  # monthly principal commitment
    due_date: Optional[date] = None
    is_paid: bool = False
    type: str = "payable"
    person: str = ""  # creditor name
    description: str = ""
    debt_category: str = "Other"  # Personal | Credit Card | Loan | Bank | Other


@dataclass
class PerDebtPayoff:
    """When a single debt reached zero inside a simulation"""

    payoff_month: int  # 1-based month index
    payoff_date: date
    total_interest_paid: float


@dataclass
class PayoffSimulation:
    """Output of the portfolio payoff simulator"""

    warning: Optional[str]
    months: Optional[int]
    payoff_date: Optional[date]
    payoff_date_label: Optional[str]
    monthly_principal_budget: float
    total_interest_paid: float
    per_debt: Dict[str, PerDebtPayoff] = field(default_factory=dict)


@dataclass
class DebtProjection:
    """Minimum-payment-only projection for one debt"""

    debt_id: str
    status: str  # ok | no_payment | interest_exceeds_payment | too_long
    months: Optional[int] = None
    payoff_date: Optional[date] = None


@dataclass
class Transaction:
    """Income or expense entry, timestamps in local wall-clock time"""

    id: str
    amount: float
    category: str
    date: datetime
    description: str
    type: str  # "expense" or "income"
    created_at: Optional[datetime] = None


@dataclass
class HabitPattern:
    """Statistical fingerprint of a recurring expense"""

    habit_id: str
    category: str
    merchant_key: Optional[str]
    amount_bucket: Optional[int]
    amount_median: int
    amount_mad: Optional[int]
    interval_type: str  # daily | weekly | monthly | unknown
    interval_days_median: Optional[int]
    dow_prob: List[float]  # index 0 = Sunday
    time_window_start_min: Optional[int]
    time_window_end_min: Optional[int]
    active: bool
    updated_at: datetime


@dataclass
class HabitReminderState:
    """Anti-spam bookkeeping for one habit, written by the UI"""

    habit_id: str
    last_reminded_date: Optional[date] = None
    snoozed_until: Optional[date] = None
    dismiss_count_recent: int = 0


@dataclass
class HabitReminderCandidate:
    """Reminder ready to show to the user"""

    habit_id: str
    title: str
    message: str
    category: str
    description: str
    amount: int
    cadence_hint: str  # today | this week | this month
    score: float
