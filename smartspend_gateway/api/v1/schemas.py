"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional


class DebtSchema(BaseModel):
    """Debt snapshot supplied by the caller"""

    id: str = Field(..., min_length=1, description="Debt identifier")
    balance: float = Field(..., description="Current principal owed")
    annual_rate: Optional[float] = Field(None, ge=0, description="Annual interest rate in percent")
    minimum_payment: Optional[float] = Field(None, ge=0, description="Monthly principal commitment")
    due_date: Optional[date] = None
    is_paid: bool = False
    type: str = "payable"
    person: str = ""
    description: str = ""
    debt_category: str = "Other"


class SimulationRequest(BaseModel):
    """Request body for POST /v1/debts/simulate"""

    debts: List[DebtSchema]
    strategy: Literal["avalanche", "snowball", "dueDate"]
    extra_principal_budget: float = Field(0, ge=0, description="Monthly budget on top of minimums")
    start_date: date
    max_months: Optional[int] = Field(None, gt=0, description="Simulation cap, defaults to service config")


class PerDebtSchema(BaseModel):
    payoff_month: int
    payoff_date: date
    total_interest_paid: float


class SimulationResponse(BaseModel):
    """Response for POST /v1/debts/simulate"""

    warning: Optional[str] = None
    months: Optional[int] = None
    payoff_date: Optional[date] = None
    payoff_date_label: Optional[str] = None
    monthly_principal_budget: float
    total_interest_paid: float
    per_debt: Dict[str, PerDebtSchema]


class ProjectionRequest(BaseModel):
    """Request body for POST /v1/debts/projections"""

    debts: List[DebtSchema]
    start_date: date


class ProjectionSchema(BaseModel):
    debt_id: str
    status: str
    months: Optional[int] = None
    payoff_date: Optional[date] = None


class ProjectionResponse(BaseModel):
    projections: List[ProjectionSchema]


class TransactionRecord(BaseModel):
    """Raw transaction; validity is checked during intake so bad rows are skipped, not rejected"""

    id: Optional[Any] = None
    amount: Optional[Any] = None
    category: Optional[Any] = None
    date: Optional[Any] = None
    description: Optional[Any] = None
    type: Optional[Any] = None
    created_at: Optional[Any] = None


class HabitDetectRequest(BaseModel):
    """Request body for POST /v1/habits/detect"""

    transactions: List[TransactionRecord]
    now: datetime


class HabitPatternSchema(BaseModel):
    habit_id: str
    category: str
    merchant_key: Optional[str] = None
    amount_bucket: Optional[int] = None
    amount_median: int
    amount_mad: Optional[int] = None
    interval_type: str
    interval_days_median: Optional[int] = None
    dow_prob: List[float]
    time_window_start_min: Optional[int] = None
    time_window_end_min: Optional[int] = None
    active: bool
    updated_at: datetime


class HabitDetectResponse(BaseModel):
    """Response for POST /v1/habits/detect"""

    patterns: List[HabitPatternSchema]
    skipped_transactions: int


class HabitListResponse(BaseModel):
    """Response for GET /v1/habits"""

    patterns: List[HabitPatternSchema]


class ReminderRequest(BaseModel):
    """Request body for POST /v1/habits/reminder"""

    transactions: List[TransactionRecord]
    now: datetime


class ReminderSchema(BaseModel):
    habit_id: str
    title: str
    message: str
    category: str
    description: str
    amount: int
    cadence_hint: str
    score: float


class ReminderResponse(BaseModel):
    reminder: Optional[ReminderSchema] = None


class ReminderActionRequest(BaseModel):
    """Body for reminded/dismiss actions; the caller's local date"""

    today: date


class SnoozeRequest(BaseModel):
    until: date


class ReminderStateSchema(BaseModel):
    habit_id: str
    last_reminded_date: Optional[date] = None
    snoozed_until: Optional[date] = None
    dismiss_count_recent: int = 0
