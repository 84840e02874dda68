"""Debt payoff simulation - month-by-month amortization under a prioritization strategy"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from smartspend_gateway.domain.exceptions import (
    ConfigurationError,
    DivergenceError,
    InvalidSimulationRequestError,
)
from smartspend_gateway.domain.models import Debt, DebtProjection, PayoffSimulation, PerDebtPayoff
from smartspend_gateway.domain.stats import round_half_up
from smartspend_gateway.utils.date_utils import add_months, month_label

AVALANCHE = "avalanche"
SNOWBALL = "snowball"
DUE_DATE = "dueDate"
STRATEGIES = (AVALANCHE, SNOWBALL, DUE_DATE)

DEFAULT_MAX_MONTHS = 600

# Balances at or below this are rounding residue and count as paid
PAID_THRESHOLD = 0.5


def _no_fallback(debt: Debt) -> float:
    return 0.0


@dataclass
class SimulationOptions:
    """Caller-supplied knobs for simulate_debt_payoff"""

    strategy: str
    start_date: date
    extra_principal_budget: float = 0.0
    max_months: int = DEFAULT_MAX_MONTHS
    minimum_payment_fallback: Callable[[Debt], float] = _no_fallback


@dataclass
class _SimDebt:
    """Working copy of a debt; the caller's Debt is never touched"""

    id: str
    balance: float
    rate: float
    min_pay: float
    due_date: Optional[date]


def _validate_options(options: SimulationOptions) -> None:
    if options.strategy not in STRATEGIES:
        raise InvalidSimulationRequestError(f"Unknown payoff strategy: {options.strategy!r}")
    if options.extra_principal_budget < 0:
        raise InvalidSimulationRequestError("extra_principal_budget must be >= 0")
    if options.max_months <= 0:
        raise InvalidSimulationRequestError("max_months must be > 0")


def _schedule(debts: Sequence[Debt], fallback: Callable[[Debt], float]) -> List[_SimDebt]:
    """Payable, unpaid, positive-balance debts in their natural (input) order"""
    scheduled = []
    for debt in debts:
        if debt.type != "payable" or debt.is_paid or debt.balance <= 0:
            continue
        min_pay = debt.minimum_payment if debt.minimum_payment is not None else fallback(debt)
        scheduled.append(
            _SimDebt(
                id=debt.id,
                balance=debt.balance,
                rate=debt.annual_rate or 0.0,
                min_pay=max(0.0, min_pay),
                due_date=debt.due_date,
            )
        )
    return scheduled


def _order_key(strategy: str) -> Callable[[_SimDebt], tuple]:
    """
    Sort key for rolling surplus principal.

    - avalanche: highest annual rate first
    - snowball:  smallest current balance first
    - dueDate:   earliest due date first, undated last, ties by id
    """
    if strategy == AVALANCHE:
        return lambda d: (-d.rate,)
    if strategy == SNOWBALL:
        return lambda d: (d.balance,)
    return lambda d: (d.due_date is None, d.due_date or date.max, d.id)


def _monthly_principal_budget(scheduled: Sequence[_SimDebt], extra_principal_budget: float) -> float:
    budget = sum(d.min_pay for d in scheduled) + extra_principal_budget
    if budget <= 0:
        raise ConfigurationError()
    return budget


@dataclass
class _PayoffRun:
    """Mutable state of one simulation; partial totals survive a DivergenceError"""

    scheduled: List[_SimDebt]
    monthly_budget: float
    strategy: str
    start_date: date
    total_interest_paid: float = 0.0
    per_debt: Dict[str, PerDebtPayoff] = field(default_factory=dict)
    per_debt_interest: Dict[str, float] = field(default_factory=dict)

    def _outstanding(self) -> bool:
        return any(d.balance > PAID_THRESHOLD for d in self.scheduled)

    def _charge_interest(self) -> None:
        # Interest is an out-of-pocket cost on the opening balance; principal never grows
        for d in self.scheduled:
            if d.balance <= PAID_THRESHOLD:
                continue
            monthly_rate = d.rate / 100 / 12
            interest = round_half_up(d.balance * monthly_rate) if monthly_rate > 0 else 0
            self.per_debt_interest[d.id] = self.per_debt_interest.get(d.id, 0) + interest
            self.total_interest_paid += interest

    def _pay(self, d: _SimDebt, amount: float, month: int) -> None:
        d.balance -= amount
        if d.balance <= PAID_THRESHOLD and d.id not in self.per_debt:
            self.per_debt[d.id] = PerDebtPayoff(
                payoff_month=month,
                payoff_date=add_months(self.start_date, month),
                total_interest_paid=self.per_debt_interest.get(d.id, 0),
            )

    def run(self, max_months: int) -> int:
        """Simulate until every balance is residue; returns months elapsed"""
        months = 0
        while months < max_months and self._outstanding():
            months += 1
            remaining = self.monthly_budget
            self._charge_interest()

            # Fixed minimums first, natural order
            for d in self.scheduled:
                if d.balance <= PAID_THRESHOLD:
                    continue
                if remaining <= 0:
                    break
                pay = min(d.min_pay, d.balance, remaining)
                remaining -= pay
                self._pay(d, pay, months)

            # Surplus rolls into the remaining debts in strategy order
            if remaining > PAID_THRESHOLD:
                ordered = sorted(
                    (d for d in self.scheduled if d.balance > PAID_THRESHOLD),
                    key=_order_key(self.strategy),
                )
                for d in ordered:
                    if remaining <= 0:
                        break
                    pay = min(d.balance, remaining)
                    remaining -= pay
                    self._pay(d, pay, months)

        if self._outstanding():
            raise DivergenceError()
        return months


def simulate_debt_payoff(debts: Sequence[Debt], options: SimulationOptions) -> PayoffSimulation:
    """
    Project when a set of debts is fully repaid.

    Payment model:
    - A debt's balance is principal and does not grow; monthly interest is paid
      as an expense and only accumulated into the interest totals
    - Each debt's minimum payment is honored every month before anything else
    - Surplus budget (extra budget plus minimums freed by paid-off debts) rolls
      into the remaining debts in strategy order within the same month

    Business outcomes are reported through `warning`, never raised:
    - ConfigurationError: monthly principal budget <= 0, nothing simulated
    - DivergenceError: max_months reached with balances left, partial totals kept

    Raises:
        InvalidSimulationRequestError: unknown strategy, negative extra budget,
            or non-positive max_months
    """
    _validate_options(options)
    start = options.start_date
    scheduled = _schedule(debts, options.minimum_payment_fallback)

    if not scheduled:
        return PayoffSimulation(
            warning=None,
            months=0,
            payoff_date=start,
            payoff_date_label=month_label(start),
            monthly_principal_budget=0,
            total_interest_paid=0,
        )

    try:
        monthly_budget = _monthly_principal_budget(scheduled, options.extra_principal_budget)
    except ConfigurationError as e:
        return PayoffSimulation(
            warning=str(e),
            months=None,
            payoff_date=None,
            payoff_date_label=None,
            monthly_principal_budget=0,
            total_interest_paid=0,
        )

    run = _PayoffRun(
        scheduled=scheduled,
        monthly_budget=monthly_budget,
        strategy=options.strategy,
        start_date=start,
    )
    try:
        months = run.run(options.max_months)
    except DivergenceError as e:
        return PayoffSimulation(
            warning=str(e),
            months=None,
            payoff_date=None,
            payoff_date_label=None,
            monthly_principal_budget=monthly_budget,
            total_interest_paid=run.total_interest_paid,
            per_debt=run.per_debt,
        )

    payoff_date = add_months(start, months)
    return PayoffSimulation(
        warning=None,
        months=months,
        payoff_date=payoff_date,
        payoff_date_label=month_label(payoff_date),
        monthly_principal_budget=monthly_budget,
        total_interest_paid=run.total_interest_paid,
        per_debt=run.per_debt,
    )


def project_single_debt(debt: Debt, start_date: date, max_months: int = DEFAULT_MAX_MONTHS) -> DebtProjection:
    """
    Minimum-payment-only projection for a single debt, interest capitalized.

    Used for per-debt hints; unlike the portfolio simulator, unpaid interest
    grows the balance here.
    """
    min_pay = debt.minimum_payment or 0
    if min_pay <= 0 or debt.balance <= 0:
        return DebtProjection(debt_id=debt.id, status="no_payment")

    monthly_rate = (debt.annual_rate or 0) / 100 / 12
    balance = debt.balance

    # Negative amortization: payment never catches up with interest
    if monthly_rate > 0 and min_pay <= balance * monthly_rate:
        return DebtProjection(debt_id=debt.id, status="interest_exceeds_payment")

    months = 0
    while balance > 1 and months < max_months:
        balance += balance * monthly_rate
        balance -= min_pay
        months += 1

    if months >= max_months:
        return DebtProjection(debt_id=debt.id, status="too_long")

    return DebtProjection(
        debt_id=debt.id,
        status="ok",
        months=months,
        payoff_date=add_months(start_date, months),
    )
