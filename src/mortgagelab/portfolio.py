"""
Portfolio aggregation over several mortgages.

A portfolio is an immutable collection of ``MortgageEntry`` objects. Adding,
removing or updating an entry returns a new portfolio; the previous one is
left untouched.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum

import numpy as np
import pandas as pd

from mortgagelab.calculations.amortization import generate_amortization_schedule
from mortgagelab.core.result import Result
from mortgagelab.types.loan_configuration import LoanConfiguration
from mortgagelab.types.sondertilgung_rules import BankType
from mortgagelab.values.scalars import Money, create_money

logger = logging.getLogger(__name__)

REFINANCING_RATE_MARGIN = 1.0  # percentage points above the portfolio average
CONSOLIDATION_MAX_AMOUNT = 100_000.0
HIGH_INTEREST_RATE = 5.0


class PortfolioError(str, Enum):
    INVALID_PORTFOLIO_NAME = "InvalidPortfolioName"
    DUPLICATE_MORTGAGE_ID = "DuplicateMortgageId"
    INVALID_MORTGAGE_ENTRY = "InvalidMortgageEntry"
    MORTGAGE_NOT_FOUND = "MortgageNotFound"
    EMPTY_PORTFOLIO = "EmptyPortfolio"


@dataclass(frozen=True)
class MortgageEntry:
    """
    One mortgage held in a portfolio.

    Attributes:
        id: Unique id within the portfolio
        name: Display name
        configuration: Loan parameters
        bank_type: Lender category (drives the Sondertilgung rules)
        start_date: Payout date of the loan
        notes: Free text
        is_active: Inactive entries are kept but excluded from all aggregates
    """

    id: str
    name: str
    configuration: LoanConfiguration
    bank_type: BankType
    start_date: date
    notes: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class MortgagePortfolio:
    id: str
    name: str
    owner: str = ""
    mortgages: tuple[MortgageEntry, ...] = ()
    created_at: date = field(default_factory=date.today)
    updated_at: date = field(default_factory=date.today)

    @property
    def active_mortgages(self) -> tuple[MortgageEntry, ...]:
        return tuple(m for m in self.mortgages if m.is_active)

    def get(self, mortgage_id: str) -> MortgageEntry | None:
        return next((m for m in self.mortgages if m.id == mortgage_id), None)


def create_portfolio(
    name: str,
    owner: str = "",
    mortgages: tuple[MortgageEntry, ...] = (),
    portfolio_id: str | None = None,
) -> Result[MortgagePortfolio]:
    """Create a portfolio; the name may not be blank and ids must be unique."""
    if not name.strip():
        return Result.fail(PortfolioError.INVALID_PORTFOLIO_NAME)
    ids = [m.id for m in mortgages]
    if len(ids) != len(set(ids)):
        return Result.fail(PortfolioError.DUPLICATE_MORTGAGE_ID)
    return Result.ok(
        MortgagePortfolio(
            id=portfolio_id or uuid.uuid4().hex,
            name=name.strip(),
            owner=owner.strip(),
            mortgages=tuple(mortgages),
        )
    )


def add_mortgage(portfolio: MortgagePortfolio, mortgage: MortgageEntry) -> Result[MortgagePortfolio]:
    if portfolio.get(mortgage.id) is not None:
        return Result.fail(PortfolioError.DUPLICATE_MORTGAGE_ID)
    return Result.ok(
        replace(portfolio, mortgages=(*portfolio.mortgages, mortgage), updated_at=date.today())
    )


def remove_mortgage(portfolio: MortgagePortfolio, mortgage_id: str) -> Result[MortgagePortfolio]:
    if portfolio.get(mortgage_id) is None:
        return Result.fail(PortfolioError.MORTGAGE_NOT_FOUND)
    remaining = tuple(m for m in portfolio.mortgages if m.id != mortgage_id)
    return Result.ok(replace(portfolio, mortgages=remaining, updated_at=date.today()))


def update_mortgage(
    portfolio: MortgagePortfolio, mortgage_id: str, **changes
) -> Result[MortgagePortfolio]:
    """
    Replace fields of one entry.

    Args:
        portfolio: Portfolio holding the entry
        mortgage_id: Id of the entry to change
        **changes: MortgageEntry fields to replace; ``id`` cannot be changed

    Returns:
        Result with the new portfolio, MortgageNotFound for an unknown id or
        InvalidMortgageEntry for unknown fields or an id change
    """
    if portfolio.get(mortgage_id) is None:
        return Result.fail(PortfolioError.MORTGAGE_NOT_FOUND)
    if "id" in changes:
        return Result.fail(PortfolioError.INVALID_MORTGAGE_ENTRY)
    try:
        mortgages = tuple(
            replace(m, **changes) if m.id == mortgage_id else m for m in portfolio.mortgages
        )
    except TypeError:
        return Result.fail(PortfolioError.INVALID_MORTGAGE_ENTRY)
    return Result.ok(replace(portfolio, mortgages=mortgages, updated_at=date.today()))


# --- Aggregates -------------------------------------------------------------


@dataclass(frozen=True)
class PortfolioSummary:
    """
    Totals over the active mortgages of a portfolio.

    Attributes:
        total_principal: Sum of loan amounts
        total_monthly_payment: Sum of regular payments
        average_interest_rate: Principal-weighted rate, two decimals
        active_mortgages: Number of active entries
        total_mortgages: Number of entries including inactive ones
        total_interest: Interest over the full terms without extra payments
    """

    total_principal: Money
    total_monthly_payment: Money
    average_interest_rate: float
    active_mortgages: int
    total_mortgages: int
    total_interest: float


def calculate_portfolio_summary(portfolio: MortgagePortfolio) -> Result[PortfolioSummary]:
    active = portfolio.active_mortgages
    principal = sum(m.configuration.amount.euros for m in active)
    payment = sum(m.configuration.monthly_payment.euros for m in active)
    weighted = sum(m.configuration.amount.euros * m.configuration.annual_rate.value for m in active)

    total_principal = create_money(principal)
    total_payment = create_money(payment)
    if not total_principal or not total_payment:
        return Result.fail(PortfolioError.INVALID_MORTGAGE_ENTRY)

    summary = PortfolioSummary(
        total_principal=total_principal.data,
        total_monthly_payment=total_payment.data,
        average_interest_rate=round(weighted / principal, 2) if principal > 0 else 0.0,
        active_mortgages=len(active),
        total_mortgages=len(portfolio.mortgages),
        total_interest=round(sum(m.configuration.total_interest for m in active), 2),
    )
    logger.debug(
        "Portfolio %s: %d/%d active, principal %.2f, avg rate %.2f",
        portfolio.id,
        summary.active_mortgages,
        summary.total_mortgages,
        principal,
        summary.average_interest_rate,
    )
    return Result.ok(summary)


def portfolio_to_frame(portfolio: MortgagePortfolio) -> pd.DataFrame:
    """One row per mortgage, indexed by id."""
    rows = [
        {
            "id": m.id,
            "name": m.name,
            "bank_type": m.bank_type.value,
            "start_date": m.start_date,
            "is_active": m.is_active,
            **m.configuration.get_loan_parameters(),
        }
        for m in portfolio.mortgages
    ]
    columns = [
        "id",
        "name",
        "bank_type",
        "start_date",
        "is_active",
        "amount",
        "annual_rate",
        "term_in_months",
        "monthly_payment",
    ]
    return pd.DataFrame(rows, columns=columns).set_index("id")


@dataclass(frozen=True)
class OptimizationOpportunities:
    """Active mortgages worth a closer look, grouped by reason."""

    refinancing: tuple[MortgageEntry, ...]
    consolidation: tuple[MortgageEntry, ...]
    high_interest: tuple[MortgageEntry, ...]
    average_rate: float


def find_optimization_opportunities(portfolio: MortgagePortfolio) -> Result[OptimizationOpportunities]:
    """
    Flag refinancing candidates (rate more than one point above the simple
    average), consolidation candidates (below 100,000 EUR) and loans above 5 %.
    """
    active = portfolio.active_mortgages
    if not active:
        return Result.fail(PortfolioError.EMPTY_PORTFOLIO)

    rates = np.array([m.configuration.annual_rate.value for m in active])
    average = float(rates.mean())
    return Result.ok(
        OptimizationOpportunities(
            refinancing=tuple(
                m for m, r in zip(active, rates) if r > average + REFINANCING_RATE_MARGIN
            ),
            consolidation=tuple(
                m for m in active if m.configuration.amount.euros < CONSOLIDATION_MAX_AMOUNT
            ),
            high_interest=tuple(m for m, r in zip(active, rates) if r > HIGH_INTEREST_RATE),
            average_rate=round(average, 2),
        )
    )


@dataclass(frozen=True)
class CashFlowProjection:
    """
    Month-by-month totals over the active mortgages.

    Index ``i`` of every array is schedule month ``i + 1`` of each loan.
    """

    payments: np.ndarray
    interest: np.ndarray
    remaining_balance: np.ndarray

    @property
    def cumulative_interest(self) -> np.ndarray:
        return np.round(np.cumsum(self.interest), 2)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "payments": self.payments,
                "interest": self.interest,
                "cumulative_interest": self.cumulative_interest,
                "remaining_balance": self.remaining_balance,
            },
            index=pd.RangeIndex(1, len(self.payments) + 1, name="month"),
        )


def project_cash_flow(portfolio: MortgagePortfolio, months: int) -> Result[CashFlowProjection]:
    """
    Sum the amortization schedules of all active mortgages over ``months``.

    Loans that are paid off contribute zero from their payoff month on.
    """
    if months <= 0:
        return Result.fail(PortfolioError.INVALID_MORTGAGE_ENTRY)

    payments = np.zeros(months)
    interest = np.zeros(months)
    balance = np.zeros(months)
    for mortgage in portfolio.active_mortgages:
        schedule = generate_amortization_schedule(mortgage.configuration)
        if not schedule:
            return schedule.map_error(PortfolioError.INVALID_MORTGAGE_ENTRY)
        rows = schedule.data.entries[:months]
        n = len(rows)
        payments[:n] += [r.total_payment for r in rows]
        interest[:n] += [r.interest_component for r in rows]
        balance[:n] += [r.remaining_balance for r in rows]

    return Result.ok(
        CashFlowProjection(
            payments=np.round(payments, 2),
            interest=np.round(interest, 2),
            remaining_balance=np.round(balance, 2),
        )
    )
