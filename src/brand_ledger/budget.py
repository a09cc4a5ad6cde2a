from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Tuple

from .errors import InvalidArgumentError

DEFAULT_LOW_THRESHOLD_PCT = Decimal("20")


class BudgetLevel(str, Enum):
    OK = "ok"
    LOW = "low"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class BrandBudgetCheck:
    exceeded: bool
    new_total: Decimal
    limit: Decimal


@dataclass(frozen=True)
class WalletBudgetCheck:
    used: Decimal
    budget: Decimal
    remaining: Decimal
    remaining_pct: Decimal
    level: BudgetLevel

    @property
    def triggered(self) -> bool:
        return self.level != BudgetLevel.OK


def month_key(value: date) -> str:
    return value.strftime("%Y-%m")


def month_bounds(month: str) -> Tuple[date, date]:
    """Return the first and last calendar day of a ``YYYY-MM`` month."""

    try:
        year, mon = (int(part) for part in month.split("-"))
        first = date(year, mon, 1)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid month {month!r}, expected YYYY-MM") from exc
    last_day = calendar.monthrange(year, mon)[1]
    return first, date(year, mon, last_day)


def evaluate_brand_budget(existing_total: Decimal, new_amount: Decimal, limit: Decimal) -> BrandBudgetCheck:
    new_total = Decimal(existing_total) + Decimal(new_amount)
    return BrandBudgetCheck(exceeded=new_total > limit, new_total=new_total, limit=Decimal(limit))


def evaluate_wallet_budget(
    deductions_total: Decimal,
    monthly_budget: Decimal,
    low_threshold_pct: Decimal = DEFAULT_LOW_THRESHOLD_PCT,
) -> WalletBudgetCheck:
    """Classify a wallet's month-to-date deductions against its budget.

    ``deductions_total`` must already include the deduction being evaluated.
    """

    budget = Decimal(monthly_budget)
    if budget <= 0:
        raise InvalidArgumentError("Wallet monthly budget must be positive")
    used = Decimal(deductions_total)
    remaining = budget - used
    remaining_pct = remaining / budget * 100

    if remaining_pct <= 0:
        level = BudgetLevel.EXCEEDED
    elif remaining_pct <= low_threshold_pct:
        level = BudgetLevel.LOW
    else:
        level = BudgetLevel.OK

    return WalletBudgetCheck(
        used=used,
        budget=budget,
        remaining=remaining,
        remaining_pct=remaining_pct,
        level=level,
    )
