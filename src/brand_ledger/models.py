from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class PendingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"


class Action(str, Enum):
    APPROVE = "approve"
    DECLINE = "decline"


class TransactionType(str, Enum):
    COST_DEDUCTION = "cost_deduction"
    ADD = "add"
    DEDUCT = "deduct"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"


class CashSection(str, Enum):
    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


SALARY_PAYMENT_REFERENCE = "salary_payment"


@dataclass
class Employee:
    id: str
    brand_id: str
    name: str
    monthly_salary: Decimal
    start_date: date
    position: Optional[str] = None
    end_date: Optional[date] = None
    active: bool = True
    auto_payment: bool = False


@dataclass
class SalaryPayment:
    brand_id: str
    employee_id: str
    amount: Decimal
    payment_date: date
    period_month: str  # free text, e.g. "March 2025"
    note: Optional[str] = None
    cash_transaction_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class PendingCost:
    brand_id: str
    amount: Decimal
    category: str
    description: str
    payment_date: date
    status: PendingStatus = PendingStatus.PENDING
    employee_id: Optional[str] = None
    salary_payment_id: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    id: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == PendingStatus.PENDING


@dataclass
class Cost:
    brand_id: str
    date: date
    amount: Decimal
    category: str
    note: str
    source: str = "manual"
    id: Optional[str] = None


@dataclass
class Wallet:
    id: str
    brand_id: str
    name: str
    current_balance: Decimal
    type: str = "cash"
    currency: str = "EGP"
    monthly_budget: Optional[Decimal] = None
    is_basic: bool = False
    is_active: bool = True


@dataclass
class WalletTransaction:
    brand_id: str
    wallet_id: str
    amount: Decimal  # always a positive magnitude
    transaction_type: TransactionType
    description: str
    transaction_date: date
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class WalletTransfer:
    brand_id: str
    from_wallet_id: str
    to_wallet_id: str
    amount: Decimal
    transfer_date: date
    description: Optional[str] = None
    id: Optional[str] = None


@dataclass
class CashTransaction:
    brand_id: str
    date: date
    section: CashSection
    category: str
    amount: Decimal  # signed, negative for outflow
    description: str
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    id: Optional[str] = None


@dataclass
class MonthlyBudget:
    brand_id: str
    month: str  # YYYY-MM
    budget_limit: Decimal


@dataclass
class Notification:
    brand_id: str
    type: str
    title: str
    message: str
    action_url: Optional[str] = None
    read: bool = False
    id: Optional[str] = None


@dataclass
class ApprovalOutcome:
    pending_cost_id: str
    status: PendingStatus
    cost_id: Optional[str] = None
    cash_transaction_id: Optional[str] = None
    wallet_transaction_id: Optional[str] = None
    notifications: List[Notification] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"status": self.status.value}


@dataclass
class SubmissionOutcome:
    salary_payment_id: str
    pending_cost_id: str
