from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import ContextManager, Dict, Iterator, List, Optional, Protocol
from uuid import uuid4

from .budget import month_bounds
from .models import (
    CashTransaction,
    Cost,
    Employee,
    MonthlyBudget,
    Notification,
    PendingCost,
    PendingStatus,
    SalaryPayment,
    TransactionType,
    Wallet,
    WalletTransaction,
    WalletTransfer,
)


class LedgerStore(Protocol):
    """Reads and writes the approval workflow needs from persistence."""

    def transaction(self) -> ContextManager["LedgerStore"]: ...

    def savepoint(self) -> ContextManager["LedgerStore"]: ...

    def get_employee(self, brand_id: str, employee_id: str) -> Optional[Employee]: ...

    def get_salary_payment(self, brand_id: str, payment_id: str) -> Optional[SalaryPayment]: ...

    def insert_salary_payment(self, payment: SalaryPayment) -> str: ...

    def update_salary_payment(self, payment: SalaryPayment) -> None: ...

    def delete_salary_payment(self, payment_id: str) -> None: ...

    def update_salary_payment_cash_tx_ref(self, payment_id: str, cash_tx_id: str) -> None: ...

    def insert_pending_cost(self, pending: PendingCost) -> str: ...

    def get_pending_cost(self, brand_id: str, pending_cost_id: str) -> Optional[PendingCost]: ...

    def get_pending_cost_for_payment(self, brand_id: str, salary_payment_id: str) -> Optional[PendingCost]: ...

    def update_pending_cost_details(
        self, pending_cost_id: str, amount: Decimal, payment_date: date, description: str
    ) -> bool: ...

    def compare_and_set_pending_cost_status(
        self,
        pending_cost_id: str,
        expected: PendingStatus,
        next_status: PendingStatus,
        actor_user_id: str,
        at: datetime,
    ) -> bool: ...

    def insert_cost(self, cost: Cost) -> str: ...

    def sum_costs_in_range(self, brand_id: str, start: date, end: date) -> Decimal: ...

    def get_basic_active_wallet(self, brand_id: str) -> Optional[Wallet]: ...

    def get_wallet(self, brand_id: str, wallet_id: str, for_update: bool = False) -> Optional[Wallet]: ...

    def update_wallet_balance(self, wallet_id: str, new_balance: Decimal) -> None: ...

    def insert_wallet_transaction(self, tx: WalletTransaction) -> str: ...

    def insert_wallet_transfer(self, transfer: WalletTransfer) -> str: ...

    def sum_wallet_deductions_in_month(self, wallet_id: str, month: str) -> Decimal: ...

    def insert_cash_transaction(self, tx: CashTransaction) -> str: ...

    def get_monthly_budget(self, brand_id: str, month: str) -> Optional[MonthlyBudget]: ...

    def insert_notification(self, notification: Notification) -> str: ...


def _new_id() -> str:
    return str(uuid4())


class InMemoryLedgerStore:
    """Dictionary backed store.

    ``transaction()`` holds a re-entrant lock and snapshots every table so an
    exception inside the block restores the previous state.
    """

    _TABLES = (
        "employees",
        "salary_payments",
        "pending_costs",
        "costs",
        "wallets",
        "wallet_transactions",
        "wallet_transfers",
        "cash_transactions",
        "monthly_budgets",
        "notifications",
    )

    def __init__(self) -> None:
        self.employees: Dict[str, Employee] = {}
        self.salary_payments: Dict[str, SalaryPayment] = {}
        self.pending_costs: Dict[str, PendingCost] = {}
        self.costs: Dict[str, Cost] = {}
        self.wallets: Dict[str, Wallet] = {}
        self.wallet_transactions: Dict[str, WalletTransaction] = {}
        self.wallet_transfers: Dict[str, WalletTransfer] = {}
        self.cash_transactions: Dict[str, CashTransaction] = {}
        self.monthly_budgets: Dict[tuple, MonthlyBudget] = {}
        self.notifications: Dict[str, Notification] = {}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator["InMemoryLedgerStore"]:
        with self._lock:
            snapshot = {name: copy.deepcopy(getattr(self, name)) for name in self._TABLES}
            try:
                yield self
            except Exception:
                for name, table in snapshot.items():
                    setattr(self, name, table)
                raise

    def savepoint(self) -> ContextManager["InMemoryLedgerStore"]:
        # a nested transaction() already restores its own snapshot
        return self.transaction()

    # seeding helpers
    def add_employee(self, employee: Employee) -> None:
        self.employees[employee.id] = employee

    def add_wallet(self, wallet: Wallet) -> None:
        self.wallets[wallet.id] = wallet

    def set_monthly_budget(self, budget: MonthlyBudget) -> None:
        self.monthly_budgets[(budget.brand_id, budget.month)] = budget

    # employees and salary payments
    def get_employee(self, brand_id: str, employee_id: str) -> Optional[Employee]:
        employee = self.employees.get(employee_id)
        if employee is None or employee.brand_id != brand_id:
            return None
        return employee

    def get_salary_payment(self, brand_id: str, payment_id: str) -> Optional[SalaryPayment]:
        payment = self.salary_payments.get(payment_id)
        if payment is None or payment.brand_id != brand_id:
            return None
        return replace(payment)

    def insert_salary_payment(self, payment: SalaryPayment) -> str:
        payment_id = payment.id or _new_id()
        self.salary_payments[payment_id] = replace(payment, id=payment_id)
        return payment_id

    def update_salary_payment(self, payment: SalaryPayment) -> None:
        if payment.id in self.salary_payments:
            self.salary_payments[payment.id] = replace(payment)

    def delete_salary_payment(self, payment_id: str) -> None:
        self.salary_payments.pop(payment_id, None)

    def update_salary_payment_cash_tx_ref(self, payment_id: str, cash_tx_id: str) -> None:
        payment = self.salary_payments.get(payment_id)
        if payment is not None:
            payment.cash_transaction_id = cash_tx_id

    # pending costs
    def insert_pending_cost(self, pending: PendingCost) -> str:
        pending_id = pending.id or _new_id()
        self.pending_costs[pending_id] = replace(pending, id=pending_id)
        return pending_id

    def get_pending_cost(self, brand_id: str, pending_cost_id: str) -> Optional[PendingCost]:
        pending = self.pending_costs.get(pending_cost_id)
        if pending is None or pending.brand_id != brand_id:
            return None
        return replace(pending)

    def get_pending_cost_for_payment(self, brand_id: str, salary_payment_id: str) -> Optional[PendingCost]:
        for pending in self.pending_costs.values():
            if pending.brand_id == brand_id and pending.salary_payment_id == salary_payment_id:
                return replace(pending)
        return None

    def update_pending_cost_details(
        self, pending_cost_id: str, amount: Decimal, payment_date: date, description: str
    ) -> bool:
        with self._lock:
            pending = self.pending_costs.get(pending_cost_id)
            if pending is None or not pending.is_pending:
                return False
            pending.amount = amount
            pending.payment_date = payment_date
            pending.description = description
            return True

    def compare_and_set_pending_cost_status(
        self,
        pending_cost_id: str,
        expected: PendingStatus,
        next_status: PendingStatus,
        actor_user_id: str,
        at: datetime,
    ) -> bool:
        with self._lock:
            pending = self.pending_costs.get(pending_cost_id)
            if pending is None or pending.status != expected:
                return False
            pending.status = next_status
            pending.approved_by = actor_user_id
            pending.approved_at = at
            return True

    # costs
    def insert_cost(self, cost: Cost) -> str:
        cost_id = cost.id or _new_id()
        self.costs[cost_id] = replace(cost, id=cost_id)
        return cost_id

    def sum_costs_in_range(self, brand_id: str, start: date, end: date) -> Decimal:
        return sum(
            (c.amount for c in self.costs.values() if c.brand_id == brand_id and start <= c.date <= end),
            Decimal("0"),
        )

    # wallets
    def get_basic_active_wallet(self, brand_id: str) -> Optional[Wallet]:
        matches = [
            w for w in self.wallets.values() if w.brand_id == brand_id and w.is_basic and w.is_active
        ]
        return replace(matches[0]) if matches else None

    def get_wallet(self, brand_id: str, wallet_id: str, for_update: bool = False) -> Optional[Wallet]:
        wallet = self.wallets.get(wallet_id)
        if wallet is None or wallet.brand_id != brand_id:
            return None
        return replace(wallet)

    def update_wallet_balance(self, wallet_id: str, new_balance: Decimal) -> None:
        self.wallets[wallet_id].current_balance = new_balance

    def insert_wallet_transaction(self, tx: WalletTransaction) -> str:
        tx_id = tx.id or _new_id()
        self.wallet_transactions[tx_id] = replace(tx, id=tx_id)
        return tx_id

    def insert_wallet_transfer(self, transfer: WalletTransfer) -> str:
        transfer_id = transfer.id or _new_id()
        self.wallet_transfers[transfer_id] = replace(transfer, id=transfer_id)
        return transfer_id

    def sum_wallet_deductions_in_month(self, wallet_id: str, month: str) -> Decimal:
        start, end = month_bounds(month)
        return sum(
            (
                tx.amount
                for tx in self.wallet_transactions.values()
                if tx.wallet_id == wallet_id
                and tx.transaction_type == TransactionType.COST_DEDUCTION
                and start <= tx.transaction_date <= end
            ),
            Decimal("0"),
        )

    def transactions_for_wallet(self, wallet_id: str) -> List[WalletTransaction]:
        return sorted(
            (tx for tx in self.wallet_transactions.values() if tx.wallet_id == wallet_id),
            key=lambda tx: tx.transaction_date,
        )

    # cash flow
    def insert_cash_transaction(self, tx: CashTransaction) -> str:
        tx_id = tx.id or _new_id()
        self.cash_transactions[tx_id] = replace(tx, id=tx_id)
        return tx_id

    # budgets and notifications
    def get_monthly_budget(self, brand_id: str, month: str) -> Optional[MonthlyBudget]:
        return self.monthly_budgets.get((brand_id, month))

    def insert_notification(self, notification: Notification) -> str:
        notification_id = notification.id or _new_id()
        self.notifications[notification_id] = replace(notification, id=notification_id)
        return notification_id
