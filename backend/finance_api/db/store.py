"""SQLAlchemy implementation of ``brand_ledger.store.LedgerStore``."""

from __future__ import annotations

import functools
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from brand_ledger import models as domain
from brand_ledger.budget import month_bounds
from brand_ledger.errors import StoreError
from finance_api import models as orm
from finance_api.core.logging import get_logger

logger = get_logger(__name__)


def _store_errors(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("store_operation_failed", operation=method.__name__, error=str(exc))
            raise StoreError(f"{method.__name__} failed", cause=exc) from exc

    return wrapper


def _employee(row: orm.Employee) -> domain.Employee:
    return domain.Employee(
        id=row.id,
        brand_id=row.brand_id,
        name=row.name,
        position=row.position,
        monthly_salary=row.monthly_salary,
        start_date=row.start_date,
        end_date=row.end_date,
        active=row.active,
        auto_payment=row.auto_payment,
    )


def _pending_cost(row: orm.PendingCost) -> domain.PendingCost:
    return domain.PendingCost(
        id=row.id,
        brand_id=row.brand_id,
        employee_id=row.employee_id,
        salary_payment_id=row.salary_payment_id,
        amount=Decimal(row.amount),
        category=row.category,
        description=row.description,
        payment_date=row.payment_date,
        status=domain.PendingStatus(row.status),
        approved_by=row.approved_by,
        approved_at=row.approved_at,
    )


def _salary_payment(row: orm.SalaryPayment) -> domain.SalaryPayment:
    return domain.SalaryPayment(
        id=row.id,
        brand_id=row.brand_id,
        employee_id=row.employee_id,
        amount=Decimal(row.amount),
        payment_date=row.payment_date,
        period_month=row.period_month,
        note=row.note,
        cash_transaction_id=row.cash_transaction_id,
    )


def _wallet(row: orm.Wallet) -> domain.Wallet:
    return domain.Wallet(
        id=row.id,
        brand_id=row.brand_id,
        name=row.name,
        type=row.type,
        currency=row.currency,
        current_balance=Decimal(row.current_balance),
        monthly_budget=Decimal(row.monthly_budget) if row.monthly_budget is not None else None,
        is_basic=row.is_basic,
        is_active=row.is_active,
    )


class SqlLedgerStore:
    """Ledger store bound to one SQLAlchemy session.

    ``transaction()`` is re-entrant: only the outermost block commits or
    rolls back, so ledger calls made inside the approval saga join its
    transaction.
    """

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["SqlLedgerStore"]:
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self.session.commit()
        except SQLAlchemyError as exc:
            if self._depth == 1:
                self.session.rollback()
            raise StoreError("transaction failed", cause=exc) from exc
        except Exception:
            if self._depth == 1:
                self.session.rollback()
            raise
        finally:
            self._depth -= 1

    @contextmanager
    def savepoint(self) -> Iterator["SqlLedgerStore"]:
        """Run a block under SAVEPOINT so its failure leaves the outer transaction usable."""
        nested = self.session.begin_nested()
        try:
            yield self
        except Exception:
            nested.rollback()
            raise
        nested.commit()

    def _add(self, row) -> str:
        self.session.add(row)
        self.session.flush()
        return row.id

    @_store_errors
    def get_employee(self, brand_id: str, employee_id: str) -> Optional[domain.Employee]:
        row = (
            self.session.query(orm.Employee)
            .filter(orm.Employee.id == employee_id, orm.Employee.brand_id == brand_id)
            .one_or_none()
        )
        return _employee(row) if row else None

    @_store_errors
    def insert_salary_payment(self, payment: domain.SalaryPayment) -> str:
        return self._add(
            orm.SalaryPayment(
                brand_id=payment.brand_id,
                employee_id=payment.employee_id,
                amount=payment.amount,
                payment_date=payment.payment_date,
                period_month=payment.period_month,
                note=payment.note,
            )
        )

    @_store_errors
    def get_salary_payment(self, brand_id: str, payment_id: str) -> Optional[domain.SalaryPayment]:
        row = (
            self.session.query(orm.SalaryPayment)
            .filter(orm.SalaryPayment.id == payment_id, orm.SalaryPayment.brand_id == brand_id)
            .populate_existing()
            .one_or_none()
        )
        return _salary_payment(row) if row else None

    @_store_errors
    def update_salary_payment(self, payment: domain.SalaryPayment) -> None:
        self.session.execute(
            update(orm.SalaryPayment)
            .where(orm.SalaryPayment.id == payment.id)
            .values(
                amount=payment.amount,
                payment_date=payment.payment_date,
                period_month=payment.period_month,
                note=payment.note,
            )
            .execution_options(synchronize_session=False)
        )

    @_store_errors
    def delete_salary_payment(self, payment_id: str) -> None:
        self.session.query(orm.SalaryPayment).filter(orm.SalaryPayment.id == payment_id).delete(
            synchronize_session=False
        )

    @_store_errors
    def update_salary_payment_cash_tx_ref(self, payment_id: str, cash_tx_id: str) -> None:
        self.session.execute(
            update(orm.SalaryPayment)
            .where(orm.SalaryPayment.id == payment_id)
            .values(cash_transaction_id=cash_tx_id)
            .execution_options(synchronize_session=False)
        )

    @_store_errors
    def insert_pending_cost(self, pending: domain.PendingCost) -> str:
        return self._add(
            orm.PendingCost(
                brand_id=pending.brand_id,
                employee_id=pending.employee_id,
                salary_payment_id=pending.salary_payment_id,
                amount=pending.amount,
                category=pending.category,
                description=pending.description,
                payment_date=pending.payment_date,
                status=pending.status.value,
            )
        )

    @_store_errors
    def get_pending_cost(self, brand_id: str, pending_cost_id: str) -> Optional[domain.PendingCost]:
        row = (
            self.session.query(orm.PendingCost)
            .filter(orm.PendingCost.id == pending_cost_id, orm.PendingCost.brand_id == brand_id)
            .populate_existing()
            .one_or_none()
        )
        return _pending_cost(row) if row else None

    @_store_errors
    def get_pending_cost_for_payment(self, brand_id: str, salary_payment_id: str) -> Optional[domain.PendingCost]:
        row = (
            self.session.query(orm.PendingCost)
            .filter(orm.PendingCost.salary_payment_id == salary_payment_id, orm.PendingCost.brand_id == brand_id)
            .order_by(orm.PendingCost.created_at.desc())
            .populate_existing()
            .first()
        )
        return _pending_cost(row) if row else None

    @_store_errors
    def update_pending_cost_details(
        self, pending_cost_id: str, amount: Decimal, payment_date: date, description: str
    ) -> bool:
        result = self.session.execute(
            update(orm.PendingCost)
            .where(
                orm.PendingCost.id == pending_cost_id,
                orm.PendingCost.status == domain.PendingStatus.PENDING.value,
            )
            .values(amount=amount, payment_date=payment_date, description=description)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @_store_errors
    def compare_and_set_pending_cost_status(
        self,
        pending_cost_id: str,
        expected: domain.PendingStatus,
        next_status: domain.PendingStatus,
        actor_user_id: str,
        at: datetime,
    ) -> bool:
        result = self.session.execute(
            update(orm.PendingCost)
            .where(orm.PendingCost.id == pending_cost_id, orm.PendingCost.status == expected.value)
            .values(status=next_status.value, approved_by=actor_user_id, approved_at=at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @_store_errors
    def insert_cost(self, cost: domain.Cost) -> str:
        return self._add(
            orm.Cost(
                brand_id=cost.brand_id,
                date=cost.date,
                amount=cost.amount,
                category=cost.category,
                note=cost.note,
                source=cost.source,
            )
        )

    @_store_errors
    def sum_costs_in_range(self, brand_id: str, start: date, end: date) -> Decimal:
        total = (
            self.session.query(func.coalesce(func.sum(orm.Cost.amount), 0))
            .filter(orm.Cost.brand_id == brand_id, orm.Cost.date >= start, orm.Cost.date <= end)
            .scalar()
        )
        return Decimal(total)

    @_store_errors
    def get_basic_active_wallet(self, brand_id: str) -> Optional[domain.Wallet]:
        rows = (
            self.session.query(orm.Wallet)
            .filter(orm.Wallet.brand_id == brand_id, orm.Wallet.is_basic.is_(True), orm.Wallet.is_active.is_(True))
            .order_by(orm.Wallet.created_at.asc(), orm.Wallet.id.asc())
            .limit(2)
            .all()
        )
        if len(rows) > 1:
            logger.warning("multiple_basic_wallets", brand_id=brand_id, wallet_id=rows[0].id)
        return _wallet(rows[0]) if rows else None

    @_store_errors
    def get_wallet(self, brand_id: str, wallet_id: str, for_update: bool = False) -> Optional[domain.Wallet]:
        query = self.session.query(orm.Wallet).filter(orm.Wallet.id == wallet_id, orm.Wallet.brand_id == brand_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        row = query.one_or_none()
        return _wallet(row) if row else None

    @_store_errors
    def update_wallet_balance(self, wallet_id: str, new_balance: Decimal) -> None:
        self.session.execute(
            update(orm.Wallet)
            .where(orm.Wallet.id == wallet_id)
            .values(current_balance=new_balance)
            .execution_options(synchronize_session=False)
        )

    @_store_errors
    def insert_wallet_transaction(self, tx: domain.WalletTransaction) -> str:
        return self._add(
            orm.WalletTransaction(
                brand_id=tx.brand_id,
                wallet_id=tx.wallet_id,
                amount=tx.amount,
                transaction_type=domain.TransactionType(tx.transaction_type).value,
                description=tx.description,
                transaction_date=tx.transaction_date,
                reference_type=tx.reference_type,
                reference_id=tx.reference_id,
            )
        )

    @_store_errors
    def insert_wallet_transfer(self, transfer: domain.WalletTransfer) -> str:
        return self._add(
            orm.WalletTransfer(
                brand_id=transfer.brand_id,
                from_wallet_id=transfer.from_wallet_id,
                to_wallet_id=transfer.to_wallet_id,
                amount=transfer.amount,
                description=transfer.description,
                transfer_date=transfer.transfer_date,
            )
        )

    @_store_errors
    def sum_wallet_deductions_in_month(self, wallet_id: str, month: str) -> Decimal:
        start, end = month_bounds(month)
        total = (
            self.session.query(func.coalesce(func.sum(orm.WalletTransaction.amount), 0))
            .filter(
                orm.WalletTransaction.wallet_id == wallet_id,
                orm.WalletTransaction.transaction_type == domain.TransactionType.COST_DEDUCTION.value,
                orm.WalletTransaction.transaction_date >= start,
                orm.WalletTransaction.transaction_date <= end,
            )
            .scalar()
        )
        return Decimal(total)

    @_store_errors
    def insert_cash_transaction(self, tx: domain.CashTransaction) -> str:
        return self._add(
            orm.CashTransaction(
                brand_id=tx.brand_id,
                date=tx.date,
                section=domain.CashSection(tx.section).value,
                category=tx.category,
                amount=tx.amount,
                description=tx.description,
                reference_type=tx.reference_type,
                reference_id=tx.reference_id,
            )
        )

    @_store_errors
    def get_monthly_budget(self, brand_id: str, month: str) -> Optional[domain.MonthlyBudget]:
        row = (
            self.session.query(orm.MonthlyBudget)
            .filter(orm.MonthlyBudget.brand_id == brand_id, orm.MonthlyBudget.month == month)
            .one_or_none()
        )
        if row is None:
            return None
        return domain.MonthlyBudget(brand_id=row.brand_id, month=row.month, budget_limit=Decimal(row.budget_limit))

    @_store_errors
    def insert_notification(self, notification: domain.Notification) -> str:
        return self._add(
            orm.Notification(
                brand_id=notification.brand_id,
                type=notification.type,
                title=notification.title,
                message=notification.message,
                action_url=notification.action_url,
                read=notification.read,
            )
        )
