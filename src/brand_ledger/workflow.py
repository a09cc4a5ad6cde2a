"""Salary payment submission and the pending-cost approval saga.

Approval runs the compare-and-set gate first and then, inside one store
transaction, writes the Cost, debits the basic wallet, records the cash
transaction and links it back to the salary payment. Budget alerts are
collected during the transaction and emitted only after it commits.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional

import structlog

from .budget import DEFAULT_LOW_THRESHOLD_PCT, evaluate_brand_budget, evaluate_wallet_budget, month_bounds, month_key
from .errors import AlreadyProcessedError, InvalidArgumentError, NotFoundError
from .models import (
    SALARY_PAYMENT_REFERENCE,
    Action,
    ApprovalOutcome,
    CashSection,
    CashTransaction,
    Cost,
    Notification,
    PendingCost,
    PendingStatus,
    SalaryPayment,
    SubmissionOutcome,
    TransactionType,
    Wallet,
)
from .notifications import NotificationEmitter
from .store import LedgerStore
from .wallet_ledger import WalletLedger

logger = structlog.get_logger(__name__)

SALARY_CATEGORY = "salaries"
DEFAULT_COST_CATEGORY = "operational"
COST_SOURCE = "manual"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_action(value) -> Action:
    try:
        return Action(value)
    except ValueError as exc:
        raise InvalidArgumentError("Invalid action") from exc


def parse_amount(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid amount {value!r}") from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidArgumentError("Amount must be a positive number")
    return amount


class ApprovalWorkflow:
    def __init__(
        self,
        store: LedgerStore,
        emitter: Optional[NotificationEmitter] = None,
        cost_category: str = DEFAULT_COST_CATEGORY,
        low_threshold_pct: Decimal = DEFAULT_LOW_THRESHOLD_PCT,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.ledger = WalletLedger(store)
        self.emitter = emitter or NotificationEmitter(store)
        self.cost_category = cost_category
        self.low_threshold_pct = Decimal(low_threshold_pct)
        self.clock = clock

    def submit_salary_payment(
        self,
        brand_id: str,
        employee_id: str,
        amount,
        payment_date: date,
        period_month: str,
        note: Optional[str] = None,
    ) -> SubmissionOutcome:
        """Record a salary payment and queue it for approval."""

        if not employee_id or not period_month or payment_date is None:
            raise InvalidArgumentError("Missing required fields")
        amount = parse_amount(amount)

        employee = self.store.get_employee(brand_id, employee_id)
        if employee is None:
            raise NotFoundError("Employee not found")

        with self.store.transaction():
            payment_id = self.store.insert_salary_payment(
                SalaryPayment(
                    brand_id=brand_id,
                    employee_id=employee_id,
                    amount=amount,
                    payment_date=payment_date,
                    period_month=period_month,
                    note=note,
                )
            )
            pending_id = self.store.insert_pending_cost(
                PendingCost(
                    brand_id=brand_id,
                    employee_id=employee_id,
                    salary_payment_id=payment_id,
                    amount=amount,
                    category=SALARY_CATEGORY,
                    description=f"Salary payment for {employee.name} - {period_month}",
                    payment_date=payment_date,
                )
            )

        logger.info(
            "salary_payment_submitted",
            brand_id=brand_id,
            salary_payment_id=payment_id,
            pending_cost_id=pending_id,
            amount=str(amount),
        )
        self.emitter.emit(self.emitter.salary_payment_pending(brand_id, employee.name, amount, period_month))
        return SubmissionOutcome(salary_payment_id=payment_id, pending_cost_id=pending_id)

    def approve_or_decline(self, brand_id: str, pending_cost_id: str, actor_user_id: str, action) -> ApprovalOutcome:
        action = parse_action(action)
        if not pending_cost_id:
            raise InvalidArgumentError("Missing pending cost id")

        pending = self.store.get_pending_cost(brand_id, pending_cost_id)
        if pending is None:
            raise NotFoundError("Pending cost not found")
        if not pending.is_pending:
            raise AlreadyProcessedError(pending_cost_id, pending.status.value)

        if action == Action.DECLINE:
            return self._decline(pending, actor_user_id)
        return self._approve(pending, actor_user_id)

    def revise_salary_payment(
        self,
        brand_id: str,
        payment_id: str,
        amount,
        payment_date: date,
        period_month: str,
        note: Optional[str] = None,
    ) -> SalaryPayment:
        """Edit a salary payment that is still awaiting approval.

        The paired pending cost picks up the new amount, date and description
        in the same transaction. Once the cost is approved or declined the
        payment is frozen and ``AlreadyProcessedError`` is raised.
        """

        if not period_month or payment_date is None:
            raise InvalidArgumentError("Missing required fields")
        amount = parse_amount(amount)
        payment, pending = self._awaiting_approval(brand_id, payment_id)
        employee = self.store.get_employee(brand_id, payment.employee_id)
        name = employee.name if employee else "employee"
        revised = replace(payment, amount=amount, payment_date=payment_date, period_month=period_month, note=note)

        with self.store.transaction():
            updated = self.store.update_pending_cost_details(
                pending.id, amount, payment_date, f"Salary payment for {name} - {period_month}"
            )
            if not updated:
                raise AlreadyProcessedError(pending.id)
            self.store.update_salary_payment(revised)

        logger.info("salary_payment_revised", brand_id=brand_id, salary_payment_id=payment_id, amount=str(amount))
        return revised

    def withdraw_salary_payment(self, brand_id: str, payment_id: str, actor_user_id: str) -> ApprovalOutcome:
        """Delete a salary payment by declining its pending cost."""
        _, pending = self._awaiting_approval(brand_id, payment_id)
        return self._decline(pending, actor_user_id)

    def _awaiting_approval(self, brand_id: str, payment_id: str):
        payment = self.store.get_salary_payment(brand_id, payment_id)
        if payment is None:
            raise NotFoundError("Salary payment not found")
        pending = self.store.get_pending_cost_for_payment(brand_id, payment_id)
        if pending is None:
            raise NotFoundError("Pending cost not found")
        if not pending.is_pending:
            raise AlreadyProcessedError(pending.id, pending.status.value)
        return payment, pending

    def _claim(self, pending: PendingCost, next_status: PendingStatus, actor_user_id: str) -> None:
        claimed = self.store.compare_and_set_pending_cost_status(
            pending.id, PendingStatus.PENDING, next_status, actor_user_id, self.clock()
        )
        if not claimed:
            logger.warning("pending_cost_claim_lost", pending_cost_id=pending.id, wanted=next_status.value)
            raise AlreadyProcessedError(pending.id)

    def _decline(self, pending: PendingCost, actor_user_id: str) -> ApprovalOutcome:
        with self.store.transaction():
            self._claim(pending, PendingStatus.DECLINED, actor_user_id)
            if pending.salary_payment_id:
                self.store.delete_salary_payment(pending.salary_payment_id)

        logger.info("pending_cost_declined", brand_id=pending.brand_id, pending_cost_id=pending.id, actor_user_id=actor_user_id)
        return ApprovalOutcome(pending_cost_id=pending.id, status=PendingStatus.DECLINED)

    def _approve(self, pending: PendingCost, actor_user_id: str) -> ApprovalOutcome:
        brand_id = pending.brand_id
        month = month_key(pending.payment_date)
        alerts: List[Notification] = []
        wallet_tx_id = None

        with self.store.transaction():
            self._claim(pending, PendingStatus.APPROVED, actor_user_id)

            brand_alert = self._check_brand_budget(brand_id, month, pending.amount)
            if brand_alert is not None:
                alerts.append(brand_alert)

            cost_id = self.store.insert_cost(
                Cost(
                    brand_id=brand_id,
                    date=pending.payment_date,
                    amount=pending.amount,
                    category=self.cost_category,
                    note=pending.description,
                    source=COST_SOURCE,
                )
            )

            wallet = self.store.get_basic_active_wallet(brand_id)
            if wallet is not None:
                entry = self.ledger.debit(
                    brand_id,
                    wallet.id,
                    pending.amount,
                    pending.description,
                    pending.payment_date,
                    reference_type=SALARY_PAYMENT_REFERENCE,
                    reference_id=pending.salary_payment_id,
                    transaction_type=TransactionType.COST_DEDUCTION,
                )
                wallet_tx_id = entry.transaction_id
                wallet_alert = self._check_wallet_budget(brand_id, wallet, month)
                if wallet_alert is not None:
                    alerts.append(wallet_alert)
            else:
                logger.info("basic_wallet_missing", brand_id=brand_id, pending_cost_id=pending.id)

            cash_tx_id = self.store.insert_cash_transaction(
                CashTransaction(
                    brand_id=brand_id,
                    date=pending.payment_date,
                    section=CashSection.OPERATING,
                    category=SALARY_CATEGORY,
                    amount=-abs(pending.amount),
                    description=pending.description,
                    reference_type=SALARY_PAYMENT_REFERENCE,
                    reference_id=pending.salary_payment_id,
                )
            )
            if pending.salary_payment_id:
                self.store.update_salary_payment_cash_tx_ref(pending.salary_payment_id, cash_tx_id)

        logger.info(
            "pending_cost_approved",
            brand_id=brand_id,
            pending_cost_id=pending.id,
            actor_user_id=actor_user_id,
            cost_id=cost_id,
            cash_transaction_id=cash_tx_id,
            wallet_transaction_id=wallet_tx_id,
        )
        for alert in alerts:
            self.emitter.emit(alert)

        return ApprovalOutcome(
            pending_cost_id=pending.id,
            status=PendingStatus.APPROVED,
            cost_id=cost_id,
            cash_transaction_id=cash_tx_id,
            wallet_transaction_id=wallet_tx_id,
            notifications=alerts,
        )

    def _check_brand_budget(self, brand_id: str, month: str, amount: Decimal) -> Optional[Notification]:
        try:
            with self.store.savepoint():
                budget = self.store.get_monthly_budget(brand_id, month)
                if budget is None:
                    return None
                start, end = month_bounds(month)
                existing = self.store.sum_costs_in_range(brand_id, start, end)
        except Exception as exc:
            logger.warning("brand_budget_check_failed", brand_id=brand_id, month=month, error=str(exc))
            return None

        check = evaluate_brand_budget(existing, amount, budget.budget_limit)
        if not check.exceeded:
            return None
        logger.info("brand_budget_exceeded", brand_id=brand_id, month=month, new_total=str(check.new_total))
        return self.emitter.brand_budget_exceeded(brand_id, month, check)

    def _check_wallet_budget(self, brand_id: str, wallet: Wallet, month: str) -> Optional[Notification]:
        if not wallet.monthly_budget or wallet.monthly_budget <= 0:
            return None
        try:
            with self.store.savepoint():
                used = self.store.sum_wallet_deductions_in_month(wallet.id, month)
        except Exception as exc:
            logger.warning("wallet_budget_check_failed", wallet_id=wallet.id, month=month, error=str(exc))
            return None

        check = evaluate_wallet_budget(used, wallet.monthly_budget, self.low_threshold_pct)
        if check.triggered:
            logger.info("wallet_budget_alert", wallet_id=wallet.id, level=check.level.value, remaining=str(check.remaining))
        return self.emitter.wallet_budget(brand_id, wallet, check)
