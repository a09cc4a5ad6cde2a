from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import text

from brand_ledger.errors import AlreadyProcessedError, StoreError
from brand_ledger.models import Notification, PendingCost, PendingStatus
from brand_ledger.workflow import ApprovalWorkflow
from finance_api.db.store import SqlLedgerStore
from finance_api.models import CashTransaction, Cost, Employee, SalaryPayment, Wallet, WalletTransaction
from finance_api.models import Notification as NotificationRow
from finance_api.models import PendingCost as PendingCostRow

BRAND = "brand-a"
NOW = datetime(2025, 3, 20, 9, 0, tzinfo=timezone.utc)


class FailingCashStore(SqlLedgerStore):
    def insert_cash_transaction(self, tx):
        raise StoreError("cash ledger unavailable")


def seed_ledger(session) -> tuple[str, str]:
    employee = Employee(brand_id=BRAND, name="Omar", monthly_salary=Decimal("4000"), start_date=date(2024, 1, 1))
    wallet = Wallet(
        brand_id=BRAND,
        name="Main",
        type="bank",
        current_balance=Decimal("10000"),
        monthly_budget=Decimal("8000"),
        is_basic=True,
    )
    session.add_all([employee, wallet])
    session.commit()
    return employee.id, wallet.id


def queue_pending(store, employee_id, amount="4000") -> str:
    return ApprovalWorkflow(store, clock=lambda: NOW).submit_salary_payment(
        BRAND, employee_id, amount, date(2025, 3, 15), "March 2025"
    ).pending_cost_id


def test_compare_and_set_only_succeeds_once(session):
    store = SqlLedgerStore(session)
    with store.transaction():
        pending_id = store.insert_pending_cost(
            PendingCost(
                brand_id=BRAND,
                amount=Decimal("100"),
                category="salaries",
                description="Salary payment",
                payment_date=date(2025, 3, 1),
            )
        )

    with store.transaction():
        first = store.compare_and_set_pending_cost_status(
            pending_id, PendingStatus.PENDING, PendingStatus.APPROVED, "user-1", NOW
        )
        second = store.compare_and_set_pending_cost_status(
            pending_id, PendingStatus.PENDING, PendingStatus.DECLINED, "user-2", NOW
        )

    assert (first, second) == (True, False)
    stored = store.get_pending_cost(BRAND, pending_id)
    assert stored.status == PendingStatus.APPROVED
    assert stored.approved_by == "user-1"
    assert store.get_pending_cost("brand-b", pending_id) is None


def test_failed_approval_rolls_back_every_write(session):
    employee_id, wallet_id = seed_ledger(session)
    store = FailingCashStore(session)
    pending_id = queue_pending(store, employee_id)

    with pytest.raises(StoreError):
        ApprovalWorkflow(store, clock=lambda: NOW).approve_or_decline(BRAND, pending_id, "user-1", "approve")

    assert session.get(PendingCostRow, pending_id).status == "pending"
    assert session.get(Wallet, wallet_id).current_balance == Decimal("10000")
    assert session.query(Cost).count() == 0
    assert session.query(WalletTransaction).count() == 0
    assert session.query(CashTransaction).count() == 0

    # the row is still claimable once the failure is gone
    outcome = ApprovalWorkflow(SqlLedgerStore(session), clock=lambda: NOW).approve_or_decline(
        BRAND, pending_id, "user-1", "approve"
    )
    assert outcome.status == PendingStatus.APPROVED
    assert session.get(Wallet, wallet_id).current_balance == Decimal("6000")


def test_second_decision_is_already_processed(session):
    employee_id, _ = seed_ledger(session)
    store = SqlLedgerStore(session)
    pending_id = queue_pending(store, employee_id)
    workflow = ApprovalWorkflow(store, clock=lambda: NOW)

    workflow.approve_or_decline(BRAND, pending_id, "user-1", "decline")
    with pytest.raises(AlreadyProcessedError):
        workflow.approve_or_decline(BRAND, pending_id, "user-2", "approve")

    assert session.query(SalaryPayment).count() == 0
    assert session.query(Cost).count() == 0


def test_database_errors_surface_as_store_errors(session):
    store = SqlLedgerStore(session)

    with pytest.raises(StoreError) as excinfo:
        with store.transaction():
            store.insert_notification(Notification(brand_id=BRAND, type="system", title=None, message="broken"))

    assert excinfo.value.cause is not None
    assert session.query(Cost).count() == 0


def test_wallet_deductions_are_summed_per_month(session):
    employee_id, wallet_id = seed_ledger(session)
    store = SqlLedgerStore(session)
    workflow = ApprovalWorkflow(store, clock=lambda: NOW)
    for amount in ("1000", "1500"):
        workflow.approve_or_decline(BRAND, queue_pending(store, employee_id, amount), "user-1", "approve")

    assert store.sum_wallet_deductions_in_month(wallet_id, "2025-03") == Decimal("2500")
    assert store.sum_wallet_deductions_in_month(wallet_id, "2025-04") == Decimal("0")
    assert store.sum_costs_in_range(BRAND, date(2025, 3, 1), date(2025, 3, 31)) == Decimal("2500")


class BrokenBudgetTableStore(SqlLedgerStore):
    def get_monthly_budget(self, brand_id, month):
        self.session.execute(text("SELECT budget_limit FROM monthly_budget_archive"))


class BrokenDeductionsStore(SqlLedgerStore):
    def sum_wallet_deductions_in_month(self, wallet_id, month):
        raise ConnectionError("wallet ledger unreachable")


@pytest.mark.parametrize("store_class", [BrokenBudgetTableStore, BrokenDeductionsStore])
def test_budget_lookup_failure_still_approves(session, store_class):
    employee_id, wallet_id = seed_ledger(session)
    store = store_class(session)
    pending_id = queue_pending(store, employee_id)

    outcome = ApprovalWorkflow(store, clock=lambda: NOW).approve_or_decline(BRAND, pending_id, "user-1", "approve")

    assert outcome.status == PendingStatus.APPROVED
    assert session.get(PendingCostRow, pending_id).status == "approved"
    assert session.query(Cost).count() == 1
    assert session.query(CashTransaction).count() == 1
    assert session.get(Wallet, wallet_id).current_balance == Decimal("6000")


def test_savepoint_rolls_back_only_its_own_writes(session):
    store = SqlLedgerStore(session)

    with store.transaction():
        kept = store.insert_notification(Notification(brand_id=BRAND, type="system", title="kept", message="m"))
        with pytest.raises(RuntimeError):
            with store.savepoint():
                store.insert_notification(Notification(brand_id=BRAND, type="system", title="dropped", message="m"))
                raise RuntimeError("abort savepoint")

    titles = [row.title for row in session.query(NotificationRow).all()]
    assert titles == ["kept"]
    assert kept
