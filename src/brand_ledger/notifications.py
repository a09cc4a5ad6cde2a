from __future__ import annotations

from decimal import Decimal
from typing import Optional

import structlog

from .budget import BrandBudgetCheck, BudgetLevel, WalletBudgetCheck
from .models import Notification, Wallet
from .store import LedgerStore

logger = structlog.get_logger(__name__)


def _money(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


class NotificationEmitter:
    """Persists notification rows. Failures are logged, never raised."""

    def __init__(self, store: LedgerStore, currency: str = "EGP"):
        self.store = store
        self.currency = currency

    def emit(self, notification: Notification) -> Optional[str]:
        try:
            with self.store.transaction():
                notification_id = self.store.insert_notification(notification)
        except Exception as exc:
            logger.warning(
                "notification_emit_failed",
                brand_id=notification.brand_id,
                title=notification.title,
                error=str(exc),
            )
            return None
        logger.info("notification_emitted", brand_id=notification.brand_id, type=notification.type, title=notification.title)
        return notification_id

    def salary_payment_pending(self, brand_id: str, employee_name: str, amount: Decimal, period_month: str) -> Notification:
        return Notification(
            brand_id=brand_id,
            type="payment",
            title="Pending Salary Payment",
            message=(
                f"Salary payment of {_money(amount)} {self.currency} for {employee_name} "
                f"({period_month}) is pending approval"
            ),
            action_url="/costs",
        )

    def brand_budget_exceeded(self, brand_id: str, month: str, check: BrandBudgetCheck) -> Notification:
        return Notification(
            brand_id=brand_id,
            type="system",
            title="Monthly Budget Exceeded",
            message=(
                f"Your costs for {month} ({_money(check.new_total)} {self.currency}) have exceeded "
                f"your budget limit of {_money(check.limit)} {self.currency}"
            ),
            action_url="/costs",
        )

    def wallet_budget(self, brand_id: str, wallet: Wallet, check: WalletBudgetCheck) -> Optional[Notification]:
        if check.level == BudgetLevel.LOW:
            return Notification(
                brand_id=brand_id,
                type="warning",
                title="Monthly Budget Low Warning",
                message=(
                    f'Your wallet "{wallet.name}" has only {_money(check.remaining)} {self.currency} '
                    f"({check.remaining_pct:.1f}%) remaining from its monthly budget of "
                    f"{_money(check.budget)} {self.currency}"
                ),
                action_url="/wallets",
            )
        if check.level == BudgetLevel.EXCEEDED:
            return Notification(
                brand_id=brand_id,
                type="system",
                title="Monthly Budget Exceeded",
                message=(
                    f'Your wallet "{wallet.name}" has exceeded its monthly budget by '
                    f"{_money(abs(check.remaining))} {self.currency}"
                ),
                action_url="/wallets",
            )
        return None
