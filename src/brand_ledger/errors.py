"""Typed errors raised by the ledger core.

Every error carries a machine readable ``code`` so callers (the HTTP layer in
particular) can map by type instead of parsing messages.
"""

from __future__ import annotations

from typing import Optional


class LedgerError(Exception):
    code = "LEDGER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    code = "NOT_FOUND"


class WalletNotFoundError(NotFoundError):
    code = "WALLET_NOT_FOUND"

    def __init__(self, wallet_id: str) -> None:
        super().__init__(f"Wallet {wallet_id} not found")
        self.wallet_id = wallet_id


class InvalidArgumentError(LedgerError):
    code = "INVALID_ARGUMENT"


class InsufficientFundsError(InvalidArgumentError):
    code = "INSUFFICIENT_FUNDS"


class AlreadyProcessedError(LedgerError):
    code = "ALREADY_PROCESSED"

    def __init__(self, pending_cost_id: str, status: Optional[str] = None) -> None:
        super().__init__("This cost has already been processed")
        self.pending_cost_id = pending_cost_id
        self.status = status


class StoreError(LedgerError):
    code = "STORE_ERROR"

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause
