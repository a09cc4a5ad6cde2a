from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from .errors import InsufficientFundsError, InvalidArgumentError, WalletNotFoundError
from .models import TransactionType, WalletTransaction, WalletTransfer
from .store import LedgerStore

logger = structlog.get_logger(__name__)

# +1 adds to the balance, -1 subtracts from it
BALANCE_SIGN = {
    TransactionType.ADD: 1,
    TransactionType.TRANSFER_IN: 1,
    TransactionType.COST_DEDUCTION: -1,
    TransactionType.DEDUCT: -1,
    TransactionType.TRANSFER_OUT: -1,
}


def _coerce_type(value) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown transaction type {value!r}") from exc


@dataclass
class LedgerEntry:
    wallet_id: str
    transaction_id: str
    previous_balance: Decimal
    new_balance: Decimal


@dataclass
class TransferResult:
    transfer_id: str
    debit: LedgerEntry
    credit: LedgerEntry


class WalletLedger:
    """The only writer of ``Wallet.current_balance``.

    Each balance change writes exactly one ``WalletTransaction``; amounts are
    stored as positive magnitudes and the transaction type decides the sign.
    """

    def __init__(self, store: LedgerStore):
        self.store = store

    def apply(
        self,
        brand_id: str,
        wallet_id: str,
        amount: Decimal,
        transaction_type: TransactionType,
        description: str,
        transaction_date: date,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
    ) -> LedgerEntry:
        transaction_type = _coerce_type(transaction_type)
        magnitude = Decimal(amount)
        if not magnitude.is_finite() or magnitude <= 0:
            raise InvalidArgumentError("Amount must be a positive number")

        with self.store.transaction():
            wallet = self.store.get_wallet(brand_id, wallet_id, for_update=True)
            if wallet is None:
                raise WalletNotFoundError(wallet_id)

            previous = Decimal(wallet.current_balance)
            new_balance = previous + BALANCE_SIGN[transaction_type] * magnitude
            self.store.update_wallet_balance(wallet.id, new_balance)
            tx_id = self.store.insert_wallet_transaction(
                WalletTransaction(
                    brand_id=brand_id,
                    wallet_id=wallet.id,
                    amount=magnitude,
                    transaction_type=transaction_type,
                    description=description,
                    transaction_date=transaction_date,
                    reference_type=reference_type,
                    reference_id=reference_id,
                )
            )
        logger.info(
            "wallet_balance_changed",
            wallet_id=wallet.id,
            transaction_type=transaction_type.value,
            amount=str(magnitude),
            new_balance=str(new_balance),
        )
        return LedgerEntry(wallet.id, tx_id, previous, new_balance)

    def debit(
        self,
        brand_id: str,
        wallet_id: str,
        amount: Decimal,
        description: str,
        transaction_date: date,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
        transaction_type: TransactionType = TransactionType.COST_DEDUCTION,
    ) -> LedgerEntry:
        if BALANCE_SIGN[_coerce_type(transaction_type)] != -1:
            raise InvalidArgumentError(f"{transaction_type} does not reduce a wallet balance")
        return self.apply(
            brand_id, wallet_id, amount, transaction_type, description, transaction_date,
            reference_type, reference_id,
        )

    def credit(
        self,
        brand_id: str,
        wallet_id: str,
        amount: Decimal,
        description: str,
        transaction_date: date,
        reference_type: Optional[str] = None,
        reference_id: Optional[str] = None,
        transaction_type: TransactionType = TransactionType.ADD,
    ) -> LedgerEntry:
        if BALANCE_SIGN[_coerce_type(transaction_type)] != 1:
            raise InvalidArgumentError(f"{transaction_type} does not increase a wallet balance")
        return self.apply(
            brand_id, wallet_id, amount, transaction_type, description, transaction_date,
            reference_type, reference_id,
        )

    def transfer(
        self,
        brand_id: str,
        from_wallet_id: str,
        to_wallet_id: str,
        amount: Decimal,
        transfer_date: date,
        description: Optional[str] = None,
    ) -> TransferResult:
        amount = Decimal(amount)
        if amount <= 0:
            raise InvalidArgumentError("Transfer amount must be positive")
        if from_wallet_id == to_wallet_id:
            raise InvalidArgumentError("Cannot transfer a wallet to itself")

        with self.store.transaction():
            source = self.store.get_wallet(brand_id, from_wallet_id, for_update=True)
            if source is None:
                raise WalletNotFoundError(from_wallet_id)
            if self.store.get_wallet(brand_id, to_wallet_id) is None:
                raise WalletNotFoundError(to_wallet_id)
            if source.current_balance < amount:
                raise InsufficientFundsError("Insufficient balance")

            transfer_id = self.store.insert_wallet_transfer(
                WalletTransfer(
                    brand_id=brand_id,
                    from_wallet_id=from_wallet_id,
                    to_wallet_id=to_wallet_id,
                    amount=amount,
                    transfer_date=transfer_date,
                    description=description,
                )
            )
            label = description or "Wallet transfer"
            debit = self.apply(
                brand_id, from_wallet_id, amount, TransactionType.TRANSFER_OUT, label, transfer_date,
                "wallet_transfer", transfer_id,
            )
            credit = self.apply(
                brand_id, to_wallet_id, amount, TransactionType.TRANSFER_IN, label, transfer_date,
                "wallet_transfer", transfer_id,
            )
        return TransferResult(transfer_id, debit, credit)
