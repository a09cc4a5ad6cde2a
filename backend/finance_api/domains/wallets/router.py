from datetime import date
from decimal import Decimal
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.orm import Session

from brand_ledger.budget import evaluate_wallet_budget, month_key
from brand_ledger.errors import InvalidArgumentError, WalletNotFoundError
from brand_ledger.models import TransactionType
from brand_ledger.wallet_ledger import WalletLedger
from finance_api.api.deps import Tenant, get_ledger, get_store, get_tenant
from finance_api.core.config import settings
from finance_api.core.logging import get_logger
from finance_api.db.session import get_session
from finance_api.db.store import SqlLedgerStore
from finance_api.models.wallet import Wallet, WalletTransaction, WalletTransfer

router = APIRouter(prefix="/wallets", tags=["wallets"])
logger = get_logger(__name__)


class WalletCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: str = Field(..., min_length=1, max_length=50)
    currency: str = "EGP"
    opening_balance: float = 0
    monthly_budget: float | None = Field(default=None, gt=0)
    description: str | None = None
    is_basic: bool = False
    is_active: bool = True


class WalletOut(BaseModel):
    id: str
    name: str
    type: str
    currency: str
    current_balance: float
    monthly_budget: float | None = None
    is_basic: bool
    is_active: bool
    monthly_budget_used: float = 0
    monthly_budget_remaining: float = 0
    monthly_budget_percentage: float = 100


class WalletTransactionCreate(BaseModel):
    amount: float = Field(..., gt=0)
    transaction_type: Literal["add", "deduct"]
    description: str | None = None
    transaction_date: date


class WalletTransactionOut(BaseModel):
    id: str
    wallet_id: str
    amount: float
    transaction_type: str
    description: str | None = None
    transaction_date: date
    reference_type: str | None = None
    reference_id: str | None = None


class WalletTransferCreate(BaseModel):
    from_wallet_id: str
    to_wallet_id: str
    amount: float = Field(..., gt=0)
    transfer_date: date
    description: str | None = None


class WalletTransferOut(BaseModel):
    ok: bool = True
    transfer_id: str
    from_balance: float
    to_balance: float


def _to_out(row: Wallet, store: SqlLedgerStore, month: str) -> WalletOut:
    out = WalletOut(
        id=row.id,
        name=row.name,
        type=row.type,
        currency=row.currency,
        current_balance=float(row.current_balance),
        monthly_budget=float(row.monthly_budget) if row.monthly_budget is not None else None,
        is_basic=row.is_basic,
        is_active=row.is_active,
    )
    if row.monthly_budget and row.monthly_budget > 0:
        used = store.sum_wallet_deductions_in_month(row.id, month)
        check = evaluate_wallet_budget(used, Decimal(row.monthly_budget), settings.wallet_low_budget_pct)
        out.monthly_budget_used = float(check.used)
        out.monthly_budget_remaining = float(check.remaining)
        out.monthly_budget_percentage = float(check.remaining_pct)
    return out


@router.get("", response_model=list[WalletOut])
def list_wallets(
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
    store: SqlLedgerStore = Depends(get_store),
):
    month = month_key(date.today())
    rows = (
        db.query(Wallet)
        .filter(Wallet.brand_id == tenant.brand_id)
        .order_by(Wallet.created_at.desc(), Wallet.id.desc())
        .all()
    )
    return [_to_out(r, store, month) for r in rows]


@router.post("", response_model=WalletOut, status_code=201)
def create_wallet(
    payload: WalletCreate,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
    store: SqlLedgerStore = Depends(get_store),
    ledger: WalletLedger = Depends(get_ledger),
):
    with store.transaction():
        if payload.is_basic:
            # one basic wallet per brand
            db.query(Wallet).filter(Wallet.brand_id == tenant.brand_id, Wallet.is_basic.is_(True)).update(
                {Wallet.is_basic: False}, synchronize_session=False
            )
        row = Wallet(
            brand_id=tenant.brand_id,
            name=payload.name.strip(),
            type=payload.type,
            currency=payload.currency,
            current_balance=0,
            monthly_budget=payload.monthly_budget,
            description=payload.description,
            is_basic=payload.is_basic,
            is_active=payload.is_active,
        )
        db.add(row)
        db.flush()
        if payload.opening_balance:
            ledger.apply(
                tenant.brand_id,
                row.id,
                Decimal(str(abs(payload.opening_balance))),
                TransactionType.ADD if payload.opening_balance > 0 else TransactionType.DEDUCT,
                "Opening balance",
                date.today(),
            )
    db.refresh(row)

    logger.info("wallet_created", wallet_id=row.id, is_basic=row.is_basic)
    return _to_out(row, store, month_key(date.today()))


@router.get("/{wallet_id}/transactions", response_model=list[WalletTransactionOut])
def list_wallet_transactions(
    wallet_id: str,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
    store: SqlLedgerStore = Depends(get_store),
):
    if store.get_wallet(tenant.brand_id, wallet_id) is None:
        raise WalletNotFoundError(wallet_id)
    rows = (
        db.query(WalletTransaction)
        .filter(WalletTransaction.wallet_id == wallet_id)
        .order_by(WalletTransaction.transaction_date.desc(), WalletTransaction.created_at.desc())
        .all()
    )
    return [
        WalletTransactionOut(
            id=r.id,
            wallet_id=r.wallet_id,
            amount=float(r.amount),
            transaction_type=r.transaction_type,
            description=r.description,
            transaction_date=r.transaction_date,
            reference_type=r.reference_type,
            reference_id=r.reference_id,
        )
        for r in rows
    ]


@router.post("/{wallet_id}/transactions", response_model=WalletOut, status_code=201)
def record_wallet_transaction(
    wallet_id: str,
    payload: WalletTransactionCreate,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
    store: SqlLedgerStore = Depends(get_store),
    ledger: WalletLedger = Depends(get_ledger),
):
    amount = Decimal(str(payload.amount))
    description = payload.description or payload.transaction_type.title()
    with store.transaction():
        if payload.transaction_type == "add":
            ledger.credit(tenant.brand_id, wallet_id, amount, description, payload.transaction_date)
        else:
            ledger.debit(
                tenant.brand_id,
                wallet_id,
                amount,
                description,
                payload.transaction_date,
                transaction_type=TransactionType.DEDUCT,
            )
    row = db.query(Wallet).filter(Wallet.id == wallet_id).one()
    return _to_out(row, store, month_key(date.today()))


@router.post("/transfers", response_model=WalletTransferOut, status_code=201)
def transfer_between_wallets(
    payload: WalletTransferCreate,
    tenant: Tenant = Depends(get_tenant),
    ledger: WalletLedger = Depends(get_ledger),
):
    result = ledger.transfer(
        tenant.brand_id,
        payload.from_wallet_id,
        payload.to_wallet_id,
        Decimal(str(payload.amount)),
        payload.transfer_date,
        payload.description,
    )
    return WalletTransferOut(
        transfer_id=result.transfer_id,
        from_balance=float(result.debit.new_balance),
        to_balance=float(result.credit.new_balance),
    )


class WalletUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: str | None = Field(default=None, min_length=1, max_length=50)
    current_balance: float | None = None
    monthly_budget: float | None = Field(default=None, gt=0)
    description: str | None = None
    is_basic: bool | None = None
    is_active: bool | None = None


@router.patch("/{wallet_id}", response_model=WalletOut)
def update_wallet(
    wallet_id: str,
    payload: WalletUpdate,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
    store: SqlLedgerStore = Depends(get_store),
    ledger: WalletLedger = Depends(get_ledger),
):
    # monthly_budget and description may be cleared with an explicit null
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in ("monthly_budget", "description")
    }
    target_balance = changes.pop("current_balance", None)

    with store.transaction():
        wallet = store.get_wallet(tenant.brand_id, wallet_id)
        if wallet is None:
            raise WalletNotFoundError(wallet_id)

        if target_balance is not None:
            difference = Decimal(str(target_balance)) - wallet.current_balance
            if difference:
                ledger.apply(
                    tenant.brand_id,
                    wallet_id,
                    abs(difference),
                    TransactionType.ADD if difference > 0 else TransactionType.DEDUCT,
                    "Balance adjustment",
                    date.today(),
                )

        if changes.get("is_basic"):
            db.query(Wallet).filter(
                Wallet.brand_id == tenant.brand_id, Wallet.is_basic.is_(True), Wallet.id != wallet_id
            ).update({Wallet.is_basic: False}, synchronize_session=False)

        row = db.query(Wallet).filter(Wallet.id == wallet_id).one()
        for field, value in changes.items():
            if field == "name":
                value = value.strip()
            setattr(row, field, value)
        db.flush()
    db.refresh(row)

    logger.info("wallet_updated", wallet_id=row.id, fields=sorted(payload.model_fields_set))
    return _to_out(row, store, month_key(date.today()))


@router.delete("/{wallet_id}", status_code=204)
def delete_wallet(
    wallet_id: str,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
    store: SqlLedgerStore = Depends(get_store),
):
    with store.transaction():
        if store.get_wallet(tenant.brand_id, wallet_id) is None:
            raise WalletNotFoundError(wallet_id)
        has_history = (
            db.query(WalletTransaction.id).filter(WalletTransaction.wallet_id == wallet_id).first() is not None
            or db.query(WalletTransfer.id)
            .filter(or_(WalletTransfer.from_wallet_id == wallet_id, WalletTransfer.to_wallet_id == wallet_id))
            .first()
            is not None
        )
        if has_history:
            raise InvalidArgumentError("Wallet has ledger history; deactivate it instead")
        db.query(Wallet).filter(Wallet.id == wallet_id).delete(synchronize_session=False)

    logger.info("wallet_deleted", wallet_id=wallet_id)
    return None
