from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from brand_ledger.notifications import NotificationEmitter
from brand_ledger.wallet_ledger import WalletLedger
from brand_ledger.workflow import ApprovalWorkflow
from finance_api.core.config import settings
from finance_api.core.logging import bind_tenant
from finance_api.db.session import get_session
from finance_api.db.store import SqlLedgerStore


@dataclass(frozen=True)
class Tenant:
    brand_id: str
    user_id: str


def get_tenant(
    x_brand_id: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> Tenant:
    # resolved and authenticated by the upstream gateway
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not x_brand_id:
        raise HTTPException(status_code=400, detail="Brand not found")
    bind_tenant(x_brand_id, x_user_id)
    return Tenant(brand_id=x_brand_id, user_id=x_user_id)


def get_store(db: Session = Depends(get_session)) -> SqlLedgerStore:
    return SqlLedgerStore(db)


def get_ledger(store: SqlLedgerStore = Depends(get_store)) -> WalletLedger:
    return WalletLedger(store)


def get_workflow(store: SqlLedgerStore = Depends(get_store)) -> ApprovalWorkflow:
    return ApprovalWorkflow(
        store,
        emitter=NotificationEmitter(store, currency=settings.currency),
        cost_category=settings.approved_cost_category,
        low_threshold_pct=settings.wallet_low_budget_pct,
    )
