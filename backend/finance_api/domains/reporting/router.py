from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from brand_ledger.budget import month_bounds, month_key
from finance_api.api.deps import Tenant, get_tenant
from finance_api.db.session import get_session
from finance_api.models.cash_transaction import CashTransaction

router = APIRouter(prefix="/reports", tags=["reporting"])


class CashFlowLine(BaseModel):
    section: str
    category: str
    amount: float


class CashFlowReport(BaseModel):
    month: str
    lines: list[CashFlowLine]
    sections: dict[str, float]
    net_cash_flow: float


@router.get("/cash-flow", response_model=CashFlowReport)
def cash_flow(month: str | None = None, tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    month = month or month_key(date.today())
    start, end = month_bounds(month)
    rows = (
        db.query(CashTransaction.section, CashTransaction.category, func.sum(CashTransaction.amount))
        .filter(
            CashTransaction.brand_id == tenant.brand_id,
            CashTransaction.date >= start,
            CashTransaction.date <= end,
        )
        .group_by(CashTransaction.section, CashTransaction.category)
        .order_by(CashTransaction.section.asc(), CashTransaction.category.asc())
        .all()
    )

    lines = [CashFlowLine(section=s, category=c, amount=round(float(total), 2)) for s, c, total in rows]
    sections = {"operating": 0.0, "investing": 0.0, "financing": 0.0}
    for line in lines:
        sections[line.section] = round(sections.get(line.section, 0.0) + line.amount, 2)
    return CashFlowReport(
        month=month,
        lines=lines,
        sections=sections,
        net_cash_flow=round(sum(sections.values()), 2),
    )
