import re

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from finance_api.api.deps import Tenant, get_tenant
from finance_api.core.logging import get_logger
from finance_api.db.session import get_session
from finance_api.models.monthly_budget import MonthlyBudget

router = APIRouter(prefix="/monthly-budgets", tags=["budgets"])
logger = get_logger(__name__)

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class MonthlyBudgetIn(BaseModel):
    month: str
    budget_limit: float = Field(..., gt=0)

    @field_validator("month")
    @classmethod
    def validate_month(cls, value: str) -> str:
        month = value.strip()
        if not MONTH_RE.match(month):
            raise ValueError("Month must be formatted as YYYY-MM")
        return month


class MonthlyBudgetOut(BaseModel):
    id: str
    month: str
    budget_limit: float


def _to_out(row: MonthlyBudget) -> MonthlyBudgetOut:
    return MonthlyBudgetOut(id=row.id, month=row.month, budget_limit=float(row.budget_limit))


@router.get("", response_model=list[MonthlyBudgetOut])
def list_budgets(
    month: str | None = None,
    tenant: Tenant = Depends(get_tenant),
    db: Session = Depends(get_session),
):
    query = db.query(MonthlyBudget).filter(MonthlyBudget.brand_id == tenant.brand_id)
    if month:
        query = query.filter(MonthlyBudget.month == month)
    return [_to_out(r) for r in query.order_by(MonthlyBudget.month.desc()).all()]


@router.post("", response_model=MonthlyBudgetOut)
def upsert_budget(payload: MonthlyBudgetIn, tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    row = (
        db.query(MonthlyBudget)
        .filter(MonthlyBudget.brand_id == tenant.brand_id, MonthlyBudget.month == payload.month)
        .one_or_none()
    )
    if row is None:
        row = MonthlyBudget(brand_id=tenant.brand_id, month=payload.month, budget_limit=payload.budget_limit)
        db.add(row)
    else:
        row.budget_limit = payload.budget_limit
    db.commit()
    db.refresh(row)

    logger.info("monthly_budget_saved", month=row.month, budget_limit=payload.budget_limit)
    return _to_out(row)
