from datetime import date, datetime
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from brand_ledger.workflow import ApprovalWorkflow
from finance_api.api.deps import Tenant, get_tenant, get_workflow
from finance_api.core.logging import get_logger
from finance_api.core.observability import get_meter, get_tracer
from finance_api.db.session import get_session
from finance_api.models.pending_cost import PendingCost

router = APIRouter(prefix="/pending-costs", tags=["pending-costs"])
logger = get_logger(__name__)
tracer = get_tracer(__name__)
decisions = get_meter(__name__).create_counter(
    "ledger.pending_cost.decisions", description="Approve and decline outcomes for pending costs"
)


class PendingCostOut(BaseModel):
    id: str
    employee_id: str | None = None
    employee_name: str | None = None
    salary_payment_id: str | None = None
    amount: float
    category: str
    description: str
    payment_date: date
    status: str
    created_at: datetime | None = None


class DecisionRequest(BaseModel):
    # validated by the workflow so unknown actions map to InvalidArgumentError
    action: str


class DecisionResponse(BaseModel):
    ok: bool = True
    action: Literal["approved", "declined"]
    cost_id: str | None = None
    cash_transaction_id: str | None = None
    notifications: int = 0


@router.get("", response_model=list[PendingCostOut])
def list_pending_costs(tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    rows = (
        db.query(PendingCost)
        .filter(PendingCost.brand_id == tenant.brand_id, PendingCost.status == "pending")
        .order_by(PendingCost.created_at.desc(), PendingCost.id.desc())
        .all()
    )
    return [
        PendingCostOut(
            id=r.id,
            employee_id=r.employee_id,
            employee_name=r.employee.name if r.employee else None,
            salary_payment_id=r.salary_payment_id,
            amount=float(r.amount),
            category=r.category,
            description=r.description,
            payment_date=r.payment_date,
            status=r.status,
            created_at=r.created_at,
        )
        for r in rows
    ]


@router.patch("/{pending_cost_id}", response_model=DecisionResponse)
def decide_pending_cost(
    pending_cost_id: str,
    payload: DecisionRequest,
    tenant: Tenant = Depends(get_tenant),
    workflow: ApprovalWorkflow = Depends(get_workflow),
) -> DecisionResponse:
    with tracer.start_as_current_span("pending_cost.decide") as span:
        span.set_attribute("ledger.pending_cost_id", pending_cost_id)
        span.set_attribute("ledger.action", payload.action)
        outcome = workflow.approve_or_decline(tenant.brand_id, pending_cost_id, tenant.user_id, payload.action)
        span.set_attribute("ledger.status", outcome.status.value)
        decisions.add(1, {"ledger.status": outcome.status.value, "ledger.alerts": len(outcome.notifications)})

    return DecisionResponse(
        action=outcome.status.value,
        cost_id=outcome.cost_id,
        cash_transaction_id=outcome.cash_transaction_id,
        notifications=len(outcome.notifications),
    )
