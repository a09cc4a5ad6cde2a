from datetime import date, datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from brand_ledger.workflow import ApprovalWorkflow
from finance_api.api.deps import Tenant, get_tenant, get_workflow
from finance_api.db.session import get_session
from finance_api.models.salary_payment import SalaryPayment

router = APIRouter(prefix="/salary-payments", tags=["salary-payments"])


class SalaryPaymentCreate(BaseModel):
    employee_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    payment_date: date
    period_month: str = Field(..., min_length=1, max_length=50)
    note: str | None = None


class SalaryPaymentSubmitted(BaseModel):
    ok: bool = True
    salary_payment_id: str
    pending_cost_id: str


class SalaryPaymentOut(BaseModel):
    id: str
    employee_id: str
    employee_name: str | None = None
    amount: float
    payment_date: date
    period_month: str
    note: str | None = None
    cash_transaction_id: str | None = None
    created_at: datetime | None = None


@router.get("", response_model=list[SalaryPaymentOut])
def list_salary_payments(tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    rows = (
        db.query(SalaryPayment)
        .filter(SalaryPayment.brand_id == tenant.brand_id)
        .order_by(SalaryPayment.payment_date.desc(), SalaryPayment.created_at.desc())
        .all()
    )
    return [
        SalaryPaymentOut(
            id=r.id,
            employee_id=r.employee_id,
            employee_name=r.employee.name if r.employee else None,
            amount=float(r.amount),
            payment_date=r.payment_date,
            period_month=r.period_month,
            note=r.note,
            cash_transaction_id=r.cash_transaction_id,
            created_at=r.created_at,
        )
        for r in rows
    ]


@router.post("", response_model=SalaryPaymentSubmitted, status_code=201)
def submit_salary_payment(
    payload: SalaryPaymentCreate,
    tenant: Tenant = Depends(get_tenant),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    outcome = workflow.submit_salary_payment(
        tenant.brand_id,
        payload.employee_id,
        str(payload.amount),
        payload.payment_date,
        payload.period_month.strip(),
        payload.note,
    )
    return SalaryPaymentSubmitted(
        salary_payment_id=outcome.salary_payment_id,
        pending_cost_id=outcome.pending_cost_id,
    )


class SalaryPaymentUpdate(BaseModel):
    amount: float = Field(..., gt=0)
    payment_date: date
    period_month: str = Field(..., min_length=1, max_length=50)
    note: str | None = None


@router.put("/{payment_id}", response_model=SalaryPaymentOut)
def revise_salary_payment(
    payment_id: str,
    payload: SalaryPaymentUpdate,
    tenant: Tenant = Depends(get_tenant),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    payment = workflow.revise_salary_payment(
        tenant.brand_id,
        payment_id,
        str(payload.amount),
        payload.payment_date,
        payload.period_month.strip(),
        payload.note,
    )
    return SalaryPaymentOut(
        id=payment.id,
        employee_id=payment.employee_id,
        amount=float(payment.amount),
        payment_date=payment.payment_date,
        period_month=payment.period_month,
        note=payment.note,
        cash_transaction_id=payment.cash_transaction_id,
    )


@router.delete("/{payment_id}", status_code=204)
def withdraw_salary_payment(
    payment_id: str,
    tenant: Tenant = Depends(get_tenant),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    # only while awaiting approval; the pending cost is declined with it
    workflow.withdraw_salary_payment(tenant.brand_id, payment_id, tenant.user_id)
    return None
