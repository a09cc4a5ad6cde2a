from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from finance_api.api.deps import Tenant, get_tenant
from finance_api.core.logging import get_logger
from finance_api.db.session import get_session
from finance_api.models.employee import Employee

router = APIRouter(prefix="/employees", tags=["employees"])
logger = get_logger(__name__)


class EmployeeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    position: str | None = None
    monthly_salary: float = Field(default=0, ge=0)
    start_date: date
    end_date: date | None = None
    active: bool = True
    auto_payment: bool = False

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("Name is required")
        return name


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeOut(EmployeeBase):
    id: str


def _to_out(row: Employee) -> EmployeeOut:
    return EmployeeOut(
        id=row.id,
        name=row.name,
        position=row.position,
        monthly_salary=float(row.monthly_salary or 0),
        start_date=row.start_date,
        end_date=row.end_date,
        active=row.active,
        auto_payment=row.auto_payment,
    )


@router.get("", response_model=list[EmployeeOut])
def list_employees(tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    rows = (
        db.query(Employee)
        .filter(Employee.brand_id == tenant.brand_id)
        .order_by(Employee.name.asc(), Employee.id.asc())
        .all()
    )
    return [_to_out(r) for r in rows]


@router.post("", response_model=EmployeeOut, status_code=201)
def create_employee(payload: EmployeeCreate, tenant: Tenant = Depends(get_tenant), db: Session = Depends(get_session)):
    row = Employee(brand_id=tenant.brand_id, **payload.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info("employee_created", employee_id=row.id)
    return _to_out(row)
