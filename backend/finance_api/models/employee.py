from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Index, Numeric, String

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (Index("ix_employees_brand_id", "brand_id"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)

    name = Column(String(200), nullable=False)
    position = Column(String(200), nullable=True)
    monthly_salary = Column(Numeric(14, 2), nullable=False, default=0)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    auto_payment = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=datetime.utcnow)
