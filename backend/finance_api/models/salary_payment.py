from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import relationship

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class SalaryPayment(Base):
    __tablename__ = "salary_payments"
    __table_args__ = (Index("ix_salary_payments_brand_id", "brand_id"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    employee_id = Column(String(36), ForeignKey("employees.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    period_month = Column(String(50), nullable=False)  # free text label
    note = Column(Text, nullable=True)

    # set only when the paired pending cost is approved
    cash_transaction_id = Column(String(36), ForeignKey("cash_transactions.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    employee = relationship("Employee")
