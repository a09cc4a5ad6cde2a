from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import relationship

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class PendingCost(Base):
    __tablename__ = "pending_costs"
    __table_args__ = (
        Index("ix_pending_costs_brand_status", "brand_id", "status"),
        CheckConstraint("status IN ('pending', 'approved', 'declined')", name="ck_pending_costs_status"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    employee_id = Column(String(36), ForeignKey("employees.id"), nullable=True)
    # no FK: the salary payment row is deleted when the cost is declined
    salary_payment_id = Column(String(36), nullable=True)

    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    payment_date = Column(Date, nullable=False)

    status = Column(String(20), nullable=False, default="pending")  # pending|approved|declined
    approved_by = Column(String(36), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    employee = relationship("Employee")
