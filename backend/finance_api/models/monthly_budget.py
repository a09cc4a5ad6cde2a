from datetime import datetime

from sqlalchemy import Column, DateTime, Numeric, String, UniqueConstraint

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class MonthlyBudget(Base):
    __tablename__ = "monthly_budgets"
    __table_args__ = (UniqueConstraint("brand_id", "month", name="uq_monthly_budgets_brand_month"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    month = Column(String(7), nullable=False)  # YYYY-MM
    budget_limit = Column(Numeric(14, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
