from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Index, Numeric, String, Text

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class Cost(Base):
    __tablename__ = "costs"
    __table_args__ = (Index("ix_costs_brand_date", "brand_id", "date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category = Column(String(100), nullable=False)
    note = Column(Text, nullable=True)
    source = Column(String(50), nullable=False, default="manual")
    created_at = Column(DateTime, default=datetime.utcnow)
