from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Index, Numeric, String, Text

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class CashTransaction(Base):
    __tablename__ = "cash_transactions"
    __table_args__ = (Index("ix_cash_transactions_brand_date", "brand_id", "date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    date = Column(Date, nullable=False)
    section = Column(String(20), nullable=False)  # operating|investing|financing
    category = Column(String(100), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)  # negative for outflow
    description = Column(Text, nullable=True)
    reference_type = Column(String(50), nullable=True)
    reference_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
