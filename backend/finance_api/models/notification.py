from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_brand_created", "brand_id", "created_at"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    action_url = Column(String(200), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
