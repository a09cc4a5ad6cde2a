from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import relationship

from finance_api.db.session import Base
from finance_api.models._ids import new_id


class Wallet(Base):
    __tablename__ = "wallets"
    __table_args__ = (Index("ix_wallets_brand_id", "brand_id"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    name = Column(String(200), nullable=False)
    type = Column(String(50), nullable=False, default="cash")
    currency = Column(String(10), nullable=False, default="EGP")
    # written only through brand_ledger.wallet_ledger.WalletLedger
    current_balance = Column(Numeric(14, 2), nullable=False, default=0)
    monthly_budget = Column(Numeric(14, 2), nullable=True)
    description = Column(Text, nullable=True)
    is_basic = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"
    __table_args__ = (Index("ix_wallet_transactions_wallet_date", "wallet_id", "transaction_date"),)

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False)
    wallet_id = Column(String(36), ForeignKey("wallets.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)  # positive magnitude
    transaction_type = Column(String(30), nullable=False)
    description = Column(Text, nullable=True)
    transaction_date = Column(Date, nullable=False)
    reference_type = Column(String(50), nullable=True)
    reference_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    wallet = relationship("Wallet")


class WalletTransfer(Base):
    __tablename__ = "wallet_transfers"

    id = Column(String(36), primary_key=True, default=new_id)
    brand_id = Column(String(36), nullable=False, index=True)
    from_wallet_id = Column(String(36), ForeignKey("wallets.id"), nullable=False)
    to_wallet_id = Column(String(36), ForeignKey("wallets.id"), nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(Text, nullable=True)
    transfer_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
