# models/user_wallet.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, func

from gamehub.database import Base


class UserWallet(Base):
    __tablename__ = "user_wallets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    wallet_address = Column(String(255), unique=True, nullable=False)  # trimmed + lower-cased
    wallet_type = Column(String(50), nullable=False, default="unknown")
    chain_id = Column(Integer, nullable=True)
    label = Column(String(100), nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    connected_at = Column(DateTime(timezone=True), nullable=False)


Index("uq_user_wallets_address_ci", func.lower(func.trim(UserWallet.wallet_address)), unique=True)
