# models/user.py
from sqlalchemy import Column, DateTime, Index, Integer, String, func

from gamehub.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=True)                         # may hold the "New User" placeholder
    email = Column(String(150), unique=True, nullable=True)           # trimmed + lower-cased
    wallet_address = Column(String(255), unique=True, nullable=True)  # trimmed + lower-cased
    mobile_number = Column(String(20), nullable=True, index=True)
    coins = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


# Rows written by other tools may keep their original casing
Index("uq_users_email_ci", func.lower(func.trim(User.email)), unique=True)
Index("uq_users_wallet_ci", func.lower(func.trim(User.wallet_address)), unique=True)
