from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from gamehub.database import Base


class VerificationToken(Base):
    __tablename__ = "verification"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(500), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
