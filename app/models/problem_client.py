# app/models/problem_client.py
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from app.models.base import Base

NO_SHOWS_BEFORE_BLOCK = 2


class ProblemClient(Base):
    """Clients who did not show up, tracked per business by phone"""
    __tablename__ = "problem_clients"

    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), primary_key=True)
    client_phone = Column(String(15), primary_key=True)

    client_name = Column(String(50), nullable=False)
    no_show_count = Column(Integer, default=0, nullable=False)
    appointment_ids = Column(JSON, default=list, nullable=False)
    is_blocked = Column(Boolean, default=False, nullable=False)

    last_no_show_at = Column(DateTime(timezone=True), nullable=True)
    added_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self):
        return {
            "client_phone": self.client_phone,
            "client_name": self.client_name,
            "no_show_count": self.no_show_count,
            "appointment_ids": list(self.appointment_ids or []),
            "is_blocked": self.is_blocked,
            "last_no_show_at": self.last_no_show_at.isoformat() if self.last_no_show_at else None,
        }
