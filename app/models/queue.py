# app/models/queue.py
"""
Booking admission queue.

One BookingQueue row per business holds the live count and the monotonic
ticket counter; one QueueClient row per browser session holds its position
(1 = front, the only client allowed to book).
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from app.models.base import Base


class QueueClientStatus:
    WAITING = "waiting"
    ACTIVE = "active"
    EXPIRED = "expired"


class BookingQueue(Base):
    __tablename__ = "booking_queues"

    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), primary_key=True)
    current_count = Column(Integer, default=0, nullable=False)
    last_position = Column(Integer, default=0, nullable=False)  # ticket counter, never reused
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class QueueClient(Base):
    __tablename__ = "queue_clients"
    __table_args__ = (
        Index("ix_queue_clients_business_position", "business_id", "position"),
    )

    business_id = Column(String(36), ForeignKey("businesses.id", ondelete="CASCADE"), primary_key=True)
    session_id = Column(String(100), primary_key=True)

    position = Column(Integer, nullable=False)
    ticket = Column(Integer, nullable=False)
    status = Column(String(20), default=QueueClientStatus.WAITING, nullable=False)
    client_ip = Column(String(45), nullable=True)

    joined_at = Column(DateTime(timezone=True), nullable=False)
    last_activity = Column(DateTime(timezone=True), nullable=False, index=True)

    def __repr__(self):
        return f"<QueueClient(business_id={self.business_id}, session_id={self.session_id}, position={self.position})>"
