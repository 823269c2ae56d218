# app/models/appointment.py
from sqlalchemy import Column, String, Integer, Date, DateTime, JSON, ForeignKey, Index
from sqlalchemy.sql import func
import uuid
from app.models.base import Base


class AppointmentStatus:
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED_ATTENDED = "completed_attended"
    COMPLETED_NO_SHOW = "completed_no_show"
    EXPIRED = "expired"

    ALL = (CONFIRMED, CANCELLED, COMPLETED_ATTENDED, COMPLETED_NO_SHOW, EXPIRED)


class NotificationKind:
    NEW_APPOINTMENT = "new_appointment"
    REMINDER = "reminder"
    CONFIRMATION_REQUEST = "confirmation_request"


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_business_date_status", "business_id", "date", "status"),
        Index("ix_appointments_business_phone_status", "business_id", "client_phone", "status"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # References
    business_id = Column(String(36), ForeignKey("businesses.id"), nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)

    # Snapshot of the service at booking time
    service_name = Column(String(200), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    # Slot
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)

    # Client info
    client_name = Column(String(50), nullable=False)
    client_phone = Column(String(15), nullable=False)

    # Status tracking
    status = Column(String(30), default=AppointmentStatus.CONFIRMED, nullable=False)
    notifications_sent = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(String(20), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Appointment(id={self.id}, date={self.date}, start={self.start_time}, status={self.status})>"

    @property
    def is_terminal(self) -> bool:
        return self.status != AppointmentStatus.CONFIRMED

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "business_id": self.business_id,
            "service_id": self.service_id,
            "service_name": self.service_name,
            "duration_minutes": self.duration_minutes,
            "date": self.date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "client_name": self.client_name,
            "client_phone": self.client_phone,
            "status": self.status,
            "notifications_sent": list(self.notifications_sent or []),
            "cancelled_by": self.cancelled_by,
        }
