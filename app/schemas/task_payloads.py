from __future__ import annotations
# app/schemas/task_payloads.py
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime, timezone


class OwnerNotificationPayload(BaseModel):
    """Payload for notifying a business owner about an appointment"""
    type: Literal["new_appointment", "reminder", "confirmation_request"] = Field(
        ..., description="Notification kind"
    )
    business_id: str = Field(..., description="Business identifier")
    appointment_id: Optional[str] = Field(None, description="Appointment identifier")
    client_name: str = Field(..., description="Client display name")
    client_phone: Optional[str] = Field(None, description="Client phone number")
    service_name: str = Field(..., description="Service snapshot name")
    date: str = Field(..., description="Appointment date YYYY-MM-DD")
    start_time: str = Field(..., description="Appointment start HH:MM")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
