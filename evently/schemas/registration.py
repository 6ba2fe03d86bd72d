from enum import Enum
from pydantic import BaseModel
from typing import Optional

from .event import EventOut


class RegistrationStatus(str, Enum):
    CONFIRMED = "confirmed"
    PENDING = "pending"
    CANCELLED = "cancelled"


class RegistrationCreate(BaseModel):
    """Public registration request.

    Required fields are optional here so that a missing one is reported with
    the registration error message instead of a schema error.
    """

    eventId: Optional[str] = None
    attendeeName: Optional[str] = None
    attendeeEmail: Optional[str] = None
    attendeePhone: Optional[str] = None
    ticketType: Optional[str] = "Standard"


class RegistrationStatusUpdate(BaseModel):
    status: Optional[str] = None


class RegistrationOut(BaseModel):
    id: str
    eventId: str
    attendeeName: str
    attendeeEmail: str
    attendeePhone: str
    registrationDate: str
    status: RegistrationStatus
    ticketType: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    event: Optional[EventOut] = None
