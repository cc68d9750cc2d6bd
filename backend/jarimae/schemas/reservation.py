from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from jarimae.config import get_settings
from jarimae.models.reservation import ReservationStatus
from jarimae.schemas.common import FutureDate, HHMMTime

settings = get_settings()

CONTACT_PHONE_PATTERN = r"^010-\d{4}-\d{4}$"


class ReservationCreate(BaseModel):
    store_id: int
    reservation_date: FutureDate
    reservation_time: HHMMTime
    party_size: int = Field(ge=1, le=settings.max_party_size)
    contact_name: str = Field(min_length=2, max_length=20)
    contact_phone: str = Field(pattern=CONTACT_PHONE_PATTERN)
    special_requests: Optional[str] = Field(None, max_length=500)
    estimated_duration: Optional[int] = Field(None, ge=30, le=300)


class ReservationUpdate(BaseModel):
    reservation_date: Optional[FutureDate] = None
    reservation_time: Optional[HHMMTime] = None
    party_size: Optional[int] = Field(None, ge=1, le=settings.max_party_size)
    contact_name: Optional[str] = Field(None, min_length=2, max_length=20)
    contact_phone: Optional[str] = Field(None, pattern=CONTACT_PHONE_PATTERN)
    special_requests: Optional[str] = Field(None, max_length=500)
    estimated_duration: Optional[int] = Field(None, ge=30, le=300)


class ReservationStatusUpdate(BaseModel):
    status: ReservationStatus
    cancellation_reason: Optional[str] = Field(None, max_length=200)
    total_amount: Optional[Decimal] = Field(None, ge=0)


class StoreSummary(BaseModel):
    id: int
    name: str
    address: str
    phone: str

    class Config:
        from_attributes = True


class ReservationResponse(BaseModel):
    id: int
    store_id: int
    customer_id: int
    reservation_date: date
    reservation_time: HHMMTime
    party_size: int
    estimated_duration: int
    status: ReservationStatus
    special_requests: Optional[str] = None
    contact_name: str
    contact_phone: str
    cancellation_reason: Optional[str] = None
    total_amount: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    store: Optional[StoreSummary] = None

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    reservations: List[ReservationResponse]
    page: int
    limit: int
    total: int
    pages: int


# Availability
class AvailabilityQuery(BaseModel):
    store_id: int
    reservation_date: FutureDate
    party_size: int = Field(ge=1, le=settings.max_party_size)
    preferred_time: Optional[HHMMTime] = None


class SlotResponse(BaseModel):
    time: str
    available: bool
    remaining_capacity: int


class DayHoursResponse(BaseModel):
    day_of_week: int
    open_time: str
    close_time: str
    is_closed: bool


class PreferredTimeResponse(BaseModel):
    time: str
    available: bool
    reason: Optional[str] = None
    message: str = ""


class AvailabilityResponse(BaseModel):
    store_id: int
    reservation_date: date
    party_size: int
    available: bool
    message: str
    business_hours: Optional[DayHoursResponse] = None
    slots: List[SlotResponse] = []
    available_slots: List[SlotResponse] = []
    total_available_slots: int = 0
    preferred_time: Optional[PreferredTimeResponse] = None
    # Machine-readable code when the request itself cannot be met
    reason: Optional[str] = None


# Listing
class SortField(str, Enum):
    RESERVATION_DATE = "reservation_date"
    RESERVATION_TIME = "reservation_time"
    CREATED_AT = "created_at"
    PARTY_SIZE = "party_size"
    STATUS = "status"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
