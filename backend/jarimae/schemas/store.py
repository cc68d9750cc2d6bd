from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from datetime import datetime

from jarimae.config import get_settings
from jarimae.models.store import CuisineType, PriceRange, StoreStatus
from jarimae.schemas.common import HHMMTime
from jarimae.services.schedule import validate_week

settings = get_settings()

PHONE_PATTERN = r"^0\d{1,2}-\d{3,4}-\d{4}$"


class BusinessHourBase(BaseModel):
    day_of_week: int = Field(ge=0, le=6)  # 0=Sunday, 6=Saturday
    open_time: HHMMTime
    close_time: HHMMTime
    is_closed: bool = False


class BusinessHourIn(BusinessHourBase):
    @model_validator(mode="after")
    def check_open_before_close(self):
        if not self.is_closed and self.open_time >= self.close_time:
            raise ValueError("open_time must be before close_time (overnight hours are not supported)")
        return self


class BusinessHourResponse(BusinessHourBase):
    class Config:
        from_attributes = True


def _check_week(v):
    if v is not None:
        validate_week(v)
    return v


class StoreBase(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    phone: str = Field(pattern=PHONE_PATTERN)
    address: str = Field(min_length=5, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    cuisine_type: CuisineType = CuisineType.OTHER
    price_range: PriceRange = PriceRange.MID_RANGE
    capacity: int = Field(settings.default_capacity, ge=1, le=1000)
    average_meal_duration: int = Field(settings.default_meal_duration, ge=30, le=300)
    accepts_reservations: bool = True
    accepts_walk_ins: bool = True
    has_parking: bool = False
    has_wifi: bool = False
    has_private_room: bool = False


class StoreCreate(StoreBase):
    business_hours: List[BusinessHourIn]

    @field_validator("business_hours")
    @classmethod
    def validate_business_hours(cls, v):
        return _check_week(v)


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, min_length=5, max_length=200)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    cuisine_type: Optional[CuisineType] = None
    price_range: Optional[PriceRange] = None
    capacity: Optional[int] = Field(None, ge=1, le=1000)
    average_meal_duration: Optional[int] = Field(None, ge=30, le=300)
    accepts_reservations: Optional[bool] = None
    accepts_walk_ins: Optional[bool] = None
    has_parking: Optional[bool] = None
    has_wifi: Optional[bool] = None
    has_private_room: Optional[bool] = None
    # Replaces all seven days when given
    business_hours: Optional[List[BusinessHourIn]] = None

    @field_validator("business_hours")
    @classmethod
    def validate_business_hours(cls, v):
        return _check_week(v)


class StoreStatusUpdate(BaseModel):
    status: StoreStatus

    @field_validator("status")
    @classmethod
    def not_deleted(cls, v):
        if v == StoreStatus.DELETED:
            raise ValueError("Use DELETE /api/stores/{id} to delete a store")
        return v


class StoreResponse(StoreBase):
    id: int
    owner_id: int
    status: StoreStatus
    business_hours: List[BusinessHourResponse] = []
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
