from jarimae.schemas.user import UserCreate, UserResponse, UserLogin, Token, UserProfileUpdate, UserProfileResponse
from jarimae.schemas.store import StoreCreate, StoreUpdate, StoreStatusUpdate, StoreResponse, BusinessHourIn, BusinessHourResponse
from jarimae.schemas.reservation import (
    ReservationCreate, ReservationUpdate, ReservationStatusUpdate, ReservationResponse,
    ReservationListResponse, AvailabilityQuery, AvailabilityResponse,
)
from jarimae.schemas.notification import NotificationResponse, NotificationUpdate

__all__ = [
    "UserCreate", "UserResponse", "UserLogin", "Token", "UserProfileUpdate", "UserProfileResponse",
    "StoreCreate", "StoreUpdate", "StoreStatusUpdate", "StoreResponse", "BusinessHourIn", "BusinessHourResponse",
    "ReservationCreate", "ReservationUpdate", "ReservationStatusUpdate", "ReservationResponse",
    "ReservationListResponse", "AvailabilityQuery", "AvailabilityResponse",
    "NotificationResponse", "NotificationUpdate",
]
