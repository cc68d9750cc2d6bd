from jarimae.models.user import User
from jarimae.models.store import Store
from jarimae.models.business_hour import BusinessHour
from jarimae.models.reservation import Reservation
from jarimae.models.notification import Notification

__all__ = [
    "User",
    "Store",
    "BusinessHour",
    "Reservation",
    "Notification",
]
