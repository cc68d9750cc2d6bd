"""
Reservation error taxonomy and its HTTP mapping.

Services raise ReservationError with a machine-readable code; routes turn it into
an HTTPException through reservation_error_to_http so the mapping lives in one place.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    STORE_NOT_FOUND = "STORE_NOT_FOUND"
    STORE_INACTIVE = "STORE_INACTIVE"
    RESERVATIONS_NOT_ACCEPTED = "RESERVATIONS_NOT_ACCEPTED"
    PARTY_SIZE_EXCEEDS_CAPACITY = "PARTY_SIZE_EXCEEDS_CAPACITY"
    STORE_CLOSED = "STORE_CLOSED"
    OUTSIDE_BUSINESS_HOURS = "OUTSIDE_BUSINESS_HOURS"
    TIME_SLOT_UNAVAILABLE = "TIME_SLOT_UNAVAILABLE"
    RESERVATION_NOT_FOUND = "RESERVATION_NOT_FOUND"
    RESERVATION_NOT_MODIFIABLE = "RESERVATION_NOT_MODIFIABLE"
    RESERVATION_IN_PAST = "RESERVATION_IN_PAST"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    FORBIDDEN = "FORBIDDEN"
    HAS_ACTIVE_RESERVATIONS = "HAS_ACTIVE_RESERVATIONS"


# Status codes for codes that are not plain 400s
_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.STORE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RESERVATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.TIME_SLOT_UNAVAILABLE: status.HTTP_409_CONFLICT,
}

DEFAULT_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.STORE_NOT_FOUND: "Store not found",
    ErrorCode.STORE_INACTIVE: "This store is not currently taking reservations",
    ErrorCode.RESERVATIONS_NOT_ACCEPTED: "This store does not accept reservations",
    ErrorCode.STORE_CLOSED: "The store is closed on the requested date",
    ErrorCode.TIME_SLOT_UNAVAILABLE: "The selected time is not available. Please choose another time.",
    ErrorCode.RESERVATION_NOT_FOUND: "Reservation not found",
    ErrorCode.RESERVATION_NOT_MODIFIABLE: "Reservation can no longer be modified",
    ErrorCode.RESERVATION_IN_PAST: "Past reservations cannot be modified",
    ErrorCode.FORBIDDEN: "You do not have permission for this reservation",
    ErrorCode.HAS_ACTIVE_RESERVATIONS: "The store has upcoming reservations and cannot be deleted",
}


class ReservationError(Exception):
    """A terminal, user-correctable rejection. Never retried automatically."""

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or DEFAULT_MESSAGES.get(code, code.value)
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return _STATUS_BY_CODE.get(self.code, status.HTTP_400_BAD_REQUEST)

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}


def reservation_error_to_http(exc: ReservationError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_dict())
