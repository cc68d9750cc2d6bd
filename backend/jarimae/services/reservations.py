"""
Reservation lifecycle rules outside admission: who may see or change a
reservation, and which status changes are allowed.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session

from jarimae.core.errors import ErrorCode, ReservationError
from jarimae.models.notification import NotificationType
from jarimae.models.reservation import Reservation, ReservationStatus
from jarimae.models.user import User, UserRole
from jarimae.services.notifications import notify_customer

logger = logging.getLogger(__name__)


def get_reservation(db: Session, reservation_id: int) -> Reservation:
    reservation = db.query(Reservation).filter(Reservation.id == reservation_id).first()
    if not reservation:
        raise ReservationError(ErrorCode.RESERVATION_NOT_FOUND)
    return reservation


def can_access(user: User, reservation: Reservation) -> bool:
    """Admins see everything, customers their own bookings, owners their stores' bookings."""
    if user.role == UserRole.ADMIN:
        return True
    if user.role == UserRole.CUSTOMER:
        return reservation.customer_id == user.id
    if user.role == UserRole.OWNER:
        return reservation.store.owner_id == user.id
    return False


def starts_at(reservation: Reservation) -> datetime:
    return datetime.combine(reservation.reservation_date, reservation.reservation_time)


def ensure_modifiable(reservation: Reservation, now: Optional[datetime] = None) -> None:
    if not reservation.is_active:
        raise ReservationError(ErrorCode.RESERVATION_NOT_MODIFIABLE)
    if starts_at(reservation) <= (now or datetime.now()):
        raise ReservationError(ErrorCode.RESERVATION_IN_PAST)


def change_status(
    db: Session,
    reservation: Reservation,
    new_status: ReservationStatus,
    actor: User,
    cancellation_reason: Optional[str] = None,
    total_amount: Optional[Decimal] = None,
) -> Reservation:
    """
    Move a reservation to a new status.

    Customers may only cancel their own reservations. Terminal statuses
    (CANCELLED, COMPLETED, NO_SHOW) never change again.
    """
    if not can_access(actor, reservation):
        raise ReservationError(ErrorCode.FORBIDDEN)
    if actor.role == UserRole.CUSTOMER and new_status != ReservationStatus.CANCELLED:
        raise ReservationError(ErrorCode.FORBIDDEN, "Customers can only cancel reservations")

    if not reservation.can_transition_to(new_status):
        raise ReservationError(
            ErrorCode.INVALID_STATUS_TRANSITION,
            f"Cannot change status from {reservation.status.value} to {new_status.value}",
        )

    previous = reservation.status
    reservation.status = new_status
    reservation.cancellation_reason = cancellation_reason if new_status == ReservationStatus.CANCELLED else None
    if new_status == ReservationStatus.COMPLETED and total_amount is not None:
        reservation.total_amount = total_amount

    db.commit()
    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id}: {previous.value} -> {new_status.value} by user {actor.id}")

    if actor.id != reservation.customer_id:
        notify_customer(
            db,
            reservation,
            NotificationType.RESERVATION_STATUS_CHANGED,
            f"Your reservation on {reservation.reservation_date.isoformat()} is now {new_status.value.lower()}",
        )
    return reservation
