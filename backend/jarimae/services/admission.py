"""
Booking Admission Controller

Validates a concrete booking and records it as a PENDING reservation. Checks run
in a fixed order and the first failure wins:

1. Store exists, is ACTIVE and accepts reservations
2. Party size fits the store's capacity
3. Store is open on the requested date
4. Requested time lies within [open, close], close inclusive
5. No active reservation starts at exactly the same time, and (unless disabled)
   the guests already seated during [time, time + duration) leave room for the party

Steps 5 and the insert run under a per (store, date) lock so concurrent bookings
cannot both pass the check before either writes.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session, selectinload

from jarimae.config import get_settings
from jarimae.core.errors import ErrorCode, ReservationError
from jarimae.models.notification import NotificationType
from jarimae.models.reservation import Reservation, ReservationStatus
from jarimae.models.store import Store, StoreStatus
from jarimae.services.ledger import count_exact_time_conflicts, list_active_reservations, occupancy
from jarimae.services.locking import reservation_lock
from jarimae.services.notifications import notify_store_owner
from jarimae.services.schedule import DayHours, StoreSchedule, day_of_week, format_hhmm, to_minutes

settings = get_settings()
logger = logging.getLogger(__name__)

# Fields whose change can affect capacity or hours and must be re-admitted
SCHEDULING_FIELDS = ("reservation_date", "reservation_time", "party_size", "estimated_duration")


@dataclass
class BookingRequest:
    store_id: int
    reservation_date: date
    reservation_time: time
    party_size: int
    contact_name: str
    contact_phone: str
    special_requests: Optional[str] = None
    estimated_duration: Optional[int] = None


class BookingAdmissionController:
    """Admits new reservations and re-admits modified ones."""

    def __init__(self, db: Session):
        self.db = db
        self.enforce_overlap_capacity = settings.enforce_overlap_capacity

    def _load_store(self, store_id: int) -> Store:
        store = self.db.query(Store).options(
            selectinload(Store.business_hours)
        ).filter(Store.id == store_id, Store.status != StoreStatus.DELETED).first()
        if not store:
            raise ReservationError(ErrorCode.STORE_NOT_FOUND)
        return store

    def validate(
        self,
        schedule: StoreSchedule,
        reservation_date: date,
        reservation_time: time,
        party_size: int,
    ) -> DayHours:
        """Checks 1-4. Returns the day's hours."""
        if not schedule.is_active:
            raise ReservationError(ErrorCode.STORE_INACTIVE)
        if not schedule.accepts_reservations:
            raise ReservationError(ErrorCode.RESERVATIONS_NOT_ACCEPTED)

        if party_size > schedule.capacity:
            raise ReservationError(
                ErrorCode.PARTY_SIZE_EXCEEDS_CAPACITY,
                f"Party size exceeds the store's maximum capacity ({schedule.capacity})",
            )

        hours = schedule.hours_for(day_of_week(reservation_date))
        if hours is None or hours.is_closed:
            raise ReservationError(ErrorCode.STORE_CLOSED)

        minutes = to_minutes(reservation_time)
        if minutes < hours.open_minutes or minutes > hours.close_minutes:
            raise ReservationError(
                ErrorCode.OUTSIDE_BUSINESS_HOURS,
                f"Reservations are only available during business hours ({hours.label()})",
            )
        return hours

    def check_conflicts(
        self,
        schedule: StoreSchedule,
        reservation_date: date,
        reservation_time: time,
        party_size: int,
        duration: int,
        exclude_id: Optional[int] = None,
    ) -> None:
        """Check 5. Must run inside reservation_lock."""
        conflicts = count_exact_time_conflicts(
            self.db, schedule.store_id, reservation_date, reservation_time, exclude_id=exclude_id
        )
        if conflicts > 0:
            raise ReservationError(ErrorCode.TIME_SLOT_UNAVAILABLE)

        if not self.enforce_overlap_capacity:
            return

        entries = list_active_reservations(
            self.db,
            schedule.store_id,
            reservation_date,
            default_duration=schedule.average_meal_duration,
            exclude_id=exclude_id,
        )
        start = to_minutes(reservation_time)
        seated = occupancy(entries, start, start + duration)
        remaining = schedule.capacity - seated
        if remaining < party_size:
            raise ReservationError(
                ErrorCode.TIME_SLOT_UNAVAILABLE,
                f"Only {max(0, remaining)} seats remain at {format_hhmm(reservation_time)}. "
                "Please choose another time.",
            )

    def admit(self, request: BookingRequest, customer_id: int) -> Reservation:
        """Validate and persist a new PENDING reservation."""
        store = self._load_store(request.store_id)
        schedule = StoreSchedule.from_store(store)
        duration = request.estimated_duration or schedule.average_meal_duration

        try:
            self.validate(schedule, request.reservation_date, request.reservation_time, request.party_size)

            with reservation_lock(self.db, store.id, request.reservation_date):
                self.check_conflicts(
                    schedule,
                    request.reservation_date,
                    request.reservation_time,
                    request.party_size,
                    duration,
                )
                reservation = Reservation(
                    store_id=store.id,
                    customer_id=customer_id,
                    reservation_date=request.reservation_date,
                    reservation_time=request.reservation_time,
                    party_size=request.party_size,
                    estimated_duration=duration,
                    status=ReservationStatus.PENDING,
                    special_requests=request.special_requests,
                    contact_name=request.contact_name,
                    contact_phone=request.contact_phone,
                )
                self.db.add(reservation)
                self.db.commit()
        except ReservationError as e:
            logger.info(f"Booking rejected for store {request.store_id} on {request.reservation_date}: {e.code.value}")
            raise

        self.db.refresh(reservation)
        logger.info(
            f"Reservation {reservation.id} admitted for store {store.id}: "
            f"{reservation.reservation_date} {format_hhmm(reservation.reservation_time)}, party of {reservation.party_size}"
        )

        notify_store_owner(
            self.db,
            store,
            reservation,
            NotificationType.RESERVATION_CREATED,
            f"New reservation for {store.name} on {reservation.reservation_date.isoformat()} "
            f"at {format_hhmm(reservation.reservation_time)} (party of {reservation.party_size})",
        )
        return reservation

    @staticmethod
    def _apply(reservation: Reservation, changes: Dict[str, Any]) -> None:
        for f, value in changes.items():
            if f in SCHEDULING_FIELDS and value is None:
                continue
            setattr(reservation, f, value)

    def admit_update(self, reservation: Reservation, changes: Dict[str, Any]) -> Reservation:
        """
        Apply changes to an existing active reservation.

        When a scheduling field changes the result is re-admitted with the same
        checks as a new booking, ignoring the reservation itself.
        """
        store = self._load_store(reservation.store_id)
        schedule = StoreSchedule.from_store(store)

        new_date = changes.get("reservation_date") or reservation.reservation_date
        new_time = changes.get("reservation_time") or reservation.reservation_time
        new_party = changes.get("party_size") or reservation.party_size
        new_duration = changes.get("estimated_duration") or reservation.estimated_duration or schedule.average_meal_duration

        rescheduled = any(
            f in changes and changes[f] is not None and changes[f] != getattr(reservation, f)
            for f in SCHEDULING_FIELDS
        )

        if not rescheduled:
            self._apply(reservation, changes)
            self.db.commit()
            self.db.refresh(reservation)
            return reservation

        self.validate(schedule, new_date, new_time, new_party)
        with reservation_lock(self.db, store.id, new_date):
            self.check_conflicts(schedule, new_date, new_time, new_party, new_duration, exclude_id=reservation.id)
            self._apply(reservation, changes)
            reservation.estimated_duration = new_duration
            self.db.commit()

        self.db.refresh(reservation)
        logger.info(f"Reservation {reservation.id} rescheduled to {new_date} {format_hhmm(new_time)}")

        notify_store_owner(
            self.db,
            store,
            reservation,
            NotificationType.RESERVATION_UPDATED,
            f"Reservation #{reservation.id} at {store.name} changed to {new_date.isoformat()} "
            f"{format_hhmm(new_time)} (party of {new_party})",
        )
        return reservation
