"""
Availability Calculator

Computes bookable start times for a store on a date:
- Candidate slots every 30 minutes from opening until the last start that still
  fits one average meal before closing (inclusive bound)
- Each slot occupies [slot, slot + average_meal_duration)
- A slot's remaining capacity is capacity minus the guests of every active
  reservation whose own [start, start + duration) overlaps it

Results are computed fresh on every call and never stored.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session, selectinload

from jarimae.config import get_settings
from jarimae.core.errors import ErrorCode, ReservationError
from jarimae.models.store import Store, StoreStatus
from jarimae.services.ledger import LedgerEntry, list_active_reservations, occupancy
from jarimae.services.schedule import (
    DayHours,
    StoreSchedule,
    day_of_week,
    format_hhmm,
    minutes_to_time,
    to_minutes,
)

settings = get_settings()

DEFAULT_SLOT_INTERVAL = 30


@dataclass
class Slot:
    time: time
    available: bool
    remaining_capacity: int

    def to_dict(self) -> dict:
        return {
            "time": format_hhmm(self.time),
            "available": self.available,
            "remaining_capacity": self.remaining_capacity,
        }


@dataclass
class PreferredTimeResult:
    time: time
    available: bool
    reason: Optional[ErrorCode] = None
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "time": format_hhmm(self.time),
            "available": self.available,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
        }


@dataclass
class AvailabilityResult:
    store_id: int
    reservation_date: date
    party_size: int
    available: bool
    message: str
    slots: List[Slot] = field(default_factory=list)
    business_hours: Optional[DayHours] = None
    preferred_time: Optional[PreferredTimeResult] = None
    # Set only when the request itself cannot be satisfied
    reason: Optional[ErrorCode] = None

    @property
    def available_slots(self) -> List[Slot]:
        return [s for s in self.slots if s.available]

    def to_dict(self) -> dict:
        return {
            "store_id": self.store_id,
            "reservation_date": self.reservation_date.isoformat(),
            "party_size": self.party_size,
            "available": self.available,
            "message": self.message,
            "business_hours": self.business_hours.to_dict() if self.business_hours else None,
            "slots": [s.to_dict() for s in self.slots],
            "available_slots": [s.to_dict() for s in self.available_slots],
            "total_available_slots": len(self.available_slots),
            "preferred_time": self.preferred_time.to_dict() if self.preferred_time else None,
            "reason": self.reason.value if self.reason else None,
        }


def generate_slot_grid(
    open_minutes: int,
    close_minutes: int,
    duration: int,
    interval: int = DEFAULT_SLOT_INTERVAL,
) -> List[int]:
    """
    Slot start minutes from open while start <= close - duration.

    Empty when the day is too short for a single seating.
    """
    return list(range(open_minutes, close_minutes - duration + 1, interval))


def _classify_preferred_time(
    preferred_time: time,
    hours: DayHours,
    duration: int,
    slots: Sequence[Slot],
) -> PreferredTimeResult:
    minutes = to_minutes(preferred_time)
    if minutes < hours.open_minutes or minutes > hours.close_minutes - duration:
        return PreferredTimeResult(
            time=preferred_time,
            available=False,
            reason=ErrorCode.OUTSIDE_BUSINESS_HOURS,
            message=f"Reservations are only available during business hours ({hours.label()})",
        )

    # Times between grid points have no slot of their own and are reported as available
    slot = next((s for s in slots if s.time == preferred_time), None)
    if slot is not None and not slot.available:
        return PreferredTimeResult(
            time=preferred_time,
            available=False,
            reason=ErrorCode.TIME_SLOT_UNAVAILABLE,
            message="The selected time is not available. Please choose another time.",
        )
    return PreferredTimeResult(time=preferred_time, available=True)


def calculate_availability(
    schedule: StoreSchedule,
    entries: Sequence[LedgerEntry],
    reservation_date: date,
    party_size: int,
    preferred_time: Optional[time] = None,
    interval: int = DEFAULT_SLOT_INTERVAL,
) -> AvailabilityResult:
    """
    Pure availability computation over a schedule and a ledger snapshot.

    Raises ReservationError for stores that cannot be booked at all. A party
    larger than the store and a closed day are returned as unavailable results.
    """
    if party_size < 1:
        raise ValueError("party_size must be a positive integer")

    if not schedule.is_active:
        raise ReservationError(ErrorCode.STORE_INACTIVE)
    if not schedule.accepts_reservations:
        raise ReservationError(ErrorCode.RESERVATIONS_NOT_ACCEPTED)

    if party_size > schedule.capacity:
        return AvailabilityResult(
            store_id=schedule.store_id,
            reservation_date=reservation_date,
            party_size=party_size,
            available=False,
            reason=ErrorCode.PARTY_SIZE_EXCEEDS_CAPACITY,
            message=f"Party size exceeds the store's maximum capacity ({schedule.capacity})",
        )

    hours = schedule.hours_for(day_of_week(reservation_date))
    if hours is None or hours.is_closed:
        return AvailabilityResult(
            store_id=schedule.store_id,
            reservation_date=reservation_date,
            party_size=party_size,
            available=False,
            message="The store is closed on this date",
        )

    duration = schedule.average_meal_duration
    slots = []
    for start in generate_slot_grid(hours.open_minutes, hours.close_minutes, duration, interval):
        remaining = schedule.capacity - occupancy(entries, start, start + duration)
        slots.append(Slot(
            time=minutes_to_time(start),
            available=remaining >= party_size,
            remaining_capacity=max(0, remaining),
        ))

    preferred = None
    if preferred_time is not None:
        preferred = _classify_preferred_time(preferred_time, hours, duration, slots)

    available = any(s.available for s in slots)
    return AvailabilityResult(
        store_id=schedule.store_id,
        reservation_date=reservation_date,
        party_size=party_size,
        available=available,
        message=(
            "Reservations are available on this date"
            if available
            else "No reservation times are available on this date"
        ),
        slots=slots,
        business_hours=hours,
        preferred_time=preferred,
    )


class AvailabilityCalculator:
    """Reads a store and its active reservations, then runs calculate_availability."""

    def __init__(self, db: Session):
        self.db = db
        self.interval = settings.slot_interval_minutes

    def get_schedule(self, store_id: int) -> StoreSchedule:
        store = self.db.query(Store).options(
            selectinload(Store.business_hours)
        ).filter(Store.id == store_id, Store.status != StoreStatus.DELETED).first()
        if not store:
            raise ReservationError(ErrorCode.STORE_NOT_FOUND)
        return StoreSchedule.from_store(store)

    def check(
        self,
        store_id: int,
        reservation_date: date,
        party_size: int,
        preferred_time: Optional[time] = None,
    ) -> AvailabilityResult:
        schedule = self.get_schedule(store_id)
        entries = list_active_reservations(
            self.db,
            store_id,
            reservation_date,
            default_duration=schedule.average_meal_duration,
        )
        return calculate_availability(
            schedule,
            entries,
            reservation_date,
            party_size,
            preferred_time=preferred_time,
            interval=self.interval,
        )
