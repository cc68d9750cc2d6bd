"""
Reservation Ledger queries and interval arithmetic.

Only PENDING and CONFIRMED reservations are "active" and occupy capacity. Every
reservation occupies the half-open interval [start, start + duration).
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from jarimae.models.reservation import Reservation, ReservationStatus, ACTIVE_STATUSES
from jarimae.services.schedule import to_minutes, format_hhmm


@dataclass(frozen=True)
class LedgerEntry:
    """An active reservation as seen by the availability engine."""
    time: time
    party_size: int
    duration: int
    id: Optional[int] = None
    status: ReservationStatus = ReservationStatus.PENDING

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "time": format_hhmm(self.time),
            "party_size": self.party_size,
            "duration": self.duration,
            "status": self.status.value,
        }


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open overlap test: [a_start, a_end) and [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def occupancy(entries: Iterable[LedgerEntry], start_minutes: int, end_minutes: int) -> int:
    """Guests seated at any point of [start_minutes, end_minutes)."""
    return sum(
        e.party_size
        for e in entries
        if intervals_overlap(start_minutes, end_minutes, e.start_minutes, e.end_minutes)
    )


def _active_query(db: Session, store_id: int, reservation_date: date, exclude_id: Optional[int] = None):
    query = db.query(Reservation).filter(
        Reservation.store_id == store_id,
        Reservation.reservation_date == reservation_date,
        Reservation.status.in_(ACTIVE_STATUSES),
    )
    if exclude_id is not None:
        query = query.filter(Reservation.id != exclude_id)
    return query


def list_active_reservations(
    db: Session,
    store_id: int,
    reservation_date: date,
    default_duration: Optional[int] = None,
    exclude_id: Optional[int] = None,
) -> List[LedgerEntry]:
    """
    Active reservations for a store on a date, ordered by start time.

    Args:
        default_duration: used for rows without an estimated_duration
        exclude_id: reservation to leave out (the one being modified)
    """
    rows = _active_query(db, store_id, reservation_date, exclude_id).order_by(
        Reservation.reservation_time, Reservation.id
    ).all()

    return [
        LedgerEntry(
            id=r.id,
            time=r.reservation_time,
            party_size=r.party_size,
            duration=r.estimated_duration or default_duration or 0,
            status=r.status,
        )
        for r in rows
    ]


def count_exact_time_conflicts(
    db: Session,
    store_id: int,
    reservation_date: date,
    reservation_time: time,
    exclude_id: Optional[int] = None,
) -> int:
    """Active reservations starting at exactly the same store, date and time."""
    return _active_query(db, store_id, reservation_date, exclude_id).filter(
        Reservation.reservation_time == reservation_time
    ).count()


def count_upcoming_active(db: Session, store_id: int, from_date: date) -> int:
    """Active reservations for a store dated on or after from_date."""
    return db.query(Reservation).filter(
        Reservation.store_id == store_id,
        Reservation.reservation_date >= from_date,
        Reservation.status.in_(ACTIVE_STATUSES),
    ).count()
