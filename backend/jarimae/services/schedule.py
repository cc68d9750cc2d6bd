"""
Store Schedule Model

Weekly business hours plus the seating parameters a store exposes to the
reservation engine. Days are numbered 0=Sunday .. 6=Saturday and hours never
wrap past midnight.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, Optional, Tuple

DAYS_IN_WEEK = 7
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def day_of_week(d: date) -> int:
    """Sunday-based weekday index for a calendar date."""
    return (d.weekday() + 1) % DAYS_IN_WEEK


def to_minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def format_hhmm(t: time) -> str:
    return t.strftime("%H:%M")


@dataclass(frozen=True)
class DayHours:
    day_of_week: int
    open_time: time
    close_time: time
    is_closed: bool = False

    @property
    def open_minutes(self) -> int:
        return to_minutes(self.open_time)

    @property
    def close_minutes(self) -> int:
        return to_minutes(self.close_time)

    def label(self) -> str:
        return f"{format_hhmm(self.open_time)}-{format_hhmm(self.close_time)}"

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "open_time": format_hhmm(self.open_time),
            "close_time": format_hhmm(self.close_time),
            "is_closed": self.is_closed,
        }


def validate_week(hours: Iterable) -> None:
    """
    Enforce the weekly hours invariant at write time.

    Accepts anything with day_of_week/open_time/close_time/is_closed attributes
    and raises ValueError when the week is not exactly one entry per day or an
    open day does not open before it closes.
    """
    entries = list(hours)
    if len(entries) != DAYS_IN_WEEK:
        raise ValueError(f"Business hours must have exactly {DAYS_IN_WEEK} entries, got {len(entries)}")

    days = sorted(e.day_of_week for e in entries)
    if days != list(range(DAYS_IN_WEEK)):
        raise ValueError("Business hours must cover each day of the week (0=Sunday..6=Saturday) exactly once")

    for e in entries:
        if not e.is_closed and e.open_time >= e.close_time:
            raise ValueError(
                f"{DAY_NAMES[e.day_of_week]}: open_time must be before close_time"
            )


@dataclass(frozen=True)
class StoreSchedule:
    store_id: int
    capacity: int
    average_meal_duration: int
    accepts_reservations: bool
    is_active: bool
    business_hours: Tuple[DayHours, ...]

    @classmethod
    def from_store(cls, store) -> "StoreSchedule":
        """Snapshot a Store row (and its business_hours rows) into a plain schedule."""
        from jarimae.models.store import StoreStatus

        return cls(
            store_id=store.id,
            capacity=store.capacity,
            average_meal_duration=store.average_meal_duration,
            accepts_reservations=bool(store.accepts_reservations),
            is_active=store.status == StoreStatus.ACTIVE,
            business_hours=tuple(
                DayHours(
                    day_of_week=bh.day_of_week,
                    open_time=bh.open_time,
                    close_time=bh.close_time,
                    is_closed=bool(bh.is_closed),
                )
                for bh in store.business_hours
            ),
        )

    def hours_for(self, dow: int) -> Optional[DayHours]:
        """Hours for a weekday, or None when no entry exists."""
        for hours in self.business_hours:
            if hours.day_of_week == dow:
                return hours
        return None

    def open_hours_on(self, d: date) -> Optional[DayHours]:
        """Hours for a date, or None when the store does not open that day."""
        hours = self.hours_for(day_of_week(d))
        if hours is None or hours.is_closed:
            return None
        return hours
