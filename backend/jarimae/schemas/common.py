import re
from datetime import date, time
from typing import Annotated

from pydantic import AfterValidator, BeforeValidator, PlainSerializer

_HHMM = re.compile(r"^\d{2}:\d{2}$")


def _parse_hhmm(value):
    if isinstance(value, str):
        if not _HHMM.match(value):
            raise ValueError("Time must be in HH:MM format")
        hour, minute = (int(part) for part in value.split(":"))
        return time(hour, minute)
    return value


def _not_in_past(value: date) -> date:
    if value < date.today():
        raise ValueError("Reservation date must be today or later")
    return value


# Store-local wall clock time, exchanged as "HH:MM"
HHMMTime = Annotated[
    time,
    BeforeValidator(_parse_hhmm),
    PlainSerializer(lambda t: t.strftime("%H:%M"), return_type=str, when_used="json"),
]

FutureDate = Annotated[date, AfterValidator(_not_in_past)]
