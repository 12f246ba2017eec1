from dataclasses import dataclass
from datetime import date

from fleet.exceptions import InvalidDateRangeError
from fleet.utils.constants import OPEN_END
from fleet.utils.dates import parse_date, parse_optional_date

OPEN_END_DATE = date.fromisoformat(OPEN_END)


@dataclass(frozen=True)
class Interval:
    """
    Occupied date range of a reservation, used only for overlap math.
    Both ends are inclusive days: 2024-06-01 -> 2024-06-05 blocks five days,
    and a booking ending on the 5th collides with one starting on the 5th.
    """
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"Error: start date {self.start.isoformat()} is after end date {self.end.isoformat()}")

    @classmethod
    def of(cls, start, end=None) -> "Interval":
        """Build from date-likes; a missing end means open-ended."""
        s = parse_date(start, "start date")
        e = parse_optional_date(end, "end date")
        return cls(s, e if e is not None else OPEN_END_DATE)

    @property
    def open_ended(self) -> bool:
        return self.end == OPEN_END_DATE

    def overlaps(self, other: "Interval") -> bool:
        """Inclusive rule: s1 <= e2 and s2 <= e1."""
        return self.start <= other.end and other.start <= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int | None:
        """Number of occupied days, or None when open-ended."""
        if self.open_ended:
            return None
        return (self.end - self.start).days + 1
