"""
Interval math: inclusive-day overlap, open-ended ranges and validation.
"""
from datetime import date, timedelta
from itertools import product

import pytest

from fleet.exceptions import InvalidDateRangeError, ValidationError
from fleet.models.interval import Interval, OPEN_END_DATE


def test_boundary_day_counts_as_overlap():
    booked = Interval.of("2024-06-01", "2024-06-05")
    assert booked.overlaps(Interval.of("2024-06-05", "2024-06-06"))
    assert not booked.overlaps(Interval.of("2024-06-06", "2024-06-07"))


def test_overlap_is_symmetric_and_handles_containment():
    outer = Interval.of("2024-06-01", "2024-06-30")
    inner = Interval.of("2024-06-10", "2024-06-12")
    assert outer.overlaps(inner) and inner.overlaps(outer)


def test_open_ended_interval_blocks_every_later_day():
    rental = Interval.of("2024-06-01", None)
    assert rental.open_ended
    assert rental.end == OPEN_END_DATE
    assert rental.days is None
    assert rental.overlaps(Interval.of("2031-01-01", "2031-01-02"))
    assert not rental.overlaps(Interval.of("2024-05-01", "2024-05-31"))


def test_single_day_interval():
    day = Interval.of("2024-06-03", "2024-06-03")
    assert day.days == 1
    assert day.contains(date(2024, 6, 3))
    assert day.overlaps(Interval.of("2024-06-03", "2024-06-03"))


def test_start_after_end_rejected():
    with pytest.raises(InvalidDateRangeError):
        Interval.of("2024-06-05", "2024-06-01")


def test_garbage_date_rejected_as_validation_error():
    with pytest.raises(ValidationError):
        Interval.of("06/01/2024", "2024-06-05")


def test_iso_datetime_strings_are_truncated_to_dates():
    iv = Interval.of("2024-06-01T10:30:00", "2024-06-02T08:00:00Z")
    assert iv.start == date(2024, 6, 1)
    assert iv.end == date(2024, 6, 2)


def test_overlap_matches_shared_days():
    """The s1 <= e2 and s2 <= e1 rule agrees with 'the two ranges share a day'."""
    base = date(2024, 6, 1)
    days = [base + timedelta(days=i) for i in range(5)]
    spans = [(s, e) for s, e in product(days, days) if s <= e]
    for (s1, e1), (s2, e2) in product(spans, spans):
        shared = {s1 + timedelta(days=i) for i in range((e1 - s1).days + 1)} & \
                 {s2 + timedelta(days=i) for i in range((e2 - s2).days + 1)}
        assert Interval(s1, e1).overlaps(Interval(s2, e2)) == bool(shared)
