from datetime import date

import pytest

from app.studio.models import PassDuration
from app.studio.services.durations import add_months, apply_hold, compute_end_date, hold_length


@pytest.mark.parametrize(
    "start, days, expected",
    [
        (date(2024, 3, 1), 1, date(2024, 3, 1)),
        (date(2024, 3, 1), 7, date(2024, 3, 7)),
        (date(2024, 2, 25), 7, date(2024, 3, 2)),
        (date(2024, 3, 2), 30, date(2024, 3, 31)),
    ],
)
def test_day_passes_are_inclusive(start, days, expected):
    assert compute_end_date(start, PassDuration.days(days)) == expected


def test_month_pass_clamps_to_end_of_shorter_month():
    assert compute_end_date(date(2024, 1, 31), PassDuration.months(1)) == date(2024, 2, 28)


def test_month_pass_from_first_of_month():
    assert compute_end_date(date(2024, 3, 1), PassDuration.months(1)) == date(2024, 3, 31)


def test_quarter_subtracts_one_day():
    assert compute_end_date(date(2024, 3, 1), PassDuration.months(3)) == date(2024, 5, 31)


def test_half_year_subtracts_two_days():
    assert compute_end_date(date(2024, 1, 1), PassDuration.months(6)) == date(2024, 6, 29)


def test_year_subtracts_four_days():
    assert compute_end_date(date(2024, 1, 15), PassDuration.months(12)) == date(2025, 1, 11)


def test_add_months_crosses_year_and_clamps():
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert add_months(date(2023, 12, 31), 2) == date(2024, 2, 29)


def test_hold_extends_by_inclusive_length():
    base = date(2024, 3, 31)
    assert hold_length(date(2024, 3, 10), date(2024, 3, 16)) == 7
    assert apply_hold(base, date(2024, 3, 10), date(2024, 3, 16)) == date(2024, 4, 7)


def test_single_day_hold():
    assert apply_hold(date(2024, 3, 31), date(2024, 3, 10), date(2024, 3, 10)) == date(2024, 4, 1)


def test_inverted_or_missing_hold_is_ignored():
    base = date(2024, 3, 31)
    assert apply_hold(base, date(2024, 3, 16), date(2024, 3, 10)) == base
    assert apply_hold(base, date(2024, 3, 10), None) == base
    assert apply_hold(base) == base


def test_hold_applied_to_fresh_base_is_stable():
    start = date(2024, 3, 1)
    hold = (date(2024, 3, 10), date(2024, 3, 16))

    first = apply_hold(compute_end_date(start, PassDuration.months(1)), *hold)
    second = apply_hold(compute_end_date(start, PassDuration.months(1)), *hold)

    assert first == second == date(2024, 4, 7)
