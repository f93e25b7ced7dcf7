"""Birthdate window derivation for age-range searches."""

from datetime import date, datetime, timedelta

from domain.model.errors import ValidationError


def _shift_years(day: date, years: int) -> date:
    """Same month/day `years` earlier; Feb 29 overflows into Mar 1."""
    year = day.year - years
    try:
        return day.replace(year=year)
    except ValueError:
        return date(year, day.month, 28) + timedelta(days=1)


def birthdate_window(min_age: int, max_age: int, now: date) -> tuple[date, date]:
    """Return the inclusive (min_birthdate, max_birthdate) window for an age range.

    The lower bound subtracts ``max_age + 1`` years, so the window reaches
    roughly one year past the oldest requested age. Existing clients depend
    on that window; keep it.
    """
    if min_age < 0 or max_age < 0:
        raise ValidationError("Ages must be non-negative")
    if min_age > max_age:
        raise ValidationError("min_age must not exceed max_age")

    if isinstance(now, datetime):
        now = now.date()
    min_birthdate = _shift_years(now, max_age + 1)
    max_birthdate = _shift_years(now, min_age)
    return min_birthdate, max_birthdate
