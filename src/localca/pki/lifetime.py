"""Validity window computation.

Root certificates self-issue and are never clamped. Intermediates and
leaves are clamped to the issuing parent's notAfter; when that happens the
returned Validity carries ``reduced=True`` for the reporting layer. Leaves
are additionally bounded by LEAF_MAX_DAYS before the parent clamp.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .. import config
from ..errors import ValidationError


@dataclass(frozen=True)
class Validity:
    not_before: datetime
    not_after: datetime
    reduced: bool = False


def utcnow() -> datetime:
    # certificates carry second precision; dropping microseconds keeps comparisons exact
    return datetime.now(timezone.utc).replace(microsecond=0)


def add_date(t: datetime, years: int = 0, months: int = 0, days: int = 0) -> datetime:
    """Calendar arithmetic with overflow normalization.

    Jan 31 + 1 month is Mar 3 (or Mar 2 in leap years): the day-of-month is
    kept and any overflow spills into the following month.
    """
    month_index = t.year * 12 + (t.month - 1) + years * 12 + months
    year, month0 = divmod(month_index, 12)
    try:
        first = t.replace(year=year, month=month0 + 1, day=1)
        return first + timedelta(days=t.day - 1 + days)
    except (OverflowError, ValueError) as e:
        raise ValidationError(
            f"the requested lifetime ({years} years, {months} months, {days} days) is out of range"
        ) from e


def root_validity(years: int = 0, now: Optional[datetime] = None) -> Validity:
    now = now or utcnow()
    span = years or config.DEFAULT_ROOT_YEARS
    return Validity(not_before=now, not_after=add_date(now, years=span))


def requested_not_after(now: datetime, years: int = 0, months: int = 0, days: int = 0) -> datetime:
    if years or months or days:
        return add_date(now, years=years, months=months, days=days)
    return add_date(now, years=config.DEFAULT_ISSUED_YEARS, months=config.DEFAULT_ISSUED_MONTHS)


def clamp_to_parent(not_before: datetime, not_after: datetime, parent_not_after: datetime) -> Validity:
    if not_after > parent_not_after:
        return Validity(not_before=not_before, not_after=parent_not_after, reduced=True)
    return Validity(not_before=not_before, not_after=not_after)


def issued_validity(
    parent_not_after: datetime,
    *,
    years: int = 0,
    months: int = 0,
    days: int = 0,
    leaf: bool = True,
    now: Optional[datetime] = None,
) -> Validity:
    now = now or utcnow()
    not_after = requested_not_after(now, years=years, months=months, days=days)
    if not_after <= now:
        raise ValidationError("the requested validity ends before it starts")
    if leaf:
        ceiling = now + timedelta(days=config.LEAF_MAX_DAYS)
        if not_after > ceiling:
            raise ValidationError(
                f"leaf certificates must not be valid for more than {config.LEAF_MAX_DAYS} days "
                f"(requested until {format_date(not_after)})"
            )
    return clamp_to_parent(now, not_after, parent_not_after)


def format_date(t: datetime) -> str:
    return f"{t.day} {calendar.month_name[t.month]} {t.year}"
