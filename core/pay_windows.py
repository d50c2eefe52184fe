"""
Pay-Period Window Calculator
============================

Fortnight arithmetic for posting duty-day extras:
- current: 14 days starting at the chosen fortnight start
- prev:    the 14 days immediately before current
- inferred pay date: current.end + 4 days (observed pay-run offset)

A supplied pay date is only compared against the inferred one; it never
moves the windows.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional, Union

from models.data_models import PayWindow, PayWindows, Bucket
from core.parameters import PayPeriodParameters

logger = logging.getLogger(__name__)

# Roster dates are always printed with English month abbreviations
MONTHS = ('JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN',
          'JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC')
ROSTER_DATE_RE = re.compile(r'^(\d{2})(' + '|'.join(MONTHS) + r')(\d{2})$')

DateLike = Union[date, datetime, str]


def parse_iso_date(value: DateLike) -> date:
    """'YYYY-MM-DD' (or a date/datetime) to date. Raises ValueError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()


def parse_roster_date(token: str) -> Optional[date]:
    """'07DEC25' -> date(2025, 12, 7); None for anything else."""
    m = ROSTER_DATE_RE.match((token or '').strip().upper())
    if not m:
        return None
    try:
        return date(2000 + int(m.group(3)), MONTHS.index(m.group(2)) + 1, int(m.group(1)))
    except ValueError:
        return None


def format_roster_date(day: date) -> str:
    return f"{day.day:02d}{MONTHS[day.month - 1]}{day.year % 100:02d}"


def compute_pay_windows(fortnight_start: DateLike, pay_date: Optional[DateLike] = None,
                        params: Optional[PayPeriodParameters] = None) -> PayWindows:
    params = params or PayPeriodParameters()
    start = parse_iso_date(fortnight_start)
    length = timedelta(days=params.period_days)

    current = PayWindow(start=start, end=start + length - timedelta(days=1))
    prev = PayWindow(start=start - length, end=start - timedelta(days=1))
    inferred = current.end + timedelta(days=params.pay_offset_days)

    delta = None
    if pay_date not in (None, ''):
        delta = (parse_iso_date(pay_date) - inferred).days
        if delta:
            logger.info("Pay date differs from inferred %s by %+d days", inferred.isoformat(), delta)

    return PayWindows(current=current, prev=prev, inferred_pay_date=inferred, pay_delta_days=delta)


def suggest_fortnight_start(pay_date: DateLike, existing: Optional[DateLike] = None,
                            params: Optional[PayPeriodParameters] = None) -> date:
    """
    Fortnight start implied by a pay date (pay - offset - (period - 1) days).
    An existing value is returned untouched.
    """
    if existing not in (None, ''):
        return parse_iso_date(existing)
    params = params or PayPeriodParameters()
    back = params.pay_offset_days + params.period_days - 1
    return parse_iso_date(pay_date) - timedelta(days=back)


def bucket_for(day: Optional[date], windows: PayWindows) -> str:
    if day is None:
        return Bucket.NONE.value
    if windows.current.contains(day):
        return Bucket.CURRENT.value
    if windows.prev.contains(day):
        return Bucket.PREV.value
    return Bucket.NONE.value
