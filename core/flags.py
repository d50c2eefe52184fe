"""
Duty Flags & Audit Rows
=======================

Derives per-day audit flags and builds the bucketed DutyRow projection.

Own-accommodation (OA) nights come from two independent sources:
1. an "OA d1/d2 AAA" remark: the night of day d1, resolved against the
   remark's own duty date
2. a layover (LO) whose hotel is the own-accommodation code (BNEO)

Resolving d1: the remark only carries a day of month. Candidates are d1
in the month before, the same month and the month after the duty date;
the closest one to the duty date wins (ties: same month, then later).
So "OA 1/2 SYD" on 31JAN26 means 01FEB26, and "OA 31/1 SYD" on 01FEB26
means 31JAN26.
"""

import re
import logging
from datetime import date
from typing import Iterable, List, Optional, Set

from models.data_models import DutyDay, DutyRow, PayWindows, AuditFlag, DutyCode
from core.parameters import ParserConfig, VocabularyParameters
from core.pay_windows import parse_roster_date, format_roster_date, bucket_for

logger = logging.getLogger(__name__)

OA_REMARK_RE = re.compile(r'\bOA\s+(\d{1,2})/(\d{1,2})\s+([A-Z]{3})\b')


def _shift_month(year: int, month: int, offset: int):
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def resolve_day_of_month(base: date, day_of_month: int) -> Optional[date]:
    """Date with `day_of_month` nearest to `base`, looking one month either side."""
    candidates = []
    # Priority breaks distance ties: same month, then next, then previous
    for offset, priority in ((0, 0), (1, 1), (-1, 2)):
        year, month = _shift_month(base.year, base.month, offset)
        try:
            candidate = date(year, month, day_of_month)
        except ValueError:
            continue
        candidates.append((abs((candidate - base).days), priority, candidate))
    if not candidates:
        return None
    return min(candidates)[2]


def own_accommodation_dates(duties: Iterable[DutyDay],
                            vocab: Optional[VocabularyParameters] = None) -> Set[str]:
    """DDMMMYY keys of every own-accommodation night in `duties`."""
    vocab = vocab or VocabularyParameters()
    dates: Set[str] = set()
    for day in duties:
        base = parse_roster_date(day.start_date)

        for remark in day.remarks:
            m = OA_REMARK_RE.search(remark)
            if not m or base is None:
                continue
            resolved = resolve_day_of_month(base, int(m.group(1)))
            if resolved is not None:
                dates.add(format_roster_date(resolved))

        if DutyCode.LO.value in day.duty_codes and vocab.own_accommodation_hotel in day.hotels:
            dates.add(day.start_date)
    return dates


def derive_flags(row: DutyRow, oa_dates: Set[str],
                 vocab: Optional[VocabularyParameters] = None) -> List[str]:
    vocab = vocab or VocabularyParameters()
    codes = set(row.duty_codes)
    checks = {
        AuditFlag.FLY: bool(row.flights) or DutyCode.FLY.value in codes,
        AuditFlag.LO: DutyCode.LO.value in codes,
        AuditFlag.TVL: DutyCode.TVL.value in codes,
        AuditFlag.RDO: DutyCode.RDO.value in codes,
        AuditFlag.TRN: any(r.startswith(vocab.training_prefix) for r in row.remarks),
        AuditFlag.OA: row.start_date in oa_dates,
    }
    return [flag.value for flag in AuditFlag if checks[flag]]


def build_duty_rows(duties: List[DutyDay], windows: PayWindows,
                    config: Optional[ParserConfig] = None) -> List[DutyRow]:
    """Bucket, flag and date-sort duty days (unparseable dates go last)."""
    config = config or ParserConfig.default_config()
    oa_dates = own_accommodation_dates(duties, config.vocabulary)

    rows = []
    for day in duties:
        parsed = parse_roster_date(day.start_date)
        if parsed is None:
            logger.debug("Unparseable duty date %r, left unbucketed", day.start_date)
        row = DutyRow(
            start_date=day.start_date,
            date=parsed,
            bucket=bucket_for(parsed, windows),
            duty_codes=list(day.duty_codes),
            flights=list(day.flights),
            sectors=list(day.sectors),
            times=list(day.times),
            hotels=list(day.hotels),
            remarks=list(day.remarks),
        )
        row.flags = derive_flags(row, oa_dates, config.vocabulary)
        rows.append(row)

    rows.sort(key=lambda r: (r.date is None, r.date or date.min))
    return rows
