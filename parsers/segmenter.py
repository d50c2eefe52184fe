"""
Duty-Day Segmenter
==================

Walks reconstructed lines in reading order and cuts them into duty days.

State is explicit: either no day is open (NoActiveDay) or one day is being
accumulated (Accumulating). `step` is a pure reducer returning the next
state and, when a boundary closes a day, the finished accumulation.

A line opens a new day only if BOTH hold:
- a DDMMMYY date token starts at or before offset 6
- a weekday token (MON..SUN) starts before offset 25

A dated row repeating the open day's date continues that day.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from models.data_models import Line
from core.parameters import VocabularyParameters
from core.pay_windows import MONTHS, parse_roster_date

DATE_TOKEN_RE = re.compile(r'\b(\d{2})(' + '|'.join(MONTHS) + r')(\d{2})\b')

_DEFAULT_VOCAB = VocabularyParameters()


# ============================================================================
# STATES
# ============================================================================

@dataclass(frozen=True)
class NoActiveDay:
    pass


@dataclass(frozen=True)
class Accumulating:
    start_date: str
    lines: Tuple[Line, ...]


SegmenterState = Union[NoActiveDay, Accumulating]


# ============================================================================
# PREDICATES
# ============================================================================

def find_start_date(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> Optional[str]:
    """The DDMMMYY token if the line is a new-day boundary, else None."""
    m = DATE_TOKEN_RE.search(text)
    if not m or m.start() > vocab.max_date_offset:
        return None
    if parse_roster_date(m.group(0)) is None:
        return None

    weekday_re = r'\b(?:' + '|'.join(re.escape(w) for w in vocab.weekdays) + r')\b'
    wd = re.search(weekday_re, text)
    if not wd or wd.start() > vocab.max_weekday_offset:
        return None
    return m.group(0)


def is_new_day(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> bool:
    return find_start_date(text, vocab) is not None


def is_skippable(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB,
                 extra_checks=()) -> bool:
    """Report titles, legends, header rows and crew banners carry no duty data."""
    for pattern in vocab.all_skip_patterns:
        if re.search(pattern, text, re.IGNORECASE):
            return True
    return any(check(text) for check in extra_checks)


# ============================================================================
# REDUCER
# ============================================================================

def step(state: SegmenterState, line: Line,
         vocab: VocabularyParameters = _DEFAULT_VOCAB) -> Tuple[SegmenterState, Optional[Accumulating]]:
    """
    Advance by one (already filtered) line.

    Returns (next_state, emitted) where emitted is the accumulation closed
    by this line, if any.
    """
    start_date = find_start_date(line.text, vocab)
    # A day printed over several dated rows stays one day
    if isinstance(state, Accumulating) and start_date == state.start_date:
        start_date = None

    if start_date is not None:
        emitted = state if isinstance(state, Accumulating) else None
        return Accumulating(start_date=start_date, lines=(line,)), emitted

    if isinstance(state, Accumulating):
        return Accumulating(start_date=state.start_date, lines=state.lines + (line,)), None

    # Nothing to attach to before the first boundary
    return state, None


def flush(state: SegmenterState) -> Optional[Accumulating]:
    return state if isinstance(state, Accumulating) else None


def segment(lines: List[Line], vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[Accumulating]:
    """Run the reducer over `lines` and return every accumulation in order."""
    state: SegmenterState = NoActiveDay()
    days = []
    for line in lines:
        state, emitted = step(state, line, vocab)
        if emitted is not None:
            days.append(emitted)
    last = flush(state)
    if last is not None:
        days.append(last)
    return days
