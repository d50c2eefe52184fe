"""
Duty-Day Field Extractors
=========================

Per-line extraction of duty codes, flights, sectors, times, hotel codes and
remarks. Every extractor is a pure function of the line; anything that does
not match its expected shape is dropped.

Sectors come from two independent strategies:
- generic pairing of adjacent 3-letter tokens anywhere in the line
- column-aware pairing of 3-letter tokens inside the learned sector column
Their results are combined and filtered to the strict AAA-BBB shape.
"""

import re
from typing import List, Optional

from models.data_models import DutyDay, Line, ColumnBounds
from core.parameters import VocabularyParameters

SECTOR_RE = re.compile(r'^[A-Z]{3}-[A-Z]{3}$')
AIRPORT_TOKEN_RE = re.compile(r'^[A-Z]{3}$')
HYPHEN_SECTOR_RE = re.compile(r'\b([A-Z]{3})\s*[-–]\s*([A-Z]{3})\b')
FLIGHT_RE = re.compile(r'\b([A-Z]{2})\s?(\d{3,4})\b')
TIME_RE = re.compile(r'\b(\d{2})(\d{2})\b')
HOTEL_RE = re.compile(r'\b(?:[A-Z]{3}\d|[A-Z]{4})\b')
OWN_ACCOM_RE = re.compile(r'\bOA\s+(\d{1,2})/(\d{1,2})\s+([A-Z]{3})\b')

_DEFAULT_VOCAB = VocabularyParameters()


def _training_re(vocab: VocabularyParameters):
    return re.compile(rf'\b{re.escape(vocab.training_prefix)}\d[\w-]*\b')


# ============================================================================
# SIMPLE TOKEN CLASSES
# ============================================================================

def extract_duty_codes(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    return [code for code in vocab.duty_codes if re.search(rf'\b{re.escape(code)}\b', text)]


def _flight_matches(text: str, vocab: VocabularyParameters):
    not_carriers = set(vocab.duty_codes) | {'OA'}
    for m in FLIGHT_RE.finditer(text):
        prefix = m.group(1)
        if prefix in not_carriers:
            continue
        if vocab.carrier_prefixes and prefix not in vocab.carrier_prefixes:
            continue
        yield m


def extract_flights(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    """Flight designators like "VA 0916" or "VA916", whitespace removed."""
    return [m.group(1) + m.group(2) for m in _flight_matches(text, vocab)]


def is_valid_hhmm(token: str) -> bool:
    if len(token) != 4 or not token.isdigit():
        return False
    return int(token[:2]) <= 23 and int(token[2:]) <= 59


def extract_times(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    """HHMM tokens with a valid clock value; digits of spaced flight numbers are ignored."""
    for m in reversed(list(_flight_matches(text, vocab))):
        text = text[:m.start()] + ' ' * (m.end() - m.start()) + text[m.end():]
    return [m.group(0) for m in TIME_RE.finditer(text) if is_valid_hhmm(m.group(0))]


def extract_hotels(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    excluded = set(vocab.weekdays) | set(vocab.duty_codes) | set(vocab.hotel_stopwords)
    return [
        h for h in HOTEL_RE.findall(text)
        if h not in excluded and not h.startswith(vocab.training_prefix)
    ]


def extract_remarks(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    """Training codes (RTP4-Day1) and own accommodation notices (OA 12/13 BNE)."""
    remarks = _training_re(vocab).findall(text)
    remarks.extend(' '.join(m.group(0).split()) for m in OWN_ACCOM_RE.finditer(text))
    return remarks


# ============================================================================
# SECTORS
# ============================================================================

def is_airport_candidate(token: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> bool:
    if not AIRPORT_TOKEN_RE.match(token):
        return False
    return not (token in vocab.weekdays or token in vocab.non_airport_tokens or token in vocab.duty_codes)


def extract_sectors_generic(text: str, vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    """
    Pair adjacent 3-letter airport-like tokens ("SYD BNE" -> "SYD-BNE") and
    pick up explicit "SYD-BNE" / "SYD - BNE" forms. Pairs do not overlap.
    """
    sectors = []
    for m in HYPHEN_SECTOR_RE.finditer(text):
        a, b = m.group(1), m.group(2)
        if is_airport_candidate(a, vocab) and is_airport_candidate(b, vocab):
            sectors.append(f"{a}-{b}")

    tokens = text.split()
    i = 0
    while i < len(tokens) - 1:
        a, b = tokens[i], tokens[i + 1]
        if is_airport_candidate(a, vocab) and is_airport_candidate(b, vocab):
            sectors.append(f"{a}-{b}")
            i += 2
        else:
            i += 1
    return sectors


def extract_sectors_by_column(line: Line, bounds: Optional[ColumnBounds],
                              vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    """
    Pair the 3-letter tokens that sit inside the sector column, in x order
    (1st with 2nd, 3rd with 4th, ...). Only lines carrying a flight number
    are considered; without bounds nothing is extracted.
    """
    if bounds is None or not extract_flights(line.text, vocab):
        return []

    sectors = []
    codes = []
    for frag in sorted(line.fragments, key=lambda f: f.x):
        if not bounds.contains(frag.x):
            continue
        token = frag.text.strip()
        if SECTOR_RE.match(token):
            sectors.append(token)
        elif AIRPORT_TOKEN_RE.match(token):
            codes.append(token)
    for a, b in zip(codes[0::2], codes[1::2]):
        sectors.append(f"{a}-{b}")
    return sectors


def filter_sectors(values) -> List[str]:
    return [v for v in values if isinstance(v, str) and SECTOR_RE.match(v)]


def extract_sectors(line: Line, bounds: Optional[ColumnBounds],
                    vocab: VocabularyParameters = _DEFAULT_VOCAB) -> List[str]:
    by_column = extract_sectors_by_column(line, bounds, vocab)
    if vocab.sector_strategy == 'column_preferred' and by_column:
        return filter_sectors(by_column)
    return filter_sectors(by_column + extract_sectors_generic(line.text, vocab))


# ============================================================================
# LINE -> DUTY DAY
# ============================================================================

def extract_into(day: DutyDay, line: Line, bounds: Optional[ColumnBounds] = None,
                 vocab: VocabularyParameters = _DEFAULT_VOCAB) -> DutyDay:
    """Append everything found on `line` to `day` (no de-duplication here)."""
    text = line.text
    day.raw_lines.append(text)
    day.duty_codes.extend(extract_duty_codes(text, vocab))
    day.remarks.extend(extract_remarks(text, vocab))
    day.flights.extend(extract_flights(text, vocab))
    day.sectors.extend(extract_sectors(line, bounds, vocab))
    day.times.extend(extract_times(text, vocab))
    day.hotels.extend(extract_hotels(text, vocab))
    return day
