"""
data_models.py - Core Data Structures
======================================

Data models for roster import: positioned text, reconstructed lines,
duty days, pay windows and the flattened duty rows handed to renderers.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Dict, Any, Tuple
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class DutyCode(Enum):
    """Roster duty codes the importer recognises"""
    FLY = "FLY"    # Flying duty
    TVL = "TVL"    # Travel (positioning)
    LO = "LO"      # Layover, overnight away from base
    RDO = "RDO"    # Rostered day off


class Bucket(Enum):
    """Posting window a duty day falls into"""
    CURRENT = "CURRENT"
    PREV = "PREV"
    NONE = ""


class AuditFlag(Enum):
    """Derived flags, declared in display order"""
    FLY = "FLY"
    LO = "LO"
    TVL = "TVL"
    RDO = "RDO"
    TRN = "TRN"    # Training code in remarks
    OA = "OA"      # Own accommodation night


# ============================================================================
# TEXT LAYER
# ============================================================================

@dataclass(frozen=True)
class TextFragment:
    """One positioned piece of text from a PDF page (PDF user space, y grows upward)"""
    text: str
    x: float
    y: float
    page: int


@dataclass(frozen=True)
class ColumnBounds:
    """Horizontal pixel range of the sector column"""
    left: float
    right: float

    def contains(self, x: float) -> bool:
        return self.left <= x <= self.right


@dataclass(frozen=True)
class Line:
    """A visual row of fragments joined left-to-right"""
    page: int
    y: float
    text: str
    fragments: Tuple[TextFragment, ...] = field(default=(), compare=False, repr=False)
    # Sector column in force when the line was read (None before the header)
    bounds: Optional[ColumnBounds] = field(default=None, compare=False, repr=False)


# ============================================================================
# DUTY DAYS
# ============================================================================

# Serialised (envelope) key for each list-valued DutyDay field
DUTY_LIST_FIELDS: Dict[str, str] = {
    'duty_codes': 'dutyCodes',
    'flights': 'flights',
    'sectors': 'sectors',
    'times': 'times',
    'hotels': 'hotels',
    'remarks': 'remarks',
}


def dedup(values) -> List[str]:
    """Order-preserving de-duplication that also drops empty values."""
    seen = set()
    out = []
    for v in values:
        if not v or v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


@dataclass
class DutyDay:
    """
    One roster day, keyed by its DDMMMYY start date (e.g. "07DEC25").

    List fields accumulate while the segmenter feeds lines in and are
    de-duplicated by finalize(); their order carries no meaning but is
    stable for a given input.
    """
    start_date: str
    duty_codes: List[str] = field(default_factory=list)
    flights: List[str] = field(default_factory=list)
    sectors: List[str] = field(default_factory=list)
    times: List[str] = field(default_factory=list)
    hotels: List[str] = field(default_factory=list)
    remarks: List[str] = field(default_factory=list)
    raw_lines: List[str] = field(default_factory=list)

    def finalize(self) -> 'DutyDay':
        for attr in DUTY_LIST_FIELDS:
            setattr(self, attr, dedup(getattr(self, attr)))
        return self

    def to_dict(self, include_raw_lines: bool = True) -> Dict[str, Any]:
        data: Dict[str, Any] = {'startDate': self.start_date}
        for attr, key in DUTY_LIST_FIELDS.items():
            data[key] = list(getattr(self, attr))
        if include_raw_lines:
            data['rawLines'] = list(self.raw_lines)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DutyDay':
        """Build from an envelope entry. Non-string list items are dropped."""
        def _strings(key):
            value = data.get(key) or []
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, (list, tuple)):
                return []
            return [str(v).strip() for v in value if isinstance(v, (str, int)) and str(v).strip()]

        day = cls(start_date=str(data['startDate']).strip())
        for attr, key in DUTY_LIST_FIELDS.items():
            setattr(day, attr, _strings(key))
        day.raw_lines = _strings('rawLines')
        return day.finalize()


# ============================================================================
# PAY WINDOWS
# ============================================================================

@dataclass(frozen=True)
class PayWindow:
    """Inclusive date range of one pay period"""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def to_dict(self) -> Dict[str, str]:
        return {'start': self.start.isoformat(), 'end': self.end.isoformat()}


@dataclass(frozen=True)
class PayWindows:
    """Current and previous fortnights plus pay-date bookkeeping"""
    current: PayWindow
    prev: PayWindow
    inferred_pay_date: date
    pay_delta_days: Optional[int] = None  # Supplied pay date minus inferred, informational only

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current': self.current.to_dict(),
            'prev': self.prev.to_dict(),
            'inferredPayDate': self.inferred_pay_date.isoformat(),
            'payDeltaDays': self.pay_delta_days,
        }


# ============================================================================
# PRESENTATION PROJECTION
# ============================================================================

@dataclass
class DutyRow:
    """Display-oriented view of a DutyDay with its posting bucket and flags"""
    start_date: str
    date: Optional[date]
    bucket: str
    duty_codes: List[str]
    flights: List[str]
    sectors: List[str]
    times: List[str]
    hotels: List[str]
    remarks: List[str]
    flags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'startDate': self.start_date,
            'date': self.date.isoformat() if self.date else None,
            'bucket': self.bucket,
            'dutyCodes': list(self.duty_codes),
            'flights': list(self.flights),
            'sectors': list(self.sectors),
            'times': list(self.times),
            'hotels': list(self.hotels),
            'remarks': list(self.remarks),
            'flags': list(self.flags),
        }


# ============================================================================
# PARSE RESULTS
# ============================================================================

@dataclass
class ParseDiagnostics:
    """Non-fatal observations collected during one parse"""
    page_count: int = 0
    line_count: int = 0
    skipped_lines: int = 0
    header_found: bool = False
    column_bounds: Optional[ColumnBounds] = None
    unknown_airports: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        bounds = None
        if self.column_bounds:
            bounds = {'left': self.column_bounds.left, 'right': self.column_bounds.right}
        return {
            'pageCount': self.page_count,
            'lineCount': self.line_count,
            'skippedLines': self.skipped_lines,
            'headerFound': self.header_found,
            'columnBounds': bounds,
            'unknownAirports': list(self.unknown_airports),
            'warnings': list(self.warnings),
        }


@dataclass
class RosterParseResult:
    duties: List[DutyDay]
    diagnostics: ParseDiagnostics

    @property
    def total_duties(self) -> int:
        return len(self.duties)

    @property
    def total_sectors(self) -> int:
        return sum(len(d.sectors) for d in self.duties)


@dataclass
class EnvelopeLoadResult:
    """Outcome of reading a roster envelope; ok=False means duties fell back to empty"""
    duties: List[DutyDay]
    ok: bool
    status: str
    file_name: Optional[str] = None
    captured_at: Optional[str] = None
    source: Optional[str] = None
