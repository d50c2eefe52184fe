"""
Core Roster Audit Components
============================

Main exports for pay-period windows, duty flags and configuration.
"""

from core.parameters import (
    LineReconstructionParameters,
    ColumnParameters,
    VocabularyParameters,
    PayPeriodParameters,
    ParserConfig
)

from core.pay_windows import (
    compute_pay_windows,
    suggest_fortnight_start,
    bucket_for,
    parse_iso_date,
    parse_roster_date,
    format_roster_date,
)
from core.flags import (
    own_accommodation_dates,
    derive_flags,
    build_duty_rows,
    resolve_day_of_month,
)
from core.reporting import duty_rows_frame, bucket_summary

__all__ = [
    # Parameters
    'LineReconstructionParameters',
    'ColumnParameters',
    'VocabularyParameters',
    'PayPeriodParameters',
    'ParserConfig',
    # Pay windows
    'compute_pay_windows',
    'suggest_fortnight_start',
    'bucket_for',
    'parse_iso_date',
    'parse_roster_date',
    'format_roster_date',
    # Flags
    'own_accommodation_dates',
    'derive_flags',
    'build_duty_rows',
    'resolve_day_of_month',
    # Tables
    'duty_rows_frame',
    'bucket_summary',
]
