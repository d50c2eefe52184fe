"""
Configuration & Parameters for Roster Import
============================================

All configuration dataclasses for the roster engine:
- LineReconstructionParameters: y-clustering of PDF text fragments
- ColumnParameters: sector column learning from the header row
- VocabularyParameters: duty codes, token exclusions, skip patterns
- PayPeriodParameters: fortnight length and pay-run offset
- ParserConfig: Master configuration container

Values are tuned to the printable roster report; the exclusion lists are
the consolidated set from historical parser revisions and should be
checked against real rosters when a new report layout turns up.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class LineReconstructionParameters:
    """Baseline clustering of text fragments into visual rows"""

    # PDF text layers jitter baselines by sub-unit amounts
    y_tolerance: float = 0.5
    min_y_tolerance: float = 0.5
    max_y_tolerance: float = 1.2

    def __post_init__(self):
        if not self.min_y_tolerance <= self.y_tolerance <= self.max_y_tolerance:
            raise ValueError(
                f"y_tolerance must be within {self.min_y_tolerance}-{self.max_y_tolerance}, "
                f"got {self.y_tolerance}"
            )


@dataclass
class ColumnParameters:
    """Header labels and margins used to learn the sector column"""

    flight_label: str = 'Flight Number'
    sector_label: str = 'Sector'

    # Column labels that may follow Sector on the header row
    next_column_labels: Tuple[str, ...] = ('STD', 'Dep', 'Report')

    left_bleed: float = 4.0        # Tokens start slightly left of their header label
    fallback_width: float = 60.0   # Used when no following label is on the header row


@dataclass
class VocabularyParameters:
    """Token vocabulary of the roster report"""

    duty_codes: Tuple[str, ...] = ('FLY', 'TVL', 'LO', 'RDO')
    weekdays: Tuple[str, ...] = ('MON', 'TUE', 'WED', 'THU', 'FRI', 'SAT', 'SUN')

    # 3-letter tokens that are never airports
    non_airport_tokens: Tuple[str, ...] = ('STD', 'STA')

    # 4-letter words seen on rosters that are not hotel codes
    hotel_stopwords: Tuple[str, ...] = ('NOTE', 'DUTY', 'CODE', 'TIME', 'HOME', 'BASE', 'FROM', 'OPEN')

    training_prefix: str = 'RTP'

    # Empty means any 2-letter carrier prefix
    carrier_prefixes: Tuple[str, ...] = ()

    # Hotel code that marks a layover in crew-arranged accommodation
    own_accommodation_hotel: str = 'BNEO'

    # New-day predicate offsets (character positions in the line text)
    max_date_offset: int = 6
    max_weekday_offset: int = 24

    skip_patterns: Tuple[str, ...] = (
        r'Roster Report from',
        r'Hotel Codes|Training Codes|Duty Codes',
        r'\bSTD\b.*\bSTA\b',
        r'/\s*(?:CPT|FO|SO|CSM|FA)\s*/',
    )
    extra_skip_patterns: Tuple[str, ...] = ()

    # 'union' keeps generic and column pairs; 'column_preferred' drops generic
    # pairs for a line whenever the column strategy produced some
    sector_strategy: str = 'union'

    def __post_init__(self):
        if self.sector_strategy not in ('union', 'column_preferred'):
            raise ValueError(
                f"sector_strategy must be 'union' or 'column_preferred', got '{self.sector_strategy}'"
            )

    @property
    def all_skip_patterns(self) -> Tuple[str, ...]:
        return tuple(self.skip_patterns) + tuple(self.extra_skip_patterns)


@dataclass
class PayPeriodParameters:
    """Fortnight arithmetic"""

    period_days: int = 14
    # Pay run lands this many days after the fortnight ends
    pay_offset_days: int = 4


@dataclass
class ParserConfig:
    """Master configuration container"""
    lines: LineReconstructionParameters = field(default_factory=LineReconstructionParameters)
    columns: ColumnParameters = field(default_factory=ColumnParameters)
    vocabulary: VocabularyParameters = field(default_factory=VocabularyParameters)
    pay_period: PayPeriodParameters = field(default_factory=PayPeriodParameters)

    @classmethod
    def default_config(cls):
        return cls()

    @classmethod
    def tolerant_config(cls):
        """
        For scans of re-printed rosters where baselines wander.
        - Widest y tolerance
        - Larger column bleed
        """
        return cls(
            lines=LineReconstructionParameters(y_tolerance=1.2),
            columns=ColumnParameters(left_bleed=6.0, fallback_width=72.0),
        )

    @classmethod
    def strict_config(cls):
        """Trust the learned sector column over generic token pairing."""
        return cls(
            vocabulary=VocabularyParameters(sector_strategy='column_preferred'),
        )

    @classmethod
    def from_preset(cls, name: Optional[str]):
        presets = {
            'default': cls.default_config,
            'tolerant': cls.tolerant_config,
            'strict': cls.strict_config,
        }
        return presets.get((name or 'default').lower(), cls.default_config)()
