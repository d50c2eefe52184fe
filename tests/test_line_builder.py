"""
test_line_builder.py
====================

Line reconstruction from positioned fragments and sector-column learning.

Run: python -m pytest tests/test_line_builder.py -v
"""

import random

import pytest

from models.data_models import TextFragment, Line, ColumnBounds
from core.parameters import ColumnParameters, LineReconstructionParameters
from parsers.line_builder import reconstruct_lines, order_lines, lines_from_text, normalize_text
from parsers.column_locator import is_column_header, find_label_x, locate_sector_column


# ============================================================================
# HELPERS
# ============================================================================

def frag(text, x, y, page=1):
    return TextFragment(text=text, x=x, y=y, page=page)


def make_line(y, words, page=1):
    """words: [(x, text), ...]"""
    fragments = tuple(frag(t, x, y, page) for x, t in words)
    return Line(page=page, y=y, text=' '.join(t for _, t in sorted(words)), fragments=fragments)


HEADER_WORDS = [
    (10, 'Date'), (60, 'Duty'), (100, 'Flight'), (130, 'Number'),
    (200, 'Sector'), (280, 'STD'), (320, 'STA'), (380, 'Hotel'),
]


# ============================================================================
# LINE RECONSTRUCTION
# ============================================================================

class TestReconstructLines:

    def test_row_joined_left_to_right(self):
        fragments = [frag('BNE', 240, 700), frag('07DEC25', 10, 700), frag('SYD', 200, 700)]
        lines = reconstruct_lines(fragments)
        assert [ln.text for ln in lines] == ['07DEC25 SYD BNE']

    def test_baseline_jitter_within_tolerance_forms_one_row(self):
        fragments = [
            frag('07DEC25', 10, 700.3),
            frag('SUN', 50, 700.0),
            frag('FLY', 70, 699.9),
            frag('BNEO', 10, 688.0),
        ]
        lines = reconstruct_lines(fragments, y_tolerance=0.5)
        assert [ln.text for ln in lines] == ['07DEC25 SUN FLY', 'BNEO']

    def test_rows_beyond_tolerance_stay_separate(self):
        fragments = [frag('A', 10, 700.0), frag('B', 20, 698.9)]
        assert len(reconstruct_lines(fragments, y_tolerance=1.0)) == 2

    def test_empty_fragments_dropped(self):
        fragments = [frag('  ', 5, 700), frag('', 6, 700), frag('RDO', 10, 700)]
        lines = reconstruct_lines(fragments)
        assert [ln.text for ln in lines] == ['RDO']
        assert len(lines[0].fragments) == 1

    def test_whitespace_collapsed(self):
        lines = reconstruct_lines([frag('OA  12/13', 10, 700), frag('BNE', 90, 700)])
        assert lines[0].text == 'OA 12/13 BNE'

    def test_deterministic_for_any_input_order(self):
        fragments = [
            frag('07DEC25', 10, 700.2), frag('SUN', 50, 700.0), frag('SYD', 200, 699.9),
            frag('BNE', 240, 700.1), frag('BNEO', 10, 680.0), frag('RTP4-Day1', 60, 680.3),
        ]
        expected = reconstruct_lines(fragments)
        rng = random.Random(7)
        for _ in range(5):
            shuffled = fragments[:]
            rng.shuffle(shuffled)
            assert reconstruct_lines(shuffled) == expected

    def test_pages_never_merge(self):
        fragments = [frag('A', 10, 700, page=1), frag('B', 10, 700, page=2)]
        lines = reconstruct_lines(fragments)
        assert [(ln.page, ln.text) for ln in lines] == [(1, 'A'), (2, 'B')]


class TestOrderLines:

    def test_page_ascending_then_y_descending(self):
        lines = [
            Line(page=2, y=700, text='p2 top'),
            Line(page=1, y=100, text='p1 bottom'),
            Line(page=1, y=700, text='p1 top'),
        ]
        assert [ln.text for ln in order_lines(lines)] == ['p1 top', 'p1 bottom', 'p2 top']

    def test_lines_from_text_keeps_order_and_offsets(self):
        lines = lines_from_text(['07DEC25 SUN', '', 'BNEO'])
        assert [ln.text for ln in order_lines(lines)] == ['07DEC25 SUN', 'BNEO']
        assert [f.x for f in lines[0].fragments] == [0.0, 8.0]

    def test_normalize_text(self):
        assert normalize_text('  a \t b\n') == 'a b'


class TestToleranceConfig:

    def test_out_of_range_tolerance_rejected(self):
        with pytest.raises(ValueError):
            LineReconstructionParameters(y_tolerance=2.0)

    def test_upper_bound_accepted(self):
        assert LineReconstructionParameters(y_tolerance=1.2).y_tolerance == 1.2


# ============================================================================
# HEADER / COLUMN LOCATOR
# ============================================================================

class TestColumnLocator:

    def test_header_detection_needs_both_labels(self):
        assert is_column_header('Date Duty Flight Number Sector STD STA')
        assert not is_column_header('Flight Number only')
        assert not is_column_header('Sector only')

    def test_multi_word_label_position(self):
        line = make_line(720, HEADER_WORDS)
        assert find_label_x(line.fragments, 'Flight Number') == 100
        assert find_label_x(line.fragments, 'Sector') == 200

    def test_single_fragment_label(self):
        fragments = (frag('Flight Number', 100, 720), frag('Sector', 200, 720))
        assert find_label_x(fragments, 'Flight Number') == 100

    def test_bounds_from_next_label(self):
        bounds = locate_sector_column(make_line(720, HEADER_WORDS), ColumnParameters(left_bleed=4.0))
        assert bounds == ColumnBounds(left=196.0, right=276.0)

    def test_fallback_width_without_next_label(self):
        words = [(100, 'Flight'), (130, 'Number'), (200, 'Sector'), (400, 'Hotel')]
        params = ColumnParameters(left_bleed=4.0, fallback_width=60.0)
        bounds = locate_sector_column(make_line(720, words), params)
        assert bounds == ColumnBounds(left=196.0, right=256.0)

    def test_non_header_line_gives_none(self):
        assert locate_sector_column(make_line(700, [(10, '07DEC25'), (50, 'SUN')])) is None

    def test_bounds_contains(self):
        bounds = ColumnBounds(left=196.0, right=276.0)
        assert bounds.contains(196.0) and bounds.contains(240.0)
        assert not bounds.contains(280.0)
