# roster_parser.py - Printable Roster PDF Parser

"""
Roster Parser - Rebuild duty days from a printable crew roster PDF

Pipeline:
    PDF -> positioned words (pdfplumber) -> visual lines -> sector column
    bounds (header row) -> duty-day segmentation -> field extraction

Parsing is best-effort: a bad token is dropped, a missing header only
disables column-aware sector extraction and is reported in diagnostics.
Only an unreadable PDF aborts the parse.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

import airportsdata

from models.data_models import (
    Line, DutyDay, ColumnBounds, ParseDiagnostics, RosterParseResult,
)
from core.parameters import ParserConfig
from parsers.text_items import iter_pdf_fragments, PDFSource
from parsers.line_builder import reconstruct_lines, order_lines, lines_from_text
from parsers.column_locator import is_column_header, locate_sector_column
from parsers.segmenter import NoActiveDay, Accumulating, step, flush, is_skippable
from parsers.field_extractors import extract_into
from parsers.envelope import build_envelope

logger = logging.getLogger(__name__)

# Module-level load (cached)
_IATA_DB = airportsdata.load('IATA')

MISSING_HEADER_WARNING = (
    "Column header (Flight Number / Sector) not found; sector column extraction skipped"
)


class RosterPDFParser:
    """
    Parse printable roster PDFs into DutyDay records.

    One instance can parse many files; nothing is carried between calls.
    """

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig.default_config()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def parse_pdf(self, source: PDFSource) -> RosterParseResult:
        """
        Main entry point - extract duty days from a roster PDF.

        Raises:
            RosterInputUnavailable: the PDF text layer cannot be read
        """
        lines: List[Line] = []
        page_count = 0
        for fragments in iter_pdf_fragments(source):
            page_count += 1
            lines.extend(reconstruct_lines(fragments, self.config.lines.y_tolerance))

        result = self.parse_lines(order_lines(lines))
        result.diagnostics.page_count = page_count
        logger.info(
            "Parsed %d duty days (%d sectors) from %d pages (%d lines)",
            result.total_duties, result.total_sectors, page_count, result.diagnostics.line_count,
        )
        return result

    def parse_text_lines(self, texts: Iterable[str]) -> RosterParseResult:
        """Parse plain text rows, top row first (replay/debugging)."""
        result = self.parse_lines(lines_from_text(texts))
        result.diagnostics.page_count = 1
        return result

    def parse_lines(self, lines: List[Line]) -> RosterParseResult:
        """Segment already ordered lines into duty days."""
        vocab = self.config.vocabulary
        diagnostics = ParseDiagnostics(line_count=len(lines))
        bounds: Optional[ColumnBounds] = None
        duties: List[DutyDay] = []
        by_date: Dict[str, DutyDay] = {}

        header_check = lambda text: is_column_header(text, self.config.columns)

        state = NoActiveDay()
        for line in lines:
            if header_check(line.text):
                diagnostics.header_found = True
                if bounds is None:
                    bounds = locate_sector_column(line, self.config.columns)

            if is_skippable(line.text, vocab, extra_checks=(header_check,)):
                diagnostics.skipped_lines += 1
                logger.debug("Skipped non-data line: %r", line.text)
                continue

            if bounds is not None:
                line = replace(line, bounds=bounds)
            state, emitted = step(state, line, vocab)
            if emitted is not None:
                self._collect(emitted, duties, by_date)

        last = flush(state)
        if last is not None:
            self._collect(last, duties, by_date)

        diagnostics.column_bounds = bounds
        if bounds is None:
            diagnostics.warnings.append(MISSING_HEADER_WARNING)
            logger.warning(MISSING_HEADER_WARNING)

        diagnostics.unknown_airports = self._unknown_airports(duties)
        if diagnostics.unknown_airports:
            diagnostics.warnings.append(
                f"Sector codes not found in airport database: {', '.join(diagnostics.unknown_airports)}"
            )
            logger.warning("Unknown airport codes in sectors: %s", diagnostics.unknown_airports)

        return RosterParseResult(duties=duties, diagnostics=diagnostics)

    def to_envelope(self, result: RosterParseResult, file_name: str, captured_at: Optional[str] = None) -> dict:
        return build_envelope(result.duties, file_name, captured_at)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _collect(self, acc: Accumulating, duties: List[DutyDay], by_date: Dict[str, DutyDay]):
        """Build the accumulation, folding it into an earlier day with the same date."""
        day = by_date.get(acc.start_date)
        if day is None:
            day = DutyDay(start_date=acc.start_date)
            by_date[acc.start_date] = day
            duties.append(day)
        else:
            logger.debug("Merging repeated rows for %s", acc.start_date)
        for line in acc.lines:
            extract_into(day, line, line.bounds, self.config.vocabulary)
        day.finalize()

    @staticmethod
    def _unknown_airports(duties: List[DutyDay]) -> List[str]:
        unknown = []
        for day in duties:
            for sector in day.sectors:
                for code in sector.split('-'):
                    if code not in _IATA_DB and code not in unknown:
                        unknown.append(code)
        return unknown
