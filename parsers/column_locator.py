"""
Header/Column Locator
=====================

Finds the roster's column-header row ("Flight Number ... Sector ...") and
learns the x range of the sector column from the label positions. This
stands in for real table parsing: the sector column is the only one whose
position matters for extraction.
"""

import logging
from typing import Optional, Sequence

from models.data_models import Line, TextFragment, ColumnBounds
from core.parameters import ColumnParameters

logger = logging.getLogger(__name__)


def is_column_header(text: str, params: Optional[ColumnParameters] = None) -> bool:
    params = params or ColumnParameters()
    lowered = ' '.join(text.split()).lower()
    return params.flight_label.lower() in lowered and params.sector_label.lower() in lowered


def find_label_x(fragments: Sequence[TextFragment], label: str, after: Optional[float] = None) -> Optional[float]:
    """
    x of the leftmost fragment that starts `label` (multi-word labels are
    matched across consecutive fragments). With `after`, only labels to the
    right of that x are considered.
    """
    words = label.lower().split()
    ordered = sorted(fragments, key=lambda f: f.x)
    for i, frag in enumerate(ordered):
        if after is not None and frag.x <= after:
            continue
        # A fragment may already hold the whole label ("Flight Number")
        if ' '.join(frag.text.lower().split()) == ' '.join(words):
            return frag.x
        window = ordered[i:i + len(words)]
        if len(window) == len(words) and [w.text.lower() for w in window] == words:
            return frag.x
    return None


def locate_sector_column(line: Line, params: Optional[ColumnParameters] = None) -> Optional[ColumnBounds]:
    """
    Sector column bounds from a header line, or None if the line is not a
    header or the Sector label position cannot be found.
    """
    params = params or ColumnParameters()
    if not is_column_header(line.text, params):
        return None

    sector_x = find_label_x(line.fragments, params.sector_label)
    if sector_x is None:
        logger.warning("Header row found but Sector label has no position: %r", line.text)
        return None

    left = sector_x - params.left_bleed
    next_x = None
    for label in params.next_column_labels:
        x = find_label_x(line.fragments, label, after=sector_x)
        if x is not None and (next_x is None or x < next_x):
            next_x = x

    if next_x is not None:
        right = next_x - params.left_bleed
    else:
        right = left + params.fallback_width

    bounds = ColumnBounds(left=left, right=right)
    logger.info("Sector column learned on page %d: x=%.1f..%.1f", line.page, left, right)
    return bounds
