"""
Line Reconstruction
===================

Groups positioned fragments into visual rows. Each glyph run carries its own
baseline with sub-unit jitter, so rows are formed by clustering y values
within a tolerance rather than by exact equality.
"""

import re
from typing import Iterable, List

from models.data_models import TextFragment, Line

_WS = re.compile(r'\s+')


def normalize_text(text: str) -> str:
    return _WS.sub(' ', text).strip()


def reconstruct_lines(fragments: Iterable[TextFragment], y_tolerance: float = 0.5) -> List[Line]:
    """
    Cluster fragments into Lines.

    A fragment joins the current cluster when it shares the page and its y
    lies within y_tolerance of the cluster's first (highest) fragment.
    Clusters are emitted top-to-bottom, fragments inside joined by x.
    """
    usable = [f for f in fragments if f.text and f.text.strip()]
    # Full key keeps the result independent of input order
    usable.sort(key=lambda f: (f.page, -f.y, f.x, f.text))

    clusters: List[List[TextFragment]] = []
    for frag in usable:
        if clusters:
            anchor = clusters[-1][0]
            if anchor.page == frag.page and abs(anchor.y - frag.y) <= y_tolerance:
                clusters[-1].append(frag)
                continue
        clusters.append([frag])

    lines = []
    for cluster in clusters:
        row = sorted(cluster, key=lambda f: (f.x, f.text))
        text = normalize_text(' '.join(f.text for f in row))
        if not text:
            continue
        lines.append(Line(page=row[0].page, y=cluster[0].y, text=text, fragments=tuple(row)))
    return lines


def order_lines(lines: Iterable[Line]) -> List[Line]:
    """Reading order across pages: page ascending, y descending."""
    return sorted(lines, key=lambda ln: (ln.page, -ln.y))


def lines_from_text(texts: Iterable[str], page: int = 1) -> List[Line]:
    """
    Lines for plain text rows (no positions), top row first.

    Used for replaying captured roster text; fragments are whitespace tokens
    with their character offset as x.
    """
    lines = []
    y = 0.0
    for raw in texts:
        text = normalize_text(raw or '')
        y -= 10.0
        if not text:
            continue
        fragments = tuple(
            TextFragment(text=m.group(0), x=float(m.start()), y=y, page=page)
            for m in re.finditer(r'\S+', text)
        )
        lines.append(Line(page=page, y=y, text=text, fragments=fragments))
    return lines
