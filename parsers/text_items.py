"""
PDF Text-Item Extraction
========================

Pulls positioned words out of each page of a roster PDF with pdfplumber.

pdfplumber reports `top`/`bottom` measured down from the top of the page;
fragments are converted to PDF user space (y grows upward) so that the
line reconstructor can order rows by descending y.
"""

import io
import logging
from typing import Iterator, List, Union, BinaryIO

import pdfplumber

from models.data_models import TextFragment

logger = logging.getLogger(__name__)

PDFSource = Union[str, bytes, bytearray, BinaryIO]


class RosterInputUnavailable(RuntimeError):
    """The PDF text layer could not be opened or read."""


def _open(source: PDFSource):
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(bytes(source))
    try:
        return pdfplumber.open(source)
    except Exception as e:
        raise RosterInputUnavailable(f"Could not open roster PDF: {e}") from e


def page_fragments(page, page_number: int) -> List[TextFragment]:
    """Words on one pdfplumber page as TextFragments, blanks dropped."""
    height = float(page.height)
    fragments = []
    for word in page.extract_words(keep_blank_chars=False, use_text_flow=False):
        text = (word.get('text') or '').strip()
        if not text:
            continue
        fragments.append(TextFragment(
            text=text,
            x=float(word['x0']),
            y=height - float(word['bottom']),
            page=page_number,
        ))
    return fragments


def iter_pdf_fragments(source: PDFSource) -> Iterator[List[TextFragment]]:
    """
    Yield the fragment list of each page in page order.

    Raises:
        RosterInputUnavailable: document or a page's text layer unreadable
    """
    pdf = _open(source)
    with pdf:
        logger.info("Reading roster PDF text layer (%d pages)", len(pdf.pages))
        for page_number, page in enumerate(pdf.pages, start=1):
            try:
                fragments = page_fragments(page, page_number)
            except Exception as e:
                raise RosterInputUnavailable(
                    f"Text layer extraction failed on page {page_number}: {e}"
                ) from e
            logger.debug("Page %d: %d fragments", page_number, len(fragments))
            yield fragments
