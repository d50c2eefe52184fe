"""
Roster Envelope Codec
=====================

JSON wrapper around a list of duty days:

    {"source": "pdf", "capturedAt": "...", "fileName": "...", "duties": [...]}

The same shape may be hand-authored and fed back in for replay, so loading
is forgiving: a malformed envelope yields an empty duty list and a status
message instead of an exception.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

import pytz

from models.data_models import DutyDay, EnvelopeLoadResult

logger = logging.getLogger(__name__)


def build_envelope(duties: List[DutyDay], file_name: str, captured_at: Optional[str] = None,
                   source: str = 'pdf') -> Dict[str, Any]:
    return {
        'source': source,
        'capturedAt': captured_at or datetime.now(pytz.utc).isoformat(),
        'fileName': file_name,
        'duties': [d.to_dict() for d in duties],
    }


def dump_envelope(envelope: Dict[str, Any]) -> str:
    return json.dumps(envelope, indent=2)


def _failed(status: str) -> EnvelopeLoadResult:
    logger.warning("Roster envelope rejected: %s", status)
    return EnvelopeLoadResult(duties=[], ok=False, status=status)


def load_envelope(payload: Union[str, bytes, Dict[str, Any]]) -> EnvelopeLoadResult:
    """Read an envelope from JSON text/bytes or an already decoded dict."""
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode('utf-8')
        except UnicodeDecodeError as e:
            return _failed(f"Envelope is not UTF-8 text: {e}")

    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            return _failed(f"Invalid JSON: {e.msg} (line {e.lineno})")

    if not isinstance(payload, dict):
        return _failed("Envelope must be a JSON object")

    entries = payload.get('duties')
    if not isinstance(entries, list):
        return _failed("Envelope has no 'duties' array")

    duties = []
    skipped = 0
    for entry in entries:
        if not isinstance(entry, dict) or not str(entry.get('startDate') or '').strip():
            skipped += 1
            continue
        duties.append(DutyDay.from_dict(entry))

    status = f"Loaded {len(duties)} duty days"
    if skipped:
        status += f" ({skipped} malformed entries skipped)"
        logger.warning("Skipped %d malformed duty entries", skipped)

    return EnvelopeLoadResult(
        duties=duties,
        ok=True,
        status=status,
        file_name=payload.get('fileName'),
        captured_at=payload.get('capturedAt'),
        source=payload.get('source'),
    )
