"""
api_server.py - FastAPI Backend for Roster Audit
=================================================

RESTful API exposing the roster engine to a front end.

Endpoints:
- POST /api/import - Upload roster PDF, get duty-day envelope + diagnostics
- POST /api/rows - Envelope JSON + fortnight start -> bucketed, flagged rows
- GET /api/pay-windows - Current/previous fortnight for a start date
- GET /api/pay-windows/suggest - Fortnight start implied by a pay date

Usage:
    uvicorn api.api_server:app --reload --host 0.0.0.0 --port 8000
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, UploadFile, File, HTTPException, Form, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from core import (
    ParserConfig, compute_pay_windows, suggest_fortnight_start,
    build_duty_rows, bucket_summary,
)
from models.data_models import PayWindows
from parsers.roster_parser import RosterPDFParser
from parsers.text_items import RosterInputUnavailable
from parsers.envelope import load_envelope

logger = logging.getLogger(__name__)

# ============================================================================
# FASTAPI APP INITIALIZATION
# ============================================================================

app = FastAPI(
    title="Roster Audit API",
    description="Duty-day reconstruction from printable crew rosters with pay-period posting flags",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class PayWindowResponse(BaseModel):
    start: str  # YYYY-MM-DD
    end: str    # YYYY-MM-DD, inclusive


class PayWindowsResponse(BaseModel):
    current: PayWindowResponse
    prev: PayWindowResponse
    inferred_pay_date: str
    pay_delta_days: Optional[int] = None  # Supplied pay date minus inferred


class SuggestionResponse(BaseModel):
    fortnight_start: str
    source: str  # 'existing' or 'pay_date'


class DiagnosticsResponse(BaseModel):
    page_count: int
    line_count: int
    skipped_lines: int
    header_found: bool
    column_bounds: Optional[Dict[str, float]] = None
    unknown_airports: List[str] = []
    warnings: List[str] = []


class ImportResponse(BaseModel):
    status: str
    envelope: Dict[str, Any]
    diagnostics: DiagnosticsResponse


class RowsRequest(BaseModel):
    envelope: Any = None  # Envelope object or its JSON text
    fortnight_start: str  # YYYY-MM-DD
    pay_date: Optional[str] = None
    config_preset: str = "default"  # "default", "tolerant", "strict"


class DutyRowResponse(BaseModel):
    start_date: str
    date: Optional[str] = None
    bucket: str  # 'CURRENT', 'PREV' or ''
    duty_codes: List[str]
    flights: List[str]
    sectors: List[str]
    times: List[str]
    hotels: List[str]
    remarks: List[str]
    flags: List[str]


class BucketSummaryResponse(BaseModel):
    bucket: str
    duties: int
    flags: Dict[str, int]


class RowsResponse(BaseModel):
    ok: bool
    status: str
    windows: PayWindowsResponse
    rows: List[DutyRowResponse]
    summary: List[BucketSummaryResponse]


# ============================================================================
# HELPERS
# ============================================================================

def _windows_response(windows: PayWindows) -> PayWindowsResponse:
    return PayWindowsResponse(
        current=PayWindowResponse(**windows.current.to_dict()),
        prev=PayWindowResponse(**windows.prev.to_dict()),
        inferred_pay_date=windows.inferred_pay_date.isoformat(),
        pay_delta_days=windows.pay_delta_days,
    )


def _compute_windows(fortnight_start: str, pay_date: Optional[str], config: ParserConfig) -> PayWindows:
    try:
        return compute_pay_windows(fortnight_start, pay_date, config.pay_period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Dates must be YYYY-MM-DD: {e}")


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check"""
    return {
        "status": "ok",
        "service": "Roster Audit API",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat()
    }


@app.post("/api/import", response_model=ImportResponse)
async def import_roster(
    file: UploadFile = File(...),
    config_preset: str = Form("default"),
):
    """
    Upload a printable roster PDF and get its duty days.

    The envelope can be stored and posted back to /api/rows later.
    """
    try:
        if not file.filename:
            raise HTTPException(status_code=400, detail="No file provided")

        if Path(file.filename).suffix.lower() != '.pdf':
            raise HTTPException(status_code=400, detail="Unsupported file format. Use PDF.")

        content = await file.read()
        parser = RosterPDFParser(ParserConfig.from_preset(config_preset))

        try:
            result = parser.parse_pdf(content)
        except RosterInputUnavailable as e:
            logger.error("PDF import failed for %s: %s", file.filename, e)
            raise HTTPException(status_code=422, detail=f"PDF import failed: {e}")

        diagnostics = result.diagnostics.to_dict()
        return ImportResponse(
            status=f"Imported {result.total_duties} duty days from {file.filename}",
            envelope=parser.to_envelope(result, file.filename),
            diagnostics=DiagnosticsResponse(
                page_count=diagnostics['pageCount'],
                line_count=diagnostics['lineCount'],
                skipped_lines=diagnostics['skippedLines'],
                header_found=diagnostics['headerFound'],
                column_bounds=diagnostics['columnBounds'],
                unknown_airports=diagnostics['unknownAirports'],
                warnings=diagnostics['warnings'],
            ),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unexpected import failure")
        raise HTTPException(status_code=500, detail=f"Import failed: {str(e)}")


@app.post("/api/rows", response_model=RowsResponse)
async def duty_rows(request: RowsRequest):
    """
    Bucket and flag the duties of an envelope.

    A malformed envelope is not an error: the response carries ok=false,
    the reason in `status`, and no rows.
    """
    config = ParserConfig.from_preset(request.config_preset)
    windows = _compute_windows(request.fortnight_start, request.pay_date, config)

    loaded = load_envelope(request.envelope if request.envelope is not None else '')
    rows = build_duty_rows(loaded.duties, windows, config)
    summary = bucket_summary(rows)

    return RowsResponse(
        ok=loaded.ok,
        status=loaded.status,
        windows=_windows_response(windows),
        rows=[DutyRowResponse(
            start_date=r.start_date,
            date=r.date.isoformat() if r.date else None,
            bucket=r.bucket,
            duty_codes=r.duty_codes,
            flights=r.flights,
            sectors=r.sectors,
            times=r.times,
            hotels=r.hotels,
            remarks=r.remarks,
            flags=r.flags,
        ) for r in rows],
        summary=[
            BucketSummaryResponse(
                bucket=bucket,
                duties=int(counts['duties']),
                flags={k: int(v) for k, v in counts.items() if k != 'duties'},
            )
            for bucket, counts in summary.iterrows()
        ],
    )


@app.get("/api/pay-windows", response_model=PayWindowsResponse)
async def pay_windows(
    fortnight_start: str = Query(..., description="YYYY-MM-DD"),
    pay_date: Optional[str] = Query(None, description="YYYY-MM-DD"),
):
    windows = _compute_windows(fortnight_start, pay_date, ParserConfig.default_config())
    return _windows_response(windows)


@app.get("/api/pay-windows/suggest", response_model=SuggestionResponse)
async def suggest_start(
    pay_date: str = Query(..., description="YYYY-MM-DD"),
    fortnight_start: Optional[str] = Query(None, description="Existing value, kept if set"),
):
    """Pre-fill helper: never overrides a fortnight start the user already chose."""
    try:
        start = suggest_fortnight_start(pay_date, fortnight_start)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Dates must be YYYY-MM-DD: {e}")
    return SuggestionResponse(
        fortnight_start=start.isoformat(),
        source='existing' if fortnight_start else 'pay_date',
    )


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    port = int(os.environ.get("PORT", 8000))

    print("=" * 70)
    print("ROSTER AUDIT API SERVER")
    print("=" * 70)
    print(f"API will be available at: http://localhost:{port}")
    print(f"API docs at: http://localhost:{port}/docs")
    print()

    uvicorn.run(app, host="0.0.0.0", port=port)
