"""POSTCREDIT — Attribution API Routes."""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session, select

from postcredit.database import get_session
from postcredit.core.errors import ClientNotFoundError, StorageFailure
from postcredit.models.attribution_models import (
    AttributionResult,
    PostRollup,
    RecomputeResult,
)
from postcredit.analyzer.pipeline import preview, recompute, recompute_all
from postcredit.analyzer.window_aggregator import validate_range_days
from postcredit.core.logging import get_logger

logger = get_logger("api.attribution")

router = APIRouter(prefix="/attribution", tags=["Attribution"])


# ── Request / Response Models ──


class RecomputeRequest(BaseModel):
    """Request body for POST /attribution/recompute."""

    client_id: str
    range_days: Optional[int] = None
    """One of 7, 30, 90. Omit to recompute every preset."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"client_id": "c0ffee", "range_days": 30},
                {"client_id": "c0ffee"},
            ]
        }
    }


class RecomputeResponse(BaseModel):
    status: str = "success"
    ranges: List[RecomputeResult]


class PreviewResponse(BaseModel):
    status: str = "success"
    range_days: int
    rows: List[PostRollup]


def _check_range(range_days: int) -> int:
    try:
        return validate_range_days(range_days)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


# ── Endpoints ──


@router.post("/recompute", response_model=RecomputeResponse)
def trigger_recompute(
    request: RecomputeRequest,
    session: Session = Depends(get_session),
):
    """Rebuild the materialized rollups for one preset, or all of them."""
    if request.range_days is not None:
        _check_range(request.range_days)

    try:
        if request.range_days is not None:
            results = [recompute(session, request.client_id, request.range_days)]
        else:
            results = recompute_all(session, request.client_id)
    except ClientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageFailure as e:
        logger.error(f"Recompute failed: {e}", extra={"client_id": request.client_id})
        raise HTTPException(status_code=500, detail="Failed to recompute attribution")

    return RecomputeResponse(status="success", ranges=results)


@router.get("/results")
def get_results(
    client_id: str = Query(..., description="Client to read rollups for"),
    range_days: int = Query(30, description="7 | 30 | 90"),
    session: Session = Depends(get_session),
):
    """Read the persisted rollups, highest pipeline first."""
    _check_range(range_days)

    rows = session.exec(
        select(AttributionResult)
        .where(
            AttributionResult.client_id == client_id,
            AttributionResult.window_range_days == range_days,
        )
        .order_by(
            AttributionResult.pipeline_amount.desc(),  # type: ignore
            AttributionResult.post_id,
        )
    ).all()

    return {
        "status": "success",
        "count": len(rows),
        "computed_at": rows[0].computed_at.isoformat() if rows else None,
        "results": [
            {
                "post_id": r.post_id,
                "window_range_days": r.window_range_days,
                "influenced_signal_count": r.influenced_signal_count,
                "pipeline_amount": r.pipeline_amount,
                "revenue_won_amount": r.revenue_won_amount,
                "confidence": r.confidence.value,
                "supporting_links": json.loads(r.supporting_links_json),
            }
            for r in rows
        ],
    }


@router.get("/preview", response_model=PreviewResponse)
def get_preview(
    client_id: str = Query(...),
    range_days: int = Query(30, description="7 | 30 | 90"),
    session: Session = Depends(get_session),
):
    """Resolve attribution live, without touching the stored rollups."""
    _check_range(range_days)
    try:
        rows = preview(session, client_id, range_days)
    except ClientNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageFailure as e:
        logger.error(f"Preview failed: {e}", extra={"client_id": client_id})
        raise HTTPException(status_code=500, detail="Failed to resolve attribution")
    return PreviewResponse(range_days=range_days, rows=rows)
