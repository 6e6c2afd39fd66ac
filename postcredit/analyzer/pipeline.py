"""POSTCREDIT — Attribution Recompute Orchestrator.

Runs the full data flow for one client and one window-range preset:
  load snapshot → resolve signals → propagate to meetings/opportunities
  → aggregate per post → upsert rollups + delete stale rows (one commit)

This is the only module that reads or writes the database. Everything it
calls is a pure function of the snapshot it loads.
"""

import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from postcredit.config import settings
from postcredit.core.errors import ClientNotFoundError, StorageFailure
from postcredit.models.source_models import (
    AttributionSettings,
    Client,
    ContentPost,
    InboundSignal,
    Meeting,
    Opportunity,
)
from postcredit.models.attribution_models import (
    SUPPORTED_RANGE_DAYS,
    AttributionOptions,
    AttributionResult,
    PostRollup,
    RecomputeResult,
)
from postcredit.analyzer.signal_resolver import PostIndex, resolve_signals
from postcredit.analyzer.chain_propagator import (
    propagate_meetings,
    propagate_opportunities,
)
from postcredit.analyzer.window_aggregator import (
    aggregate_window,
    resolve_window,
    validate_range_days,
)
from postcredit.core.logging import get_logger

logger = get_logger("analyzer.pipeline")


@dataclass
class SourceSnapshot:
    """Everything one recompute reads, loaded before any write."""

    client_id: str
    options: AttributionOptions
    posts: List[ContentPost] = field(default_factory=list)
    signals: List[InboundSignal] = field(default_factory=list)
    meetings: List[Meeting] = field(default_factory=list)
    opportunities: List[Opportunity] = field(default_factory=list)


def _begin_snapshot(session: Session) -> None:
    """Pin PostgreSQL reads to one snapshot for the whole transaction.

    SQLite engines get the same guarantee from the explicit BEGIN installed by
    `enable_sqlite_transactions`. Only applies when the session has not
    started a transaction yet.
    """
    if session.in_transaction():
        return
    if session.get_bind().dialect.name == "postgresql":
        session.connection(execution_options={"isolation_level": "REPEATABLE READ"})


def _load_options(session: Session, client_id: str) -> AttributionOptions:
    row = session.get(AttributionSettings, client_id)
    if row is None:
        return AttributionOptions(
            attribution_window_days=settings.default_attribution_window_days,
            use_soft_attribution=settings.default_use_soft_attribution,
        )
    return AttributionOptions(
        attribution_window_days=row.attribution_window_days,
        use_soft_attribution=row.use_soft_attribution,
    )


def _load_snapshot(
    session: Session,
    client_id: str,
    window_start: datetime,
    window_end: datetime,
) -> SourceSnapshot:
    """Read the client's full post history plus in-window signals/opportunities."""
    _begin_snapshot(session)

    if session.get(Client, client_id) is None:
        raise ClientNotFoundError(f"Client {client_id} not found", client_id=client_id)

    snapshot = SourceSnapshot(
        client_id=client_id, options=_load_options(session, client_id)
    )

    # Full history: an in-window opportunity may credit a post from long ago
    snapshot.posts = list(
        session.exec(
            select(ContentPost)
            .where(ContentPost.client_id == client_id)
            .order_by(ContentPost.id)
        ).all()
    )
    snapshot.signals = list(
        session.exec(
            select(InboundSignal)
            .where(
                InboundSignal.client_id == client_id,
                InboundSignal.created_at >= window_start,
                InboundSignal.created_at <= window_end,
            )
            .order_by(InboundSignal.id)
        ).all()
    )
    snapshot.opportunities = list(
        session.exec(
            select(Opportunity)
            .where(
                Opportunity.client_id == client_id,
                Opportunity.created_at >= window_start,
                Opportunity.created_at <= window_end,
            )
            .order_by(Opportunity.id)
        ).all()
    )

    meeting_ids = sorted({o.meeting_id for o in snapshot.opportunities if o.meeting_id})
    if meeting_ids:
        snapshot.meetings = list(
            session.exec(
                select(Meeting)
                .where(Meeting.client_id == client_id, Meeting.id.in_(meeting_ids))  # type: ignore
                .order_by(Meeting.id)
            ).all()
        )

    logger.info(
        f"Loaded snapshot: {len(snapshot.posts)} posts, {len(snapshot.signals)} signals, "
        f"{len(snapshot.opportunities)} opportunities, {len(snapshot.meetings)} meetings",
        extra={"client_id": client_id},
    )
    return snapshot


def compute_rollups(snapshot: SourceSnapshot) -> List[PostRollup]:
    """Pure part of the recompute: resolution → propagation → aggregation."""
    index = PostIndex(snapshot.posts)
    signal_map = resolve_signals(snapshot.signals, index, snapshot.options)
    meeting_map = propagate_meetings(snapshot.meetings, signal_map)
    opportunity_map = propagate_opportunities(
        snapshot.opportunities, signal_map, meeting_map, index.post_ids
    )
    return aggregate_window(
        index.post_ids, signal_map.values(), opportunity_map.values()
    )


def _persist(
    session: Session,
    client_id: str,
    range_days: int,
    rollups: List[PostRollup],
    computed_at: datetime,
) -> None:
    """Upsert one row per rollup, delete every other row for (client, range)."""
    existing = {
        row.post_id: row
        for row in session.exec(
            select(AttributionResult).where(
                AttributionResult.client_id == client_id,
                AttributionResult.window_range_days == range_days,
            )
        ).all()
    }

    for rollup in rollups:
        row = existing.pop(rollup.post_id, None)
        if row is None:
            row = AttributionResult(
                client_id=client_id,
                post_id=rollup.post_id,
                window_range_days=range_days,
            )
        row.computed_at = computed_at
        row.influenced_signal_count = rollup.influenced_signal_count
        row.pipeline_amount = rollup.pipeline_amount
        row.revenue_won_amount = rollup.revenue_won_amount
        row.confidence = rollup.confidence
        row.supporting_links_json = json.dumps(
            rollup.supporting_links.model_dump(), sort_keys=True
        )
        row.schema_version = settings.rollup_schema_version
        session.add(row)

    # Whatever is left belongs to posts that no longer exist
    for stale in existing.values():
        session.delete(stale)

    if existing:
        logger.info(
            f"Deleted {len(existing)} stale rollups",
            extra={"client_id": client_id, "range_days": range_days},
        )


def preview(
    session: Session,
    client_id: str,
    range_days: int,
    now: Optional[datetime] = None,
) -> List[PostRollup]:
    """Compute the rollups for a window without persisting anything."""
    validate_range_days(range_days)
    window_start, window_end = resolve_window(range_days, now)
    try:
        snapshot = _load_snapshot(session, client_id, window_start, window_end)
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageFailure(
            f"Attribution preview failed: {e}",
            client_id=client_id,
            range_days=range_days,
        ) from e
    return compute_rollups(snapshot)


def recompute(
    session: Session,
    client_id: str,
    range_days: int,
    now: Optional[datetime] = None,
) -> RecomputeResult:
    """Materialize the rollups for one (client, range) pair atomically."""
    validate_range_days(range_days)
    started = time.perf_counter()
    computed_at = now or datetime.now(timezone.utc)
    window_start, window_end = resolve_window(range_days, computed_at)

    logger.info(
        f"Recompute starting: {window_start.date()} → {window_end.date()}",
        extra={"client_id": client_id, "range_days": range_days},
    )

    try:
        snapshot = _load_snapshot(session, client_id, window_start, window_end)
        rollups = compute_rollups(snapshot)
        _persist(session, client_id, range_days, rollups, computed_at)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(
            f"Recompute failed, rolled back: {e}",
            extra={"client_id": client_id, "range_days": range_days},
        )
        raise StorageFailure(
            f"Attribution recompute failed: {e}",
            client_id=client_id,
            range_days=range_days,
        ) from e

    logger.info(
        "Recompute complete",
        extra={
            "client_id": client_id,
            "range_days": range_days,
            "row_count": len(rollups),
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return RecomputeResult(
        range_days=range_days, computed_at=computed_at, row_count=len(rollups)
    )


def recompute_all(
    session: Session,
    client_id: str,
    now: Optional[datetime] = None,
) -> List[RecomputeResult]:
    """Recompute every supported preset (7, 30, 90) in sequence."""
    now = now or datetime.now(timezone.utc)
    return [recompute(session, client_id, days, now) for days in SUPPORTED_RANGE_DAYS]
