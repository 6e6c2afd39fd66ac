"""POSTCREDIT — Window Aggregator.

Rolls resolved signal/opportunity attributions up into one row per post
for a reporting window (7 / 30 / 90 days ending today).
"""

from collections import defaultdict
from datetime import datetime, time, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from postcredit.core.confidence import Confidence, merge_confidence
from postcredit.models.attribution_models import (
    SUPPORTED_RANGE_DAYS,
    OpportunityAttribution,
    PostRollup,
    SignalAttribution,
    SupportingLinks,
)
from postcredit.models.source_models import OpportunityStage
from postcredit.core.logging import get_logger

logger = get_logger("analyzer.window_aggregator")


def validate_range_days(range_days: int) -> int:
    """Reject anything outside the closed preset set."""
    if range_days not in SUPPORTED_RANGE_DAYS:
        raise ValueError(
            f"Unsupported window range {range_days}; expected one of {SUPPORTED_RANGE_DAYS}"
        )
    return range_days


def resolve_window(
    range_days: int, now: Optional[datetime] = None
) -> tuple[datetime, datetime]:
    """Window bounds: start of day (range_days - 1) days ago → end of today, UTC."""
    validate_range_days(range_days)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    today = now.astimezone(timezone.utc).date()

    window_end = datetime.combine(today, time.max, tzinfo=timezone.utc)
    window_start = datetime.combine(
        today - timedelta(days=range_days - 1), time.min, tzinfo=timezone.utc
    )
    return window_start, window_end


def aggregate_window(
    post_ids: Iterable[str],
    signal_attributions: Iterable[SignalAttribution],
    opportunity_attributions: Iterable[OpportunityAttribution],
) -> List[PostRollup]:
    """Build one rollup per post, ordered by post id.

    Posts with no contributions still get a zeroed UNATTRIBUTED row.
    Contributions pointing at a post outside `post_ids` are ignored.
    """
    post_ids = sorted(set(post_ids))
    if not post_ids:
        return []

    signal_ids: Dict[str, List[str]] = defaultdict(list)
    opportunity_ids: Dict[str, List[str]] = defaultdict(list)
    confidences: Dict[str, List[Confidence]] = defaultdict(list)
    pipeline: Dict[str, float] = defaultdict(float)
    revenue: Dict[str, float] = defaultdict(float)
    known = set(post_ids)

    for sig in signal_attributions:
        if sig.attributed_post_id not in known:
            continue
        signal_ids[sig.attributed_post_id].append(sig.signal_id)
        confidences[sig.attributed_post_id].append(sig.confidence)

    for opp in opportunity_attributions:
        if opp.attributed_post_id not in known:
            continue
        pid = opp.attributed_post_id
        opportunity_ids[pid].append(opp.opportunity_id)
        confidences[pid].append(opp.confidence)
        pipeline[pid] += opp.amount
        if opp.stage == OpportunityStage.CLOSED_WON:
            revenue[pid] += opp.amount

    rollups = [
        PostRollup(
            post_id=pid,
            influenced_signal_count=len(signal_ids[pid]),
            pipeline_amount=round(pipeline[pid], 2),
            revenue_won_amount=round(revenue[pid], 2),
            confidence=merge_confidence(confidences[pid]),
            supporting_links=SupportingLinks(
                inbound_signal_ids=sorted(signal_ids[pid]),
                opportunity_ids=sorted(opportunity_ids[pid]),
            ),
        )
        for pid in post_ids
    ]

    credited = sum(1 for r in rollups if r.confidence != Confidence.UNATTRIBUTED)
    logger.info(f"Aggregated {len(rollups)} post rollups ({credited} with credit)")
    return rollups
