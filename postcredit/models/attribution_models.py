"""POSTCREDIT — Attribution Models (Materialized Rollups + Resolution Schemas)."""

from datetime import datetime, timezone
from typing import Optional, List
from pydantic import BaseModel
from sqlmodel import SQLModel, Field, UniqueConstraint

from postcredit.core.confidence import Confidence
from postcredit.models.source_models import OpportunityStage

# Window-range presets a rollup can be materialized for
SUPPORTED_RANGE_DAYS = (7, 30, 90)


# ─────────────────────────────────────────────
# DATABASE MODEL: Disposable per-post rollups
# ─────────────────────────────────────────────


class AttributionResult(SQLModel, table=True):
    """One rollup row per (client, post, window range).

    Fully derived: every recompute rewrites the rows for its
    (client, range) and deletes rows whose post no longer exists.
    """

    __tablename__ = "attribution_results"
    __table_args__ = (
        UniqueConstraint(
            "client_id",
            "post_id",
            "window_range_days",
            name="uq_attribution_result",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    client_id: str = Field(index=True)
    post_id: str = Field(index=True)
    window_range_days: int = Field(index=True, description="7 | 30 | 90")
    computed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    influenced_signal_count: int = Field(default=0)
    pipeline_amount: float = Field(default=0.0)
    revenue_won_amount: float = Field(default=0.0)
    confidence: Confidence = Field(default=Confidence.UNATTRIBUTED)
    supporting_links_json: str = Field(
        default='{"inbound_signal_ids": [], "opportunity_ids": []}',
        description="SupportingLinks as sorted JSON",
    )
    schema_version: str = Field(default="1.0.0")


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS: Resolution + Aggregation
# ─────────────────────────────────────────────


class AttributionOptions(BaseModel):
    """Per-client resolution options, passed explicitly into the resolver."""

    attribution_window_days: int = 7
    use_soft_attribution: bool = True


class SignalAttribution(BaseModel):
    """Resolved attribution of one inbound signal."""

    signal_id: str
    attributed_post_id: Optional[str] = None
    confidence: Confidence = Confidence.UNATTRIBUTED


class MeetingAttribution(BaseModel):
    meeting_id: str
    inbound_signal_id: Optional[str] = None
    attributed_post_id: Optional[str] = None
    confidence: Confidence = Confidence.UNATTRIBUTED


class OpportunityAttribution(BaseModel):
    """Resolved attribution of one opportunity, carrying what aggregation needs."""

    opportunity_id: str
    amount: float = 0.0
    stage: OpportunityStage = OpportunityStage.QUALIFIED
    attributed_post_id: Optional[str] = None
    confidence: Confidence = Confidence.UNATTRIBUTED


class SupportingLinks(BaseModel):
    """Ids of every record that contributed to a rollup."""

    inbound_signal_ids: List[str] = []
    opportunity_ids: List[str] = []


class PostRollup(BaseModel):
    """Aggregated credit for one post over one window."""

    post_id: str
    influenced_signal_count: int = 0
    pipeline_amount: float = 0.0
    revenue_won_amount: float = 0.0
    confidence: Confidence = Confidence.UNATTRIBUTED
    supporting_links: SupportingLinks = SupportingLinks()


class RecomputeResult(BaseModel):
    """Outcome of materializing one (client, range) pair."""

    range_days: int
    computed_at: datetime
    row_count: int
