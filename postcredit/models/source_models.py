"""POSTCREDIT — Source Records.

The raw entities the attribution engine reads. They are written by the
import / CRUD layer; the engine only ever reads them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostStatus(str, Enum):
    DRAFT = "draft"
    NEEDS_DETAILS = "needs_details"
    READY = "ready"
    POSTED = "posted"


class MeetingOutcome(str, Enum):
    HELD = "held"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"


class OpportunityStage(str, Enum):
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


class Client(SQLModel, table=True):
    """A customer workspace. Every other record is scoped to one client."""

    __tablename__ = "clients"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str = Field(default="")
    created_at: datetime = Field(default_factory=_utcnow)


class AttributionSettings(SQLModel, table=True):
    """Per-client resolution settings, owned by the settings screen."""

    __tablename__ = "attribution_settings"

    client_id: str = Field(foreign_key="clients.id", primary_key=True)
    attribution_window_days: int = Field(default=7, description="7 | 14")
    use_soft_attribution: bool = Field(default=True)


class ContentPost(SQLModel, table=True):
    """A published (or drafted) piece of content."""

    __tablename__ = "content_posts"

    id: str = Field(default_factory=_new_id, primary_key=True)
    client_id: str = Field(foreign_key="clients.id", index=True)
    actor_id: str = Field(index=True, description="Authoring executive")
    post_url: Optional[str] = Field(default=None)
    posted_at: Optional[datetime] = Field(
        default=None, description="Null until the draft is fully detailed"
    )
    hook: str = Field(default="")
    theme: str = Field(default="")
    status: PostStatus = Field(default=PostStatus.DRAFT)


class InboundSignal(SQLModel, table=True):
    """A captured demand event. Its attribution is derived, never stored."""

    __tablename__ = "inbound_signals"

    id: str = Field(default_factory=_new_id, primary_key=True)
    client_id: str = Field(foreign_key="clients.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    post_id: Optional[str] = Field(default=None, description="Direct post reference")
    actor_id: Optional[str] = Field(default=None)
    entry_point_url: Optional[str] = Field(default=None)
    source: str = Field(default="", description="linkedin_dm | website | referral ...")


class Meeting(SQLModel, table=True):
    __tablename__ = "meetings"

    id: str = Field(default_factory=_new_id, primary_key=True)
    client_id: str = Field(foreign_key="clients.id", index=True)
    inbound_signal_id: Optional[str] = Field(default=None)
    outcome: MeetingOutcome = Field(default=MeetingOutcome.HELD)
    scheduled_at: datetime = Field(default_factory=_utcnow)


class Opportunity(SQLModel, table=True):
    """A sales pipeline record."""

    __tablename__ = "opportunities"

    id: str = Field(default_factory=_new_id, primary_key=True)
    client_id: str = Field(foreign_key="clients.id", index=True)
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    closed_at: Optional[datetime] = Field(default=None)
    amount: float = Field(default=0.0)
    stage: OpportunityStage = Field(default=OpportunityStage.QUALIFIED)
    post_id: Optional[str] = Field(default=None)
    inbound_signal_id: Optional[str] = Field(default=None)
    meeting_id: Optional[str] = Field(default=None)
