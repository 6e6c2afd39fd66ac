"""Record builders shared by the test modules."""

from datetime import datetime, timedelta, timezone

from postcredit.models.source_models import (
    ContentPost,
    InboundSignal,
    Meeting,
    Opportunity,
    PostStatus,
)

# Fixed "now" for every time-dependent test
NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def post(post_id, client_id="client-1", actor_id="exec-1", posted_at=None, url=None):
    return ContentPost(
        id=post_id,
        client_id=client_id,
        actor_id=actor_id,
        post_url=url,
        posted_at=posted_at,
        hook=f"Hook for {post_id}",
        theme="pricing",
        status=PostStatus.POSTED if posted_at else PostStatus.DRAFT,
    )


def signal(signal_id, client_id="client-1", created_at=None, **kwargs):
    kwargs.setdefault("source", "linkedin_dm")
    return InboundSignal(
        id=signal_id,
        client_id=client_id,
        created_at=created_at or NOW,
        **kwargs,
    )


def meeting(meeting_id, client_id="client-1", **kwargs):
    return Meeting(id=meeting_id, client_id=client_id, scheduled_at=NOW, **kwargs)


def opportunity(opp_id, client_id="client-1", created_at=None, **kwargs):
    return Opportunity(
        id=opp_id,
        client_id=client_id,
        created_at=created_at or NOW,
        **kwargs,
    )


def recent(days: float) -> datetime:
    """Relative to the real clock, for code paths that don't take a `now`."""
    return datetime.now(timezone.utc) - timedelta(days=days)
