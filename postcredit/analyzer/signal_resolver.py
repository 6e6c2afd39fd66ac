"""POSTCREDIT — Signal Resolver.

Decides which content post an inbound signal is credited to, in strict
priority order (first match wins):

1. Direct post reference that exists for the client      → HIGH
2. Normalized entry-point URL equals a post's URL key     → MEDIUM
3. Raw entry point / post URL substring of one another    → MEDIUM
4. Soft match: same actor, latest post within the window  → MEDIUM
5. Nothing                                                → UNATTRIBUTED
"""

from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from postcredit.core.confidence import Confidence
from postcredit.core.linkedin import normalize_linkedin_url
from postcredit.models.attribution_models import AttributionOptions, SignalAttribution
from postcredit.models.source_models import ContentPost, InboundSignal
from postcredit.core.logging import get_logger

logger = get_logger("analyzer.signal_resolver")


def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class PostIndex:
    """A client's posts with the lookups the resolver needs, built once per batch.

    Posts are visited in descending id order, so whenever two posts compete
    for the same URL key or substring match the lexicographically larger id
    wins, independent of the order rows came back from the database.
    """

    def __init__(self, posts: Iterable[ContentPost]):
        ordered = sorted(posts, key=lambda p: p.id, reverse=True)

        self.post_ids: set[str] = {p.id for p in ordered}
        self.by_normalized_url: Dict[str, str] = {}
        self.url_pairs: List[tuple[str, str]] = []
        self.by_actor: Dict[str, List[ContentPost]] = defaultdict(list)

        for post in ordered:
            raw = (post.post_url or "").strip()
            if raw:
                normalized = normalize_linkedin_url(raw)
                if normalized:
                    self.by_normalized_url.setdefault(normalized, post.id)
                    self.url_pairs.append((post.id, normalized))
                else:
                    self.url_pairs.append((post.id, raw))

            # Drafts without a posted-at can't be soft matched
            if post.posted_at is not None:
                self.by_actor[post.actor_id].append(post)

        # Most recent first, then larger id first
        for bucket in self.by_actor.values():
            bucket.sort(key=lambda p: (as_utc(p.posted_at), p.id), reverse=True)

    def __len__(self) -> int:
        return len(self.post_ids)


def _is_likely_same_link(entry_point: str, post_url: str) -> bool:
    # Tolerates truncated or decorated links in either direction
    return post_url in entry_point or entry_point in post_url


def _is_within_window(posted_at: datetime, created_at: datetime, window_days: int) -> bool:
    posted_at, created_at = as_utc(posted_at), as_utc(created_at)
    if posted_at > created_at:
        return False
    return created_at - posted_at <= timedelta(days=window_days)


def _match_url(entry_point_url: Optional[str], index: PostIndex) -> Optional[str]:
    raw = (entry_point_url or "").strip()
    if not raw:
        return None

    normalized = normalize_linkedin_url(raw)
    if normalized and normalized in index.by_normalized_url:
        return index.by_normalized_url[normalized]

    for post_id, post_url in index.url_pairs:
        if _is_likely_same_link(raw, post_url):
            return post_id
    return None


def _match_soft(
    signal: InboundSignal, index: PostIndex, options: AttributionOptions
) -> Optional[str]:
    if not options.use_soft_attribution or not signal.actor_id:
        return None

    for post in index.by_actor.get(signal.actor_id, []):
        if _is_within_window(
            post.posted_at, signal.created_at, options.attribution_window_days
        ):
            return post.id
        if as_utc(post.posted_at) <= as_utc(signal.created_at):
            # Candidates only get older from here
            return None
    return None


def resolve_signal(
    signal: InboundSignal,
    index: PostIndex,
    options: AttributionOptions,
) -> SignalAttribution:
    """Resolve one inbound signal against its client's post index."""
    if signal.post_id and signal.post_id in index.post_ids:
        return SignalAttribution(
            signal_id=signal.id,
            attributed_post_id=signal.post_id,
            confidence=Confidence.HIGH,
        )

    post_id = _match_url(signal.entry_point_url, index)
    if post_id is None:
        post_id = _match_soft(signal, index, options)

    if post_id is None:
        return SignalAttribution(signal_id=signal.id)

    return SignalAttribution(
        signal_id=signal.id,
        attributed_post_id=post_id,
        confidence=Confidence.MEDIUM,
    )


def resolve_signals(
    signals: Iterable[InboundSignal],
    index: PostIndex,
    options: AttributionOptions,
) -> Dict[str, SignalAttribution]:
    """Resolve a batch of signals. Returns signal id → attribution."""
    resolved = {s.id: resolve_signal(s, index, options) for s in signals}

    tiers = Counter(r.confidence.value for r in resolved.values())
    logger.info(
        f"Resolved {len(resolved)} inbound signals against {len(index)} posts: "
        f"{dict(sorted(tiers.items()))}"
    )
    return resolved
