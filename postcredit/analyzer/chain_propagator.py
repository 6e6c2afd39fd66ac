"""POSTCREDIT — Chain Propagator.

Carries signal attribution down the funnel:
  signal → meeting → opportunity

Opportunity order: referenced signal, then referenced meeting, then a
direct post tag (HIGH). Signal provenance wins over a direct post tag
even when the signal match is only MEDIUM.
"""

from typing import Dict, Iterable, Optional

from postcredit.core.confidence import Confidence
from postcredit.models.attribution_models import (
    MeetingAttribution,
    OpportunityAttribution,
    SignalAttribution,
)
from postcredit.models.source_models import Meeting, Opportunity
from postcredit.core.logging import get_logger

logger = get_logger("analyzer.chain_propagator")


def propagate_meetings(
    meetings: Iterable[Meeting],
    signal_attributions: Dict[str, SignalAttribution],
) -> Dict[str, MeetingAttribution]:
    """Meetings inherit their signal's attribution verbatim."""
    resolved: Dict[str, MeetingAttribution] = {}

    for meeting in meetings:
        inherited: Optional[SignalAttribution] = None
        if meeting.inbound_signal_id:
            inherited = signal_attributions.get(meeting.inbound_signal_id)

        if inherited is None:
            resolved[meeting.id] = MeetingAttribution(
                meeting_id=meeting.id,
                inbound_signal_id=meeting.inbound_signal_id,
            )
            continue

        resolved[meeting.id] = MeetingAttribution(
            meeting_id=meeting.id,
            inbound_signal_id=meeting.inbound_signal_id,
            attributed_post_id=inherited.attributed_post_id,
            confidence=inherited.confidence,
        )

    return resolved


def propagate_opportunities(
    opportunities: Iterable[Opportunity],
    signal_attributions: Dict[str, SignalAttribution],
    meeting_attributions: Dict[str, MeetingAttribution],
    post_ids: set[str],
) -> Dict[str, OpportunityAttribution]:
    """Resolve every opportunity. `post_ids` is the client's full post set."""
    resolved: Dict[str, OpportunityAttribution] = {}

    for opp in opportunities:
        post_id: Optional[str] = None
        confidence = Confidence.UNATTRIBUTED

        signal = signal_attributions.get(opp.inbound_signal_id or "")
        meeting = meeting_attributions.get(opp.meeting_id or "")

        if signal is not None and signal.attributed_post_id:
            post_id, confidence = signal.attributed_post_id, signal.confidence
        elif meeting is not None and meeting.attributed_post_id:
            post_id, confidence = meeting.attributed_post_id, meeting.confidence
        elif opp.post_id and opp.post_id in post_ids:
            post_id, confidence = opp.post_id, Confidence.HIGH

        resolved[opp.id] = OpportunityAttribution(
            opportunity_id=opp.id,
            amount=opp.amount or 0.0,
            stage=opp.stage,
            attributed_post_id=post_id,
            confidence=confidence,
        )

    attributed = sum(1 for r in resolved.values() if r.attributed_post_id)
    logger.info(f"Propagated attribution to {attributed}/{len(resolved)} opportunities")
    return resolved
