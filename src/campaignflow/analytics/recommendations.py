from __future__ import annotations

import math

from campaignflow.analytics.aggregate import CampaignTotals
from campaignflow.analytics.budget import COST_PER_LEAD_BATCH, LEADS_PER_BATCH
from campaignflow.domain.models import Goals, Recommendation
from campaignflow.domain.types import Priority

LEADS_PER_MAILBOX = 500
CONVERSION_THRESHOLD = 15.0

# Used in place of a zero observed rate when sizing the required lead volume.
FALLBACK_CONVERSION = 0.1
FALLBACK_RESPONSE = 0.05


def generate_recommendations(
    goals: Goals,
    totals: CampaignTotals,
    response_rate: float,
    conversion_rate: float,
) -> list[Recommendation]:
    """Evaluate the recommendation rules in order.

    Volume rules come first (lead volume, infrastructure, lead sourcing), then
    the response-rate pair, then conversion. When nothing fires a single
    low-priority record is returned.
    """
    drafts: list[tuple[Priority, str, str, str]] = []

    appointment_gap = goals.target_appointments - totals.total_appointments
    if appointment_gap > 0:
        conversion_fraction = conversion_rate / 100 or FALLBACK_CONVERSION
        response_fraction = response_rate / 100 or FALLBACK_RESPONSE
        needed_replies = math.ceil(goals.target_appointments / conversion_fraction)
        needed_leads = math.ceil(needed_replies / response_fraction)
        additional_leads = max(0, needed_leads - totals.total_leads)
        if additional_leads > 0:
            drafts.append(
                (
                    Priority.HIGH,
                    "Lead Volume",
                    f"Increase outreach by {additional_leads:,} leads to reach "
                    f"{goals.target_appointments:,} appointments",
                    f"{appointment_gap:,} more appointments needed",
                )
            )
            additional_mailboxes = math.ceil(additional_leads / LEADS_PER_MAILBOX)
            if additional_mailboxes > 0:
                drafts.append(
                    (
                        Priority.HIGH,
                        "Infrastructure",
                        f"Add {additional_mailboxes:,} mailboxes to handle the extra sending volume",
                        f"Capacity for {additional_mailboxes * LEADS_PER_MAILBOX:,} more leads",
                    )
                )
            batches = math.ceil(additional_leads / LEADS_PER_BATCH)
            drafts.append(
                (
                    Priority.HIGH,
                    "Lead Sourcing",
                    f"Source {additional_leads:,} additional enriched leads",
                    f"About ${batches * COST_PER_LEAD_BATCH:,} in lead data",
                )
            )

    if response_rate < goals.target_response_rate:
        drafts.append(
            (
                Priority.MEDIUM,
                "Messaging",
                "Rework subject lines and personalize the opening message",
                f"Response rate from {response_rate:.1f}% to {goals.target_response_rate:.1f}%",
            )
        )
        drafts.append(
            (
                Priority.MEDIUM,
                "Follow-up",
                "Add a follow-up step for leads that have not replied",
                f"{goals.target_response_rate - response_rate:.1f} points of response rate to recover",
            )
        )

    if conversion_rate < CONVERSION_THRESHOLD:
        drafts.append(
            (
                Priority.MEDIUM,
                "Conversion",
                "Qualify replies faster and offer specific meeting slots",
                f"Conversion rate from {conversion_rate:.1f}% to {CONVERSION_THRESHOLD:.0f}%",
            )
        )

    if not drafts:
        drafts.append(
            (
                Priority.LOW,
                "Performance",
                "Maintain current momentum and keep logging weekly results",
                "Campaign is on track to meet its goals",
            )
        )

    return [
        Recommendation(
            id=index,
            priority=priority.value,
            category=category,
            action=action,
            expected_impact=impact,
        )
        for index, (priority, category, action, impact) in enumerate(drafts, start=1)
    ]
