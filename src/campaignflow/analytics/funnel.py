from __future__ import annotations

from dataclasses import dataclass

from campaignflow.analytics.aggregate import CampaignTotals
from campaignflow.analytics.goals import project_goal
from campaignflow.analytics.recommendations import CONVERSION_THRESHOLD
from campaignflow.domain.models import Goals
from campaignflow.domain.types import FunnelStatus


@dataclass(frozen=True)
class FunnelStage:
    stage: str
    prospects: int
    rate: float
    benchmark: float
    status: str
    issue: str | None


@dataclass(frozen=True)
class FunnelAnalysis:
    tofu: FunnelStage
    mofu: FunnelStage
    bofu: FunnelStage

    def stages(self) -> list[FunnelStage]:
        return [self.tofu, self.mofu, self.bofu]


def analyze_funnel(
    goals: Goals,
    totals: CampaignTotals,
    response_rate: float,
    conversion_rate: float,
) -> FunnelAnalysis:
    """Grade lead generation, initial response and appointment booking.

    TOFU measures leads contacted against the lead-volume pace expected by now,
    MOFU the response rate against its target and BOFU the reply-to-meeting
    conversion against the fixed threshold.
    """
    volume = project_goal(goals.target_volume, totals.total_leads, totals.weeks_completed)
    if volume.expected_by_now > 0:
        pace = totals.total_leads / volume.expected_by_now * 100
    else:
        pace = 100.0

    return FunnelAnalysis(
        tofu=_stage(
            "Lead Generation",
            totals.total_leads,
            pace,
            100.0,
            f"Outreach is {volume.deficit:,.0f} leads behind the weekly pace",
        ),
        mofu=_stage(
            "Initial Response",
            totals.total_replies,
            response_rate,
            goals.target_response_rate,
            f"Response rate {response_rate:.1f}% is below the "
            f"{goals.target_response_rate:.1f}% target",
        ),
        bofu=_stage(
            "Appointment Booking",
            totals.total_appointments,
            conversion_rate,
            CONVERSION_THRESHOLD,
            f"Only {conversion_rate:.1f}% of replies turn into appointments",
        ),
    )


def grade(rate: float, benchmark: float) -> FunnelStatus:
    if benchmark <= 0 or rate >= benchmark:
        return FunnelStatus.GOOD
    if rate >= benchmark / 2:
        return FunnelStatus.WARNING
    return FunnelStatus.CRITICAL


def _stage(name: str, prospects: int, rate: float, benchmark: float, issue: str) -> FunnelStage:
    status = grade(rate, benchmark)
    return FunnelStage(
        stage=name,
        prospects=prospects,
        rate=rate,
        benchmark=benchmark,
        status=status.value,
        issue=None if status is FunnelStatus.GOOD else issue,
    )
