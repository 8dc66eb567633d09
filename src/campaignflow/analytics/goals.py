from __future__ import annotations

import math
from dataclasses import dataclass

from campaignflow.analytics.aggregate import WEEKS_IN_PERIOD, CampaignTotals
from campaignflow.analytics.budget import COST_PER_LEAD, allocate_budget

# Fixed reply-to-appointment assumption used by the 30-day outlook. It is not
# derived from the campaign's observed conversion rate.
REPLY_TO_APPOINTMENT = 0.45
WEEKS_PER_MONTH = 4


@dataclass(frozen=True)
class GoalProjection:
    target: float
    current_total: float
    weekly_target: float
    expected_by_now: float
    deficit: float
    remaining_weeks: int
    adjusted_weekly_target: float
    progress_pct: float


@dataclass(frozen=True)
class OutcomeProjection:
    targeted_leads: int
    projected_weekly_leads: float
    projected_weekly_replies: float
    projected_monthly_appointments: int


@dataclass(frozen=True)
class CurrentPace:
    appointments_per_week: float
    response_rate: float
    weekly_outreach_volume: float


def project_goal(target: float, current_total: float, weeks_completed: int) -> GoalProjection:
    """Compare a yearly target against what has been achieved so far.

    The deficit never goes negative, while the adjusted weekly target does when
    the goal has already been passed.
    """
    weekly_target = target / WEEKS_IN_PERIOD
    expected_by_now = weekly_target * weeks_completed
    remaining_weeks = WEEKS_IN_PERIOD - weeks_completed
    if remaining_weeks > 0:
        adjusted_weekly_target = (target - current_total) / remaining_weeks
    else:
        adjusted_weekly_target = 0.0
    return GoalProjection(
        target=target,
        current_total=current_total,
        weekly_target=weekly_target,
        expected_by_now=expected_by_now,
        deficit=max(0.0, expected_by_now - current_total),
        remaining_weeks=remaining_weeks,
        adjusted_weekly_target=adjusted_weekly_target,
        progress_pct=progress_pct(current_total, target),
    )


def progress_pct(current_total: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return min(100.0, current_total / target * 100)


def project_outcome(allocated_budget: float, response_rate: float) -> OutcomeProjection:
    # Per-lead division, which can land one lead below the batch formula in
    # allocate_budget.
    targeted_leads = math.floor(allocate_budget(allocated_budget).budget_for_leads / COST_PER_LEAD)
    weekly_leads = targeted_leads / WEEKS_PER_MONTH
    weekly_replies = weekly_leads * (response_rate / 100)
    return OutcomeProjection(
        targeted_leads=targeted_leads,
        projected_weekly_leads=weekly_leads,
        projected_weekly_replies=weekly_replies,
        projected_monthly_appointments=round_half_up(
            weekly_replies * WEEKS_PER_MONTH * REPLY_TO_APPOINTMENT
        ),
    )


def current_pace(totals: CampaignTotals, response_rate: float) -> CurrentPace:
    weeks = totals.weeks_completed
    if weeks <= 0:
        return CurrentPace(0.0, response_rate, 0.0)
    return CurrentPace(
        appointments_per_week=totals.total_appointments / weeks,
        response_rate=response_rate,
        weekly_outreach_volume=totals.total_leads / weeks,
    )


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
