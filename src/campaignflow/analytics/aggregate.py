from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from campaignflow.domain.models import WeeklyEntry

BUSINESS_DAYS_PER_WEEK = 5
WEEKS_IN_PERIOD = 52


@dataclass(frozen=True)
class CampaignTotals:
    total_leads: int = 0
    total_replies: int = 0
    total_appointments: int = 0
    weeks_completed: int = 0


@dataclass(frozen=True)
class CumulativePoint:
    week: str
    leads: int
    replies: int
    appointments: int
    target: float | None


@dataclass(frozen=True)
class WeeklyRow:
    week_number: int
    leads_contacted: int
    target_outreach: int
    daily_average: float


def aggregate_entries(entries: Iterable[WeeklyEntry]) -> CampaignTotals:
    total_leads = 0
    total_replies = 0
    total_appointments = 0
    weeks_completed = 0
    for entry in entries:
        total_leads += entry.leads_contacted or 0
        total_replies += entry.replies or 0
        total_appointments += entry.appointments or 0
        if _has_data(entry):
            weeks_completed += 1
    return CampaignTotals(
        total_leads=total_leads,
        total_replies=total_replies,
        total_appointments=total_appointments,
        weeks_completed=weeks_completed,
    )


def daily_average(entry: WeeklyEntry) -> float:
    return (entry.leads_contacted or 0) / BUSINESS_DAYS_PER_WEEK


def cumulative_series(
    entries: Iterable[WeeklyEntry], goal_appointments: int | None = None
) -> list[CumulativePoint]:
    """Running totals per week, with the straight-line appointment target when a goal is set."""
    points: list[CumulativePoint] = []
    leads = replies = appointments = 0
    ordered = sorted(entries, key=lambda entry: entry.week_number)
    for index, entry in enumerate(ordered, start=1):
        leads += entry.leads_contacted or 0
        replies += entry.replies or 0
        appointments += entry.appointments or 0
        target = goal_appointments / WEEKS_IN_PERIOD * index if goal_appointments else None
        points.append(
            CumulativePoint(
                week=f"Week {entry.week_number}",
                leads=leads,
                replies=replies,
                appointments=appointments,
                target=target,
            )
        )
    return points


def weekly_rows(entries: Iterable[WeeklyEntry], min_weeks: int = 4) -> list[WeeklyRow]:
    by_week = {entry.week_number: entry for entry in entries}
    count = max(min_weeks, len(by_week))
    rows: list[WeeklyRow] = []
    for week_number in range(1, count + 1):
        entry = by_week.get(week_number)
        leads = entry.leads_contacted if entry else 0
        outreach = entry.target_outreach if entry else 0
        rows.append(
            WeeklyRow(
                week_number=week_number,
                leads_contacted=leads,
                target_outreach=outreach or 0,
                daily_average=round(leads / BUSINESS_DAYS_PER_WEEK, 1),
            )
        )
    return rows


def _has_data(entry: WeeklyEntry) -> bool:
    return any(
        (value or 0) > 0
        for value in (
            entry.leads_contacted,
            entry.replies,
            entry.appointments,
            entry.target_outreach,
        )
    )
