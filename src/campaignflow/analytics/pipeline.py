from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, replace

from campaignflow.analytics.aggregate import (
    CampaignTotals,
    CumulativePoint,
    WeeklyRow,
    aggregate_entries,
    cumulative_series,
    weekly_rows,
)
from campaignflow.analytics.budget import BudgetAllocation, allocate_budget
from campaignflow.analytics.funnel import FunnelAnalysis, analyze_funnel
from campaignflow.analytics.goals import (
    CurrentPace,
    GoalProjection,
    OutcomeProjection,
    current_pace,
    project_goal,
    project_outcome,
)
from campaignflow.analytics.rates import conversion_rate, response_rate
from campaignflow.analytics.recommendations import generate_recommendations
from campaignflow.domain.models import Campaign, Goals, Project, Recommendation
from campaignflow.domain.types import ProjectType


@dataclass(frozen=True)
class CampaignReport:
    campaign_id: str
    campaign_name: str
    goals: Goals
    totals: CampaignTotals
    response_rate: float
    conversion_rate: float
    budget: BudgetAllocation
    appointments: GoalProjection
    leads: GoalProjection
    outcome: OutcomeProjection
    pace: CurrentPace
    funnel: FunnelAnalysis
    trend: list[CumulativePoint]
    weeks: list[WeeklyRow]
    recommendations: list[Recommendation]


@dataclass(frozen=True)
class ProjectSummary:
    project_id: str
    name: str
    total_campaigns: int
    total_leads: int
    target_leads: int
    allocated_budget: float
    mailboxes: int
    linkedin_accounts: int


@dataclass(frozen=True)
class PortfolioSummary:
    total_projects: int
    total_campaigns: int
    total_leads: int
    total_budget: float
    leads_by_type: dict[str, int]
    projects_by_type: dict[str, int]


def goals_for_campaign(campaign: Campaign, defaults: Goals) -> Goals:
    """Campaign fields take precedence over the workspace goals they duplicate."""
    return replace(
        defaults,
        target_volume=campaign.target_leads,
        allocated_budget=campaign.allocated_budget,
    )


def build_campaign_report(campaign: Campaign, goals: Goals) -> CampaignReport:
    entries = list(campaign.weekly_entries)
    totals = aggregate_entries(entries)
    rr = response_rate(totals.total_replies, totals.total_leads)
    cr = conversion_rate(totals.total_appointments, totals.total_replies)
    return CampaignReport(
        campaign_id=campaign.campaign_id,
        campaign_name=campaign.name,
        goals=goals,
        totals=totals,
        response_rate=rr,
        conversion_rate=cr,
        budget=allocate_budget(goals.allocated_budget),
        appointments=project_goal(
            goals.target_appointments, totals.total_appointments, totals.weeks_completed
        ),
        leads=project_goal(goals.target_volume, totals.total_leads, totals.weeks_completed),
        outcome=project_outcome(goals.allocated_budget, rr),
        pace=current_pace(totals, rr),
        funnel=analyze_funnel(goals, totals, rr, cr),
        trend=cumulative_series(entries, goals.target_appointments),
        weeks=weekly_rows(entries),
        recommendations=generate_recommendations(goals, totals, rr, cr),
    )


def summarize_project(project: Project) -> ProjectSummary:
    infra = project.infrastructure
    return ProjectSummary(
        project_id=project.project_id,
        name=project.name,
        total_campaigns=len(project.campaigns),
        total_leads=_project_leads(project),
        target_leads=sum(campaign.target_leads or 0 for campaign in project.campaigns),
        allocated_budget=sum(campaign.allocated_budget or 0 for campaign in project.campaigns),
        mailboxes=infra.mailboxes if infra else 0,
        linkedin_accounts=infra.linkedin_accounts if infra else 0,
    )


def summarize_portfolio(projects: Iterable[Project]) -> PortfolioSummary:
    projects = list(projects)
    leads_by_type: dict[str, int] = defaultdict(int)
    projects_by_type: dict[str, int] = defaultdict(int)
    for project in projects:
        project_type = project.project_type or ProjectType.OUTBOUND_SALES.value
        leads_by_type[project_type] += _project_leads(project)
        projects_by_type[project_type] += 1
    return PortfolioSummary(
        total_projects=len(projects),
        total_campaigns=sum(len(project.campaigns) for project in projects),
        total_leads=sum(leads_by_type.values()),
        total_budget=sum(
            campaign.allocated_budget or 0
            for project in projects
            for campaign in project.campaigns
        ),
        leads_by_type=dict(leads_by_type),
        projects_by_type=dict(projects_by_type),
    )


def _project_leads(project: Project) -> int:
    return sum(
        entry.leads_contacted or 0
        for campaign in project.campaigns
        for entry in campaign.weekly_entries
    )
