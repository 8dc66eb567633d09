from datetime import date

import pytest

from campaignflow.analytics.pipeline import (
    build_campaign_report,
    goals_for_campaign,
    summarize_portfolio,
    summarize_project,
)
from campaignflow.domain.models import Campaign, Goals, Infrastructure, Project, WeeklyEntry


def _campaign(campaign_id: str = "c1", entries: tuple[WeeklyEntry, ...] = ()) -> Campaign:
    return Campaign(
        campaign_id=campaign_id,
        project_id="p1",
        name="SaaS Founders",
        start_date=date(2026, 1, 5),
        target_leads=5200,
        allocated_budget=5000.0,
        weekly_entries=entries,
    )


def _entry(week: int, leads: int, replies: int, appointments: int) -> WeeklyEntry:
    return WeeklyEntry(
        entry_id=f"w{week}",
        campaign_id="c1",
        week_number=week,
        leads_contacted=leads,
        replies=replies,
        appointments=appointments,
    )


def test_campaign_values_override_workspace_goals() -> None:
    goals = goals_for_campaign(_campaign(), Goals())
    assert goals.target_volume == 5200
    assert goals.allocated_budget == 5000.0
    assert goals.target_appointments == 270


def test_campaign_report() -> None:
    campaign = _campaign(entries=(_entry(2, 1000, 30, 3), _entry(1, 1000, 20, 2)))
    report = build_campaign_report(campaign, goals_for_campaign(campaign, Goals()))

    assert report.totals.total_leads == 2000
    assert report.totals.total_replies == 50
    assert report.totals.weeks_completed == 2
    assert report.response_rate == pytest.approx(2.5)
    assert report.conversion_rate == pytest.approx(10.0)
    assert report.budget.targeted_leads == 175000
    assert report.budget.mailboxes == 428
    assert report.leads.expected_by_now == pytest.approx(200)
    assert report.appointments.remaining_weeks == 50
    assert [point.week for point in report.trend] == ["Week 1", "Week 2"]
    assert report.trend[-1].appointments == 5
    assert len(report.weeks) == 4
    assert report.recommendations[0].category == "Lead Volume"
    assert report.funnel.tofu.status == "good"


def test_empty_campaign_report() -> None:
    campaign = _campaign()
    report = build_campaign_report(campaign, goals_for_campaign(campaign, Goals()))
    assert report.response_rate == 0.0
    assert report.conversion_rate == 0.0
    assert report.pace.appointments_per_week == 0.0
    assert report.trend == []
    assert report.outcome.projected_monthly_appointments == 0


def test_project_and_portfolio_summary() -> None:
    first = Project(
        project_id="p1",
        name="Q1 Outbound",
        client_name="Acme",
        brand_color="#6366f1",
        logo_url="",
        project_type="outbound_sales",
        campaigns=(_campaign("c1", (_entry(1, 400, 0, 0),)), _campaign("c2", (_entry(1, 100, 0, 0),))),
        infrastructure=Infrastructure("i1", "p1", mailboxes=12, linkedin_accounts=3),
    )
    second = Project(
        project_id="p2",
        name="Hiring",
        client_name="Acme",
        brand_color="#6366f1",
        logo_url="",
        project_type="events",
        campaigns=(_campaign("c3", (_entry(1, 250, 0, 0),)),),
    )

    summary = summarize_project(first)
    assert summary.total_campaigns == 2
    assert summary.total_leads == 500
    assert summary.target_leads == 10400
    assert summary.allocated_budget == 10000.0
    assert summary.mailboxes == 12
    assert summarize_project(second).mailboxes == 0

    portfolio = summarize_portfolio([first, second])
    assert portfolio.total_projects == 2
    assert portfolio.total_campaigns == 3
    assert portfolio.total_leads == 750
    assert portfolio.total_budget == 15000.0
    assert portfolio.leads_by_type == {"outbound_sales": 500, "events": 250}
    assert portfolio.projects_by_type == {"outbound_sales": 1, "events": 1}
