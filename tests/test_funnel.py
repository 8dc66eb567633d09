from campaignflow.analytics.aggregate import CampaignTotals
from campaignflow.analytics.funnel import analyze_funnel, grade
from campaignflow.domain.models import Goals
from campaignflow.domain.types import FunnelStatus


def test_grade_thresholds() -> None:
    assert grade(5.0, 5.0) is FunnelStatus.GOOD
    assert grade(2.5, 5.0) is FunnelStatus.WARNING
    assert grade(2.4, 5.0) is FunnelStatus.CRITICAL
    assert grade(0.0, 0.0) is FunnelStatus.GOOD


def test_funnel_stages() -> None:
    goals = Goals(target_volume=5200, target_response_rate=5.0)
    # Two weeks in: 200 leads expected, 150 contacted.
    totals = CampaignTotals(
        total_leads=150, total_replies=3, total_appointments=1, weeks_completed=2
    )
    funnel = analyze_funnel(goals, totals, response_rate=2.0, conversion_rate=33.3)

    assert funnel.tofu.prospects == 150
    assert funnel.tofu.status == "warning"
    assert "50 leads behind" in funnel.tofu.issue
    assert funnel.mofu.status == "critical"
    assert funnel.bofu.status == "good"
    assert funnel.bofu.issue is None
    assert [s.stage for s in funnel.stages()] == [
        "Lead Generation",
        "Initial Response",
        "Appointment Booking",
    ]
