from campaignflow.analytics.aggregate import CampaignTotals
from campaignflow.analytics.recommendations import generate_recommendations
from campaignflow.domain.models import Goals


def test_rules_fire_in_order() -> None:
    goals = Goals(target_appointments=270, target_response_rate=5.0)
    totals = CampaignTotals(total_leads=1000, total_replies=20, total_appointments=0)
    recs = generate_recommendations(goals, totals, response_rate=2.0, conversion_rate=10.0)

    assert [(r.category, r.priority) for r in recs] == [
        ("Lead Volume", "high"),
        ("Infrastructure", "high"),
        ("Lead Sourcing", "high"),
        ("Messaging", "medium"),
        ("Follow-up", "medium"),
        ("Conversion", "medium"),
    ]
    assert [r.id for r in recs] == [1, 2, 3, 4, 5, 6]
    # 270 / 0.10 = 2,700 replies; 2,700 / 0.02 = 135,000 leads; 1,000 already contacted.
    assert "134,000" in recs[0].action
    assert recs[0].expected_impact == "270 more appointments needed"
    assert "268 mailboxes" in recs[1].action
    assert "134,000" in recs[2].action
    assert recs[2].expected_impact == "About $2,700 in lead data"


def test_default_record_when_goals_are_met() -> None:
    goals = Goals(target_appointments=10, target_response_rate=5.0)
    totals = CampaignTotals(total_leads=1000, total_replies=60, total_appointments=12)
    recs = generate_recommendations(goals, totals, response_rate=6.0, conversion_rate=20.0)
    assert len(recs) == 1
    assert recs[0].priority == "low"
    assert recs[0].category == "Performance"


def test_zero_rates_use_fallback_fractions() -> None:
    goals = Goals(target_appointments=10, target_response_rate=5.0)
    recs = generate_recommendations(goals, CampaignTotals(), response_rate=0.0, conversion_rate=0.0)
    lead_volume = recs[0]
    # 10 / 0.1 = 100 replies, 100 / 0.05 = 2,000 leads.
    assert lead_volume.category == "Lead Volume"
    assert "2,000" in lead_volume.action
    assert recs[1].category == "Infrastructure"
    assert "4 mailboxes" in recs[1].action


def test_volume_rules_skipped_when_contacted_enough() -> None:
    goals = Goals(target_appointments=20, target_response_rate=5.0)
    totals = CampaignTotals(total_leads=10_000, total_replies=600, total_appointments=5)
    recs = generate_recommendations(goals, totals, response_rate=6.0, conversion_rate=20.0)
    assert recs[0].category == "Performance"


def test_response_rules_are_paired() -> None:
    goals = Goals(target_appointments=0, target_response_rate=5.0)
    recs = generate_recommendations(goals, CampaignTotals(), response_rate=4.9, conversion_rate=50.0)
    assert [r.category for r in recs] == ["Messaging", "Follow-up"]
