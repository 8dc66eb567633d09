from campaignflow.analytics.aggregate import (
    aggregate_entries,
    cumulative_series,
    daily_average,
    weekly_rows,
)
from campaignflow.domain.models import WeeklyEntry


def _entry(week: int, leads: int, replies: int = 0, appointments: int = 0) -> WeeklyEntry:
    return WeeklyEntry(
        entry_id=f"w{week}",
        campaign_id="c1",
        week_number=week,
        leads_contacted=leads,
        replies=replies,
        appointments=appointments,
    )


def test_totals_sum_every_entry() -> None:
    entries = [_entry(2, 300, 9, 2), _entry(1, 500, 10, 1), _entry(3, 250)]
    totals = aggregate_entries(entries)
    assert totals.total_leads == 1050
    assert totals.total_replies == 19
    assert totals.total_appointments == 3
    assert totals.weeks_completed == 3


def test_empty_input_yields_zero_totals() -> None:
    totals = aggregate_entries([])
    assert totals.total_leads == 0
    assert totals.total_replies == 0
    assert totals.total_appointments == 0
    assert totals.weeks_completed == 0


def test_weeks_completed_ignores_rows_without_data() -> None:
    totals = aggregate_entries([_entry(1, 400), _entry(2, 0)])
    assert totals.weeks_completed == 1


def test_daily_average_uses_five_business_days() -> None:
    assert daily_average(_entry(1, 512)) == 102.4


def test_cumulative_series_is_ordered_by_week_with_target() -> None:
    points = cumulative_series([_entry(2, 200, 4, 1), _entry(1, 100, 2, 0)], goal_appointments=52)
    assert [p.week for p in points] == ["Week 1", "Week 2"]
    assert [p.leads for p in points] == [100, 300]
    assert [p.replies for p in points] == [2, 6]
    assert [p.appointments for p in points] == [0, 1]
    assert [p.target for p in points] == [1.0, 2.0]


def test_cumulative_series_without_goal_has_no_target() -> None:
    points = cumulative_series([_entry(1, 100)])
    assert points[0].target is None


def test_weekly_rows_fill_at_least_four_weeks() -> None:
    rows = weekly_rows([_entry(2, 333)])
    assert [row.week_number for row in rows] == [1, 2, 3, 4]
    assert rows[0].leads_contacted == 0
    assert rows[1].daily_average == 66.6
