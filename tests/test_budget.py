import pytest

from campaignflow.analytics.budget import COST_PER_LEAD, allocate_budget


def test_budget_allocation_example() -> None:
    allocation = allocate_budget(5000)
    assert allocation.budget_for_leads == pytest.approx(3500)
    assert allocation.budget_for_mailboxes == pytest.approx(1500)
    assert allocation.targeted_leads == 175_000
    assert allocation.mailboxes == 428


@pytest.mark.parametrize("budget", [1, 99.99, 5200, 123_456.78, 100_000_000])
def test_budget_split_is_conserved(budget: float) -> None:
    allocation = allocate_budget(budget)
    assert allocation.budget_for_leads + allocation.budget_for_mailboxes == pytest.approx(budget)


def test_cost_per_lead_is_two_cents() -> None:
    assert COST_PER_LEAD == pytest.approx(0.02)
