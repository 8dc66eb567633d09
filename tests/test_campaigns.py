import math
from datetime import date
from pathlib import Path

import pytest

from campaignflow.domain.rules import ValidationError
from campaignflow.services.campaigns import (
    create_campaign,
    delete_campaign,
    update_campaign,
    validate_campaign_fields,
)
from campaignflow.services.errors import MutationError
from campaignflow.services.projects import create_project, load_projects
from campaignflow.store.sqlite import SqliteStore


def _store(tmp_path: Path) -> SqliteStore:
    store = SqliteStore(tmp_path / "test.sqlite")
    schema_path = (
        Path(__file__).resolve().parents[1] / "resources" / "schema" / "canonical.yaml"
    )
    store.apply_schema(schema_path)
    return store


def test_create_and_update_campaign(tmp_path: Path) -> None:
    store = _store(tmp_path)
    project = create_project(store, "Q1")
    campaign = create_campaign(
        store, project.project_id, "SaaS Founders", date(2026, 1, 5), 60000, 5000
    )
    assert campaign.start_date == date(2026, 1, 5)
    assert campaign.allocated_budget == 5000.0
    assert campaign.target_outreach == 0

    updated = update_campaign(store, campaign.campaign_id, {"target_leads": 1200})
    assert updated.target_leads == 1200
    assert updated.name == "SaaS Founders"


@pytest.mark.parametrize(
    ("fields", "message"),
    [
        ({"name": ""}, "Campaign name is required"),
        ({"name": "x" * 201}, "at most 200"),
        ({"target_leads": 0}, "Target leads must be positive"),
        ({"target_leads": 1_000_001}, "at most 1,000,000"),
        ({"allocated_budget": 0}, "Budget must be positive"),
        ({"target_outreach": -1}, "Target outreach cannot be negative"),
        ({"start_date": "05/01/2026"}, "Invalid date format"),
        ({"start_date": "2019-12-31"}, "between 2020 and 2050"),
    ],
)
def test_campaign_validation(fields: dict, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        validate_campaign_fields(fields)


def test_unknown_project_maps_to_mutation_error(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(MutationError, match="FOREIGN KEY"):
        create_campaign(store, "missing", "SaaS Founders", "2026-01-05", 100, 50.0)


def test_delete_campaign(tmp_path: Path) -> None:
    store = _store(tmp_path)
    project = create_project(store, "Q1")
    campaign = create_campaign(store, project.project_id, "Outbound", "2026-01-05", 100, 50.0)
    delete_campaign(store, campaign.campaign_id)
    assert load_projects(store)[0].campaigns == ()


@pytest.mark.parametrize("budget", [math.nan, math.inf, -math.inf])
def test_non_finite_budget_rejected_before_store(tmp_path: Path, budget: float) -> None:
    store = _store(tmp_path)
    project = create_project(store, "Q1")
    with pytest.raises(ValidationError, match="Budget must be a number"):
        create_campaign(store, project.project_id, "Outbound", "2026-01-05", 100, budget)
    assert load_projects(store)[0].campaigns == ()
