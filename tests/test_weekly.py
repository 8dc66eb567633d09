from pathlib import Path

import pytest

from campaignflow.domain.rules import ValidationError
from campaignflow.domain.types import EntityKind
from campaignflow.services.campaigns import create_campaign
from campaignflow.services.projects import create_project, find_campaign, load_projects
from campaignflow.services.weekly import set_week_field, upsert_week
from campaignflow.store.sqlite import SqliteStore


def _store(tmp_path: Path) -> SqliteStore:
    store = SqliteStore(tmp_path / "test.sqlite")
    schema_path = (
        Path(__file__).resolve().parents[1] / "resources" / "schema" / "canonical.yaml"
    )
    store.apply_schema(schema_path)
    return store


def _campaign_id(store: SqliteStore) -> str:
    project = create_project(store, "Q1")
    return create_campaign(
        store, project.project_id, "Outbound", "2026-01-05", 6000, 500.0
    ).campaign_id


class RecordingStore:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def upsert(self, kind, conflict_keys, fields):
        self.calls.append("upsert")
        return {"id": "w1", **fields}


def test_upsert_week_is_idempotent(tmp_path: Path) -> None:
    store = _store(tmp_path)
    campaign_id = _campaign_id(store)

    first = upsert_week(store, campaign_id, 3, 100)
    second = upsert_week(store, campaign_id, 3, 250, replies=7)

    rows = store.select(EntityKind.WEEKLY_ENTRIES)
    assert len(rows) == 1
    assert rows[0]["leads_contacted"] == 250
    assert rows[0]["replies"] == 7
    assert second.entry_id == first.entry_id


def test_set_week_field_keeps_other_values(tmp_path: Path) -> None:
    store = _store(tmp_path)
    campaign_id = _campaign_id(store)
    upsert_week(store, campaign_id, 1, 400, target_outreach=500, replies=12, appointments=2)
    campaign = find_campaign(load_projects(store), campaign_id)

    entry = set_week_field(store, campaign, 1, "replies", 15)

    assert entry.leads_contacted == 400
    assert entry.target_outreach == 500
    assert entry.replies == 15
    assert entry.appointments == 2


def test_set_week_field_on_new_week(tmp_path: Path) -> None:
    store = _store(tmp_path)
    campaign_id = _campaign_id(store)
    campaign = find_campaign(load_projects(store), campaign_id)

    entry = set_week_field(store, campaign, 4, "target_outreach", 900)
    assert entry.leads_contacted == 0
    assert entry.target_outreach == 900

    with pytest.raises(ValidationError):
        set_week_field(store, campaign, 4, "week_number", 2)


@pytest.mark.parametrize("week", [0, 53, -1])
def test_invalid_week_never_reaches_store(week: int) -> None:
    store = RecordingStore()
    with pytest.raises(ValidationError, match="Week number must be between 1 and 52"):
        upsert_week(store, "c1", week, 10)
    assert store.calls == []


def test_negative_counts_rejected() -> None:
    store = RecordingStore()
    with pytest.raises(ValidationError, match="Leads contacted cannot be negative"):
        upsert_week(store, "c1", 1, -5)
    with pytest.raises(ValidationError, match="at most 100,000"):
        upsert_week(store, "c1", 1, 10, replies=100_001)
    assert store.calls == []
