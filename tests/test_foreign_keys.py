import sqlite3
from pathlib import Path

import pytest

from campaignflow.domain.types import EntityKind
from campaignflow.store.sqlite import SqliteStore

NOW = "2026-01-01T00:00:00Z"


def _store(tmp_path: Path) -> SqliteStore:
    store = SqliteStore(tmp_path / "test.sqlite")
    schema_path = (
        Path(__file__).resolve().parents[1] / "resources" / "schema" / "canonical.yaml"
    )
    store.apply_schema(schema_path)
    return store


def test_foreign_keys_enforced(tmp_path: Path) -> None:
    store = _store(tmp_path)

    with pytest.raises(sqlite3.IntegrityError):
        store.execute(
            "INSERT INTO campaigns (id, project_id, name, start_date, target_leads, "
            "allocated_budget, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            ("c1", "missing-project", "Outbound", "2026-01-05", 100, 50.0, NOW, NOW),
        )


def test_deleting_project_cascades(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.insert(
        EntityKind.PROJECTS,
        {"id": "p1", "name": "Q1", "created_at": NOW, "updated_at": NOW},
    )
    store.insert(
        EntityKind.CAMPAIGNS,
        {
            "id": "c1",
            "project_id": "p1",
            "name": "Outbound",
            "start_date": "2026-01-05",
            "target_leads": 100,
            "allocated_budget": 50.0,
            "created_at": NOW,
            "updated_at": NOW,
        },
    )
    store.insert(
        EntityKind.WEEKLY_ENTRIES,
        {
            "id": "w1",
            "campaign_id": "c1",
            "week_number": 1,
            "leads_contacted": 10,
            "created_at": NOW,
            "updated_at": NOW,
        },
    )
    store.insert(
        EntityKind.INFRASTRUCTURE,
        {"id": "i1", "project_id": "p1", "mailboxes": 4, "created_at": NOW, "updated_at": NOW},
    )

    store.delete(EntityKind.PROJECTS, "p1")

    assert store.select(EntityKind.CAMPAIGNS) == []
    assert store.select(EntityKind.WEEKLY_ENTRIES) == []
    assert store.select(EntityKind.INFRASTRUCTURE) == []
