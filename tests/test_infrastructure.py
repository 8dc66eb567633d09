from pathlib import Path

import pytest

from campaignflow.domain.rules import ValidationError
from campaignflow.domain.types import EntityKind
from campaignflow.services.infrastructure import upsert_infrastructure
from campaignflow.services.projects import create_project
from campaignflow.store.sqlite import SqliteStore


def _store(tmp_path: Path) -> SqliteStore:
    store = SqliteStore(tmp_path / "test.sqlite")
    schema_path = (
        Path(__file__).resolve().parents[1] / "resources" / "schema" / "canonical.yaml"
    )
    store.apply_schema(schema_path)
    return store


def test_one_infrastructure_row_per_project(tmp_path: Path) -> None:
    store = _store(tmp_path)
    project = create_project(store, "Q1")

    upsert_infrastructure(store, project.project_id, mailboxes=10, linkedin_accounts=1)
    infra = upsert_infrastructure(store, project.project_id, mailboxes=25, linkedin_accounts=3)

    assert infra.mailboxes == 25
    assert infra.linkedin_accounts == 3
    assert len(store.select(EntityKind.INFRASTRUCTURE)) == 1


def test_infrastructure_limits(tmp_path: Path) -> None:
    store = _store(tmp_path)
    project = create_project(store, "Q1")
    with pytest.raises(ValidationError, match="Mailboxes cannot be negative"):
        upsert_infrastructure(store, project.project_id, mailboxes=-1, linkedin_accounts=0)
    with pytest.raises(ValidationError, match="at most 1,000"):
        upsert_infrastructure(store, project.project_id, mailboxes=0, linkedin_accounts=1001)
