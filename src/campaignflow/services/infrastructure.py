from __future__ import annotations

from uuid import uuid4

from campaignflow.domain import rules
from campaignflow.domain.models import Infrastructure
from campaignflow.domain.types import EntityKind
from campaignflow.services.errors import apply_mutation
from campaignflow.services.events import EventLogger
from campaignflow.services.projects import infrastructure_from_row
from campaignflow.services.utils import utc_now_iso
from campaignflow.store.base import EntityStore

MAX_ACCOUNTS = 1000


def upsert_infrastructure(
    store: EntityStore,
    project_id: str,
    mailboxes: int,
    linkedin_accounts: int,
    logger: EventLogger | None = None,
) -> Infrastructure:
    rules.require(project_id, "project")
    rules.validate_int(
        mailboxes,
        "Mailboxes",
        minimum=0,
        maximum=MAX_ACCOUNTS,
        message="Mailboxes cannot be negative",
    )
    rules.validate_int(
        linkedin_accounts,
        "LinkedIn accounts",
        minimum=0,
        maximum=MAX_ACCOUNTS,
        message="LinkedIn accounts cannot be negative",
    )
    now = utc_now_iso()
    fields = {
        "id": str(uuid4()),
        "project_id": project_id,
        "mailboxes": mailboxes,
        "linkedin_accounts": linkedin_accounts,
        "created_at": now,
        "updated_at": now,
    }
    row = apply_mutation(
        EntityKind.INFRASTRUCTURE,
        "upsert",
        lambda: store.upsert(EntityKind.INFRASTRUCTURE, ("project_id",), fields),
        logger=logger,
        changed_fields=["mailboxes", "linkedin_accounts"],
    )
    return infrastructure_from_row(row)
