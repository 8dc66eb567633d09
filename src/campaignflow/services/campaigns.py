from __future__ import annotations

from datetime import date
from typing import Any
from uuid import uuid4

from campaignflow.domain import rules
from campaignflow.domain.models import Campaign
from campaignflow.domain.types import EntityKind
from campaignflow.services.errors import apply_mutation
from campaignflow.services.events import EventLogger
from campaignflow.services.projects import campaign_from_row
from campaignflow.services.utils import utc_now_iso
from campaignflow.store.base import EntityStore

MAX_NAME_LENGTH = 200
MAX_TARGET_LEADS = 1_000_000
MAX_BUDGET = 100_000_000
MAX_TARGET_OUTREACH = 1_000_000
EARLIEST_YEAR = 2020
LATEST_YEAR = 2050

EDITABLE_FIELDS = {"name", "start_date", "target_leads", "allocated_budget", "target_outreach"}


def create_campaign(
    store: EntityStore,
    project_id: str,
    name: str,
    start_date: date | str,
    target_leads: int,
    allocated_budget: float,
    target_outreach: int | None = None,
    logger: EventLogger | None = None,
) -> Campaign:
    rules.require(project_id, "project")
    fields = validate_campaign_fields(
        {
            "name": name,
            "start_date": start_date,
            "target_leads": target_leads,
            "allocated_budget": allocated_budget,
            "target_outreach": target_outreach or 0,
        }
    )
    now = utc_now_iso()
    fields = {
        "id": str(uuid4()),
        "project_id": project_id,
        **fields,
        "created_at": now,
        "updated_at": now,
    }
    row = apply_mutation(
        EntityKind.CAMPAIGNS,
        "create",
        lambda: store.insert(EntityKind.CAMPAIGNS, fields),
        logger=logger,
        changed_fields=sorted(EDITABLE_FIELDS),
    )
    return campaign_from_row(row)


def update_campaign(
    store: EntityStore,
    campaign_id: str,
    updates: dict[str, Any],
    logger: EventLogger | None = None,
) -> Campaign:
    if not updates:
        raise rules.ValidationError("Nothing to update.")
    unknown = set(updates) - EDITABLE_FIELDS
    if unknown:
        raise rules.ValidationError(f"Unknown campaign fields: {', '.join(sorted(unknown))}")
    fields = {**validate_campaign_fields(updates), "updated_at": utc_now_iso()}
    row = apply_mutation(
        EntityKind.CAMPAIGNS,
        "update",
        lambda: store.update(EntityKind.CAMPAIGNS, campaign_id, fields),
        logger=logger,
        entity_id=campaign_id,
        changed_fields=list(updates),
    )
    return campaign_from_row(row)


def delete_campaign(store: EntityStore, campaign_id: str, logger: EventLogger | None = None) -> None:
    apply_mutation(
        EntityKind.CAMPAIGNS,
        "delete",
        lambda: store.delete(EntityKind.CAMPAIGNS, campaign_id),
        logger=logger,
        entity_id=campaign_id,
    )


def validate_campaign_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Check the fields present and return them normalized for storage."""
    cleaned: dict[str, Any] = {}
    if "name" in fields:
        rules.require(fields["name"], "name", "Campaign name is required")
        rules.validate_length(fields["name"], "Campaign name", MAX_NAME_LENGTH)
        cleaned["name"] = fields["name"].strip()
    if "start_date" in fields:
        start = fields["start_date"]
        if not isinstance(start, date):
            start = rules.parse_date(start, "start_date")
            if start is None:
                raise rules.ValidationError("Invalid date format (YYYY-MM-DD)")
        rules.validate_year(start, "Start date", earliest=EARLIEST_YEAR, latest=LATEST_YEAR)
        cleaned["start_date"] = start.isoformat()
    if "target_leads" in fields:
        cleaned["target_leads"] = rules.validate_int(
            fields["target_leads"],
            "Target leads",
            minimum=1,
            maximum=MAX_TARGET_LEADS,
            message="Target leads must be positive",
        )
    if "allocated_budget" in fields:
        cleaned["allocated_budget"] = rules.validate_amount(
            fields["allocated_budget"],
            "Budget",
            maximum=MAX_BUDGET,
            message="Budget must be positive",
        )
    if "target_outreach" in fields:
        cleaned["target_outreach"] = rules.validate_int(
            fields["target_outreach"],
            "Target outreach",
            minimum=0,
            maximum=MAX_TARGET_OUTREACH,
            message="Target outreach cannot be negative",
        )
    return cleaned
