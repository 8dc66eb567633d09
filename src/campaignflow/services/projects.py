from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any
from uuid import uuid4

from campaignflow.domain import rules
from campaignflow.domain.models import Campaign, Infrastructure, Project, WeeklyEntry
from campaignflow.domain.types import EntityKind, ProjectType
from campaignflow.services.errors import apply_mutation
from campaignflow.services.events import EventLogger
from campaignflow.services.utils import utc_now_iso
from campaignflow.store.base import EntityStore

DEFAULT_CLIENT_NAME = "CampaignFlow Pro"
DEFAULT_BRAND_COLOR = "#6366f1"
EDITABLE_FIELDS = {"name", "client_name", "brand_color", "logo_url", "project_type"}


def create_project(
    store: EntityStore,
    name: str,
    client_name: str | None = None,
    brand_color: str | None = None,
    logo_url: str | None = None,
    project_type: str | None = None,
    logger: EventLogger | None = None,
) -> Project:
    rules.require(name, "name", "Project name is required")
    _validate_project(name, client_name, brand_color, logo_url, project_type)
    now = utc_now_iso()
    fields = {
        "id": str(uuid4()),
        "name": name.strip(),
        "client_name": (client_name or "").strip() or DEFAULT_CLIENT_NAME,
        "brand_color": brand_color or DEFAULT_BRAND_COLOR,
        "logo_url": logo_url or "",
        "project_type": project_type or ProjectType.OUTBOUND_SALES.value,
        "created_at": now,
        "updated_at": now,
    }
    row = apply_mutation(
        EntityKind.PROJECTS,
        "create",
        lambda: store.insert(EntityKind.PROJECTS, fields),
        logger=logger,
        changed_fields=[key for key in fields if key not in ("id", "created_at", "updated_at")],
    )
    return project_from_row(row)


def update_project(
    store: EntityStore,
    project_id: str,
    updates: dict[str, Any],
    logger: EventLogger | None = None,
) -> Project:
    if not updates:
        raise rules.ValidationError("Nothing to update.")
    unknown = set(updates) - EDITABLE_FIELDS
    if unknown:
        raise rules.ValidationError(f"Unknown project fields: {', '.join(sorted(unknown))}")
    _validate_project(
        updates.get("name"),
        updates.get("client_name"),
        updates.get("brand_color"),
        updates.get("logo_url"),
        updates.get("project_type"),
    )
    fields = dict(updates)
    if "name" in fields:
        fields["name"] = fields["name"].strip()
    if "client_name" in fields:
        fields["client_name"] = (fields["client_name"] or "").strip() or DEFAULT_CLIENT_NAME
    fields["updated_at"] = utc_now_iso()
    row = apply_mutation(
        EntityKind.PROJECTS,
        "update",
        lambda: store.update(EntityKind.PROJECTS, project_id, fields),
        logger=logger,
        entity_id=project_id,
        changed_fields=list(updates),
    )
    return project_from_row(row)


def delete_project(store: EntityStore, project_id: str, logger: EventLogger | None = None) -> None:
    apply_mutation(
        EntityKind.PROJECTS,
        "delete",
        lambda: store.delete(EntityKind.PROJECTS, project_id),
        logger=logger,
        entity_id=project_id,
    )


def load_projects(store: EntityStore) -> list[Project]:
    """Read every project with its campaigns, weekly entries and infrastructure nested."""
    entries_by_campaign: dict[str, list[WeeklyEntry]] = defaultdict(list)
    for row in store.select(EntityKind.WEEKLY_ENTRIES, order_by="week_number"):
        entries_by_campaign[row["campaign_id"]].append(weekly_entry_from_row(row))

    campaigns_by_project: dict[str, list[Campaign]] = defaultdict(list)
    for row in store.select(EntityKind.CAMPAIGNS, order_by="created_at"):
        campaign = campaign_from_row(row, entries_by_campaign.get(row["id"], []))
        campaigns_by_project[row["project_id"]].append(campaign)

    infra_by_project = {
        row["project_id"]: infrastructure_from_row(row)
        for row in store.select(EntityKind.INFRASTRUCTURE)
    }

    rows = store.select(EntityKind.PROJECTS, order_by="created_at")
    # Newest project first.
    return [
        project_from_row(
            row,
            campaigns_by_project.get(row["id"], []),
            infra_by_project.get(row["id"]),
        )
        for row in reversed(rows)
    ]


def find_project(projects: list[Project], key: str) -> Project | None:
    for project in projects:
        if key in (project.project_id, project.name):
            return project
    return None


def find_campaign(projects: list[Project], key: str) -> Campaign | None:
    for project in projects:
        for campaign in project.campaigns:
            if key in (campaign.campaign_id, campaign.name):
                return campaign
    return None


def project_from_row(
    row: dict[str, Any],
    campaigns: list[Campaign] | None = None,
    infrastructure: Infrastructure | None = None,
) -> Project:
    return Project(
        project_id=row["id"],
        name=row["name"],
        client_name=row.get("client_name") or DEFAULT_CLIENT_NAME,
        brand_color=row.get("brand_color") or DEFAULT_BRAND_COLOR,
        logo_url=row.get("logo_url") or "",
        project_type=row.get("project_type") or ProjectType.OUTBOUND_SALES.value,
        campaigns=tuple(campaigns or []),
        infrastructure=infrastructure,
    )


def campaign_from_row(row: dict[str, Any], entries: list[WeeklyEntry] | None = None) -> Campaign:
    return Campaign(
        campaign_id=row["id"],
        project_id=row["project_id"],
        name=row["name"],
        start_date=date.fromisoformat(str(row["start_date"])[:10]),
        target_leads=int(row["target_leads"]),
        allocated_budget=float(row["allocated_budget"]),
        target_outreach=int(row.get("target_outreach") or 0),
        weekly_entries=tuple(entries or []),
    )


def weekly_entry_from_row(row: dict[str, Any]) -> WeeklyEntry:
    return WeeklyEntry(
        entry_id=row["id"],
        campaign_id=row["campaign_id"],
        week_number=int(row["week_number"]),
        leads_contacted=int(row.get("leads_contacted") or 0),
        target_outreach=int(row.get("target_outreach") or 0),
        replies=int(row.get("replies") or 0),
        appointments=int(row.get("appointments") or 0),
    )


def infrastructure_from_row(row: dict[str, Any]) -> Infrastructure:
    return Infrastructure(
        infra_id=row["id"],
        project_id=row["project_id"],
        mailboxes=int(row.get("mailboxes") or 0),
        linkedin_accounts=int(row.get("linkedin_accounts") or 0),
    )


def _validate_project(
    name: str | None,
    client_name: str | None,
    brand_color: str | None,
    logo_url: str | None,
    project_type: str | None,
) -> None:
    if name is not None:
        rules.require(name, "name", "Project name is required")
        rules.validate_length(name, "Project name", 100)
    rules.validate_length(client_name, "Client name", 100)
    rules.validate_hex_color(brand_color, "brand_color")
    rules.validate_url(logo_url, "logo_url")
    rules.validate_enum(project_type, [t.value for t in ProjectType], "project_type")
