from __future__ import annotations

from uuid import uuid4

from campaignflow.domain import rules
from campaignflow.domain.models import Campaign, WeeklyEntry
from campaignflow.domain.types import EntityKind
from campaignflow.services.errors import apply_mutation
from campaignflow.services.events import EventLogger
from campaignflow.services.projects import weekly_entry_from_row
from campaignflow.services.utils import utc_now_iso
from campaignflow.store.base import EntityStore

MAX_WEEK = 52
MAX_WEEKLY_COUNT = 100_000
WEEK_FIELDS = ("leads_contacted", "target_outreach", "replies", "appointments")
CONFLICT_KEYS = ("campaign_id", "week_number")

_NEGATIVE_MESSAGES = {
    "leads_contacted": "Leads contacted cannot be negative",
    "target_outreach": "Target outreach cannot be negative",
    "replies": "Replies cannot be negative",
    "appointments": "Appointments cannot be negative",
}


def upsert_week(
    store: EntityStore,
    campaign_id: str,
    week_number: int,
    leads_contacted: int,
    target_outreach: int | None = None,
    replies: int | None = None,
    appointments: int | None = None,
    logger: EventLogger | None = None,
) -> WeeklyEntry:
    """Insert or replace the entry for (campaign, week); a repeated write never duplicates it."""
    rules.require(campaign_id, "campaign")
    validate_week_number(week_number)
    counts = {
        "leads_contacted": leads_contacted,
        "target_outreach": target_outreach or 0,
        "replies": replies or 0,
        "appointments": appointments or 0,
    }
    for name, value in counts.items():
        validate_count(name, value)

    now = utc_now_iso()
    fields = {
        "id": str(uuid4()),
        "campaign_id": campaign_id,
        "week_number": week_number,
        **counts,
        "created_at": now,
        "updated_at": now,
    }
    row = apply_mutation(
        EntityKind.WEEKLY_ENTRIES,
        "upsert",
        lambda: store.upsert(EntityKind.WEEKLY_ENTRIES, CONFLICT_KEYS, fields),
        logger=logger,
        changed_fields=list(counts),
    )
    return weekly_entry_from_row(row)


def set_week_field(
    store: EntityStore,
    campaign: Campaign,
    week_number: int,
    field: str,
    value: int,
    logger: EventLogger | None = None,
) -> WeeklyEntry:
    """Edit a single counter, carrying the week's other stored values into the upsert."""
    rules.validate_enum(field, WEEK_FIELDS, "field")
    existing = find_week(campaign, week_number)
    values = {name: getattr(existing, name) if existing else 0 for name in WEEK_FIELDS}
    values[field] = value
    return upsert_week(
        store,
        campaign.campaign_id,
        week_number,
        logger=logger,
        **values,
    )


def find_week(campaign: Campaign, week_number: int) -> WeeklyEntry | None:
    for entry in campaign.weekly_entries:
        if entry.week_number == week_number:
            return entry
    return None


def validate_week_number(week_number: object) -> int:
    if isinstance(week_number, bool) or not isinstance(week_number, int):
        raise rules.ValidationError("Week number must be a whole number.")
    if not 1 <= week_number <= MAX_WEEK:
        raise rules.ValidationError(f"Week number must be between 1 and {MAX_WEEK}")
    return week_number


def validate_count(field: str, value: object) -> int:
    label = field.replace("_", " ").capitalize()
    return rules.validate_int(
        value,
        label,
        minimum=0,
        maximum=MAX_WEEKLY_COUNT,
        message=_NEGATIVE_MESSAGES[field],
    )
