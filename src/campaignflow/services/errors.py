from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from campaignflow.domain.types import EntityKind
from campaignflow.services.events import EventLogger
from campaignflow.store.base import StoreError

T = TypeVar("T")

ENTITY_LABELS = {
    EntityKind.PROJECTS: "project",
    EntityKind.CAMPAIGNS: "campaign",
    EntityKind.WEEKLY_ENTRIES: "weekly data",
    EntityKind.INFRASTRUCTURE: "infrastructure",
}

CONSTRAINT_MESSAGES: dict[EntityKind, list[tuple[str, str]]] = {
    EntityKind.PROJECTS: [
        ("projects_name_not_empty", "Project name cannot be empty"),
        ("projects_name_max_length", "Project name must be less than 100 characters"),
    ],
    EntityKind.CAMPAIGNS: [
        ("campaigns_name_not_empty", "Campaign name cannot be empty"),
        ("campaigns_name_max_length", "Campaign name must be less than 200 characters"),
        ("campaigns_target_leads_positive", "Target leads must be a positive number (1-1,000,000)"),
        ("campaigns_budget_positive", "Budget must be a positive amount (1-100,000,000)"),
        ("campaigns_date_realistic", "Start date must be between 2020 and 2050"),
    ],
    EntityKind.WEEKLY_ENTRIES: [
        ("weekly_week_number_valid", "Week number must be between 1 and 52"),
        ("weekly_leads_nonnegative", "Leads contacted must be a non-negative number (0-100,000)"),
    ],
    EntityKind.INFRASTRUCTURE: [
        ("infra_mailboxes_valid", "Mailboxes must be a non-negative number (0-1,000)"),
        ("infra_linkedin_valid", "LinkedIn accounts must be a non-negative number (0-1,000)"),
    ],
}


class MutationError(RuntimeError):
    pass


def friendly_message(kind: EntityKind, action: str, exc: Exception) -> str:
    raw = str(exc)
    for constraint, message in CONSTRAINT_MESSAGES.get(kind, []):
        if constraint in raw:
            return message
    return raw or f"Failed to {action} {ENTITY_LABELS[kind]}"


def apply_mutation(
    kind: EntityKind,
    action: str,
    operation: Callable[[], T],
    *,
    logger: EventLogger | None = None,
    entity_id: str | None = None,
    changed_fields: Iterable[str] | None = None,
) -> T:
    """Run a store write, translating backend failures into a user-facing MutationError."""
    changed = list(changed_fields or [])
    try:
        result: Any = operation()
    except StoreError as exc:
        message = friendly_message(kind, action, exc)
        if logger is not None:
            logger.record_mutation(
                kind,
                action,
                entity_id=entity_id or "",
                changed_fields=changed,
                error=message,
            )
        raise MutationError(message) from exc
    if logger is not None:
        result_id = result.get("id") if isinstance(result, dict) else None
        logger.record_mutation(
            kind,
            action,
            entity_id=result_id or entity_id or "",
            changed_fields=changed,
        )
    return result
