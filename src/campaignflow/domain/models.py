from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class WeeklyEntry:
    entry_id: str
    campaign_id: str
    week_number: int
    leads_contacted: int
    target_outreach: int = 0
    replies: int = 0
    appointments: int = 0


@dataclass(frozen=True)
class Campaign:
    campaign_id: str
    project_id: str
    name: str
    start_date: date
    target_leads: int
    allocated_budget: float
    target_outreach: int = 0
    weekly_entries: tuple[WeeklyEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Infrastructure:
    infra_id: str
    project_id: str
    mailboxes: int
    linkedin_accounts: int


@dataclass(frozen=True)
class Project:
    project_id: str
    name: str
    client_name: str
    brand_color: str
    logo_url: str
    project_type: str
    campaigns: tuple[Campaign, ...] = field(default_factory=tuple)
    infrastructure: Infrastructure | None = None


@dataclass(frozen=True)
class Goals:
    target_appointments: int = 270
    target_response_rate: float = 5.0
    target_volume: int = 60000
    allocated_budget: float = 5200.0


@dataclass(frozen=True)
class Recommendation:
    id: int
    priority: str
    category: str
    action: str
    expected_impact: str
