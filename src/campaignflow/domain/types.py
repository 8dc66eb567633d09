from __future__ import annotations

from enum import Enum


class ProjectType(str, Enum):
    OUTBOUND_SALES = "outbound_sales"
    INBOUND_MARKETING = "inbound_marketing"
    EVENTS = "events"
    PAID_ADS = "paid_ads"
    SOCIAL_MEDIA = "social_media"
    CONTENT_MARKETING = "content_marketing"


PROJECT_TYPE_LABELS = {
    ProjectType.OUTBOUND_SALES: "Outbound Sales",
    ProjectType.INBOUND_MARKETING: "Inbound Marketing",
    ProjectType.EVENTS: "Events",
    ProjectType.PAID_ADS: "Paid Ads",
    ProjectType.SOCIAL_MEDIA: "Social Media",
    ProjectType.CONTENT_MARKETING: "Content Marketing",
}


class EntityKind(str, Enum):
    PROJECTS = "projects"
    CAMPAIGNS = "campaigns"
    WEEKLY_ENTRIES = "weekly_entries"
    INFRASTRUCTURE = "infrastructure"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FunnelStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
