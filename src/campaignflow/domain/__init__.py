from campaignflow.domain.models import (
    Campaign,
    Goals,
    Infrastructure,
    Project,
    Recommendation,
    WeeklyEntry,
)
from campaignflow.domain.rules import ValidationError

__all__ = [
    "Campaign",
    "Goals",
    "Infrastructure",
    "Project",
    "Recommendation",
    "ValidationError",
    "WeeklyEntry",
]
