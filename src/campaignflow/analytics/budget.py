from __future__ import annotations

import math
from dataclasses import dataclass

# 5,000 enriched leads for $100, $3.50 per mailbox.
LEADS_PER_BATCH = 5000
COST_PER_LEAD_BATCH = 100
COST_PER_LEAD = COST_PER_LEAD_BATCH / LEADS_PER_BATCH
COST_PER_MAILBOX = 3.5

LEAD_SHARE = 0.7
MAILBOX_SHARE = 0.3


@dataclass(frozen=True)
class BudgetAllocation:
    allocated_budget: float
    budget_for_leads: float
    budget_for_mailboxes: float
    targeted_leads: int
    mailboxes: int


def allocate_budget(allocated_budget: float) -> BudgetAllocation:
    budget_for_leads = allocated_budget * LEAD_SHARE
    budget_for_mailboxes = allocated_budget * MAILBOX_SHARE
    return BudgetAllocation(
        allocated_budget=allocated_budget,
        budget_for_leads=budget_for_leads,
        budget_for_mailboxes=budget_for_mailboxes,
        targeted_leads=math.floor(budget_for_leads / COST_PER_LEAD_BATCH * LEADS_PER_BATCH),
        mailboxes=math.floor(budget_for_mailboxes / COST_PER_MAILBOX),
    )


def pricing_note() -> str:
    return (
        f"{LEADS_PER_BATCH:,} enriched leads for ${COST_PER_LEAD_BATCH} | "
        f"${COST_PER_MAILBOX:.2f} per mailbox"
    )
