from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from openpyxl import Workbook

from campaignflow.analytics.pipeline import CampaignReport
from campaignflow.analytics.rates import display_rate
from campaignflow.domain.types import EntityKind
from campaignflow.store.base import EntityStore

TABLES = [kind for kind in EntityKind]

REPORT_HEADERS = [
    "campaign_id",
    "campaign",
    "weeks_completed",
    "total_leads",
    "total_replies",
    "total_appointments",
    "response_rate",
    "conversion_rate",
    "targeted_leads",
    "mailboxes",
    "appointment_deficit",
    "adjusted_weekly_appointments",
    "projected_monthly_appointments",
    "recommendations",
]


def export_excel(store: EntityStore, out_path: Path, reports: Iterable[CampaignReport] = ()) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    wb.remove(wb.active)

    for kind in TABLES:
        rows = store.select(kind)
        ws = wb.create_sheet(title=kind.value)
        _write_sheet(ws, rows)

    ws = wb.create_sheet(title="report")
    ws.append(REPORT_HEADERS)
    for report in reports:
        ws.append(report_row(report))

    wb.save(out_path)


def export_csv_tables(store: EntityStore, out_dir: Path) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    for kind in TABLES:
        rows = store.select(kind)
        headers: list[str] = list(rows[0].keys()) if rows else []
        csv_path = out_dir / f"{kind.value}.csv"
        with csv_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(headers)
            for row in rows:
                writer.writerow([row[h] for h in headers])


def report_row(report: CampaignReport) -> list[Any]:
    return [
        report.campaign_id,
        report.campaign_name,
        report.totals.weeks_completed,
        report.totals.total_leads,
        report.totals.total_replies,
        report.totals.total_appointments,
        display_rate(report.response_rate),
        display_rate(report.conversion_rate),
        report.budget.targeted_leads,
        report.budget.mailboxes,
        round(report.appointments.deficit, 1),
        round(report.appointments.adjusted_weekly_target, 1),
        report.outcome.projected_monthly_appointments,
        "; ".join(f"[{rec.priority}] {rec.category}" for rec in report.recommendations),
    ]


def _write_sheet(ws, rows: Iterable[dict[str, Any]]) -> None:
    rows = list(rows)
    if not rows:
        return
    headers = list(rows[0].keys())
    ws.append(headers)
    for row in rows:
        ws.append([row[h] for h in headers])
