from __future__ import annotations

import json
import shutil
from dataclasses import asdict, replace
from pathlib import Path

import typer

from campaignflow import __version__
from campaignflow.adapters.postgrest.client import PostgrestStore
from campaignflow.analytics.budget import pricing_note
from campaignflow.analytics.pipeline import (
    CampaignReport,
    build_campaign_report,
    goals_for_campaign,
    summarize_portfolio,
    summarize_project,
)
from campaignflow.analytics.rates import display_rate
from campaignflow.config import (
    WorkspaceConfig,
    WorkspaceError,
    ensure_workspaces_dir,
    load_workspace,
    set_current_workspace,
    workspace_config_path,
    write_workspace_config,
)
from campaignflow.domain.models import Project
from campaignflow.domain.rules import ValidationError
from campaignflow.domain.types import PROJECT_TYPE_LABELS, ProjectType
from campaignflow.services import campaigns, exports, infrastructure, projects, weekly
from campaignflow.services.errors import MutationError
from campaignflow.services.events import EventLogger
from campaignflow.services.utils import today_iso
from campaignflow.store.base import EntityStore, StoreError
from campaignflow.store.sqlite import SqliteStore

app = typer.Typer(help="CampaignFlow CLI")
workspace_app = typer.Typer(help="Workspace management")
schema_app = typer.Typer(help="Schema operations")
project_app = typer.Typer(help="Projects")
campaign_app = typer.Typer(help="Campaigns")
week_app = typer.Typer(help="Weekly performance entries")
infra_app = typer.Typer(help="Sending infrastructure")
export_app = typer.Typer(help="Exports")

app.add_typer(workspace_app, name="workspace")
app.add_typer(schema_app, name="schema")
app.add_typer(project_app, name="project")
app.add_typer(campaign_app, name="campaign")
app.add_typer(week_app, name="week")
app.add_typer(infra_app, name="infra")
app.add_typer(export_app, name="export")

SCHEMA_PATH = Path("resources/schema/canonical.yaml")


@app.callback()
def version_callback(version: bool = typer.Option(False, "--version", help="Show version and exit.")):
    if version:
        typer.echo(__version__)
        raise typer.Exit()


@app.command("init")
def init() -> None:
    """Initialize directories for workspaces and outputs."""
    ensure_workspaces_dir()
    Path("data").mkdir(exist_ok=True)
    Path("exports").mkdir(exist_ok=True)
    typer.echo("Initialized campaignflow directories.")


@workspace_app.command("add")
def workspace_add(
    name: str = typer.Argument(...),
    remote: str | None = typer.Option(
        None, "--remote", help="Hosted backend URL; omit to use a local SQLite store."
    ),
    use: bool = typer.Option(True, "--use/--no-use", help="Set as current workspace."),
    force: bool = typer.Option(
        False, "--force", help="Overwrite existing workspace config if it exists."
    ),
) -> None:
    config_path = workspace_config_path(name)
    if config_path.exists() and not force:
        raise typer.BadParameter(
            f"Workspace already exists: {config_path}. Use --force to overwrite."
        )
    config_path = write_workspace_config(name, remote)
    if use:
        set_current_workspace(name)
    typer.echo(f"Workspace created: {config_path}")


@workspace_app.command("use")
def workspace_use(name: str = typer.Argument(...)) -> None:
    if not workspace_config_path(name).exists():
        raise typer.BadParameter(f"Workspace config not found: {workspace_config_path(name)}")
    set_current_workspace(name)
    typer.echo(f"Active workspace: {name}")


@schema_app.command("apply")
def schema_apply() -> None:
    ws = _load_workspace()
    if ws.store.backend != "sqlite":
        _exit_with_error("Schema is managed by the hosted backend for this workspace.")
    store = SqliteStore(ws.store.sqlite_path)
    store.apply_schema(SCHEMA_PATH)
    typer.echo("Applied schema to local SQLite.")


@project_app.command("add")
def project_add(
    name: str = typer.Argument(...),
    client: str | None = typer.Option(None, "--client"),
    color: str | None = typer.Option(None, "--color", help="Brand color as #RRGGBB."),
    logo: str | None = typer.Option(None, "--logo", help="Logo URL."),
    project_type: str | None = typer.Option(
        None, "--type", help=", ".join(t.value for t in ProjectType)
    ),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    try:
        project = projects.create_project(
            store,
            name=name,
            client_name=client,
            brand_color=color,
            logo_url=logo,
            project_type=project_type,
            logger=_event_logger(ws, enabled=events),
        )
    except (ValidationError, MutationError) as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Created project: {project.project_id}")


@project_app.command("list")
def project_list() -> None:
    ws = _load_workspace()
    items = _load_projects(_open_store(ws))
    if not items:
        typer.echo("No projects yet. Run `cflow project add <name>`.")
        return
    for project in items:
        typer.echo(
            f"{project.project_id} | {project.name} | {project.client_name} | "
            f"{_type_label(project.project_type)} | {len(project.campaigns)} campaigns"
        )


@project_app.command("update")
def project_update(
    project: str = typer.Argument(..., help="Project id or name"),
    name: str | None = typer.Option(None, "--name"),
    client: str | None = typer.Option(None, "--client"),
    color: str | None = typer.Option(None, "--color"),
    logo: str | None = typer.Option(None, "--logo"),
    project_type: str | None = typer.Option(None, "--type"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    target = _require_project(_load_projects(store), project)
    updates = {
        key: value
        for key, value in {
            "name": name,
            "client_name": client,
            "brand_color": color,
            "logo_url": logo,
            "project_type": project_type,
        }.items()
        if value is not None
    }
    try:
        projects.update_project(
            store, target.project_id, updates, logger=_event_logger(ws, enabled=events)
        )
    except (ValidationError, MutationError) as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Updated project: {target.project_id}")


@project_app.command("delete")
def project_delete(
    project: str = typer.Argument(..., help="Project id or name"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    target = _require_project(_load_projects(store), project)
    try:
        projects.delete_project(store, target.project_id, logger=_event_logger(ws, enabled=events))
    except MutationError as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Deleted project: {target.project_id}")


@campaign_app.command("add")
def campaign_add(
    name: str = typer.Argument(...),
    project: str = typer.Option(..., "--project", help="Project id or name"),
    start: str = typer.Option(..., "--start", help="Start date (YYYY-MM-DD)."),
    target_leads: int = typer.Option(..., "--target-leads"),
    budget: float = typer.Option(..., "--budget"),
    outreach: int = typer.Option(0, "--outreach"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    target = _require_project(_load_projects(store), project)
    try:
        campaign = campaigns.create_campaign(
            store,
            project_id=target.project_id,
            name=name,
            start_date=start,
            target_leads=target_leads,
            allocated_budget=budget,
            target_outreach=outreach,
            logger=_event_logger(ws, enabled=events),
        )
    except (ValidationError, MutationError) as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Created campaign: {campaign.campaign_id}")


@campaign_app.command("update")
def campaign_update(
    campaign: str = typer.Argument(..., help="Campaign id or name"),
    name: str | None = typer.Option(None, "--name"),
    start: str | None = typer.Option(None, "--start"),
    target_leads: int | None = typer.Option(None, "--target-leads"),
    budget: float | None = typer.Option(None, "--budget"),
    outreach: int | None = typer.Option(None, "--outreach"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    target = _require_campaign(_load_projects(store), campaign)
    updates = {
        key: value
        for key, value in {
            "name": name,
            "start_date": start,
            "target_leads": target_leads,
            "allocated_budget": budget,
            "target_outreach": outreach,
        }.items()
        if value is not None
    }
    try:
        campaigns.update_campaign(
            store, target.campaign_id, updates, logger=_event_logger(ws, enabled=events)
        )
    except (ValidationError, MutationError) as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Updated campaign: {target.campaign_id}")


@campaign_app.command("delete")
def campaign_delete(
    campaign: str = typer.Argument(..., help="Campaign id or name"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    target = _require_campaign(_load_projects(store), campaign)
    try:
        campaigns.delete_campaign(
            store, target.campaign_id, logger=_event_logger(ws, enabled=events)
        )
    except MutationError as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Deleted campaign: {target.campaign_id}")


@week_app.command("set")
def week_set(
    campaign: str = typer.Argument(..., help="Campaign id or name"),
    week_number: int = typer.Argument(...),
    leads: int | None = typer.Option(None, "--leads"),
    outreach: int | None = typer.Option(None, "--outreach"),
    replies: int | None = typer.Option(None, "--replies"),
    appointments: int | None = typer.Option(None, "--appointments"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    """Record a week's counters; counters not given keep their stored value."""
    ws = _load_workspace()
    store = _open_store(ws)
    target = _require_campaign(_load_projects(store), campaign)
    given = {
        "leads_contacted": leads,
        "target_outreach": outreach,
        "replies": replies,
        "appointments": appointments,
    }
    existing = weekly.find_week(target, week_number)
    values = {
        name: value if value is not None else (getattr(existing, name) if existing else 0)
        for name, value in given.items()
    }
    try:
        entry = weekly.upsert_week(
            store,
            target.campaign_id,
            week_number,
            logger=_event_logger(ws, enabled=events),
            **values,
        )
    except (ValidationError, MutationError) as exc:
        _exit_with_error(str(exc))
    typer.echo(
        f"Week {entry.week_number} saved: {entry.leads_contacted} leads, "
        f"{entry.replies} replies, {entry.appointments} appointments"
    )


@week_app.command("show")
def week_show(campaign: str = typer.Argument(..., help="Campaign id or name")) -> None:
    ws = _load_workspace()
    target = _require_campaign(_load_projects(_open_store(ws)), campaign)
    report = build_campaign_report(target, goals_for_campaign(target, ws.goals))
    typer.echo("Week | Leads | Target outreach | Daily avg")
    for row in report.weeks:
        typer.echo(
            f"{row.week_number} | {row.leads_contacted} | {row.target_outreach} | "
            f"{row.daily_average:.1f}"
        )


@infra_app.command("set")
def infra_set(
    project: str = typer.Argument(..., help="Project id or name"),
    mailboxes: int = typer.Option(..., "--mailboxes"),
    linkedin: int = typer.Option(..., "--linkedin"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    target = _require_project(_load_projects(store), project)
    try:
        infrastructure.upsert_infrastructure(
            store,
            target.project_id,
            mailboxes=mailboxes,
            linkedin_accounts=linkedin,
            logger=_event_logger(ws, enabled=events),
        )
    except (ValidationError, MutationError) as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Infrastructure saved: {mailboxes} mailboxes, {linkedin} LinkedIn accounts")


@app.command("report")
def report(
    campaign: str = typer.Argument(..., help="Campaign id or name"),
    appointments: int | None = typer.Option(
        None, "--appointments", help="Override the yearly appointment goal."
    ),
    response_rate: float | None = typer.Option(
        None, "--response-rate", help="Override the target response rate (%)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON output."),
) -> None:
    """Derived metrics, projections and recommendations for one campaign."""
    ws = _load_workspace()
    target = _require_campaign(_load_projects(_open_store(ws)), campaign)
    goals = goals_for_campaign(target, ws.goals)
    if appointments is not None:
        goals = replace(goals, target_appointments=appointments)
    if response_rate is not None:
        goals = replace(goals, target_response_rate=response_rate)
    result = build_campaign_report(target, goals)
    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return
    for line in format_report(result):
        typer.echo(line)


@app.command("summary")
def summary(json_output: bool = typer.Option(False, "--json", help="Emit JSON output.")) -> None:
    """Totals per project and across the workspace."""
    ws = _load_workspace()
    items = _load_projects(_open_store(ws))
    portfolio = summarize_portfolio(items)
    per_project = [summarize_project(project) for project in items]
    if json_output:
        payload = {
            "portfolio": asdict(portfolio),
            "projects": [asdict(item) for item in per_project],
        }
        typer.echo(json.dumps(payload, indent=2))
        return
    typer.echo(
        f"projects={portfolio.total_projects} campaigns={portfolio.total_campaigns} "
        f"leads={portfolio.total_leads:,} budget=${portfolio.total_budget:,.0f}"
    )
    for project_type, leads in sorted(portfolio.leads_by_type.items()):
        typer.echo(
            f"  {_type_label(project_type)}: {leads:,} leads "
            f"({portfolio.projects_by_type.get(project_type, 0)} projects)"
        )
    for item in per_project:
        typer.echo(
            f"{item.name} | {item.total_campaigns} campaigns | "
            f"{item.total_leads:,}/{item.target_leads:,} leads | "
            f"${item.allocated_budget:,.0f} | {item.mailboxes} mailboxes, "
            f"{item.linkedin_accounts} LinkedIn"
        )


@export_app.command("excel")
def export_excel(out: str = typer.Option(..., "--out")) -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    reports = [
        build_campaign_report(campaign, goals_for_campaign(campaign, ws.goals))
        for project in _load_projects(store)
        for campaign in project.campaigns
    ]
    try:
        exports.export_excel(store, Path(out), reports)
    except StoreError as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Exported Excel to {out}")


@app.command("snapshot")
def snapshot() -> None:
    ws = _load_workspace()
    store = _open_store(ws)
    snapshot_dir = Path("data") / "snapshots" / today_iso()
    snapshot_dir.mkdir(parents=True, exist_ok=True)
    if ws.store.sqlite_path and ws.store.sqlite_path.exists():
        shutil.copy2(ws.store.sqlite_path, snapshot_dir / "local.sqlite")
    try:
        exports.export_csv_tables(store, snapshot_dir)
    except StoreError as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Snapshot created at {snapshot_dir}")


def format_report(result: CampaignReport) -> list[str]:
    totals = result.totals
    goals = result.goals
    lines = [
        f"{result.campaign_name}",
        f"  weeks={totals.weeks_completed} leads={totals.total_leads:,} "
        f"replies={totals.total_replies:,} appointments={totals.total_appointments:,}",
        f"  response_rate={display_rate(result.response_rate)}% "
        f"(target {goals.target_response_rate}%) "
        f"conversion_rate={display_rate(result.conversion_rate)}%",
        f"  budget ${result.budget.allocated_budget:,.0f}: "
        f"${result.budget.budget_for_leads:,.0f} leads -> {result.budget.targeted_leads:,} leads, "
        f"${result.budget.budget_for_mailboxes:,.0f} mailboxes -> {result.budget.mailboxes:,} mailboxes",
        f"  pricing: {pricing_note()}",
    ]
    for label, projection in (("appointments", result.appointments), ("leads", result.leads)):
        lines.append(
            f"  {label}: {projection.current_total:,.0f}/{projection.target:,.0f} "
            f"({projection.progress_pct:.1f}%) expected={projection.expected_by_now:,.1f} "
            f"deficit={projection.deficit:,.1f} "
            f"needed_per_week={projection.adjusted_weekly_target:,.1f}"
        )
    lines.append(
        f"  30-day outlook: {result.outcome.projected_monthly_appointments} appointments "
        f"from {result.outcome.projected_weekly_leads:,.0f} leads/week"
    )
    for stage in result.funnel.stages():
        issue = f" - {stage.issue}" if stage.issue else ""
        lines.append(
            f"  {stage.stage}: {stage.prospects:,} {stage.status.upper()}{issue}"
        )
    for rec in result.recommendations:
        lines.append(
            f"  [{rec.priority.upper()}] {rec.category}: {rec.action} "
            f"(expected: {rec.expected_impact})"
        )
    return lines


def _load_workspace() -> WorkspaceConfig:
    try:
        return load_workspace()
    except WorkspaceError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc


def _open_store(ws: WorkspaceConfig) -> EntityStore:
    if ws.store.backend == "postgrest":
        try:
            return PostgrestStore(ws.remote.url, ws.remote.api_key())
        except WorkspaceError as exc:
            _exit_with_error(str(exc))
    return SqliteStore(ws.store.sqlite_path)


def _load_projects(store: EntityStore) -> list[Project]:
    try:
        return projects.load_projects(store)
    except StoreError as exc:
        _exit_with_error(f"Failed to load your data: {exc}")


def _require_project(items: list[Project], key: str) -> Project:
    project = projects.find_project(items, key)
    if project is None:
        _exit_with_error(f"Project not found: {key}")
    return project


def _require_campaign(items: list[Project], key: str):
    campaign = projects.find_campaign(items, key)
    if campaign is None:
        _exit_with_error(f"Campaign not found: {key}")
    return campaign


def _type_label(project_type: str) -> str:
    try:
        return PROJECT_TYPE_LABELS[ProjectType(project_type)]
    except ValueError:
        return project_type


def _exit_with_error(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _event_logger(ws: WorkspaceConfig, enabled: bool) -> EventLogger:
    return EventLogger(path=ws.path / "events.ndjson", workspace=ws.name, enabled=enabled)


if __name__ == "__main__":
    app()
