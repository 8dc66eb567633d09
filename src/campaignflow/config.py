from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from campaignflow.domain.models import Goals

WORKSPACES_DIR = Path("workspaces")
CURRENT_WORKSPACE_FILE = WORKSPACES_DIR / ".current"
WORKSPACE_FILENAME = "workspace.yaml"
DEFAULT_API_KEY_ENV = "CAMPAIGNFLOW_API_KEY"
BACKENDS = ("sqlite", "postgrest")


@dataclass(frozen=True)
class StoreConfig:
    backend: str
    sqlite_path: Path | None


@dataclass(frozen=True)
class RemoteConfig:
    provider: str
    url: str
    api_key_env: str

    def api_key(self) -> str:
        key = os.getenv(self.api_key_env)
        if not key:
            raise WorkspaceError(f"{self.api_key_env} is not set.")
        return key


@dataclass(frozen=True)
class WorkspaceConfig:
    name: str
    store: StoreConfig
    remote: RemoteConfig | None
    goals: Goals
    path: Path


class WorkspaceError(RuntimeError):
    pass


def ensure_workspaces_dir() -> None:
    WORKSPACES_DIR.mkdir(parents=True, exist_ok=True)


def set_current_workspace(name: str) -> None:
    ensure_workspaces_dir()
    CURRENT_WORKSPACE_FILE.write_text(f"{name}\n", encoding="utf-8")


def get_current_workspace_name() -> str:
    if not CURRENT_WORKSPACE_FILE.exists():
        raise WorkspaceError("No active workspace. Run `cflow workspace use <name>`.")
    return CURRENT_WORKSPACE_FILE.read_text(encoding="utf-8").strip()


def workspace_path(name: str) -> Path:
    return WORKSPACES_DIR / name


def workspace_config_path(name: str) -> Path:
    return workspace_path(name) / WORKSPACE_FILENAME


def load_workspace(name: str | None = None) -> WorkspaceConfig:
    if name is None:
        name = get_current_workspace_name()
    config_path = workspace_config_path(name)
    if not config_path.exists():
        raise WorkspaceError(f"Workspace config not found: {config_path}")
    return parse_workspace(name, config_path)


def parse_workspace(name: str, config_path: Path) -> WorkspaceConfig:
    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise WorkspaceError("Workspace config must be a mapping.")
    store = _parse_store(data.get("store"), config_path)
    remote = _parse_remote(data.get("remote"))
    if store.backend == "postgrest" and remote is None:
        raise WorkspaceError("Workspace remote block is required for the postgrest backend.")
    goals = _parse_goals(data.get("goals"))
    return WorkspaceConfig(
        name=name, store=store, remote=remote, goals=goals, path=config_path.parent
    )


def write_workspace_config(name: str, remote_url: str | None = None) -> Path:
    ensure_workspaces_dir()
    ws_dir = workspace_path(name)
    ws_dir.mkdir(parents=True, exist_ok=True)
    config: dict[str, Any] = {
        "workspace": name,
        "store": {
            "backend": "postgrest" if remote_url else "sqlite",
            "sqlite_path": "./local.sqlite",
        },
        "goals": asdict(Goals()),
    }
    if remote_url:
        config["remote"] = {
            "provider": "postgrest",
            "url": remote_url,
            "api_key_env": DEFAULT_API_KEY_ENV,
        }
    config_path = workspace_config_path(name)
    config_path.write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    return config_path


def _parse_store(store_data: Any, config_path: Path) -> StoreConfig:
    if not isinstance(store_data, dict):
        raise WorkspaceError("Invalid workspace store configuration.")
    backend = store_data.get("backend") or "sqlite"
    if backend not in BACKENDS:
        raise WorkspaceError(f"Workspace store.backend must be one of: {', '.join(BACKENDS)}")
    sqlite_path_raw = store_data.get("sqlite_path")
    if backend == "sqlite" and not sqlite_path_raw:
        raise WorkspaceError("Workspace store.sqlite_path is required.")
    sqlite_path = None
    if sqlite_path_raw:
        sqlite_path = _resolve_sqlite_path(sqlite_path_raw, config_path)
        if sqlite_path is None:
            raise WorkspaceError("Workspace store.sqlite_path must be a string.")
    return StoreConfig(backend=backend, sqlite_path=sqlite_path)


def _resolve_sqlite_path(sqlite_path_raw: Any, config_path: Path) -> Path | None:
    if not isinstance(sqlite_path_raw, str):
        return None
    raw_path = Path(sqlite_path_raw)
    if raw_path.is_absolute():
        return raw_path
    # Prefer paths relative to the workspace directory.
    workspace_dir = config_path.parent
    if raw_path.parts and raw_path.parts[0] == WORKSPACES_DIR.name:
        return (workspace_dir.parent.parent / raw_path).resolve()
    return (workspace_dir / raw_path).resolve()


def _parse_remote(remote_data: Any) -> RemoteConfig | None:
    if remote_data is None:
        return None
    if not isinstance(remote_data, dict):
        raise WorkspaceError("Invalid workspace remote configuration.")
    url = remote_data.get("url")
    if not url or not isinstance(url, str):
        raise WorkspaceError("Workspace remote.url is required.")
    return RemoteConfig(
        provider=remote_data.get("provider") or "postgrest",
        url=url,
        api_key_env=remote_data.get("api_key_env") or DEFAULT_API_KEY_ENV,
    )


def _parse_goals(goals_data: Any) -> Goals:
    if goals_data is None:
        return Goals()
    if not isinstance(goals_data, dict):
        raise WorkspaceError("Workspace goals must be a mapping.")
    defaults = Goals()
    try:
        return Goals(
            target_appointments=int(
                goals_data.get("target_appointments", defaults.target_appointments)
            ),
            target_response_rate=float(
                goals_data.get("target_response_rate", defaults.target_response_rate)
            ),
            target_volume=int(goals_data.get("target_volume", defaults.target_volume)),
            allocated_budget=float(goals_data.get("allocated_budget", defaults.allocated_budget)),
        )
    except (TypeError, ValueError) as exc:
        raise WorkspaceError(f"Invalid workspace goals: {exc}") from exc
