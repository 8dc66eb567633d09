from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from campaignflow.domain.types import EntityKind
from campaignflow.services.utils import utc_now_iso


@dataclass
class EventLogger:
    """Append-only NDJSON journal of store mutations for one workspace."""

    path: Path
    workspace: str
    enabled: bool = True

    def record_mutation(
        self,
        kind: EntityKind,
        action: str,
        *,
        entity_id: str,
        changed_fields: Iterable[str] | None = None,
        error: str | None = None,
    ) -> None:
        if not self.enabled:
            return
        payload = {
            "ts": utc_now_iso(),
            "workspace": self.workspace,
            "kind": EntityKind(kind).value,
            "action": action,
            "entity_id": entity_id,
            "changed_fields": sorted(changed_fields or []),
            "status": "failed" if error is not None else "ok",
        }
        if error is not None:
            payload["error"] = error
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

    def read(self) -> list[dict]:
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
