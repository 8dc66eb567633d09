from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from campaignflow.domain.types import EntityKind

IDENTIFIER_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


class StoreError(RuntimeError):
    pass


class EntityStore(Protocol):
    def select(
        self,
        kind: EntityKind,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict[str, Any]]: ...

    def insert(self, kind: EntityKind, fields: Mapping[str, Any]) -> dict[str, Any]: ...

    def update(self, kind: EntityKind, entity_id: str, fields: Mapping[str, Any]) -> dict[str, Any]: ...

    def upsert(
        self,
        kind: EntityKind,
        conflict_keys: Sequence[str],
        fields: Mapping[str, Any],
    ) -> dict[str, Any]: ...

    def delete(self, kind: EntityKind, entity_id: str) -> None: ...


def check_identifiers(names: Sequence[str]) -> None:
    for name in names:
        if not IDENTIFIER_RE.match(name):
            raise StoreError(f"Invalid column name: {name!r}")
