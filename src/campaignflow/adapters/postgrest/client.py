from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import requests

from campaignflow.domain.types import EntityKind
from campaignflow.store.base import StoreError, check_identifiers

# Hosted tables generate ids and creation timestamps; an upsert must not
# overwrite them on the existing row.
_SERVER_OWNED = ("id", "created_at")


class PostgrestError(StoreError):
    pass


class PostgrestStore:
    """Entity store backed by a hosted Postgres REST endpoint (``/rest/v1``)."""

    def __init__(self, url: str, api_key: str, session: requests.Session | None = None) -> None:
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def select(
        self,
        kind: EntityKind,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": "*", **_eq_filters(filters)}
        if order_by:
            check_identifiers([order_by])
            params["order"] = f"{order_by}.asc"
        return self._request("GET", _path(kind), params=params)

    def insert(self, kind: EntityKind, fields: Mapping[str, Any]) -> dict[str, Any]:
        check_identifiers(list(fields))
        rows = self._request(
            "POST",
            _path(kind),
            json=[dict(fields)],
            headers={"Prefer": "return=representation"},
        )
        return _single(rows, kind)

    def update(self, kind: EntityKind, entity_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
        check_identifiers(list(fields))
        rows = self._request(
            "PATCH",
            _path(kind),
            params={"id": f"eq.{entity_id}"},
            json=dict(fields),
            headers={"Prefer": "return=representation"},
        )
        return _single(rows, kind)

    def upsert(
        self,
        kind: EntityKind,
        conflict_keys: Sequence[str],
        fields: Mapping[str, Any],
    ) -> dict[str, Any]:
        check_identifiers([*fields, *conflict_keys])
        payload = {name: value for name, value in fields.items() if name not in _SERVER_OWNED}
        rows = self._request(
            "POST",
            _path(kind),
            params={"on_conflict": ",".join(conflict_keys)},
            json=[payload],
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        return _single(rows, kind)

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        self._request("DELETE", _path(kind), params={"id": f"eq.{entity_id}"})

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
    ):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, params=params, json=json, headers=headers, timeout=30
            )
        except requests.RequestException as exc:
            raise PostgrestError(f"Backend request failed: {exc}") from exc
        if response.status_code >= 400:
            raise PostgrestError(_error_message(response))
        if response.status_code == 204 or not response.content:
            return []
        return response.json()


def _path(kind: EntityKind) -> str:
    return f"/{EntityKind(kind).value}"


def _eq_filters(filters: Mapping[str, Any] | None) -> dict[str, str]:
    filters = filters or {}
    check_identifiers(list(filters))
    return {name: f"eq.{value}" for name, value in filters.items()}


def _single(rows: Any, kind: EntityKind) -> dict[str, Any]:
    if not rows:
        raise PostgrestError(f"{EntityKind(kind).value} record not found.")
    return rows[0]


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"Backend error {response.status_code}: {response.text}"
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return f"Backend error {response.status_code}: {response.text}"
