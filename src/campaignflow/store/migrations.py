from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

TYPE_MAP = {
    "uuid": "TEXT",
    "text": "TEXT",
    "integer": "INTEGER",
    "number": "REAL",
    "datetime": "TEXT",
    "date": "TEXT",
    "enum": "TEXT",
}

ON_DELETE = {"cascade": "CASCADE", "restrict": "RESTRICT", "set_null": "SET NULL"}


@dataclass(frozen=True)
class Schema:
    version: int
    enums: dict[str, list[str]]
    tables: dict[str, Any]


class SchemaError(RuntimeError):
    pass


def load_schema(schema_path: Path) -> Schema:
    data = yaml.safe_load(schema_path.read_text(encoding="utf-8")) or {}
    version = data.get("version", 1)
    enums = data.get("enums", {})
    tables = data.get("tables", {})
    if not isinstance(tables, dict):
        raise SchemaError("Schema tables must be a mapping.")
    return Schema(version=version, enums=enums, tables=tables)


def apply_schema(conn, schema_path: Path) -> None:
    schema = load_schema(schema_path)
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute(
        "CREATE TABLE IF NOT EXISTS __schema_meta (version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)"
    )

    for table_name, table_def in schema.tables.items():
        _create_table(conn, table_name, table_def, schema.enums)
        _create_indexes(conn, table_name, table_def)

    conn.execute(
        "INSERT OR REPLACE INTO __schema_meta (version, applied_at) VALUES (?, datetime('now'))",
        (schema.version,),
    )
    conn.commit()


def _create_table(
    conn, table_name: str, table_def: dict[str, Any], enums: dict[str, list[str]]
) -> None:
    fields = table_def.get("fields")
    if not isinstance(fields, dict):
        raise SchemaError(f"Table {table_name} fields must be a mapping.")

    primary_key = table_def.get("primary_key")
    columns: list[str] = []
    constraints: list[str] = []

    for field_name, spec in fields.items():
        columns.append(_column_sql(field_name, spec, primary_key))
        ref = spec.get("ref") if isinstance(spec, dict) else None
        if ref:
            ref_table, ref_field = ref.split(".")
            clause = f"FOREIGN KEY ({field_name}) REFERENCES {ref_table}({ref_field})"
            on_delete = spec.get("on_delete")
            if on_delete:
                if on_delete not in ON_DELETE:
                    raise SchemaError(f"Unknown on_delete {on_delete} for {field_name}.")
                clause += f" ON DELETE {ON_DELETE[on_delete]}"
            constraints.append(clause)
        enum_name = spec.get("enum") if isinstance(spec, dict) else None
        if enum_name:
            values = enums.get(enum_name)
            if not values:
                raise SchemaError(f"Unknown enum {enum_name} for {field_name}.")
            quoted = ", ".join(f"'{value}'" for value in values)
            constraints.append(
                f"CONSTRAINT {table_name}_{field_name}_valid CHECK ({field_name} IN ({quoted}))"
            )

    if isinstance(primary_key, list):
        columns.append(f"PRIMARY KEY ({', '.join(primary_key)})")

    for unique_fields in table_def.get("unique") or []:
        constraints.append(f"UNIQUE ({', '.join(unique_fields)})")

    # Named checks surface as "CHECK constraint failed: <name>" in error messages.
    for check_name, expression in (table_def.get("checks") or {}).items():
        constraints.append(f"CONSTRAINT {check_name} CHECK ({expression})")

    columns.extend(constraints)
    ddl = f"CREATE TABLE IF NOT EXISTS {table_name} ({', '.join(columns)});"
    conn.execute(ddl)


def _column_sql(field_name: str, spec: dict[str, Any], primary_key: str | list[str]) -> str:
    field_type = spec.get("type")
    if field_type not in TYPE_MAP:
        raise SchemaError(f"Unknown field type {field_type} for {field_name}.")
    sql_type = TYPE_MAP[field_type]
    required = spec.get("required", False)
    parts = [field_name, sql_type]
    if required:
        parts.append("NOT NULL")
    if "default" in spec:
        parts.append(f"DEFAULT {_default_sql(spec['default'])}")
    if isinstance(primary_key, str) and field_name == primary_key:
        parts.append("PRIMARY KEY")
    return " ".join(parts)


def _default_sql(value: Any) -> str:
    if isinstance(value, bool) or value is None:
        raise SchemaError("Defaults must be numbers or strings.")
    if isinstance(value, (int, float)):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


def _create_indexes(conn, table_name: str, table_def: dict[str, Any]) -> None:
    indexes = table_def.get("indexes") or []
    for index_fields in indexes:
        if not isinstance(index_fields, list) or not index_fields:
            continue
        idx_name = f"idx_{table_name}_{'_'.join(index_fields)}"
        cols = ", ".join(index_fields)
        conn.execute(f"CREATE INDEX IF NOT EXISTS {idx_name} ON {table_name} ({cols});")
