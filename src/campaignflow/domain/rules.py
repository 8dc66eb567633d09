from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import date
from urllib.parse import urlparse

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationError(ValueError):
    pass


def require(value: str | None, field: str, message: str | None = None) -> None:
    if value is None or str(value).strip() == "":
        raise ValidationError(message or f"{field} is required.")


def validate_length(value: str | None, field: str, max_length: int) -> None:
    if value is None:
        return
    if len(value.strip()) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters.")


def validate_enum(value: str | None, allowed: Iterable[str], field: str) -> None:
    if value is None:
        return
    allowed = list(allowed)
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")


def validate_int(
    value: object,
    field: str,
    *,
    minimum: int,
    maximum: int,
    message: str | None = None,
) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be a whole number.")
    if value < minimum:
        raise ValidationError(message or f"{field} must be at least {minimum}.")
    if value > maximum:
        raise ValidationError(f"{field} must be at most {maximum:,}.")
    return value


def validate_amount(value: object, field: str, *, maximum: float, message: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number.")
    if not math.isfinite(value):
        raise ValidationError(f"{field} must be a number.")
    if value <= 0:
        raise ValidationError(message)
    if value > maximum:
        raise ValidationError(f"{field} must be at most {maximum:,.0f}.")
    return float(value)


def validate_hex_color(value: str | None, field: str) -> None:
    if value is None:
        return
    if not HEX_COLOR_RE.match(value):
        raise ValidationError("Invalid hex color format")


def validate_url(value: str | None, field: str) -> None:
    if not value:
        return
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        raise ValidationError("Invalid URL format")


def parse_date(value: str | None, field: str) -> date | None:
    if value is None:
        return None
    if not ISO_DATE_RE.match(value):
        raise ValidationError("Invalid date format (YYYY-MM-DD)")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be YYYY-MM-DD.") from exc


def validate_year(value: date, field: str, *, earliest: int, latest: int) -> None:
    if not earliest <= value.year <= latest:
        raise ValidationError(f"{field} must be between {earliest} and {latest}.")
