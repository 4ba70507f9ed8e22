"""Field validation and numeric parsing for user-entered quote data.

Each form is described by a Draft 7 JSON schema under ``schemas/``. Property
schemas carry a non-standard ``messages`` mapping (keyword -> text) used to
turn schema failures into short, user-facing messages. Validation never
raises for bad user input; it returns a :class:`ValidationResult` whose
``errors`` maps each failing field to a single message.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from jsonschema import Draft7Validator

from .errors import SchemaValidationError
from .models import (
    CalculatorSettings,
    CustomItem,
    FenceType,
    MaterialCategory,
    MaterialRecord,
    QuoteInputs,
    TerrainType,
)

LOGGER = logging.getLogger(__name__)

SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

_FILE_SCHEMAS = {
    "quote_inputs": "quote_inputs.schema.json",
    "client_info": "client_info.schema.json",
    "custom_item": "custom_item.schema.json",
    "material": "material.schema.json",
    "settings": "settings.schema.json",
    "profile": "profile.schema.json",
    "send_email": "send_email.schema.json",
    "send_sms": "send_sms.schema.json",
}

# Onboarding collects the profile (minus optional contact extras) and the
# calculator settings (minus the terms template) in one form.
_COMPOSITE_SCHEMAS = {
    "quote_form": (("client_info", ()), ("quote_inputs", ())),
    "onboarding": (("profile", ("email", "logo_url")), ("settings", ("terms_template",))),
}

FORM_ERROR_KEY = "form"

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9().\-\s]{7,30}$")
E164_PATTERN = re.compile(r"^\+[1-9][0-9]{6,14}$")

_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_CURRENCY_CHARS = re.compile(r"[\s$€£¥ ']")
_UNSAFE_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f<>]")

_BOOLEAN_TRUE = {"1", "true", "yes", "on", "y"}
_BOOLEAN_FALSE = {"0", "false", "no", "off", "n", ""}


@dataclass
class ValidationResult:
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_number(value: object | None) -> Optional[float]:
    """Parse a user-entered number, returning ``None`` when it is unusable.

    Accepts either ``.`` or ``,`` as the decimal separator. When both appear,
    whichever comes last is the decimal separator. A lone comma followed by
    exactly three digits is read as a thousands separator ("12,500").
    Currency symbols and spaces are ignored. NaN and infinities are rejected.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = _CURRENCY_CHARS.sub("", str(value))
    if not text:
        return None
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        head, _, tail = text.rpartition(",")
        if text.count(",") == 1 and len(tail) != 3:
            text = f"{head}.{tail}"
        else:
            text = text.replace(",", "")

    if not _NUMBER_PATTERN.match(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


def parse_int(value: object | None) -> Optional[int]:
    """Parse a whole number; fractional input is rejected rather than truncated."""

    number = parse_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def sanitize(value: object | None) -> str:
    """Trim ``value`` and drop control characters and angle brackets."""

    if value is None:
        return ""
    return _UNSAFE_CHARS.sub("", str(value)).strip()


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(sanitize(value))) and len(value) <= 254


def is_valid_phone(value: str) -> bool:
    """Relaxed check suitable for a phone number shown on a quote."""

    return bool(PHONE_PATTERN.match(sanitize(value)))


def is_e164_phone(value: str) -> bool:
    """Strict E.164 check for numbers handed to the SMS sender."""

    return bool(E164_PATTERN.match(sanitize(value)))


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


def _read_schema(filename: str) -> Dict[str, Any]:
    path = SCHEMA_DIR / filename
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=None)
def get_schema(name: str) -> Dict[str, Any]:
    """Return the JSON schema registered as ``name`` (``KeyError`` if unknown)."""

    if name in _FILE_SCHEMAS:
        schema = _read_schema(_FILE_SCHEMAS[name])
        Draft7Validator.check_schema(schema)
        return schema
    if name in _COMPOSITE_SCHEMAS:
        properties: Dict[str, Any] = {}
        required: list[str] = []
        for part, excluded in _COMPOSITE_SCHEMAS[name]:
            source = get_schema(part)
            for prop, prop_schema in source["properties"].items():
                if prop not in excluded:
                    properties[prop] = prop_schema
            required.extend(r for r in source.get("required", []) if r not in excluded)
        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": name,
            "type": "object",
            "required": required,
            "properties": properties,
        }
    raise KeyError(f"Unknown validation schema '{name}'")


@lru_cache(maxsize=None)
def _validator(name: str) -> Draft7Validator:
    return Draft7Validator(get_schema(name))


def schema_names() -> list[str]:
    return sorted([*_FILE_SCHEMAS, *_COMPOSITE_SCHEMAS])


def _prepare(data: Mapping[str, Any], schema: Mapping[str, Any]) -> Dict[str, Any]:
    """Sanitize strings and coerce form text into the types the schema wants."""

    payload = dict(data)
    for name, prop in schema.get("properties", {}).items():
        if name not in payload:
            continue
        value = payload[name]
        kind = prop.get("type")
        if isinstance(value, str):
            value = sanitize(value)
            if kind in ("number", "integer"):
                if value == "":
                    del payload[name]
                    continue
                number = parse_number(value)
                if number is not None:
                    value = int(number) if kind == "integer" and number.is_integer() else number
            elif kind == "boolean":
                lowered = value.lower()
                if lowered in _BOOLEAN_TRUE:
                    value = True
                elif lowered in _BOOLEAN_FALSE:
                    value = False
        payload[name] = value
    return payload


def _message_for(error, default_field: str) -> tuple[str, str]:
    path = ".".join(str(part) for part in error.absolute_path) or default_field
    messages = error.schema.get("messages", {}) if isinstance(error.schema, dict) else {}
    return path, messages.get(error.validator) or error.message


def coerce_numeric_fields(schema_name: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Apply the same sanitizing and numeric coercion ``validate`` uses."""

    return _prepare(data, get_schema(schema_name))


def validate(schema_name: str, data: object) -> ValidationResult:
    """Validate ``data`` against ``schema_name``.

    Returns a result whose ``data`` holds the sanitized, type-coerced payload.
    Unknown schema names raise ``KeyError``.
    """

    schema = get_schema(schema_name)
    if not isinstance(data, Mapping):
        return ValidationResult(False, {}, {FORM_ERROR_KEY: "Expected a set of named fields"})

    payload = _prepare(data, schema)
    errors: Dict[str, str] = {}
    properties = schema.get("properties", {})

    for name in schema.get("required", []):
        if name not in payload or payload[name] is None:
            messages = properties.get(name, {}).get("messages", {})
            errors[name] = messages.get("required", f"{name} is required")

    for error in _validator(schema_name).iter_errors(payload):
        if error.validator == "required":
            continue
        path, message = _message_for(error, FORM_ERROR_KEY)
        errors.setdefault(path, message)

    for name, prop in properties.items():
        value = payload.get(name)
        if prop.get("type") in ("number", "integer") and isinstance(value, float) and not math.isfinite(value):
            errors.setdefault(name, "Must be a finite number")

    if errors:
        LOGGER.debug("%s validation failed: %s", schema_name, errors)
        return ValidationResult(False, payload, errors)
    return ValidationResult(True, payload, {})


def validate_or_raise(schema_name: str, data: object) -> Dict[str, Any]:
    """Validate and return the cleaned payload, raising on any failure.

    Intended for call sites where invalid data indicates a programming error
    rather than something to show a user.
    """

    result = validate(schema_name, data)
    if not result.success:
        raise SchemaValidationError(schema_name, result.errors)
    return result.data


# ---------------------------------------------------------------------------
# Builders for validated payloads
# ---------------------------------------------------------------------------


def quote_inputs_from(data: Mapping[str, Any]) -> QuoteInputs:
    return QuoteInputs(
        fence_type=FenceType(data["fence_type"]),
        length=float(data["length"]),
        height=float(data["height"]),
        gates_standard=int(data.get("gates_standard", 0)),
        gates_large=int(data.get("gates_large", 0)),
        remove_old=bool(data.get("remove_old", False)),
        terrain=TerrainType(data.get("terrain", TerrainType.FLAT.value)),
        notes=str(data.get("notes", "") or ""),
    )


def settings_from(data: Mapping[str, Any]) -> CalculatorSettings:
    return CalculatorSettings(
        hourly_rate=float(data["hourly_rate"]),
        default_markup_percent=float(data["default_markup_percent"]),
        tax_percent=float(data["tax_percent"]),
    )


def custom_item_from(data: Mapping[str, Any]) -> CustomItem:
    return CustomItem(
        name=str(data["name"]),
        qty=float(data["qty"]),
        unit_price=float(data["unit_price"]),
        unit=str(data.get("unit") or "each"),
    )


def material_from(data: Mapping[str, Any]) -> MaterialRecord:
    return MaterialRecord(
        fence_type=FenceType(data["fence_type"]),
        name=str(data["name"]),
        unit=str(data["unit"]),
        unit_price=float(data["unit_price"]),
        category=MaterialCategory(data["category"]),
        sort_order=int(data.get("sort_order", 0)),
        is_active=bool(data.get("is_active", True)),
        id=None if data.get("id") is None else str(data["id"]),
        user_id=None if data.get("user_id") is None else str(data["user_id"]),
    )


__all__ = [
    "ValidationResult",
    "FORM_ERROR_KEY",
    "parse_number",
    "parse_int",
    "sanitize",
    "is_valid_email",
    "is_valid_phone",
    "is_e164_phone",
    "get_schema",
    "schema_names",
    "coerce_numeric_fields",
    "validate",
    "validate_or_raise",
    "quote_inputs_from",
    "settings_from",
    "custom_item_from",
    "material_from",
]
