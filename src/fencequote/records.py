"""Persisted form of a calculated quote.

A quote record is a flat JSON document: the job inputs, client details, all
three variants with their line items, the custom items, and the selected
variant's totals copied to the top level for listing screens. Amounts are
stored as dollars with two decimals; inside the engine they are cents.
"""

from __future__ import annotations

import json
import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping

from jsonschema import Draft7Validator

from .errors import NonFiniteAmountError, SchemaValidationError
from .models import (
    CustomItem,
    FenceType,
    ItemCategory,
    Quote,
    QuoteInputs,
    QuoteItem,
    QuoteStatus,
    QuoteVariant,
    TerrainType,
    VariantType,
)
from .money import to_cents

LOGGER = logging.getLogger(__name__)

RECORD_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "quote_record.schema.json"
RECORD_SCHEMA_NAME = "quote_record"

_DENORMALIZED_FIELDS = (
    "materials_total",
    "labor_total",
    "removal_total",
    "subtotal",
    "markup_amount",
    "tax_amount",
    "total",
)


@lru_cache(maxsize=None)
def _record_validator() -> Draft7Validator:
    with RECORD_SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    Draft7Validator.check_schema(schema)
    return Draft7Validator(schema)


def ensure_finite(value: Any, path: str = "record") -> None:
    """Raise :class:`NonFiniteAmountError` if any number under ``value`` is NaN or infinite."""

    if isinstance(value, bool):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise NonFiniteAmountError(path, value)
        return
    if isinstance(value, Mapping):
        for key, child in value.items():
            ensure_finite(child, f"{path}.{key}")
    elif isinstance(value, (list, tuple)):
        for index, child in enumerate(value):
            ensure_finite(child, f"{path}[{index}]")


def validate_record(record: Mapping[str, Any]) -> None:
    """Check ``record`` against the persisted-quote schema.

    Non-finite numbers are rejected first; JSON schema treats NaN as a number.
    """

    ensure_finite(record)
    errors: Dict[str, str] = {}
    for error in _record_validator().iter_errors(record):
        path = ".".join(str(part) for part in error.absolute_path) or "record"
        errors.setdefault(path, error.message)
    types = [v.get("type") for v in record.get("variants", []) if isinstance(v, Mapping)]
    if len(types) != len(set(types)):
        errors.setdefault("variants", "Variant types must be unique")
    selected = record.get("selected_variant")
    if types and selected not in types:
        errors.setdefault("selected_variant", f"No '{selected}' variant in record")
    if errors:
        raise SchemaValidationError(RECORD_SCHEMA_NAME, errors)


def item_to_dict(item: QuoteItem) -> Dict[str, Any]:
    return {
        "name": item.name,
        "qty": float(item.qty),
        "unit": item.unit,
        "unit_price": item.unit_price,
        "total": item.total,
        "category": ItemCategory(item.category).value,
    }


def item_from_dict(data: Mapping[str, Any]) -> QuoteItem:
    # total is re-derived from qty x unit price
    return QuoteItem(
        name=str(data["name"]),
        qty=float(data["qty"]),
        unit=str(data.get("unit", "")),
        unit_price_cents=to_cents(float(data["unit_price"])),
        category=ItemCategory(data.get("category", ItemCategory.MATERIAL.value)),
    )


def variant_to_dict(variant: QuoteVariant) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "type": variant.type.value,
        "markup_percent": float(variant.markup_percent),
        "tax_percent": None if variant.tax_percent is None else float(variant.tax_percent),
        "items": [item_to_dict(item) for item in variant.items],
    }
    payload.update(variant.dollars())
    return payload


def variant_from_dict(data: Mapping[str, Any]) -> QuoteVariant:
    """Rebuild a variant from its persisted form.

    Records written before the tax rate and removal total were stored are
    accepted: ``tax_percent`` comes back as ``None`` and the labor and removal
    totals are re-summed from the line items.
    """

    items = tuple(item_from_dict(item) for item in data.get("items", []))
    raw_tax = data.get("tax_percent")
    if "removal_total" in data:
        labor_total = to_cents(float(data["labor_total"]))
        removal_total = to_cents(float(data["removal_total"]))
    else:
        labor_total = sum(i.total_cents for i in items if i.category == ItemCategory.LABOR)
        removal_total = sum(i.total_cents for i in items if i.category == ItemCategory.REMOVAL)
    return QuoteVariant(
        type=VariantType(data["type"]),
        markup_percent=float(data["markup_percent"]),
        tax_percent=None if raw_tax is None else float(raw_tax),
        items=items,
        materials_total=to_cents(float(data["materials_total"])),
        labor_total=labor_total,
        removal_total=removal_total,
        subtotal=to_cents(float(data["subtotal"])),
        markup_amount=to_cents(float(data["markup_amount"])),
        tax_amount=to_cents(float(data["tax_amount"])),
        total=to_cents(float(data["total"])),
    )


def custom_item_to_dict(item: CustomItem) -> Dict[str, Any]:
    return {
        "name": item.name,
        "qty": float(item.qty),
        "unit": item.unit,
        "unit_price": float(item.unit_price),
        "total": item.total,
    }


def custom_item_from_dict(data: Mapping[str, Any]) -> CustomItem:
    return CustomItem(
        name=str(data["name"]),
        qty=float(data["qty"]),
        unit_price=float(data["unit_price"]),
        unit=str(data.get("unit") or "each"),
    )


def quote_record(quote: Quote) -> Dict[str, Any]:
    """Build and validate the persisted dict for ``quote``.

    Raises :class:`NonFiniteAmountError` for NaN/Infinity anywhere in the
    record and :class:`SchemaValidationError` for structural problems such as
    a missing or duplicated variant.
    """

    inputs = quote.inputs
    record: Dict[str, Any] = {
        "fence_type": FenceType(inputs.fence_type).value,
        "length": float(inputs.length),
        "height": float(inputs.height),
        "gates_standard": int(inputs.gates_standard),
        "gates_large": int(inputs.gates_large),
        "remove_old": bool(inputs.remove_old),
        "terrain": TerrainType(inputs.terrain).value,
        "notes": inputs.notes,
        "client_name": quote.client_name,
        "client_email": quote.client_email,
        "client_phone": quote.client_phone,
        "client_address": quote.client_address,
        "status": QuoteStatus(quote.status).value,
        "selected_variant": VariantType(quote.selected_variant).value,
        "variants": [variant_to_dict(v) for v in quote.variants],
        "custom_items": [custom_item_to_dict(c) for c in quote.custom_items],
    }
    ensure_finite(record)
    selected = {v["type"]: v for v in record["variants"]}.get(record["selected_variant"], {})
    for name in _DENORMALIZED_FIELDS:
        if name in selected:
            record[name] = selected[name]
    validate_record(record)
    return record


def quote_from_record(record: Mapping[str, Any]) -> Quote:
    validate_record(record)
    inputs = QuoteInputs(
        fence_type=FenceType(record["fence_type"]),
        length=float(record["length"]),
        height=float(record["height"]),
        gates_standard=int(record["gates_standard"]),
        gates_large=int(record["gates_large"]),
        remove_old=bool(record["remove_old"]),
        terrain=TerrainType(record["terrain"]),
        notes=str(record.get("notes", "")),
    )
    variants: List[QuoteVariant] = [variant_from_dict(v) for v in record["variants"]]
    return Quote(
        inputs=inputs,
        variants=variants,
        selected_variant=VariantType(record["selected_variant"]),
        custom_items=[custom_item_from_dict(c) for c in record.get("custom_items", [])],
        client_name=str(record.get("client_name", "")),
        client_email=str(record.get("client_email", "")),
        client_phone=str(record.get("client_phone", "")),
        client_address=str(record.get("client_address", "")),
        status=QuoteStatus(record["status"]),
    )


def write_quote_record(quote: Quote, path: Path) -> Path:
    record = quote_record(quote)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(record, f, indent=2, allow_nan=False)
    LOGGER.debug("Wrote quote record to %s", path)
    return path


def read_quote_record(path: Path) -> Quote:
    with path.open("r", encoding="utf-8") as f:
        record = json.load(f)
    return quote_from_record(record)


__all__ = [
    "RECORD_SCHEMA_PATH",
    "ensure_finite",
    "validate_record",
    "item_to_dict",
    "item_from_dict",
    "variant_to_dict",
    "variant_from_dict",
    "custom_item_to_dict",
    "custom_item_from_dict",
    "quote_record",
    "quote_from_record",
    "write_quote_record",
    "read_quote_record",
]
