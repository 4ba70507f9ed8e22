"""Price a takeoff into budget / standard / premium quote variants."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence, Tuple

from .coefficients import DEFAULT_COEFFICIENTS, Coefficients
from .errors import InvalidInputError, MissingMaterialError
from .models import (
    VARIANT_ORDER,
    CalculatorSettings,
    FenceType,
    ItemCategory,
    MaterialCategory,
    MaterialRecord,
    QuoteInputs,
    QuoteItem,
    QuoteVariant,
    VariantType,
)
from .money import percent_of
from .takeoff import Takeoff, compute_takeoff

LOGGER = logging.getLogger(__name__)

STANDARD_GATE_KEYWORDS: Tuple[str, ...] = ("walk", "standard", "single", "pedestrian")
LARGE_GATE_KEYWORDS: Tuple[str, ...] = ("double", "driveway", "drive", "large")

LABOR_UNIT = "hours"


def active_materials_for(materials: Iterable[MaterialRecord], fence_type: FenceType) -> List[MaterialRecord]:
    """Active records for ``fence_type`` ordered by ``sort_order`` (stable)."""

    fence_type = FenceType(fence_type)
    selected = [m for m in materials if FenceType(m.fence_type) == fence_type and m.is_active]
    return sorted(selected, key=lambda m: m.sort_order)


def _find(materials: Sequence[MaterialRecord], category: MaterialCategory) -> Optional[MaterialRecord]:
    return next((m for m in materials if MaterialCategory(m.category) == category), None)


def _find_gate(materials: Sequence[MaterialRecord], keywords: Tuple[str, ...]) -> Optional[MaterialRecord]:
    for record in materials:
        if MaterialCategory(record.category) != MaterialCategory.GATE:
            continue
        name = record.name.lower()
        if any(word in name for word in keywords):
            return record
    return None


def _require(found: Optional[MaterialRecord], fence_type: FenceType, category: str) -> MaterialRecord:
    if found is None:
        raise MissingMaterialError(fence_type.value, category)
    return found


def _material_line(record: MaterialRecord, qty: float) -> QuoteItem:
    price = record.unit_price
    if isinstance(price, bool) or not isinstance(price, (int, float)) or not math.isfinite(price) or price < 0:
        raise InvalidInputError("unit_price", f"{record.name!r} has unusable unit price {price!r}")
    return QuoteItem.priced(record.name, qty, record.unit, price, ItemCategory.MATERIAL)


def build_material_items(
    inputs: QuoteInputs,
    takeoff: Takeoff,
    materials: Iterable[MaterialRecord],
    coefficients: Coefficients = DEFAULT_COEFFICIENTS,
) -> List[QuoteItem]:
    """Price each required material category against the active price list."""

    fence_type = FenceType(inputs.fence_type)
    spec = coefficients.spec_for(fence_type)
    catalog = active_materials_for(materials, fence_type)

    items: List[QuoteItem] = []
    post = _require(_find(catalog, MaterialCategory.POST), fence_type, MaterialCategory.POST.value)
    items.append(_material_line(post, takeoff.posts))

    if spec.rails_per_section > 0:
        rail = _require(_find(catalog, MaterialCategory.RAIL), fence_type, MaterialCategory.RAIL.value)
        items.append(_material_line(rail, takeoff.rails))

    panel = _require(_find(catalog, MaterialCategory.PANEL), fence_type, MaterialCategory.PANEL.value)
    items.append(_material_line(panel, takeoff.infill))

    concrete = _require(_find(catalog, MaterialCategory.CONCRETE), fence_type, MaterialCategory.CONCRETE.value)
    items.append(_material_line(concrete, takeoff.concrete_bags))

    hardware = _require(_find(catalog, MaterialCategory.HARDWARE), fence_type, MaterialCategory.HARDWARE.value)
    items.append(_material_line(hardware, takeoff.hardware_sets))

    if takeoff.gates_standard > 0:
        gate = _require(_find_gate(catalog, STANDARD_GATE_KEYWORDS), fence_type, "gate (standard)")
        items.append(_material_line(gate, takeoff.gates_standard))
    if takeoff.gates_large > 0:
        gate = _require(_find_gate(catalog, LARGE_GATE_KEYWORDS), fence_type, "gate (large)")
        items.append(_material_line(gate, takeoff.gates_large))

    for item in items:
        LOGGER.debug("Material %s: %s %s @ %d cents", item.name, item.qty, item.unit, item.unit_price_cents)
    return items


def build_labor_items(takeoff: Takeoff, hourly_rate: float) -> List[QuoteItem]:
    """Labor lines in fixed order: install, gates, then removal."""

    items: List[QuoteItem] = []
    hours = takeoff.labor
    if hours.install > 0:
        items.append(
            QuoteItem.priced("Fence installation labor", hours.install, LABOR_UNIT, hourly_rate, ItemCategory.LABOR)
        )
    if hours.gates > 0:
        items.append(
            QuoteItem.priced("Gate installation labor", hours.gates, LABOR_UNIT, hourly_rate, ItemCategory.LABOR)
        )
    if hours.removal > 0:
        items.append(
            QuoteItem.priced("Old fence removal", hours.removal, LABOR_UNIT, hourly_rate, ItemCategory.REMOVAL)
        )
    return items


def effective_markup(
    variant_type: VariantType,
    default_markup_percent: float,
    coefficients: Coefficients = DEFAULT_COEFFICIENTS,
) -> float:
    """Default markup shifted by the variant modifier, floored at 0%."""

    modifier = coefficients.variant_markup_modifiers[VariantType(variant_type)]
    return max(0.0, float(default_markup_percent) + float(modifier))


def _sum(items: Iterable[QuoteItem], category: ItemCategory) -> int:
    return sum(item.total_cents for item in items if item.category == category)


def assemble_variant(
    variant_type: VariantType,
    items: Sequence[QuoteItem],
    markup_percent: float,
    tax_percent: Optional[float],
) -> QuoteVariant:
    """Roll ``items`` up into a variant using the given markup and tax rates."""

    items = tuple(items)
    materials_total = _sum(items, ItemCategory.MATERIAL)
    labor_total = _sum(items, ItemCategory.LABOR)
    removal_total = _sum(items, ItemCategory.REMOVAL)
    custom_total = _sum(items, ItemCategory.CUSTOM)
    subtotal = materials_total + labor_total + removal_total + custom_total
    markup_amount = percent_of(subtotal, markup_percent)
    tax_amount = percent_of(subtotal + markup_amount, tax_percent or 0.0)
    return QuoteVariant(
        type=VariantType(variant_type),
        markup_percent=float(markup_percent),
        tax_percent=None if tax_percent is None else float(tax_percent),
        items=items,
        materials_total=materials_total,
        labor_total=labor_total,
        removal_total=removal_total,
        subtotal=subtotal,
        markup_amount=markup_amount,
        tax_amount=tax_amount,
        total=subtotal + markup_amount + tax_amount,
    )


def _check_settings(settings: CalculatorSettings) -> None:
    for name in ("hourly_rate", "default_markup_percent", "tax_percent"):
        value = getattr(settings, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidInputError(name, "must be a finite number")
    if settings.hourly_rate <= 0:
        raise InvalidInputError("hourly_rate", "must be greater than 0")
    if settings.tax_percent < 0:
        raise InvalidInputError("tax_percent", "cannot be negative")


def calculate_quote(
    inputs: QuoteInputs,
    materials: Iterable[MaterialRecord],
    settings: CalculatorSettings,
    coefficients: Coefficients = DEFAULT_COEFFICIENTS,
) -> List[QuoteVariant]:
    """Return the budget, standard and premium variants for one job.

    All three variants share the same line items and subtotal; only the markup
    percent, and therefore markup, tax and total, differ between them.
    Raises :class:`MissingMaterialError` when the price list lacks a category
    the job needs, and :class:`InvalidInputError` for malformed inputs.
    """

    _check_settings(settings)
    takeoff = compute_takeoff(inputs, coefficients)
    items = build_material_items(inputs, takeoff, list(materials), coefficients)
    items.extend(build_labor_items(takeoff, settings.hourly_rate))

    variants = [
        assemble_variant(
            variant_type,
            items,
            effective_markup(variant_type, settings.default_markup_percent, coefficients),
            settings.tax_percent,
        )
        for variant_type in VARIANT_ORDER
    ]
    LOGGER.debug(
        "Priced %s: subtotal %d cents, totals %s",
        FenceType(inputs.fence_type).value,
        variants[0].subtotal,
        ", ".join(f"{v.type.value}={v.total}" for v in variants),
    )
    return variants


def recalculate_with_markup(
    variant: QuoteVariant,
    markup_percent: float,
    tax_percent: Optional[float] = None,
) -> QuoteVariant:
    """Re-derive markup, tax and total for a new markup percent.

    ``tax_percent`` defaults to the rate stored on the variant.
    """

    if not math.isfinite(markup_percent) or markup_percent < 0:
        raise InvalidInputError("markup_percent", "must be a finite, non-negative number")
    rate = variant.tax_percent if tax_percent is None else tax_percent
    return assemble_variant(variant.type, variant.items, markup_percent, rate)


__all__ = [
    "STANDARD_GATE_KEYWORDS",
    "LARGE_GATE_KEYWORDS",
    "active_materials_for",
    "build_material_items",
    "build_labor_items",
    "effective_markup",
    "assemble_variant",
    "calculate_quote",
    "recalculate_with_markup",
]
