from __future__ import annotations

from typing import Dict, Iterable, List

import pandas as pd

from .models import ItemCategory, QuoteItem, QuoteVariant, VariantType
from .money import to_dollars

CATEGORY_ORDER = (ItemCategory.MATERIAL, ItemCategory.LABOR, ItemCategory.REMOVAL, ItemCategory.CUSTOM)

CATEGORY_HEADINGS = {
    ItemCategory.MATERIAL: "Materials",
    ItemCategory.LABOR: "Labor",
    ItemCategory.REMOVAL: "Removal",
    ItemCategory.CUSTOM: "Additional items",
}


def format_money(cents: int, symbol: str = "$") -> str:
    amount = to_dollars(abs(int(cents)))
    sign = "-" if cents < 0 else ""
    return f"{sign}{symbol}{amount:,.2f}"


def group_items(variant: QuoteVariant) -> Dict[ItemCategory, List[QuoteItem]]:
    """Line items keyed by category in display order; empty categories are left out."""

    groups: Dict[ItemCategory, List[QuoteItem]] = {}
    for category in CATEGORY_ORDER:
        items = variant.items_in(category)
        if items:
            groups[category] = items
    return groups


def items_frame(variant: QuoteVariant) -> pd.DataFrame:
    rows = [
        {
            "NAME": item.name,
            "QTY": float(item.qty),
            "UNIT": item.unit,
            "UNIT_PRICE": item.unit_price,
            "TOTAL": item.total,
            "CATEGORY": ItemCategory(item.category).value,
        }
        for item in variant.items
    ]
    return pd.DataFrame(rows, columns=["NAME", "QTY", "UNIT", "UNIT_PRICE", "TOTAL", "CATEGORY"])


def variant_summary_frame(variants: Iterable[QuoteVariant]) -> pd.DataFrame:
    rows = []
    for variant in variants:
        amounts = variant.dollars()
        rows.append(
            {
                "VARIANT": variant.type.value,
                "MARKUP_PERCENT": float(variant.markup_percent),
                "MATERIALS": amounts["materials_total"],
                "LABOR": amounts["labor_total"],
                "REMOVAL": amounts["removal_total"],
                "SUBTOTAL": amounts["subtotal"],
                "MARKUP": amounts["markup_amount"],
                "TAX": amounts["tax_amount"],
                "TOTAL": amounts["total"],
            }
        )
    return pd.DataFrame(
        rows,
        columns=["VARIANT", "MARKUP_PERCENT", "MATERIALS", "LABOR", "REMOVAL", "SUBTOTAL", "MARKUP", "TAX", "TOTAL"],
    )


def make_summary_text(
    variants: List[QuoteVariant],
    selected: VariantType = VariantType.STANDARD,
    symbol: str = "$",
) -> str:
    chosen = next(v for v in variants if v.type == VariantType(selected))
    summary = variant_summary_frame(variants)[["VARIANT", "MARKUP_PERCENT", "SUBTOTAL", "TAX", "TOTAL"]]
    top = items_frame(chosen).sort_values("TOTAL", ascending=False).head(5)[["NAME", "QTY", "UNIT", "TOTAL"]]
    return (
        f"{chosen.type.value.title()} quote total: {format_money(chosen.total, symbol)} "
        f"(subtotal {format_money(chosen.subtotal, symbol)}, markup {chosen.markup_percent:g}%).\n"
        f"Variants:\n{summary.to_string(index=False)}\n"
        f"Top cost drivers:\n{top.to_string(index=False)}\n"
    )


__all__ = [
    "CATEGORY_ORDER",
    "CATEGORY_HEADINGS",
    "format_money",
    "group_items",
    "items_frame",
    "variant_summary_frame",
    "make_summary_text",
]
