"""Fold custom line items into an already priced variant.

Adding or removing a custom line never re-runs the takeoff: the variant's own
items are re-summed and its stored markup percent and tax rate reapplied.
Variants read from older records may lack ``tax_percent``; for those the
effective rate ``tax_amount / (subtotal + markup_amount)`` is used instead and
kept on the returned variant.
"""

from __future__ import annotations

import logging
from typing import List

from .models import CustomItem, ItemCategory, Quote, QuoteItem, QuoteVariant
from .pricing import assemble_variant

LOGGER = logging.getLogger(__name__)

# Used when a legacy variant has no taxable base to infer its rate from.
FALLBACK_TAX_PERCENT = 0.0


def effective_tax_percent(variant: QuoteVariant) -> float:
    """Tax rate (percent) to reapply when recomposing ``variant``'s totals."""

    if variant.tax_percent is not None:
        return float(variant.tax_percent)
    base = variant.subtotal + variant.markup_amount
    if base == 0:
        LOGGER.warning(
            "Cannot infer tax rate for %s variant with zero taxable base; using %.1f%%",
            variant.type.value,
            FALLBACK_TAX_PERCENT,
        )
        return FALLBACK_TAX_PERCENT
    return variant.tax_amount / base * 100.0


def add_custom_item(variant: QuoteVariant, item: CustomItem) -> QuoteVariant:
    rate = effective_tax_percent(variant)
    items = variant.items + (item.to_quote_item(),)
    LOGGER.debug("Adding custom item %r (%d cents) to %s", item.name, item.total_cents, variant.type.value)
    return assemble_variant(variant.type, items, variant.markup_percent, rate)


def remove_custom_item(variant: QuoteVariant, index: int) -> QuoteVariant:
    """Drop the ``index``-th custom line (counting custom lines only)."""

    custom_count = len(variant.items_in(ItemCategory.CUSTOM))
    if index < 0 or index >= custom_count:
        raise IndexError(f"Custom item index {index} out of range ({custom_count} custom items)")

    rate = effective_tax_percent(variant)
    kept: List[QuoteItem] = []
    seen = 0
    for line in variant.items:
        if line.category == ItemCategory.CUSTOM:
            seen += 1
            if seen - 1 == index:
                LOGGER.debug("Removing custom item %r from %s", line.name, variant.type.value)
                continue
        kept.append(line)
    return assemble_variant(variant.type, kept, variant.markup_percent, rate)


def add_custom_item_to_quote(quote: Quote, item: CustomItem) -> QuoteVariant:
    """Record ``item`` on the quote and fold it into every variant.

    Custom lines belong to the quote, so changing ``selected_variant`` later
    still finds them. Returns the selected variant after the update.
    """

    updated = [add_custom_item(variant, item) for variant in quote.variants]
    quote.custom_items.append(item)
    for variant in updated:
        quote.replace_variant(variant)
    return quote.variant()


def remove_custom_item_from_quote(quote: Quote, index: int) -> QuoteVariant:
    if index < 0 or index >= len(quote.custom_items):
        raise IndexError(f"Custom item index {index} out of range ({len(quote.custom_items)} custom items)")
    for variant in list(quote.variants):
        # variants saved before custom lines were shared may not carry this line
        if index < len(variant.items_in(ItemCategory.CUSTOM)):
            quote.replace_variant(remove_custom_item(variant, index))
    del quote.custom_items[index]
    return quote.variant()


__all__ = [
    "FALLBACK_TAX_PERCENT",
    "effective_tax_percent",
    "add_custom_item",
    "remove_custom_item",
    "add_custom_item_to_quote",
    "remove_custom_item_from_quote",
]
