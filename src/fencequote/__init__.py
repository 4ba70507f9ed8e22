"""Fence job takeoff and pricing into budget, standard and premium quotes."""

from .adjuster import add_custom_item, remove_custom_item
from .api import QuoteOutcome, quote_from_form
from .catalog import load_materials
from .coefficients import DEFAULT_COEFFICIENTS, Coefficients, load_coefficients
from .errors import FenceQuoteError, InvalidInputError, MissingMaterialError
from .models import (
    CalculatorSettings,
    CustomItem,
    FenceType,
    MaterialRecord,
    Quote,
    QuoteInputs,
    QuoteVariant,
    TerrainType,
    VariantType,
)
from .pricing import calculate_quote
from .takeoff import compute_takeoff
from .validation import validate

__all__ = [
    "add_custom_item",
    "remove_custom_item",
    "QuoteOutcome",
    "quote_from_form",
    "load_materials",
    "DEFAULT_COEFFICIENTS",
    "Coefficients",
    "load_coefficients",
    "FenceQuoteError",
    "InvalidInputError",
    "MissingMaterialError",
    "CalculatorSettings",
    "CustomItem",
    "FenceType",
    "MaterialRecord",
    "Quote",
    "QuoteInputs",
    "QuoteVariant",
    "TerrainType",
    "VariantType",
    "calculate_quote",
    "compute_takeoff",
    "validate",
]
