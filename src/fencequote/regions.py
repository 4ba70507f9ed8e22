"""
Regional defaults for new accounts: currency, unit system and labor rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class RegionalDefault:
    currency: str
    unit_system: str
    hourly_rate: float
    symbol: str


# Keep tuple structure to preserve order for UI display
REGION_CHOICES: Tuple[Tuple[str, RegionalDefault], ...] = (
    ("US", RegionalDefault(currency="USD", unit_system="imperial", hourly_rate=45.0, symbol="$")),
    ("CA", RegionalDefault(currency="CAD", unit_system="imperial", hourly_rate=50.0, symbol="C$")),
    ("UK", RegionalDefault(currency="GBP", unit_system="metric", hourly_rate=35.0, symbol="£")),
    ("AU", RegionalDefault(currency="AUD", unit_system="metric", hourly_rate=55.0, symbol="A$")),
    ("EU", RegionalDefault(currency="EUR", unit_system="metric", hourly_rate=40.0, symbol="€")),
    ("Other", RegionalDefault(currency="USD", unit_system="metric", hourly_rate=30.0, symbol="$")),
)

REGIONAL_DEFAULTS: Dict[str, RegionalDefault] = dict(REGION_CHOICES)
FALLBACK_REGION = "Other"

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "CAD": "C$",
    "GBP": "£",
    "EUR": "€",
    "AUD": "A$",
}

DEFAULT_TERMS_TEMPLATE = (
    "Thank you for the opportunity to quote this project. "
    "This quote is valid for 30 days. Material prices may vary."
)


def region_codes() -> List[str]:
    return [code for code, _ in REGION_CHOICES]


def normalize_region(value: str | None) -> Optional[str]:
    """
    Map user text such as ``"us"``, ``" UK "`` or ``"other"`` onto a region code.

    Returns ``None`` when nothing matches.
    """

    if not value:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    for code in REGIONAL_DEFAULTS:
        if candidate.upper() == code.upper():
            return code
    return None


def regional_defaults(region: str | None) -> RegionalDefault:
    code = normalize_region(region) or FALLBACK_REGION
    return REGIONAL_DEFAULTS[code]


def currency_symbol(currency: str | None) -> str:
    return CURRENCY_SYMBOLS.get((currency or "").strip().upper(), "$")


__all__ = [
    "RegionalDefault",
    "REGION_CHOICES",
    "REGIONAL_DEFAULTS",
    "FALLBACK_REGION",
    "CURRENCY_SYMBOLS",
    "DEFAULT_TERMS_TEMPLATE",
    "region_codes",
    "normalize_region",
    "regional_defaults",
    "currency_symbol",
]
