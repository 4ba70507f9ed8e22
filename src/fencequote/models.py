from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .money import multiply_cents, to_cents, to_dollars


class FenceType(str, Enum):
    WOOD_PRIVACY = "wood_privacy"
    WOOD_PICKET = "wood_picket"
    CHAIN_LINK = "chain_link"
    VINYL = "vinyl"
    ALUMINUM = "aluminum"


class TerrainType(str, Enum):
    FLAT = "flat"
    SLIGHT_SLOPE = "slight_slope"
    STEEP_SLOPE = "steep_slope"
    ROCKY = "rocky"


class VariantType(str, Enum):
    BUDGET = "budget"
    STANDARD = "standard"
    PREMIUM = "premium"


VARIANT_ORDER: Tuple[VariantType, ...] = (
    VariantType.BUDGET,
    VariantType.STANDARD,
    VariantType.PREMIUM,
)


class ItemCategory(str, Enum):
    MATERIAL = "material"
    LABOR = "labor"
    REMOVAL = "removal"
    CUSTOM = "custom"


class MaterialCategory(str, Enum):
    POST = "post"
    RAIL = "rail"
    PANEL = "panel"
    CONCRETE = "concrete"
    HARDWARE = "hardware"
    GATE = "gate"


class GateSize(str, Enum):
    STANDARD = "standard"
    LARGE = "large"


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    CALCULATED = "calculated"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class FenceSpec:
    """Static construction coefficients for one fence type."""

    label: str
    post_spacing: float
    rails_per_section: int
    concrete_bags_per_post: float
    labor_hours_per_ft: float
    available_heights: Tuple[float, ...]
    default_height: float

    def __post_init__(self) -> None:
        if not self.available_heights:
            raise ValueError(f"{self.label}: available_heights must not be empty")
        if self.default_height not in self.available_heights:
            raise ValueError(
                f"{self.label}: default height {self.default_height} is not one of {self.available_heights}"
            )
        if self.post_spacing <= 0:
            raise ValueError(f"{self.label}: post_spacing must be positive")


@dataclass(frozen=True)
class QuoteInputs:
    fence_type: FenceType
    length: float
    height: float
    gates_standard: int = 0
    gates_large: int = 0
    remove_old: bool = False
    terrain: TerrainType = TerrainType.FLAT
    notes: str = ""


@dataclass(frozen=True)
class CalculatorSettings:
    hourly_rate: float
    default_markup_percent: float
    tax_percent: float


@dataclass(frozen=True)
class MaterialRecord:
    """A single entry from a user's material price list."""

    fence_type: FenceType
    name: str
    unit: str
    unit_price: float
    category: MaterialCategory
    sort_order: int = 0
    is_active: bool = True
    id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class QuoteItem:
    """One priced line. ``total_cents`` is always derived from qty x unit price."""

    name: str
    qty: float
    unit: str
    unit_price_cents: int
    category: ItemCategory
    total_cents: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "total_cents", multiply_cents(self.qty, self.unit_price_cents))

    @classmethod
    def priced(cls, name: str, qty: float, unit: str, unit_price: float, category: ItemCategory) -> "QuoteItem":
        return cls(name=name, qty=qty, unit=unit, unit_price_cents=to_cents(unit_price), category=category)

    @property
    def unit_price(self) -> float:
        return to_dollars(self.unit_price_cents)

    @property
    def total(self) -> float:
        return to_dollars(self.total_cents)


@dataclass(frozen=True)
class CustomItem:
    name: str
    qty: float
    unit_price: float
    unit: str = "each"

    @property
    def total_cents(self) -> int:
        return multiply_cents(self.qty, to_cents(self.unit_price))

    @property
    def total(self) -> float:
        return to_dollars(self.total_cents)

    def to_quote_item(self) -> QuoteItem:
        return QuoteItem.priced(self.name, self.qty, self.unit, self.unit_price, ItemCategory.CUSTOM)


@dataclass(frozen=True)
class QuoteVariant:
    """One priced proposal. All amounts are whole cents."""

    type: VariantType
    markup_percent: float
    tax_percent: Optional[float]
    items: Tuple[QuoteItem, ...]
    materials_total: int
    labor_total: int
    removal_total: int
    subtotal: int
    markup_amount: int
    tax_amount: int
    total: int

    def items_in(self, category: ItemCategory) -> List[QuoteItem]:
        return [item for item in self.items if item.category == category]

    @property
    def custom_total(self) -> int:
        return sum(item.total_cents for item in self.items_in(ItemCategory.CUSTOM))

    def dollars(self) -> dict:
        """Aggregate amounts as float dollars, for display and persistence."""

        return {
            "materials_total": to_dollars(self.materials_total),
            "labor_total": to_dollars(self.labor_total),
            "removal_total": to_dollars(self.removal_total),
            "subtotal": to_dollars(self.subtotal),
            "markup_amount": to_dollars(self.markup_amount),
            "tax_amount": to_dollars(self.tax_amount),
            "total": to_dollars(self.total),
        }


@dataclass
class Quote:
    """Persisted aggregate holding one calculated job and its custom lines."""

    inputs: QuoteInputs
    variants: List[QuoteVariant]
    selected_variant: VariantType = VariantType.STANDARD
    custom_items: List[CustomItem] = field(default_factory=list)
    client_name: str = ""
    client_email: str = ""
    client_phone: str = ""
    client_address: str = ""
    status: QuoteStatus = QuoteStatus.CALCULATED

    def variant(self, variant_type: VariantType | str | None = None) -> QuoteVariant:
        wanted = VariantType(variant_type) if variant_type is not None else self.selected_variant
        for candidate in self.variants:
            if candidate.type == wanted:
                return candidate
        raise KeyError(f"Quote has no '{wanted.value}' variant")

    def replace_variant(self, updated: QuoteVariant) -> None:
        for index, candidate in enumerate(self.variants):
            if candidate.type == updated.type:
                self.variants[index] = updated
                return
        raise KeyError(f"Quote has no '{updated.type.value}' variant")


__all__ = [
    "FenceType",
    "TerrainType",
    "VariantType",
    "VARIANT_ORDER",
    "ItemCategory",
    "MaterialCategory",
    "GateSize",
    "QuoteStatus",
    "FenceSpec",
    "QuoteInputs",
    "CalculatorSettings",
    "MaterialRecord",
    "QuoteItem",
    "CustomItem",
    "QuoteVariant",
    "Quote",
]
