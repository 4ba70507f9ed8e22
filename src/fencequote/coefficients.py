"""Reference coefficients used by the takeoff and pricing engine.

The tables are bundled into a frozen :class:`Coefficients` value that callers
pass into the engine. ``DEFAULT_COEFFICIENTS`` holds the shipped figures; a
JSON file with the same shape can override any subset of them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from .models import FenceSpec, FenceType, GateSize, TerrainType, VariantType

# Fence types whose infill is bought per picket, per prefabricated panel, or as
# chain-link fabric by the foot.
PICKET_FENCES = frozenset({FenceType.WOOD_PRIVACY, FenceType.WOOD_PICKET})
PANEL_FENCES = frozenset({FenceType.VINYL, FenceType.ALUMINUM})
FABRIC_FENCES = frozenset({FenceType.CHAIN_LINK})

_DEFAULT_FENCE_SPECS = {
    FenceType.WOOD_PRIVACY: FenceSpec(
        label="Wood Privacy",
        post_spacing=8.0,
        rails_per_section=3,
        concrete_bags_per_post=1.0,
        labor_hours_per_ft=0.15,
        available_heights=(4.0, 5.0, 6.0, 8.0),
        default_height=6.0,
    ),
    FenceType.WOOD_PICKET: FenceSpec(
        label="Wood Picket",
        post_spacing=8.0,
        rails_per_section=2,
        concrete_bags_per_post=1.0,
        labor_hours_per_ft=0.12,
        available_heights=(3.0, 3.5, 4.0),
        default_height=4.0,
    ),
    FenceType.CHAIN_LINK: FenceSpec(
        label="Chain Link",
        post_spacing=10.0,
        rails_per_section=1,  # top rail
        concrete_bags_per_post=0.75,
        labor_hours_per_ft=0.08,
        available_heights=(4.0, 5.0, 6.0),
        default_height=4.0,
    ),
    FenceType.VINYL: FenceSpec(
        label="Vinyl",
        post_spacing=8.0,
        rails_per_section=0,  # panels carry their own rails
        concrete_bags_per_post=1.0,
        labor_hours_per_ft=0.12,
        available_heights=(4.0, 5.0, 6.0),
        default_height=6.0,
    ),
    FenceType.ALUMINUM: FenceSpec(
        label="Aluminum",
        post_spacing=8.0,
        rails_per_section=0,
        concrete_bags_per_post=0.75,
        labor_hours_per_ft=0.10,
        available_heights=(4.0, 5.0, 6.0),
        default_height=4.0,
    ),
}

_DEFAULT_TERRAIN_MULTIPLIERS = {
    TerrainType.FLAT: 1.0,
    TerrainType.SLIGHT_SLOPE: 1.15,
    TerrainType.STEEP_SLOPE: 1.35,
    TerrainType.ROCKY: 1.5,
}

_DEFAULT_GATE_LABOR_HOURS = {
    GateSize.STANDARD: 1.5,
    GateSize.LARGE: 3.0,
}

_DEFAULT_PICKETS_PER_FOOT = {
    FenceType.WOOD_PRIVACY: 2.4,  # ~5" pickets, tight spacing
    FenceType.WOOD_PICKET: 1.8,
}

_DEFAULT_VARIANT_MARKUP_MODIFIERS = {
    VariantType.BUDGET: -5.0,
    VariantType.STANDARD: 0.0,
    VariantType.PREMIUM: 10.0,
}

TERRAIN_LABELS = {
    TerrainType.FLAT: "Flat",
    TerrainType.SLIGHT_SLOPE: "Slight Slope",
    TerrainType.STEEP_SLOPE: "Steep Slope",
    TerrainType.ROCKY: "Rocky",
}


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Coefficients:
    fence_specs: Mapping[FenceType, FenceSpec] = field(default_factory=lambda: _frozen(_DEFAULT_FENCE_SPECS))
    terrain_multipliers: Mapping[TerrainType, float] = field(
        default_factory=lambda: _frozen(_DEFAULT_TERRAIN_MULTIPLIERS)
    )
    gate_labor_hours: Mapping[GateSize, float] = field(default_factory=lambda: _frozen(_DEFAULT_GATE_LABOR_HOURS))
    removal_hours_per_ft: float = 0.05
    pickets_per_foot: Mapping[FenceType, float] = field(default_factory=lambda: _frozen(_DEFAULT_PICKETS_PER_FOOT))
    default_pickets_per_foot: float = 2.0
    variant_markup_modifiers: Mapping[VariantType, float] = field(
        default_factory=lambda: _frozen(_DEFAULT_VARIANT_MARKUP_MODIFIERS)
    )

    def spec_for(self, fence_type: FenceType) -> FenceSpec:
        try:
            return self.fence_specs[FenceType(fence_type)]
        except (KeyError, ValueError):
            raise KeyError(f"Unknown fence type '{fence_type}'") from None

    def terrain_multiplier(self, terrain: TerrainType) -> float:
        try:
            return float(self.terrain_multipliers[TerrainType(terrain)])
        except (KeyError, ValueError):
            raise KeyError(f"Unknown terrain '{terrain}'") from None

    def pickets_for(self, fence_type: FenceType) -> float:
        return float(self.pickets_per_foot.get(FenceType(fence_type), self.default_pickets_per_foot))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Coefficients":
        """Build coefficients from a JSON-style mapping, defaulting missing tables."""

        base = cls()
        specs = dict(base.fence_specs)
        for key, payload in (raw.get("fence_specs") or {}).items():
            fence_type = FenceType(key)
            current = specs.get(fence_type)
            merged = dict(current.__dict__) if current else {}
            merged.update(payload)
            merged["available_heights"] = tuple(float(h) for h in merged.get("available_heights", ()))
            if "default_height" in merged:
                merged["default_height"] = float(merged["default_height"])
            specs[fence_type] = FenceSpec(**merged)

        def _table(name: str, enum_type, current: Mapping) -> Mapping:
            table = dict(current)
            for key, value in (raw.get(name) or {}).items():
                table[enum_type(key)] = float(value)
            return _frozen(table)

        return cls(
            fence_specs=_frozen(specs),
            terrain_multipliers=_table("terrain_multipliers", TerrainType, base.terrain_multipliers),
            gate_labor_hours=_table("gate_labor_hours", GateSize, base.gate_labor_hours),
            removal_hours_per_ft=float(raw.get("removal_hours_per_ft", base.removal_hours_per_ft)),
            pickets_per_foot=_table("pickets_per_foot", FenceType, base.pickets_per_foot),
            default_pickets_per_foot=float(raw.get("default_pickets_per_foot", base.default_pickets_per_foot)),
            variant_markup_modifiers=_table(
                "variant_markup_modifiers", VariantType, base.variant_markup_modifiers
            ),
        )


DEFAULT_COEFFICIENTS = Coefficients()


def load_coefficients(path: Path | None) -> Coefficients:
    """Load coefficient overrides from ``path``; ``None`` yields the defaults."""

    if path is None:
        return DEFAULT_COEFFICIENTS
    if not path.exists():
        raise FileNotFoundError(f"Coefficient file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)
    return Coefficients.from_dict(raw)


def fence_label(fence_type: FenceType | str, coefficients: Coefficients = DEFAULT_COEFFICIENTS) -> str:
    try:
        return coefficients.spec_for(FenceType(fence_type)).label
    except (KeyError, ValueError):
        return str(fence_type)


def terrain_label(terrain: TerrainType | str) -> str:
    try:
        return TERRAIN_LABELS[TerrainType(terrain)]
    except (KeyError, ValueError):
        return str(terrain)


def available_heights(
    fence_type: FenceType | str, coefficients: Coefficients = DEFAULT_COEFFICIENTS
) -> Tuple[float, ...]:
    return coefficients.spec_for(FenceType(fence_type)).available_heights


def default_height(fence_type: FenceType | str, coefficients: Coefficients = DEFAULT_COEFFICIENTS) -> float:
    return coefficients.spec_for(FenceType(fence_type)).default_height


__all__ = [
    "Coefficients",
    "DEFAULT_COEFFICIENTS",
    "PICKET_FENCES",
    "PANEL_FENCES",
    "FABRIC_FENCES",
    "TERRAIN_LABELS",
    "load_coefficients",
    "fence_label",
    "terrain_label",
    "available_heights",
    "default_height",
]
