"""Physical quantity takeoff for a fence run.

Counts of things you buy (posts, rails, bags, pickets) are rounded up; labor
hours stay fractional. Gate openings are priced as side costs and do not
change the post/rail/concrete counts of the run.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .coefficients import DEFAULT_COEFFICIENTS, FABRIC_FENCES, PANEL_FENCES, PICKET_FENCES, Coefficients
from .errors import InvalidInputError
from .models import FenceType, GateSize, QuoteInputs, TerrainType

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaborHours:
    install: float
    gates: float
    removal: float

    @property
    def total(self) -> float:
        return self.install + self.gates + self.removal


@dataclass(frozen=True)
class Takeoff:
    sections: int
    posts: int
    rails: int
    concrete_bags: int
    infill: float
    infill_unit: str
    hardware_sets: int
    gates_standard: int
    gates_large: int
    labor: LaborHours


def _check_inputs(inputs: QuoteInputs, coefficients: Coefficients) -> None:
    try:
        FenceType(inputs.fence_type)
        coefficients.spec_for(inputs.fence_type)
    except (KeyError, ValueError):
        raise InvalidInputError("fence_type", f"unknown fence type {inputs.fence_type!r}") from None
    try:
        coefficients.terrain_multiplier(TerrainType(inputs.terrain))
    except (KeyError, ValueError):
        raise InvalidInputError("terrain", f"unknown terrain {inputs.terrain!r}") from None

    length = inputs.length
    if isinstance(length, bool) or not isinstance(length, (int, float)) or not math.isfinite(length):
        raise InvalidInputError("length", "must be a finite number")
    if length <= 0:
        raise InvalidInputError("length", "must be greater than 0")

    height = inputs.height
    if isinstance(height, bool) or not isinstance(height, (int, float)) or not math.isfinite(height):
        raise InvalidInputError("height", "must be a finite number")
    if height < 0:
        raise InvalidInputError("height", "cannot be negative")

    for name in ("gates_standard", "gates_large"):
        count = getattr(inputs, name)
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidInputError(name, "must be a whole number")
        if count < 0:
            raise InvalidInputError(name, "cannot be negative")


def sections_count(length: float, fence_type: FenceType, coefficients: Coefficients = DEFAULT_COEFFICIENTS) -> int:
    spec = coefficients.spec_for(fence_type)
    if length <= 0:
        return 0
    return math.ceil(length / spec.post_spacing)


def posts_count(length: float, fence_type: FenceType, coefficients: Coefficients = DEFAULT_COEFFICIENTS) -> int:
    """Line posts for a straight run: one more than the number of sections."""

    if length <= 0:
        return 0
    return sections_count(length, fence_type, coefficients) + 1


def labor_hours(inputs: QuoteInputs, coefficients: Coefficients = DEFAULT_COEFFICIENTS) -> LaborHours:
    spec = coefficients.spec_for(inputs.fence_type)
    # terrain only scales the per-foot install labor
    install = inputs.length * spec.labor_hours_per_ft * coefficients.terrain_multiplier(inputs.terrain)
    gates = (
        inputs.gates_standard * coefficients.gate_labor_hours[GateSize.STANDARD]
        + inputs.gates_large * coefficients.gate_labor_hours[GateSize.LARGE]
    )
    removal = inputs.length * coefficients.removal_hours_per_ft if inputs.remove_old else 0.0
    return LaborHours(install=install, gates=gates, removal=removal)


def estimate_labor_hours(inputs: QuoteInputs, coefficients: Coefficients = DEFAULT_COEFFICIENTS) -> float:
    return labor_hours(inputs, coefficients).total


def compute_takeoff(inputs: QuoteInputs, coefficients: Coefficients = DEFAULT_COEFFICIENTS) -> Takeoff:
    """Convert job inputs into physical quantities and labor hours."""

    _check_inputs(inputs, coefficients)
    fence_type = FenceType(inputs.fence_type)
    spec = coefficients.spec_for(fence_type)

    if inputs.height not in spec.available_heights:
        LOGGER.warning(
            "Height %s is not a catalogue height for %s (%s)",
            inputs.height,
            spec.label,
            ", ".join(f"{h:g}" for h in spec.available_heights),
        )

    sections = sections_count(inputs.length, fence_type, coefficients)
    posts = sections + 1
    rails = sections * spec.rails_per_section
    concrete_bags = math.ceil(posts * spec.concrete_bags_per_post)

    if fence_type in PANEL_FENCES:
        infill, infill_unit = float(sections), "panel"
    elif fence_type in FABRIC_FENCES:
        infill, infill_unit = float(math.ceil(inputs.length)), "ft"
    elif fence_type in PICKET_FENCES:
        infill, infill_unit = float(math.ceil(inputs.length * coefficients.pickets_for(fence_type))), "picket"
    else:
        infill, infill_unit = float(math.ceil(inputs.length * coefficients.default_pickets_per_foot)), "picket"

    takeoff = Takeoff(
        sections=sections,
        posts=posts,
        rails=rails,
        concrete_bags=concrete_bags,
        infill=infill,
        infill_unit=infill_unit,
        hardware_sets=sections,
        gates_standard=inputs.gates_standard,
        gates_large=inputs.gates_large,
        labor=labor_hours(inputs, coefficients),
    )
    LOGGER.debug(
        "Takeoff %s %.2f ft: %d sections, %d posts, %d rails, %d bags, %.3f labor hours",
        fence_type.value,
        inputs.length,
        takeoff.sections,
        takeoff.posts,
        takeoff.rails,
        takeoff.concrete_bags,
        takeoff.labor.total,
    )
    return takeoff


__all__ = [
    "LaborHours",
    "Takeoff",
    "compute_takeoff",
    "sections_count",
    "posts_count",
    "labor_hours",
    "estimate_labor_hours",
]
