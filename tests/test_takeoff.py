from __future__ import annotations

import logging
import math

import numpy as np
import pytest

from fencequote.coefficients import Coefficients
from fencequote.errors import InvalidInputError
from fencequote.models import FenceType, QuoteInputs, TerrainType
from fencequote.takeoff import compute_takeoff, estimate_labor_hours, posts_count, sections_count


def test_wood_privacy_hundred_feet(privacy_inputs):
    takeoff = compute_takeoff(privacy_inputs)
    assert takeoff.sections == 13
    assert takeoff.posts == 14
    assert takeoff.rails == 39
    assert takeoff.concrete_bags == 14
    assert takeoff.hardware_sets == 13
    assert takeoff.infill == 240
    assert takeoff.infill_unit == "picket"
    assert np.isclose(takeoff.labor.install, 15.0)
    assert np.isclose(takeoff.labor.gates, 1.5)
    assert takeoff.labor.removal == 0.0
    assert np.isclose(takeoff.labor.total, 16.5)


def test_exact_multiple_of_spacing_has_no_extra_section():
    assert sections_count(80.0, FenceType.WOOD_PRIVACY) == 10
    assert posts_count(80.0, FenceType.WOOD_PRIVACY) == 11
    assert sections_count(80.5, FenceType.WOOD_PRIVACY) == 11


def test_chain_link_fabric_and_fractional_concrete():
    inputs = QuoteInputs(fence_type=FenceType.CHAIN_LINK, length=95.5, height=4.0)
    takeoff = compute_takeoff(inputs)
    assert takeoff.sections == 10
    assert takeoff.posts == 11
    assert takeoff.rails == 10
    assert takeoff.concrete_bags == math.ceil(11 * 0.75)
    assert takeoff.infill == 96
    assert takeoff.infill_unit == "ft"


def test_panel_fences_buy_one_panel_per_section():
    takeoff = compute_takeoff(QuoteInputs(fence_type=FenceType.VINYL, length=50.0, height=6.0))
    assert takeoff.rails == 0
    assert takeoff.infill == takeoff.sections == 7
    assert takeoff.infill_unit == "panel"


def test_terrain_scales_install_labor_only():
    flat = QuoteInputs(fence_type=FenceType.WOOD_PRIVACY, length=100.0, height=6.0, gates_large=1, remove_old=True)
    rocky = QuoteInputs(
        fence_type=FenceType.WOOD_PRIVACY,
        length=100.0,
        height=6.0,
        gates_large=1,
        remove_old=True,
        terrain=TerrainType.ROCKY,
    )
    flat_hours = compute_takeoff(flat).labor
    rocky_hours = compute_takeoff(rocky).labor
    assert np.isclose(rocky_hours.install, flat_hours.install * 1.5)
    assert rocky_hours.gates == flat_hours.gates == 3.0
    assert np.isclose(rocky_hours.removal, flat_hours.removal)
    assert np.isclose(flat_hours.removal, 5.0)


def test_gates_do_not_change_run_quantities():
    plain = compute_takeoff(QuoteInputs(fence_type=FenceType.WOOD_PICKET, length=64.0, height=4.0))
    gated = compute_takeoff(
        QuoteInputs(fence_type=FenceType.WOOD_PICKET, length=64.0, height=4.0, gates_standard=2, gates_large=1)
    )
    assert (plain.posts, plain.rails, plain.concrete_bags) == (gated.posts, gated.rails, gated.concrete_bags)
    assert np.isclose(gated.labor.gates, 2 * 1.5 + 3.0)


def test_estimate_labor_hours_matches_breakdown(privacy_inputs):
    assert np.isclose(estimate_labor_hours(privacy_inputs), compute_takeoff(privacy_inputs).labor.total)


def test_non_catalogue_height_warns_but_computes(caplog):
    inputs = QuoteInputs(fence_type=FenceType.WOOD_PRIVACY, length=40.0, height=7.0)
    with caplog.at_level(logging.WARNING, logger="fencequote.takeoff"):
        takeoff = compute_takeoff(inputs)
    assert takeoff.posts == 6
    assert any("not a catalogue height" in rec.message for rec in caplog.records)


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"length": 0.0}, "length"),
        ({"length": -5.0}, "length"),
        ({"length": float("nan")}, "length"),
        ({"length": float("inf")}, "length"),
        ({"height": -1.0}, "height"),
        ({"gates_standard": -1}, "gates_standard"),
        ({"gates_large": 1.5}, "gates_large"),
        ({"fence_type": "bamboo"}, "fence_type"),
        ({"terrain": "swamp"}, "terrain"),
    ],
)
def test_invalid_inputs_are_rejected(kwargs, field):
    base = {"fence_type": FenceType.WOOD_PRIVACY, "length": 50.0, "height": 6.0}
    base.update(kwargs)
    with pytest.raises(InvalidInputError) as excinfo:
        compute_takeoff(QuoteInputs(**base))
    assert excinfo.value.field == field


def test_injected_coefficients_change_spacing():
    custom = Coefficients.from_dict({"fence_specs": {"wood_privacy": {"post_spacing": 10.0}}})
    takeoff = compute_takeoff(QuoteInputs(fence_type=FenceType.WOOD_PRIVACY, length=100.0, height=6.0), custom)
    assert takeoff.sections == 10
    assert takeoff.posts == 11
