from __future__ import annotations

import pytest

from fencequote.catalog import load_materials
from fencequote.models import CalculatorSettings, FenceType, QuoteInputs


@pytest.fixture(scope="session")
def sample_materials():
    return load_materials()


@pytest.fixture
def settings():
    return CalculatorSettings(hourly_rate=45.0, default_markup_percent=20.0, tax_percent=0.0)


@pytest.fixture
def taxed_settings():
    return CalculatorSettings(hourly_rate=45.0, default_markup_percent=20.0, tax_percent=8.0)


@pytest.fixture
def privacy_inputs():
    return QuoteInputs(fence_type=FenceType.WOOD_PRIVACY, length=100.0, height=6.0, gates_standard=1)
