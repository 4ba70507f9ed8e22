from __future__ import annotations

import pytest

from fencequote.errors import SchemaValidationError
from fencequote.models import FenceType, TerrainType
from fencequote.validation import (
    FORM_ERROR_KEY,
    coerce_numeric_fields,
    custom_item_from,
    get_schema,
    is_e164_phone,
    is_valid_email,
    is_valid_phone,
    parse_int,
    parse_number,
    quote_inputs_from,
    sanitize,
    schema_names,
    validate,
    validate_or_raise,
)


def _form(**overrides):
    form = {
        "fence_type": "wood_privacy",
        "length": "100",
        "height": "6",
        "gates_standard": "1",
        "gates_large": "0",
        "remove_old": "no",
        "terrain": "flat",
    }
    form.update(overrides)
    return form


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12.5", 12.5),
        ("12,5", 12.5),
        ("12,500", 12500.0),
        ("1,234.56", 1234.56),
        ("1.234,56", 1234.56),
        ("$ 45", 45.0),
        ("1e3", 1000.0),
        (7, 7.0),
        ("", None),
        ("abc", None),
        ("NaN", None),
        (float("inf"), None),
        (None, None),
        (True, None),
    ],
)
def test_parse_number(raw, expected):
    assert parse_number(raw) == expected


def test_parse_int_rejects_fractions():
    assert parse_int("3") == 3
    assert parse_int("3.0") == 3
    assert parse_int("3.5") is None
    assert parse_int("x") is None


def test_sanitize_strips_markup_and_control_characters():
    assert sanitize("  <b>Bob</b>\x00 ") == "bBob/b"
    assert sanitize(None) == ""


def test_contact_checks():
    assert is_valid_email("pat@example.com")
    assert not is_valid_email("pat@example")
    assert is_valid_phone("(555) 123-4567")
    assert not is_valid_phone("12")
    assert is_e164_phone("+15551234567")
    assert not is_e164_phone("5551234567")
    assert not is_e164_phone("+0123456789")


def test_valid_form_is_coerced():
    result = validate("quote_inputs", _form(length="12,5", remove_old="yes", notes="  gate on <east> side "))
    assert result.success
    assert result.errors == {}
    assert result.data["length"] == 12.5
    assert result.data["gates_standard"] == 1
    assert result.data["remove_old"] is True
    assert result.data["notes"] == "gate on east side"

    inputs = quote_inputs_from(result.data)
    assert inputs.fence_type == FenceType.WOOD_PRIVACY
    assert inputs.terrain == TerrainType.FLAT
    assert inputs.length == 12.5


def test_missing_fields_each_get_a_message():
    result = validate("quote_inputs", {"fence_type": "vinyl"})
    assert not result.success
    assert result.errors["length"] == "Length is required"
    assert result.errors["height"] == "Height is required"
    assert result.errors["terrain"] == "Terrain is required"
    assert "fence_type" not in result.errors


@pytest.mark.parametrize(
    "overrides, field, message",
    [
        ({"length": "abc"}, "length", "Length must be a number"),
        ({"length": "0"}, "length", "Length must be greater than 0"),
        ({"length": "20000"}, "length", "Length seems too large"),
        ({"gates_standard": "1.5"}, "gates_standard", "Enter a whole number of gates"),
        ({"gates_large": "-1"}, "gates_large", "Cannot be negative"),
        ({"fence_type": "bamboo"}, "fence_type", "Choose a valid fence type"),
        ({"terrain": "swamp"}, "terrain", "Choose a valid terrain"),
    ],
)
def test_field_errors_use_friendly_messages(overrides, field, message):
    result = validate("quote_inputs", _form(**overrides))
    assert not result.success
    assert result.errors[field] == message


def test_non_finite_numbers_rejected():
    result = validate("quote_inputs", _form(length=float("nan")))
    assert not result.success
    assert "length" in result.errors


def test_non_mapping_payload():
    result = validate("quote_inputs", ["not", "a", "form"])
    assert not result.success
    assert FORM_ERROR_KEY in result.errors


def test_composite_schemas():
    quote_form = get_schema("quote_form")
    assert "client_name" in quote_form["required"]
    assert "length" in quote_form["properties"]

    onboarding = get_schema("onboarding")
    assert "email" not in onboarding["properties"]
    assert "logo_url" not in onboarding["properties"]
    assert "terms_template" not in onboarding["properties"]
    assert "hourly_rate" in onboarding["required"]

    result = validate("quote_form", _form(client_name=""))
    assert result.errors["client_name"] == "Client name is required"


def test_unknown_schema_raises_key_error():
    assert "quote_inputs" in schema_names()
    with pytest.raises(KeyError):
        validate("nope", {})


def test_sms_requires_e164():
    assert validate("send_sms", {"to": "+15551234567"}).success
    result = validate("send_sms", {"to": "555-1234"})
    assert result.errors["to"].startswith("Invalid phone number")


def test_client_info_allows_empty_optional_contact():
    result = validate("client_info", {"client_name": "Pat", "client_email": "", "client_phone": ""})
    assert result.success
    bad = validate("client_info", {"client_name": "Pat", "client_email": "pat@"})
    assert bad.errors["client_email"] == "Invalid email address"


def test_validate_or_raise():
    data = validate_or_raise("custom_item", {"name": "Caps", "qty": "14", "unit_price": "3.79"})
    item = custom_item_from(data)
    assert item.total_cents == 5306
    assert item.unit == "each"
    with pytest.raises(SchemaValidationError) as excinfo:
        validate_or_raise("custom_item", {"name": "Caps", "qty": "0", "unit_price": "3.79"})
    assert excinfo.value.errors == {"qty": "Quantity must be greater than 0"}


def test_coerce_numeric_fields_leaves_bad_text_for_the_schema():
    data = coerce_numeric_fields("settings", {"hourly_rate": "1.234,50", "tax_percent": "n/a", "extra": "x"})
    assert data["hourly_rate"] == 1234.5
    assert data["tax_percent"] == "n/a"
    assert data["extra"] == "x"
