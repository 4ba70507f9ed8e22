from __future__ import annotations

import numpy as np
import pytest
from PyPDF2 import PdfReader

from fencequote.adjuster import add_custom_item
from fencequote.models import CustomItem, ItemCategory, Quote, QuoteInputs, VariantType
from fencequote.pdf import write_quote_pdf
from fencequote.pricing import calculate_quote
from fencequote.reporting import format_money, group_items, items_frame, make_summary_text, variant_summary_frame


@pytest.fixture
def variants(privacy_inputs, sample_materials, settings):
    return calculate_quote(privacy_inputs, sample_materials, settings)


def test_format_money():
    assert format_money(123456789) == "$1,234,567.89"
    assert format_money(5) == "$0.05"
    assert format_money(-1050, "€") == "-€10.50"


def test_group_items_in_display_order(variants):
    standard = add_custom_item(variants[1], CustomItem(name="Permit", qty=1, unit_price=50.0))
    groups = group_items(standard)
    assert list(groups) == [ItemCategory.MATERIAL, ItemCategory.LABOR, ItemCategory.CUSTOM]
    assert [i.name for i in groups[ItemCategory.CUSTOM]] == ["Permit"]


def test_summary_frames(variants):
    summary = variant_summary_frame(variants)
    assert list(summary["VARIANT"]) == ["budget", "standard", "premium"]
    assert np.isclose(summary.loc[1, "LABOR"], 742.5)
    assert np.isclose(summary.loc[1, "SUBTOTAL"], 2199.0)
    assert (summary["SUBTOTAL"] == summary.loc[0, "SUBTOTAL"]).all()

    items = items_frame(variants[1])
    assert np.isclose(items["TOTAL"].sum(), 2199.0)


def test_summary_text_names_selected_variant(variants):
    text = make_summary_text(variants, VariantType.PREMIUM)
    assert text.startswith("Premium quote total: $2,858.70")
    assert "Privacy picket (6ft)" in text


def test_pdf_renders_selected_variant(tmp_path, variants, privacy_inputs):
    quote = Quote(
        inputs=privacy_inputs,
        variants=list(variants),
        client_name="Pat Lee",
        client_address="12 Elm St",
    )
    path = write_quote_pdf(quote, tmp_path / "quote.pdf", company_name="Acme Fence")
    assert path.read_bytes().startswith(b"%PDF")
    reader = PdfReader(str(path))
    assert len(reader.pages) >= 1


def test_pdf_paginates_long_quotes(tmp_path, sample_materials, settings):
    inputs = QuoteInputs(fence_type="vinyl", length=40.0, height=6.0, notes="Back gate faces the alley. " * 80)
    variant = calculate_quote(inputs, sample_materials, settings)[1]
    for index in range(40):
        variant = add_custom_item(variant, CustomItem(name=f"Extra {index}", qty=1, unit_price=10.0))
    quote = Quote(inputs=inputs, variants=[variant])
    path = write_quote_pdf(quote, tmp_path / "long.pdf")
    assert len(PdfReader(str(path)).pages) >= 2
