from __future__ import annotations

import pandas as pd
import pytest

from fencequote.catalog import (
    active_materials,
    load_materials,
    materials_frame,
    materials_from_frame,
    missing_categories,
)
from fencequote.errors import CatalogError
from fencequote.models import FenceType, MaterialCategory


def _frame(**overrides):
    row = {
        "Fence Type": "vinyl",
        "Name": "Vinyl post",
        "Unit": "each",
        "Unit Price": 28.0,
        "Category": "post",
    }
    row.update(overrides)
    return pd.DataFrame([row])


def test_sample_price_list_covers_every_fence_type(sample_materials):
    assert len(sample_materials) == 33
    for fence_type in FenceType:
        assert missing_categories(sample_materials, fence_type) == []
    post = active_materials(sample_materials, "wood_privacy")[0]
    assert post.category == MaterialCategory.POST
    assert post.unit_price == 14.0
    assert post.is_active is True


def test_headers_are_normalized_and_values_coerced():
    records = materials_from_frame(_frame(**{"Unit Price": "28.50", "Category": " POST "}))
    assert records[0].unit_price == 28.5
    assert records[0].category == MaterialCategory.POST
    assert records[0].fence_type == FenceType.VINYL


def test_bad_rows_are_reported_together():
    df = pd.concat([_frame(**{"Unit Price": -1}), _frame(Category="lumber")], ignore_index=True)
    with pytest.raises(CatalogError) as excinfo:
        materials_from_frame(df)
    message = str(excinfo.value)
    assert "row 1" in message and "Price cannot be negative" in message
    assert "row 2" in message and "Choose a valid category" in message


def test_missing_columns():
    with pytest.raises(CatalogError, match="unit_price"):
        materials_from_frame(_frame().drop(columns=["Unit Price"]))


def test_csv_round_trip_with_inactive_rows(tmp_path, sample_materials):
    frame = materials_frame(sample_materials)
    frame.loc[frame["category"] == "rail", "is_active"] = False
    path = tmp_path / "prices.csv"
    frame.to_csv(path, index=False)

    loaded = load_materials(path)
    assert len(loaded) == len(sample_materials)
    assert missing_categories(loaded, FenceType.WOOD_PRIVACY) == ["rail"]
    assert missing_categories(loaded, FenceType.VINYL) == []


def test_excel_price_list(tmp_path, sample_materials):
    path = tmp_path / "prices.xlsx"
    materials_frame(sample_materials).to_excel(path, index=False, engine="openpyxl")
    loaded = load_materials(path)
    assert [m.name for m in loaded] == [m.name for m in sample_materials]


def test_unsupported_format_and_missing_file(tmp_path):
    path = tmp_path / "prices.txt"
    path.write_text("fence_type,name\n", encoding="utf-8")
    with pytest.raises(CatalogError):
        load_materials(path)
    with pytest.raises(FileNotFoundError):
        load_materials(tmp_path / "absent.csv")
