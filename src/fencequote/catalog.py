"""Material price-list loading.

Price lists are CSV or Excel sheets with one row per material and the columns
``fence_type, name, unit, unit_price, category`` plus optional ``sort_order``,
``is_active``, ``id`` and ``user_id``. Every row goes through the ``material``
validation schema; a bad row fails the whole load rather than being dropped,
since a silently missing price would under-quote the job.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, Iterable, List

import numpy as np
import pandas as pd

from .coefficients import DEFAULT_COEFFICIENTS, Coefficients
from .errors import CatalogError
from .models import FenceType, MaterialCategory, MaterialRecord
from .pricing import active_materials_for
from .validation import material_from, validate

LOGGER = logging.getLogger(__name__)

SAMPLE_MATERIALS_PATH = Path(__file__).resolve().parent / "data" / "sample_materials.csv"

REQUIRED_COLUMNS = ("fence_type", "name", "unit", "unit_price", "category")


def _read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in {".xlsx", ".xlsm"}:
        return pd.read_excel(path, engine="openpyxl")
    if suffix == ".csv":
        return pd.read_csv(path)
    raise CatalogError(f"Unsupported price list format '{path.suffix}' for {path}")


def _normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out.columns = [str(col).strip().lower().replace(" ", "_") for col in out.columns]
    missing = [col for col in REQUIRED_COLUMNS if col not in out.columns]
    if missing:
        raise CatalogError(f"Price list is missing column(s): {', '.join(missing)}")
    out = out.dropna(how="all")
    out = out.replace([np.inf, -np.inf], np.nan)
    return out


def _row_payload(row: Dict[str, object]) -> Dict[str, object]:
    payload = {}
    for key, value in row.items():
        if isinstance(value, float) and math.isnan(value):
            continue
        payload[key] = value
    for key in ("fence_type", "category"):
        if isinstance(payload.get(key), str):
            payload[key] = str(payload[key]).strip().lower()
    return payload


def materials_from_frame(df: pd.DataFrame) -> List[MaterialRecord]:
    """Validate each price-list row and convert it to a :class:`MaterialRecord`."""

    frame = _normalize_frame(df)
    records: List[MaterialRecord] = []
    problems: List[str] = []
    for position, row in enumerate(frame.to_dict(orient="records"), start=1):
        result = validate("material", _row_payload(row))
        if not result.success:
            detail = ", ".join(f"{field}: {message}" for field, message in result.errors.items())
            problems.append(f"row {position}: {detail}")
            continue
        records.append(material_from(result.data))
    if problems:
        raise CatalogError("Invalid price list rows; " + "; ".join(problems))
    return records


def load_materials(path: Path | None = None) -> List[MaterialRecord]:
    """Load a price list from ``path`` (the bundled sample when ``None``)."""

    source = path or SAMPLE_MATERIALS_PATH
    if not source.exists():
        raise FileNotFoundError(f"Price list not found: {source}")
    LOGGER.info("Loading price list from %s", source)
    records = materials_from_frame(_read_frame(source))
    LOGGER.debug("Loaded %d material records", len(records))
    return records


def active_materials(records: Iterable[MaterialRecord], fence_type: FenceType | str) -> List[MaterialRecord]:
    """Active records for one fence type, as the pricing engine would see them."""

    return active_materials_for(records, FenceType(fence_type))


def missing_categories(
    records: Iterable[MaterialRecord],
    fence_type: FenceType | str,
    coefficients: Coefficients = DEFAULT_COEFFICIENTS,
) -> List[str]:
    """Categories with no active record for ``fence_type``.

    Rails are only reported for fence types that use them; gate coverage is
    left to the engine because it depends on the gate counts of a job.
    """

    fence_type = FenceType(fence_type)
    present = {MaterialCategory(r.category) for r in active_materials(records, fence_type)}
    needed = [MaterialCategory.POST, MaterialCategory.PANEL, MaterialCategory.CONCRETE, MaterialCategory.HARDWARE]
    if coefficients.spec_for(fence_type).rails_per_section > 0:
        needed.insert(1, MaterialCategory.RAIL)
    return [category.value for category in needed if category not in present]


def materials_frame(records: Iterable[MaterialRecord]) -> pd.DataFrame:
    rows = [
        {
            "fence_type": FenceType(r.fence_type).value,
            "name": r.name,
            "unit": r.unit,
            "unit_price": r.unit_price,
            "category": MaterialCategory(r.category).value,
            "sort_order": r.sort_order,
            "is_active": r.is_active,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=["fence_type", "name", "unit", "unit_price", "category", "sort_order", "is_active"])


__all__ = [
    "SAMPLE_MATERIALS_PATH",
    "REQUIRED_COLUMNS",
    "materials_from_frame",
    "load_materials",
    "active_materials",
    "missing_categories",
    "materials_frame",
]
