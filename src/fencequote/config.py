from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Mapping, Optional

from .models import CalculatorSettings
from .regions import currency_symbol, normalize_region, regional_defaults
from .validation import parse_number

_BOOLEAN_TRUE = {"1", "true", "yes", "on"}

DEFAULT_MARKUP_PERCENT = 20.0
DEFAULT_TAX_PERCENT = 0.0


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    base_dir: Path
    region: str
    hourly_rate: float
    default_markup_percent: float
    tax_percent: float
    currency_symbol: str
    materials_path: Optional[Path]
    coefficients_path: Optional[Path]
    output_dir: Path
    write_pdf: bool = False
    verbose: bool = False

    def calculator_settings(self) -> CalculatorSettings:
        return CalculatorSettings(
            hourly_rate=self.hourly_rate,
            default_markup_percent=self.default_markup_percent,
            tax_percent=self.tax_percent,
        )


def _to_path(value: object | None) -> Optional[Path]:
    if value is None:
        return None
    if isinstance(value, Path):
        return value.expanduser().resolve()
    text = str(value).strip()
    if not text:
        return None
    return Path(text).expanduser().resolve()


def _to_float(value: object | None) -> Optional[float]:
    if value is None:
        return None
    return parse_number(value)


def _flag(value: object | None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _BOOLEAN_TRUE


def _namespace(cli_args: object | None) -> SimpleNamespace:
    if cli_args is None:
        return SimpleNamespace()
    if isinstance(cli_args, SimpleNamespace):
        return cli_args
    if hasattr(cli_args, "__dict__"):
        return SimpleNamespace(**{k: v for k, v in vars(cli_args).items()})
    return SimpleNamespace()


def _first(*values: Optional[float]) -> Optional[float]:
    for value in values:
        if value is not None:
            return value
    return None


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options.

    CLI options win over environment variables, which win over the regional
    defaults for the configured region.
    """

    base_dir = Path.cwd().resolve()
    cli_ns = _namespace(cli_args)

    region = (
        normalize_region(getattr(cli_ns, "region", None))
        or normalize_region(env.get("FENCEQUOTE_REGION"))
        or "US"
    )
    defaults = regional_defaults(region)

    hourly_rate = _first(
        _to_float(getattr(cli_ns, "hourly_rate", None)),
        _to_float(env.get("FENCEQUOTE_HOURLY_RATE")),
        defaults.hourly_rate,
    )
    markup = _first(
        _to_float(getattr(cli_ns, "markup", None)),
        _to_float(env.get("FENCEQUOTE_MARKUP_PERCENT")),
        DEFAULT_MARKUP_PERCENT,
    )
    tax = _first(
        _to_float(getattr(cli_ns, "tax", None)),
        _to_float(env.get("FENCEQUOTE_TAX_PERCENT")),
        DEFAULT_TAX_PERCENT,
    )

    symbol = (env.get("FENCEQUOTE_CURRENCY_SYMBOL") or "").strip()
    if getattr(cli_ns, "currency", None):
        symbol = currency_symbol(cli_ns.currency)
    symbol = symbol or defaults.symbol

    materials_path = _to_path(env.get("FENCEQUOTE_MATERIALS"))
    if getattr(cli_ns, "materials", None):
        materials_path = _to_path(cli_ns.materials)
    coefficients_path = _to_path(env.get("FENCEQUOTE_COEFFICIENTS"))
    if getattr(cli_ns, "coefficients", None):
        coefficients_path = _to_path(cli_ns.coefficients)
    output_dir = _to_path(env.get("FENCEQUOTE_OUTPUT_DIR")) or (base_dir / "outputs").resolve()
    if getattr(cli_ns, "output_dir", None):
        output_dir = _to_path(cli_ns.output_dir) or output_dir

    write_pdf = _flag(env.get("FENCEQUOTE_WRITE_PDF"))
    if getattr(cli_ns, "pdf", False):
        write_pdf = True
    verbose = bool(getattr(cli_ns, "verbose", False))

    return Config(
        base_dir=base_dir,
        region=region,
        hourly_rate=float(hourly_rate),
        default_markup_percent=float(markup),
        tax_percent=float(tax),
        currency_symbol=symbol,
        materials_path=materials_path,
        coefficients_path=coefficients_path,
        output_dir=output_dir,
        write_pdf=write_pdf,
        verbose=verbose,
    )


__all__ = ["Config", "load_config", "DEFAULT_MARKUP_PERCENT", "DEFAULT_TAX_PERCENT"]
