import argparse
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Sequence

from dotenv import load_dotenv

from .api import quote_from_form
from .catalog import load_materials, missing_categories
from .coefficients import default_height, load_coefficients
from .config import Config
from .config import load_config as load_runtime_config
from .errors import FenceQuoteError
from .models import VARIANT_ORDER, FenceType, TerrainType
from .pdf import write_quote_pdf
from .records import write_quote_record
from .regions import region_codes
from .reporting import make_summary_text
from .validation import settings_from, validate

logger = logging.getLogger(__name__)

QUOTE_JSON = "quote.json"
QUOTE_PDF = "quote.pdf"


def _log_field_errors(title: str, errors: Dict[str, str]) -> None:
    logger.error("%s:", title)
    for field, message in errors.items():
        logger.error(" - %s: %s", field, message)


def _form_from_args(args: argparse.Namespace) -> Dict[str, object]:
    height = args.height
    if height is None and args.fence_type in {f.value for f in FenceType}:
        height = default_height(args.fence_type)
    form: Dict[str, object] = {
        "fence_type": args.fence_type,
        "length": args.length,
        "height": height,
        "gates_standard": args.gates_standard,
        "gates_large": args.gates_large,
        "remove_old": args.remove_old,
        "terrain": args.terrain,
        "notes": args.notes or "",
    }
    if args.client_name:
        form["client_name"] = args.client_name
    if args.client_address:
        form["client_address"] = args.client_address
    return form


def _settings_payload(args: argparse.Namespace, cfg: Config) -> Dict[str, object]:
    # raw CLI text is validated like any other form input
    return {
        "hourly_rate": args.hourly_rate if args.hourly_rate is not None else cfg.hourly_rate,
        "default_markup_percent": args.markup if args.markup is not None else cfg.default_markup_percent,
        "tax_percent": args.tax if args.tax is not None else cfg.tax_percent,
    }


def run(args: argparse.Namespace, runtime_config: Optional[Config] = None) -> int:
    cfg = runtime_config or load_runtime_config(os.environ, args)

    settings_result = validate("settings", _settings_payload(args, cfg))
    if not settings_result.success:
        _log_field_errors("Invalid calculator settings", settings_result.errors)
        return 2
    settings = settings_from(settings_result.data)

    materials = load_materials(cfg.materials_path)
    coefficients = load_coefficients(cfg.coefficients_path)
    if args.fence_type in {f.value for f in FenceType}:
        gaps = missing_categories(materials, args.fence_type, coefficients)
        if gaps:
            logger.warning("Price list has no active %s for %s", ", ".join(gaps), args.fence_type)

    outcome = quote_from_form(_form_from_args(args), materials, settings, coefficients, selected=args.variant)
    if not outcome.ok:
        _log_field_errors("Invalid quote inputs", outcome.validation.errors)
        return 2

    quote = outcome.quote
    output_dir = cfg.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = write_quote_record(quote, output_dir / QUOTE_JSON)
    logger.info(make_summary_text(quote.variants, quote.selected_variant, cfg.currency_symbol))
    logger.info("Outputs:")
    logger.info(" - %s", json_path)
    if cfg.write_pdf:
        pdf_path = write_quote_pdf(quote, output_dir / QUOTE_PDF, symbol=cfg.currency_symbol)
        logger.info(" - %s", pdf_path)
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Price a fence job into budget, standard and premium quotes")
    parser.add_argument("--fence-type", required=True, help="One of: " + ", ".join(f.value for f in FenceType))
    parser.add_argument("--length", required=True, help="Fence length in feet")
    parser.add_argument("--height", help="Fence height in feet (defaults to the fence type's usual height)")
    parser.add_argument("--gates-standard", default="0", help="Number of walk gates")
    parser.add_argument("--gates-large", default="0", help="Number of double/driveway gates")
    parser.add_argument("--remove-old", action="store_true", help="Include removal of the existing fence")
    parser.add_argument(
        "--terrain",
        default=TerrainType.FLAT.value,
        help="One of: " + ", ".join(t.value for t in TerrainType),
    )
    parser.add_argument("--notes", help="Free-text notes printed on the quote")
    parser.add_argument("--client-name", help="Client name printed on the quote")
    parser.add_argument("--client-address", help="Job site address printed on the quote")
    parser.add_argument("--materials", help="Price list CSV/XLSX (defaults to the bundled sample)")
    parser.add_argument("--coefficients", help="JSON file overriding construction coefficients")
    parser.add_argument("--region", choices=region_codes(), help="Region used for default rate and currency")
    parser.add_argument("--currency", help="ISO currency code for printed amounts, e.g. EUR (overrides the region)")
    parser.add_argument("--hourly-rate", help="Labor rate per hour")
    parser.add_argument("--markup", help="Default markup percent")
    parser.add_argument("--tax", help="Tax percent")
    parser.add_argument(
        "--variant",
        choices=[v.value for v in VARIANT_ORDER],
        default="standard",
        help="Variant to select for the record and PDF",
    )
    parser.add_argument("--output-dir", help="Directory for generated outputs")
    parser.add_argument("--pdf", action="store_true", help="Also render quote.pdf")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(Path.cwd() / ".env")
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        return run(args, runtime_config=runtime_cfg)
    except (FenceQuoteError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 2
    except Exception:  # pragma: no cover
        logger.exception("Fatal error during quote generation")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
