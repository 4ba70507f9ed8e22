from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from .coefficients import DEFAULT_COEFFICIENTS, Coefficients
from .models import CalculatorSettings, MaterialRecord, Quote, QuoteVariant, VariantType
from .pricing import calculate_quote
from .validation import ValidationResult, quote_inputs_from, sanitize, validate

_CLIENT_FIELDS = ("client_name", "client_email", "client_phone", "client_address")


@dataclass
class QuoteOutcome:
    validation: ValidationResult
    variants: Optional[List[QuoteVariant]] = None
    quote: Optional[Quote] = None

    @property
    def ok(self) -> bool:
        return self.validation.success and self.variants is not None


def _has_client_details(form: Mapping[str, Any]) -> bool:
    return any(str(form.get(name) or "").strip() for name in _CLIENT_FIELDS)


def quote_from_form(
    form: Mapping[str, Any],
    materials: Iterable[MaterialRecord],
    settings: CalculatorSettings,
    coefficients: Coefficients = DEFAULT_COEFFICIENTS,
    selected: VariantType | str = VariantType.STANDARD,
) -> QuoteOutcome:
    """Validate a raw quote form and price it.

    A form carrying any client detail is checked against ``quote_form``, so
    the name becomes required and email, phone and length limits apply. A bare
    job form is checked against ``quote_inputs`` only.

    Field problems come back on ``outcome.validation.errors`` and leave
    ``variants`` as ``None``. Engine errors such as a missing material are
    raised to the caller.
    """

    schema = "quote_inputs"
    if isinstance(form, Mapping) and _has_client_details(form):
        schema = "quote_form"
        form = {key: value for key, value in form.items() if not (key in _CLIENT_FIELDS and value is None)}
    result = validate(schema, form)
    if not result.success:
        return QuoteOutcome(validation=result)

    inputs = quote_inputs_from(result.data)
    variants = calculate_quote(inputs, materials, settings, coefficients)
    client = {name: sanitize(result.data.get(name)) for name in _CLIENT_FIELDS}
    quote = Quote(inputs=inputs, variants=list(variants), selected_variant=VariantType(selected), **client)
    return QuoteOutcome(validation=result, variants=variants, quote=quote)


__all__ = ["QuoteOutcome", "quote_from_form"]
