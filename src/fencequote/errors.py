"""Exception types raised by the quote engine and its collaborators."""

from __future__ import annotations

from typing import Dict


class FenceQuoteError(Exception):
    """Base class for errors surfaced to callers of the quote engine."""


class MissingMaterialError(FenceQuoteError):
    """A required material category has no active price-list entry."""

    def __init__(self, fence_type: str, category: str) -> None:
        self.fence_type = str(fence_type)
        self.category = str(category)
        super().__init__(
            f"No active '{self.category}' material in the price list for fence type "
            f"'{self.fence_type}'; add one before calculating a quote"
        )


class InvalidInputError(FenceQuoteError, ValueError):
    """A structural precondition on engine input was violated."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class SchemaValidationError(FenceQuoteError, ValueError):
    """Raised by ``validate_or_raise`` when a payload fails its schema."""

    def __init__(self, schema_name: str, errors: Dict[str, str]) -> None:
        self.schema_name = schema_name
        self.errors = dict(errors)
        detail = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"{schema_name} validation failed: {detail}")


class CatalogError(FenceQuoteError, ValueError):
    """A material price list could not be read into usable records."""


class NonFiniteAmountError(FenceQuoteError, ValueError):
    """A NaN or infinite amount was about to be persisted."""

    def __init__(self, path: str, value: object) -> None:
        self.path = path
        self.value = value
        super().__init__(f"Refusing to persist non-finite value {value!r} at {path}")


__all__ = [
    "FenceQuoteError",
    "MissingMaterialError",
    "InvalidInputError",
    "SchemaValidationError",
    "CatalogError",
    "NonFiniteAmountError",
]
