from __future__ import annotations


class CartValidationError(Exception):
    """Raised when a cart cannot be priced as submitted."""

    def __init__(self, message: str, issues: list[str] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []


class OfferValidationError(Exception):
    """Raised when an offer record or offer snapshot is malformed."""

    def __init__(self, message: str, issues: list[str] | None = None) -> None:
        super().__init__(message)
        self.issues = issues or []


class OfferDataUnavailableError(Exception):
    """Raised when the offer catalog cannot be read."""

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class OfferNotFoundError(Exception):
    pass
