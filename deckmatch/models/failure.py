"""
Failure Taxonomy.

Only two conditions are raised by the matching core:
- CatalogParseError: the catalog source is malformed or oversized
- MatchStateError: a caller broke the DeckEntryMatch transition contract

Missing and ambiguous cards are NOT errors. They are reported as
MatchStatus.NOT_FOUND and MatchStatus.AMBIGUOUS.
"""

from enum import Enum

from pydantic import BaseModel, Field

# Characters of offending input kept for operator diagnostics
SNIPPET_LENGTH = 200


class FailureKind(str, Enum):
    """Classification of failure types."""

    INVALID_INPUT = "invalid_input"
    INPUT_TOO_LARGE = "input_too_large"
    INVALID_STATE = "invalid_state"
    UNKNOWN = "unknown"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail for API responses."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class CatalogParseError(KnownError):
    """
    Raised when catalog input cannot be turned into variants.

    Recoverable: the caller may fall back to a previously built Catalog.
    The snippet holds the start of the offending input.
    """

    def __init__(
        self,
        message: str,
        raw: str = "",
        kind: FailureKind = FailureKind.INVALID_INPUT,
        status_code: int = 422,
    ):
        self.snippet = raw[:SNIPPET_LENGTH]
        super().__init__(
            kind=kind,
            message=message,
            detail=self.snippet or None,
            suggestion="Check that the catalog page or export has Name, Set, SKU, "
            "Card Type and Price columns.",
            status_code=status_code,
        )


class MatchStateError(ValueError):
    """Raised when a DeckEntryMatch transition breaks its contract."""

    def __init__(self, card_name: str, reason: str) -> None:
        self.card_name = card_name
        self.reason = reason
        super().__init__(f"Invalid match transition for '{card_name}': {reason}")
