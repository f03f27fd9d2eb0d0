"""Error taxonomy for the generation pipeline.

Lower layers (transport, adapters, recovery) raise the specific classes below.
`bouquetai.core.engine` catches every `BouquetError` at its boundary and re-raises
it as a single `GenerationError` carrying display-ready text.
"""

from typing import Any


class BouquetError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BouquetError):
    """Missing or invalid caller input. Never retried."""


class NotFoundError(BouquetError):
    """Endpoint returned 404. Never retried."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ProviderError(BouquetError):
    """Terminal provider failure (non-2xx or an explicit error payload)."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.detail = detail


class TransientError(ProviderError):
    """429, 5xx or network failure; eligible for retry."""


class FormatError(BouquetError):
    """Response is missing an expected field or cannot be interpreted."""


class SuggestionParseError(FormatError):
    """Model text is not valid JSON."""


class SuggestionSchemaError(FormatError):
    """Model text is valid JSON with the wrong shape."""


class PollTimeoutError(BouquetError):
    """Operation did not complete within the poll budget."""

    def __init__(self, message: str, operation_id: str | None = None, attempts: int = 0) -> None:
        super().__init__(message)
        self.operation_id = operation_id
        self.attempts = attempts


class CancelledError(BouquetError):
    """The caller cancelled the pipeline at a suspension point."""


class GenerationError(Exception):
    """Single failure channel surfaced by the orchestrator.

    Attributes:
        message: Human-readable text suitable for direct display.
        kind: Name of the underlying error class (for example `ValidationError`).
    """

    def __init__(self, message: str, kind: str = "GenerationError") -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
