"""Capability interface shared by provider adapters.

The orchestrator only talks to `ProviderAdapter`; each adapter owns its own
protocol (single request/response or submit-then-poll).
"""

from typing import Protocol

import requests

from bouquetai.errors import FormatError
from bouquetai.types import BouquetConfig, CancellationToken, ProviderFamily


class ProviderAdapter(Protocol):
    """Minimal interface required by `bouquetai.core.engine`."""

    family: ProviderFamily

    def require_credentials(self, bouquet: BouquetConfig) -> None:
        """Raise `ValidationError` when the family's credentials are missing."""
        ...

    def describe(self, bouquet: BouquetConfig, token: CancellationToken | None = None) -> str:
        """Return a bouquet description."""
        ...

    def render_images(
        self, bouquet: BouquetConfig, token: CancellationToken | None = None
    ) -> list[str]:
        """Return image references (URLs or `data:` URLs)."""
        ...

    def suggest(self, bouquet: BouquetConfig, token: CancellationToken | None = None) -> str:
        """Return raw model text expected to contain suggestion JSON."""
        ...


def read_json(response: requests.Response) -> dict:
    """Decode a 2xx response body, mapping garbage to `FormatError`."""
    try:
        data = response.json()
    except ValueError as exc:
        raise FormatError("Unexpected response format from server") from exc
    if not isinstance(data, dict):
        raise FormatError("Unexpected response format from server")
    return data
