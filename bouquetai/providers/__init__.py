"""Provider adapter package.

Module split:
    - `base`: `ProviderAdapter` capability interface and shared helpers.
    - `openai_adapter`: synchronous family (single request/response).
    - `yandex_adapter`: asynchronous family (submit, then poll).
"""

from bouquetai.providers.base import ProviderAdapter
from bouquetai.providers.openai_adapter import OpenAIAdapter
from bouquetai.providers.yandex_adapter import YandexAdapter
from bouquetai.transport import RetryTransport
from bouquetai.types import ProviderFamily


def build_adapters(transport: RetryTransport | None = None) -> dict[ProviderFamily, ProviderAdapter]:
    """Return the adapter registry keyed by provider family."""
    transport = transport or RetryTransport()
    return {
        ProviderFamily.SYNCHRONOUS: OpenAIAdapter(transport),
        ProviderFamily.ASYNCHRONOUS: YandexAdapter(transport),
    }


__all__ = ["ProviderAdapter", "OpenAIAdapter", "YandexAdapter", "build_adapters"]
