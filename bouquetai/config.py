"""Provider/runtime configuration for the generation pipeline.

Architectural role:
    Centralizes endpoint selection, retry/poll budgets, default bouquet settings,
    and credential lookup for `bouquetai.transport`, `bouquetai.providers` and
    the relay in `bouquetai.api.http_api`.

Model call flow integration:
    - Adapters build URLs from `RELAY_BASE_URL` (same-origin proxy paths).
    - The relay forwards to `OPENAI_API_URL` and the `YANDEX_*_URL` endpoints.
    - `transport.RetryTransport` consumes `MAX_ATTEMPTS` and `RETRY_DELAY_SECONDS`.
    - `yandex_adapter` consumes `POLL_ATTEMPTS` and `POLL_INTERVAL_SECONDS`.

Determinism:
    Deterministic for a fixed process environment and key files. Values are resolved
    at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None`; the orchestrator turns it into
    a validation error before any outbound call.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"

# Same-origin relay that adapters call instead of the providers directly.
RELAY_BASE_URL = os.getenv("BOUQUET_RELAY_URL", "http://127.0.0.1:5000").rstrip("/")

RELAY_PATHS = {
    "openai_chat": "/api/openai/v1/chat/completions",
    "openai_images": "/api/openai/v1/images/generations",
    "yandex_completion": "/api/yandex/v1/completion",
    "yandex_images": "/api/yandex/v1/images/generations",
    "yandex_operations": "/api/yandex/v1/operations/",
}

# Upstream endpoints used by the relay.
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1").rstrip("/")
YANDEX_COMPLETION_URL = "https://llm.api.cloud.yandex.net/foundationModels/v1/completion"
YANDEX_IMAGE_URL = "https://llm.api.cloud.yandex.net/foundationModels/v1/imageGenerationAsync"
YANDEX_OPERATIONS_URL = "https://llm.api.cloud.yandex.net/operations/"

# Retry transport budget.
MAX_ATTEMPTS = int(os.getenv("BOUQUET_MAX_ATTEMPTS", "3"))
RETRY_DELAY_SECONDS = float(os.getenv("BOUQUET_RETRY_DELAY", "2.0"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("BOUQUET_REQUEST_TIMEOUT", "120"))
RELAY_TIMEOUT_SECONDS = float(os.getenv("BOUQUET_RELAY_TIMEOUT", "60"))

# Operation polling budget (one check per interval).
POLL_ATTEMPTS = int(os.getenv("BOUQUET_POLL_ATTEMPTS", "30"))
POLL_INTERVAL_SECONDS = float(os.getenv("BOUQUET_POLL_INTERVAL", "1.0"))

# Model catalog.
TEXT_MODELS = {
    "gpt-4": "GPT-4 (Recommended)",
    "gpt-3.5-turbo": "GPT-3.5 Turbo",
    "yandexgpt-pro": "YandexGPT Pro",
    "yandexgpt-pro-32k": "YandexGPT Pro 32k",
}

IMAGE_MODELS = {
    "dall-e-3": "DALL-E 3 (Recommended)",
    "dall-e-2": "DALL-E 2",
    "yandex-art": "YandexART",
}

# Image models that only accept a single image per request.
PRO_IMAGE_MODELS = frozenset({"dall-e-3"})

ASYNC_MODEL_PREFIX = "yandex"

YANDEX_GPT_MODEL_URIS = {
    "yandexgpt-pro": "gpt://{folder_id}/yandexgpt/rc",
    "yandexgpt-pro-32k": "gpt://{folder_id}/yandexgpt-32k/rc",
}
YANDEX_ART_MODEL_URI = "art://{folder_id}/yandex-art/latest"

# Fixed generation parameters.
CHAT_MAX_TOKENS = 300
YANDEX_MAX_TOKENS = "2000"
SUGGESTION_TEMPERATURE = 0.7
IMAGE_SIZE = "1024x1024"
IMAGE_QUALITY = "hd"
IMAGE_STYLE = "natural"
IMAGE_MIME_TYPE = "image/jpeg"

# Defaults mirrored by `BouquetConfig`.
DEFAULT_TEXT_MODEL = os.getenv("BOUQUET_TEXT_MODEL", "gpt-4")
DEFAULT_IMAGE_MODEL = os.getenv("BOUQUET_IMAGE_MODEL", "dall-e-3")
DEFAULT_TEMPERATURE = 0.7
DEFAULT_SYSTEM_PROMPT = (
    "You are a professional florist with extensive knowledge of flower arrangements."
)


def load_key(name):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable `<NAME>_API_KEY` (for example `openai` ->
           `OPENAI_API_KEY`).
        2. Raw file contents at `config/<name>.key`.

    Args:
        name: Provider label or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None`/empty name returns `None`.
        - Missing or empty file returns `None`.
    """
    if not name:
        return None
    env_value = os.getenv(f"{name.upper()}_API_KEY")
    if env_value:
        return env_value.strip()
    path = os.path.join("config", f"{name.lower()}.key")
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
