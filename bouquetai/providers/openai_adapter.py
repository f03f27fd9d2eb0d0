"""Synchronous provider adapter (OpenAI-compatible chat and image APIs).

Model invocation flow:
    `describe`  -> chat completion -> `choices[0].message.content`
    `suggest`   -> chat completion with the florist JSON instruction
    `render_images` -> one image-generation call -> `data[*].url`

All calls go through the relay (`config.RELAY_BASE_URL`) using
`RetryTransport`, so 429/5xx are retried and other errors arrive as
`bouquetai.errors` exceptions with the provider's `error.message`.
"""

import logging

from bouquetai import config
from bouquetai.errors import FormatError, ProviderError, ValidationError
from bouquetai.prompting.prompt_builder import (
    build_description_messages,
    build_image_prompt,
    build_suggestion_messages,
)
from bouquetai.providers.base import read_json
from bouquetai.transport import RetryTransport
from bouquetai.types import BouquetConfig, CancellationToken, ProviderFamily


logger = logging.getLogger(__name__)


def image_count(image_model: str) -> int:
    """Pro-tier models accept one image per request; others get three."""
    return 1 if image_model in config.PRO_IMAGE_MODELS else 3


def _bearer(key: str) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {key}",
    }


class OpenAIAdapter:
    """Chat-completion and image-generation adapter for the synchronous family."""

    family = ProviderFamily.SYNCHRONOUS

    def __init__(self, transport: RetryTransport | None = None, base_url: str = config.RELAY_BASE_URL):
        self.transport = transport or RetryTransport()
        self.base_url = base_url.rstrip("/")

    def _url(self, name: str) -> str:
        return self.base_url + config.RELAY_PATHS[name]

    def require_credentials(self, bouquet: BouquetConfig) -> None:
        if not bouquet.openai_key:
            raise ValidationError("OpenAI API key is required")

    # ---------------------------------------------------------
    # Text
    # ---------------------------------------------------------

    def _chat(self, payload: dict, bouquet: BouquetConfig, token: CancellationToken | None) -> str:
        response = self.transport.send(
            self._url("openai_chat"),
            json=payload,
            headers=_bearer(bouquet.openai_key),
            token=token,
        )
        data = read_json(response)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        if not content or not isinstance(content, str):
            logger.debug("Chat response without content: %r", data)
            raise FormatError("Invalid response format")
        return content

    def describe(self, bouquet: BouquetConfig, token: CancellationToken | None = None) -> str:
        payload = {
            "model": bouquet.selected_model,
            "messages": build_description_messages(bouquet),
            "temperature": bouquet.temperature,
            "max_tokens": config.CHAT_MAX_TOKENS,
        }
        return self._chat(payload, bouquet, token).strip()

    def suggest(self, bouquet: BouquetConfig, token: CancellationToken | None = None) -> str:
        payload = {
            "model": bouquet.selected_model,
            "messages": build_suggestion_messages(bouquet),
            "temperature": config.SUGGESTION_TEMPERATURE,
            "max_tokens": config.CHAT_MAX_TOKENS,
        }
        return self._chat(payload, bouquet, token)

    # ---------------------------------------------------------
    # Images
    # ---------------------------------------------------------

    def render_images(
        self, bouquet: BouquetConfig, token: CancellationToken | None = None
    ) -> list[str]:
        count = image_count(bouquet.image_model)
        payload = {
            "model": bouquet.image_model,
            "prompt": build_image_prompt(bouquet),
            "n": count,
            "size": config.IMAGE_SIZE,
            "quality": config.IMAGE_QUALITY,
            "style": config.IMAGE_STYLE,
        }
        logger.info("Requesting %d image(s) from %s", count, bouquet.image_model)

        response = self.transport.send(
            self._url("openai_images"),
            json=payload,
            headers=_bearer(bouquet.image_key),
            token=token,
        )
        data = read_json(response)

        images = [
            item["url"]
            for item in data.get("data") or []
            if isinstance(item, dict) and item.get("url")
        ]
        if not images:
            raise ProviderError("No image was generated", status=response.status_code, detail=data)
        return images
