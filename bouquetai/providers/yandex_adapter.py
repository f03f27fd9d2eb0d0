"""Asynchronous provider adapter (YandexGPT completions + YandexART images).

Processing flow for `render_images`:
    1. Build the YandexART submission payload from the art prompt template.
    2. Submit the async generation job through the relay (retrying 429/5xx).
    3. Poll the operation endpoint once per `poll_interval` seconds, at most
       `poll_attempts` times.
    4. Decode the finished operation's base64 image into a `data:` URL.

Polling policy:
    - A failed status check (HTTP error or network) is logged and counts against
      the attempt budget like a not-yet-done check.
    - `done` + `error` -> `ProviderError`.
    - `done` + `response.image` -> single-image result.
    - Budget exhausted -> `PollTimeoutError`.

Description:
    The asynchronous family does not call a model for the description; it is
    rendered locally by `prompt_builder.build_local_description`.

Poll state (operation id, attempt counter) lives on the call stack, so
concurrent `render_images` calls never share it.
"""

import base64
import binascii
import logging

from bouquetai import config
from bouquetai.errors import (
    FormatError,
    NotFoundError,
    PollTimeoutError,
    ProviderError,
    ValidationError,
)
from bouquetai.prompting.prompt_builder import build_local_description, fill_template
from bouquetai.providers.base import read_json
from bouquetai.transport import RetryTransport
from bouquetai.types import BouquetConfig, CancellationToken, Operation, ProviderFamily, pause


logger = logging.getLogger(__name__)

ALTERNATIVE_STATUS_FINAL = "ALTERNATIVE_STATUS_FINAL"


def model_uri(folder_id: str, model_id: str) -> str:
    """Map a YandexGPT model id to its `gpt://` URI."""
    template = config.YANDEX_GPT_MODEL_URIS.get(model_id)
    if template is None:
        raise ValidationError("Invalid YandexGPT model")
    return template.format(folder_id=folder_id)


def image_data_url(image_b64: str, mime_type: str = config.IMAGE_MIME_TYPE) -> str:
    """Verify a base64 payload and wrap it as a displayable `data:` URL."""
    if not isinstance(image_b64, str):
        raise FormatError("Invalid image payload: not base64")
    try:
        base64.b64decode(image_b64, validate=True)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise FormatError("Invalid image payload: not base64") from exc
    return f"data:{mime_type};base64,{image_b64}"


class YandexAdapter:
    """Submit/poll adapter for the asynchronous family."""

    family = ProviderFamily.ASYNCHRONOUS

    def __init__(
        self,
        transport: RetryTransport | None = None,
        base_url: str = config.RELAY_BASE_URL,
        poll_attempts: int = config.POLL_ATTEMPTS,
        poll_interval: float = config.POLL_INTERVAL_SECONDS,
    ):
        self.transport = transport or RetryTransport()
        self.base_url = base_url.rstrip("/")
        self.poll_attempts = max(1, poll_attempts)
        self.poll_interval = poll_interval

    def _url(self, name: str) -> str:
        return self.base_url + config.RELAY_PATHS[name]

    def require_credentials(self, bouquet: BouquetConfig) -> None:
        if not bouquet.yandex_key or not bouquet.yandex_folder_id:
            raise ValidationError("YandexGPT API key and Folder ID are required")

    @staticmethod
    def _headers(bouquet: BouquetConfig) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Api-Key {bouquet.yandex_key}",
            "x-folder-id": bouquet.yandex_folder_id,
        }

    # ---------------------------------------------------------
    # Text
    # ---------------------------------------------------------

    def describe(self, bouquet: BouquetConfig, token: CancellationToken | None = None) -> str:
        description = build_local_description(bouquet)
        logger.debug("Using predefined description: %s", description)
        return description

    def suggest(self, bouquet: BouquetConfig, token: CancellationToken | None = None) -> str:
        payload = {
            "modelUri": model_uri(bouquet.yandex_folder_id, bouquet.selected_model),
            "completionOptions": {
                "stream": False,
                "temperature": config.SUGGESTION_TEMPERATURE,
                "maxTokens": config.YANDEX_MAX_TOKENS,
            },
            "messages": [
                {"role": "user", "text": fill_template(bouquet.yandex_gpt_prompt, bouquet)},
            ],
        }

        response = self.transport.send(
            self._url("yandex_completion"),
            json=payload,
            headers=self._headers(bouquet),
            token=token,
        )
        data = read_json(response)

        result = data.get("result") if isinstance(data, dict) else None
        if not result or not isinstance(result, dict):
            raise FormatError("Invalid API response: missing result")

        alternatives = result.get("alternatives")
        alternative = alternatives[0] if isinstance(alternatives, list) and alternatives else None
        if not isinstance(alternative, dict) or alternative.get("status") != ALTERNATIVE_STATUS_FINAL:
            raise FormatError("Invalid API response: no valid alternative")

        message = alternative.get("message")
        text = message.get("text") if isinstance(message, dict) else None
        if not text or not isinstance(text, str):
            raise FormatError("Invalid API response: no text in response")
        return text

    # ---------------------------------------------------------
    # Images
    # ---------------------------------------------------------

    def render_images(
        self, bouquet: BouquetConfig, token: CancellationToken | None = None
    ) -> list[str]:
        headers = self._headers(bouquet)
        operation_id = self._submit(bouquet, headers, token)
        operation = self._poll(operation_id, headers, token)

        if operation.error:
            message = operation.error.get("message") or "Unknown error"
            raise ProviderError(f"YandexART error: {message}", detail=dict(operation.error))

        if not operation.image:
            raise ProviderError("No images were generated")

        logger.info("Operation %s completed with an image", operation_id)
        return [image_data_url(operation.image)]

    def _submit(self, bouquet: BouquetConfig, headers: dict, token: CancellationToken | None) -> str:
        prompt = fill_template(bouquet.yandex_art_prompt, bouquet)
        payload = {
            "modelUri": config.YANDEX_ART_MODEL_URI.format(folder_id=bouquet.yandex_folder_id),
            "messages": [{"text": prompt, "weight": "1"}],
            "generationOptions": {
                "mimeType": config.IMAGE_MIME_TYPE,
                "aspectRatio": {"widthRatio": "1", "heightRatio": "1"},
            },
        }
        logger.debug("YandexART submission prompt: %s", prompt)

        response = self.transport.send(
            self._url("yandex_images"),
            json=payload,
            headers=headers,
            token=token,
        )
        data = read_json(response)

        operation_id = data.get("id") if isinstance(data, dict) else None
        if not operation_id:
            raise FormatError("Invalid response: missing operation ID")
        return str(operation_id)

    def _poll(self, operation_id: str, headers: dict, token: CancellationToken | None) -> Operation:
        url = self._url("yandex_operations") + operation_id
        status_headers = {k: v for k, v in headers.items() if k != "Content-Type"}

        for attempt in range(1, self.poll_attempts + 1):
            logger.debug(
                "Checking operation %s (attempt %d/%d)",
                operation_id, attempt, self.poll_attempts,
            )
            try:
                response = self.transport.send(
                    url,
                    method="GET",
                    headers=status_headers,
                    max_attempts=1,
                    token=token,
                )
                operation = Operation.from_payload(read_json(response), operation_id)
            except (ProviderError, NotFoundError, FormatError) as exc:
                logger.warning(
                    "Operation status check failed (attempt %d/%d): %s",
                    attempt, self.poll_attempts, exc,
                )
            else:
                if operation.done:
                    return operation

            if attempt < self.poll_attempts:
                pause(self.poll_interval, token)

        raise PollTimeoutError(
            "Image generation timed out",
            operation_id=operation_id,
            attempts=self.poll_attempts,
        )
