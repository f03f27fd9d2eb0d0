"""Data contracts shared by adapters, recovery and the orchestrator.

Architectural role:
    Defines the immutable configuration snapshot passed into one pipeline call,
    the result types it produces, and the cancellation primitive honored at every
    suspension point.

Determinism:
    All classes are structural. `BouquetConfig.family` is resolved once in
    `__post_init__` so no call site re-derives the provider from the model id.
"""

import enum
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

from bouquetai import config
from bouquetai.errors import CancelledError, FormatError, ValidationError


class ProviderFamily(enum.Enum):
    """Protocol family of a model identifier."""

    SYNCHRONOUS = "synchronous"
    ASYNCHRONOUS = "asynchronous"

    @classmethod
    def from_model(cls, model_id: str) -> "ProviderFamily":
        if (model_id or "").startswith(config.ASYNC_MODEL_PREFIX):
            return cls.ASYNCHRONOUS
        return cls.SYNCHRONOUS


# camelCase keys accepted by `BouquetConfig.from_dict`.
_FIELD_ALIASES = {
    "customFlowers": "flowers",
    "custom_flowers": "flowers",
    "selectedModel": "selected_model",
    "imageModel": "image_model",
    "systemPrompt": "system_prompt",
    "openaiKey": "openai_key",
    "dalleKey": "dalle_key",
    "yandexKey": "yandex_key",
    "yandexFolderId": "yandex_folder_id",
    "yandexGptPrompt": "yandex_gpt_prompt",
    "yandexArtPrompt": "yandex_art_prompt",
}


@dataclass(frozen=True)
class BouquetConfig:
    """Immutable snapshot of the user's bouquet settings for one pipeline run.

    Attributes:
        occasion: Occasion text (for example "Birthday").
        recipient: Recipient text (for example "Mom").
        flowers: Ordered flower names; must be non-empty for bouquet generation.
        selected_model: Text-model identifier; decides the provider family.
        image_model: Image-model identifier (synchronous family only).
        temperature: Sampling temperature in [0.0, 1.0].
        system_prompt: System instruction for description requests.
        openai_key: Bearer token for the synchronous family.
        dalle_key: Optional image-only token; falls back to `openai_key`.
        yandex_key: Api-Key for the asynchronous family.
        yandex_folder_id: Folder identifier for the asynchronous family.
        yandex_gpt_prompt: Suggestion template with `{occasion}`/`{recipient}`.
        yandex_art_prompt: Image template with `{flowers}`/`{occasion}`/`{recipient}`.
    """

    occasion: str = ""
    recipient: str = ""
    flowers: tuple[str, ...] = ()
    selected_model: str = config.DEFAULT_TEXT_MODEL
    image_model: str = config.DEFAULT_IMAGE_MODEL
    temperature: float = config.DEFAULT_TEMPERATURE
    system_prompt: str = config.DEFAULT_SYSTEM_PROMPT
    openai_key: str | None = None
    dalle_key: str | None = None
    yandex_key: str | None = None
    yandex_folder_id: str | None = None
    yandex_gpt_prompt: str = (
        "Suggest two flower combinations for a {occasion} bouquet for {recipient}. "
        "Each combination must contain 3-5 flowers. Respond only with JSON: "
        '{"suggestions": [["flower1", "flower2", "flower3"], ["flower1", "flower2", "flower3"]]}'
    )
    yandex_art_prompt: str = (
        "A beautiful flower bouquet of {flowers} for {occasion}, a gift for {recipient}. "
        "Professional studio photo, soft light, white background."
    )
    family: ProviderFamily = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        # Copy-on-read: callers may pass a mutable list or a single name.
        flowers = [self.flowers] if isinstance(self.flowers, str) else self.flowers
        object.__setattr__(self, "flowers", tuple(str(f) for f in flowers if str(f).strip()))
        try:
            temperature = float(self.temperature)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid temperature: {self.temperature!r}")
        if not 0.0 <= temperature <= 1.0:
            raise ValidationError("Temperature must be between 0.0 and 1.0")
        object.__setattr__(self, "temperature", temperature)
        object.__setattr__(self, "family", ProviderFamily.from_model(self.selected_model))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BouquetConfig":
        """Build a config from UI-store style data (camelCase or snake_case keys).

        Unknown keys are ignored. `None` values fall back to field defaults.
        """
        known = {f for f in cls.__dataclass_fields__ if f != "family"}
        kwargs = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in known and value is not None:
                kwargs[name] = value
        return cls(**kwargs)

    @property
    def image_key(self) -> str | None:
        return self.dalle_key or self.openai_key


@dataclass(frozen=True)
class GenerationResult:
    """Final output of one successful `generate_bouquet` run."""

    flower_list: tuple[str, ...]
    description: str
    images: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "flowerList": list(self.flower_list),
            "description": self.description,
            "images": list(self.images),
        }


@dataclass(frozen=True)
class SuggestionSet:
    """Validated flower combinations, each with 3-5 names."""

    suggestions: tuple[tuple[str, ...], ...]

    def to_dict(self) -> dict:
        return {"suggestions": [list(s) for s in self.suggestions]}


@dataclass(frozen=True)
class Operation:
    """Asynchronous provider handle for a submitted image job."""

    id: str
    done: bool = False
    error: Mapping[str, Any] | None = None
    image: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], operation_id: str = "") -> "Operation":
        if not isinstance(payload, Mapping):
            raise FormatError("Invalid operation response: not an object")
        response = payload.get("response") or {}
        error = payload.get("error") or None
        if error is not None and not isinstance(error, Mapping):
            error = {"message": str(error)}
        return cls(
            id=str(payload.get("id") or operation_id),
            done=bool(payload.get("done")),
            error=error,
            image=response.get("image") if isinstance(response, Mapping) else None,
        )


class CancellationToken:
    """Cooperative cancellation checked at every suspension point."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError("Generation was cancelled")

    def wait(self, seconds: float) -> None:
        """Sleep for `seconds`, waking early and raising if cancelled."""
        if self._event.wait(seconds):
            raise CancelledError("Generation was cancelled")


def pause(seconds: float, token: CancellationToken | None = None) -> None:
    """Suspend the pipeline; the only sleep used by transport and polling."""
    if token is not None:
        token.wait(seconds)
    else:
        time.sleep(seconds)
