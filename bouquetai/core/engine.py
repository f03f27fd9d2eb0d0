"""Generation orchestrator: the single entrypoint used by API/CLI layers.

Architectural role:
    Turns one immutable `BouquetConfig` snapshot into either a `SuggestionSet` /
    `GenerationResult` or a single `GenerationError`.

Control-flow model:
    `generate_suggestions`:
        1. Pick the adapter registered for `bouquet.family`.
        2. Check the family's credentials.
        3. `adapter.suggest` -> raw model text.
        4. `recovery.parse_suggestions` -> validated `SuggestionSet`.

    `generate_bouquet`:
        1. Require a non-empty flower selection (before any outbound call).
        2. Pick the adapter and check credentials.
        3. `adapter.describe`, then `adapter.render_images`.
        4. Assemble the `GenerationResult`.

Error handling strategy:
    Every `BouquetError` is re-raised as `GenerationError` with display-ready text
    and the original class name as `kind`. Unexpected exceptions are logged and
    replaced with a generic message so internals never leak to callers.

Determinism:
    Adapter selection and request assembly are deterministic for a fixed config.
    Model output is not.
"""

import functools
import logging
from typing import Mapping

from bouquetai.errors import BouquetError, GenerationError, NotFoundError, ValidationError
from bouquetai.providers import ProviderAdapter, build_adapters
from bouquetai.recovery import parse_suggestions
from bouquetai.types import (
    BouquetConfig,
    CancellationToken,
    GenerationResult,
    ProviderFamily,
    SuggestionSet,
)


logger = logging.getLogger(__name__)

ENDPOINT_UNAVAILABLE_MESSAGE = "API endpoint not available. Please check your deployment."

AdapterRegistry = Mapping[ProviderFamily, ProviderAdapter]


@functools.lru_cache(maxsize=1)
def default_adapters() -> AdapterRegistry:
    """Process-wide registry sharing one transport and its HTTP session."""
    return build_adapters()


def _select_adapter(bouquet: BouquetConfig, adapters: AdapterRegistry | None) -> ProviderAdapter:
    registry = adapters if adapters is not None else default_adapters()
    adapter = registry.get(bouquet.family)
    if adapter is None:
        raise ValidationError(f"Unsupported model: {bouquet.selected_model}")
    return adapter


def _wrap(exc: Exception, fallback: str) -> GenerationError:
    """Normalize any failure into the orchestrator's single error channel."""
    if isinstance(exc, NotFoundError):
        return GenerationError(ENDPOINT_UNAVAILABLE_MESSAGE, kind=type(exc).__name__)
    if isinstance(exc, BouquetError):
        return GenerationError(exc.message or fallback, kind=type(exc).__name__)
    return GenerationError(fallback)


def generate_suggestions(
    bouquet: BouquetConfig,
    *,
    adapters: AdapterRegistry | None = None,
    token: CancellationToken | None = None,
) -> SuggestionSet:
    """Ask the selected provider for two flower combinations.

    Raises:
        GenerationError: For any failure, with a human-readable message.
    """
    try:
        adapter = _select_adapter(bouquet, adapters)
        adapter.require_credentials(bouquet)
        raw_text = adapter.suggest(bouquet, token=token)
        logger.debug("Raw suggestion text: %r", raw_text)
        return parse_suggestions(raw_text)
    except BouquetError as exc:
        logger.warning("Suggestion generation failed: %s", exc.message)
        raise _wrap(exc, "Failed to generate suggestions") from exc
    except Exception as exc:
        logger.exception("Suggestion generation error")
        raise _wrap(exc, "Failed to generate suggestions") from exc


def generate_bouquet(
    bouquet: BouquetConfig,
    *,
    adapters: AdapterRegistry | None = None,
    token: CancellationToken | None = None,
) -> GenerationResult:
    """Generate a description and bouquet images.

    The flower selection is checked before any adapter is built, so an empty
    selection never causes an outbound call.

    Raises:
        GenerationError: For any failure, with a human-readable message.
    """
    try:
        if not bouquet.flowers:
            raise ValidationError("At least one flower must be selected")

        adapter = _select_adapter(bouquet, adapters)
        adapter.require_credentials(bouquet)

        logger.info(
            "Generating bouquet with %s (%s family)",
            bouquet.selected_model, bouquet.family.value,
        )
        description = adapter.describe(bouquet, token=token)
        images = adapter.render_images(bouquet, token=token)

        return GenerationResult(
            flower_list=bouquet.flowers,
            description=description,
            images=tuple(images),
        )
    except BouquetError as exc:
        logger.warning("Bouquet generation failed: %s", exc.message)
        raise _wrap(exc, "Failed to generate bouquet") from exc
    except Exception as exc:
        logger.exception("Bouquet generation error")
        raise _wrap(exc, "Failed to generate bouquet") from exc
