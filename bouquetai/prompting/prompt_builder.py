"""Prompt assembly helpers used by the provider adapters.

This module is intentionally narrow: it only builds prompt strings and chat
message lists from a `BouquetConfig`. Provider selection, transport and response
parsing happen outside this module.

Design constraints:
    - Deterministic construction for identical inputs.
    - No hidden side effects (no I/O, no global state mutation).
    - Templates are filled with plain token replacement, never `str.format`,
      because provider templates routinely contain literal JSON braces.
"""

from bouquetai.types import BouquetConfig


# =========================================================
# TEMPLATE TOKENS
# =========================================================

OCCASION_TOKEN = "{occasion}"
RECIPIENT_TOKEN = "{recipient}"
FLOWERS_TOKEN = "{flowers}"


def join_flowers(flowers) -> str:
    """Render a flower selection as a comma-separated list."""
    return ", ".join(flowers)


def fill_template(template: str, config: BouquetConfig) -> str:
    """Replace `{occasion}`, `{recipient}` and `{flowers}` tokens in `template`.

    Unknown tokens and other brace content are left untouched.
    """
    return (
        template
        .replace(FLOWERS_TOKEN, join_flowers(config.flowers))
        .replace(OCCASION_TOKEN, config.occasion)
        .replace(RECIPIENT_TOKEN, config.recipient)
    )


# =========================================================
# DESCRIPTION PROMPTS
# =========================================================

def build_description_instruction(config: BouquetConfig) -> str:
    return (
        f"Create a beautiful description for a {config.occasion} bouquet for "
        f"{config.recipient}. The bouquet contains: {join_flowers(config.flowers)}."
    )


def build_description_messages(config: BouquetConfig) -> list[dict]:
    """Chat messages for the synchronous description request."""
    return [
        {"role": "system", "content": config.system_prompt},
        {"role": "user", "content": build_description_instruction(config)},
    ]


def build_local_description(config: BouquetConfig) -> str:
    """Template description used by the asynchronous family (no model call)."""
    return (
        f"A beautiful {config.occasion} bouquet for {config.recipient} "
        f"containing {join_flowers(config.flowers)}."
    )


# =========================================================
# SUGGESTION PROMPTS
# =========================================================

SUGGESTION_SYSTEM_PROMPT = (
    "You are a professional florist. Generate two different flower combinations. "
    "Each combination should contain 3-5 flowers that work well together. "
    "Return the response in the following format: "
    '{"suggestions": [["flower1", "flower2", "flower3"], ["flower1", "flower2", "flower3"]]}'
)


def build_suggestion_messages(config: BouquetConfig) -> list[dict]:
    return [
        {"role": "system", "content": SUGGESTION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": (
                f"Create 2 different flower combinations for a {config.occasion} "
                f"bouquet for {config.recipient}."
            ),
        },
    ]


# =========================================================
# IMAGE PROMPTS
# =========================================================

def build_image_prompt(config: BouquetConfig) -> str:
    """Photograph prompt for the synchronous image model."""
    return (
        "A professional, high-quality photograph of a beautiful flower bouquet "
        f"containing {join_flowers(config.flowers)}. The bouquet is designed for "
        f"{config.occasion} for {config.recipient}. Photorealistic style, studio "
        "lighting, white background."
    )
