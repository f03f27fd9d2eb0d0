"""
Terminal entrypoint over the generation pipeline.

Commands:
- `suggest`: print two flower combinations as JSON.
- `generate`: print `{flowerList, description, images}` as JSON.
- `serve`: run the credential relay with uvicorn.

Credentials:
- Read with `config.load_key` (`OPENAI_API_KEY`, `DALLE_API_KEY`,
  `YANDEX_API_KEY`) plus `YANDEX_FOLDER_ID`, unless passed as options.

Error handling strategy:
- `GenerationError` is printed to stderr and the process exits with status 1.
- Invalid options are reported through `argparse`.
"""

import argparse
import json
import os
import sys

from bouquetai import config
from bouquetai.core.engine import generate_bouquet, generate_suggestions
from bouquetai.errors import GenerationError, ValidationError
from bouquetai.logging_config import configure_logging
from bouquetai.types import BouquetConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bouquetai", description="AI bouquet designer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("suggest", "Suggest two flower combinations"),
        ("generate", "Generate a bouquet description and images"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--occasion", required=True)
        sub.add_argument("--recipient", required=True)
        sub.add_argument("--flower", dest="flowers", action="append", default=[],
                         help="Flower name (repeatable)")
        sub.add_argument("--model", default=config.DEFAULT_TEXT_MODEL,
                         choices=sorted(config.TEXT_MODELS))
        sub.add_argument("--image-model", default=config.DEFAULT_IMAGE_MODEL,
                         choices=sorted(config.IMAGE_MODELS))
        sub.add_argument("--temperature", type=float, default=config.DEFAULT_TEMPERATURE)
        sub.add_argument("--system-prompt", default=config.DEFAULT_SYSTEM_PROMPT)
        sub.add_argument("--folder-id", default=os.getenv("YANDEX_FOLDER_ID"))

    serve = subparsers.add_parser("serve", help="Run the credential relay")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)

    return parser


def config_from_args(args) -> BouquetConfig:
    return BouquetConfig(
        occasion=args.occasion,
        recipient=args.recipient,
        flowers=tuple(args.flowers),
        selected_model=args.model,
        image_model=args.image_model,
        temperature=args.temperature,
        system_prompt=args.system_prompt,
        openai_key=config.load_key("openai"),
        dalle_key=config.load_key("dalle"),
        yandex_key=config.load_key("yandex"),
        yandex_folder_id=args.folder_id,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    if args.command == "serve":
        import uvicorn

        uvicorn.run("bouquetai.api.http_api:app", host=args.host, port=args.port)
        return 0

    try:
        bouquet = config_from_args(args)
    except ValidationError as exc:
        parser.error(exc.message)

    try:
        if args.command == "suggest":
            result = generate_suggestions(bouquet)
        else:
            result = generate_bouquet(bouquet)
    except GenerationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
