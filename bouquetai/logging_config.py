"""Logging setup shared by the relay and the CLI.

Modules log through `logging.getLogger(__name__)`. This helper installs one
console handler and raises the package to DEBUG when `DEBUG=true`.
"""

import logging

from bouquetai import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: int | None = None) -> None:
    """Configure console logging once; later calls only adjust the level."""
    if level is None:
        level = logging.DEBUG if config.DEBUG else logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)

    logging.getLogger("bouquetai").setLevel(level)
