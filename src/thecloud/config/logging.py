"""Logging setup for hosts embedding the provider."""

from __future__ import annotations

import logging

# httpx and httpcore log every exchange at INFO and DEBUG
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger for provider output.

    Defaults to INFO. Transport libraries are held at WARNING or above so their
    per-request lines stay out of the log. Pass ``force=True`` to reconfigure
    during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
