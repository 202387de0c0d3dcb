"""Logging setup for the recondiff command line."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send log records to stderr, keeping stdout free for the JSON result.

    ``level=logging.DEBUG`` adds match summaries and dropped tree nodes. A
    second call is a no-op unless ``force`` is set.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
