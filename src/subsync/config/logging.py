"""Shared logging helpers for subsync."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once.

    Scheduler output is usually captured line by line, so the format carries the
    full timestamp and the logger name. Pass ``force=True`` to reconfigure during
    tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
        force=force,
    )
    # httpx logs every request at INFO, which drowns the per-run summary.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
