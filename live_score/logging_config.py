# live_score/logging_config.py
from __future__ import annotations

import logging


def setup_logging(level: str = "INFO") -> None:
    """
    Console-only logging for the relay.

    Existing root handlers are cleared first so repeated calls (reloads,
    tests) do not duplicate every line.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root.addHandler(console)

    # requests/urllib3 log every connection at DEBUG; the poll loop runs every 2s
    logging.getLogger("urllib3").setLevel(logging.WARNING)
