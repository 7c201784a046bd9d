"""
cinescript.logging - Logging setup for the CLI.

Session and store modules log through ``logging.getLogger(__name__)``;
this module decides what reaches the terminal.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("cinescript")

# Third-party loggers that are chatty at INFO/DEBUG
NOISY_LOGGERS = ("LiteLLM", "httpx", "httpcore")


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for a CLI run.

    Args:
        verbose: Show cinescript DEBUG messages; otherwise only warnings
            (stale AI results, save failures) and errors are printed
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logger.setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if verbose else logging.WARNING)
