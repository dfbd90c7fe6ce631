# logger.py
"""
Logging configuration for the Badminton Club App.

Entry points call setup_logging() once before driving sessions or
tournaments. Library modules only ask for a logger in the "app" namespace:
    import logging
    logger = logging.getLogger("app.module_name")

The root logger stays at WARNING so supabase and httpx stay quiet; the app
namespace gets its own level, taken from the LOG_LEVEL environment variable
when no level is passed.
"""

import logging
import os
import sys

APP_LOGGER_NAME = "app"
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_APP_LEVEL = logging.INFO


def resolve_level(value: str | int | None) -> int:
    """Turn a level name ('debug', 'WARNING') or number into a logging level.

    Unknown names fall back to DEFAULT_APP_LEVEL.
    """
    if value is None or value == "":
        return DEFAULT_APP_LEVEL
    if isinstance(value, int):
        return value
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else DEFAULT_APP_LEVEL


def setup_logging(app_level: int | None = None) -> None:
    """
    Configure the root and app loggers.

    Safe to call more than once; the stdout handler is only installed once.

    Args:
        app_level: Level for "app.*" loggers. Defaults to $LOG_LEVEL, then INFO.
    """
    if app_level is None:
        app_level = resolve_level(os.environ.get(LOG_LEVEL_ENV))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.WARNING)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.DEBUG)  # loggers filter
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        root_logger.addHandler(handler)

    logging.getLogger(APP_LOGGER_NAME).setLevel(app_level)


def log_selection_debug(
    logger: logging.Logger,
    candidates: list,
    admitted: list,
    skipped: dict[str, str],
) -> None:
    """
    Log one fair selection walk at DEBUG.

    Args:
        logger: Logger instance to use
        candidates: Sorted candidate pool the selector walked
        admitted: Players admitted to the match, in admission order
        skipped: Mapping of skipped player names to the rule that skipped them
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(
        "Candidate order: %s",
        [(p.name, p.games_played, p.level.name) for p in candidates],
    )
    logger.debug("Admitted: %s", [p.name for p in admitted])
    if skipped:
        logger.debug("Skipped: %s", skipped)
