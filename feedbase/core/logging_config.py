import logging
import os
import sys

DEFAULT_LOG_LEVEL = logging.WARNING
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        env_level = os.environ.get("FEEDBASE_LOG_LEVEL", "").upper()
        if env_level and isinstance(getattr(logging, env_level, None), int):
            return getattr(logging, env_level)
        if env_level:  # FEEDBASE_LOG_LEVEL was set but is not a level name
            print(  # noqa: T201
                f"Warning: Invalid FEEDBASE_LOG_LEVEL '{env_level}'. "
                f"Defaulting to {logging.getLevelName(DEFAULT_LOG_LEVEL)}.",
                file=sys.stderr,
            )
        return DEFAULT_LOG_LEVEL

    if isinstance(level, str):
        level_name = level.upper()
        if isinstance(getattr(logging, level_name, None), int):
            return getattr(logging, level_name)
        print(  # noqa: T201
            f"Warning: Invalid log level string '{level}'. Defaulting to {logging.getLevelName(DEFAULT_LOG_LEVEL)}.",
            file=sys.stderr,
        )
        return DEFAULT_LOG_LEVEL

    return level


def setup_logging(level: int | str | None = None) -> None:
    """
    Set up logging for the feedbase package.

    Args:
        level: The logging level to set. Can be an integer (e.g., logging.INFO),
               a string (e.g., "INFO"), or None. If None, it tries to get
               the level from the FEEDBASE_LOG_LEVEL environment variable,
               defaulting to DEFAULT_LOG_LEVEL.

    """
    log_level = _resolve_level(level)

    app_logger = logging.getLogger("feedbase")
    app_logger.setLevel(log_level)

    # Replace existing handlers so the new one writes to the current sys.stderr.
    for handler_to_remove in list(app_logger.handlers):
        app_logger.removeHandler(handler_to_remove)
        handler_to_remove.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(handler)
