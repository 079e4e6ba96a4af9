from __future__ import annotations

import logging
import os


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_LEVEL_ENV_VAR = "INTERACTION_HEATMAP_LOG_LEVEL"

# Font discovery during PNG export is chatty below WARNING.
QUIET_LOGGERS = ("matplotlib", "PIL")


def resolve_log_level(level: str | None = None) -> str:
    return (level or os.getenv(LOG_LEVEL_ENV_VAR) or "INFO").upper()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging; an explicit ``level`` wins over the environment."""
    logging.basicConfig(level=resolve_log_level(level), format=LOG_FORMAT)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
