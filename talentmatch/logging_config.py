"""
Logging configuration for the talentmatch CLI.

Library modules only call logging.getLogger(__name__); handlers are installed
here, by the application entry point.
"""
import logging
import logging.config
import os
from typing import Any, Dict, Optional

FORMATS = {
    "simple": "%(levelname)s - %(name)s - %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)-30s | %(funcName)-20s:%(lineno)-4d | %(message)s",
}


def setup_logging(
    level: Optional[str] = None,
    format_style: str = "simple",
    log_file: Optional[str] = None,
) -> None:
    """
    Setup logging for the talentmatch loggers.

    Args:
        level: Logging level name; defaults to TALENTMATCH_LOG_LEVEL or WARNING
        format_style: 'simple' or 'detailed'
        log_file: Optional path of an additional log file (always detailed)
    """
    level = (level or os.getenv("TALENTMATCH_LOG_LEVEL") or "WARNING").upper()

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {"format": FORMATS["simple"]},
            "detailed": {
                "format": FORMATS["detailed"],
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": format_style if format_style in FORMATS else "simple",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "talentmatch": {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": level,
            "formatter": "detailed",
            "filename": str(log_file),
            "encoding": "utf8",
        }
        config["loggers"]["talentmatch"]["handlers"].append("file")

    logging.config.dictConfig(config)
    logging.getLogger("talentmatch.logging").debug("Logging configured - Level: %s", level)
