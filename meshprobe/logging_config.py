"""
Logging configuration for the harness.

``configure_logging`` installs handlers once for the whole test run. Each
harness then logs through its own logger from ``harness_logger``, whose level
comes from that harness's config, so two harnesses in one process keep
their own verbosity.
"""

import itertools
import logging
import logging.config
from typing import Any, Dict

_harness_ids = itertools.count(1)


class PollingRequestFilter(logging.Filter):
    """Filter to suppress httpx request logs for non-200 answers."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop failed poll attempts from the httpx request log."""
        if record.name == "httpx":
            message = record.getMessage()
            if message.startswith("HTTP Request:"):
                # e.g. HTTP Request: GET http://web:8080 "HTTP/1.1 503 Service Unavailable"
                status_line = message.rstrip('"').rsplit('"', 1)[-1].split()
                if len(status_line) >= 2:
                    return status_line[1] == "200"
        return True


def get_logging_config(verbose: bool = False) -> Dict[str, Any]:
    """
    Get logging configuration for the given verbosity.

    httpx logs one INFO line per request. Quiet runs keep only the 200s;
    verbose runs keep every attempt.
    """
    level = "DEBUG" if verbose else "WARNING"

    requests_handler = {
        "class": "logging.StreamHandler",
        "formatter": "default",
        "stream": "ext://sys.stdout"
    }
    if not verbose:
        requests_handler["filters"] = ["polling_request_filter"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "polling_request_filter": {
                "()": PollingRequestFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "requests": requests_handler
        },
        "loggers": {
            "meshprobe": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "httpx": {
                "handlers": ["requests"],
                "level": "INFO",
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(verbose: bool = False) -> None:
    """
    Install the handlers for a whole test run.

    Call once from the test driver. ``verbose`` only sets the default level of
    the module loggers; each harness sets its own level through
    ``harness_logger``.
    """
    logging.config.dictConfig(get_logging_config(verbose))


def harness_logger(verbose: bool = False) -> logging.Logger:
    """
    Create a logger for one harness, with a level no other harness shares.

    Records propagate to the ``meshprobe`` handlers. Components log through
    children of this logger (``getChild("retry")`` and so on), which inherit
    its level.
    """
    log = logging.getLogger(f"meshprobe.harness.{next(_harness_ids)}")
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)
    return log
