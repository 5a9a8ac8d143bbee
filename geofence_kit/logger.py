"""
Logging for geofence-kit.

Every module gets its logger from get_logger(__name__). Records go to
stderr as one line each, with any ``extra`` fields appended as
``| key=value`` pairs. Public operations are wrapped in OperationLogger,
which records how long they took and what they produced.

The level comes from the LOG_LEVEL environment variable, then from
Settings.log_level (INFO by default).
"""

import logging
import os
import sys
import time
from functools import lru_cache
from typing import Any

from geofence_kit.config import get_settings

# Attributes every LogRecord has; anything else arrived through `extra`
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class GeofenceFormatter(logging.Formatter):
    """``time - logger - LEVEL - message | key=value ...``"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        extras = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        ]
        if not extras:
            return line
        return f"{line} | {' '.join(extras)}"


class OperationLogger:
    """
    Times a geofence-kit operation and logs its outcome.

    Logs a DEBUG line on entry, an INFO line with elapsed time and a short
    result summary on success, and an ERROR line with traceback when the
    block raises. Exceptions are never swallowed.

    Usage:
        with OperationLogger(logger, "validate_geofence") as log:
            result = ...
            log.set_result(result)
            return result
    """

    def __init__(self, logger: logging.Logger, operation: str, **params: Any):
        self.logger = logger
        self.operation = operation
        self.params = params
        self.result: Any = None
        self._started = 0.0

    def __enter__(self) -> "OperationLogger":
        self._started = time.perf_counter()
        self.logger.debug(
            f"{self.operation} started",
            extra={"operation": self.operation, "params": str(self.params)},
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        elapsed_ms = f"{(time.perf_counter() - self._started) * 1000:.2f}"

        if exc_val is not None:
            self.logger.error(
                f"{self.operation} failed: {exc_val}",
                extra={"operation": self.operation, "elapsed_ms": elapsed_ms},
                exc_info=True,
            )
        else:
            self.logger.info(
                f"{self.operation} completed",
                extra={
                    "operation": self.operation,
                    "elapsed_ms": elapsed_ms,
                    "result": self._summarize_result(self.result),
                },
            )
        return False

    def set_result(self, result: Any) -> None:
        self.result = result

    def _summarize_result(self, result: Any) -> str:
        if result is None:
            return "None"

        # GeofenceValidationResult
        if hasattr(result, "is_valid") and hasattr(result, "fixes"):
            return (
                f"is_valid={result.is_valid} errors={len(result.errors)} "
                f"warnings={len(result.warnings)} fixes={sorted(result.fixes)}"
            )

        if isinstance(result, dict):
            if "error" in result:
                return f"error: {result['error']}"
            if "route_segments" in result:
                return f"legs={len(result['route_segments'])}"
            if "features" in result:
                return f"features={len(result['features'])}"
            if "coordinates" in result:
                return f"coordinates={len(result['coordinates'])}"
            if "intersection_area_m2" in result:
                return f"intersection_area_m2={result['intersection_area_m2']:.2f}"
            return f"dict with {len(result)} keys"

        if isinstance(result, list):
            return f"list with {len(result)} items"

        if isinstance(result, str):
            return f"'{result}'" if len(result) <= 50 else f"str({len(result)} chars)"

        return type(result).__name__


def get_log_level() -> int:
    """
    Level named by LOG_LEVEL, else by Settings.log_level (case-insensitive).

    Unknown names mean INFO.
    """
    level_name = os.environ.get("LOG_LEVEL") or get_settings().log_level
    return _LEVELS.get(level_name.upper(), logging.INFO)


@lru_cache(maxsize=None)
def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for `name` with geofence-kit's stderr handler attached.

    Cached, so repeated calls never stack handlers. The logger does not
    propagate to the root logger.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        level = get_log_level()
        logger.setLevel(level)

        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(GeofenceFormatter())
        logger.addHandler(handler)

        logger.propagate = False

    return logger
