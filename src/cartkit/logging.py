"""Loguru setup for cartkit: the INDUCTION level and opt-in stderr output.

Importing this module removes loguru's default stderr handler (ID 0) so that
the handler added by ``enable_logging()`` is the only one printing cartkit
records.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

with contextlib.suppress(ValueError):
    logger.remove(0)

# One record per tree build; sits between INFO (20) and WARNING (30)
INDUCTION_LEVEL: Final[str] = "INDUCTION"
INDUCTION_LEVEL_NUMBER: Final[int] = 25

type LogLevel = Literal["TRACE", "DEBUG", "INDUCTION", "INFO", "WARNING", "ERROR", "CRITICAL"]

type LogFormat = Literal["short", "full"]

_LOCATION_FORMATS: Final[dict[LogFormat, str]] = {
    "short": "<cyan>{function}</cyan>",
    "full": "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
}


def _register_induction_level() -> None:
    """Register INDUCTION with loguru, warning if it exists under another number."""
    try:
        existing_level = logger.level(INDUCTION_LEVEL)
    except ValueError:
        logger.level(INDUCTION_LEVEL, no=INDUCTION_LEVEL_NUMBER, icon="🌳")
        return
    if existing_level.no != INDUCTION_LEVEL_NUMBER:
        warnings.warn(
            f"INDUCTION level already registered as {existing_level.no}, expected {INDUCTION_LEVEL_NUMBER}",
            stacklevel=2,
        )


_register_induction_level()


class LoggingHandle:
    """An active cartkit stderr handler, removable once.

    Handles are counted across the process; removing the last one disables
    the cartkit logger again.
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove this handle's handler; a second call does nothing."""
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Return how many handles have not been disabled yet."""
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = INDUCTION_LEVEL,
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Print cartkit records to stderr.

    Args:
        level (LogLevel): Minimum level shown. `"INDUCTION"` (default) gives
            one line per tree build, `"DEBUG"` adds each split and leaf, and
            `"TRACE"` adds every scored candidate question.
        log_format (LogFormat): `"short"` names only the function; `"full"`
            adds module and line.

    Returns:
        LoggingHandle: Call `disable()` on it, or use it as a context manager.

    Examples:
        >>> with enable_logging(level="DEBUG"):  # doctest: +SKIP
        ...     build_tree(records)
    """
    logger.enable(PACKAGE_NAME)
    handler_id = logger.add(
        sys.stderr,
        level=level,
        filter=_is_cartkit_record,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <9}</level> | "  # noqa: RUF027 - loguru format string
            f"{_LOCATION_FORMATS[log_format]} - "
            "<level>{message}</level> {extra}"
        ),
    )
    return LoggingHandle(handler_id)


def _is_cartkit_record(record: Record) -> bool:
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
