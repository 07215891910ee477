"""Progress reporting for long-running template operations."""

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Protocol

from templatehub.logger import get_logger

logger = get_logger(__name__)


class ProgressScope(Protocol):
    """Handle for one running operation."""

    def update(self, message: str, current: int, total: int) -> None: ...


class ProgressSink(Protocol):
    """Receives progress for operations; ``start`` returns a scope released when the operation ends."""

    def start(self, label: str) -> AbstractContextManager[ProgressScope]: ...


class _LoggingScope:
    def __init__(self, label: str) -> None:
        self.label = label

    def update(self, message: str, current: int, total: int) -> None:
        logger.debug("Progress", operation=self.label, message=message, current=current, total=total)


class LoggingProgressSink:
    """Default sink: writes progress to the structured log."""

    @contextmanager
    def start(self, label: str) -> Iterator[ProgressScope]:
        logger.info("Operation started", operation=label)
        try:
            yield _LoggingScope(label)
        finally:
            logger.info("Operation finished", operation=label)
