"""
UI side-effect sinks: toast notices and navigation.

Both are plain in-process objects. A front end subscribes to them and
renders; tests read their history directly.
"""
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, List, Optional

from storefront.logging import get_logger

logger = get_logger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notice:
    """Single toast message."""
    level: NoticeLevel
    message: str
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


NoticeListener = Callable[[Notice], None]


class Notifier:
    """
    Non-blocking notification sink.

    Notices are kept in a bounded history and fanned out to listeners.
    A failing listener is logged and skipped; it never breaks the caller.
    """

    def __init__(self, history_size: int = 50):
        self._history: Deque[Notice] = deque(maxlen=history_size)
        self._listeners: List[NoticeListener] = []

    def subscribe(self, listener: NoticeListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def success(self, message: str) -> Notice:
        return self._push(NoticeLevel.SUCCESS, message)

    def error(self, message: str) -> Notice:
        return self._push(NoticeLevel.ERROR, message)

    def info(self, message: str) -> Notice:
        return self._push(NoticeLevel.INFO, message)

    @property
    def history(self) -> List[Notice]:
        return list(self._history)

    @property
    def last(self) -> Optional[Notice]:
        return self._history[-1] if self._history else None

    def clear(self) -> None:
        self._history.clear()

    def _push(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self._history.append(notice)
        logger.debug(f"Notice [{level.value}]: {message}")
        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception:
                logger.exception("Notice listener failed")
        return notice


NavigationListener = Callable[[str], None]


class Navigator:
    """Tracks the current client location and redirect history."""

    LOGIN_PATH = "/login"
    HOME_PATH = "/"

    def __init__(self, initial_path: str = HOME_PATH):
        self.current_path = initial_path
        self.history: List[str] = [initial_path]
        self._listeners: List[NavigationListener] = []

    def subscribe(self, listener: NavigationListener) -> None:
        self._listeners.append(listener)

    def redirect(self, path: str) -> None:
        """Move to ``path`` and notify listeners."""
        self.current_path = path
        self.history.append(path)
        logger.info(f"Redirecting to {path}")
        for listener in list(self._listeners):
            try:
                listener(path)
            except Exception:
                logger.exception("Navigation listener failed")

    def to_login(self) -> None:
        self.redirect(self.LOGIN_PATH)

    def to_home(self) -> None:
        self.redirect(self.HOME_PATH)
