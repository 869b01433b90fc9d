"""
Console leak detection.

Вместо подмены глобальных функций console.* используется явная точка
регистрации перехватчиков (LogInterceptor): каждый вызов сначала видят
слушатели, затем он уходит в обычный logging. Для стандартного Python
logging есть адаптер LeakDetectingHandler.
"""

import logging
import threading
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from ..core.base_checker import BaseChecker
from ..core.models import (
    Category,
    ConsoleEvent,
    LeakNotification,
    LoggedValue,
    PageArtifacts,
    Severity,
    as_text,
    normalize_level,
)
from ..core.policy import SENSITIVE_PATTERNS, SensitivePattern
from ..core.sink import IssueSink

logger = logging.getLogger(__name__)

EXCERPT_LIMIT = 200

ConsoleListener = Callable[[str, tuple], Any]

_PY_LEVELS = {
    "log": logging.INFO,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def truncate_excerpt(text: str, limit: int = EXCERPT_LIMIT) -> str:
    """Первые `limit` символов (не байт), многобайтовые символы не режутся."""
    return text[:limit]


def console_level_for(levelno: int) -> str:
    """Уровень Python logging → log|warn|error|info."""
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    return "log"


class ConsoleLeakDetector(BaseChecker):
    """Поиск чувствительных данных в аргументах вызовов console.*."""

    category = Category.CONSOLE

    def __init__(
        self,
        sink: IssueSink,
        patterns: Sequence[SensitivePattern] = SENSITIVE_PATTERNS,
        excerpt_limit: int = EXCERPT_LIMIT,
    ):
        super().__init__(name="ConsoleLeakDetector", sink=sink)
        self.patterns = patterns
        self.excerpt_limit = min(excerpt_limit, EXCERPT_LIMIT)
        self._leaks_lock = threading.Lock()
        self._leaks: List[LeakNotification] = []

    @property
    def leaks(self) -> List[LeakNotification]:
        with self._leaks_lock:
            return list(self._leaks)

    def reset(self) -> None:
        with self._leaks_lock:
            self._leaks = []

    def _check(self, artifacts: PageArtifacts) -> None:
        for event in artifacts.console or ():
            if isinstance(event, Mapping):
                event = ConsoleEvent.from_dict(event)
            elif not isinstance(event, ConsoleEvent):
                self.logger.debug(f"Skipping malformed console event: {event!r}")
                continue
            self.check(event.level, event.args)

    def check(self, level: Any, args: Iterable[Any]) -> Optional[LeakNotification]:
        """
        Проверить один перехваченный вызов.

        Аргументы приводятся к строкам; на первом совпадении создаётся
        ровно одно уведомление для этого вызова.

        Returns:
            LeakNotification или None, если утечки нет
        """
        level = normalize_level(level)
        if isinstance(args, (str, bytes, bytearray, Mapping)) or not isinstance(args, Iterable):
            args = (args,)

        for logged in (LoggedValue(level, as_text(arg)) for arg in args):
            for pattern in self.patterns:
                if pattern.regex.search(logged.text):
                    return self._report(logged, pattern)
        return None

    def _report(self, logged: LoggedValue, pattern: SensitivePattern) -> LeakNotification:
        level = logged.level
        notification = LeakNotification(
            level=level,
            excerpt=truncate_excerpt(logged.text, self.excerpt_limit),
            pattern=pattern.name,
            category=pattern.category.value,
        )
        with self._leaks_lock:
            self._leaks.append(notification)

        self.emit(
            severity=Severity.CRITICAL,
            title="Sensitive data in console output",
            description=f"console.{level} call matched sensitive pattern '{pattern.name}'",
            location=f"console.{level}",
            pattern=pattern.name,
            pattern_category=pattern.category.value,
            excerpt=notification.excerpt,
        )
        return notification


class LogInterceptor:
    """
    Точка регистрации перехватчиков логов.

    Слушатели получают (level, args) до того, как вызов уйдёт
    в downstream logger.
    """

    def __init__(self, downstream: Optional[logging.Logger] = None):
        self.downstream = downstream or logging.getLogger("webaudit.console")
        self._lock = threading.Lock()
        self._listeners: List[ConsoleListener] = []

    def register(self, listener: ConsoleListener) -> ConsoleListener:
        """Зарегистрировать слушателя (можно использовать как декоратор)."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)
        return listener

    def unregister(self, listener: ConsoleListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def attach(self, detector: ConsoleLeakDetector) -> ConsoleListener:
        """Подключить детектор утечек как слушателя."""
        return self.register(detector.check)

    def emit(self, level: str, *args: Any) -> None:
        level = normalize_level(level)
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(level, args)
            except Exception as e:
                logger.warning(f"Console listener {listener!r} failed: {e}", exc_info=True)

        self.downstream.log(_PY_LEVELS[level], " ".join(as_text(a) for a in args))

    def log(self, *args: Any) -> None:
        self.emit("log", *args)

    def info(self, *args: Any) -> None:
        self.emit("info", *args)

    def warn(self, *args: Any) -> None:
        self.emit("warn", *args)

    def error(self, *args: Any) -> None:
        self.emit("error", *args)


class LeakDetectingHandler(logging.Handler):
    """Подключает ConsoleLeakDetector к стандартному Python logging."""

    def __init__(self, detector: ConsoleLeakDetector, level: int = logging.NOTSET):
        super().__init__(level)
        self.detector = detector
        self._local = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        # Детектор сам пишет в лог; не проверяем собственные записи
        if getattr(self._local, "active", False):
            return
        self._local.active = True
        try:
            self.detector.check(console_level_for(record.levelno), (record.getMessage(),))
        except Exception:
            self.handleError(record)
        finally:
            self._local.active = False
