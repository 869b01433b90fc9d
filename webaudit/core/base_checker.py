"""
Base class for audit checkers.
"""

import logging
import time
import uuid
from abc import ABC, abstractmethod
from typing import Any

from .models import Category, CheckResult, Issue, PageArtifacts, Severity
from .sink import IssueSink

logger = logging.getLogger(__name__)


class BaseChecker(ABC):
    """
    Базовый класс для всех checkers.

    Предоставляет:
    - Шаблон метода run()
    - Error handling (сбой одного checker'а не ломает прогон)
    - Логирование
    - Эмиссию проблем в общий IssueSink
    """

    category: Category

    def __init__(self, name: str, sink: IssueSink):
        """
        Args:
            name: Имя checker'а (для логирования и отчётов)
            sink: Общий накопитель проблем прогона
        """
        self.name = name
        self.sink = sink
        self.logger = logging.getLogger(f"webaudit.{name}")
        self._emitted = 0

    def run(self, artifacts: PageArtifacts) -> CheckResult:
        """
        Запустить проверку с error handling.

        Returns:
            CheckResult с количеством найденных проблем
        """
        self.logger.debug(f"Starting {self.name}...")
        start_time = time.perf_counter()
        self._emitted = 0

        try:
            self._check(artifacts)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.logger.error(f"{self.name} failed with exception: {e}", exc_info=True)
            return CheckResult(
                check_name=self.name,
                passed=False,
                issue_count=self._emitted,
                duration_ms=duration_ms,
                error=f"{type(e).__name__}: {e}",
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.logger.info(
            f"Completed {self.name}: "
            f"found {self._emitted} issues, "
            f"duration={duration_ms:.2f}ms"
        )
        return CheckResult(
            check_name=self.name,
            passed=self._emitted == 0,
            issue_count=self._emitted,
            duration_ms=duration_ms,
        )

    @abstractmethod
    def _check(self, artifacts: PageArtifacts) -> None:
        """Выполнить проверку (должен быть реализован в подклассах)."""

    def emit(
        self,
        severity: Severity,
        title: str,
        description: str,
        location: str,
        **metadata: Any,
    ) -> Issue:
        """
        Создать Issue и добавить его в sink.

        Args:
            severity: Серьёзность
            title: Заголовок
            description: Описание
            location: Ссылка на исходный артефакт
            **metadata: Дополнительные метаданные

        Returns:
            Issue instance
        """
        issue = Issue(
            id=str(uuid.uuid4()),
            category=self.category,
            severity=severity,
            title=title,
            description=description,
            location=location,
            metadata=metadata,
        )
        self.sink.append(issue)
        self._emitted += 1
        return issue
