"""
Audit engine: three independent rule checkers sharing one issue sink.

Features:
- Sequential or concurrent execution of independent checkers
- Graceful degradation: a crashing checker never aborts the run
- reset() as the only way to start a fresh run
"""

import asyncio
import logging
import time
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from webaudit.checkers.console_leak import ConsoleLeakDetector
from webaudit.checkers.cookie_checker import CookieChecker
from webaudit.checkers.header_checker import HeaderChecker
from webaudit.checkers.storage_checker import StorageChecker
from webaudit.config import AuditConfig
from webaudit.core.base_checker import BaseChecker
from webaudit.core.models import CheckResult, Issue, LeakNotification, PageArtifacts
from webaudit.core.policy import SENSITIVE_PATTERNS, HeaderRule, SensitivePattern
from webaudit.core.sink import IssueSink

logger = logging.getLogger(__name__)


class AuditEngine:
    """Движок аудита одной страницы."""

    def __init__(
        self,
        config: Optional[AuditConfig] = None,
        rules: Optional[Mapping[str, HeaderRule]] = None,
        patterns: Sequence[SensitivePattern] = SENSITIVE_PATTERNS,
    ):
        """
        Args:
            config: Конфигурация (по умолчанию из окружения)
            rules: Таблица правил заголовков (по умолчанию из config)
            patterns: Набор чувствительных паттернов

        Raises:
            PolicyError: некорректная таблица правил
        """
        self.config = config or AuditConfig()
        if rules is None:
            rules = self.config.load_header_rules()

        self.sink = IssueSink()
        self.headers = HeaderChecker(self.sink, rules)
        self.cookies = CookieChecker(self.sink, patterns)
        self.storage = StorageChecker(self.sink, patterns)
        self.console = ConsoleLeakDetector(self.sink, patterns)

        self.check_results: List[CheckResult] = []
        self.duration_seconds = 0.0
        self.url: Optional[str] = None

    @property
    def checkers(self) -> List[BaseChecker]:
        checkers: List[BaseChecker] = [self.headers, self.cookies, self.storage]
        if self.config.scan_console:
            checkers.append(self.console)
        return checkers

    def reset(self) -> None:
        """Очистить результаты перед следующим прогоном."""
        self.sink.reset()
        self.console.reset()
        self.check_results = []
        self.duration_seconds = 0.0
        self.url = None

    def run(self, artifacts: PageArtifacts) -> IssueSink:
        """
        Запустить все checkers последовательно.

        Returns:
            Живой IssueSink с результатами прогона
        """
        self.reset()
        self.url = artifacts.url
        start_time = time.perf_counter()

        for checker in self.checkers:
            self.check_results.append(checker.run(artifacts))

        self.duration_seconds = time.perf_counter() - start_time
        self._log_summary()
        return self.sink

    async def run_concurrently(self, artifacts: PageArtifacts) -> IssueSink:
        """
        Запустить checkers параллельно в рабочих потоках.

        Checkers читают непересекающиеся входы и только добавляют
        в sink, поэтому порядок их выполнения не важен.
        """
        self.reset()
        self.url = artifacts.url
        start_time = time.perf_counter()
        checkers = self.checkers

        results = await asyncio.gather(
            *(asyncio.to_thread(checker.run, artifacts) for checker in checkers),
            return_exceptions=True,
        )

        for checker, result in zip(checkers, results):
            if isinstance(result, BaseException):
                logger.error(f"Checker {checker.name} failed: {result}")
                result = CheckResult(
                    check_name=checker.name,
                    passed=False,
                    issue_count=0,
                    duration_ms=0,
                    error=f"{type(result).__name__}: {result}",
                )
            self.check_results.append(result)

        self.duration_seconds = time.perf_counter() - start_time
        self._log_summary()
        return self.sink

    def check_console(self, level: Any, args: Iterable[Any]) -> Optional[LeakNotification]:
        """Проверить один перехваченный вызов console.* вне полного прогона."""
        return self.console.check(level, args)

    @property
    def leaks(self) -> List[LeakNotification]:
        return self.console.leaks

    def counts(self):
        return self.sink.counts()

    def issues(self) -> List[Issue]:
        return self.sink.issues()

    def _log_summary(self) -> None:
        counts = self.sink.counts()
        logger.info(
            f"Audit of {self.url or '<unknown page>'} complete: "
            f"{self.sink.total} issues "
            f"(critical={counts['critical']}, high={counts['high']}, "
            f"medium={counts['medium']}, low={counts['low']}), "
            f"duration={self.duration_seconds:.3f}s"
        )
