"""
Issue sink: ordered issue list plus severity tally.
"""

import threading
from typing import Dict, List

from .models import SEVERITY_ORDER, Category, Issue, Severity


class IssueSink:
    """
    Накопитель проблем одного прогона аудита.

    Инвариант: tally всегда равен количеству проблем по severity.
    append и reset меняют список и счётчики под одним lock'ом.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._issues: List[Issue] = []
        self._counts: Dict[Severity, int] = dict.fromkeys(SEVERITY_ORDER, 0)

    def append(self, issue: Issue) -> None:
        with self._lock:
            self._issues.append(issue)
            self._counts[issue.severity] += 1

    def reset(self) -> None:
        """Очистить список и обнулить все счётчики."""
        with self._lock:
            self._issues = []
            self._counts = dict.fromkeys(SEVERITY_ORDER, 0)

    def counts(self) -> Dict[str, int]:
        """Снимок tally: {"critical": n, "high": n, "medium": n, "low": n}."""
        with self._lock:
            return {severity.value: self._counts[severity] for severity in SEVERITY_ORDER}

    def issues(self) -> List[Issue]:
        """Снимок списка проблем в порядке добавления."""
        with self._lock:
            return list(self._issues)

    def by_category(self) -> Dict[Category, List[Issue]]:
        grouped: Dict[Category, List[Issue]] = {category: [] for category in Category}
        for issue in self.issues():
            grouped[issue.category].append(issue)
        return grouped

    @property
    def total(self) -> int:
        with self._lock:
            return len(self._issues)

    def __len__(self) -> int:
        return self.total
