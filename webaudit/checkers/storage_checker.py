"""
Storage checker.

Tests every key and value of every named store (localStorage,
sessionStorage, ...) against every sensitive pattern.
"""

import logging
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from ..core.base_checker import BaseChecker
from ..core.models import Category, PageArtifacts, Severity, StorageEntry, as_text
from ..core.policy import SENSITIVE_PATTERNS, SensitivePattern
from ..core.sink import IssueSink

logger = logging.getLogger(__name__)


def iter_entries(stores: Any) -> Iterator[StorageEntry]:
    """Развернуть именованные хранилища в последовательность StorageEntry."""
    if isinstance(stores, Mapping):
        pairs = list(stores.items())
    elif isinstance(stores, Iterable) and not isinstance(stores, (str, bytes)):
        pairs = list(stores)
    else:
        pairs = []
    for pair in pairs:
        if not isinstance(pair, (list, tuple)) or len(pair) != 2 or not isinstance(pair[1], Mapping):
            logger.debug(f"Skipping malformed storage entry: {pair!r}")
            continue
        store_name, entries = pair
        for key, value in entries.items():
            yield StorageEntry(store=as_text(store_name), key=as_text(key), value=value)


class StorageChecker(BaseChecker):
    """Проверка чувствительных данных в хранилищах браузера."""

    category = Category.STORAGE

    def __init__(self, sink: IssueSink, patterns: Sequence[SensitivePattern] = SENSITIVE_PATTERNS):
        super().__init__(name="StorageChecker", sink=sink)
        self.patterns = patterns

    def _check(self, artifacts: PageArtifacts) -> None:
        self.check_storage(artifacts.storage)

    def check_storage(self, stores: Optional[Iterable[Tuple[str, Mapping[str, Any]]]]) -> None:
        """
        Проверить все пары ключ/значение во всех хранилищах.

        Каждый совпавший паттерн даёт отдельную проблему. В описании
        только имя хранилища и ключ: значение в отчёт не попадает.
        """
        for entry in iter_entries(stores):
            self._check_entry(entry)

    def _check_entry(self, entry: StorageEntry) -> None:
        for pattern in self.patterns:
            if pattern.matches(entry.key) or pattern.matches(entry.value):
                self.emit(
                    severity=Severity.CRITICAL,
                    title="Sensitive data in storage",
                    description=f'Found in {entry.store} key: "{entry.key}"',
                    location=f"{entry.store}:{entry.key}",
                    store=entry.store,
                    key=entry.key,
                    pattern=pattern.name,
                    pattern_category=pattern.category.value,
                )
