"""
Per-tab response header cache.

Заголовки main_frame ответа сохраняются по id вкладки и удаляются
явно при её закрытии (remove). Движок аудита кэш не использует,
это забота вызывающей стороны.
"""

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Hashable, Mapping, Optional

from webaudit.core.models import normalize_headers

logger = logging.getLogger(__name__)

MAIN_FRAME = "main_frame"


class HeaderCache:
    """Кэш заголовков по вкладкам с явным жизненным циклом."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_tab: Dict[Hashable, Mapping[str, str]] = {}

    def put(self, tab_id: Hashable, raw_headers: Any, resource_type: str = MAIN_FRAME) -> bool:
        """
        Сохранить заголовки ответа для вкладки.

        Returns:
            False если ответ не main_frame и был проигнорирован
        """
        if resource_type != MAIN_FRAME:
            return False
        headers = MappingProxyType(normalize_headers(raw_headers))
        with self._lock:
            self._by_tab[tab_id] = headers
        logger.debug(f"Cached {len(headers)} headers for tab {tab_id}")
        return True

    def get(self, tab_id: Hashable) -> Mapping[str, str]:
        """Заголовки вкладки (пустой mapping, если ничего не сохранено)."""
        with self._lock:
            return self._by_tab.get(tab_id, MappingProxyType({}))

    def remove(self, tab_id: Hashable) -> Optional[Mapping[str, str]]:
        """Удалить заголовки закрытой вкладки."""
        with self._lock:
            removed = self._by_tab.pop(tab_id, None)
        if removed is not None:
            logger.debug(f"Evicted headers for tab {tab_id}")
        return removed

    def clear(self) -> None:
        with self._lock:
            self._by_tab.clear()

    def __contains__(self, tab_id: Hashable) -> bool:
        with self._lock:
            return tab_id in self._by_tab

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_tab)
