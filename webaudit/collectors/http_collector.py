"""
HTTP collector: fetches a live page and turns the response into PageArtifacts.

Собирает то, что видно с сервера:
- Заголовки ответа (имена в нижнем регистре)
- Cookies из Set-Cookie с атрибутами Secure / HttpOnly / SameSite

localStorage, sessionStorage и console без браузера недоступны,
они остаются пустыми.
"""

import logging
from http.cookies import CookieError, SimpleCookie
from typing import Iterable, List, Optional

import httpx

from webaudit.config import AuditConfig
from webaudit.core.errors import CollectorError
from webaudit.core.models import CookieRecord, PageArtifacts, is_encrypted_url

logger = logging.getLogger(__name__)


def parse_set_cookie(headers: Iterable[str]) -> List[CookieRecord]:
    """
    Разобрать значения Set-Cookie в CookieRecord.

    Заголовки, которые не удалось разобрать, пропускаются.
    """
    cookies: List[CookieRecord] = []
    for header in headers:
        jar = SimpleCookie()
        try:
            jar.load(header)
        except CookieError:
            logger.debug(f"Could not parse Set-Cookie header: {header!r}")
            continue
        for morsel in jar.values():
            cookies.append(CookieRecord(
                name=morsel.key,
                value=morsel.value,
                secure=bool(morsel["secure"]),
                http_only=bool(morsel["httponly"]),
                same_site=morsel["samesite"] or None,
            ))
    return cookies


class HttpCollector:
    """Сбор артефактов страницы по URL."""

    def __init__(self, config: Optional[AuditConfig] = None, client: Optional[httpx.Client] = None):
        """
        Args:
            config: Конфигурация (таймаут, User-Agent)
            client: Готовый httpx.Client (например, с MockTransport в тестах)
        """
        self.config = config or AuditConfig()
        self._client = client

    def collect(self, url: str) -> PageArtifacts:
        """
        Загрузить страницу и собрать артефакты.

        Raises:
            CollectorError: сетевая ошибка или невалидный URL
        """
        logger.info(f"Fetching {url}...")
        try:
            if self._client is not None:
                response = self._client.get(url, follow_redirects=True)
            else:
                with httpx.Client(
                    timeout=self.config.request_timeout_seconds,
                    headers={"User-Agent": self.config.user_agent},
                    follow_redirects=True,
                ) as client:
                    response = client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise CollectorError(url, f"{type(e).__name__}: {e}") from e

        final_url = str(response.url)
        headers = {name.lower(): value for name, value in response.headers.items()}
        cookies = parse_set_cookie(response.headers.get_list("set-cookie"))

        logger.info(
            f"Collected {len(headers)} headers and {len(cookies)} cookies "
            f"from {final_url} (status {response.status_code})"
        )

        return PageArtifacts(
            url=final_url,
            encrypted_transport=is_encrypted_url(final_url),
            headers=headers,
            cookies=cookies,
        )
