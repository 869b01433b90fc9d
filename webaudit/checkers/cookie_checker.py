"""
Cookie rule checker.

Per cookie, independent checks:
- Sensitive data in name or value (one issue per matching pattern)
- Secure flag on encrypted pages
- HttpOnly flag
- SameSite attribute
"""

import re
from typing import Iterable, Mapping, Optional, Sequence

from ..core.base_checker import BaseChecker
from ..core.models import Category, CookieRecord, PageArtifacts, Severity, as_text
from ..core.policy import SENSITIVE_PATTERNS, SensitivePattern
from ..core.sink import IssueSink

# chrome.cookies отдаёт "no_restriction", заголовок Set-Cookie отдаёт "None"
SAMESITE_NONE_TOKENS = frozenset({"none", "no_restriction"})

# "unspecified" означает, что атрибут не был задан сервером
SAMESITE_ABSENT_TOKENS = frozenset({"", "unspecified"})


def normalize_same_site(value: object) -> Optional[str]:
    """
    Нормализовать SameSite: None если атрибут отсутствует,
    "none" для SameSite=None / no_restriction, иначе значение в нижнем регистре.
    """
    if value is None:
        return None
    text = re.sub(r"[\s-]+", "_", as_text(value).strip().lower())
    if text in SAMESITE_ABSENT_TOKENS:
        return None
    if text in SAMESITE_NONE_TOKENS:
        return "none"
    return text


class CookieChecker(BaseChecker):
    """Проверка атрибутов и содержимого cookies."""

    category = Category.COOKIES

    def __init__(self, sink: IssueSink, patterns: Sequence[SensitivePattern] = SENSITIVE_PATTERNS):
        super().__init__(name="CookieChecker", sink=sink)
        self.patterns = patterns

    def _check(self, artifacts: PageArtifacts) -> None:
        self.check(artifacts.cookies, artifacts.encrypted_transport)

    def check(self, cookies: Optional[Iterable[CookieRecord]], encrypted_transport: bool = False) -> None:
        """
        Проверить cookies. Один cookie может дать несколько проблем.

        Args:
            cookies: Cookies страницы
            encrypted_transport: Страница загружена по https
        """
        for cookie in cookies or ():
            if isinstance(cookie, Mapping):
                cookie = CookieRecord.from_dict(cookie)
            elif not isinstance(cookie, CookieRecord):
                self.logger.debug(f"Skipping malformed cookie record: {cookie!r}")
                continue
            self._check_cookie(cookie, encrypted_transport)

    def _check_cookie(self, cookie: CookieRecord, encrypted_transport: bool) -> None:
        name = cookie.name

        for pattern in self.patterns:
            if pattern.matches(cookie.name) or pattern.matches(cookie.value):
                self.emit(
                    severity=Severity.CRITICAL,
                    title="Sensitive data in cookie",
                    description=f"Potential sensitive data in cookie: {name}",
                    location=name,
                    pattern=pattern.name,
                    pattern_category=pattern.category.value,
                )

        if encrypted_transport and not cookie.secure:
            self.emit(
                severity=Severity.HIGH,
                title="Missing Secure flag",
                description=f'Cookie "{name}" missing Secure flag on HTTPS site',
                location=name,
            )

        if not cookie.http_only:
            self.emit(
                severity=Severity.MEDIUM,
                title="Missing HttpOnly flag",
                description=f'Cookie "{name}" is accessible to JavaScript',
                location=name,
            )

        same_site = normalize_same_site(cookie.same_site)
        if same_site is None:
            self.emit(
                severity=Severity.MEDIUM,
                title="Missing SameSite attribute",
                description=f'Cookie "{name}" missing SameSite attribute',
                location=name,
            )
        elif same_site == "none" and not cookie.secure:
            self.emit(
                severity=Severity.HIGH,
                title="Insecure SameSite=None without Secure",
                description=f'Cookie "{name}" has SameSite=None but no Secure flag',
                location=name,
            )
