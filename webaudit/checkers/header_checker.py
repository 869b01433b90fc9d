"""
Header rule checker.

Checks every policy rule against the response headers:
- Missing required headers
- Values outside the allowed set
"""

from typing import Any, Mapping, Optional

from ..core.base_checker import BaseChecker
from ..core.models import Category, PageArtifacts, normalize_headers
from ..core.policy import DEFAULT_HEADER_RULES, HeaderRule
from ..core.sink import IssueSink


class HeaderChecker(BaseChecker):
    """Проверка security headers."""

    category = Category.HEADERS

    def __init__(self, sink: IssueSink, rules: Optional[Mapping[str, HeaderRule]] = None):
        super().__init__(name="HeaderChecker", sink=sink)
        self.rules = rules if rules is not None else DEFAULT_HEADER_RULES

    def _check(self, artifacts: PageArtifacts) -> None:
        self.check(artifacts.headers, artifacts.encrypted_transport)

    def check(self, headers: Any, encrypted_transport: bool = False) -> None:
        """
        Проверить заголовки против всех правил.

        Args:
            headers: Заголовки ответа: dict или список HeaderArtifact (регистр имён не важен)
            encrypted_transport: Страница загружена по https
        """
        if headers is None:
            self.logger.debug("No headers collected, nothing to check")
            return

        normalized = normalize_headers(headers)

        for header, rule in self.rules.items():
            if header not in normalized:
                if rule.is_required(encrypted_transport):
                    self.emit(
                        severity=rule.severity,
                        title=f"Missing {header} header",
                        description=f"{header} header is required for security",
                        location=header,
                    )
                continue

            # Пустая строка считается присутствующим заголовком
            value = normalized[header]
            if rule.allowed_values is not None and value not in rule.allowed_values:
                allowed = ", ".join(sorted(rule.allowed_values))
                self.emit(
                    severity=rule.severity,
                    title=f"Misconfigured {header} header",
                    description=f"Invalid value: {value!r}. Allowed: {allowed}",
                    location=header,
                    value=value,
                    allowed_values=sorted(rule.allowed_values),
                )
