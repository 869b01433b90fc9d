"""
Static policy tables: header rules and sensitive-data patterns.

Таблицы загружаются один раз и после этого неизменяемы, поэтому
безопасно разделяются между параллельными прогонами аудита.
Ошибки конфигурации обнаруживаются при загрузке (PolicyError),
а не во время проверки.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import PolicyError
from .models import Severity, as_text

logger = logging.getLogger(__name__)


class Requirement(Enum):
    """Когда заголовок обязателен."""
    ALWAYS = "always"
    NEVER = "never"
    ENCRYPTED_TRANSPORT = "encrypted_transport"  # только для https-страниц

    def applies(self, encrypted_transport: bool) -> bool:
        if self is Requirement.ALWAYS:
            return True
        if self is Requirement.ENCRYPTED_TRANSPORT:
            return encrypted_transport
        return False


@dataclass(frozen=True)
class HeaderRule:
    """Ожидание относительно одного заголовка ответа."""
    header: str
    severity: Severity
    requirement: Requirement
    allowed_values: Optional[FrozenSet[str]] = None

    def is_required(self, encrypted_transport: bool) -> bool:
        return self.requirement.applies(encrypted_transport)


class PatternCategory(Enum):
    """Категория чувствительных данных."""
    CREDENTIALS = "credentials"
    PII = "pii"
    FINANCIAL = "financial"
    CONTACT = "contact"


@dataclass(frozen=True)
class SensitivePattern:
    """Регулярное выражение, помечающее потенциально чувствительный текст."""
    name: str
    regex: "re.Pattern[str]"
    category: PatternCategory

    def matches(self, value: Any) -> bool:
        return self.regex.search(as_text(value)) is not None


def _pattern(name: str, expression: str, category: PatternCategory) -> SensitivePattern:
    return SensitivePattern(name, re.compile(expression, re.IGNORECASE), category)


_C = PatternCategory

SENSITIVE_PATTERNS: Tuple[SensitivePattern, ...] = (
    _pattern("password", r"password", _C.CREDENTIALS),
    _pattern("passwd", r"passwd", _C.CREDENTIALS),
    _pattern("pwd", r"pwd", _C.CREDENTIALS),
    _pattern("secret", r"secret", _C.CREDENTIALS),
    _pattern("token", r"token", _C.CREDENTIALS),
    _pattern("auth", r"auth", _C.CREDENTIALS),
    _pattern("credential", r"credential", _C.CREDENTIALS),
    _pattern("session", r"session", _C.CREDENTIALS),
    _pattern("key", r"key", _C.CREDENTIALS),
    _pattern("api_key", r"api[-_]?key", _C.CREDENTIALS),
    _pattern("bearer", r"bearer", _C.CREDENTIALS),
    _pattern("jwt", r"jwt", _C.CREDENTIALS),
    _pattern("ssn", r"ssn", _C.PII),
    _pattern("social_security", r"social.?security", _C.PII),
    _pattern("credit_card", r"credit.?card", _C.FINANCIAL),
    _pattern("cvv", r"cvv", _C.FINANCIAL),
    _pattern("cvc", r"cvc", _C.FINANCIAL),
    _pattern("expiration", r"expiration", _C.FINANCIAL),
    _pattern("phone", r"phone", _C.CONTACT),
    _pattern("email", r"email", _C.CONTACT),
    _pattern("address", r"address", _C.CONTACT),
    _pattern("dob", r"dob", _C.PII),
    _pattern("birth", r"birth", _C.PII),
)


def matching_patterns(
    value: Any,
    patterns: Iterable[SensitivePattern] = SENSITIVE_PATTERNS,
) -> List[SensitivePattern]:
    """Все паттерны, совпавшие со значением (без short-circuit)."""
    text = as_text(value)
    return [p for p in patterns if p.regex.search(text)]


# ═══════════════════════════════════════════════════════
# HEADER RULES
# ═══════════════════════════════════════════════════════

DEFAULT_HEADER_POLICY: List[Dict[str, Any]] = [
    {"header": "content-security-policy", "severity": "high", "required": "always"},
    {"header": "x-frame-options", "severity": "high", "required": "always",
     "allowed_values": ["DENY", "SAMEORIGIN"]},
    {"header": "x-content-type-options", "severity": "medium", "required": "always",
     "allowed_values": ["nosniff"]},
    {"header": "strict-transport-security", "severity": "high", "required": "encrypted_transport"},
    {"header": "referrer-policy", "severity": "low", "required": "always"},
    {"header": "permissions-policy", "severity": "medium", "required": "never"},
    {"header": "x-xss-protection", "severity": "low", "required": "never"},
]


def _parse_requirement(value: Union[str, bool, None], header: str) -> Requirement:
    if value is True:
        return Requirement.ALWAYS
    if value is False or value is None:
        return Requirement.NEVER
    try:
        return Requirement(str(value).strip().lower())
    except ValueError:
        raise PolicyError(f"Unknown requirement {value!r} for header {header!r}") from None


def parse_header_rule(entry: Mapping[str, Any]) -> HeaderRule:
    """
    Разобрать одно правило политики.

    Raises:
        PolicyError: неизвестная severity, неизвестное условие required
            или пустой набор allowed_values
    """
    header = as_text(entry.get("header")).strip().lower()
    if not header:
        raise PolicyError(f"Header rule without header name: {dict(entry)!r}")

    try:
        severity = Severity.parse(entry.get("severity"))
    except ValueError:
        raise PolicyError(
            f"Unknown severity {entry.get('severity')!r} for header {header!r}"
        ) from None

    requirement = _parse_requirement(entry.get("required"), header)

    allowed = entry.get("allowed_values", entry.get("values"))
    allowed_values = None
    if allowed is not None:
        if isinstance(allowed, str) or not isinstance(allowed, Iterable):
            raise PolicyError(f"allowed_values for {header!r} must be a list of strings")
        allowed_values = frozenset(as_text(v) for v in allowed)
        if not allowed_values:
            raise PolicyError(f"Empty allowed_values for header {header!r}")

    return HeaderRule(
        header=header,
        severity=severity,
        requirement=requirement,
        allowed_values=allowed_values,
    )


def load_header_rules(entries: Iterable[Mapping[str, Any]]) -> Mapping[str, HeaderRule]:
    """Собрать неизменяемую таблицу правил по имени заголовка в нижнем регистре."""
    rules: Dict[str, HeaderRule] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise PolicyError(f"Header rule must be an object, got {type(entry).__name__}")
        rule = parse_header_rule(entry)
        if rule.header in rules:
            raise PolicyError(f"Duplicate rule for header {rule.header!r}")
        rules[rule.header] = rule
    return MappingProxyType(rules)


def load_policy_file(path: Path) -> Mapping[str, HeaderRule]:
    """
    Загрузить таблицу правил из JSON файла.

    Формат: список объектов {"header", "severity", "required", "allowed_values"}
    или объект {"header_rules": [...]}.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PolicyError(f"Cannot read policy file {path}: {e}") from e

    if isinstance(data, Mapping):
        data = data.get("header_rules")
    if not isinstance(data, list):
        raise PolicyError(f"Policy file {path} must contain a list of header rules")

    rules = load_header_rules(data)
    logger.info(f"Loaded {len(rules)} header rules from {path}")
    return rules


DEFAULT_HEADER_RULES: Mapping[str, HeaderRule] = load_header_rules(DEFAULT_HEADER_POLICY)
