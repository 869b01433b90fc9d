"""
Core data models for the audit engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlsplit


class Severity(Enum):
    """Уровень серьёзности проблемы."""
    CRITICAL = "critical"  # Утечка чувствительных данных
    HIGH = "high"          # Серьёзная ошибка конфигурации
    MEDIUM = "medium"      # Проблема средней важности
    LOW = "low"            # Незначительная проблема или улучшение

    @property
    def rank(self) -> int:
        """Порядковый ранг: critical > high > medium > low."""
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Преобразовать строку в Severity (ValueError для неизвестных значений)."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


_SEVERITY_RANK = {
    Severity.CRITICAL: 3,
    Severity.HIGH: 2,
    Severity.MEDIUM: 1,
    Severity.LOW: 0,
}

SEVERITY_ORDER = [Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW]


class Category(Enum):
    """Категория проблемы."""
    HEADERS = "headers"    # Заголовки ответа
    COOKIES = "cookies"    # Атрибуты и содержимое cookies
    STORAGE = "storage"    # localStorage / sessionStorage
    CONSOLE = "console"    # Утечки через console.*


CONSOLE_LEVELS = ("log", "warn", "error", "info")

_LEVEL_ALIASES = {
    "warning": "warn",
    "debug": "log",
    "critical": "error",
    "fatal": "error",
}


def as_text(value: Any) -> str:
    """
    Строковое представление произвольного значения для проверки паттернами.

    None превращается в пустую строку, bytes декодируются как UTF-8.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Enum):
        return as_text(value.value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def as_flag(value: Any) -> bool:
    """Мягкое преобразование в bool: всё непонятное считается отсутствующим флагом."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return False


def normalize_level(level: Any) -> str:
    """Привести уровень логирования к log|warn|error|info."""
    text = as_text(level).strip().lower()
    text = _LEVEL_ALIASES.get(text, text)
    return text if text in CONSOLE_LEVELS else "log"


def is_encrypted_url(url: Optional[str]) -> bool:
    """Страница загружена по зашифрованному транспорту (https / wss)."""
    if not url:
        return False
    try:
        scheme = urlsplit(url).scheme
    except ValueError:
        return False
    return scheme.lower() in ("https", "wss")


# ═══════════════════════════════════════════════════════
# ARTIFACTS
# ═══════════════════════════════════════════════════════

@dataclass(frozen=True)
class HeaderArtifact:
    """Заголовок ответа."""
    name: str
    value: str


@dataclass(frozen=True)
class CookieRecord:
    """Cookie с атрибутами безопасности."""
    name: str
    value: str = ""
    secure: bool = False
    http_only: bool = False
    same_site: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CookieRecord":
        """
        Создать из словаря (формат chrome.cookies или snake_case).

        Отсутствующие или некорректные поля трактуются как отсутствующие атрибуты.
        """
        same_site = data.get("sameSite", data.get("same_site"))
        same_site_text = as_text(same_site).strip() if same_site is not None else ""
        return cls(
            name=as_text(data.get("name")),
            value=as_text(data.get("value")),
            secure=as_flag(data.get("secure")),
            http_only=as_flag(data.get("httpOnly", data.get("http_only"))),
            same_site=same_site_text or None,
        )


@dataclass(frozen=True)
class StorageEntry:
    """Пара ключ/значение из именованного хранилища."""
    store: str
    key: str
    value: Any


@dataclass(frozen=True)
class LoggedValue:
    """Один аргумент вызова console.* в строковом виде."""
    level: str
    text: str


@dataclass(frozen=True)
class ConsoleEvent:
    """Перехваченный вызов console.<level>(*args)."""
    level: str
    args: Tuple[Any, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConsoleEvent":
        args = data.get("args", data.get("message", ()))
        if isinstance(args, (list, tuple)):
            args = tuple(args)
        else:
            args = (args,)
        return cls(level=normalize_level(data.get("level", data.get("type"))), args=args)


@dataclass
class PageArtifacts:
    """Артефакты одной загрузки страницы для одного прогона аудита."""

    url: Optional[str] = None
    encrypted_transport: bool = False
    headers: Optional[Dict[str, str]] = None  # None: заголовки не собирались
    cookies: List[CookieRecord] = field(default_factory=list)
    storage: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)
    console: List[ConsoleEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "PageArtifacts":
        """
        Собрать артефакты из JSON-подобного словаря.

        Никогда не бросает исключений: всё, что не удалось разобрать,
        считается отсутствующим ("нечего проверять").
        """
        if not isinstance(data, Mapping):
            return cls()

        url = data.get("url")
        url = url if isinstance(url, str) and url else None

        if data.get("encrypted_transport") is not None:
            encrypted = as_flag(data.get("encrypted_transport"))
        else:
            encrypted = is_encrypted_url(url)

        return cls(
            url=url,
            encrypted_transport=encrypted,
            headers=None if data.get("headers") is None else normalize_headers(data.get("headers")),
            cookies=[
                CookieRecord.from_dict(c)
                for c in _as_list(data.get("cookies"))
                if isinstance(c, Mapping)
            ],
            storage=_parse_storage(data.get("storage")),
            console=[
                ConsoleEvent.from_dict(e)
                for e in _as_list(data.get("console"))
                if isinstance(e, Mapping)
            ],
        )


def _as_list(value: Any) -> list:
    return list(value) if isinstance(value, (list, tuple)) else []


def normalize_headers(raw: Any) -> Dict[str, str]:
    """
    Привести заголовки к {lower-case name: value}.

    Принимает dict, список HeaderArtifact или список {"name", "value"}
    (формат webRequest).
    """
    headers: Dict[str, str] = {}
    if isinstance(raw, Mapping):
        items = list(raw.items())
    else:
        items = []
        for h in _as_list(raw):
            if isinstance(h, HeaderArtifact):
                items.append((h.name, h.value))
            elif isinstance(h, Mapping):
                items.append((h.get("name"), h.get("value")))
    for name, value in items:
        if name is None or value is None:
            continue
        headers[as_text(name).lower()] = as_text(value)
    return headers


def _parse_storage(raw: Any) -> List[Tuple[str, Dict[str, Any]]]:
    """Хранилища как {"localStorage": {...}} или список пар [name, {...}]."""
    if isinstance(raw, Mapping):
        pairs = raw.items()
    else:
        pairs = [p for p in _as_list(raw) if isinstance(p, (list, tuple)) and len(p) == 2]
    return [
        (as_text(name), dict(entries))
        for name, entries in pairs
        if isinstance(entries, Mapping)
    ]


# ═══════════════════════════════════════════════════════
# RESULTS
# ═══════════════════════════════════════════════════════

@dataclass
class Issue:
    """Проблема, найденная в ходе аудита."""

    id: str
    category: Category
    severity: Severity
    title: str
    description: str
    location: str  # header name, cookie name, store:key или console.<level>
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "id": self.id,
            "category": self.category.value,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "metadata": self.metadata,
        }

    def to_markdown(self) -> str:
        """Преобразовать в markdown для отчёта."""
        md = f"### {SEVERITY_EMOJI[self.severity]} [{self.severity.value.upper()}] {self.title}\n\n"
        md += f"**Category:** {self.category.value}\n\n"
        md += f"**Location:** `{self.location}`\n\n"
        md += f"**Description:** {self.description}\n\n"
        return md


SEVERITY_EMOJI = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "🟠",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🟢",
}


@dataclass(frozen=True)
class LeakNotification:
    """Уведомление об утечке чувствительных данных через console."""
    level: str
    excerpt: str
    pattern: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "excerpt": self.excerpt,
            "pattern": self.pattern,
            "category": self.category,
        }


@dataclass
class CheckResult:
    """Результат выполнения одного checker'а."""

    check_name: str
    passed: bool
    issue_count: int
    duration_ms: float
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "check_name": self.check_name,
            "passed": self.passed,
            "issue_count": self.issue_count,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class AuditReport:
    """Итоговый отчёт аудита."""

    timestamp: datetime
    url: Optional[str]
    total_issues: int
    issues_by_severity: Dict[str, int]
    issues_by_category: Dict[str, int]
    check_results: List[CheckResult]
    all_issues: List[Issue]
    leaks: List[LeakNotification]
    duration_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "url": self.url,
            "total_issues": self.total_issues,
            "issues_by_severity": self.issues_by_severity,
            "issues_by_category": self.issues_by_category,
            "check_results": [cr.to_dict() for cr in self.check_results],
            "all_issues": [issue.to_dict() for issue in self.all_issues],
            "leaks": [leak.to_dict() for leak in self.leaks],
            "duration_seconds": self.duration_seconds,
        }

    def get_issues(self, severity: Severity) -> List[Issue]:
        """Получить проблемы заданной серьёзности."""
        return [i for i in self.all_issues if i.severity == severity]

    def get_critical_issues(self) -> List[Issue]:
        """Получить только критические проблемы."""
        return self.get_issues(Severity.CRITICAL)

    def get_high_issues(self) -> List[Issue]:
        """Получить проблемы высокой важности."""
        return self.get_issues(Severity.HIGH)
