"""
Web Page Security Audit

Эвристический аудит runtime-артефактов веб-страницы:
- HTTP заголовки ответа (security headers)
- Cookies (Secure / HttpOnly / SameSite, чувствительные данные)
- localStorage / sessionStorage
- Утечки чувствительных данных в console

Usage:
    webaudit scan artifacts.json
    webaudit fetch https://example.com
"""

from webaudit.core.errors import AuditError, CollectorError, PolicyError
from webaudit.core.models import Category, Issue, PageArtifacts, Severity
from webaudit.core.sink import IssueSink
from webaudit.engine import AuditEngine

__version__ = "1.0.0"

__all__ = [
    "AuditEngine",
    "AuditError",
    "Category",
    "CollectorError",
    "Issue",
    "IssueSink",
    "PageArtifacts",
    "PolicyError",
    "Severity",
]
