"""
Pytest configuration for the web page audit project.

Гарантирует, что пакеты `webaudit`, `backend` и `cli` доступны для импортов
в тестах, даже если pytest запускается из корня проекта без установки пакета.
"""

import os
import sys

import pytest

# Корень проекта (там, где находится папка webaudit)
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from webaudit.config import AuditConfig  # noqa: E402
from webaudit.core.models import CookieRecord, PageArtifacts  # noqa: E402
from webaudit.core.sink import IssueSink  # noqa: E402
from webaudit.engine import AuditEngine  # noqa: E402


# ═══════════════════════════════════════════════════════
# CONFIGURATION
# ═══════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Тесты не должны зависеть от WEBAUDIT_* переменных окружения."""
    for name in list(os.environ):
        if name.startswith("WEBAUDIT_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config(tmp_path):
    """Test configuration с отчётами во временной директории."""
    return AuditConfig(report_output_dir=tmp_path / "reports")


@pytest.fixture
def sink():
    return IssueSink()


@pytest.fixture
def engine(config):
    return AuditEngine(config=config)


# ═══════════════════════════════════════════════════════
# ARTIFACTS
# ═══════════════════════════════════════════════════════

SECURE_HEADERS = {
    "content-security-policy": "default-src 'self'",
    "x-frame-options": "DENY",
    "x-content-type-options": "nosniff",
    "strict-transport-security": "max-age=63072000",
    "referrer-policy": "no-referrer",
}


@pytest.fixture
def secure_headers():
    return dict(SECURE_HEADERS)


@pytest.fixture
def clean_cookie():
    """Cookie без замечаний."""
    return CookieRecord(name="prefs", value="1", secure=True, http_only=True, same_site="lax")


@pytest.fixture
def sample_artifacts():
    """Страница с проблемами во всех категориях."""
    return PageArtifacts.from_dict({
        "url": "https://shop.example.com/",
        "headers": {"X-Frame-Options": "DENY"},
        "cookies": [
            {"name": "session_id", "value": "abc", "secure": False, "httpOnly": False},
            {"name": "prefs", "value": "1", "secure": True, "httpOnly": True, "sameSite": "strict"},
        ],
        "storage": {
            "localStorage": {"authToken": "abc", "theme": "dark"},
            "sessionStorage": {"cart": "3 items"},
        },
        "console": [
            {"level": "log", "args": ["page loaded"]},
            {"level": "warn", "args": ["user password is hunter2"]},
        ],
    })
