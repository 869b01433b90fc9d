"""
E2E‑тесты HTTP API (FastAPI) поверх backend.main.app.

Кэш заголовков глобальный для процесса, поэтому каждый тест
использует собственный tab_id.
"""

import pytest
from fastapi.testclient import TestClient

from backend.main import app
import backend.main as main_mod


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    main_mod.header_cache.clear()


SAMPLE_PAYLOAD = {
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
}


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["header_rules"] == 7


class TestTabs:
    """Кэш заголовков по вкладкам"""

    def test_put_get_delete(self, client):
        response = client.put("/tabs/11/headers", json={
            "type": "main_frame",
            "responseHeaders": [{"name": "X-Frame-Options", "value": "DENY"}],
        })
        assert response.status_code == 200
        assert response.json() == {"tab_id": "11", "headers": {"x-frame-options": "DENY"}, "cached": True}

        assert client.get("/tabs/11/headers").json()["headers"] == {"x-frame-options": "DENY"}

        assert client.delete("/tabs/11").status_code == 204
        data = client.get("/tabs/11/headers").json()
        assert data == {"tab_id": "11", "headers": {}, "cached": False}

    def test_sub_resource_not_cached(self, client):
        response = client.put("/tabs/12/headers", json={
            "type": "xmlhttprequest",
            "responseHeaders": [{"name": "X-Frame-Options", "value": "DENY"}],
        })
        assert response.json()["cached"] is False
        assert client.get("/tabs/12/headers").json()["headers"] == {}


class TestAudit:
    """Полный аудит через API"""

    def test_sample_page(self, client):
        response = client.post("/audit", json=SAMPLE_PAYLOAD)
        assert response.status_code == 200

        data = response.json()
        assert data["total_issues"] == 11
        assert data["counts"] == {"critical": 4, "high": 3, "medium": 3, "low": 1}
        assert len(data["issues"]) == 11
        assert data["leaks"][0]["pattern"] == "password"
        assert len(data["checks"]) == 4

    def test_uses_cached_headers_for_tab(self, client):
        client.put("/tabs/21/headers", json={"responseHeaders": [
            {"name": "Content-Security-Policy", "value": "default-src 'self'"},
            {"name": "X-Frame-Options", "value": "DENY"},
            {"name": "X-Content-Type-Options", "value": "nosniff"},
            {"name": "Strict-Transport-Security", "value": "max-age=63072000"},
            {"name": "Referrer-Policy", "value": "no-referrer"},
        ]})

        response = client.post("/audit", json={"tab_id": "21", "url": "https://example.com/"})
        assert response.json()["total_issues"] == 0

    def test_unknown_tab_means_empty_headers(self, client):
        response = client.post("/audit", json={"tab_id": "99", "url": "http://example.com/"})
        titles = sorted(i["title"] for i in response.json()["issues"])
        assert titles == [
            "Missing content-security-policy header",
            "Missing referrer-policy header",
            "Missing x-content-type-options header",
            "Missing x-frame-options header",
        ]

    def test_nothing_to_check(self, client):
        response = client.post("/audit", json={})
        assert response.status_code == 200
        assert response.json()["total_issues"] == 0


class TestConsole:

    def test_leak(self, client):
        response = client.post("/console", json={"level": "error", "args": ["api_key=123", 5]})
        assert response.status_code == 200
        leak = response.json()["leak"]
        assert leak["level"] == "error"
        assert leak["excerpt"] == "api_key=123"

    def test_clean(self, client):
        response = client.post("/console", json={"level": "log", "args": ["hello"]})
        assert response.json() == {"leak": None}
