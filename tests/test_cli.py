"""
Тесты CLI (typer CliRunner).
"""

import json

import pytest
from typer.testing import CliRunner

from cli.main import app
from webaudit.collectors.http_collector import HttpCollector
from webaudit.core.errors import CollectorError
from webaudit.core.models import PageArtifacts

from conftest import SECURE_HEADERS

runner = CliRunner()


@pytest.fixture
def report_dir(tmp_path, monkeypatch):
    path = tmp_path / "reports"
    monkeypatch.setenv("WEBAUDIT_REPORT_DIR", str(path))
    return path


def write_artifacts(tmp_path, data):
    path = tmp_path / "page.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestScan:
    """Команда scan"""

    def test_clean_page_exits_zero(self, tmp_path):
        path = write_artifacts(tmp_path, {"url": "https://example.com/", "headers": SECURE_HEADERS})
        result = runner.invoke(app, ["scan", str(path)])
        assert result.exit_code == 0
        assert "No issues found" in result.output

    def test_critical_issues_exit_one(self, tmp_path):
        path = write_artifacts(tmp_path, {
            "url": "https://example.com/",
            "headers": SECURE_HEADERS,
            "storage": {"localStorage": {"authToken": "abc"}},
        })
        result = runner.invoke(app, ["scan", str(path)])
        assert result.exit_code == 1
        assert "storage (2)" in result.output

    def test_report_written(self, tmp_path, report_dir):
        path = write_artifacts(tmp_path, {"url": "https://example.com/", "headers": {}})
        result = runner.invoke(app, ["scan", str(path), "--report", "json"])

        assert result.exit_code == 0
        [report] = list(report_dir.glob("audit_report_*.json"))
        assert json.loads(report.read_text(encoding="utf-8"))["total_issues"] == 5

    def test_parallel_checks(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WEBAUDIT_PARALLEL", "true")
        path = write_artifacts(tmp_path, {
            "url": "https://example.com/",
            "headers": SECURE_HEADERS,
            "console": [{"level": "error", "args": ["password=1"]}],
        })
        result = runner.invoke(app, ["scan", str(path)])
        assert result.exit_code == 1
        assert "console (1)" in result.output

    @pytest.mark.parametrize("timeout", ["soon", "0"])
    def test_invalid_config_exits_two(self, tmp_path, monkeypatch, timeout):
        monkeypatch.setenv("WEBAUDIT_TIMEOUT", timeout)
        path = write_artifacts(tmp_path, {})
        result = runner.invoke(app, ["scan", str(path)])
        assert result.exit_code == 2
        assert "Invalid configuration" in result.output

    def test_invalid_json_exits_two(self, tmp_path):
        path = tmp_path / "page.json"
        path.write_text("{broken", encoding="utf-8")
        result = runner.invoke(app, ["scan", str(path)])
        assert result.exit_code == 2

    def test_invalid_policy_exits_two(self, tmp_path, monkeypatch):
        policy = tmp_path / "policy.json"
        policy.write_text(json.dumps([{"header": "x", "severity": "urgent"}]), encoding="utf-8")
        monkeypatch.setenv("WEBAUDIT_POLICY_FILE", str(policy))

        path = write_artifacts(tmp_path, {})
        result = runner.invoke(app, ["scan", str(path)])
        assert result.exit_code == 2


class TestFetch:
    """Команда fetch (сеть подменена)"""

    def test_fetch(self, monkeypatch):
        def collect(self, url):
            return PageArtifacts(url=url, encrypted_transport=True, headers=dict(SECURE_HEADERS))

        monkeypatch.setattr(HttpCollector, "collect", collect)
        result = runner.invoke(app, ["fetch", "https://example.com/"])
        assert result.exit_code == 0

    def test_network_error_exits_two(self, monkeypatch):
        def collect(self, url):
            raise CollectorError(url, "ConnectError: boom")

        monkeypatch.setattr(HttpCollector, "collect", collect)
        result = runner.invoke(app, ["fetch", "https://down.example.com/"])
        assert result.exit_code == 2
        assert "boom" in result.output
