"""
Unit tests для AuditEngine.
"""

import json

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from webaudit.config import AuditConfig
from webaudit.core.errors import PolicyError
from webaudit.core.models import Category, CookieRecord, PageArtifacts, Severity
from webaudit.engine import AuditEngine

EXPECTED_COUNTS = {"critical": 4, "high": 3, "medium": 3, "low": 1}


class TestAuditEngine:
    """Полный прогон аудита"""

    def test_sample_page(self, engine, sample_artifacts):
        sink = engine.run(sample_artifacts)

        assert sink.total == 11
        assert engine.counts() == EXPECTED_COUNTS

        by_category = {c: len(issues) for c, issues in sink.by_category().items()}
        assert by_category == {
            Category.HEADERS: 4,
            Category.COOKIES: 4,
            Category.STORAGE: 2,
            Category.CONSOLE: 1,
        }
        assert engine.url == "https://shop.example.com/"
        assert [leak.pattern for leak in engine.leaks] == ["password"]

    def test_check_results(self, engine, sample_artifacts):
        engine.run(sample_artifacts)
        results = {r.check_name: r for r in engine.check_results}

        assert set(results) == {"HeaderChecker", "CookieChecker", "StorageChecker", "ConsoleLeakDetector"}
        assert results["HeaderChecker"].issue_count == 4
        assert not any(r.passed for r in results.values())
        assert all(r.error is None for r in results.values())

    def test_run_resets_previous_results(self, engine, sample_artifacts):
        engine.run(sample_artifacts)
        first = engine.counts()
        engine.run(sample_artifacts)

        assert engine.counts() == first
        assert engine.sink.total == 11
        assert len(engine.leaks) == 1

    def test_empty_artifacts(self, engine):
        sink = engine.run(PageArtifacts())
        assert sink.total == 0
        assert all(r.passed for r in engine.check_results)

    def test_console_scan_disabled(self, tmp_path, sample_artifacts):
        engine = AuditEngine(config=AuditConfig(scan_console=False, report_output_dir=tmp_path))
        engine.run(sample_artifacts)
        assert engine.counts()["critical"] == 3
        assert engine.leaks == []

    def test_crashing_checker_does_not_abort_run(self, engine, sample_artifacts, monkeypatch):
        def crash(artifacts):
            raise RuntimeError("cookie jar exploded")

        monkeypatch.setattr(engine.cookies, "_check", crash)
        engine.run(sample_artifacts)

        results = {r.check_name: r for r in engine.check_results}
        assert results["CookieChecker"].passed is False
        assert "cookie jar exploded" in results["CookieChecker"].error
        assert engine.sink.total == 7
        assert not engine.sink.by_category()[Category.COOKIES]

    def test_malformed_records_keep_valid_issues(self, engine):
        ok = CookieRecord(name="theme", value="dark", http_only=True, same_site="lax")
        artifacts = PageArtifacts(
            encrypted_transport=True,
            cookies=[None, ok],
            storage=[("broken",), ("localStorage", {"token": "x"})],
            console=[None, {"level": "warn", "args": ["secret"]}],
        )
        engine.run(artifacts)

        assert all(r.error is None for r in engine.check_results)
        assert engine.counts() == {"critical": 2, "high": 1, "medium": 0, "low": 0}
        assert [leak.level for leak in engine.leaks] == ["warn"]

    def test_check_console_outside_run(self, engine):
        leak = engine.check_console("error", ["jwt=eyJhbGciOi"])
        assert leak.pattern == "jwt"
        assert engine.counts()["critical"] == 1

    def test_policy_file_from_config(self, tmp_path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps([{"header": "x-custom", "severity": "low", "required": "always"}]))
        engine = AuditEngine(config=AuditConfig(policy_file=path))
        engine.run(PageArtifacts(headers={}))

        [issue] = engine.issues()
        assert issue.title == "Missing x-custom header"
        assert issue.severity == Severity.LOW

    def test_invalid_policy_fails_on_construction(self, tmp_path):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps([{"header": "x-custom", "severity": "urgent"}]))
        with pytest.raises(PolicyError):
            AuditEngine(config=AuditConfig(policy_file=path))


class TestConcurrentRun:
    """Параллельный прогон даёт тот же результат"""

    @pytest.mark.asyncio
    async def test_same_result_as_sequential(self, engine, sample_artifacts):
        sink = await engine.run_concurrently(sample_artifacts)

        assert sink.total == 11
        assert engine.counts() == EXPECTED_COUNTS
        assert len(engine.check_results) == 4

    @pytest.mark.asyncio
    async def test_crashing_checker(self, engine, sample_artifacts, monkeypatch):
        def crash(artifacts):
            raise RuntimeError("boom")

        monkeypatch.setattr(engine.storage, "_check", crash)
        await engine.run_concurrently(sample_artifacts)

        failed = [r for r in engine.check_results if r.error]
        assert [r.check_name for r in failed] == ["StorageChecker"]
        assert engine.sink.total == 9


cookie_strategy = st.builds(
    CookieRecord,
    name=st.sampled_from(["theme", "prefs", "session_id", "auth_token", "lang"]),
    value=st.sampled_from(["", "dark", "bearer xyz", "1"]),
    secure=st.booleans(),
    http_only=st.booleans(),
    same_site=st.sampled_from([None, "lax", "strict", "none", "no_restriction", "unspecified"]),
)


class TestEngineProperties:
    """Property-based: tally совпадает с содержимым sink"""

    @settings(max_examples=50, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(
        cookies=st.lists(cookie_strategy, max_size=6),
        encrypted=st.booleans(),
        messages=st.lists(st.sampled_from(["hello", "token=1", "my email", "ok"]), max_size=5),
    )
    def test_tally_matches_issues(self, cookies, encrypted, messages):
        artifacts = PageArtifacts.from_dict({
            "url": "https://example.com" if encrypted else "http://example.com",
            "headers": {},
            "console": [{"level": "log", "args": [m]} for m in messages],
        })
        artifacts.cookies = cookies

        engine = AuditEngine(config=AuditConfig(report_output_dir="unused"))
        engine.run(artifacts)

        issues = engine.issues()
        counts = engine.counts()
        for severity in Severity:
            assert counts[severity.value] == sum(1 for i in issues if i.severity == severity)
        assert sum(r.issue_count for r in engine.check_results) == len(issues)
        assert len(engine.leaks) == sum(1 for m in messages if m in ("token=1", "my email"))
