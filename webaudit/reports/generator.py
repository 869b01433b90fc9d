"""
Report generator for audit results.

Generates:
- Markdown reports for human reading
- JSON reports for machine processing
- Recommendations based on issue patterns
"""

import json
import uuid
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.models import SEVERITY_EMOJI, SEVERITY_ORDER, AuditReport, Category, Issue, Severity


class ReportGenerator:
    """Генератор отчётов аудита."""

    def __init__(self, output_dir: Optional[Path] = None):
        """
        Args:
            output_dir: Директория для сохранения отчётов (по умолчанию audit_reports/)
        """
        self.output_dir = Path(output_dir or "audit_reports")

    def create_report(self, engine) -> AuditReport:
        """Собрать AuditReport из состояния движка после прогона."""
        all_issues = engine.issues()

        issues_by_category = defaultdict(int)
        for issue in all_issues:
            issues_by_category[issue.category.value] += 1

        return AuditReport(
            timestamp=datetime.now(),
            url=engine.url,
            total_issues=len(all_issues),
            issues_by_severity=engine.counts(),
            issues_by_category=dict(issues_by_category),
            check_results=list(engine.check_results),
            all_issues=all_issues,
            leaks=engine.leaks,
            duration_seconds=engine.duration_seconds,
        )

    def generate_report(self, audit_report: AuditReport, format: str = "markdown") -> str:
        """
        Генерация отчёта.

        Args:
            audit_report: Данные аудита
            format: Формат отчёта ("markdown" или "json")

        Returns:
            Путь к сгенерированному файлу
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        if format == "json":
            return self.generate_json_report(audit_report)
        return self.generate_markdown_report(audit_report)

    def render_markdown(self, audit_report: AuditReport) -> str:
        """Markdown-текст отчёта."""
        lines = []

        # Header
        lines.append("# Web Page Security Audit Report")
        lines.append("")
        lines.append(f"**Page:** {audit_report.url or 'unknown'}")
        lines.append(f"**Date:** {audit_report.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append("")

        # Executive Summary
        lines.append("## Executive Summary")
        lines.append("")
        lines.append(f"- **Total Issues:** {audit_report.total_issues}")
        for severity in SEVERITY_ORDER:
            count = audit_report.issues_by_severity.get(severity.value, 0)
            lines.append(f"- {SEVERITY_EMOJI[severity]} **{severity.value.capitalize()}:** {count}")
        lines.append("")

        # Issues by Category
        lines.append("## Issues by Category")
        for category, count in sorted(audit_report.issues_by_category.items(), key=lambda x: -x[1]):
            lines.append(f"- **{category}:** {count}")
        lines.append("")

        # Check Results Summary
        lines.append("## Checks")
        lines.append("")
        for result in audit_report.check_results:
            status = "✅ PASSED" if result.passed else "❌ FAILED"
            lines.append(f"### {result.check_name} - {status}")
            lines.append(f"Duration: {result.duration_ms:.2f}ms")
            lines.append(f"Issues: {result.issue_count}")
            if result.error:
                lines.append(f"Error: `{result.error}`")
            lines.append("")

        # Issues, most severe first
        for severity in SEVERITY_ORDER:
            issues = audit_report.get_issues(severity)
            if not issues:
                continue
            lines.append(f"## {SEVERITY_EMOJI[severity]} {severity.value.capitalize()} Issues")
            lines.append("")
            for issue in issues:
                lines.append(issue.to_markdown())

        # Console leaks
        if audit_report.leaks:
            lines.append("## Console Leaks")
            lines.append("")
            for leak in audit_report.leaks:
                lines.append(f"- `console.{leak.level}` ({leak.pattern}): `{leak.excerpt}`")
            lines.append("")

        # Recommendations
        recommendations = self.generate_recommendations(audit_report.all_issues)
        if recommendations:
            lines.append("## Recommendations")
            lines.append("")
            for i, rec in enumerate(recommendations, 1):
                lines.append(f"{i}. **{rec['title']}**")
                lines.append(f"   - {rec['description']}")
                lines.append(f"   - Priority: {rec['priority']}")
                lines.append("")

        # Footer
        lines.append("---")
        lines.append(f"*Audit completed in {audit_report.duration_seconds:.3f} seconds*")

        return "\n".join(lines)

    def generate_markdown_report(self, audit_report: AuditReport) -> str:
        """
        Генерация Markdown отчёта.

        Returns:
            Путь к файлу отчёта
        """
        filepath = self._report_path(audit_report, "md")

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(self.render_markdown(audit_report))

        return str(filepath)

    def generate_json_report(self, audit_report: AuditReport) -> str:
        """
        Генерация JSON отчёта.

        Returns:
            Путь к файлу отчёта
        """
        filepath = self._report_path(audit_report, "json")

        report_dict = audit_report.to_dict()
        report_dict['recommendations'] = self.generate_recommendations(audit_report.all_issues)

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(report_dict, f, indent=2, ensure_ascii=False)

        return str(filepath)

    def generate_recommendations(self, issues: List[Issue]) -> List[Dict[str, Any]]:
        """
        Генерация рекомендаций на основе паттернов проблем.

        Args:
            issues: Список проблем

        Returns:
            Список рекомендаций, отсортированный по приоритету
        """
        recommendations = []

        issues_by_category = defaultdict(list)
        for issue in issues:
            issues_by_category[issue.category].append(issue)

        # 1. Header issues
        header_issues = issues_by_category.get(Category.HEADERS, [])
        missing = [i for i in header_issues if i.title.startswith("Missing")]
        misconfigured = [i for i in header_issues if i.title.startswith("Misconfigured")]
        if missing:
            recommendations.append({
                'title': 'Add missing security headers',
                'description': f"Missing: {', '.join(i.location for i in missing)}",
                'priority': self._highest(missing).value,
                'affected_issues': len(missing),
                'action': 'Configure the web server or framework middleware to send these headers',
            })
        if misconfigured:
            recommendations.append({
                'title': 'Fix misconfigured security headers',
                'description': f'Found {len(misconfigured)} headers with values outside the allowed set',
                'priority': self._highest(misconfigured).value,
                'affected_issues': len(misconfigured),
                'action': 'Use one of the allowed values listed in each issue',
            })

        # 2. Cookie issues
        cookie_issues = issues_by_category.get(Category.COOKIES, [])
        flag_issues = [i for i in cookie_issues if i.title != "Sensitive data in cookie"]
        if flag_issues:
            recommendations.append({
                'title': 'Harden cookie attributes',
                'description': f'Found {len(flag_issues)} cookie attribute problems',
                'priority': self._highest(flag_issues).value,
                'affected_issues': len(flag_issues),
                'action': 'Set cookies with Secure; HttpOnly; SameSite=Lax or Strict',
            })

        # 3. Sensitive data anywhere
        leaked = [i for i in issues if i.severity == Severity.CRITICAL]
        if leaked:
            recommendations.append({
                'title': 'Remove sensitive data from client-side artifacts',
                'description': (
                    f'Found {len(leaked)} potential leaks in cookies, storage or console output'
                ),
                'priority': 'critical',
                'affected_issues': len(leaked),
                'action': 'Keep credentials and personal data server-side; strip them from logs',
            })

        priority_order = {s.value: n for n, s in enumerate(SEVERITY_ORDER)}
        recommendations.sort(key=lambda x: priority_order.get(x['priority'], 99))

        return recommendations

    def _report_path(self, audit_report: AuditReport, extension: str) -> Path:
        """Уникальное имя файла: отчёты одной секунды не перезаписывают друг друга."""
        timestamp_str = audit_report.timestamp.strftime("%Y%m%d_%H%M%S_%f")
        return self.output_dir / f"audit_report_{timestamp_str}_{uuid.uuid4().hex[:6]}.{extension}"

    @staticmethod
    def _highest(issues: List[Issue]) -> Severity:
        return max((i.severity for i in issues), key=lambda s: s.rank)

