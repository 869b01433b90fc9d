"""
CLI интерфейс для аудита страниц.

Использует Rich для красивого вывода.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import httpx
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from webaudit.collectors.http_collector import HttpCollector
from webaudit.config import AuditConfig
from webaudit.core.errors import AuditError
from webaudit.core.models import SEVERITY_EMOJI, SEVERITY_ORDER, Category, PageArtifacts
from webaudit.engine import AuditEngine
from webaudit.reports.generator import ReportGenerator

load_dotenv()

app = typer.Typer(
    name="webaudit",
    help="Web Page Security Audit — заголовки, cookies, storage и утечки в console"
)
console = Console()

SEVERITY_STYLE = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "green",
}


def setup_logging(verbose: bool = False):
    """Настроить логирование."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def render_results(engine: AuditEngine) -> None:
    """Вывести счётчики и таблицу проблем по каждой категории."""
    counts = engine.counts()
    summary = "  ".join(
        f"{SEVERITY_EMOJI[s]} [{SEVERITY_STYLE[s.value]}]{s.value.capitalize()}: {counts[s.value]}[/]"
        for s in SEVERITY_ORDER
    )
    console.print(Panel(summary, title=f"🔒 {engine.url or 'page'}"))

    grouped = engine.sink.by_category()
    for category in Category:
        issues = grouped[category]
        if not issues:
            continue
        table = Table(title=f"{category.value} ({len(issues)})")
        table.add_column("Severity", style="bold")
        table.add_column("Issue", style="cyan")
        table.add_column("Description", style="dim")
        for issue in issues:
            style = SEVERITY_STYLE[issue.severity.value]
            table.add_row(f"[{style}]{issue.severity.value}[/]", issue.title, issue.description)
        console.print(table)

    for leak in engine.leaks:
        console.print(f"[red]⚠ console.{leak.level}[/] ({leak.pattern}): [dim]{leak.excerpt}[/]")

    if engine.sink.total == 0:
        console.print("[green]✅ No issues found[/]")


def finish(engine: AuditEngine, config: AuditConfig, report: Optional[str]) -> None:
    """Отрисовать результаты, сохранить отчёт и выйти с кодом 1 при critical."""
    render_results(engine)

    if report:
        generator = ReportGenerator(output_dir=config.report_output_dir)
        path = generator.generate_report(generator.create_report(engine), format=report)
        console.print(f"[dim]Report: {path}[/]")

    for result in engine.check_results:
        if result.error:
            console.print(f"[yellow]⚠️  {result.check_name} failed: {result.error}[/]")

    if engine.counts()["critical"] > 0:
        raise typer.Exit(1)


def load_config() -> AuditConfig:
    """AuditConfig из окружения; некорректные значения дают exit code 2."""
    try:
        return AuditConfig()
    except ValueError as e:
        console.print(f"[red]❌ Invalid configuration: {e}[/]")
        raise typer.Exit(2)


def run_engine(config: AuditConfig, artifacts: PageArtifacts) -> AuditEngine:
    try:
        engine = AuditEngine(config=config)
    except AuditError as e:
        console.print(f"[red]❌ {e}[/]")
        raise typer.Exit(2)
    if config.parallel_checks:
        asyncio.run(engine.run_concurrently(artifacts))
    else:
        engine.run(artifacts)
    return engine


@app.command()
def scan(
    artifacts_file: Path = typer.Argument(..., help="JSON файл с артефактами страницы"),
    report: Optional[str] = typer.Option(None, "--report", "-r", help="markdown или json"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """🔍 Аудит артефактов из JSON файла."""
    setup_logging(verbose)
    config = load_config()

    try:
        data = json.loads(artifacts_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]❌ Cannot read {artifacts_file}: {e}[/]")
        raise typer.Exit(2)

    engine = run_engine(config, PageArtifacts.from_dict(data))
    finish(engine, config, report)


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL страницы"),
    report: Optional[str] = typer.Option(None, "--report", "-r", help="markdown или json"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """🌐 Загрузить страницу и проверить заголовки и cookies."""
    setup_logging(verbose)
    config = load_config()

    try:
        with console.status(f"[bold blue]Fetching {url}...[/]"):
            artifacts = HttpCollector(config).collect(url)
    except AuditError as e:
        console.print(f"[red]❌ {e}[/]")
        raise typer.Exit(2)

    engine = run_engine(config, artifacts)
    finish(engine, config, report)


@app.command()
def health():
    """🏥 Проверить статус backend."""
    config = load_config()

    try:
        response = httpx.get(f"{config.backend_url}/health", timeout=5)
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        console.print(f"🔴 Backend недоступен: {e}")
        raise typer.Exit(1)

    status = "🟢" if data.get("status") == "ok" else "🔴"
    console.print(f"{status} Backend: {data.get('status')}")
    console.print(f"   Version: {data.get('version', 'N/A')}")
    console.print(f"   Header rules: {data.get('header_rules', 'N/A')}")
    console.print(f"   Cached tabs: {data.get('cached_tabs', 'N/A')}")


if __name__ == "__main__":
    app()
