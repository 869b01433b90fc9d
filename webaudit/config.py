"""
Configuration for the audit engine.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from webaudit.core.policy import DEFAULT_HEADER_RULES, HeaderRule, load_policy_file


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


@dataclass
class AuditConfig:
    """Конфигурация аудита."""

    # === Policy ===
    policy_file: Optional[Path] = field(default_factory=lambda: _env_path("WEBAUDIT_POLICY_FILE"))

    # === Execution Settings ===
    parallel_checks: bool = field(default_factory=lambda: _env_flag("WEBAUDIT_PARALLEL", False))
    scan_console: bool = True

    # === HTTP collector ===
    request_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("WEBAUDIT_TIMEOUT", "10"))
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv("WEBAUDIT_USER_AGENT", "webaudit/1.0")
    )

    # === Backend ===
    backend_url: str = field(
        default_factory=lambda: os.getenv("WEBAUDIT_BACKEND_URL", "http://localhost:8000")
    )

    # === Report Settings ===
    report_output_dir: Path = field(
        default_factory=lambda: Path(os.getenv("WEBAUDIT_REPORT_DIR", "audit_reports"))
    )

    def __post_init__(self):
        """Validate configuration."""
        # Ensure paths are Path objects
        if self.policy_file is not None:
            self.policy_file = Path(self.policy_file)
        self.report_output_dir = Path(self.report_output_dir)

        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")

    def load_header_rules(self) -> Mapping[str, HeaderRule]:
        """Таблица правил: из policy_file, если задан, иначе встроенная."""
        if self.policy_file is None:
            return DEFAULT_HEADER_RULES
        return load_policy_file(self.policy_file)


def get_default_config() -> AuditConfig:
    """Получить конфигурацию по умолчанию."""
    return AuditConfig()
