"""
FastAPI backend для аудита страниц.

Роль фонового процесса расширения: хранит заголовки ответов по вкладкам,
принимает артефакты страницы и перехваченные вызовы console,
запускает движок аудита.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Mapping, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import get_settings
from backend.routers import audit, health, tabs
from webaudit import __version__
from webaudit.core.policy import HeaderRule
from webaudit.config import AuditConfig
from webaudit.header_cache import HeaderCache

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Глобальное состояние процесса
header_cache = HeaderCache()
audit_config: Optional[AuditConfig] = None
header_rules: Optional[Mapping[str, HeaderRule]] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle: startup и shutdown."""
    global audit_config, header_rules

    # === STARTUP ===
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    audit_config = AuditConfig(
        policy_file=Path(settings.policy_file) if settings.policy_file else None,
        scan_console=settings.scan_console,
    )
    # PolicyError здесь валит старт приложения
    header_rules = audit_config.load_header_rules()

    logger.info(f"🚀 Audit backend started: {len(header_rules)} header rules loaded")

    yield

    # === SHUTDOWN ===
    header_cache.clear()
    logger.info("Audit backend stopped")


app = FastAPI(
    title="Web Page Security Audit API",
    version=__version__,
    description="Header, cookie, storage and console leak audit for a single page",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Подключение роутеров ====================

app.include_router(health.router)
app.include_router(tabs.router)
app.include_router(audit.router)


# ==================== Run ====================

if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
