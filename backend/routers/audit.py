"""Audit router."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from backend.models import AuditRequest, AuditResponse, ConsoleCall, ConsoleResponse
from webaudit.core.models import PageArtifacts
from webaudit.engine import AuditEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["audit"])


def new_engine() -> AuditEngine:
    """Свежий движок на запрос; таблицы правил общие и неизменяемые."""
    from backend.main import audit_config, header_rules
    if header_rules is None:
        raise HTTPException(503, "Audit policy not loaded")
    return AuditEngine(config=audit_config, rules=header_rules)


@router.post("/audit", response_model=AuditResponse)
async def run_audit(request: AuditRequest, engine: AuditEngine = Depends(new_engine)):
    """
    Запустить аудит по артефактам страницы.

    Если заголовков в запросе нет, берутся сохранённые для tab_id.
    """
    from backend.main import header_cache

    payload = request.model_dump()
    if payload.get("headers") is None and request.tab_id is not None:
        payload["headers"] = dict(header_cache.get(request.tab_id))

    artifacts = PageArtifacts.from_dict(payload)
    await engine.run_concurrently(artifacts)

    return {
        "url": artifacts.url,
        "total_issues": engine.sink.total,
        "counts": engine.counts(),
        "issues": [issue.to_dict() for issue in engine.issues()],
        "leaks": [leak.to_dict() for leak in engine.leaks],
        "checks": [result.to_dict() for result in engine.check_results],
    }


@router.post("/console", response_model=ConsoleResponse)
async def check_console(call: ConsoleCall, engine: AuditEngine = Depends(new_engine)):
    """Проверить один перехваченный вызов console.* на утечку."""
    leak = engine.check_console(call.level, call.args)
    if leak is not None:
        logger.warning(f"Sensitive data in console.{leak.level} (pattern {leak.pattern})")
    return {"leak": leak.to_dict() if leak else None}
