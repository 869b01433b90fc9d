"""Health router."""

from fastapi import APIRouter
from backend.models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    """Health check."""
    from backend.main import header_cache, header_rules
    from webaudit import __version__
    return {
        "status": "ok" if header_rules is not None else "starting",
        "version": __version__,
        "header_rules": len(header_rules) if header_rules is not None else 0,
        "cached_tabs": len(header_cache),
    }
