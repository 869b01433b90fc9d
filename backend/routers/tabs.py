"""Tabs router: per-tab response header cache."""

from fastapi import APIRouter
from backend.models import HeadersReceived, HeadersResponse

router = APIRouter(prefix="/tabs", tags=["tabs"])


def get_cache():
    """Получить кэш заголовков из main модуля."""
    from backend.main import header_cache
    return header_cache


@router.put("/{tab_id}/headers", response_model=HeadersResponse)
async def put_headers(tab_id: str, event: HeadersReceived):
    """Сохранить заголовки ответа вкладки (только main_frame)."""
    cache = get_cache()
    raw = [item.model_dump() for item in event.response_headers]
    cached = cache.put(tab_id, raw, resource_type=event.type)
    return {"tab_id": tab_id, "headers": dict(cache.get(tab_id)), "cached": cached}


@router.get("/{tab_id}/headers", response_model=HeadersResponse)
async def get_headers(tab_id: str):
    """Заголовки вкладки (пустой объект, если ничего не сохранено)."""
    cache = get_cache()
    return {"tab_id": tab_id, "headers": dict(cache.get(tab_id)), "cached": tab_id in cache}


@router.delete("/{tab_id}", status_code=204)
async def close_tab(tab_id: str):
    """Вкладка закрыта: удалить её заголовки."""
    get_cache().remove(tab_id)
