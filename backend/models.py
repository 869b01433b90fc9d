"""Pydantic models for API requests and responses."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════
# Tab / Header Models
# ═══════════════════════════════════════════════════════

class HeaderItem(BaseModel):
    """Один заголовок в формате webRequest."""
    name: str = Field(..., description="Header name (any casing)")
    value: Optional[str] = Field(None, description="Header value")


class HeadersReceived(BaseModel):
    """Событие получения заголовков ответа."""
    type: str = Field("main_frame", description="Resource type; only main_frame is cached")
    response_headers: List[HeaderItem] = Field(
        default_factory=list, alias="responseHeaders", description="Response headers"
    )

    model_config = ConfigDict(populate_by_name=True)


class HeadersResponse(BaseModel):
    """Cached headers for a tab."""
    tab_id: str = Field(..., description="Tab identifier")
    headers: Dict[str, str] = Field(default_factory=dict, description="Lower-cased header map")
    cached: bool = Field(..., description="Whether the response was stored")


# ═══════════════════════════════════════════════════════
# Audit Models
# ═══════════════════════════════════════════════════════

class AuditRequest(BaseModel):
    """
    Артефакты страницы для аудита.

    Поля свободные: движок сам трактует некорректные
    значения как отсутствующие.
    """
    tab_id: Optional[str] = Field(None, description="Use cached headers of this tab when headers are absent")
    url: Optional[str] = Field(None, description="Page URL")
    encrypted_transport: Optional[bool] = Field(None, description="Derived from url when omitted")
    headers: Optional[Union[Dict[str, Any], List[Dict[str, Any]]]] = Field(None, description="Response headers")
    cookies: List[Dict[str, Any]] = Field(default_factory=list, description="Cookie records")
    storage: Dict[str, Dict[str, Any]] = Field(default_factory=dict, description="Named key/value stores")
    console: List[Dict[str, Any]] = Field(default_factory=list, description="Intercepted console calls")


class IssueModel(BaseModel):
    """Single issue."""
    id: str
    category: str
    severity: str
    title: str
    description: str
    location: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class LeakModel(BaseModel):
    """Console leak notification."""
    level: str
    excerpt: str
    pattern: str
    category: str


class CheckResultModel(BaseModel):
    """Result of one checker."""
    check_name: str
    passed: bool
    issue_count: int
    duration_ms: float
    error: Optional[str] = None


class AuditResponse(BaseModel):
    """Audit results response."""
    url: Optional[str] = Field(None, description="Audited page")
    total_issues: int = Field(..., description="Number of issues")
    counts: Dict[str, int] = Field(..., description="Issue count by severity")
    issues: List[IssueModel] = Field(..., description="Issues in emission order")
    leaks: List[LeakModel] = Field(default_factory=list, description="Console leak notifications")
    checks: List[CheckResultModel] = Field(default_factory=list, description="Per-checker results")


class ConsoleCall(BaseModel):
    """Один перехваченный вызов console.*."""
    level: str = Field("log", description="log|warn|error|info")
    args: List[Any] = Field(default_factory=list, description="Raw call arguments")


class ConsoleResponse(BaseModel):
    """Console leak check response."""
    leak: Optional[LeakModel] = Field(None, description="Notification when sensitive data was found")


# ═══════════════════════════════════════════════════════
# Health Models
# ═══════════════════════════════════════════════════════

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Package version")
    header_rules: int = Field(..., description="Number of loaded header rules")
    cached_tabs: int = Field(..., description="Number of tabs with cached headers")
