"""
Audit context - explicit switches and actor attribution for activity logging.

AuditContext is passed down service call paths; bulk operations hand a
disabled context to per-row mutations instead of flipping a shared flag.

The request context holds what the HTTP layer knows about the caller
(authenticated actor, request id, client IP, user agent). It is set by
core.middleware.RequestIDMiddleware and core.authentication, and reset at
the end of every request.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class AuditContext:
    """Per-call activity logging switches."""

    enabled: bool = True
    actor: Optional[Any] = None

    def disabled(self) -> "AuditContext":
        return replace(self, enabled=False)

    def for_actor(self, actor: Any) -> "AuditContext":
        return replace(self, actor=actor)


DEFAULT_CONTEXT = AuditContext()


@dataclass
class RequestContext:
    actor: Optional[Any] = None
    request_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    extra: dict = field(default_factory=dict)


_request_ctx: ContextVar[Optional[RequestContext]] = ContextVar(
    "audit_request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    return _request_ctx.get()


def set_request_context(**values: Any) -> RequestContext:
    ctx = RequestContext(**values)
    _request_ctx.set(ctx)
    return ctx


def clear_request_context() -> None:
    _request_ctx.set(None)


def set_current_actor(actor: Any) -> None:
    """Attribute subsequent activity log entries in this request to actor."""
    ctx = _request_ctx.get()
    if ctx is None:
        ctx = set_request_context()
    ctx.actor = actor


def get_current_actor() -> Optional[Any]:
    ctx = _request_ctx.get()
    if ctx is None:
        return None
    return ctx.actor


def resolve_context(context: Optional[AuditContext]) -> AuditContext:
    return context if context is not None else DEFAULT_CONTEXT
