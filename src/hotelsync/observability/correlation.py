"""Request and tenant context for log tracing."""

import uuid
from contextvars import ContextVar, Token

# Accessible across async calls and threads started with copy_context()
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
tenant_id_var: ContextVar[str] = ContextVar("tenant_id", default="")

CORRELATION_ID_HEADER = "X-Correlation-ID"


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    return correlation_id_var.get()


def set_correlation_id(cid: str) -> Token[str]:
    return correlation_id_var.set(cid)


def reset_correlation_id(token: Token[str]) -> None:
    correlation_id_var.reset(token)


def get_tenant_id() -> str:
    """Tenant currently bound to the log context ("" when none)."""
    return tenant_id_var.get()


def bind_tenant_id(tenant_id: str) -> Token[str]:
    """Bind a tenant to every log line emitted until the token is reset."""
    return tenant_id_var.set(tenant_id)


def reset_tenant_id(token: Token[str]) -> None:
    tenant_id_var.reset(token)
