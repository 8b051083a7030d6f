from typing import Annotated

from fastapi import Depends, Header

from src.core.exceptions import TenantRequiredError


async def get_tenant_id(
    x_tenant_id: Annotated[str | None, Header()] = None,
) -> str:
    """
    Dependency to get the tenant of the current request.

    The gateway in front of the API resolves the session and forwards the
    tenant in the X-Tenant-ID header.
    """
    if not x_tenant_id or not x_tenant_id.strip():
        raise TenantRequiredError()
    return x_tenant_id.strip()


async def get_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str | None:
    """Acting user, if forwarded. Only recorded in audit entries."""
    if not x_user_id or not x_user_id.strip():
        return None
    return x_user_id.strip()


# Type aliases for cleaner route signatures
TenantId = Annotated[str, Depends(get_tenant_id)]
UserId = Annotated[str | None, Depends(get_user_id)]
