from src.core.tenancy.dependencies import TenantId, UserId, get_tenant_id, get_user_id

__all__ = ["TenantId", "UserId", "get_tenant_id", "get_user_id"]
