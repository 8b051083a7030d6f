from src.core.database.session import async_session, build_engine, enable_sqlite_transactions, engine, get_db
from src.core.database.base import Base, BaseModel, BigIntPK, TenantScopedModel

__all__ = [
    "async_session",
    "build_engine",
    "enable_sqlite_transactions",
    "engine",
    "get_db",
    "Base",
    "BaseModel",
    "BigIntPK",
    "TenantScopedModel",
]
