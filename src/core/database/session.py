from collections.abc import AsyncGenerator
import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.core.config import settings

logger = logging.getLogger(__name__)

# Seconds a SQLite connection waits for another writer to release the lock
SQLITE_BUSY_TIMEOUT = 30


def enable_sqlite_transactions(engine: AsyncEngine, begin: str = "BEGIN") -> None:
    """
    Let SQLAlchemy own transaction boundaries on SQLite.

    The sqlite3 driver issues its own BEGIN/COMMIT, which breaks SAVEPOINT.
    Disable that and emit BEGIN ourselves. Pass "BEGIN IMMEDIATE" to take the
    write lock up front when several connections write concurrently.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql(begin)


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    Create the async engine.

    SQLite transactions start with BEGIN IMMEDIATE and wait on a busy lock, so
    concurrent writers queue up instead of failing with "database is locked".
    """
    if not database_url:
        raise ValueError("DATABASE_URL environment variable is not set")

    # Hide password in logs
    url_for_log = database_url.split("@")[1] if "@" in database_url else database_url[:30]
    logger.info("Connecting to database ...@%s", url_for_log)

    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["timeout"] = SQLITE_BUSY_TIMEOUT

    db_engine = create_async_engine(
        database_url,
        echo=echo,
        future=True,
        connect_args=connect_args,
    )
    if db_engine.dialect.name == "sqlite":
        enable_sqlite_transactions(db_engine, begin="BEGIN IMMEDIATE")
    return db_engine


engine = build_engine(settings.database_url, echo=settings.debug)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
