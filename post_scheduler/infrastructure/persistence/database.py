from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..logging import correlation_id
from .models import Base


class Database:
    """Async engine and session factory for the schedule store.

    PostgreSQL (asyncpg) in deployments. SQLite (aiosqlite) is accepted for
    local runs and tests, with foreign keys switched on so account deletes
    cascade the same way.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        self._is_sqlite = make_url(url).get_backend_name() == "sqlite"
        self._engine = create_async_engine(url, echo=echo, pool_pre_ping=not self._is_sqlite)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        self._attach_correlation_id_hook()
        if self._is_sqlite:
            self._enable_sqlite_foreign_keys()

    def _attach_correlation_id_hook(self) -> None:
        """Prefix each statement with /* correlation_id=... */ for the database logs."""

        @event.listens_for(self._engine.sync_engine, "before_cursor_execute", retval=True)
        def _inject_correlation_comment(conn, cursor, statement, parameters, context, executemany):
            cid = correlation_id.get("")
            if cid:
                statement = f"/* correlation_id={cid} */ {statement}"
            return statement, parameters

    def _enable_sqlite_foreign_keys(self) -> None:
        @event.listens_for(self._engine.sync_engine, "connect")
        def _set_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async def create_tables(self) -> None:
        """Create all tables. Deployed schemas are managed by alembic."""
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    def session(self) -> AsyncSession:
        return self._session_factory()

    async def close(self) -> None:
        await self._engine.dispose()
