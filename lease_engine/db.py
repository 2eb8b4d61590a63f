# lease_engine/db.py
from __future__ import annotations

from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .config import Settings, settings as default_settings


class Base(DeclarativeBase):
    pass


def _install_sqlite_hooks(engine: Engine) -> None:
    """
    pysqlite defers BEGIN until the first DML statement, which leaves the
    reads of a unit of work outside its transaction. Take over BEGIN so every
    session transaction covers its SELECTs too, and turn on FK enforcement.

    A connection carrying the "sqlite_begin" execution option opens with that
    mode instead (the unit of work asks for IMMEDIATE).
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cur = dbapi_connection.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        mode = conn.get_execution_options().get("sqlite_begin")
        conn.exec_driver_sql(f"BEGIN {mode}" if mode else "BEGIN")


class Database:
    """
    Store-access handle: one engine + session factory.

    Built once at process start (see main.lifespan), handed to request
    handlers through get_db, disposed on shutdown. Tests build their own.
    """

    def __init__(
        self,
        url: str,
        *,
        pool_timeout: int = 30,
        lock_wait_seconds: float = 10.0,
        echo: bool = False,
    ) -> None:
        self.url = url
        kwargs: dict = {"pool_pre_ping": True, "echo": echo}

        if url.startswith("sqlite"):
            # sqlite "timeout" is its busy handler: how long to wait on a locked db
            kwargs["connect_args"] = {"check_same_thread": False, "timeout": float(lock_wait_seconds)}
        else:
            kwargs["pool_timeout"] = int(pool_timeout)

        self.engine: Engine = create_engine(url, **kwargs)
        if self.engine.dialect.name == "sqlite":
            _install_sqlite_hooks(self.engine)

        self.SessionLocal = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, s: Settings | None = None) -> "Database":
        s = s or default_settings
        return cls(
            s.database_url,
            pool_timeout=s.pool_timeout,
            lock_wait_seconds=s.transaction_max_wait_seconds,
            echo=s.sql_echo,
        )

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        # import for side effect: registers tables on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """
    Per-request session from the app's Database handle.

    Rolls back on exceptions so a failed statement never leaks an aborted
    transaction into the next use of the connection.
    """
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
