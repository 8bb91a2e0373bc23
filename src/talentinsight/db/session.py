from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from talentinsight.config import Settings, get_settings


def build_engine(settings: Settings) -> Engine:
    url = make_url(settings.resolved_database_url)
    connect_args: dict[str, object] = {}

    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    elif url.get_backend_name() == "postgresql" and settings.db_sslmode:
        connect_args["sslmode"] = settings.db_sslmode

    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True, future=True)

    if url.get_backend_name() == "sqlite":
        # pysqlite defers BEGIN on its own, which breaks SAVEPOINT; emit it ourselves.
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(connection) -> None:
            connection.exec_driver_sql("BEGIN")

    return engine


settings = get_settings()
engine = build_engine(settings)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


def get_db_session() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Commit on success, roll back and re-raise on any error."""
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
