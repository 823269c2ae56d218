"""Database configuration and connection setup"""
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool
from starlette.requests import Request

from app.config.settings import get_settings


def create_db_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a database engine.

    PostgreSQL runs every transaction at SERIALIZABLE so concurrent queue and
    booking transactions either serialize or fail with a retryable conflict.
    SQLite opens each transaction with BEGIN IMMEDIATE, which takes the write
    lock up front and serializes writers.
    """
    settings = get_settings()
    url = database_url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
            echo=echo,
        )
        _enable_sqlite_immediate_transactions(engine)
        return engine

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        isolation_level="SERIALIZABLE",
        echo=echo,
    )


def _enable_sqlite_immediate_transactions(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory handed to services at construction time"""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


def get_session_factory(request: Request) -> sessionmaker:
    """FastAPI dependency: the factory built by create_app()"""
    return request.app.state.session_factory


def get_db(request: Request):
    """Database dependency for FastAPI (read-only endpoints)"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


@lru_cache()
def get_worker_session_factory() -> sessionmaker:
    """Process-wide session factory for Celery tasks and scripts"""
    return create_session_factory(create_db_engine())


def create_tables(engine: Engine) -> None:
    """Create all tables known to the metadata"""
    from app.models import Base

    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    create_tables(create_db_engine())
    print("Database tables created successfully!")
