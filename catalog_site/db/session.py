import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_site.core.config import Settings
from catalog_site.db.memory import MemoryStorage
from catalog_site.db.models import Base
from catalog_site.db.sql import SqlStorage
from catalog_site.db.storage import Storage

logger = logging.getLogger("catalog_site.storage")


def create_database_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite+pysqlite://"):
            # one shared connection, otherwise every session sees an empty database
            options["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, future=True, **options)
    return create_engine(
        database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,
    )


def create_tables(engine: Engine) -> None:
    """Create all tables defined on the metadata (no-op for existing ones)."""
    Base.metadata.create_all(bind=engine, checkfirst=True)


def build_sql_storage(database_url: str) -> SqlStorage:
    engine = create_database_engine(database_url)
    create_tables(engine)
    return SqlStorage(sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False))


def build_storage(settings: Settings) -> Storage:
    if settings.storage_backend == "sql":
        logger.info("storage_backend_selected", extra={"backend": "sql"})
        return build_sql_storage(settings.database_url)
    logger.info("storage_backend_selected", extra={"backend": "memory", "data_file": settings.data_file})
    return MemoryStorage(snapshot_path=settings.data_file)
