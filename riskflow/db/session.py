from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from riskflow.core.config import get_settings


def build_engine(database_url: str, **kwargs):
    """Create an engine for the given URL.

    SQLite connections get foreign key enforcement (needed for cascades) and
    may be shared across threads.
    """
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(database_url, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(database_url, pool_pre_ping=True, **kwargs)


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
