import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from timeport.core.config import settings

logger = logging.getLogger(__name__)

_engine = None


def _report_connection_failure(exc: Exception) -> None:
    """Log the parts of DATABASE_URL that matter when the database is unreachable."""
    logger.warning(f"Could not connect to database: {exc}")

    try:
        url = make_url(settings.database_url)
    except Exception as parse_error:  # pragma: no cover
        logger.warning(f"Unable to parse DATABASE_URL ({parse_error}); skipping detailed diagnostics.")
        return

    logger.warning(
        "Database connection settings: dialect=%s driver=%s host=%s port=%s database=%s user=%s",
        url.get_backend_name(),
        url.get_driver_name() or "default",
        url.host or "localhost",
        url.port or "(default)",
        url.database,
        url.username,
    )


def get_engine():
    global _engine
    if _engine is None:
        _engine = create_engine(settings.database_url)
        try:
            # Test connection eagerly so failures surface immediately.
            with _engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            _report_connection_failure(e)
    return _engine


# Don't create engine at import time
SessionLocal = None

Base = declarative_base()


def get_session_local():
    global SessionLocal
    if SessionLocal is None:
        engine = get_engine()
        # Imports run with explicit session.begin() blocks; objects stay readable
        # after commit so reports and CLI output can use them.
        SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    return SessionLocal


def init_db(engine=None) -> None:
    """Create every table declared on Base (no-op for existing tables)."""
    from timeport.db import models  # noqa: F401  (registers mappers on Base)

    engine = engine or get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database tables ready")
