from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def _unicode_lower(text):
    return text.lower() if isinstance(text, str) else text


def _register_sqlite_functions(dbapi_connection, connection_record):
    # SQLite's builtin lower() only folds ASCII; ilike compiles to lower() LIKE lower()
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


# ------------------------------------------------------------------------------
# DATABASE ENGINE & SESSION
# ------------------------------------------------------------------------------
def build_engine(database_url: str) -> Engine:
    """Create the engine for the given URL (opened once per process)."""
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared connection, otherwise every session sees an empty db
            kwargs["poolclass"] = StaticPool
    else:
        kwargs = {
            "pool_pre_ping": True,   # prevents "MySQL server has gone away" issues
            "pool_recycle": 280,     # helps with idle connection timeouts
        }

    try:
        engine = create_engine(database_url, **kwargs)
    except Exception as e:
        logger.error(f"❌ Failed to create SQLAlchemy engine: {e}")
        raise

    if is_sqlite:
        event.listen(engine, "connect", _register_sqlite_functions)
    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    # deleted records are returned to the caller after commit
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


# ------------------------------------------------------------------------------
# DB DEPENDENCY
# ------------------------------------------------------------------------------
def get_db(request: Request):
    """Dependency to provide a DB session."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


# ------------------------------------------------------------------------------
# INITIALIZATION
# ------------------------------------------------------------------------------
def init_db(engine: Engine):
    """Initialize database tables (runs once on startup)."""
    from string_analyzer.models import string_record  # noqa: F401 ensure models are imported
    Base.metadata.create_all(bind=engine)
    logger.info("✅ Database tables created successfully.")
