# app/database.py
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Engine configuration
#
# - SQLite (default): allow use across FastAPI's threadpool
#   (check_same_thread=False). An in-memory URL ("sqlite://")
#   gets a StaticPool so every session sees the same database.
# - Anything else (e.g. Postgres): pool_pre_ping=True to
#   validate connections before using them.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL

if db_url.startswith("sqlite"):
    engine_kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool
else:
    engine_kwargs = {"pool_pre_ping": True}

engine = create_engine(
    db_url,
    echo=False,  # set to True if you want to debug SQL queries
    **engine_kwargs,
)


def create_db_and_tables() -> None:
    """
    Create every table registered on SQLModel.metadata (no-op for existing
    ones). Called from the FastAPI lifespan; there are no migrations.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    Request-scoped Session dependency; tests override it with a session
    bound to the in-memory engine.
    """
    with Session(engine) as session:
        yield session
