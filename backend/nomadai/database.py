"""Database connection and session management."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool
from nomadai.config import settings


def build_engine(database_url: str, echo: bool = False):
    """Create an engine with pooling suited to the target database."""
    if database_url.startswith("sqlite"):
        # SQLite is used for local runs and tests; in-memory databases must
        # share a single connection across threads.
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    # Pooler connections (e.g. PgBouncer on 6543) manage pooling themselves
    if "pooler." in database_url or database_url.endswith(":6543"):
        return create_engine(database_url, poolclass=NullPool, echo=echo)

    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
        echo=echo,
    )


engine = build_engine(settings.database_url, echo=settings.sql_echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
