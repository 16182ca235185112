"""Generate database sessions"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings, get_settings
from src.db.schema import Base


def make_engine(settings: Settings | None = None) -> Engine:
    settings = settings or get_settings()
    # SQLite connections are checked against the creating thread by default
    connect_args = (
        {"check_same_thread": False}
        if settings.database_url.startswith("sqlite")
        else {}
    )
    engine = create_engine(settings.database_url, connect_args=connect_args)
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


def make_session(engine: Engine) -> Session:
    return sessionmaker(bind=engine, autoflush=False)()
