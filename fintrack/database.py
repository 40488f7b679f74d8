from sqlmodel import SQLModel, create_engine, Session
from .config import settings
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool


def build_engine(database_url: str, echo: bool = False):
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": 60},
            poolclass=NullPool,  # avoid multiple pooled connections holding write locks
        )
        # Configure SQLite pragmas to reduce locking
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
                conn.exec_driver_sql("PRAGMA busy_timeout=60000;")
        except OperationalError:
            # If the database is momentarily locked (e.g., during reloader startup), continue without failing.
            pass
        return engine
    return create_engine(database_url, echo=echo)


engine = build_engine(settings.database_url, echo=settings.database_echo)


def get_session():
    with Session(engine) as session:
        yield session


def init_db(bind=None):
    from .models import user, category, transaction  # noqa: F401  registers the tables

    SQLModel.metadata.create_all(bind or engine)
