from contextlib import contextmanager
import logging
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from thrifthub.configuration.settings import Configuration

configuration = Configuration()


def build_engine(db_url: str):
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases must share one connection
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, **kwargs)
    return create_engine(db_url, pool_pre_ping=True)


engine = build_engine(configuration.get_database_url())


def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope():
    """Session for code running outside a request (scheduler jobs, seeding)."""
    session = Session(engine)
    try:
        yield session
    except Exception:
        logging.exception("DATABASE >>> Rolling back session after error")
        session.rollback()
        raise
    finally:
        session.close()
