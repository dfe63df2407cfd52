# infra/db/base.py
from __future__ import annotations
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
import logging
import os

from infra.path import default_db_path

logger = logging.getLogger(__name__)

Base = declarative_base()

DB_URL_ENV = "TL_DB_URL"


def database_url() -> str:
    override = os.getenv(DB_URL_ENV)
    if override:
        return override
    # default_db_path() creates the parent directory
    return f"sqlite:///{default_db_path().as_posix()}"


def create_db_engine(url: str | None = None) -> Engine:
    url = url or database_url()
    logger.info("Using database at: %s", url)
    return create_engine(url, echo=False, future=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def init_db(engine: Engine) -> None:
    # registers the ORM classes on Base.metadata
    import infra.db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
