"""
Database engine factory, session factory, and base model.

There is no module-level engine. The composition root
(finance_tracker.bootstrap.AppContext) builds one from the
configured URL and owns its lifecycle.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    pool_pre_ping=True tests connections before using them,
    which handles a restarted database or a stale connection.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    """
    Session factory bound to an engine.

    autocommit=False and autoflush=False: the store decides
    exactly when a batch is flushed and committed, so a
    transfer pair is written all-or-nothing.
    """
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
    )
