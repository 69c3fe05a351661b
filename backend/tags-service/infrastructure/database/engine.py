"""Engine and session factory helpers.

SQLite needs two adjustments before it behaves like the production databases:
connections must be shareable across the threads FastAPI runs sync code in, and
the pysqlite driver must leave transaction control to SQLAlchemy so that
SAVEPOINTs (used for per-row isolation during merge and copy) work.
"""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        # Disable pysqlite's own BEGIN handling
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(connection):
        connection.exec_driver_sql("BEGIN")


def create_db_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Create a SQLAlchemy engine for the given database URL.

    Args:
        database_url (str): SQLAlchemy database URL.
        echo (bool): Log every SQL statement.
        **kwargs: Extra keyword arguments passed to ``create_engine``.

    Returns:
        Engine: Configured engine.
    """
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        kwargs["connect_args"] = connect_args

    engine = create_engine(database_url, echo=echo, **kwargs)

    if is_sqlite:
        _enable_sqlite_savepoints(engine)

    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory used for per-request sessions."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
