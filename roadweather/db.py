from __future__ import annotations
import logging
from typing import Mapping, Optional, Union
from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL
from sqlalchemy.orm import sessionmaker
from .models import Base

logger = logging.getLogger(__name__)

MYSQL_PORT = 3306
MYSQL_DRIVER = "mysql+pymysql"

def resolve_password(password: str, environ: Mapping[str, str]) -> str:
    # `password` is first treated as the name of an environment variable
    return environ.get(password, password)

def get_opts(
    user: str,
    password: str,
    host: str,
    database: str,
    environ: Optional[Mapping[str, str]] = None,
    port: int = MYSQL_PORT,
) -> URL:
    """Build the connection URL for the MySQL store.

    ``environ`` is the environment snapshot read once by the caller; when it
    is omitted the password is used literally.
    """
    return URL.create(
        MYSQL_DRIVER,
        username=user,
        password=resolve_password(password, environ or {}),
        host=host,
        port=port,
        database=database,
    )

def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()

def make_engine(database_url: Union[str, URL]):
    engine = create_engine(database_url, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine

def make_session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

def create_tables(engine):
    # No existence check: running this twice against the same store fails.
    logger.info("Creating tables %s", ", ".join(Base.metadata.tables))
    Base.metadata.create_all(engine, checkfirst=False)
