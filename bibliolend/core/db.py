import logging
from functools import lru_cache
from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from bibliolend.configs import DB_URI, DEBUG, DB_LOCK_TIMEOUT

logger = logging.getLogger(__name__)


Base = declarative_base()


def _serialize_sqlite_writers(engine):
    """pysqlite defers BEGIN until the first write, which lets two writers
    both read before either locks. Take the write lock when the transaction
    opens instead, so concurrent writers queue on the busy timeout.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_engine(uri: str = DB_URI):
    # Only use client_encoding for PostgreSQL, not SQLite
    engine_kwargs = {'echo': DEBUG}
    if uri.startswith('sqlite'):
        engine_kwargs['connect_args'] = {
            'check_same_thread': False,
            'timeout': DB_LOCK_TIMEOUT,
        }
        engine = create_engine(uri, **engine_kwargs)
        _serialize_sqlite_writers(engine)
        return engine
    engine_kwargs['client_encoding'] = 'utf8'
    return create_engine(uri, **engine_kwargs)


def make_session_factory(engine):
    # Loaded rows stay readable after commit; each request owns its session.
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=None)
def get_engine():
    return make_engine(DB_URI)


@lru_cache(maxsize=None)
def get_session_factory():
    return make_session_factory(get_engine())


def get_db():
    """FastAPI dependency yielding one session per request."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def init(engine=None):
    """Creates the schema. Startup fails if the database is unusable."""
    engine = engine or get_engine()
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise
    return engine
