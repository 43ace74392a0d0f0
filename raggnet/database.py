import logging
import secrets
from datetime import datetime, timezone

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


Base = declarative_base()

logger = logging.getLogger(__name__)


def new_object_id() -> str:
    """24 hex characters, the identifier shape every ``{id}`` path accepts."""
    return secrets.token_hex(12)


def utcnow() -> datetime:
    # Naive UTC so values compare cleanly after a SQLite round trip.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_engine(database_url: str) -> Engine:
    if not database_url.startswith('sqlite'):
        return create_engine(database_url, pool_pre_ping=True)

    connect_args = {'check_same_thread': False}
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        engine = create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(database_url, connect_args=connect_args)

    # SQLite leaves foreign keys unenforced unless every connection opts in.
    @event.listens_for(engine, 'connect')
    def enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def init_database(engine: Engine, session_factory: sessionmaker) -> None:
    from raggnet.auth.token_store import TokenStore
    from raggnet.models import resource, session_token, user  # noqa: F401
    from raggnet.routes.admin_routes import seed_super_admin

    Base.metadata.create_all(bind=engine)

    db = session_factory()
    try:
        purged = TokenStore(db).purge_expired()
        if purged:
            logger.info('Purged %s expired session token(s).', purged)
        seed_super_admin(db)
    finally:
        db.close()


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
