from sqlalchemy import create_engine, event
from sqlalchemy.orm import (
    sessionmaker,
    DeclarativeBase,
    scoped_session,
    Session as SqlalchemySession,
)


from settings import DATABASE_URL


if DATABASE_URL.startswith("sqlite"):
    # sqlite is used for local development and tests, writers wait on the
    # file lock instead of failing straight away
    engine = create_engine(
        DATABASE_URL,
        connect_args={"check_same_thread": False, "timeout": 30},
        pool_size=20,
        max_overflow=0,
        pool_timeout=300,
    )

    @event.listens_for(engine, "connect")
    def _configure_sqlite_connection(dbapi_connection, connection_record):
        # let SQLAlchemy emit BEGIN itself, see the "Serializable isolation /
        # Savepoints / Transactional DDL" section of the sqlite dialect docs
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        # take the write lock up front: a deferred transaction that read
        # first and writes later fails with "database is locked" instead of
        # waiting for a concurrent writer
        conn.exec_driver_sql("BEGIN IMMEDIATE")

else:
    engine = create_engine(
        DATABASE_URL,
        pool_size=20,
        max_overflow=0,
        pool_timeout=300,
    )

db = sessionmaker(engine, future=True)
factory_session = scoped_session(db)


def get_db_sync():
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_db_sync_for_test(db: SqlalchemySession):
    def inner():
        yield db

    return inner


class Base(DeclarativeBase):
    pass


# define all model for alembic migration
from models.AdminUser import AdminUser  # NOQA
from models.Reference import Reference  # NOQA
from models.Participant import Participant  # NOQA
from models.Ticket import Ticket  # NOQA
