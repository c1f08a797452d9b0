from contextlib import contextmanager

from sqlmodel import SQLModel, Session, create_engine

from bank_management.core.config import DATABASE_URL, SQL_ECHO
from bank_management.core.logging_config import get_logger

logger = get_logger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, echo=SQL_ECHO, connect_args=connect_args)


def create_db_and_tables(bind=None):
    # registers every table on SQLModel.metadata
    from bank_management.models import account, admin_user, audit_event, card, loan, transaction  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def unit_of_work(session: Session):
    """Commit everything done inside the block, or nothing.

    Any exception rolls the session back and propagates to the caller.
    """
    try:
        yield session
        session.commit()
    except Exception:
        logger.debug("Rolling back unit of work")
        session.rollback()
        raise
