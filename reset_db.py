from sqlmodel import SQLModel

from bank_management.database import create_db_and_tables, engine
from bank_management.models import account, admin_user, audit_event, card, loan, transaction  # noqa: F401

SQLModel.metadata.drop_all(engine)
create_db_and_tables()

print("Database reset: all tables dropped and recreated.")
