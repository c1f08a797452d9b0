import argparse
import getpass

from sqlmodel import Session, select

from bank_management.core.security import get_password_hash
from bank_management.database import create_db_and_tables, engine
from bank_management.models.admin_user import AdminUser


def create_admin(username: str, password: str, reset: bool = False) -> AdminUser:
    with Session(engine) as session:
        admin = session.exec(select(AdminUser).where(AdminUser.username == username)).first()
        if admin and not reset:
            raise SystemExit(f"Admin {username} already exists (use --reset to change the password)")

        if admin:
            admin.hashed_password = get_password_hash(password)
            admin.is_active = True
        else:
            admin = AdminUser(username=username, hashed_password=get_password_hash(password))
        session.add(admin)
        session.commit()
        session.refresh(admin)
        return admin


def main():
    parser = argparse.ArgumentParser(description="Create or reset an admin user")
    parser.add_argument("username")
    parser.add_argument("--password", help="prompted for when omitted")
    parser.add_argument("--reset", action="store_true", help="overwrite the password of an existing admin")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if not password:
        raise SystemExit("Password cannot be empty")

    create_db_and_tables()
    admin = create_admin(args.username, password, args.reset)
    print(f"Admin {admin.username} ready.")


if __name__ == "__main__":
    main()
