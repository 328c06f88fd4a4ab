"""CLI script to provision a user account in the backend DB.

Usage: python scripts/create_user.py EMAIL [--role ADMIN|USER]

The password is read from a prompt (or `--password` for automation) and
stored as a salted hash.
"""
import sys
import argparse
import getpass
import pathlib
# Ensure `backend/` is on sys.path so `bookstore` package imports work when running this script directly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from sqlmodel import Session
from bookstore.database import engine, create_db_and_tables
from bookstore import services
from bookstore.errors import ConflictError
from bookstore.models import UserRole
from bookstore.schemas import UserCreate


def main(email: str, password: str, role: UserRole = UserRole.USER) -> int:
    """Validate the input, create the user and print its id.

    Returns a process exit code: 0 on success, 1 when the email exists.
    """
    data = UserCreate(email=email, password=password, role=role)
    create_db_and_tables()
    with Session(engine) as session:
        try:
            user = services.UserService(session).create(data.email, data.password, data.role)
        except ConflictError as e:
            print(e.message)
            return 1
        print(f'Created {user.role.value} user {user.email} ({user.id})')
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser()
    parser.add_argument('email')
    parser.add_argument('--role', choices=[r.value for r in UserRole], default=UserRole.USER.value)
    parser.add_argument('--password', help='Password (prompted when omitted)')
    args = parser.parse_args()
    pw = args.password or getpass.getpass('Password: ')
    sys.exit(main(args.email, pw, UserRole(args.role)))
