# backend/create_admin.py
"""Create the first administrator account.

Usage: python create_admin.py <email> <name>   (password is prompted)
"""
import argparse
import getpass
import sys

from database import SessionLocal, init_db
from services.admins import create_admin
from services.errors import ValidationFailure


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create an administrator account")
    parser.add_argument("email")
    parser.add_argument("name")
    parser.add_argument("--password", help="Read from the prompt when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")

    init_db()
    session = SessionLocal()
    try:
        admin = create_admin(session, args.email, args.name, password)
    except ValidationFailure as e:
        print(f"Error: {e.message}")
        return 1
    finally:
        session.close()

    print(f"Admin {admin.email} created (id={admin.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
