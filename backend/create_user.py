#!/usr/bin/env python
"""Create or reset the shop account.

Usage: python create_user.py <email> <shop name>
The password is read from the terminal, never from the command line.
"""
import getpass
import sys

from kanha.core.security import get_password_hash
from kanha.db.init_db import init_db
from kanha.db.session import SessionLocal
from kanha.models.user import User


def main():
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(1)
    email = sys.argv[1].strip().lower()
    shop_name = " ".join(sys.argv[2:])

    password = getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)
    if getpass.getpass("Repeat password: ") != password:
        print("Passwords do not match")
        sys.exit(1)

    init_db()
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if user:
            user.shop_name = shop_name
            user.password_hash = get_password_hash(password)
            print(f"Updated {email} (ID: {user.id})")
        else:
            user = User(email=email, shop_name=shop_name, password_hash=get_password_hash(password))
            db.add(user)
            print(f"Created {email}")
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    main()
