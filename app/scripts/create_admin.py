"""
Create an administrator (e.g. the Owner). Run from project root:
  python -m app.scripts.create_admin USERNAME EMAIL PASSWORD
Example:
  python -m app.scripts.create_admin owner owner@example.com 'S3cure!pass'
The first administrator created on an empty table gets id 1, the default OWNER_ID.
"""
import argparse
import logging
import sys

from app.core.database import SessionLocal
from app.core.errors import Conflict
from app.core.security import hash_password
from app.schemas.auth import USERNAME_RE
from app.services.admins import AdminRepository

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an administrator (no registration UI).")
    parser.add_argument("username", help="Username (3-50 chars: letters, digits, _ and .)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (6-50 chars)")
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = args.email.strip().lower()
    if not (3 <= len(username) <= 50) or not USERNAME_RE.match(username):
        print("Invalid username.", file=sys.stderr)
        return 1
    if "@" not in email:
        print("Invalid email.", file=sys.stderr)
        return 1
    if len(args.password) < 6 or len(args.password) > 50:
        print("Password must be 6-50 characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        repo = AdminRepository(db)
        try:
            repo.ensure_available("username", username)
            repo.ensure_available("email", email)
            admin = repo.create(username, email, hash_password(args.password))
        except Conflict as e:
            print(e.message, file=sys.stderr)
            return 1
        logger.info("Created administrator '%s' with id %s.", admin.username, admin.id)
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
