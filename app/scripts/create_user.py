"""
Create a user (e.g. first admin). Run from project root:
  python -m app.scripts.create_user NAME EMAIL PASSWORD [role] [--address ADDRESS]
Example:
  python -m app.scripts.create_user "Initial Platform Administrator" admin@example.com 'Secret#Pass1' admin
"""
import argparse
import sys

from pydantic import ValidationError

from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.models.user import ROLES
from app.schemas.users import UserCreate
from app.services.errors import ServiceError
from app.services.users import create_user


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a store ratings user account.")
    parser.add_argument("name", help="Display name (20-60 chars)")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password (8-16 chars, one uppercase, one of !@#$%%^&*)")
    parser.add_argument("role", nargs="?", default="user", choices=list(ROLES))
    parser.add_argument("--address", default=None, help="Optional address (max 400 chars)")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        body = UserCreate(
            name=args.name,
            email=args.email,
            password=args.password,
            address=args.address,
            role=args.role,
        )
    except ValidationError as e:
        for err in e.errors():
            print(err["msg"], file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = create_user(db, body)
    except ServiceError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.email}' (id {user.id}) with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
