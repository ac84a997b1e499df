"""
Create a staff or admin account (sign-up only creates customers). Run from project root:
  python -m storefront.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m storefront.scripts.create_user admin@example.com your-secure-password ADMIN
"""
import argparse
import sys

from storefront.core.config import get_settings
from storefront.core.database import SessionLocal
from storefront.core.security import EMAIL_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, PasswordHasher
from storefront.models import Role
from storefront.services.store import AuthStore


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a Storefront staff or admin account.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.ADMIN.value,
        choices=[r.value for r in Role],
    )
    args = parser.parse_args()

    email = args.email.strip()
    if not email or "@" not in email or len(email) > EMAIL_MAX_LEN:
        print("Invalid email.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    hasher = PasswordHasher(rounds=get_settings().BCRYPT_ROUNDS)
    db = SessionLocal()
    try:
        store = AuthStore(db)
        if store.find_user_by_email(email) is not None:
            print(f"User '{email}' already exists.", file=sys.stderr)
            return 1
        user = store.create_user(
            email=email,
            password_hash=hasher.hash(args.password),
            role=Role(args.role),
        )
        permission = store.create_permission_record(user)
        if user.role != Role.CUSTOMER.value:
            permission.create = permission.update = permission.remove = True
        store.commit()
        print(f"Created user '{email}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
