"""
Create a user (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user EMAIL PASSWORD FIRST_NAME LAST_NAME [--role ROLE]
Example:
  python -m app.scripts.create_user admin@example.com 'Admin123!@#' System Administrator --role ADMIN
The role must already exist (see app.scripts.seed_rbac). If assigning it fails, the
new account is removed again and the command exits with status 1.
"""
import argparse
import sys

from pydantic import ValidationError

from app.api.deps import get_token_service
from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.exceptions import AccessControlError
from app.schemas.auth import RegisterRequest
from app.services.auth_service import AuthService
from app.services.credential_store import CredentialStore


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user account (no registration UI).")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars, mixed case, digit, special)")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    parser.add_argument("--role", default=None, help="Role name to assign, e.g. ADMIN")
    args = parser.parse_args(argv)

    try:
        request = RegisterRequest(
            email=args.email,
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = CredentialStore(db)
        auth = AuthService(store, get_token_service(), bcrypt_rounds=get_settings().BCRYPT_ROUNDS)
        role = None
        if args.role:
            role = store.find_role_by_name(args.role)
            if role is None:
                print(f"Role '{args.role}' does not exist.", file=sys.stderr)
                return 1
        user = auth.register(
            request.email, request.password, request.first_name, request.last_name
        )
        if role is not None:
            try:
                store.add_user_role(user.id, role.id)
            except AccessControlError as e:
                # Registration already committed; remove the account rather than leave it roleless.
                store.delete_user(user.id)
                print(
                    f"Could not assign role '{role.name}' ({e.message}); "
                    f"user '{user.email}' was not created.",
                    file=sys.stderr,
                )
                return 1
        print(f"Created user '{user.email}'" + (f" with role '{role.name}'." if role else "."))
        return 0
    except AccessControlError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
