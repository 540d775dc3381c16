import argparse
import getpass
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pydantic import ValidationError

from storefront.config import load_settings
from storefront.database import Database
from storefront.errors import UserEmailDuplicationError
from storefront.schemas import UserCreateRequest
from storefront.users import ADMIN_ROLE, DEFAULT_ROLE, UserService


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a storefront user")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Unique email address for login")
    parser.add_argument(
        "--admin",
        action="store_true",
        help="Also grant the ADMIN role (required to delete users)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML configuration (defaults to STOREFRONT_CONFIG or config/storefront.yaml)",
    )
    return parser.parse_args()


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if len(password) < 4:
            print("Password must be at least 4 characters long.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


def main() -> int:
    args = parse_args()
    password = prompt_for_password()

    settings = load_settings(Path(args.config) if args.config else None)
    database = Database(settings.database_path)
    database.initialize()

    roles = [DEFAULT_ROLE, ADMIN_ROLE] if args.admin else [DEFAULT_ROLE]
    try:
        request = UserCreateRequest(email=args.email, name=args.name, password=password)
    except ValidationError as exc:
        print(f"Invalid user details: {exc}", file=sys.stderr)
        return 1

    try:
        user = UserService(database).create_user(request, roles=roles)
    except UserEmailDuplicationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user #{user.id}: {user.name} <{user.email}> with roles {', '.join(roles)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
