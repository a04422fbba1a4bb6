"""Create the first admin account - with graceful error handling"""
import asyncio
import getpass
import os
import sys
from typing import Optional

from dotenv import load_dotenv

from credential_service.config import Settings, get_settings
from credential_service.domain.user import UserCreationRequest
from credential_service.errors import CredentialError, StoreError
from credential_service.repositories import build_user_store
from credential_service.services.credential_service import CredentialService
from credential_service.utils.crypto import PasswordHasher

# Backends that outlive this process
PERSISTENT_BACKENDS = ('dynamodb',)


def check_persistent_backend(settings: Settings) -> None:
    """Raise ValueError unless USER_STORE_BACKEND keeps data after exit."""
    if settings.USER_STORE_BACKEND.lower() not in PERSISTENT_BACKENDS:
        raise ValueError(
            f"USER_STORE_BACKEND '{settings.USER_STORE_BACKEND}' does not persist users; "
            f"set it to one of: {', '.join(PERSISTENT_BACKENDS)}"
        )


async def setup_admin(
    username: str,
    password: str,
    email: str,
    settings: Optional[Settings] = None
) -> Optional[str]:
    """Create admin user. Returns the new user_id, or None if the username is taken."""
    settings = settings or get_settings()
    check_persistent_backend(settings)

    user_store = build_user_store(settings)
    if hasattr(user_store, 'ensure_table'):
        print("Initializing DynamoDB users table...")
        created = await user_store.ensure_table()
        print("Created users table" if created else "Users table already exists")
        print()

    service = CredentialService(
        user_store,
        PasswordHasher.from_settings(settings),
        require_password_for_status_change=settings.REQUIRE_PASSWORD_FOR_STATUS_CHANGE
    )

    try:
        user = await service.create_user(UserCreationRequest(
            username=username,
            email=email,
            password=password,
            admin=True
        ))
    except StoreError as e:
        if e.duplicate:
            print(f"✅ Username '{username}' already exists")
            print("   Skipping creation - admin user is already set up.")
            return None
        raise

    print(f"\n{'='*50}")
    print("✅ Admin user setup complete!")
    print(f"{'='*50}")
    print(f"   User ID: {user.user_id}")
    print(f"   Username: {user.username}")
    print(f"   Email: {user.email}")
    print(f"   Admin: {user.admin}")

    return user.user_id


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    print("=== Credential Service Admin Setup ===\n")

    settings = get_settings()
    try:
        check_persistent_backend(settings)
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    if len(argv) == 3:
        # Non-interactive mode with command line args
        username, password, email = argv
    elif os.path.exists('.env.admin'):
        print("Loading credentials from .env.admin file...")
        load_dotenv('.env.admin')
        username = os.getenv('ADMIN_USERNAME', 'admin')
        password = os.getenv('ADMIN_PASSWORD', '')
        email = os.getenv('ADMIN_EMAIL', '')
        print(f"Username: {username}")
        print(f"Email: {email or 'Not provided'}\n")
    else:
        username = input("Enter username: ")
        password = getpass.getpass("Enter password: ")
        email = input("Enter email: ").strip()

    try:
        user_id = asyncio.run(setup_admin(username, password, email, settings))
    except CredentialError as e:
        print(f"\n❌ Error during setup ({e.kind.value}): {e}")
        return 1

    if user_id:
        print("\n✅ Setup successful!")
    else:
        print("\n✅ Admin user already exists - no changes made")
    return 0


if __name__ == "__main__":
    sys.exit(main())
