"""Create a subject out of band and print a bearer token for it"""
import argparse
import asyncio
import getpass
import sys

from align.domain.enums import SubjectRole
from align.infrastructure.config.settings import get_settings
from align.infrastructure.persistence.database import Database
from align.infrastructure.persistence.repositories import SubjectRepository
from align.infrastructure.security import create_access_token, get_password_hash


async def create_subject(
    email: str,
    password: str,
    name: str | None,
    role: SubjectRole,
    create_tables: bool = False,
) -> int:
    database = Database.from_settings(get_settings())
    try:
        if create_tables:
            await database.create_all()

        async with database.transaction() as db:
            repo = SubjectRepository(db)
            if await repo.get_active_by_email(email):
                print(f"❌ Subject '{email}' already exists")
                return 1
            subject = await repo.create_subject(
                email=email,
                password_hash=get_password_hash(password),
                name=name,
                role=role,
            )
            subject_id = subject.id
            subject_email = subject.email
    finally:
        await database.dispose()

    token = create_access_token({"sub": str(subject_id)})
    print("✅ Subject created successfully!")
    print(f"  ID:    {subject_id}")
    print(f"  Email: {subject_email}")
    print(f"  Role:  {role.value}")
    print("\nBearer token:")
    print(f"  {token}")
    print("\nTry it:")
    print(f"""
curl -X POST http://localhost:8000/api/vent \\
  -H "Authorization: Bearer {token}" \\
  -H "Content-Type: application/json" \\
  -d '{{"message": "I feel unheard"}}'
    """)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Create an Align subject and print a bearer token",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Example: python -m scripts.create_subject ana@example.com --name Ana",
    )
    parser.add_argument("email", help="Subject email (stored lower-cased)")
    parser.add_argument("--name", help="Display name")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    parser.add_argument(
        "--role", choices=SubjectRole.values(), default=SubjectRole.MEMBER.value
    )
    parser.add_argument(
        "--create-tables", action="store_true", help="Create missing tables first (development)"
    )
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if not password:
        print("❌ Password is required")
        sys.exit(1)

    sys.exit(
        asyncio.run(
            create_subject(
                args.email, password, args.name, SubjectRole(args.role), args.create_tables
            )
        )
    )
