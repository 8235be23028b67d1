"""Script to initialize the database and optionally seed the first super admin."""

import argparse
import asyncio
from uuid import UUID

from sqlalchemy import insert, select, text

from app.core.permissions import UserRole
from app.database import engine
from app.models import metadata, profiles


async def init_db(super_admin_id: UUID | None = None, email: str | None = None) -> None:
    """Create all tables, then the super admin profile if one was requested."""
    async with engine.begin() as conn:
        # Enable pgcrypto extension
        await conn.execute(text('CREATE EXTENSION IF NOT EXISTS "pgcrypto"'))

        # Create all tables
        await conn.run_sync(metadata.create_all)

        if super_admin_id is not None:
            existing = await conn.execute(select(profiles.c.id).where(profiles.c.id == super_admin_id))
            if existing.first():
                print(f"Profile {super_admin_id} already exists, not seeding")
            else:
                await conn.execute(
                    insert(profiles).values(
                        id=super_admin_id,
                        email=email,
                        role=UserRole.SUPER_ADMIN.value,
                    )
                )
                print(f"✓ Seeded super admin {email or super_admin_id}")

    await engine.dispose()
    print("✓ Database initialized successfully!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--super-admin-id", type=UUID, help="Identity id of the first super admin")
    parser.add_argument("--email", help="E-mail of the first super admin")
    args = parser.parse_args()

    asyncio.run(init_db(args.super_admin_id, args.email))
