#!/usr/bin/env python3
"""
Create the super_admin account that supervises the moderation team.

Reads settings from .env:
    ADMIN_EMAIL          — account email (required)
    ADMIN_NICK           — nick (optional, defaults to "superadmin")
    TRUST_DATABASE_URL   — trust service database (required)

Usage:
    python -m scripts.create_superadmin
"""
from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

# Add backend root to path so imports resolve
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "services" / "trust"))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "shared"))

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from sqlalchemy import func, select

from app.accounts import service as accounts_svc
from app.accounts.models import Account
from shared.constants import Role
from shared.database.postgres import get_async_session_factory


async def main() -> None:
    email = os.getenv("ADMIN_EMAIL")
    if not email:
        print("Error: ADMIN_EMAIL must be set in .env")
        sys.exit(1)
    nick = os.getenv("ADMIN_NICK", "superadmin")
    db_url = os.environ["TRUST_DATABASE_URL"]

    session_factory = get_async_session_factory(db_url)

    async with session_factory() as session:
        result = await session.execute(
            select(Account).where(func.lower(Account.email) == email.lower())
        )
        existing = result.scalar_one_or_none()

        if existing is not None:
            print(f"Account {email} already exists (id={existing.id}).")
            if existing.role != Role.SUPER_ADMIN:
                existing.role = Role.SUPER_ADMIN
                existing.is_active = True
                await session.commit()
                print("  -> Upgraded to super_admin.")
            else:
                print("  -> Already a super_admin. Nothing to do.")
            return

        account = await accounts_svc.create_account(
            session, nick=nick, email=email, role=Role.SUPER_ADMIN
        )
        await session.commit()
        print(f"Super admin created: {email} (id={account.id})")


if __name__ == "__main__":
    asyncio.run(main())
