#!/usr/bin/env python3
"""
Rebuild follower_count / following_count for every account from the follow edges.

Counters are derived values; run this after a restore or a manual data fix.

Usage:
    python -m scripts.recompute_follow_counters
"""
from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "services" / "trust"))
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "shared"))

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from app.social_graph import service as social_svc
from shared.database.postgres import get_async_session_factory


async def main() -> None:
    session_factory = get_async_session_factory(os.environ["TRUST_DATABASE_URL"])
    async with session_factory() as session:
        touched = await social_svc.recompute_all_counters(session)
        await session.commit()
    print(f"Recomputed counters for {touched} accounts.")


if __name__ == "__main__":
    asyncio.run(main())
