#!/usr/bin/env python3
"""Seed a development database with an organization, users, projects and one membership.

Usage:
    uv run python scripts/seed_dev_data.py

Uses ORGADMIN_DATABASE_URL through the app settings (defaults to localhost).
"""

import asyncio
import uuid

from sqlalchemy import text

from app.core.database import engine, get_session_context

# Deterministic UUIDs for reproducibility
ORG_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")
OWNER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000010")
MEMBER_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000011")
OWNER_MEMBERSHIP_ID = uuid.UUID("00000000-0000-0000-0000-000000000020")
PROJECT_IDS = [uuid.UUID(f"00000000-0000-0000-0000-0000000001{i:02d}") for i in range(3)]


async def seed():
    async with get_session_context() as session:
        # Organization
        await session.execute(text("""
            INSERT INTO organizations (id, name, slug)
            VALUES (:id, :name, :slug)
            ON CONFLICT (id) DO NOTHING
        """), {"id": ORG_ID, "name": "Acme Robotics", "slug": "acme-robotics"})

        # Users (the second one has no membership yet, so inviting them adds them directly)
        for uid, email, name in [
            (OWNER_USER_ID, "alice@acme.dev", "Alice"),
            (MEMBER_USER_ID, "bob@acme.dev", "Bob"),
        ]:
            await session.execute(text("""
                INSERT INTO users (id, email, name) VALUES (:id, :email, :name)
                ON CONFLICT (id) DO NOTHING
            """), {"id": uid, "email": email, "name": name})

        await session.execute(text("""
            INSERT INTO organization_memberships (id, org_id, user_id, role)
            VALUES (:id, :oid, :uid, 'OWNER')
            ON CONFLICT (org_id, user_id) DO NOTHING
        """), {"id": OWNER_MEMBERSHIP_ID, "oid": ORG_ID, "uid": OWNER_USER_ID})

        # Projects: two live, one soft-deleted
        for i, (pid, name) in enumerate(zip(PROJECT_IDS, ["Website", "Firmware", "Old Prototype"])):
            await session.execute(text("""
                INSERT INTO projects (id, org_id, name, deleted_at)
                VALUES (:id, :oid, :name, CASE WHEN :deleted THEN now() ELSE NULL END)
                ON CONFLICT (id) DO NOTHING
            """), {"id": pid, "oid": ORG_ID, "name": name, "deleted": i == 2})

    await engine.dispose()
    print(f"✅ Seeded org '{ORG_ID}' with 2 users, 1 membership, 3 projects (1 deleted).")


if __name__ == "__main__":
    asyncio.run(seed())
