#!/usr/bin/env python3
"""Seed a development database with an org, an owner, a client, a plan and a
weekly subscription, then generate its first jobs.

Usage:
    python scripts/seed_dev_data.py

Uses SCOOP_DATABASE_URL (or the localhost default). Login afterwards as
owner@sunnyscoops.dev / scoopops-dev.
"""

import asyncio
import uuid
from datetime import date

import bcrypt
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings
from app.models.subscription import Subscription
from app.scheduling import JobSynchronizer, SqlJobStore, SubscriptionSnapshot
from app.services.subscriptions import refresh_next_service_date

# Deterministic UUIDs for reproducibility
ORG_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")
OWNER_ID = uuid.UUID("00000000-0000-4000-8000-000000000010")
TECH_ID = uuid.UUID("00000000-0000-4000-8000-000000000011")
CLIENT_ID = uuid.UUID("00000000-0000-4000-8000-000000000100")
LOCATION_ID = uuid.UUID("00000000-0000-4000-8000-000000000200")
PLAN_ID = uuid.UUID("00000000-0000-4000-8000-000000000300")
SUBSCRIPTION_ID = uuid.UUID("00000000-0000-4000-8000-000000000400")

DEV_PASSWORD = "scoopops-dev"


async def seed():
    engine = create_async_engine(get_settings().database_url)
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    password_hash = bcrypt.hashpw(DEV_PASSWORD.encode(), bcrypt.gensalt(rounds=12)).decode()

    async with async_session() as session:
        # Organization
        await session.execute(text("""
            INSERT INTO organizations (id, name, slug, status, settings)
            VALUES (:id, :name, :slug, 'active', '{}')
            ON CONFLICT (id) DO NOTHING
        """), {"id": ORG_ID, "name": "Sunny Scoops", "slug": "sunny-scoops"})

        # Staff
        for uid, email, first, role in [
            (OWNER_ID, "owner@sunnyscoops.dev", "Olive", "OWNER"),
            (TECH_ID, "tech@sunnyscoops.dev", "Theo", "FIELD_TECH"),
        ]:
            await session.execute(text("""
                INSERT INTO users (id, email, first_name, password_hash)
                VALUES (:id, :email, :first, :hash)
                ON CONFLICT (id) DO NOTHING
            """), {"id": uid, "email": email, "first": first, "hash": password_hash})
            await session.execute(text("""
                INSERT INTO users_orgs (user_id, org_id, role)
                VALUES (:uid, :oid, :role)
                ON CONFLICT DO NOTHING
            """), {"uid": uid, "oid": ORG_ID, "role": role})

        # Client and primary location
        await session.execute(text("""
            INSERT INTO clients (id, org_id, first_name, last_name, email, status)
            VALUES (:id, :oid, 'Casey', 'Rivera', 'casey@example.com', 'ACTIVE')
            ON CONFLICT (id) DO NOTHING
        """), {"id": CLIENT_ID, "oid": ORG_ID})
        await session.execute(text("""
            INSERT INTO locations (id, org_id, client_id, address_line1, city, state, zip_code, is_primary)
            VALUES (:id, :oid, :cid, '742 Evergreen Terrace', 'Springfield', 'OR', '97477', true)
            ON CONFLICT (id) DO NOTHING
        """), {"id": LOCATION_ID, "oid": ORG_ID, "cid": CLIENT_ID})

        # Plan
        await session.execute(text("""
            INSERT INTO service_plans (id, org_id, name, frequency)
            VALUES (:id, :oid, 'Weekly yard clean', 'WEEKLY')
            ON CONFLICT (id) DO NOTHING
        """), {"id": PLAN_ID, "oid": ORG_ID})

        # Subscription: weekly on Tuesdays, starting today
        await session.execute(text("""
            INSERT INTO subscriptions (
                id, org_id, client_id, location_id, plan_id, status, frequency,
                preferred_day, price_per_visit_cents, start_date
            )
            VALUES (:id, :oid, :cid, :lid, :pid, 'ACTIVE', 'WEEKLY', 'TUESDAY', 3500, :start)
            ON CONFLICT (id) DO NOTHING
        """), {
            "id": SUBSCRIPTION_ID, "oid": ORG_ID, "cid": CLIENT_ID,
            "lid": LOCATION_ID, "pid": PLAN_ID, "start": date.today(),
        })

        subscription = await session.get(Subscription, SUBSCRIPTION_ID)
        synchronizer = JobSynchronizer(SqlJobStore(session), generated_by="seed")
        created = await synchronizer.regenerate(
            SubscriptionSnapshot.from_model(subscription), ORG_ID, 28
        )
        await refresh_next_service_date(session, subscription)

        await session.commit()

    await engine.dispose()
    print(f"Seeded org 'sunny-scoops' with 1 subscription and {created} jobs.")


if __name__ == "__main__":
    asyncio.run(seed())
