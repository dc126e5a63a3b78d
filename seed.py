"""
Seed script -- populates the database with the demo world for reviewers.

Run after migrations:
    STORAGE_BACKEND=sql python seed.py

Creates:
  - 4 users (3 guardians, 1 rider)
  - 4 pets
  - 4 hospitals around Gangnam, Seoul
  - 3 requests (1 being picked up, 2 pending)
"""

import asyncio

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.infrastructure import demo_data
from src.infrastructure.database import make_engine, make_session_factory
from src.infrastructure.models import HospitalModel, PetModel, UserModel
from src.infrastructure.repositories import SqlDirectory, SqlRequestRepository
from src.services.dispatch import DispatchGateway


async def insert_reference_data(session: AsyncSession) -> None:
    """Users, pets and hospitals with their demo ids."""
    # ── Users ─────────────────────────────────────────────────────────
    for u in demo_data.USERS:
        session.add(
            UserModel(id=u.id, email=u.email, name=u.name, phone=u.phone, role=u.role)
        )
    await session.flush()

    # ── Pets ──────────────────────────────────────────────────────────
    for p in demo_data.PETS:
        session.add(
            PetModel(
                id=p.id,
                owner_id=p.owner_id,
                name=p.name,
                species=p.species,
                breed=p.breed,
                age=p.age,
                weight_kg=p.weight_kg,
                size=p.size,
                medical_notes=p.medical_notes,
            )
        )
    await session.flush()

    # ── Hospitals ─────────────────────────────────────────────────────
    for h in demo_data.HOSPITALS:
        session.add(
            HospitalModel(
                id=h.id,
                name=h.name,
                address=h.address,
                phone=h.phone,
                latitude=h.location.latitude,
                longitude=h.location.longitude,
                is_24hour=h.is_24hour,
                specialties=h.specialties,
            )
        )
    await session.flush()

    # Explicit ids bypass the serial sequences; move them past the seeds
    if session.get_bind().dialect.name == "postgresql":
        for table in ("users", "pets", "hospitals"):
            await session.execute(
                text(
                    f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                    f"(SELECT max(id) FROM {table}))"
                )
            )


async def seed(session_factory):
    async with session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        await insert_reference_data(session)
        print(
            f"  Created {len(demo_data.USERS)} users, {len(demo_data.PETS)} pets, "
            f"{len(demo_data.HOSPITALS)} hospitals"
        )

        # ── Requests (driven through the gateway) ─────────────────────
        gateway = DispatchGateway(SqlRequestRepository(session), SqlDirectory(session))
        count = await demo_data.seed_requests(gateway)
        print(f"  Created {count} requests")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    engine = make_engine(settings.database_url)
    await seed(make_session_factory(engine))
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
