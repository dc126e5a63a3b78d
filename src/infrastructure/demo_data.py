"""
Demo fixtures: a small Seoul-area world of guardians, one rider, pets,
hospitals and a few in-flight requests.

Used by the in-memory backend at startup and by ``seed.py`` for the SQL
database.  Requests are not inserted with a status; they are created
pending and driven forward through the dispatch gateway so they obey the
same transition rules as live traffic.
"""

from __future__ import annotations

from src.domain.entities import Hospital, Location, Pet, User
from src.domain.enums import PetSize, RequestStatus, UserRole

GUARDIAN_ID = 1
RIDER_ID = 2

USERS = [
    User(id=1, email="user@demo.com", name="Kim Bo-ho", phone="010-1111-2222", role=UserRole.GUARDIAN),
    User(id=2, email="rider@demo.com", name="Park Bae-dal", phone="010-3333-4444", role=UserRole.RIDER),
    User(id=3, email="user3@demo.com", name="Lee Cheol-su", phone="010-5555-6666", role=UserRole.GUARDIAN),
    User(id=4, email="user4@demo.com", name="Park Young-hee", phone="010-7777-8888", role=UserRole.GUARDIAN),
]

PETS = [
    Pet(id=1, owner_id=1, name="Mungchi", species="dog", breed="Golden Retriever",
        age=3, weight_kg=28, size=PetSize.LARGE,
        medical_notes="History of patellar luxation"),
    Pet(id=2, owner_id=1, name="Nabi", species="cat", breed="Korean Shorthair",
        age=2, weight_kg=4.5, size=PetSize.SMALL,
        medical_notes="Allergic to chicken"),
    Pet(id=3, owner_id=3, name="Choco", species="dog", breed="Poodle",
        age=5, weight_kg=6.5, size=PetSize.SMALL),
    Pet(id=4, owner_id=4, name="Louis", species="cat", breed="Persian",
        age=4, weight_kg=5.2, size=PetSize.MEDIUM, medical_notes="Asthma"),
]

HOSPITALS = [
    Hospital(id=1, name="24h Woori Animal Hospital", address="123 Teheran-ro, Gangnam-gu, Seoul",
             phone="02-1234-5678", location=Location(37.5012, 127.0396),
             is_24hour=True, specialties="surgery, internal medicine, emergency"),
    Hospital(id=2, name="Seoul Animal Medical Center", address="456 Seocho-daero, Seocho-gu, Seoul",
             phone="02-2345-6789", location=Location(37.4946, 127.0283),
             is_24hour=False, specialties="internal medicine, dermatology"),
    Hospital(id=3, name="Gangnam Pet Clinic", address="789 Yeoksam-dong, Gangnam-gu, Seoul",
             phone="02-3456-7890", location=Location(37.4979, 127.0276),
             is_24hour=False, specialties="general practice"),
    Hospital(id=4, name="Companion Animal Emergency Center", address="234 Olympic-ro, Songpa-gu, Seoul",
             phone="02-4567-8901", location=Location(37.5145, 127.1059),
             is_24hour=True, specialties="emergency, intensive care"),
]

# (guardian, pet, hospital, symptoms, pickup, target status)
REQUESTS = [
    (1, 1, 1, "Suddenly limping and in pain", Location(37.4979, 127.0276), RequestStatus.PICKING_UP),
    (3, 3, 2, "Vomiting and diarrhoea", Location(37.5082, 127.0633), RequestStatus.PENDING),
    (4, 4, 4, "Difficulty breathing", Location(37.5172, 127.0473), RequestStatus.PENDING),
]


async def seed_requests(gateway) -> int:
    """Create the demo requests through *gateway*.  Returns how many were made."""
    for guardian_id, pet_id, hospital_id, symptoms, pickup, target in REQUESTS:
        request = await gateway.create_request(
            guardian_id, pet_id, hospital_id, symptoms, pickup
        )
        if target == RequestStatus.PENDING:
            continue
        request = await gateway.accept_request(request.id, RIDER_ID)
        while request.status != target:
            request = await gateway.advance_status(request.id, RIDER_ID)
    return len(REQUESTS)
