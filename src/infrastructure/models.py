"""
SQLAlchemy ORM models.

Tables
------
* ``users``               -- guardians and riders
* ``pets``                -- pets owned by guardians
* ``hospitals``           -- destination hospitals (reference data)
* ``emergency_requests``  -- transport requests and their lifecycle status

Indexes
-------
* **B-Tree** on ``status``, ``guardian_id`` and ``rider_id`` for the three
  list queries the dispatch gateway runs on every poll.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)

from .database import Base
from src.domain.enums import PetSize, RequestStatus, UserRole


def _values(enum_cls):
    return [member.value for member in enum_cls]


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(120), nullable=False)
    phone = Column(String(32), nullable=False, default="")
    role = Column(
        Enum(UserRole, name="userrole", values_callable=_values), nullable=False
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Load created_at on INSERT so the row never needs a lazy refresh
    __mapper_args__ = {"eager_defaults": True}


class PetModel(Base):
    __tablename__ = "pets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String(80), nullable=False)
    species = Column(String(40), nullable=False)
    breed = Column(String(80), nullable=True)
    age = Column(Integer, nullable=True)
    weight_kg = Column(Float, nullable=True)
    size = Column(Enum(PetSize, name="petsize", values_callable=_values), nullable=True)
    medical_notes = Column(Text, nullable=True)
    photo_url = Column(String(512), nullable=True)
    # Soft delete: requests keep resolving the pet they were created for
    is_deleted = Column(Boolean, default=False, nullable=False)

    __table_args__ = (Index("idx_pets_owner", "owner_id"),)


class HospitalModel(Base):
    __tablename__ = "hospitals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    is_24hour = Column(Boolean, default=False, nullable=False)
    specialties = Column(String(255), nullable=True)


class EmergencyRequestModel(Base):
    __tablename__ = "emergency_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    guardian_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    pet_id = Column(Integer, ForeignKey("pets.id"), nullable=False)
    hospital_id = Column(Integer, ForeignKey("hospitals.id"), nullable=False)
    rider_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    symptoms = Column(Text, nullable=False)
    pickup_lat = Column(Float, nullable=False)
    pickup_lng = Column(Float, nullable=False)
    status = Column(
        Enum(RequestStatus, name="requeststatus", values_callable=_values),
        default=RequestStatus.PENDING,
        nullable=False,
    )

    # Stamped by the repository, not the server, so the clock is injectable
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_requests_status", "status"),
        Index("idx_requests_guardian", "guardian_id"),
        Index("idx_requests_rider", "rider_id"),
    )
