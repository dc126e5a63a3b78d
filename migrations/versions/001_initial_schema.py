"""Initial schema: users, pets, hospitals and emergency requests.

Revision ID: 001
Create Date: 2026-10-17
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False, server_default=""),
        sa.Column(
            "role",
            sa.Enum("guardian", "rider", name="userrole"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── pets ──────────────────────────────────────────────────────────
    op.create_table(
        "pets",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "owner_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("name", sa.String(80), nullable=False),
        sa.Column("species", sa.String(40), nullable=False),
        sa.Column("breed", sa.String(80), nullable=True),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("weight_kg", sa.Float, nullable=True),
        sa.Column(
            "size",
            sa.Enum("small", "medium", "large", name="petsize"),
            nullable=True,
        ),
        sa.Column("medical_notes", sa.Text, nullable=True),
        sa.Column("photo_url", sa.String(512), nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("idx_pets_owner", "pets", ["owner_id"])

    # ── hospitals ─────────────────────────────────────────────────────
    op.create_table(
        "hospitals",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("is_24hour", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("specialties", sa.String(255), nullable=True),
    )

    # ── emergency_requests ────────────────────────────────────────────
    op.create_table(
        "emergency_requests",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "guardian_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("pet_id", sa.Integer, sa.ForeignKey("pets.id"), nullable=False),
        sa.Column(
            "hospital_id",
            sa.Integer,
            sa.ForeignKey("hospitals.id"),
            nullable=False,
        ),
        sa.Column("rider_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("symptoms", sa.Text, nullable=False),
        sa.Column("pickup_lat", sa.Float, nullable=False),
        sa.Column("pickup_lng", sa.Float, nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "pending",
                "rider_assigned",
                "picking_up",
                "on_way_to_hospital",
                "completed",
                "cancelled",
                name="requeststatus",
            ),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_requests_status", "emergency_requests", ["status"])
    op.create_index("idx_requests_guardian", "emergency_requests", ["guardian_id"])
    op.create_index("idx_requests_rider", "emergency_requests", ["rider_id"])


def downgrade() -> None:
    op.drop_table("emergency_requests")
    op.drop_table("hospitals")
    op.drop_table("pets")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS requeststatus")
    op.execute("DROP TYPE IF EXISTS petsize")
    op.execute("DROP TYPE IF EXISTS userrole")
