"""initial fleet schema (buses, incidents, equipment status, drivers, documents, users)

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18 09:00:00
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _insp():
    bind = op.get_bind()
    return sa.inspect(bind)


def _has_table(name: str) -> bool:
    try:
        return name in _insp().get_table_names()
    except Exception:
        return False


def _now():
    return sa.text("CURRENT_TIMESTAMP")


def upgrade():
    if not _has_table("buses"):
        op.create_table(
            "buses",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("bus_number", sa.String(length=50), nullable=False),
            sa.Column("plate", sa.String(length=20), nullable=True),
            sa.Column("created_at", sa.DateTime, nullable=False, server_default=_now()),
        )
        op.create_index("ix_buses_bus_number", "buses", ["bus_number"], unique=True)

    if not _has_table("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("username", sa.String(length=100), nullable=False),
            sa.Column("hashed_password", sa.String, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False, server_default="technician"),
            sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("1")),
            sa.Column("created_at", sa.DateTime, nullable=False, server_default=_now()),
        )
        op.create_index("ix_users_username", "users", ["username"], unique=True)
        op.create_index("ix_users_role", "users", ["role"])

    if not _has_table("drivers"):
        op.create_table(
            "drivers",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("rut", sa.String(length=20), nullable=True, unique=True),
            sa.Column("phone", sa.String(length=50), nullable=True),
            sa.Column("created_at", sa.DateTime, nullable=False, server_default=_now()),
        )
        op.create_index("ix_drivers_name", "drivers", ["name"])

    if not _has_table("incidents"):
        op.create_table(
            "incidents",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("bus_id", sa.Integer, nullable=False),
            sa.Column("equipment_type", sa.String(length=20), nullable=False),
            sa.Column("incident_type", sa.String(length=20), nullable=False),
            sa.Column("camera_channel", sa.String(length=5), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
            sa.Column("description", sa.Text, nullable=True),
            sa.Column("resolution_notes", sa.Text, nullable=True),
            sa.Column("reporter", sa.String(length=255), nullable=True),
            sa.Column("reported_at", sa.DateTime, nullable=False, server_default=_now()),
            sa.Column("resolved_at", sa.DateTime, nullable=True),
            sa.ForeignKeyConstraint(["bus_id"], ["buses.id"]),
        )
        op.create_index("ix_incidents_bus_id", "incidents", ["bus_id"])
        op.create_index("ix_incidents_equipment_type", "incidents", ["equipment_type"])
        op.create_index("ix_incidents_incident_type", "incidents", ["incident_type"])
        op.create_index("ix_incidents_status", "incidents", ["status"])
        op.create_index("ix_incidents_reported_at", "incidents", ["reported_at"])
        op.create_index("ix_incidents_resolved_at", "incidents", ["resolved_at"])
        op.create_index("ix_incidents_bus_status", "incidents", ["bus_id", "status"])
        op.create_index("ix_incidents_status_resolved", "incidents", ["status", "resolved_at"])

    if not _has_table("equipment_status"):
        op.create_table(
            "equipment_status",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("bus_id", sa.Integer, nullable=False),
            sa.Column("equipment_type", sa.String(length=20), nullable=False),
            sa.Column("camera_channel", sa.String(length=5), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="operational"),
            sa.Column("last_incident_id", sa.Integer, nullable=True),
            sa.Column("updated_at", sa.DateTime, nullable=False, server_default=_now()),
            sa.ForeignKeyConstraint(["bus_id"], ["buses.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["last_incident_id"], ["incidents.id"], ondelete="SET NULL"),
            sa.UniqueConstraint(
                "bus_id", "equipment_type", "camera_channel", name="uq_equipment_status_slot"
            ),
        )
        op.create_index("ix_equipment_status_bus_id", "equipment_status", ["bus_id"])

    if not _has_table("bus_drivers"):
        op.create_table(
            "bus_drivers",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("bus_id", sa.Integer, nullable=False),
            sa.Column("driver_id", sa.Integer, nullable=False),
            sa.Column("role", sa.String(length=20), nullable=False, server_default="titular"),
            sa.ForeignKeyConstraint(["bus_id"], ["buses.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["driver_id"], ["drivers.id"], ondelete="CASCADE"),
            sa.UniqueConstraint("bus_id", "driver_id", name="uq_bus_driver"),
        )
        op.create_index("ix_bus_drivers_bus_id", "bus_drivers", ["bus_id"])
        op.create_index("ix_bus_drivers_driver_id", "bus_drivers", ["driver_id"])

    if not _has_table("bus_documents"):
        op.create_table(
            "bus_documents",
            sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
            sa.Column("bus_id", sa.Integer, nullable=False),
            sa.Column("driver_id", sa.Integer, nullable=True),
            sa.Column("doc_type", sa.String(length=50), nullable=False),
            sa.Column("file_name", sa.String(length=255), nullable=False),
            sa.Column("file_path", sa.Text, nullable=False),
            sa.Column("notes", sa.Text, nullable=True),
            sa.Column("uploaded_at", sa.DateTime, nullable=False, server_default=_now()),
            sa.Column("expires_at", sa.DateTime, nullable=True),
            sa.ForeignKeyConstraint(["bus_id"], ["buses.id"], ondelete="CASCADE"),
            sa.ForeignKeyConstraint(["driver_id"], ["drivers.id"], ondelete="SET NULL"),
        )
        op.create_index("ix_bus_documents_bus_id", "bus_documents", ["bus_id"])
        op.create_index("ix_bus_documents_driver_id", "bus_documents", ["driver_id"])
        op.create_index("ix_bus_documents_doc_type", "bus_documents", ["doc_type"])
        op.create_index("ix_bus_documents_expires_at", "bus_documents", ["expires_at"])
        op.create_index(
            "ix_bus_documents_type_expiry", "bus_documents", ["doc_type", "expires_at"]
        )


def downgrade():
    # Reverse FK order
    for name in (
        "bus_documents",
        "bus_drivers",
        "equipment_status",
        "incidents",
        "drivers",
        "users",
        "buses",
    ):
        if _has_table(name):
            op.drop_table(name)
