"""init schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_STATUS_SQL = "status IN ('Pending', 'Approved')"


def upgrade():
    op.create_table(
        "managers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("cognito_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("phone_number", sa.String(length=40), nullable=True),
    )
    op.create_index("ix_managers_cognito_id", "managers", ["cognito_id"], unique=True)

    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("cognito_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("phone_number", sa.String(length=40), nullable=True),
    )
    op.create_index("ix_tenants_cognito_id", "tenants", ["cognito_id"], unique=True)

    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("state", sa.String(length=60), nullable=False),
        sa.Column("country", sa.String(length=60), nullable=False),
        sa.Column("postal_code", sa.String(length=20), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
    )

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price_per_month", sa.Float(), nullable=False),
        sa.Column("security_deposit", sa.Float(), nullable=False),
        sa.Column("application_fee", sa.Float(), nullable=True),
        sa.Column("manager_cognito_id", sa.String(length=128), sa.ForeignKey("managers.cognito_id"), nullable=False),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_properties_manager_cognito_id", "properties", ["manager_cognito_id"])

    op.create_table(
        "property_tenants",
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
        sa.Column(
            "tenant_cognito_id",
            sa.String(length=128),
            sa.ForeignKey("tenants.cognito_id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "leases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("start_date", sa.DateTime(), nullable=False),
        sa.Column("end_date", sa.DateTime(), nullable=False),
        sa.Column("rent", sa.Float(), nullable=False),
        sa.Column("deposit", sa.Float(), nullable=False),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id"), nullable=False),
        sa.Column("tenant_cognito_id", sa.String(length=128), sa.ForeignKey("tenants.cognito_id"), nullable=False),
    )
    op.create_index("ix_leases_property_id", "leases", ["property_id"])
    op.create_index("ix_leases_tenant_cognito_id", "leases", ["tenant_cognito_id"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("application_date", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Pending"),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id"), nullable=False),
        sa.Column("tenant_cognito_id", sa.String(length=128), sa.ForeignKey("tenants.cognito_id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("phone_number", sa.String(length=40), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("first_name", sa.String(length=120), nullable=True),
        sa.Column("last_name", sa.String(length=120), nullable=True),
        sa.Column("phone", sa.String(length=40), nullable=True),
        sa.Column("date_of_birth", sa.DateTime(), nullable=True),
        sa.Column("current_address", sa.String(length=255), nullable=True),
        sa.Column("current_city", sa.String(length=120), nullable=True),
        sa.Column("current_state", sa.String(length=60), nullable=True),
        sa.Column("current_zip", sa.String(length=20), nullable=True),
        sa.Column("move_in_date", sa.DateTime(), nullable=True),
        sa.Column("employment_status", sa.String(length=80), nullable=True),
        sa.Column("employer", sa.String(length=200), nullable=True),
        sa.Column("occupation", sa.String(length=200), nullable=True),
        sa.Column("annual_income", sa.Float(), nullable=True),
        sa.Column("employment_length", sa.String(length=80), nullable=True),
        sa.Column("emergency_contact_name", sa.String(length=200), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=40), nullable=True),
        sa.Column("emergency_contact_relationship", sa.String(length=80), nullable=True),
        sa.Column("previous_landlord_name", sa.String(length=200), nullable=True),
        sa.Column("previous_landlord_phone", sa.String(length=40), nullable=True),
        sa.Column("number_of_occupants", sa.Integer(), nullable=True),
        sa.Column("has_pets", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("pet_details", sa.Text(), nullable=True),
        sa.Column("has_vehicles", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("vehicle_details", sa.Text(), nullable=True),
        sa.Column("has_eviction_history", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("eviction_details", sa.Text(), nullable=True),
        sa.Column("has_criminal_history", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("criminal_details", sa.Text(), nullable=True),
        sa.Column("additional_notes", sa.Text(), nullable=True),
        sa.Column("lease_id", sa.Integer(), sa.ForeignKey("leases.id"), nullable=True),
        sa.UniqueConstraint("lease_id", name="uq_applications_lease_id"),
    )
    op.create_index("ix_applications_property_id", "applications", ["property_id"])
    op.create_index("ix_applications_tenant_cognito_id", "applications", ["tenant_cognito_id"])
    op.create_index("ix_applications_property_status", "applications", ["property_id", "status"])
    op.create_index(
        "uq_applications_active_tenant_property",
        "applications",
        ["tenant_cognito_id", "property_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_STATUS_SQL),
        sqlite_where=sa.text(ACTIVE_STATUS_SQL),
    )

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_id", sa.String(length=128), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=80), nullable=False),
        sa.Column("before_json", sa.Text(), nullable=True),
        sa.Column("after_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_events_action", "audit_events", ["action"])


def downgrade():
    op.drop_index("ix_audit_events_action", table_name="audit_events")
    op.drop_table("audit_events")

    op.drop_index("uq_applications_active_tenant_property", table_name="applications")
    op.drop_index("ix_applications_property_status", table_name="applications")
    op.drop_index("ix_applications_tenant_cognito_id", table_name="applications")
    op.drop_index("ix_applications_property_id", table_name="applications")
    op.drop_table("applications")

    op.drop_index("ix_leases_tenant_cognito_id", table_name="leases")
    op.drop_index("ix_leases_property_id", table_name="leases")
    op.drop_table("leases")

    op.drop_table("property_tenants")

    op.drop_index("ix_properties_manager_cognito_id", table_name="properties")
    op.drop_table("properties")
    op.drop_table("locations")

    op.drop_index("ix_tenants_cognito_id", table_name="tenants")
    op.drop_table("tenants")
    op.drop_index("ix_managers_cognito_id", table_name="managers")
    op.drop_table("managers")
