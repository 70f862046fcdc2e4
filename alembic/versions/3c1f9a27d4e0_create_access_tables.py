"""create access tables

Revision ID: 3c1f9a27d4e0
Revises:
Create Date: 2026-01-12 10:14:32.811204

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "3c1f9a27d4e0"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=150), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column(
            "role",
            sa.Enum("user", "admin", name="userrole", native_enum=False, length=32, create_constraint=True),
            nullable=False,
        ),
        sa.Column("is_staff", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("date_joined", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)

    op.create_table(
        "groups",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_groups_name"), "groups", ["name"], unique=False)
    op.create_index(op.f("ix_groups_owner_id"), "groups", ["owner_id"], unique=False)

    op.create_table(
        "group_memberships",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("group_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "role",
            sa.Enum("member", "admin", name="grouprole", native_enum=False, length=32, create_constraint=True),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("group_id", "user_id", name="group_membership_group_user_key"),
    )
    op.create_index(op.f("ix_group_memberships_group_id"), "group_memberships", ["group_id"], unique=False)
    op.create_index(op.f("ix_group_memberships_user_id"), "group_memberships", ["user_id"], unique=False)

    op.create_table(
        "assets",
        sa.Column("serial_number", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("model", sa.String(length=120), nullable=True),
        sa.Column("owner_user_id", sa.Integer(), nullable=True),
        sa.Column("owner_group_id", sa.Integer(), nullable=True),
        sa.Column("assigned_user_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(owner_user_id IS NOT NULL AND owner_group_id IS NULL) OR "
            "(owner_user_id IS NULL AND owner_group_id IS NOT NULL)",
            name="asset_owner_xor",
        ),
        sa.CheckConstraint(
            "assigned_user_id IS NULL OR owner_group_id IS NOT NULL",
            name="asset_assignment_requires_group_owner",
        ),
        sa.ForeignKeyConstraint(["owner_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["owner_group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assigned_user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("serial_number"),
    )
    op.create_index(op.f("ix_assets_owner_user_id"), "assets", ["owner_user_id"], unique=False)
    op.create_index(op.f("ix_assets_owner_group_id"), "assets", ["owner_group_id"], unique=False)
    op.create_index(op.f("ix_assets_assigned_user_id"), "assets", ["assigned_user_id"], unique=False)

    op.create_table(
        "asset_permissions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("asset_serial_number", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column(
            "level",
            sa.Enum("none", "usage", "admin", name="permissionlevel", native_enum=False, length=32, create_constraint=True),
            nullable=False,
        ),
        sa.Column("granted_by_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["asset_serial_number"], ["assets.serial_number"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["granted_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("asset_serial_number", "user_id", name="asset_permission_asset_user_key"),
        sa.CheckConstraint("level IN ('usage', 'admin')", name="asset_permission_level_grantable"),
    )
    op.create_index(
        op.f("ix_asset_permissions_asset_serial_number"), "asset_permissions", ["asset_serial_number"], unique=False
    )
    op.create_index(op.f("ix_asset_permissions_user_id"), "asset_permissions", ["user_id"], unique=False)

    op.create_table(
        "asset_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("asset_serial_number", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("settings", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["asset_serial_number"], ["assets.serial_number"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("asset_serial_number", "user_id", name="asset_settings_asset_user_key"),
    )
    op.create_index(
        op.f("ix_asset_settings_asset_serial_number"), "asset_settings", ["asset_serial_number"], unique=False
    )
    op.create_index(op.f("ix_asset_settings_user_id"), "asset_settings", ["user_id"], unique=False)


def downgrade():
    op.drop_index(op.f("ix_asset_settings_user_id"), table_name="asset_settings")
    op.drop_index(op.f("ix_asset_settings_asset_serial_number"), table_name="asset_settings")
    op.drop_table("asset_settings")
    op.drop_index(op.f("ix_asset_permissions_user_id"), table_name="asset_permissions")
    op.drop_index(op.f("ix_asset_permissions_asset_serial_number"), table_name="asset_permissions")
    op.drop_table("asset_permissions")
    op.drop_index(op.f("ix_assets_assigned_user_id"), table_name="assets")
    op.drop_index(op.f("ix_assets_owner_group_id"), table_name="assets")
    op.drop_index(op.f("ix_assets_owner_user_id"), table_name="assets")
    op.drop_table("assets")
    op.drop_index(op.f("ix_group_memberships_user_id"), table_name="group_memberships")
    op.drop_index(op.f("ix_group_memberships_group_id"), table_name="group_memberships")
    op.drop_table("group_memberships")
    op.drop_index(op.f("ix_groups_owner_id"), table_name="groups")
    op.drop_index(op.f("ix_groups_name"), table_name="groups")
    op.drop_table("groups")
    op.drop_index(op.f("ix_users_role"), table_name="users")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
