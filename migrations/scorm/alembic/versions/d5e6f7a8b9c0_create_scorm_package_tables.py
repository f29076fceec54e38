"""create scorm package and sco tree tables

Revision ID: d5e6f7a8b9c0
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "d5e6f7a8b9c0"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_SCORM_VERSIONS = ("1.2", "2004_2nd", "2004_3rd", "2004_4th", "2004")
_TIME_LIMIT_ACTIONS = ("exit,message", "exit,no message", "continue,message", "continue,no message")


def upgrade() -> None:
    scorm_version = sa.Enum(*_SCORM_VERSIONS, name="scorm_version")
    time_limit_action = sa.Enum(*_TIME_LIMIT_ACTIONS, name="scorm_time_limit_action")

    # ── scorm_packages ───────────────────────────────────────────────────
    op.create_table(
        "scorm_packages",
        sa.Column("package_id", sa.Uuid(), primary_key=True),
        sa.Column("resource_type", sa.String(length=100), nullable=False),
        sa.Column("resource_id", sa.String(length=100), nullable=False),
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("origin_file", sa.String(length=500), nullable=True),
        sa.Column("version", scorm_version, nullable=False),
        sa.Column("entry_url", sa.String(length=1000), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_scorm_packages_resource", "scorm_packages", ["resource_type", "resource_id"])

    # ── scorm_scos ───────────────────────────────────────────────────────
    op.create_table(
        "scorm_scos",
        sa.Column("sco_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "package_id", sa.Uuid(),
            sa.ForeignKey("scorm_packages.package_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "parent_id", sa.Uuid(),
            sa.ForeignKey("scorm_scos.sco_id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("sort_order", sa.SmallInteger(), nullable=False, server_default="0"),
        sa.Column("identifier", sa.String(length=255), nullable=False),
        sa.Column("resource_identifier", sa.String(length=255), nullable=True),
        sa.Column("is_block", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("parameters", sa.String(length=1000), nullable=True),
        sa.Column("entry_url", sa.String(length=1000), nullable=True),
        sa.Column("score_to_pass_int", sa.Integer(), nullable=True),
        sa.Column("score_to_pass_decimal", sa.Float(), nullable=True),
        sa.Column("completion_threshold", sa.Float(), nullable=True),
        sa.Column("max_time_allowed", sa.String(length=100), nullable=True),
        sa.Column("time_limit_action", time_limit_action, nullable=True),
        sa.Column("launch_data", sa.Text(), nullable=True),
        sa.Column("prerequisites", sa.Text(), nullable=True),
        sa.Column("choice_enabled", sa.Boolean(), nullable=True),
        sa.Column("flow_enabled", sa.Boolean(), nullable=True),
        sa.Column("tracked", sa.Boolean(), nullable=True),
        sa.Column("completion_set_by_content", sa.Boolean(), nullable=True),
    )
    op.create_index("ix_scorm_scos_package_identifier", "scorm_scos", ["package_id", "identifier"])
    op.create_index("ix_scorm_scos_package_parent", "scorm_scos", ["package_id", "parent_id"])


def downgrade() -> None:
    op.drop_index("ix_scorm_scos_package_parent", table_name="scorm_scos")
    op.drop_index("ix_scorm_scos_package_identifier", table_name="scorm_scos")
    op.drop_table("scorm_scos")
    op.drop_index("ix_scorm_packages_resource", table_name="scorm_packages")
    op.drop_table("scorm_packages")
    sa.Enum(name="scorm_time_limit_action").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="scorm_version").drop(op.get_bind(), checkfirst=True)
