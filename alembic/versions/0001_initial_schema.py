"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "biomarker_reference",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("standard_name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("typical_unit", sa.String(length=50), nullable=True),
        sa.Column("typical_range", sa.String(length=100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_biomarker_reference_category", "biomarker_reference", ["category"], unique=False)
    op.create_index("ix_biomarker_reference_standard_name", "biomarker_reference", ["standard_name"], unique=True)

    op.create_table(
        "biomarker_values",
        sa.Column("id", sa.BIGINT().with_variant(sa.Integer(), "sqlite"), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("reference_range", sa.String(length=100), nullable=True),
        sa.Column("is_abnormal", sa.Boolean(), nullable=False),
        sa.Column("test_date", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_biomarker_values_user_id", "biomarker_values", ["user_id"], unique=False)
    op.create_index("ix_biomarker_values_name", "biomarker_values", ["name"], unique=False)
    op.create_index("ix_biomarker_values_test_date", "biomarker_values", ["test_date"], unique=False)

    op.create_table(
        "health_insights",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("health_score", sa.Integer(), nullable=False),
        sa.Column("risk_level", sa.String(length=20), nullable=False),
        sa.Column("summary", sa.Text(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("model_version", sa.String(length=100), nullable=False),
        sa.Column("processing_time", sa.Integer(), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("health_insights")
    op.drop_index("ix_biomarker_values_test_date", table_name="biomarker_values")
    op.drop_index("ix_biomarker_values_name", table_name="biomarker_values")
    op.drop_index("ix_biomarker_values_user_id", table_name="biomarker_values")
    op.drop_table("biomarker_values")
    op.drop_index("ix_biomarker_reference_standard_name", table_name="biomarker_reference")
    op.drop_index("ix_biomarker_reference_category", table_name="biomarker_reference")
    op.drop_table("biomarker_reference")
