"""rule sets and field rules

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "rule_sets",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer, "sqlite"), primary_key=True, autoincrement=True),
        sa.Column("record_type", sa.String(128), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("uq_rule_sets_record_type_lower", "rule_sets", [sa.text("lower(record_type)")], unique=True)

    op.create_table(
        "field_rules",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer, "sqlite"), primary_key=True, autoincrement=True),
        sa.Column("rule_set_id", sa.BigInteger, sa.ForeignKey("rule_sets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("field_name", sa.String(255), nullable=False),
        sa.Column("weight", sa.Integer, nullable=False, server_default="1"),
        sa.Column("required", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("label", sa.String(255)),
        sa.UniqueConstraint("rule_set_id", "field_name", name="uq_field_rules_set_field"),
        sa.CheckConstraint("weight BETWEEN 1 AND 5", name="ck_field_rules_weight"),
    )
    op.create_index("ix_field_rules_rule_set_id", "field_rules", ["rule_set_id"])

def downgrade():
    op.drop_index("ix_field_rules_rule_set_id", table_name="field_rules")
    op.drop_table("field_rules")
    op.drop_index("uq_rule_sets_record_type_lower", table_name="rule_sets")
    op.drop_table("rule_sets")
