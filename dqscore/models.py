from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String, Integer, BigInteger, Boolean, DateTime, ForeignKey, UniqueConstraint, CheckConstraint, Index, func, false
)
from .database import Base

# ----------------------------
# One rule set per record type
# ----------------------------
class RuleSet(Base):
    __tablename__ = "rule_sets"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    record_type: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

# record types compare case-insensitively
Index("uq_rule_sets_record_type_lower", func.lower(RuleSet.record_type), unique=True)

# ----------------------------
# Field rules (children of a rule set, replaced wholesale)
# ----------------------------
class FieldRule(Base):
    __tablename__ = "field_rules"

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    rule_set_id: Mapped[int] = mapped_column(
        ForeignKey("rule_sets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    field_name: Mapped[str] = mapped_column(String(255), nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    label: Mapped[Optional[str]] = mapped_column(String(255))        # explicit display label

    __table_args__ = (
        UniqueConstraint("rule_set_id", "field_name", name="uq_field_rules_set_field"),
        CheckConstraint("weight BETWEEN 1 AND 5", name="ck_field_rules_weight"),
    )
