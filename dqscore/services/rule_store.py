# dqscore/services/rule_store.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..catalog import FieldCatalog
from ..errors import DuplicateError, RuleSetNotFoundError, ValidationError
from ..labels import friendly_label
from ..models import FieldRule, RuleSet
from ..schemas import FieldOption, FieldRuleIn, FieldRuleOut, RuleSetOut
from ..utils.logging import logger
from .scoring import MAX_WEIGHT, MIN_WEIGHT


class RuleStore:
    """
    Authoritative record type -> rule set mapping.

    Each record type has at most one RuleSet. Its FieldRules are only ever
    changed as a whole through replace_rules(), inside one transaction.
    """

    def __init__(self, db: Session, catalog: Optional[FieldCatalog] = None):
        self.db = db
        self.catalog = catalog or FieldCatalog()

    # ---------- reads ----------
    def get_rule_set(self, record_type: str) -> RuleSetOut:
        rs = self._find(record_type)
        if rs is None:
            return RuleSetOut(record_type=record_type, rules=[])
        rows = self.db.execute(
            select(FieldRule).where(FieldRule.rule_set_id == rs.id).order_by(FieldRule.position, FieldRule.id)
        ).scalars().all()
        return RuleSetOut(
            record_type=rs.record_type,
            rules=[self._to_out(rs.record_type, r) for r in rows],
            created_at=rs.created_at,
            updated_at=rs.updated_at,
        )

    def available_fields(self, record_type: str) -> List[FieldOption]:
        """Fields the catalog offers for a record type, sorted by label for pickers."""
        fields = self.catalog.fields_for(record_type) or {}
        options = [FieldOption(field_name=name, label=label or friendly_label(name) or name)
                   for name, label in fields.items()]
        return sorted(options, key=lambda o: (o.label.casefold(), o.field_name))

    def list_record_types(self) -> List[str]:
        return list(self.db.execute(select(RuleSet.record_type).order_by(RuleSet.record_type)).scalars())

    # ---------- writes ----------
    def create_rule_set(self, record_type: str, rules: Iterable[Any] = ()) -> RuleSetOut:
        record_type = (record_type or "").strip()
        if not record_type:
            raise ValidationError("Record type is required", ["record_type: must not be empty"])
        new_rules = self.validate_rules(record_type, rules)

        if self._find(record_type) is not None:
            logger.warning("Rejected duplicate rule set for %s", record_type)
            raise DuplicateError(record_type)

        try:
            rs = RuleSet(record_type=record_type)
            self.db.add(rs)
            self.db.flush()
            self.db.add_all(self._new_rows(rs, new_rules))
            self.db.commit()
        except IntegrityError:
            # lost a race with another creator; the unique constraint decides
            self.db.rollback()
            logger.warning("Rejected duplicate rule set for %s (constraint)", record_type)
            raise DuplicateError(record_type)
        except Exception:
            self.db.rollback()
            logger.exception("Creating rule set for %s failed", record_type)
            raise

        logger.info("Created rule set for %s with %d rules", record_type, len(new_rules))
        return self.get_rule_set(record_type)

    def replace_rules(self, record_type: str, new_rules: Iterable[Any]) -> RuleSetOut:
        """
        Delete-and-replace: every existing FieldRule of the type goes, new_rules
        come in, in order, within a single transaction. Input is validated
        before storage is touched; on any failure nothing is visible.
        """
        validated = self.validate_rules(record_type, new_rules)

        try:
            rs = self.db.execute(
                select(RuleSet).where(self._type_matches(record_type)).with_for_update()
            ).scalar_one_or_none()
            if rs is None:
                raise RuleSetNotFoundError(record_type)

            self.db.execute(delete(FieldRule).where(FieldRule.rule_set_id == rs.id))
            self.db.add_all(self._new_rows(rs, validated))
            rs.updated_at = datetime.now(timezone.utc)
            self.db.commit()
        except RuleSetNotFoundError:
            self.db.rollback()
            logger.warning("Replace rejected: no rule set for %s", record_type)
            raise
        except Exception:
            self.db.rollback()
            logger.exception("Replacing rules for %s failed, rolled back", record_type)
            raise

        logger.info("Replaced rules for %s (%d rules)", record_type, len(validated))
        return self.get_rule_set(record_type)

    # ---------- validation ----------
    def validate_rules(self, record_type: str, rules: Iterable[Any]) -> List[FieldRuleIn]:
        """Parse and check a whole batch; raise ValidationError listing every problem."""
        problems: List[str] = []
        parsed: List[FieldRuleIn] = []
        seen: set[str] = set()
        known = self.catalog.fields_for(record_type)

        for i, raw in enumerate(rules or []):
            try:
                rule = self._parse(raw)
            except PydanticValidationError as e:
                problems.append(f"rules[{i}]: {e.errors()[0].get('msg', 'invalid rule')}")
                continue

            name = (rule.field_name or "").strip()
            if not name:
                problems.append(f"rules[{i}]: field name must not be empty")
                continue
            if not (MIN_WEIGHT <= rule.weight <= MAX_WEIGHT):
                problems.append(f"rules[{i}] {name}: weight {rule.weight} not in [{MIN_WEIGHT},{MAX_WEIGHT}]")
            key = name.casefold()
            if key in seen:
                problems.append(f"rules[{i}] {name}: duplicate field name")
            seen.add(key)
            if known is not None and name not in known:
                problems.append(f"rules[{i}] {name}: unknown field for {record_type}")

            label = (rule.label or "").strip() or None
            parsed.append(rule.model_copy(update={"field_name": name, "label": label}))

        if problems:
            logger.warning("Rejected rules for %s: %s", record_type, "; ".join(problems))
            raise ValidationError(f"Invalid rules for {record_type}", problems)
        return parsed

    # ---------- helpers ----------
    def _find(self, record_type: str) -> Optional[RuleSet]:
        return self.db.execute(
            select(RuleSet).where(self._type_matches(record_type))
        ).scalar_one_or_none()

    @staticmethod
    def _type_matches(record_type: str):
        # record types are case-insensitive, stored as first written
        return func.lower(RuleSet.record_type) == (record_type or "").strip().lower()

    @staticmethod
    def _parse(raw: Any) -> FieldRuleIn:
        if isinstance(raw, FieldRuleIn):
            return raw
        if isinstance(raw, Mapping):
            return FieldRuleIn.model_validate(dict(raw))
        return FieldRuleIn.model_validate(raw, from_attributes=True)

    @staticmethod
    def _new_rows(rs: RuleSet, rules: List[FieldRuleIn]) -> List[FieldRule]:
        return [
            FieldRule(
                rule_set_id=rs.id,
                position=pos,
                field_name=r.field_name,
                weight=r.weight,
                required=r.required,
                label=r.label,
            )
            for pos, r in enumerate(rules)
        ]

    def _to_out(self, record_type: str, row: FieldRule) -> FieldRuleOut:
        label = (
            row.label
            or self.catalog.label_for(record_type, row.field_name)
            or friendly_label(row.field_name)
            or row.field_name
        )
        return FieldRuleOut(
            field_name=row.field_name,
            display_label=label,
            weight=row.weight,
            required=bool(row.required),
        )
