# dqscore/services/lifecycle.py
from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, TypeVar

from ..schemas import FieldRuleOut
from ..utils.logging import logger
from .rule_store import RuleStore
from .scoring import score

R = TypeVar("R")

def score_records(store: RuleStore, records: Sequence[R], now: Optional[datetime] = None) -> Sequence[R]:
    """
    Stamp `score` and `score_timestamp` on records about to be saved.

    Records only need `record_type`, `values`, and writable `score` /
    `score_timestamp` attributes. Each record type's rule set is fetched once
    per batch, so every record of a type is scored against the same snapshot.
    """
    now = now or datetime.now(timezone.utc)
    snapshots: Dict[str, List[FieldRuleOut]] = {}

    for rec in records:
        record_type = rec.record_type
        if record_type not in snapshots:
            snapshots[record_type] = store.get_rule_set(record_type).rules
        result = score(snapshots[record_type], getattr(rec, "values", None))
        rec.score = result.percentage
        rec.score_timestamp = now

    logger.info("Scored %d records across %d record types", len(records), len(snapshots))
    return records
