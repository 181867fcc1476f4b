# dqscore/services/stats.py
from __future__ import annotations
from typing import Any, Iterable, List

from ..schemas import FieldStat
from .scoring import as_bool, display_label, is_missing, percentage_of, read_value, rule_attr

def field_stats(rules: Iterable[Any] | None, records: Iterable[Any] | None) -> List[FieldStat]:
    """
    How often each configured field is filled in across a set of records.
    One entry per rule, in rule order; "filled" uses the same test as scoring.
    """
    records = list(records or [])
    out: List[FieldStat] = []
    for rule in rules or []:
        field_name = str(rule_attr(rule, "field_name") or "")
        populated = sum(1 for values in records if not is_missing(read_value(values, field_name)))
        out.append(FieldStat(
            field_name=field_name,
            label=display_label(rule, field_name),
            required=as_bool(rule_attr(rule, "required")),
            populated=populated,
            total=len(records),
            percentage=percentage_of(populated, len(records)),
        ))
    return out
