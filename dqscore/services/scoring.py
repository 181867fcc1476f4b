# scoring.py
from __future__ import annotations
import math
import re
from collections.abc import Mapping, Sized
from typing import Any, Iterable, List

from ..labels import friendly_label
from ..schemas import DataQualityStatus, MissingField, ScoreResult
from ..utils.logging import logger

# -----------------------------
# Tunables
# -----------------------------
MAX_SCORE = 100
MIN_WEIGHT = 1
MAX_WEIGHT = 5
DEFAULT_WEIGHT = 1   # absent/unparseable weight, regardless of `required`

THRESHOLDS = {
    "healthy": 80,   # > 80 → Healthy
    "at_risk": 50,   # >= 50 → At Risk, else Poor
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# -----------------------------
# Helpers
# -----------------------------
def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))

def status_for(percentage: int) -> DataQualityStatus:
    if percentage > THRESHOLDS["healthy"]:
        return DataQualityStatus.HEALTHY
    if percentage >= THRESHOLDS["at_risk"]:
        return DataQualityStatus.AT_RISK
    return DataQualityStatus.POOR

def normalize_weight(raw: Any) -> int:
    """
    Coerce a stored weight into [MIN_WEIGHT, MAX_WEIGHT].
    Picklist-style values like "3 - Medium" keep their leading integer;
    anything else unreadable falls back to DEFAULT_WEIGHT.
    """
    if raw is None or isinstance(raw, bool):
        return DEFAULT_WEIGHT
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not math.isfinite(raw):
            logger.debug("Non-finite weight %r, using default", raw)
            return DEFAULT_WEIGHT
        value = int(raw)
    else:
        m = _LEADING_INT.match(str(raw))
        if not m:
            logger.debug("Unparseable weight %r, using default", raw)
            return DEFAULT_WEIGHT
        value = int(m.group(1))
    return int(clamp(value, MIN_WEIGHT, MAX_WEIGHT))

def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (bytes, bytearray)):
        return len(value) == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False

def as_bool(value: Any) -> bool:
    """required flags may arrive as bool, 0/1 or "true"/"false"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return False

def rule_attr(rule: Any, name: str, default: Any = None) -> Any:
    if isinstance(rule, Mapping):
        return rule.get(name, default)
    return getattr(rule, name, default)

def read_value(values: Any, field_name: str) -> Any:
    # unreadable counts as missing
    if not field_name or values is None:
        return None
    try:
        return values[field_name]
    except (KeyError, IndexError, TypeError):
        return None

def display_label(rule: Any, field_name: str) -> str:
    label = rule_attr(rule, "display_label") or rule_attr(rule, "label")
    if isinstance(label, str) and label.strip():
        return label.strip()
    return friendly_label(field_name) or field_name

def percentage_of(achieved: int, total: int) -> int:
    if total <= 0:
        return 0
    # half-up rounding in integer arithmetic: 12.5 -> 13
    pct = (200 * achieved + total) // (2 * total)
    return int(clamp(pct, 0, MAX_SCORE))

def _sort_by_label(fields: List[MissingField]) -> List[MissingField]:
    return sorted(fields, key=lambda f: f.label.casefold())

# -----------------------------
# Main entry
# -----------------------------
def score(rules: Iterable[Any] | None, values: Any) -> ScoreResult:
    """
    Weighted completeness of one record.

    rules:  FieldRule rows, FieldRuleOut/FieldRuleIn models or plain dicts with
            field_name / weight / required / (display_)label.
    values: mapping of field_name -> current value.

    Never raises on malformed weights or values; a type without rules
    scores 100 so unconfigured types never look bad.
    """
    rules = list(rules or [])
    if not rules:
        return ScoreResult(percentage=MAX_SCORE, status=DataQualityStatus.HEALTHY)

    total_weight = 0
    achieved_weight = 0
    missing_required: List[MissingField] = []
    missing_recommended: List[MissingField] = []

    for rule in rules:
        field_name = str(rule_attr(rule, "field_name") or "")
        weight = normalize_weight(rule_attr(rule, "weight"))
        required = as_bool(rule_attr(rule, "required"))
        total_weight += weight

        if is_missing(read_value(values, field_name)):
            entry = MissingField(field_name=field_name, label=display_label(rule, field_name), required=required)
            (missing_required if required else missing_recommended).append(entry)
        else:
            achieved_weight += weight

    percentage = percentage_of(achieved_weight, total_weight)
    return ScoreResult(
        percentage=percentage,
        status=status_for(percentage),
        missing_required=_sort_by_label(missing_required),
        missing_recommended=_sort_by_label(missing_recommended),
    )
