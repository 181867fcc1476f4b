from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ----------------------------
# Rule configuration
# ----------------------------
class FieldRuleIn(BaseModel):
    field_name: str
    weight: int = 1
    required: bool = False
    label: Optional[str] = None

class FieldRuleOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_name: str
    display_label: str
    weight: int
    required: bool

class RuleSetOut(BaseModel):
    record_type: str
    rules: List[FieldRuleOut] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class FieldOption(BaseModel):
    field_name: str
    label: str

class RuleSetCreate(BaseModel):
    record_type: str
    rules: List[FieldRuleIn] = Field(default_factory=list)

class ReplaceRulesInput(BaseModel):
    rules: List[FieldRuleIn]

# ----------------------------
# Scoring
# ----------------------------
class DataQualityStatus(str, Enum):
    POOR = "Poor"
    AT_RISK = "At Risk"
    HEALTHY = "Healthy"

class MissingField(BaseModel):
    field_name: str
    label: str
    required: bool

class ScoreResult(BaseModel):
    percentage: int
    status: DataQualityStatus
    missing_required: List[MissingField] = Field(default_factory=list)
    missing_recommended: List[MissingField] = Field(default_factory=list)

class ScoreInput(BaseModel):
    record_type: str
    values: Dict[str, Any] = Field(default_factory=dict)

class ScorableRecord(BaseModel):
    """A record about to be saved; score fields are filled in by the lifecycle hook."""
    record_type: str
    values: Dict[str, Any] = Field(default_factory=dict)
    score: Optional[int] = None
    score_timestamp: Optional[datetime] = None

class ScoreBatchInput(BaseModel):
    records: List[ScorableRecord]

# ----------------------------
# Field fill statistics
# ----------------------------
class FieldStat(BaseModel):
    field_name: str
    label: str
    required: bool
    populated: int
    total: int
    percentage: int

class FieldStatsInput(BaseModel):
    record_type: str
    records: List[Dict[str, Any]] = Field(default_factory=list)

class FieldStatsResult(BaseModel):
    record_type: str
    record_count: int
    fields: List[FieldStat] = Field(default_factory=list)
