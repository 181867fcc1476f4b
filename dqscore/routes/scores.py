# dqscore/routes/scores.py
from fastapi import APIRouter, Depends

from ..schemas import FieldStatsInput, FieldStatsResult, ScoreBatchInput, ScoreInput, ScoreResult
from ..services.lifecycle import score_records
from ..services.rule_store import RuleStore
from ..services.scoring import score
from ..services.stats import field_stats
from .rulesets import get_store

router = APIRouter(prefix="/v1/score", tags=["score"])

@router.post("", response_model=ScoreResult)
def score_record(payload: ScoreInput, store: RuleStore = Depends(get_store)):
    # on-demand evaluation, nothing is persisted
    rules = store.get_rule_set(payload.record_type).rules
    return score(rules, payload.values)

@router.post("/batch")
def score_batch(payload: ScoreBatchInput, store: RuleStore = Depends(get_store)):
    records = score_records(store, payload.records)
    return {"records": [r.model_dump(mode="json") for r in records]}

@router.post("/stats", response_model=FieldStatsResult)
def field_fill_stats(payload: FieldStatsInput, store: RuleStore = Depends(get_store)):
    rules = store.get_rule_set(payload.record_type).rules
    return FieldStatsResult(
        record_type=payload.record_type,
        record_count=len(payload.records),
        fields=field_stats(rules, payload.records),
    )
