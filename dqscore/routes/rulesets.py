# dqscore/routes/rulesets.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..catalog import get_catalog
from ..database import get_db
from ..schemas import FieldOption, ReplaceRulesInput, RuleSetCreate, RuleSetOut
from ..services.rule_store import RuleStore

router = APIRouter(prefix="/v1/rulesets", tags=["rulesets"])

def get_store(db: Session = Depends(get_db)) -> RuleStore:
    return RuleStore(db, catalog=get_catalog())

@router.get("")
def list_rule_sets(store: RuleStore = Depends(get_store)):
    return {"record_types": store.list_record_types()}

@router.get("/{record_type}", response_model=RuleSetOut)
def get_rule_set(record_type: str, store: RuleStore = Depends(get_store)):
    return store.get_rule_set(record_type)

@router.post("", response_model=RuleSetOut, status_code=status.HTTP_201_CREATED)
def create_rule_set(payload: RuleSetCreate, store: RuleStore = Depends(get_store)):
    return store.create_rule_set(payload.record_type, payload.rules)

@router.put("/{record_type}/rules", response_model=RuleSetOut)
def replace_rules(record_type: str, payload: ReplaceRulesInput, store: RuleStore = Depends(get_store)):
    """Replace the full ordered rule list; the editor sends its final state only."""
    return store.replace_rules(record_type, payload.rules)

@router.get("/{record_type}/fields", response_model=List[FieldOption])
def available_fields(record_type: str, store: RuleStore = Depends(get_store)):
    """Fields the editor can pick from for this record type."""
    return store.available_fields(record_type)
