from typing import Any, Dict, List

from celery import Celery

from ..catalog import get_catalog
from ..config import settings
from ..database import get_sessionmaker
from ..schemas import ScorableRecord
from ..services.lifecycle import score_records
from ..services.rule_store import RuleStore
from ..utils.logging import logger

celery = Celery("dqscore", broker=settings.REDIS_URL, backend=settings.REDIS_URL)

celery.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    broker_connection_retry_on_startup=True,
    worker_prefetch_multiplier=1,
)

@celery.task(name="ping")
def ping():
    logger.info("ping received")
    return "pong"

# ---------- bulk rescoring ----------
@celery.task(name="score_records_async")
def score_records_async(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    batch = [ScorableRecord.model_validate(r) for r in records]
    logger.info("Scoring batch of %d records", len(batch))

    SessionLocal = get_sessionmaker()
    with SessionLocal() as db:
        score_records(RuleStore(db, catalog=get_catalog()), batch)

    return [r.model_dump(mode="json") for r in batch]
