# tests/conftest.py
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dqscore.database import Base
from dqscore import models  # noqa: F401
from dqscore.services.rule_store import RuleStore

@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()

@pytest.fixture
def SessionLocal(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

@pytest.fixture
def db(SessionLocal):
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

@pytest.fixture
def store(db):
    return RuleStore(db)

@pytest.fixture
def account_rules():
    return [
        {"field_name": "Name", "weight": 5, "required": True},
        {"field_name": "Industry", "weight": 1, "required": False},
    ]
