# dqscore/errors.py
from typing import List, Optional


class DataQualityError(Exception):
    """Base class for rule configuration errors surfaced to admins."""


class ValidationError(DataQualityError):
    """Malformed rule input. Carries one message per offending entry."""

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        super().__init__(message)
        self.problems = list(problems or [])


class DuplicateError(DataQualityError):
    def __init__(self, record_type: str):
        super().__init__(f"Rule set for {record_type!r} already exists")
        self.record_type = record_type


class RuleSetNotFoundError(DataQualityError):
    def __init__(self, record_type: str):
        super().__init__(f"No rule set configured for {record_type!r}")
        self.record_type = record_type
