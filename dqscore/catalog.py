# dqscore/catalog.py
from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from .config import settings
from .utils.logging import logger

_CATALOG_SHAPE = TypeAdapter(Dict[str, Dict[str, str]])


class FieldCatalog:
    """
    Which fields exist for a record type, and what people call them.
    The metadata source itself lives outside this service; subclasses adapt it.
    """

    def fields_for(self, record_type: str) -> Optional[Dict[str, str]]:
        """Return {field_name: label}, or None when the type is unknown."""
        return None

    def label_for(self, record_type: str, field_name: str) -> Optional[str]:
        fields = self.fields_for(record_type) or {}
        return fields.get(field_name) or None


class StaticFieldCatalog(FieldCatalog):
    def __init__(self, fields: Mapping[str, Mapping[str, str]] | None = None):
        self._fields = {rt: dict(f) for rt, f in _CATALOG_SHAPE.validate_python(fields or {}).items()}

    def fields_for(self, record_type: str) -> Optional[Dict[str, str]]:
        f = self._fields.get(record_type)
        return dict(f) if f is not None else None

    @classmethod
    def from_json(cls, path: str | Path) -> "StaticFieldCatalog":
        """Load {record_type: {field_name: label}}; any other shape is a ValueError."""
        file_path = Path(path)
        with open(file_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        try:
            fields = _CATALOG_SHAPE.validate_python(raw)
        except PydanticValidationError as e:
            raise ValueError(
                f"Field catalog {file_path} must map record type -> {{field name: label}}: "
                f"{e.errors()[0].get('loc')} {e.errors()[0].get('msg')}"
            ) from e
        logger.info("Loaded field catalog %s (%d record types)", file_path, len(fields))
        return cls(fields)


@lru_cache(maxsize=1)
def get_catalog() -> FieldCatalog:
    """
    Catalog configured by FIELD_CATALOG_PATH. A catalog that cannot be loaded
    is logged and replaced by an empty one: scoring must keep working.
    """
    if not settings.FIELD_CATALOG_PATH:
        return FieldCatalog()
    try:
        return StaticFieldCatalog.from_json(settings.FIELD_CATALOG_PATH)
    except (OSError, ValueError):
        logger.exception("Could not load field catalog %s, continuing without one", settings.FIELD_CATALOG_PATH)
        return FieldCatalog()
