# dqscore/labels.py
import re

from .config import settings

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SPACES = re.compile(r"\s+")

def friendly_label(field_name: str,
                   custom_suffix: str | None = None,
                   id_suffix: str | None = None) -> str:
    """
    Turn a field identifier into something a person can read.
      OrderNumber__c -> "Order Number"
      AccountId      -> "Account Name"
      Main_Competitor__c -> "Main Competitor"
    Only used for display; never influences the score.
    """
    custom_suffix = settings.CUSTOM_FIELD_SUFFIX if custom_suffix is None else custom_suffix
    id_suffix = settings.ID_FIELD_SUFFIX if id_suffix is None else id_suffix

    name = str(field_name or "").strip()
    if custom_suffix and name.endswith(custom_suffix) and len(name) > len(custom_suffix):
        name = name[: -len(custom_suffix)]
    if id_suffix and name.endswith(id_suffix) and len(name) > len(id_suffix):
        name = name[: -len(id_suffix)] + "Name"
    name = name.replace("_", " ")
    name = _CAMEL_BOUNDARY.sub(r"\1 \2", name)
    return _SPACES.sub(" ", name).strip()
