"""Parse the JIRA sprint field into an ordered list of unique sprint names

The sprint field has changed shape between JIRA versions:

    None                                    no sprint history
    "com.atlassian...Sprint@1a[id=1,name=Sprint 1,...]"
    ["...[id=1,name=Sprint 1,...]", "...[id=2,name=Sprint 2,...]"]
    [{"id": 1, "name": "Sprint 1"}, {"id": 2, "name": "Sprint 2"}]

Each shape has its own decoder. Decoders are tried in order and the first
one that accepts the value wins. A list mixing strings and records is
decoded entry by entry.
"""

import logging
import re
from typing import Any, Callable, List, Optional

from spillover.models import SprintInfo

logger = logging.getLogger(__name__)

SPRINT_NAME_PATTERN = re.compile(r"name=([^,]+)")


def _name_from_legacy_string(value: str) -> Optional[str]:
    match = SPRINT_NAME_PATTERN.search(value)
    return match.group(1) if match else None


def _name_from_record(record: dict) -> Optional[str]:
    name = record.get("name")
    if isinstance(name, str) and name:
        return name
    return None


def decode_absent(value: Any) -> Optional[List[Optional[str]]]:
    if value is None:
        return []
    return None


def decode_string(value: Any) -> Optional[List[Optional[str]]]:
    if isinstance(value, str):
        return [_name_from_legacy_string(value)]
    return None


def decode_string_list(value: Any) -> Optional[List[Optional[str]]]:
    if isinstance(value, list) and all(isinstance(entry, str) for entry in value):
        return [_name_from_legacy_string(entry) for entry in value]
    return None


def decode_record_list(value: Any) -> Optional[List[Optional[str]]]:
    if isinstance(value, list) and all(isinstance(entry, dict) for entry in value):
        return [_name_from_record(entry) for entry in value]
    return None


def _name_from_entry(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return _name_from_legacy_string(entry)
    return _name_from_record(entry)


def decode_mixed_list(value: Any) -> Optional[List[Optional[str]]]:
    if isinstance(value, list) and all(isinstance(entry, (str, dict)) for entry in value):
        return [_name_from_entry(entry) for entry in value]
    return None


SPRINT_DECODERS: List[Callable[[Any], Optional[List[Optional[str]]]]] = [
    decode_absent,
    decode_string,
    decode_string_list,
    decode_record_list,
    decode_mixed_list,
]


def parse_sprint_field(sprint_field: Any) -> SprintInfo:
    """
    Extract sprint information from a sprint field value

    Args:
        sprint_field: Decoded JSON value of the sprint custom field

    Returns:
        SprintInfo with unique names in first-seen order. Unrecognized
        shapes give an empty SprintInfo.
    """
    for decoder in SPRINT_DECODERS:
        names = decoder(sprint_field)
        if names is not None:
            break
    else:
        logger.warning(f"Unrecognized sprint field format: {type(sprint_field).__name__}")
        return SprintInfo()

    unique_names = []
    seen = set()
    for name in names:
        if name and name not in seen:
            seen.add(name)
            unique_names.append(name)

    return SprintInfo(sprint_names=tuple(unique_names))
