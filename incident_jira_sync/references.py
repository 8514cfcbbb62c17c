"""
Object key parsing and Jira Assets value formatting.

Both functions are pure: no I/O, same input same output.
"""

import re
from typing import Optional

from .models import TargetFieldValue

# 'PIN-3', 'SUP-10', 'SUP-2024-10' -> trailing number
_TRAILING_NUMBER = re.compile(r"-(\d+)\Z", re.ASCII)
_NUMBER = re.compile(r"\d+", re.ASCII)


def extract_object_id(object_key: str) -> Optional[str]:
    """
    Extract the numeric Jira object id from an object key.

    'PIN-3' -> '3', 'SUP-2024-10' -> '10', '42' -> '42'.
    Returns None when no id can be extracted (including the empty string).
    """
    if not isinstance(object_key, str) or not object_key:
        return None
    match = _TRAILING_NUMBER.search(object_key)
    if match:
        return match.group(1)
    if _NUMBER.fullmatch(object_key):
        return object_key
    return None


def format_component_value(workspace_id: str, object_id: str) -> TargetFieldValue:
    """Build the Jira Assets reference '<workspace id>:<object id>' for an object id."""
    return TargetFieldValue(reference=f"{workspace_id}:{object_id}", object_reference=object_id)
