"""Extract ``Key: Value`` fields from free-text issue content."""

from __future__ import annotations

import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# Lower-cased content keys and the record attribute they fill
FIELD_ALIASES: Dict[str, str] = {
    "key": "issueKey",
    "summary": "summary",
    "priority": "priority",
    "creator": "creator",
    "status": "status",
    "assignee": "assignee",
}


def parse_content(content: Optional[str]) -> Dict[str, str]:
    """Parse free text into a field mapping.

    Each line is split at its first colon. The key is trimmed and
    lower-cased, then mapped through ``FIELD_ALIASES``; unknown keys are kept
    as they are. Lines with no colon, or a colon in the first column, are
    ignored. A later line with the same key replaces an earlier one.

    Never raises: anything unparseable simply contributes no field.

    Example:
        >>> parse_content("Key: TEST-4\\nSummary: test ticket\\nLabels: a, b")
        {'issueKey': 'TEST-4', 'summary': 'test ticket', 'labels': 'a, b'}
    """
    fields: Dict[str, str] = {}
    if not content:
        return fields

    for line in content.split("\n"):
        colon = line.find(":")
        if colon <= 0:
            continue
        key = line[:colon].strip().lower()
        if not key:
            continue
        fields[FIELD_ALIASES.get(key, key)] = line[colon + 1:].strip()

    logger.debug("Parsed %d field(s) from content", len(fields))
    return fields
