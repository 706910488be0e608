"""
Document-inventory intent classifier.

A pure predicate over the raw query. The patterns are data: extend the list
to recognise new phrasings.

Dependencies: re (stdlib)
System role: Selects the closing instruction of the assembled prompt
"""

import re

INVENTORY_PATTERNS: list[re.Pattern[str]] = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"what.*document",
        r"list.*document",
        r"available.*document",
        r"which.*document",
        r"how.*many.*document",
        r"show.*document",
        r"catalog",
        r"inventory",
        r"what.*pdf",
        r"what.*file",
        r"all.*document",
        r"total.*document",
    )
]


def is_inventory_query(
    query: str,
    patterns: list[re.Pattern[str]] = INVENTORY_PATTERNS,
) -> bool:
    """Return True when the query asks which documents are available."""
    return any(pattern.search(query) for pattern in patterns)
