"""
Identifier Utilities for the Graph Engine
==========================================

Centralized helpers for person-id normalization, unordered pair keys and
timestamp parsing. Every module that compares ids or pairs goes through
these helpers so the same person is never spelled two different ways.

Supported Id Formats
--------------------
    UUID:       "3f2b9c4e-..." (any case, normalized to lowercase)
    Opaque:     any other non-empty string is kept verbatim (trimmed)

Usage
-----
    >>> from crmgraph.analytics.utils import normalize_person_id, make_pair_key
    >>>
    >>> normalize_person_id(" 3F2B9C4E-1111-2222-3333-444455556666 ")
    '3f2b9c4e-1111-2222-3333-444455556666'
    >>> make_pair_key("bob", "alice")
    'alice:bob'
"""

import re
from datetime import datetime, timezone
from typing import Optional, Union

UUID_PATTERN = re.compile(
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$'
)


def is_uuid(value: Optional[str]) -> bool:
    """Check whether a string is a canonical 8-4-4-4-12 UUID."""
    if not value:
        return False
    return bool(UUID_PATTERN.match(str(value).strip()))


def normalize_person_id(person_id: Optional[str]) -> str:
    """
    Normalize a person id to its canonical spelling.

    UUIDs are lowercased; other ids are only trimmed.

    Examples:
        >>> normalize_person_id("ABCDEF01-0000-0000-0000-000000000000")
        'abcdef01-0000-0000-0000-000000000000'
        >>> normalize_person_id("  alice ")
        'alice'
        >>> normalize_person_id(None)
        ''
    """
    if person_id is None:
        return ""

    pid = str(person_id).strip()
    if is_uuid(pid):
        return pid.lower()
    return pid


def make_pair_key(person_a: str, person_b: str) -> str:
    """
    Create a canonical key for an unordered pair of people.

    Keys are sorted so (a, b) and (b, a) map to the same key.

    Examples:
        >>> make_pair_key("b", "a")
        'a:b'
        >>> make_pair_key("a", "b")
        'a:b'
    """
    a = normalize_person_id(person_a)
    b = normalize_person_id(person_b)
    if a <= b:
        return f"{a}:{b}"
    return f"{b}:{a}"


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a stored date/datetime into an aware UTC datetime.

    Accepts ISO-8601 strings ("2024-05-01", "2024-05-01T10:00:00Z") and
    datetime objects. Naive values are assumed to be UTC. Returns None for
    empty or unparseable input.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as the ISO-8601 UTC string used in storage."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
