"""Generation numbers for new and re-linked members.

Generation is advisory display data: malformed stored values never raise,
they fall back to the defaults below.
"""
from typing import Any
from familytree.models.member_model import MemberRecord, RelationshipKind

PARENT_DEFAULT = 1
SPOUSE_DEFAULT = 0

def parse_generation(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("+-").isdigit():
            return int(text)
    return None

def format_generation(value: int) -> str:
    return str(value)

def infer_generation(relationship: RelationshipKind, related: MemberRecord | None,
                     root_baseline: int = 0) -> int:
    """Generation for a member linked to ``related`` by ``relationship``.

    ``related`` is the existing member the new one hangs off: for PARENT the
    existing member is the parent, for SPOUSE the partner. NONE is the root
    case and yields ``root_baseline``.
    """
    if relationship == RelationshipKind.NONE:
        return root_baseline
    current = parse_generation(related.generation) if related is not None else None
    if relationship == RelationshipKind.PARENT:
        return PARENT_DEFAULT if current is None else current + 1
    return SPOUSE_DEFAULT if current is None else current
