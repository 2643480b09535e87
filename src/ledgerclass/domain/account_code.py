"""Account code parsing.

Codes follow a fixed-width SEG1-SEG2-SEG3-SEG4 layout (widths 4-4-3-3), e.g.
"4100-1000-001-000". The layout is a schema assumption checked here; codes
are expected to be normalized by ingestion, so no case or padding fixes are
attempted.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ledgerclass.domain.entities import HierarchyLevel
from ledgerclass.domain.errors import MalformedCodeError, malformed_code

SEGMENT_WIDTHS = (4, 4, 3, 3)
FAMILY_KEY_LENGTH = SEGMENT_WIDTHS[0] + 1 + SEGMENT_WIDTHS[1]

_CODE_PATTERN = re.compile(
    r"^" + "-".join(f"([0-9A-Za-z]{{{width}}})" for width in SEGMENT_WIDTHS) + r"$"
)


@dataclass(frozen=True)
class AccountCode:
    """A parsed account code."""

    raw: str
    segments: tuple[str, str, str, str]
    level: HierarchyLevel

    @property
    def family_key(self) -> str:
        """First two segments, shared by every descendant of a level-2 root."""
        return self.raw[:FAMILY_KEY_LENGTH]

    def prefix(self, segment_count: int) -> str:
        """Return the first segment_count segments joined by dashes."""
        return "-".join(self.segments[:segment_count])


def _is_placeholder(segment: str) -> bool:
    return set(segment) == {"0"}


def parse_account_code(code: str) -> AccountCode:
    """Parse an account code into its segments and hierarchy level.

    Levels are tested coarsest first, so a code whose segments 2-4 are all
    zero is level 1 even though it also matches the level-2 shape.

    Args:
        code: Account code such as "4100-1000-001-000"

    Returns:
        AccountCode

    Raises:
        MalformedCodeError: If the code does not have four segments of widths 4-4-3-3
    """
    if not isinstance(code, str):
        raise MalformedCodeError(malformed_code(code))
    match = _CODE_PATTERN.match(code)
    if match is None:
        raise MalformedCodeError(malformed_code(code))

    segments = match.groups()
    _, second, third, fourth = segments
    if _is_placeholder(second) and _is_placeholder(third) and _is_placeholder(fourth):
        level = HierarchyLevel.GRAND_TOTAL
    elif _is_placeholder(third) and _is_placeholder(fourth):
        level = HierarchyLevel.FAMILY_ROOT
    elif _is_placeholder(fourth):
        level = HierarchyLevel.SUBCATEGORY
    else:
        level = HierarchyLevel.DETAIL

    return AccountCode(raw=code, segments=segments, level=level)


def hierarchy_level(code: str) -> HierarchyLevel:
    """Return the hierarchy level (1-4) of an account code."""
    return parse_account_code(code).level


def family_key(code: str) -> str:
    """Return the family key (SEG1-SEG2) of an account code."""
    return parse_account_code(code).family_key


def is_direct_child(parent: AccountCode, child: AccountCode) -> bool:
    """Check whether child sits exactly one level below parent in its branch.

    A level-1 parent owns level-2 codes with the same first segment, a level-2
    parent owns level-3 codes in its family, and a level-3 parent owns level-4
    codes sharing its first three segments.
    """
    if parent.level == HierarchyLevel.DETAIL or child.level != parent.level + 1:
        return False
    significant = int(parent.level)
    return child.prefix(significant) == parent.prefix(significant)


def is_descendant(ancestor: AccountCode, code: AccountCode) -> bool:
    """Check whether code sits anywhere below ancestor in its branch."""
    if code.level <= ancestor.level:
        return False
    significant = int(ancestor.level)
    return code.prefix(significant) == ancestor.prefix(significant)


def parent_code(code: AccountCode) -> Optional[str]:
    """Return the code one level up, or None for a level-1 code.

    The parent keeps the segments significant at its level and zero-fills
    the rest, e.g. "4100-1000-001-002" -> "4100-1000-001-000".
    """
    if code.level == HierarchyLevel.GRAND_TOTAL:
        return None
    kept = int(code.level) - 1
    filler = tuple("0" * width for width in SEGMENT_WIDTHS[kept:])
    return "-".join(code.segments[:kept] + filler)
