"""
Run-length encoding of simple case mappings.

Every code point whose simple upper / lower / title mapping differs from itself is covered by exactly one
:class:`CaseDeltaRange`.  A range either applies the same signed deltas to each of its members, or it is an
alternating Upper, Lower, Upper, Lower... sequence of adjacent case pairs, which is stored with the
:data:`UPPER_LOWER` sentinel instead of deltas.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from enum import IntEnum
from typing import NamedTuple, Optional, Sequence, Union

from ..core.exceptions import InvariantViolation
from .chars import CharacterTable

__all__ = [
    'Case', 'CaseIndex', 'CaseState', 'CaseDeltaRange', 'UPPER_LOWER', 'case_state', 'compact_case_deltas', 'to_case'
]
log = logging.getLogger(__name__)


class Case(IntEnum):
    MISSING = -1  # character not present; not a valid case state
    NONE = 0
    UPPER = 1
    LOWER = 2
    TITLE = 4


class CaseIndex(IntEnum):
    """Index of each delta in a :class:`CaseDeltaRange`; the low bit selects the member of an Upper/Lower pair"""
    UPPER = 0
    LOWER = 1
    TITLE = 2


class _UpperLower:
    __slots__ = ()

    def __repr__(self) -> str:
        return 'UPPER_LOWER'

    def __serializable__(self) -> str:
        return 'UPPER_LOWER'


UPPER_LOWER = _UpperLower()
Deltas = Union[tuple[int, int, int], _UpperLower]


class CaseState(NamedTuple):
    point: int
    case: Case
    to_upper: int = 0
    to_lower: int = 0
    to_title: int = 0

    @property
    def deltas(self) -> tuple[int, int, int]:
        return self.to_upper, self.to_lower, self.to_title

    @property
    def is_upper_lower(self) -> bool:
        """True if this character can start an Upper Lower sequence"""
        return self.deltas == (0, 1, 0)

    @property
    def is_lower_upper(self) -> bool:
        """True if this character can start a Lower Upper sequence"""
        return self.deltas == (-1, 0, -1)

    def adjacent(self, other: CaseState) -> bool:
        """True if ``other`` is a continuation of the run that contains this state"""
        c, d = (other, self) if other.point < self.point else (self, other)
        if d.point != c.point + 1:
            return False
        elif d.case != c.case:
            return c._upper_lower_adjacent(d)
        elif c.case in (Case.NONE, Case.MISSING):
            return False
        return c.deltas == d.deltas

    def _upper_lower_adjacent(self, other: CaseState) -> bool:
        """True if ``other`` is the same as this state, but opposite in upper/lower case"""
        c, d = self, other
        if c.case == Case.UPPER and d.case != Case.LOWER:
            return False
        elif c.case == Case.LOWER and d.case != Case.UPPER:
            return False
        if c.case == Case.LOWER:
            c, d = d, c
        return c.is_upper_lower and d.is_lower_upper


class CaseDeltaRange(NamedTuple):
    lo: int
    hi: int
    deltas: Deltas

    def apply(self, code_point: int, case: CaseIndex) -> int:
        """
        :param code_point: A code point within this range
        :param case: The case that the code point should be converted to
        :return: The converted code point
        """
        if self.deltas is UPPER_LOWER:
            # Upper case is the even member of each pair, and lower case is the odd member.  Title is upper.
            return self.lo + (((code_point - self.lo) & ~1) | (case & 1))
        return code_point + self.deltas[case]


def case_state(chars: CharacterTable, code_point: int) -> CaseState:
    if not chars.defined[code_point]:
        return CaseState(code_point, Case.MISSING)

    upper, lower, title = chars.upper[code_point], chars.lower[code_point], chars.title[code_point]
    if code_point == upper:
        case = Case.UPPER
    elif code_point == lower:
        case = Case.LOWER
    elif code_point == title:
        case = Case.TITLE
    elif lower:
        # Some characters, such as the roman numeral U+2161, do not describe themselves as upper case, but have a
        # lower case mapping
        case = Case.UPPER
    elif upper:
        case = Case.LOWER
    else:
        case = Case.NONE

    return CaseState(
        code_point,
        case,
        upper - code_point if upper else 0,
        lower - code_point if lower else 0,
        title - code_point if title else 0,
    )


def compact_case_deltas(chars: CharacterTable) -> list[CaseDeltaRange]:
    """
    :param chars: A populated CharacterTable
    :return: The sorted list of case ranges that cover every code point with a non-self case mapping
    """
    ranges = []
    start: Optional[CaseState] = None
    prev: Optional[CaseState] = None
    # Characters with no case mapping have no case, or are missing, so they can neither start nor continue a run
    for code_point in chars.iter_mapped():
        state = case_state(chars, code_point)
        if state.case == Case.NONE:
            continue
        if prev is not None and prev.adjacent(state):
            prev = state
            continue

        _add_case_range(ranges, start, prev)
        start = prev = state

    _add_case_range(ranges, start, prev)
    log.debug(f'Compacted case mappings into {len(ranges):,d} ranges')
    return ranges


def _add_case_range(ranges: list[CaseDeltaRange], lo: Optional[CaseState], hi: Optional[CaseState]):
    if lo is None:
        return
    elif lo.deltas == (0, 0, 0):  # character represents itself in all cases - no need to mention it
        return
    elif hi.point > lo.point and lo.is_upper_lower:
        ranges.append(CaseDeltaRange(lo.point, hi.point, UPPER_LOWER))
    elif hi.point > lo.point and lo.is_lower_upper:
        raise InvariantViolation(
            lo.point, f'Lower Upper sequence through U+{hi.point:04X} - case pairs must be ordered upper, lower'
        )
    else:
        ranges.append(CaseDeltaRange(lo.point, hi.point, lo.deltas))


def to_case(ranges: Sequence[CaseDeltaRange], case: CaseIndex, code_point: int) -> int:
    """
    Reference lookup that converts the given code point the way that a consumer of the compiled tables would.

    :param ranges: Case ranges returned by :func:`compact_case_deltas`
    :param case: The case that the code point should be converted to
    :param code_point: The code point to convert
    :return: The converted code point, or the original code point if it has no mapping
    """
    index = bisect_right(ranges, code_point, key=lambda r: r.lo) - 1
    if index >= 0 and code_point <= (r := ranges[index]).hi:
        return r.apply(code_point, case)
    return code_point
