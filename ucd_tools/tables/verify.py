"""
Verification mode: compare generated tables against a trusted reference instead of writing them.

Mismatches do not stop the comparison.  Each one is logged and collected so that every table can be checked in one
run, and the caller decides how to report the result.
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol, Sequence

from bitarray import bitarray

from ..unicode.cases import CaseDeltaRange, CaseIndex
from ..unicode.chars import CharacterTable, empty_bits
from ..unicode.constants import CATEGORY_GROUPS, DOMAIN_SIZE
from ..unicode.ranges import RangeTable

__all__ = ['Mismatch', 'Reference', 'TableVerifier', 'UnicodedataReference', 'CharacterTableReference', 'table_bits']
log = logging.getLogger(__name__)


@dataclass
class Mismatch:
    table: str
    code_point: int
    expected: Any
    actual: Any

    def __str__(self) -> str:
        return f'{self.table}: U+{self.code_point:04X}: expected={self.expected!r} actual={self.actual!r}'


class Reference(Protocol):
    version: str

    def category(self, code_point: int) -> str:
        ...

    def upper(self, code_point: int) -> int:
        ...

    def lower(self, code_point: int) -> int:
        ...

    def title(self, code_point: int) -> int:
        ...


class UnicodedataReference:
    """
    Uses the Unicode database that is bundled with the running interpreter as the reference.  Only simple (single code
    point) case mappings are considered, and unassigned code points have no category.
    """

    def __init__(self):
        self.version = unicodedata.unidata_version

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{self.version}]>'

    def category(self, code_point: int) -> str:
        category = unicodedata.category(chr(code_point))
        return '' if category == 'Cn' else category

    def upper(self, code_point: int) -> int:
        return self._simple(code_point, chr(code_point).upper())

    def lower(self, code_point: int) -> int:
        return self._simple(code_point, chr(code_point).lower())

    def title(self, code_point: int) -> int:
        return self._simple(code_point, chr(code_point).title())

    @classmethod
    def _simple(cls, code_point: int, mapped: str) -> int:
        return ord(mapped) if len(mapped) == 1 else code_point


class CharacterTableReference:
    """Uses a separately loaded :class:`CharacterTable` as the reference, such as one built from a different source"""

    def __init__(self, chars: CharacterTable, version: str = 'unknown'):
        self.chars = chars
        self.version = version

    def category(self, code_point: int) -> str:
        return self.chars.categories[code_point]

    def upper(self, code_point: int) -> int:
        return self.chars.upper[code_point] or code_point

    def lower(self, code_point: int) -> int:
        return self.chars.lower[code_point] or code_point

    def title(self, code_point: int) -> int:
        return self.chars.title[code_point] or code_point


def table_bits(table: RangeTable) -> bitarray:
    """:return: A bitarray with a True value for every member of the given table"""
    bits = empty_bits()
    for r in table:
        bits[r.lo:r.hi + 1:r.stride] = True
    return bits


class TableVerifier:
    """
    :param chars: The CharacterTable that the tables being verified were built from
    :param reference: The trusted reference
    :param limit: The maximum number of mismatches to report for each category table
    """

    def __init__(self, chars: CharacterTable, reference: Reference, limit: int = 10):
        self.chars = chars
        self.reference = reference
        self.limit = limit
        self.mismatches: list[Mismatch] = []
        self._ref_categories = None

    def _add(self, mismatch: Mismatch):
        log.warning(str(mismatch))
        self.mismatches.append(mismatch)

    @property
    def ref_categories(self) -> dict[str, bitarray]:
        if self._ref_categories is None:
            log.debug(f'Indexing reference categories from {self.reference}')
            index = {}
            category = self.reference.category
            for code_point in range(DOMAIN_SIZE):
                if name := category(code_point):
                    try:
                        index[name][code_point] = True
                    except KeyError:
                        index[name] = bits = empty_bits()
                        bits[code_point] = True
            for group in CATEGORY_GROUPS:
                index[group] = bits = empty_bits()
                for name, members in index.items():
                    if len(name) > 1 and name[0] == group:
                        bits |= members
            self._ref_categories = index
        return self._ref_categories

    def verify_categories(self, tables: Mapping[str, RangeTable]) -> list[Mismatch]:
        found = []
        for name, table in tables.items():
            expected = self.ref_categories.get(name)
            if expected is None:
                expected = empty_bits()
            actual = table_bits(table)
            for i, code_point in enumerate((expected ^ actual).search(1)):
                if i >= self.limit:
                    break
                found.append(Mismatch(name, code_point, bool(expected[code_point]), bool(actual[code_point])))

        for mismatch in found:
            self._add(mismatch)
        return found

    def verify_cases(self, case_ranges: Sequence[CaseDeltaRange]) -> list[Mismatch]:
        """
        Verify that applying the compiled case ranges to each code point produces the reference upper, lower, and title
        case mappings.
        """
        found = []
        reference = self.reference
        cases = (
            ('lower', CaseIndex.LOWER, reference.lower),
            ('upper', CaseIndex.UPPER, reference.upper),
            ('title', CaseIndex.TITLE, reference.title),
        )
        converted = {}  # Code points outside of every range map to themselves
        for r in case_ranges:
            for code_point in range(r.lo, r.hi + 1):
                converted[code_point] = {case: r.apply(code_point, case) for case in CaseIndex}

        for code_point in range(DOMAIN_SIZE):
            mapped = converted.get(code_point)
            for name, case, ref_func in cases:
                actual = mapped[case] if mapped else code_point
                if actual != (expected := ref_func(code_point)):
                    found.append(Mismatch(name, code_point, expected, actual))

        for mismatch in found:
            self._add(mismatch)
        return found

    def verify_ranges(
        self, kind: str, tables: Mapping[str, RangeTable], raw: Mapping[str, Iterable[tuple[int, int]]]
    ) -> list[Mismatch]:
        """Verify that every code point in the raw ranges for each table is a member of that table, and vice versa"""
        found = []
        for name, table in tables.items():
            expected = empty_bits()
            for lo, hi in raw[name]:
                expected[lo:hi + 1] = True
            actual = table_bits(table)
            for code_point in (expected ^ actual).search(1):
                found.append(
                    Mismatch(f'{kind} {name}', code_point, bool(expected[code_point]), bool(actual[code_point]))
                )

        for mismatch in found:
            self._add(mismatch)
        return found

    def verify_orbits(self) -> list[Mismatch]:
        """
        Verify that every orbit returns to its starting point, and that every member of an orbit shares the same simple
        case folding target.
        """
        found = []
        chars = self.chars
        orbit, fold = chars.orbit, chars.fold
        max_steps = chars.in_orbit.count()
        for code_point in chars.iter_orbit_points():
            canonical = fold[code_point] or code_point
            next_point, steps = orbit[code_point], 1
            while next_point != code_point:
                if not next_point or steps > max_steps:
                    found.append(Mismatch('case_orbit', code_point, 'cycle', 'broken chain'))
                    break
                elif (fold[next_point] or next_point) != canonical:
                    found.append(Mismatch('case_orbit', next_point, canonical, fold[next_point] or next_point))
                    break
                next_point = orbit[next_point]
                steps += 1

        for mismatch in found:
            self._add(mismatch)
        return found
