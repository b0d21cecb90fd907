"""
A table of per-code-point character properties, indexed by code point.

The table is column-oriented: each property is stored in a flat array that spans the entire code point space, and
bitarrays track which code points have been defined or carry case / fold data.  Records are only materialized as
:class:`CharacterRecord` tuples on access.
"""

from __future__ import annotations

import logging
from array import array
from typing import Iterator, Mapping, NamedTuple

from bitarray import bitarray

from ..core.exceptions import DuplicateCodePointError
from .constants import DOMAIN_SIZE, MAX_CHAR, CATEGORY_GROUPS

__all__ = ['CharacterRecord', 'CharacterTable', 'empty_bits']
log = logging.getLogger(__name__)


class CharacterRecord(NamedTuple):
    code_point: int     # 0 if this index is not a defined code point
    category: str
    upper: int
    lower: int
    title: int
    fold: int
    orbit_next: int

    @property
    def defined(self) -> bool:
        return self.code_point != 0


def empty_bits() -> bitarray:
    bits = bitarray(DOMAIN_SIZE)
    bits.setall(False)
    return bits


def _zeros() -> array:
    return array('l', [0]) * DOMAIN_SIZE


class CharacterTable:
    """
    Holds the decoded properties of every code point in ``[0, 0x10FFFF]``.

    Records are written once while ingesting UnicodeData.txt, annotated with simple case folding targets from
    CaseFolding.txt, and annotated once more with case orbit successors.  After that, the table is only read.
    """

    def __init__(self):
        self.categories = [''] * DOMAIN_SIZE
        self.upper = _zeros()
        self.lower = _zeros()
        self.title = _zeros()
        self.fold = _zeros()
        self.orbit = _zeros()
        self.defined = empty_bits()
        self.mapped = empty_bits()      # Code points with at least one non-zero simple case mapping
        self.folded = empty_bits()      # Code points with a recorded simple case folding
        self.in_orbit = empty_bits()
        self._observed = set()
        self._members = None

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[defined={self.defined.count():,d}, folded={self.folded.count():,d}]>'

    # region Ingestion

    def define(self, code_point: int, category: str, upper: int = 0, lower: int = 0, title: int = 0):
        """
        Record the properties of a single code point.

        :param code_point: The code point being defined.  Must not have been defined before.
        :param category: The general category of the code point
        :param upper: The simple uppercase mapping target, or 0 if there is none
        :param lower: The simple lowercase mapping target, or 0 if there is none
        :param title: The simple titlecase mapping target, or 0 if there is none
        """
        if self.defined[code_point]:
            raise DuplicateCodePointError(code_point)

        self.defined[code_point] = True
        self.categories[code_point] = category
        self.upper[code_point] = upper
        self.lower[code_point] = lower
        self.title[code_point] = title
        if upper or lower or title:
            self.mapped[code_point] = True
        self._observed.add(category)
        self._members = None

    def fill_range(self, first: int, last: int):
        """
        Copy the record for ``first`` to every code point in ``(first, last]``.  The ``last`` code point is expected to
        have been defined already, by the line that closed the range; its record is replaced.
        """
        if last <= first:
            return
        start, stop = first + 1, last + 1
        if self.defined[start:last].any():
            raise DuplicateCodePointError(start + self.defined[start:last].index(True))

        count = stop - start
        self.defined[start:stop] = True
        self.categories[start:stop] = [self.categories[first]] * count
        for column in (self.upper, self.lower, self.title):
            column[start:stop] = array('l', [column[first]]) * count
        self.mapped[start:stop] = self.mapped[first]
        self._members = None

    def set_fold(self, code_point: int, target: int):
        self.fold[code_point] = target
        self.folded[code_point] = bool(target)

    def set_orbits(self, orbits: Mapping[int, int]):
        """Replace all case orbit successors with the given ``{code point: next code point}`` mapping"""
        for code_point in self.in_orbit.search(1):
            self.orbit[code_point] = 0
        self.in_orbit.setall(False)
        for code_point, next_point in orbits.items():
            self.orbit[code_point] = next_point
            self.in_orbit[code_point] = True

    # endregion

    # region Access

    def __getitem__(self, code_point: int) -> CharacterRecord:
        return CharacterRecord(
            code_point if self.defined[code_point] else 0,
            self.categories[code_point],
            self.upper[code_point],
            self.lower[code_point],
            self.title[code_point],
            self.fold[code_point],
            self.orbit[code_point],
        )

    def __contains__(self, code_point: int) -> bool:
        return 0 <= code_point <= MAX_CHAR and self.defined[code_point]

    def iter_defined(self) -> Iterator[int]:
        yield from self.defined.search(1)

    def iter_mapped(self) -> Iterator[int]:
        yield from self.mapped.search(1)

    def iter_folded(self) -> Iterator[int]:
        yield from self.folded.search(1)

    def iter_orbit_points(self) -> Iterator[int]:
        yield from self.in_orbit.search(1)

    # endregion

    # region Categories

    @property
    def category_names(self) -> list[str]:
        """All categories that were observed in the data, plus the one-letter merged categories"""
        return sorted(self._observed.union(CATEGORY_GROUPS))

    def members(self, name: str) -> bitarray:
        """
        :param name: A two-letter category name, or a one-letter merged category name
        :return: A bitarray with a True value at the index of every code point in the given category
        """
        if self._members is None:
            self._members = self._index_categories()
        try:
            return self._members[name]
        except KeyError:
            return empty_bits()

    def _index_categories(self) -> dict[str, bitarray]:
        log.debug('Indexing code points by category')
        index = {name: empty_bits() for name in self.category_names}
        categories = self.categories
        for code_point in self.defined.search(1):
            category = categories[code_point]
            index[category][code_point] = True
            if len(category) > 1 and category[0] in CATEGORY_GROUPS:
                index[category[0]][code_point] = True
        return index

    # endregion
