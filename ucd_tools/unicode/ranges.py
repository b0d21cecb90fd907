"""
Compaction of code point sets into range tables.

A :class:`RangeTable` stores a set of code points as an ordered list of arithmetic progressions (``lo``, ``hi``,
``stride``), split into a 16-bit bucket and a 32-bit bucket at the ``0x10000`` boundary.  Consumers test membership
with a binary search over the appropriate bucket.

The compaction in :func:`compact` is a greedy, single-pass, left-to-right run detector that takes the stride from
the first two members of each run.  It does not produce a globally minimal range count, but its output is exactly
reproducible for a given input.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from typing import Callable, Iterable, Iterator, NamedTuple, Union

from bitarray import bitarray

from .chars import empty_bits
from .constants import DOMAIN_SIZE, MAX_LATIN1, MAX_R16

__all__ = ['Range', 'RangeTable', 'RangeCounter', 'compact', 'compact_ranges', 'fold_adjacent', 'latin_offset']
log = logging.getLogger(__name__)

Predicate = Union[Callable[[int], bool], bitarray]


class Range(NamedTuple):
    lo: int
    hi: int
    stride: int = 1

    def __contains__(self, code_point: int) -> bool:  # noqa
        return self.lo <= code_point <= self.hi and (code_point - self.lo) % self.stride == 0

    def members(self) -> range:
        return range(self.lo, self.hi + 1, self.stride)


class RangeCounter:
    """Accumulates the number of 16-bit and 32-bit range entries produced across multiple tables"""

    __slots__ = ('r16', 'r32')

    def __init__(self):
        self.r16 = 0
        self.r32 = 0

    def add(self, table: RangeTable):
        self.r16 += len(table.r16)
        self.r32 += len(table.r32)

    @property
    def total(self) -> int:
        return self.r16 + self.r32

    @property
    def r16_bytes(self) -> int:
        return self.r16 * 3 * 2

    @property
    def r32_bytes(self) -> int:
        return self.r32 * 3 * 4

    @property
    def total_bytes(self) -> int:
        return self.r16_bytes + self.r32_bytes

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[r16={self.r16}, r32={self.r32}]>'


class RangeTable:
    """
    An immutable, sorted set of code points stored as arithmetic progressions.

    :param r16: Ranges whose members are all <= 0xFFFF
    :param r32: Ranges whose members are all > 0xFFFF
    :param latin_offset: The number of ranges in ``r16`` whose members are all <= 0xFF
    """

    __slots__ = ('r16', 'r32', 'latin_offset', '_r16_los', '_r32_los')

    def __init__(self, r16: Iterable[Range] = (), r32: Iterable[Range] = (), latin_offset: int = 0):
        self.r16 = tuple(r16)
        self.r32 = tuple(r32)
        self.latin_offset = latin_offset
        self._r16_los = [r.lo for r in self.r16]
        self._r32_los = [r.lo for r in self.r32]

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__}[r16={len(self.r16)}, r32={len(self.r32)}, latin_offset={self.latin_offset}]>'
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, RangeTable):
            return NotImplemented
        return (self.r16, self.r32, self.latin_offset) == (other.r16, other.r32, other.latin_offset)

    def __hash__(self) -> int:
        return hash((self.r16, self.r32, self.latin_offset))

    def __iter__(self) -> Iterator[Range]:
        yield from self.r16
        yield from self.r32

    def __len__(self) -> int:
        return len(self.r16) + len(self.r32)

    def __bool__(self) -> bool:
        return bool(self.r16 or self.r32)

    def __contains__(self, code_point: int) -> bool:
        if code_point <= MAX_R16:
            ranges, los = self.r16, self._r16_los
        else:
            ranges, los = self.r32, self._r32_los
        index = bisect_right(los, code_point) - 1
        return index >= 0 and code_point in ranges[index]

    def iter_code_points(self) -> Iterator[int]:
        for r in self:
            yield from r.members()

    def __serializable__(self) -> dict[str, Union[int, list[list[int]]]]:
        return {
            'r16': [list(r) for r in self.r16],
            'r32': [list(r) for r in self.r32],
            'latin_offset': self.latin_offset,
        }


class _TableBuilder:
    """Classifies ranges into the 16-bit or 32-bit bucket, splitting any range that straddles the boundary"""

    __slots__ = ('r16', 'r32')

    def __init__(self):
        self.r16 = []
        self.r32 = []

    def add(self, lo: int, hi: int, stride: int):
        if hi <= MAX_R16:
            self.r16.append(_range(lo, hi, stride))
        elif lo > MAX_R16:
            self.r32.append(_range(lo, hi, stride))
        else:
            # No range may contain members on both sides of U+FFFF / U+10000, so the progression is cut in two.  This
            # maintains the invariant that the 32-bit bucket only contains code points >= 0x10000.
            low_hi = lo + (MAX_R16 - lo) // stride * stride
            high_lo = low_hi + stride
            log.debug(f'Splitting range straddling U+10000: U+{lo:04X}..U+{hi:04X} {stride=}')
            self.r16.append(_range(lo, low_hi, stride))
            self.r32.append(_range(high_lo, hi, stride))

    def build(self, counter: RangeCounter = None) -> RangeTable:
        table = RangeTable(self.r16, self.r32, latin_offset(self.r16))
        if counter is not None:
            counter.add(table)
        return table


def _range(lo: int, hi: int, stride: int) -> Range:
    return Range(lo, hi, stride if hi > lo else 1)


def compact(predicate: Predicate, counter: RangeCounter = None) -> RangeTable:
    """
    Compact the set of code points for which the given predicate is True into a :class:`RangeTable`.

    :param predicate: A function that accepts a code point and returns True if it is a member of the set, or a
      bitarray spanning the entire code point space with True values for members
    :param counter: A :class:`RangeCounter` that should track the number of range entries that are produced
    :return: A RangeTable containing exactly the code points for which the predicate is True
    """
    bits = predicate if isinstance(predicate, bitarray) else _to_bits(predicate)
    builder = _TableBuilder()
    end = len(bits)
    find = bits.find
    nxt = 0
    while True:
        lo = find(1, nxt)
        if lo < 0:  # no members remain
            break

        second = find(1, lo + 1)
        if second < 0:  # lo is the last member
            builder.add(lo, lo, 1)
            break

        stride = second - lo
        if stride == 1:
            stop = find(0, second)
            hi = (end if stop < 0 else stop) - 1
        else:
            # Every position between members must be a non-member, so the run continues only while the next member
            # is exactly one stride away from the previous one.
            hi = second
            while (following := find(1, hi + 1)) == hi + stride:
                hi = following

        builder.add(lo, hi, stride)
        nxt = hi + 1

    return builder.build(counter)


def _to_bits(predicate: Callable[[int], bool]) -> bitarray:
    bits = empty_bits()
    for code_point in range(DOMAIN_SIZE):
        if predicate(code_point):
            bits[code_point] = True
    return bits


def compact_ranges(ranges: Iterable[Range], counter: RangeCounter = None) -> RangeTable:
    """
    :param ranges: Sorted, non-overlapping ranges, such as those returned by :func:`fold_adjacent`
    :param counter: A :class:`RangeCounter` that should track the number of range entries that are produced
    :return: A RangeTable containing the given ranges, split across the 16-bit and 32-bit buckets
    """
    builder = _TableBuilder()
    for lo, hi, stride in ranges:
        builder.add(lo, hi, stride)
    return builder.build(counter)


def fold_adjacent(raw_ranges: Iterable[tuple[int, int]]) -> list[Range]:
    """
    Merge touching ranges.  Script and property files list many adjacent ranges (one per category), so a range that
    starts immediately after the previous one ends is folded into it.

    :param raw_ranges: Inclusive ``(lo, hi)`` ranges in file order
    :return: List of unit-stride :class:`Range` objects
    """
    folded = []
    for lo, hi in raw_ranges:
        if folded and lo == folded[-1].hi + 1:
            folded[-1] = Range(folded[-1].lo, hi, 1)
        else:
            folded.append(Range(lo, hi, 1))
    return folded


def latin_offset(ranges: Iterable[Range]) -> int:
    """The number of leading ranges that are entirely within Latin-1"""
    count = 0
    for r in ranges:
        if r.hi > MAX_LATIN1:
            break
        count += 1
    return count
