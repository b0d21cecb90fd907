"""
Simple case folding orbits and per-category / per-script fold exceptions.

Code points that share a simple case folding target form an orbit: a cycle that visits every member in ascending order
and wraps back to the lowest one.  A consumer can find every case-insensitive equivalent of a code point by walking its
orbit.  Orbits that are just ``{lower, upper}`` pairs are left out because they can be reconstructed from the simple
case mappings alone.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Mapping, NamedTuple

from bitarray import bitarray

from .chars import CharacterTable, empty_bits

__all__ = ['FoldTables', 'CaseOrbitBuilder', 'build_orbits', 'script_members']
log = logging.getLogger(__name__)

RawRanges = Iterable[tuple[int, int]]


class FoldTables(NamedTuple):
    orbits: dict[int, int]                  # {code point: next code point in its orbit}
    fold_category: dict[str, frozenset[int]]
    fold_script: dict[str, frozenset[int]]


class CaseOrbitBuilder:
    def __init__(self, chars: CharacterTable):
        self.chars = chars

    def build(self) -> dict[int, int]:
        """
        Build the case orbits and record the successor of each orbit member in the character table.

        :return: Mapping of {code point: next code point in its orbit}, in code point order
        """
        orbits = self.linearize(self.group_by_fold())
        self.chars.set_orbits(orbits)
        log.debug(f'Built case orbits with {len(orbits):,d} members')
        return orbits

    def group_by_fold(self) -> dict[int, list[int]]:
        """
        :return: Mapping of {canonical code point: case folding group}.  Each group starts with its canonical (folded)
          code point, followed by the code points that fold to it.
        """
        chars = self.chars
        groups = {}
        for code_point in chars.iter_folded():
            target = chars.fold[code_point]
            group = groups.setdefault(target, [target])
            if code_point != target:
                group.append(code_point)

        # Insert explicit 1-element groups when assuming [upper, lower] would be wrong
        for code_point in chars.iter_mapped():
            key = chars.fold[code_point] or code_point
            if key in groups:
                continue
            upper, lower = chars.upper[code_point], chars.lower[code_point]
            if (upper and upper != code_point) or (lower and lower != code_point):
                groups[code_point] = [code_point]

        # Delete the groups for which assuming [lower, upper] is right
        for key, group in list(groups.items()):
            if len(group) == 2:
                a, b = group
                if chars.upper[a] == b and chars.lower[b] == a:
                    del groups[key]

        return groups

    @classmethod
    def linearize(cls, groups: Mapping[int, Iterable[int]]) -> dict[int, int]:
        orbits = {}
        for group in groups.values():
            members = sorted(group)
            prev = members[-1]
            for code_point in members:
                orbits[prev] = code_point
                prev = code_point
        return dict(sorted(orbits.items()))

    def fold_equivalents(self, code_point: int) -> Iterator[int]:
        """The code points that are equivalent to the given code point under simple case folding, including itself"""
        chars = self.chars
        if next_point := chars.orbit[code_point]:
            yield code_point
            while next_point != code_point:
                yield next_point
                next_point = chars.orbit[next_point]
        else:
            yield code_point
            if upper := chars.upper[code_point]:
                yield upper
            if lower := chars.lower[code_point]:
                yield lower

    def fold_exceptions(self, members: bitarray) -> frozenset[int]:
        """
        :param members: A bitarray that is True for every code point in a category or script
        :return: The code points that are fold-equivalent to a member, but that are not members themselves
        """
        chars = self.chars
        equivalents = set()
        # Members without any case mapping or orbit are only equivalent to themselves
        for code_point in (members & (chars.mapped | chars.in_orbit)).search(1):
            equivalents.update(self.fold_equivalents(code_point))
        return frozenset(cp for cp in equivalents if not members[cp])

    def category_exceptions(self, names: Iterable[str] = None) -> dict[str, frozenset[int]]:
        exceptions = {}
        for name in self.chars.category_names if names is None else names:
            if found := self.fold_exceptions(self.chars.members(name)):
                exceptions[name] = found
        return exceptions

    def script_exceptions(self, scripts: Mapping[str, RawRanges]) -> dict[str, frozenset[int]]:
        exceptions = {}
        for name in sorted(scripts):
            if found := self.fold_exceptions(script_members(scripts[name])):
                exceptions[name] = found
        return exceptions


def script_members(raw_ranges: RawRanges) -> bitarray:
    bits = empty_bits()
    for lo, hi in raw_ranges:
        bits[lo:hi + 1] = True
    return bits


def build_orbits(chars: CharacterTable, scripts: Mapping[str, RawRanges] = None) -> FoldTables:
    """
    Build case orbits, then compute the fold exceptions for every category and every script.

    :param chars: A CharacterTable with case mappings and simple case foldings
    :param scripts: Mapping of {script name: raw (lo, hi) ranges}
    :return: The orbit mapping plus category and script fold exception mappings.  Names whose exception set would be
      empty are omitted.
    """
    builder = CaseOrbitBuilder(chars)
    orbits = builder.build()
    fold_category = builder.category_exceptions()
    fold_script = builder.script_exceptions(scripts) if scripts else {}
    return FoldTables(orbits, fold_category, fold_script)
