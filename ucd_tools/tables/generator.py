"""
The table generation pipeline: load the UCD files, validate the requested table names, and build every table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Collection, Iterable, Optional

from ..core.exceptions import UnknownTableError
from ..ucd.parsing import parse_unicode_data, parse_case_folding, parse_ranges
from ..ucd.sources import UcdSource, UNICODE_DATA, CASE_FOLDING, SCRIPTS, PROP_LIST
from ..unicode.cases import CaseDeltaRange, compact_case_deltas
from ..unicode.chars import CharacterTable, empty_bits
from ..unicode.constants import CATEGORY_ALIASES, SUBCATEGORY_ALIASES
from ..unicode.folding import build_orbits
from ..unicode.latin import latin_properties
from ..unicode.ranges import RangeTable, RangeCounter, compact, compact_ranges, fold_adjacent

if TYPE_CHECKING:
    from ..config import GeneratorConfig
    from .verify import Mismatch, Reference

__all__ = ['TableGenerator', 'GeneratedTables', 'Selection', 'select', 'category_aliases']
log = logging.getLogger(__name__)

RawRanges = dict[str, list[tuple[int, int]]]


def category_aliases(name: str) -> list[str]:
    """The descriptive names that should refer to the same table as the given category"""
    return [alias for alias in (CATEGORY_ALIASES.get(name), SUBCATEGORY_ALIASES.get(name)) if alias]


def select(selection: str, available: Collection[str], kind: str) -> list[str]:
    """
    :param selection: ``all``, an empty string, or a comma-separated list of names
    :param available: The names that exist in the loaded data
    :param kind: The kind of table being selected, for error messages
    :return: The selected names.  ``all`` results in every available name, in sorted order.
    """
    if selection == 'all':
        return sorted(available)
    elif not selection:
        return []
    names = [name.strip() for name in selection.split(',')]
    if unknown := {name for name in names if name not in available}:
        raise UnknownTableError(kind, unknown)
    return names


@dataclass
class Selection:
    categories: list[str] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)
    props: list[str] = field(default_factory=list)


@dataclass
class GeneratedTables:
    version: str
    url: str
    data_url: str
    casefolding_url: str
    tables_arg: str
    scripts_arg: str
    props_arg: str
    categories: dict[str, RangeTable]
    scripts: dict[str, RangeTable]
    properties: dict[str, RangeTable]
    case_ranges: Optional[list[CaseDeltaRange]]
    latin_properties: list[str]
    orbits: dict[int, int]
    fold_category: dict[str, RangeTable]
    fold_script: dict[str, RangeTable]
    counter: RangeCounter

    @property
    def all_categories(self) -> bool:
        return self.tables_arg == 'all'

    @property
    def all_scripts(self) -> bool:
        return self.scripts_arg == 'all'

    @property
    def all_props(self) -> bool:
        return self.props_arg == 'all'

    def __serializable__(self):
        return {
            'version': self.version,
            'categories': self.categories,
            'aliases': {alias: name for name in self.categories for alias in category_aliases(name)},
            'scripts': self.scripts,
            'properties': self.properties,
            'case_ranges': self.case_ranges,
            'latin_properties': self.latin_properties,
            'case_orbit': self.orbits,
            'fold_category': self.fold_category,
            'fold_script': self.fold_script,
            'sizes': {
                'r16': self.counter.r16,
                'r32': self.counter.r32,
                'range_bytes': self.counter.total_bytes,
                'fold_pairs': len(self.orbits),
            },
        }


class TableGenerator:
    """
    :param config: The :class:`GeneratorConfig` that specifies which tables should be generated
    :param source: The :class:`UcdSource` to read from (default: based on ``config.source``)
    """

    def __init__(self, config: GeneratorConfig, source: UcdSource = None):
        self.config = config
        self.source = source or config.source.source()
        self._files = None

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}[{self.source}]>'

    # region Input

    @property
    def files(self) -> dict[str, list[str]]:
        if self._files is None:
            self.load()
        return self._files

    def load(self) -> dict[str, list[str]]:
        """Retrieve all of the files that are needed for the configured selections"""
        names = [UNICODE_DATA, CASE_FOLDING, SCRIPTS]
        if self.config.props:
            names.append(PROP_LIST)
        self._files = self.source.fetch_all(names)
        return self._files

    @cached_property
    def chars(self) -> CharacterTable:
        chars = parse_unicode_data(self.files[UNICODE_DATA], source=UNICODE_DATA)
        return parse_case_folding(self.files[CASE_FOLDING], chars, source=CASE_FOLDING)

    @cached_property
    def scripts(self) -> RawRanges:
        return parse_ranges(self.files[SCRIPTS], SCRIPTS)

    @cached_property
    def props(self) -> RawRanges:
        try:
            lines = self.files[PROP_LIST]
        except KeyError:
            return {}
        return parse_ranges(lines, PROP_LIST)

    # endregion

    def selection(self) -> Selection:
        """
        Resolve the configured table names.  Every unknown name results in an error before any table is built.
        """
        config = self.config
        return Selection(
            select(config.tables, self.chars.category_names, 'category'),
            select(config.scripts, self.scripts, 'script'),
            select(config.props, self.props, 'property'),
        )

    def build(self) -> GeneratedTables:
        selection = self.selection()
        config, chars, source = self.config, self.chars, self.source
        counter = RangeCounter()

        log.info(f'Building {len(selection.categories)} category tables')
        categories = {name: compact(chars.members(name), counter) for name in selection.categories}
        log.info(f'Building {len(selection.scripts)} script tables')
        scripts = self._build_range_tables(self.scripts, selection.scripts, counter)
        log.info(f'Building {len(selection.props)} property tables')
        properties = self._build_range_tables(self.props, selection.props, counter)

        case_ranges = compact_case_deltas(chars) if config.cases else None
        latin = latin_properties(chars)

        log.info('Building case folding orbits and fold exception tables')
        fold_tables = build_orbits(chars, self.scripts)
        fold_category = self._build_fold_tables(fold_tables.fold_category, counter)
        fold_script = self._build_fold_tables(fold_tables.fold_script, counter)

        return GeneratedTables(
            version=source.version,
            url=source.url,
            data_url=source.data_url,
            casefolding_url=source.casefolding_url,
            tables_arg=config.tables,
            scripts_arg=config.scripts,
            props_arg=config.props,
            categories=categories,
            scripts=scripts,
            properties=properties,
            case_ranges=case_ranges,
            latin_properties=latin,
            orbits=fold_tables.orbits,
            fold_category=fold_category,
            fold_script=fold_script,
            counter=counter,
        )

    @classmethod
    def _build_range_tables(cls, raw: RawRanges, names: Iterable[str], counter: RangeCounter) -> dict[str, RangeTable]:
        return {name: compact_ranges(fold_adjacent(raw[name]), counter) for name in names}

    @classmethod
    def _build_fold_tables(cls, exceptions: dict[str, frozenset[int]], counter: RangeCounter) -> dict[str, RangeTable]:
        tables = {}
        for name in sorted(exceptions):
            bits = empty_bits()
            for code_point in exceptions[name]:
                bits[code_point] = True
            tables[name] = compact(bits, counter)
        return tables

    def verify(self, reference: Reference = None) -> list[Mismatch]:
        """
        Compare tables built from the loaded data with a reference.  Every table is checked, and every mismatch is
        logged and returned.

        :param reference: The reference to compare against (default: :class:`UnicodedataReference`)
        :return: The mismatches that were found
        """
        from .verify import TableVerifier, UnicodedataReference

        selection = self.selection()
        verifier = TableVerifier(self.chars, reference or UnicodedataReference())
        counter = RangeCounter()
        categories = {name: compact(self.chars.members(name), counter) for name in selection.categories}
        verifier.verify_categories(categories)
        if self.config.cases:
            verifier.verify_cases(compact_case_deltas(self.chars))
        ranges = (('script', self.scripts, selection.scripts), ('property', self.props, selection.props))
        for kind, raw, names in ranges:
            verifier.verify_ranges(kind, self._build_range_tables(raw, names, counter), raw)
        build_orbits(self.chars)
        verifier.verify_orbits()
        return verifier.mismatches
