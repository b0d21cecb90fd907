"""
Renders generated tables as C++ static data or as a YAML document.

The C++ output consists of three files:

- ``unicode_public_tables.cc``: range tables, name -> table maps, case ranges, fold exception tables, and the
  graphic / print range lists
- ``unicode_private_tables.inl``: Latin-1 property flags and case orbit pairs, included by the runtime library
- ``_unicode_tables.hh``: declarations for everything in the public tables file
"""

from __future__ import annotations

import json
import logging
from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Union

from ..core.serialization import yaml_dump
from ..unicode.cases import UPPER_LOWER, CaseDeltaRange
from ..unicode.ranges import RangeTable
from .generator import GeneratedTables, category_aliases

if TYPE_CHECKING:
    from ..config import GeneratorConfig

__all__ = [
    'CppTableEmitter', 'YamlTableEmitter', 'dump_yaml', 'get_emitter', 'PUBLIC_TABLES', 'PRIVATE_TABLES', 'TABLE_DEFS'
]
log = logging.getLogger(__name__)

PUBLIC_TABLES = 'unicode_public_tables.cc'
PRIVATE_TABLES = 'unicode_private_tables.inl'
TABLE_DEFS = '_unicode_tables.hh'
YAML_TABLES = 'unicode_tables.yaml'

RANGE_FMT = '\t{{0x{:04x}, 0x{:04x}, {:d}}},\n'
GRAPHIC_RANGES = ('L', 'M', 'N', 'P', 'S', 'Zs')
PRINT_RANGES = ('L', 'M', 'N', 'P', 'S')
_RUNE_ESCAPES = {0x07: r'\a', 0x08: r'\b', 0x09: r'\t', 0x0A: r'\n', 0x0B: r'\v', 0x0C: r'\f', 0x0D: r'\r'}

_EMITTERS = {}
PathLike = Union[Path, str]


def emitter(output_format: str):
    def register_emitter(cls):
        _EMITTERS[output_format] = cls
        return cls
    return register_emitter


def get_emitter(config: GeneratorConfig) -> Union[CppTableEmitter, YamlTableEmitter]:
    return _EMITTERS[config.output.format].from_config(config)


def _quote(value: str) -> str:
    return json.dumps(value)


def quote_rune(code_point: int) -> str:
    """Quote the given code point as a character literal, escaping it if it is not printable"""
    if code_point in _RUNE_ESCAPES:
        return f"'{_RUNE_ESCAPES[code_point]}'"
    char = chr(code_point)
    if char in ("'", '\\'):
        return f"'\\{char}'"
    elif char.isprintable():
        return f"'{char}'"
    elif code_point < 0x80:
        return f"'\\x{code_point:02x}'"
    return f"'\\u{code_point:04x}'"


# region C++


class _CppWriter:
    """Accumulates the content of the three C++ output files"""

    def __init__(self):
        self.public = StringIO()
        self.private = StringIO()
        self.header = StringIO()

    def pt(self, text: str):
        self.public.write(text)

    def ppt(self, text: str):
        self.private.write(text)

    def ph(self, text: str):
        self.header.write(text)


@emitter('cpp')
class CppTableEmitter:
    """
    :param out_dir: The directory in which output files should be written
    :param namespace: The C++ namespace for the tables
    :param header: The include path of the runtime library header that defines the table types
    """

    def __init__(self, out_dir: PathLike = '.', namespace: str = 'zbs::unicode', header: str = 'zbs/unicode.hh'):
        self.out_dir = Path(out_dir).expanduser()
        self.namespace = namespace
        self.header = header

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> CppTableEmitter:
        output = config.output
        return cls(output.out_dir, output.namespace, output.header)

    def emit(self, tables: GeneratedTables) -> list[Path]:
        """
        Write the C++ output files, then log a summary of the table sizes.

        :param tables: The tables to write
        :return: The paths of the files that were written
        """
        self.out_dir.mkdir(parents=True, exist_ok=True)
        paths = []
        for name, content in self.render(tables).items():
            path = self.out_dir.joinpath(name)
            log.info(f'Writing {path.as_posix()}')
            path.write_text(content, encoding='utf-8', newline='\n')
            paths.append(path)
        self.log_sizes(tables)
        return paths

    def render(self, tables: GeneratedTables) -> dict[str, str]:
        """:return: Mapping of {file name: content} for each output file"""
        out = _CppWriter()
        self._write_header(out, tables)
        self._write_categories(out, tables)
        self._write_scripts(out, tables.scripts, 'scripts', tables.scripts_arg, tables.url, tables.all_scripts)
        self._write_scripts(out, tables.properties, 'props', tables.props_arg, tables.url, tables.all_props)
        if tables.case_ranges is not None:
            self._write_case_ranges(out, tables)
        self._write_latin_properties(out, tables.latin_properties)
        self._write_case_orbit(out, tables.orbits)
        self._write_fold_tables(out, 'fold_category', tables.fold_category)
        self._write_fold_tables(out, 'fold_script', tables.fold_script)
        self._write_footer(out)
        return {
            PUBLIC_TABLES: out.public.getvalue(),
            PRIVATE_TABLES: out.private.getvalue(),
            TABLE_DEFS: out.header.getvalue(),
        }

    # region Sections

    @property
    def _namespaces(self) -> list[str]:
        return self.namespace.split('::')

    def _write_header(self, out: _CppWriter, tables: GeneratedTables):
        open_ns = ''.join(f'namespace {ns} {{\n' for ns in self._namespaces)
        generated = '// Generated by running make_tables.py\n// DO NOT EDIT\n\n'
        out.pt(f'{generated}#include "{self.header}"\n\n{open_ns}\n')
        out.ph(f'{generated}{open_ns}\n')
        out.ppt(generated)

        out.pt('// Version is the Unicode edition from which the tables are derived.\n')
        out.pt(f'extern const char version[] = {_quote(tables.version)};\n\n')
        out.ph('extern const char version[];\n')

    def _write_categories(self, out: _CppWriter, tables: GeneratedTables):
        if not tables.categories:
            return
        for name, table in tables.categories.items():
            self._write_range_table(out, name, table)
            for alias in category_aliases(name):
                out.pt(f'extern const range_table {alias} = {name};\n\n')
                out.ph(f'extern const range_table {alias};\n')

        out.pt('\n\n')
        if tables.all_categories:
            self._write_map(out, 'categories', 'Categories is the set of Unicode category tables.', tables.categories)

    def _write_scripts(
        self, out: _CppWriter, tables: dict[str, RangeTable], flag: str, selection: str, url: str, write_map: bool
    ):
        if not selection:
            return
        out.pt(f'// Generated by running\n//\tmake_tables.py --{flag}={selection} --url={url}\n// DO NOT EDIT\n\n')
        for name, table in tables.items():
            self._write_range_table(out, name, table)
        if write_map:
            if flag == 'props':
                self._write_map(out, 'properties', 'Properties is the set of Unicode property tables.', tables)
            else:
                self._write_map(out, 'scripts', 'Scripts is the set of Unicode script tables.', tables)

    def _write_case_ranges(self, out: _CppWriter, tables: GeneratedTables):
        out.pt(
            '// Generated by running\n'
            f'//\tmake_tables.py --data={tables.data_url} --casefolding={tables.casefolding_url}\n'
            '// DO NOT EDIT\n\n'
            '// CaseRanges is the table describing case mappings for all letters with\n'
            '// non-self mappings.\n'
            'const case_range _case_ranges[] = {\n'
        )
        for case_range in tables.case_ranges:
            out.pt(format_case_range(case_range))
        out.pt('};\n')
        out.pt('extern const slice<const case_range> case_ranges(_case_ranges);\n\n')
        out.ph('extern const slice<const case_range> case_ranges;\n')

    def _write_latin_properties(self, out: _CppWriter, properties: Iterable[str]):
        out.ppt('const uint8 latin_properties[max_latin1+1] = {\n')
        for code_point, prop in enumerate(properties):
            out.ppt(f'\t{prop}, // (0x{code_point:02X}) {quote_rune(code_point)}\n')
        out.ppt('};\n\n')

    def _write_case_orbit(self, out: _CppWriter, orbits: dict[int, int]):
        out.ppt('const fold_pair _case_orbit[] = {\n')
        for code_point, next_point in orbits.items():
            out.ppt(f'\t{{0x{code_point:04X}, 0x{next_point:04X}}},\n')
        out.ppt('};\n')
        out.ppt('const slice<const fold_pair> case_orbit(_case_orbit);\n\n')

    def _write_fold_tables(self, out: _CppWriter, map_name: str, tables: dict[str, RangeTable]):
        for name, table in tables.items():
            self._write_range_table(out, f'fold{name}', table, extern=False)
        out.pt(f'extern const map<const char*, range_table> {map_name} = {{\n')
        out.ph(f'extern const map<const char*, range_table> {map_name};\n')
        for name in tables:
            out.pt(f'\t{{{_quote(name)}, fold{name}}},\n')
        out.pt('};\n\n')

    def _write_footer(self, out: _CppWriter):
        out.ph('extern const slice<const range_table> graphic_ranges;\n')
        out.pt('const range_table _graphic_ranges[] = {\n')
        out.pt(f'\t{", ".join(GRAPHIC_RANGES)},\n')
        out.pt('};\n')
        out.pt('extern const slice<const range_table> graphic_ranges(_graphic_ranges);\n')

        out.ph('extern const slice<const range_table> print_ranges;\n')
        out.pt('const range_table _print_ranges[] = {\n')
        out.pt(f'\t{", ".join(PRINT_RANGES)},\n')
        out.pt('};\n')
        out.pt('extern const slice<const range_table> print_ranges(_print_ranges);\n')

        close_ns = '}' * len(self._namespaces) + f' // namespace {self.namespace}'
        out.pt(close_ns)
        out.ph(close_ns)

    # endregion

    @classmethod
    def _write_range_table(cls, out: _CppWriter, name: str, table: RangeTable, extern: bool = True):
        out.pt(f'const range16 {name}_r16[] = {{\n')
        for r in table.r16:
            out.pt(RANGE_FMT.format(*r))
        out.pt('};\n')
        if table.r32:
            out.pt(f'const range32 {name}_r32[] = {{\n')
            for r in table.r32:
                out.pt(RANGE_FMT.format(*r))
            out.pt('};\n')
        else:
            out.pt(f'const range32 {name}_r32[] = {{}};\n')

        r16 = f'{name}_r16' if table.r16 else '{}'
        r32 = f'{name}_r32' if table.r32 else '{}'
        if extern:
            out.pt(f'extern const range_table {name} = {{{r16}, {r32}, {table.latin_offset}}};\n\n')
            out.ph(f'extern const range_table {name};\n')
        else:
            out.pt(f'const range_table {name} = {{{r16}, {r32}, {table.latin_offset}}};\n\n')

    @classmethod
    def _write_map(cls, out: _CppWriter, map_name: str, comment: str, tables: Iterable[str]):
        out.pt(f'// {comment}\n')
        out.pt(f'extern const map<const char*, range_table> {map_name} = {{\n')
        out.ph(f'extern const map<const char*, range_table> {map_name};\n')
        for name in sorted(tables):
            out.pt(f'\t{{{_quote(name)}, {name}}},\n')
        out.pt('};\n\n')

    @classmethod
    def log_sizes(cls, tables: GeneratedTables):
        counter = tables.counter
        log.info(f'// Range entries: {counter.r16} 16-bit, {counter.r32} 32-bit, {counter.total} total.')
        log.info(
            f'// Range bytes: {counter.r16_bytes} 16-bit, {counter.r32_bytes} 32-bit, {counter.total_bytes} total.'
        )
        pairs = len(tables.orbits)
        log.info(f'// Fold orbit bytes: {pairs} pairs, {pairs * 2 * 2} bytes')


def format_case_range(case_range: CaseDeltaRange) -> str:
    lo, hi, deltas = case_range
    if deltas is UPPER_LOWER:
        return f'\t{{0x{lo:04X}, 0x{hi:04X}, {{upper_lower, upper_lower, upper_lower}}}},\n'
    return f'\t{{0x{lo:04X}, 0x{hi:04X}, {{{deltas[0]}, {deltas[1]}, {deltas[2]}}}}},\n'


# endregion

# region YAML


def dump_yaml(tables: GeneratedTables) -> str:
    return yaml_dump(tables, indent_nested_lists=True)


@emitter('yaml')
class YamlTableEmitter:
    def __init__(self, out_dir: PathLike = '.'):
        self.out_dir = Path(out_dir).expanduser()

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> YamlTableEmitter:
        return cls(config.output.out_dir)

    def emit(self, tables: GeneratedTables) -> list[Path]:
        self.out_dir.mkdir(parents=True, exist_ok=True)
        path = self.out_dir.joinpath(YAML_TABLES)
        log.info(f'Writing {path.as_posix()}')
        path.write_text(dump_yaml(tables) + '\n', encoding='utf-8', newline='\n')
        CppTableEmitter.log_sizes(tables)
        return [path]


# endregion
