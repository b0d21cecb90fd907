"""
Parsers for the line-based Unicode Character Database files.

UnicodeData.txt has form::

    0037;DIGIT SEVEN;Nd;0;EN;;7;7;7;N;;;;;
    007A;LATIN SMALL LETTER Z;Ll;0;L;;;;;N;;;005A;;005A

CaseFolding.txt has form::

    0041; C; 0061; # LATIN CAPITAL LETTER A

Scripts.txt and PropList.txt have form::

    A673          ; Cyrillic # Po       SLAVONIC ASTERISK
    A67C..A67D    ; Cyrillic # Mn   [2] COMBINING CYRILLIC KAVYKA..COMBINING CYRILLIC PAYEROK

See http://www.unicode.org/reports/tr44/ for a full explanation of the fields.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from enum import Enum, IntEnum
from typing import Iterable

from ..core.exceptions import MalformedInputError, DuplicateCodePointError
from ..unicode.chars import CharacterTable
from ..unicode.constants import MAX_CHAR

__all__ = ['Field', 'parse_hex', 'parse_unicode_data', 'parse_case_folding', 'parse_ranges', 'FOLD_STATUSES']
log = logging.getLogger(__name__)

FIELD_COUNT = 15
FOLD_STATUSES = frozenset(('C', 'S'))  # Only 'common' and 'simple' foldings are relevant
SCRIPT_LINE_MATCH = re.compile(r'^([0-9A-F]+)(\.\.[0-9A-F]+)? *; ([A-Za-z_]+)$').match
HEX_FULLMATCH = re.compile(r'[0-9A-Fa-f]+').fullmatch


def parse_hex(value: str) -> int:
    """Parse a bare hex field; int(value, 16) alone would accept values like ``0x41`` or ``+41``"""
    if not HEX_FULLMATCH(value):
        raise ValueError(f'invalid hex value: {value!r}')
    return int(value, 16)


class Field(IntEnum):
    CODE_POINT = 0
    NAME = 1
    GENERAL_CATEGORY = 2
    CANONICAL_COMBINING_CLASS = 3
    BIDI_CLASS = 4
    DECOMPOSITION_TYPE_AND_MAPPING = 5
    NUMERIC_TYPE = 6
    NUMERIC_DIGIT = 7  # If a decimal digit
    NUMERIC_VALUE = 8  # Includes non-decimal, e.g. U+2155=1/5
    BIDI_MIRRORED = 9
    UNICODE_1_NAME = 10
    ISO_COMMENT = 11
    SIMPLE_UPPERCASE_MAPPING = 12
    SIMPLE_LOWERCASE_MAPPING = 13
    SIMPLE_TITLECASE_MAPPING = 14


class _RangeState(Enum):
    """Some ranges in UnicodeData.txt are marked with a pair of ``<..., First>`` / ``<..., Last>`` lines"""
    NORMAL = 'normal'
    FIRST = 'first'
    LAST = 'last'


class _UnicodeDataParser:
    def __init__(self, chars: CharacterTable, source: str):
        self.chars = chars
        self.source = source
        self.line_no = 0
        self.line = None

    def error(self, message: str) -> MalformedInputError:
        return MalformedInputError(message, self.source, self.line_no, self.line)

    def parse(self, lines: Iterable[str]):
        first = 0
        for self.line_no, line in enumerate(lines, 1):
            self.line = line = line.rstrip('\r\n')
            if not line:
                continue

            point, state = self.parse_line(line)
            if state == _RangeState.NORMAL:
                if first:
                    raise self.error(f'bad state normal at U+{point:04X}')
            elif state == _RangeState.FIRST:
                if first:
                    raise self.error(f'bad state first at U+{point:04X}')
                first = point
            else:
                if not first:
                    raise self.error(f'bad state last at U+{point:04X}')
                self._fill_range(first, point)
                first = 0

        if first:
            raise self.error(f'range starting at U+{first:04X} has no matching last entry')

    def parse_line(self, line: str) -> tuple[int, _RangeState]:
        fields = line.split(';')
        if len(fields) != FIELD_COUNT:
            raise self.error(f'{len(fields)} fields (expected {FIELD_COUNT})')
        point = self.hex_value(fields[Field.CODE_POINT], 'code point')
        if point == 0 or point > MAX_CHAR:  # 0 is not interesting, and is used as "unset"
            return point, _RangeState.NORMAL

        category = fields[Field.GENERAL_CATEGORY]
        if category == 'Nd':
            try:
                int(fields[Field.NUMERIC_VALUE])
            except ValueError:
                raise self.error(f'U+{point:04X}: bad numeric field: {fields[Field.NUMERIC_VALUE]!r}') from None

        upper, lower, title = (
            self.letter_value(fields[field], name)
            for field, name in (
                (Field.SIMPLE_UPPERCASE_MAPPING, 'U'),
                (Field.SIMPLE_LOWERCASE_MAPPING, 'L'),
                (Field.SIMPLE_TITLECASE_MAPPING, 'T'),
            )
        )
        # Letters map to themselves in their own case
        if category == 'Lu':
            upper = point
        elif category == 'Ll':
            lower = point
        elif category == 'Lt':
            title = point

        try:
            self.chars.define(point, category, upper, lower, title)
        except DuplicateCodePointError as e:
            raise DuplicateCodePointError(point, self.source, self.line_no, line) from e

        name = fields[Field.NAME]
        if ', First>' in name:
            return point, _RangeState.FIRST
        elif ', Last>' in name:
            return point, _RangeState.LAST
        return point, _RangeState.NORMAL

    def hex_value(self, value: str, name: str) -> int:
        try:
            return parse_hex(value)
        except ValueError:
            raise self.error(f'bad {name}: {value!r}') from None

    def letter_value(self, value: str, case: str) -> int:
        if not value:
            return 0
        return self.hex_value(value, f'letter({case})')

    def _fill_range(self, first: int, last: int):
        try:
            self.chars.fill_range(first, last)
        except DuplicateCodePointError as e:
            raise DuplicateCodePointError(e.code_point, self.source, self.line_no, self.line) from e


def parse_unicode_data(
    lines: Iterable[str], chars: CharacterTable = None, source: str = 'UnicodeData.txt'
) -> CharacterTable:
    """
    :param lines: The lines of UnicodeData.txt
    :param chars: The CharacterTable to populate (default: a new table)
    :param source: The name to use for the data source in error messages
    :return: The populated CharacterTable
    """
    if chars is None:
        chars = CharacterTable()
    _UnicodeDataParser(chars, source).parse(lines)
    log.debug(f'Loaded {chars!r} from {source}')
    return chars


def parse_case_folding(lines: Iterable[str], chars: CharacterTable, source: str = 'CaseFolding.txt') -> CharacterTable:
    """
    Record the simple case folding target of each code point with a common or simple folding.

    :param lines: The lines of CaseFolding.txt
    :param chars: The CharacterTable to annotate
    :param source: The name to use for the data source in error messages
    :return: The annotated CharacterTable
    """
    for line_no, line in enumerate(lines, 1):
        line = line.rstrip('\r\n')
        if not line.strip() or line.startswith('#'):
            continue

        fields = line.split('; ')
        if len(fields) != 4:
            raise MalformedInputError(f'{len(fields)} fields (expected 4)', source, line_no, line)
        if fields[1] not in FOLD_STATUSES:
            continue
        try:
            point, target = parse_hex(fields[0]), parse_hex(fields[2])
        except ValueError as e:
            raise MalformedInputError(str(e), source, line_no, line) from None
        if point > MAX_CHAR or target > MAX_CHAR:
            raise MalformedInputError('code point out of range', source, line_no, line)
        chars.set_fold(point, target)

    return chars


def parse_ranges(lines: Iterable[str], source: str = 'Scripts.txt') -> dict[str, list[tuple[int, int]]]:
    """
    Parse a file with the same format as Scripts.txt, such as PropList.txt.

    :param lines: The lines of the file
    :param source: The name to use for the data source in error messages
    :return: Mapping of {name: [(lo, hi), ...]} with inclusive ranges in file order
    """
    ranges = defaultdict(list)
    for line_no, raw_line in enumerate(lines, 1):
        line = raw_line.partition('#')[0].strip()
        if not line:
            continue

        fields = line.split(';')
        if len(fields) != 2:
            raise MalformedInputError(f'{len(fields)} fields (expected 2)', source, line_no, raw_line)
        if not (m := SCRIPT_LINE_MATCH(line)):
            raise MalformedInputError('unexpected range format', source, line_no, raw_line)

        lo = int(m.group(1), 16)
        hi = int(m.group(2)[2:], 16) if m.group(2) else lo
        if hi < lo or hi > MAX_CHAR:
            raise MalformedInputError(f'invalid range U+{lo:04X}..U+{hi:04X}', source, line_no, raw_line)
        ranges[m.group(3)].append((lo, hi))

    return dict(ranges)
