#!/usr/bin/env python

import logging
import sys
from pathlib import Path

sys.path.append(Path(__file__).parents[1].as_posix())
from ucd_tools.core.exceptions import MalformedInputError, DuplicateCodePointError
from ucd_tools.test_common import TestCaseBase, main, unicode_data_line, SAMPLE_SCRIPTS, SAMPLE_PROPS
from ucd_tools.ucd.parsing import parse_unicode_data, parse_case_folding, parse_ranges
from ucd_tools.unicode.chars import CharacterTable

log = logging.getLogger(__name__)


class UnicodeDataTest(TestCaseBase):
    def test_letters_map_to_themselves(self):
        chars = parse_unicode_data([
            '0041;LATIN CAPITAL LETTER A;Lu;0;L;;;;;N;;;;0061;',
            '0061;LATIN SMALL LETTER A;Ll;0;L;;;;;N;;;0041;;0041',
            '01C5;LATIN CAPITAL LETTER D WITH SMALL LETTER Z WITH CARON;Lt;0;L;<compat> 0044 017E;;;;N;;;01C4;01C6;',
        ])
        self.assertEqual((0x41, 'Lu', 0x41, 0x61, 0), chars[0x41][:5])
        self.assertEqual((0x61, 'Ll', 0x41, 0x61, 0x41), chars[0x61][:5])
        self.assertEqual((0x1C5, 'Lt', 0x1C4, 0x1C6, 0x1C5), chars[0x1C5][:5])

    def test_unmapped_characters(self):
        chars = parse_unicode_data(['0037;DIGIT SEVEN;Nd;0;EN;;7;7;7;N;;;;;'])
        self.assertIn(0x37, chars)
        self.assertEqual('Nd', chars[0x37].category)
        self.assertFalse(chars.mapped[0x37])
        self.assertNotIn(0x38, chars)
        self.assertFalse(chars[0x38].defined)

    def test_null_is_ignored(self):
        chars = parse_unicode_data([unicode_data_line(0, 'Cc', name='<control>'), unicode_data_line(1, 'Cc')])
        self.assertNotIn(0, chars)
        self.assertIn(1, chars)
        self.assertEqual('', chars.categories[0])

    def test_blank_lines_skipped(self):
        chars = parse_unicode_data(['', unicode_data_line(0x20, 'Zs'), ''])
        self.assertEqual([0x20], list(chars.iter_defined()))

    def test_first_last_range(self):
        chars = parse_unicode_data([
            unicode_data_line(0x3400, 'Lo', name='<CJK Ideograph Extension A, First>'),
            unicode_data_line(0x4DB5, 'Lo', name='<CJK Ideograph Extension A, Last>'),
            unicode_data_line(0x4DC0, 'So'),
        ])
        self.assertEqual(0x4DB5 - 0x3400 + 2, chars.defined.count())
        for code_point in (0x3400, 0x3401, 0x4000, 0x4DB5):
            self.assertEqual('Lo', chars[code_point].category)
        self.assertNotIn(0x4DB6, chars)

    def test_wrong_field_count(self):
        with self.assertRaisesRegex(MalformedInputError, r'14 fields \(expected 15\)') as ctx:
            parse_unicode_data([unicode_data_line(0x20, 'Zs'), '0041;A;Lu;0;L;;;;;N;;;;0061'], source='Test.txt')
        self.assertEqual(2, ctx.exception.line_no)
        self.assertIn('Test.txt:2', str(ctx.exception))

    def test_duplicate_code_point(self):
        lines = [unicode_data_line(0x41, 'Lu'), unicode_data_line(0x42, 'Lu'), unicode_data_line(0x41, 'Lu')]
        with self.assertRaises(DuplicateCodePointError) as ctx:
            parse_unicode_data(lines)
        self.assertEqual(0x41, ctx.exception.code_point)
        self.assertEqual(3, ctx.exception.line_no)
        self.assertIn('point U+0041 reused', str(ctx.exception))

    def test_range_overlapping_defined_point(self):
        lines = [
            unicode_data_line(0x3401, 'Lo'),
            unicode_data_line(0x3400, 'Lo', name='<CJK Ideograph Extension A, First>'),
            unicode_data_line(0x4DB5, 'Lo', name='<CJK Ideograph Extension A, Last>'),
        ]
        with self.assertRaises(DuplicateCodePointError) as ctx:
            parse_unicode_data(lines)
        self.assertEqual(0x3401, ctx.exception.code_point)

    def test_bad_range_states(self):
        first = unicode_data_line(0x3400, 'Lo', name='<CJK Ideograph Extension A, First>')
        last = unicode_data_line(0x4DB5, 'Lo', name='<CJK Ideograph Extension A, Last>')
        cases = {
            'bad state normal': [first, unicode_data_line(0x3401, 'Lo'), last],
            'bad state first': [first, unicode_data_line(0x5000, 'Lo', name='<Other, First>')],
            'bad state last': [last],
            'no matching last': [first],
        }
        for message, lines in cases.items():
            with self.subTest(message=message), self.assertRaisesRegex(MalformedInputError, message):
                parse_unicode_data(lines)

    def test_bad_hex_values(self):
        with self.assertRaisesRegex(MalformedInputError, 'bad code point'):
            parse_unicode_data(['XYZ;TEST;Lu;0;L;;;;;N;;;;;'])
        with self.assertRaisesRegex(MalformedInputError, r'bad letter\(L\)'):
            parse_unicode_data(['0041;TEST;Lu;0;L;;;;;N;;;;00GG;'])

    def test_hex_fields_must_be_bare_digits(self):
        for value in ('0x41', '+41', '4_1', ' 0041', '0041 ', '-41', ''):
            with self.subTest(value=value), self.assertRaisesRegex(MalformedInputError, 'bad code point'):
                parse_unicode_data([f'{value};TEST;Lu;0;L;;;;;N;;;;;'])
        with self.assertRaisesRegex(MalformedInputError, r'bad letter\(U\)'):
            parse_unicode_data(['0061;TEST;Ll;0;L;;;;;N;;;0x41;;'])
        chars = parse_unicode_data(['00e9;TEST;Ll;0;L;;;;;N;;;00c9;;00C9'])
        self.assertEqual(0xC9, chars[0xE9].upper)

    def test_bad_numeric_value(self):
        with self.assertRaisesRegex(MalformedInputError, 'bad numeric field'):
            parse_unicode_data([unicode_data_line(0x30, 'Nd', numeric='zero')])
        chars = parse_unicode_data([unicode_data_line(0x2155, 'No', numeric='1/5')])
        self.assertEqual('No', chars[0x2155].category)

    def test_populates_existing_table(self):
        chars = CharacterTable()
        self.assertIs(chars, parse_unicode_data([unicode_data_line(0x20, 'Zs')], chars))


class CaseFoldingTest(TestCaseBase):
    def setUp(self):
        super().setUp()
        self.chars = parse_unicode_data([unicode_data_line(0x41, 'Lu', lower=0x61), unicode_data_line(0x1E9E, 'Lu')])

    def test_common_and_simple_statuses(self):
        parse_case_folding([
            '# CaseFolding-6.2.0.txt',
            '',
            '0041; C; 0061; # LATIN CAPITAL LETTER A',
            '1E9E; F; 0073 0073; # LATIN CAPITAL LETTER SHARP S',
            '1E9E; S; 00DF; # LATIN CAPITAL LETTER SHARP S',
            '0130; T; 0069; # LATIN CAPITAL LETTER I WITH DOT ABOVE',
        ], self.chars)
        self.assertEqual(0x61, self.chars[0x41].fold)
        self.assertEqual(0xDF, self.chars.fold[0x1E9E])
        self.assertEqual(0, self.chars.fold[0x130])
        self.assertEqual([0x41, 0x1E9E], list(self.chars.iter_folded()))

    def test_wrong_field_count(self):
        with self.assertRaisesRegex(MalformedInputError, r'3 fields \(expected 4\)') as ctx:
            parse_case_folding(['0041; C; 0061'], self.chars)
        self.assertEqual(1, ctx.exception.line_no)

    def test_bad_hex(self):
        with self.assertRaises(MalformedInputError):
            parse_case_folding(['0041; C; 00ZZ; # BAD'], self.chars)

    def test_hex_fields_must_be_bare_digits(self):
        for line in ('0x41; C; 0061; # BAD', '0041; C; +61; # BAD', '0041; C; 00_61; # BAD'):
            with self.subTest(line=line), self.assertRaisesRegex(MalformedInputError, 'invalid hex value'):
                parse_case_folding([line], self.chars)

    def test_out_of_range(self):
        with self.assertRaisesRegex(MalformedInputError, 'out of range'):
            parse_case_folding(['110000; C; 0061; # BAD'], self.chars)


class RangeFileTest(TestCaseBase):
    def test_scripts(self):
        scripts = parse_ranges(SAMPLE_SCRIPTS.splitlines())
        self.assertEqual(['Common', 'Latin', 'Han', 'Deseret'], list(scripts))
        self.assertEqual([(0x20, 0x20), (0x30, 0x39), (0x212A, 0x212A)], scripts['Common'])
        self.assertEqual([(0x10400, 0x1044F)], scripts['Deseret'])

    def test_properties(self):
        props = parse_ranges(SAMPLE_PROPS.splitlines(), 'PropList.txt')
        self.assertEqual({'White_Space', 'ASCII_Hex_Digit'}, set(props))
        self.assertEqual([(0x09, 0x0D), (0x20, 0x20)], props['White_Space'])

    def test_wrong_field_count(self):
        with self.assertRaisesRegex(MalformedInputError, r'3 fields \(expected 2\)'):
            parse_ranges(['0041 ; Latin ; Extra # comment'])

    def test_unexpected_format(self):
        for line in ('0041-005A ; Latin', '0041..005A ; Latin Extended', 'zz ; Latin'):
            with self.subTest(line=line), self.assertRaisesRegex(MalformedInputError, 'unexpected range format'):
                parse_ranges([line])

    def test_invalid_range(self):
        with self.assertRaisesRegex(MalformedInputError, 'invalid range'):
            parse_ranges(['005A..0041 ; Latin'])
        with self.assertRaisesRegex(MalformedInputError, 'invalid range'):
            parse_ranges(['10FFFF..110000 ; Latin'])


if __name__ == '__main__':
    main()
