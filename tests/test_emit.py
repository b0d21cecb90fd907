#!/usr/bin/env python

import logging
import sys
from pathlib import Path
from tempfile import TemporaryDirectory

import yaml

sys.path.append(Path(__file__).parents[1].as_posix())
from ucd_tools.config import GeneratorConfig
from ucd_tools.tables.emit import CppTableEmitter, YamlTableEmitter, dump_yaml, get_emitter, quote_rune
from ucd_tools.tables.emit import format_case_range, PUBLIC_TABLES, PRIVATE_TABLES, TABLE_DEFS
from ucd_tools.tables.generator import TableGenerator
from ucd_tools.test_common import TestCaseBase, main, sample_config
from ucd_tools.unicode.cases import CaseDeltaRange, UPPER_LOWER

log = logging.getLogger(__name__)


def build_tables(**kwargs):
    with TemporaryDirectory() as tmp_dir:
        return TableGenerator(sample_config(tmp_dir, **kwargs)).build()


class CppEmitterTest(TestCaseBase):
    @classmethod
    def setUpClass(cls):
        cls.tables = build_tables()
        cls.files = CppTableEmitter().render(cls.tables)

    def test_file_names(self):
        self.assertEqual([PUBLIC_TABLES, PRIVATE_TABLES, TABLE_DEFS], list(self.files))

    def test_header_block(self):
        public = self.files[PUBLIC_TABLES]
        expected = (
            '// Generated by running make_tables.py\n// DO NOT EDIT\n\n#include "zbs/unicode.hh"\n\n'
            'namespace zbs {\nnamespace unicode {\n\n'
            '// Version is the Unicode edition from which the tables are derived.\n'
            'extern const char version[] = "6.2.0";\n\n'
        )
        self.assertTrue(public.startswith(expected))
        self.assertTrue(public.endswith('}} // namespace zbs::unicode'))
        self.assertTrue(self.files[TABLE_DEFS].startswith('// Generated by running make_tables.py\n// DO NOT EDIT\n\n'))
        self.assertIn('extern const char version[];\n', self.files[TABLE_DEFS])

    def test_category_table(self):
        public = self.files[PUBLIC_TABLES]
        expected = (
            'const range16 Lu_r16[] = {\n'
            '\t{0x0041, 0x005a, 1},\n'
            '\t{0x212a, 0x212a, 1},\n'
            '};\n'
            'const range32 Lu_r32[] = {\n'
            '\t{0x10400, 0x10400, 1},\n'
            '};\n'
            'extern const range_table Lu = {Lu_r16, Lu_r32, 1};\n\n'
            'extern const range_table upper = Lu;\n\n'
        )
        self.assertIn(expected, public)
        self.assertIn('extern const range_table Lu;\nextern const range_table upper;\n', self.files[TABLE_DEFS])

    def test_empty_buckets(self):
        public = self.files[PUBLIC_TABLES]
        self.assertIn('const range16 M_r16[] = {\n};\nconst range32 M_r32[] = {};\n', public)
        self.assertIn('extern const range_table M = {{}, {}, 0};\n', public)
        self.assertIn('const range32 Nd_r32[] = {};\nextern const range_table Nd = {Nd_r16, {}, 1};\n', public)

    def test_maps(self):
        public = self.files[PUBLIC_TABLES]
        self.assertIn(
            '// Categories is the set of Unicode category tables.\n'
            'extern const map<const char*, range_table> categories = {\n\t{"C", C},\n\t{"Cc", Cc},\n',
            public,
        )
        self.assertIn('extern const map<const char*, range_table> scripts = {\n\t{"Common", Common},\n', public)
        self.assertIn('\t{"ASCII_Hex_Digit", ASCII_Hex_Digit},\n\t{"White_Space", White_Space},\n};\n', public)
        for name in ('categories', 'scripts', 'properties', 'fold_category', 'fold_script'):
            self.assertIn(f'extern const map<const char*, range_table> {name};\n', self.files[TABLE_DEFS])

    def test_script_headers(self):
        public = self.files[PUBLIC_TABLES]
        url = self.tables.url
        for flag in ('scripts', 'props'):
            expected = f'// Generated by running\n//\tmake_tables.py --{flag}=all --url={url}\n// DO NOT EDIT\n'
            self.assertIn(expected, public)

    def test_case_ranges(self):
        public = self.files[PUBLIC_TABLES]
        self.assertIn(
            'const case_range _case_ranges[] = {\n'
            '\t{0x0041, 0x005A, {0, 32, 0}},\n'
            '\t{0x0061, 0x007A, {-32, 0, -32}},\n'
            '\t{0x212A, 0x212A, {0, -8383, 0}},\n'
            '\t{0x10400, 0x10400, {0, 40, 0}},\n'
            '\t{0x10428, 0x10428, {-40, 0, -40}},\n'
            '};\n'
            'extern const slice<const case_range> case_ranges(_case_ranges);\n',
            public,
        )

    def test_private_tables(self):
        private = self.files[PRIVATE_TABLES]
        self.assertTrue(private.startswith('// Generated by running make_tables.py\n// DO NOT EDIT\n\n'))
        self.assertIn('const uint8 latin_properties[max_latin1+1] = {\n\tpC, // (0x00) \'\\x00\'\n', private)
        self.assertIn("\tpZ | pp, // (0x20) ' '\n", private)
        self.assertIn("\tpLu | pp, // (0x41) 'A'\n", private)
        self.assertIn(
            'const fold_pair _case_orbit[] = {\n\t{0x004B, 0x006B},\n\t{0x006B, 0x212A},\n\t{0x212A, 0x004B},\n};\n',
            private,
        )
        self.assertEqual(0x100, private.count(' // (0x'))

    def test_fold_tables(self):
        public = self.files[PUBLIC_TABLES]
        self.assertIn(
            'const range16 foldCommon_r16[] = {\n\t{0x004b, 0x006b, 32},\n};\nconst range32 foldCommon_r32[] = {};\n'
            'const range_table foldCommon = {foldCommon_r16, {}, 1};\n',
            public,
        )
        self.assertNotIn('extern const range_table foldCommon', public)
        self.assertIn('extern const map<const char*, range_table> fold_category = {\n\t{"Ll", foldLl},\n', public)
        self.assertIn('extern const map<const char*, range_table> fold_script = {\n\t{"Common", foldCommon},\n', public)

    def test_footer(self):
        public = self.files[PUBLIC_TABLES]
        self.assertIn('const range_table _graphic_ranges[] = {\n\tL, M, N, P, S, Zs,\n};\n', public)
        self.assertIn('const range_table _print_ranges[] = {\n\tL, M, N, P, S,\n};\n', public)
        self.assertIn('extern const slice<const range_table> print_ranges;\n', self.files[TABLE_DEFS])

    def test_partial_selection(self):
        tables = build_tables(tables='Lu', scripts='', props='', cases=False)
        files = CppTableEmitter(namespace='a::b::c').render(tables)
        public = files[PUBLIC_TABLES]
        self.assertIn('namespace a {\nnamespace b {\nnamespace c {\n\n', public)
        self.assertTrue(public.endswith('}}} // namespace a::b::c'))
        self.assertIn('extern const range_table Lu = ', public)
        self.assertNotIn('extern const range_table Ll = ', public)
        self.assertNotIn('categories = {', public)
        self.assertNotIn('--scripts=', public)
        self.assertNotIn('--props=', public)
        self.assertNotIn('case_ranges', public)
        self.assertIn('fold_script = {', public)

    def test_nothing_selected(self):
        files = CppTableEmitter().render(build_tables(tables='', scripts='', props=''))
        self.assertIn('extern const char version[] = "6.2.0";\n', files[PUBLIC_TABLES])
        self.assertNotIn('range16 Lu_r16', files[PUBLIC_TABLES])

    def test_emit(self):
        with TemporaryDirectory() as tmp_dir:
            out_dir = Path(tmp_dir).joinpath('out')
            emitter = get_emitter(GeneratorConfig(output={'out_dir': out_dir, 'namespace': 'x'}))
            self.assertIsInstance(emitter, CppTableEmitter)
            with self.assertLogs('ucd_tools.tables.emit', level='INFO') as captured:
                paths = emitter.emit(self.tables)

            self.assertEqual([out_dir.joinpath(name) for name in self.files], paths)
            for path in paths:
                self.assertTrue(path.is_file())
            self.assertTrue(paths[0].read_text('utf-8').endswith('} // namespace x'))

        counter = self.tables.counter
        expected = f'// Range entries: {counter.r16} 16-bit, {counter.r32} 32-bit, {counter.total} total.'
        self.assertIn(expected, [record.getMessage() for record in captured.records])
        self.assertIn('// Fold orbit bytes: 3 pairs, 12 bytes', [record.getMessage() for record in captured.records])


class FormatTest(TestCaseBase):
    def test_quote_rune(self):
        cases = {
            0x41: "'A'",
            0x20: "' '",
            0x27: "'\\''",
            0x5C: "'\\\\'",
            0x0A: "'\\n'",
            0x07: "'\\a'",
            0x00: "'\\x00'",
            0x7F: "'\\x7f'",
            0x85: "'\\u0085'",
            0xA0: "'\\u00a0'",
            0xAD: "'\\u00ad'",
            0xE9: "'\u00e9'",
        }
        for code_point, expected in cases.items():
            with self.subTest(code_point=code_point):
                self.assertEqual(expected, quote_rune(code_point))

    def test_format_case_range(self):
        self.assertEqual(
            '\t{0x0100, 0x012F, {upper_lower, upper_lower, upper_lower}},\n',
            format_case_range(CaseDeltaRange(0x100, 0x12F, UPPER_LOWER)),
        )
        micro = CaseDeltaRange(0xB5, 0xB5, (743, 0, 743))
        self.assertEqual('\t{0x00B5, 0x00B5, {743, 0, 743}},\n', format_case_range(micro))


class YamlEmitterTest(TestCaseBase):
    def test_dump(self):
        data = yaml.safe_load(dump_yaml(build_tables(tables='Lu,Nd', scripts='Latin', props='')))
        self.assertEqual('6.2.0', data['version'])
        self.assertEqual(['Lu', 'Nd'], list(data['categories']))
        expected = {'r16': [[0x41, 0x5A, 1], [0x212A, 0x212A, 1]], 'r32': [[0x10400, 0x10400, 1]], 'latin_offset': 1}
        self.assertEqual(expected, data['categories']['Lu'])
        self.assertEqual({'upper': 'Lu', 'digit': 'Nd'}, data['aliases'])
        expected = {'r16': [[0x41, 0x5A, 1], [0x61, 0x7A, 1]], 'r32': [], 'latin_offset': 2}
        self.assertEqual(expected, data['scripts']['Latin'])
        self.assertEqual({}, data['properties'])
        self.assertEqual([0x10428, 0x10428, [-40, 0, -40]], data['case_ranges'][-1])
        self.assertEqual({0x4B: 0x6B, 0x6B: 0x212A, 0x212A: 0x4B}, data['case_orbit'])
        self.assertEqual(['Common', 'Latin'], list(data['fold_script']))
        self.assertEqual(0x100, len(data['latin_properties']))

    def test_upper_lower_serialized(self):
        tables = build_tables(tables='', scripts='', props='')
        tables.case_ranges = [CaseDeltaRange(0x100, 0x12F, UPPER_LOWER)]
        data = yaml.safe_load(dump_yaml(tables))
        self.assertEqual([[0x100, 0x12F, 'UPPER_LOWER']], data['case_ranges'])

    def test_emit(self):
        tables = build_tables(tables='Lu', scripts='', props='')
        with TemporaryDirectory() as tmp_dir:
            emitter = get_emitter(GeneratorConfig(output={'out_dir': tmp_dir, 'format': 'yaml'}))
            self.assertIsInstance(emitter, YamlTableEmitter)
            paths = emitter.emit(tables)
            self.assertEqual([Path(tmp_dir).joinpath('unicode_tables.yaml')], paths)
            content = paths[0].read_text('utf-8')

        self.assertTrue(content.startswith('---\n'))
        self.assertEqual(['Lu'], list(yaml.safe_load(content)['categories']))


if __name__ == '__main__':
    main()
