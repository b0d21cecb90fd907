#!/usr/bin/env python

import logging
import sys
from pathlib import Path

from cli_command_parser import Command, ParamGroup, Option, Flag, TriFlag, Counter, main, inputs

from ucd_tools.__version__ import __author_email__, __version__  # noqa
from ucd_tools.config import OUTPUT_FORMATS

log = logging.getLogger(__name__)


class MakeTables(Command, description='Unicode table generator'):
    config: Path = Option(
        '-c', type=inputs.Path(type='file', exists=True), help='A YAML file containing generator configuration'
    )

    with ParamGroup(description='Data Source Options'):
        url = Option('-u', help='URL of Unicode database directory (default: http://www.unicode.org/Public/6.2.0/ucd/)')
        data = Option(help='Full URL for UnicodeData.txt (default: {url}/UnicodeData.txt)')
        casefolding = Option(help='Full URL for CaseFolding.txt (default: {url}/CaseFolding.txt)')
        local = Flag('-L', help='Data files have been copied to a local directory')
        local_dir: Path = Option(
            '-d', type=inputs.Path(type='dir', exists=True), help='Directory containing local data files (default: .)'
        )

    with ParamGroup(description='Table Options'):
        tables = Option('-t', help='Comma-separated list of which category tables to generate (default: all)')
        scripts = Option('-s', help='Comma-separated list of which script tables to generate (default: all)')
        props = Option('-p', help='Comma-separated list of which property tables to generate (default: all)')
        cases = TriFlag(help='Whether case tables should be generated (default: True)')
        test = Flag('-T', help='Compare tables built from the data with the reference instead of writing them')

    with ParamGroup(description='Output Options'):
        out: Path = Option(
            '-o', type=inputs.Path(type='dir'), help='Destination directory for output files (default: .)'
        )
        format = Option('-f', choices=OUTPUT_FORMATS, help='Output format (default: cpp)')
        namespace = Option('-n', help='C++ namespace for generated tables (default: zbs::unicode)')

    verbose = Counter('-v', help='Increase logging verbosity (can specify multiple times)')

    def _init_command_(self):
        from ucd_tools.logging import init_logging

        init_logging(self.verbose, log_path=None)

    def main(self):
        from ucd_tools.core.exceptions import UcdToolsError
        from ucd_tools.logging import VERBOSE

        config = self.build_config()
        try:
            self.generate(config)
        except UcdToolsError as e:
            log.log(VERBOSE, 'Table generation failed:', exc_info=True)
            log.error(e)
            sys.exit(1)

    def generate(self, config):
        from ucd_tools.tables.emit import get_emitter
        from ucd_tools.tables.generator import TableGenerator

        generator = TableGenerator(config)
        if config.test:
            if mismatches := generator.verify():
                log.error(f'Found {len(mismatches):,d} mismatches between the generated tables and the reference')
                sys.exit(1)
            log.info('All tables match the reference')
        else:
            get_emitter(config).emit(generator.build())

    def build_config(self):
        from ucd_tools.config import GeneratorConfig

        overrides = {
            'tables': self.tables,
            'scripts': self.scripts,
            'props': self.props,
            'cases': self.cases,
            'test': self.test or None,
        }
        source = {
            'url': self.url,
            'data_url': self.data,
            'casefolding_url': self.casefolding,
            'local': self.local or None,
            'local_dir': self.local_dir,
        }
        output = {'out_dir': self.out, 'format': self.format, 'namespace': self.namespace}
        overrides = {key: val for key, val in overrides.items() if val is not None}
        if source := {key: val for key, val in source.items() if val is not None}:
            overrides['source'] = source
        if output := {key: val for key, val in output.items() if val is not None}:
            overrides['output'] = output

        if self.config:
            return GeneratorConfig.load(self.config, **overrides)
        return GeneratorConfig(overrides)


if __name__ == '__main__':
    main()
