"""
Configuration for table generation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import yaml

from .core.config import ConfigItem, ConfigSection, NestedSection, InvalidConfigError
from .ucd.sources import DEFAULT_URL, UcdSource

__all__ = ['GeneratorConfig', 'SourceConfig', 'OutputConfig', 'OUTPUT_FORMATS']
log = logging.getLogger(__name__)

OUTPUT_FORMATS = ('cpp', 'yaml')


def _output_format(value: str) -> str:
    if value not in OUTPUT_FORMATS:
        raise ValueError(f'expected one of: {", ".join(OUTPUT_FORMATS)}')
    return value


def _bool(value: Union[str, bool]) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


class SourceConfig(ConfigSection):
    url: str = ConfigItem(DEFAULT_URL, type=str)
    data_url: str = ConfigItem(None, type=str)
    casefolding_url: str = ConfigItem(None, type=str)
    local: bool = ConfigItem(False, type=_bool)
    local_dir: Path = ConfigItem(None, type=lambda p: Path(p).expanduser())

    def source(self) -> UcdSource:
        return UcdSource(
            self.url, self.data_url, self.casefolding_url, local=self.local, local_dir=self.local_dir
        )


class OutputConfig(ConfigSection):
    out_dir: Path = ConfigItem(Path('.'), type=lambda p: Path(p).expanduser())
    format: str = ConfigItem('cpp', type=_output_format)
    namespace: str = ConfigItem('zbs::unicode', type=str)
    header: str = ConfigItem('zbs/unicode.hh', type=str)


class GeneratorConfig(ConfigSection):
    """
    Which tables should be generated, where the data should come from, and how the results should be written.

    The ``tables``, ``scripts``, and ``props`` values may be ``all``, an empty string to skip that kind of table, or a
    comma-separated list of names.
    """
    tables: str = ConfigItem('all', type=str)
    scripts: str = ConfigItem('all', type=str)
    props: str = ConfigItem('all', type=str)
    cases: bool = ConfigItem(True, type=_bool)
    test: bool = ConfigItem(False, type=_bool)
    source: SourceConfig = NestedSection(SourceConfig)
    output: OutputConfig = NestedSection(OutputConfig)

    @classmethod
    def load(cls, path: Union[str, Path], **overrides) -> GeneratorConfig:
        """
        :param path: Path to a YAML file containing a mapping of config values
        :param overrides: Values that should take precedence over those in the file
        :return: The loaded config
        """
        path = Path(path).expanduser()
        log.debug(f'Loading config from {path.as_posix()}')
        with path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise InvalidConfigError(f'Invalid configuration in {path.as_posix()} - expected a mapping')
        config = cls(data)
        config.update(overrides)
        return config
