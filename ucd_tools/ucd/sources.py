"""
Locating and retrieving UCD files, either from the web or from a local directory.
"""

from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path
from posixpath import basename
from typing import Collection, Union

from ..core.exceptions import DataSourceError
from ..core.futures import as_future
from ..http import TextClient

__all__ = ['UcdSource', 'DEFAULT_URL', 'UNICODE_DATA', 'CASE_FOLDING', 'SCRIPTS', 'PROP_LIST']
log = logging.getLogger(__name__)

DEFAULT_URL = 'http://www.unicode.org/Public/6.2.0/ucd/'
UNICODE_DATA = 'UnicodeData.txt'
CASE_FOLDING = 'CaseFolding.txt'
SCRIPTS = 'Scripts.txt'
PROP_LIST = 'PropList.txt'


class UcdSource:
    """
    :param url: URL of the Unicode database directory
    :param data_url: Full URL for UnicodeData.txt (default: ``{url}/UnicodeData.txt``)
    :param casefolding_url: Full URL for CaseFolding.txt (default: ``{url}/CaseFolding.txt``)
    :param local: If True, read each file from ``local_dir`` using the base name of its URL instead of requesting it
    :param local_dir: Directory containing local copies of the data files (default: the current directory)
    :param client: The :class:`TextClient` to use for remote files
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        data_url: str = None,
        casefolding_url: str = None,
        *,
        local: bool = False,
        local_dir: Union[str, Path] = None,
        client: TextClient = None,
    ):
        self.url = url if url.endswith('/') else url + '/'
        self.data_url = data_url or self.url + UNICODE_DATA
        self.casefolding_url = casefolding_url or self.url + CASE_FOLDING
        self.local = local
        self.local_dir = Path(local_dir or '.').expanduser()
        self._client = client

    def __repr__(self) -> str:
        location = self.local_dir.as_posix() if self.local else self.url
        return f'<{self.__class__.__name__}[{location}]>'

    @cached_property
    def client(self) -> TextClient:
        return self._client or TextClient()

    @cached_property
    def version(self) -> str:
        """The Unicode version of the tables, based on the first numeric component of the directory URL"""
        for part in self.url.split('/'):
            if part and part[0].isdigit():
                return part
        raise DataSourceError(f'Unable to determine the Unicode version from url={self.url!r}')

    def url_for(self, name: str) -> str:
        if name == UNICODE_DATA:
            return self.data_url
        elif name == CASE_FOLDING:
            return self.casefolding_url
        return self.url + name

    def read_lines(self, name: str) -> list[str]:
        """
        :param name: The name of a UCD file, such as ``UnicodeData.txt``
        :return: The lines in the given file
        """
        url = self.url_for(name)
        if not self.local:
            log.info(f'Retrieving {url}')
            return self.client.get_text(url).splitlines()

        path = self.local_dir.joinpath(basename(url))
        log.debug(f'Reading {path.as_posix()}')
        try:
            return path.read_text('utf-8').splitlines()
        except OSError as e:
            raise DataSourceError(f'Unable to read {path.as_posix()}: {e}') from e

    def fetch_all(self, names: Collection[str]) -> dict[str, list[str]]:
        """
        Retrieve the given files in parallel.

        :param names: The names of the UCD files to retrieve
        :return: Mapping of {name: lines}
        """
        futures = {name: as_future(self.read_lines, (name,), daemon=True) for name in names}
        return {name: future.result() for name, future in futures.items()}
