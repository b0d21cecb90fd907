"""
Exceptions used by the ucd_tools package.

Every problem detected while building tables is fatal: the generated tables are meant to be exactly reproducible
from one authoritative input, so there is no partial-result path.
"""

from __future__ import annotations

import logging
from typing import Iterable

__all__ = [
    'UcdToolsError',
    'MalformedInputError',
    'DuplicateCodePointError',
    'InvariantViolation',
    'UnknownTableError',
    'DataSourceError',
]
log = logging.getLogger(__name__)


class UcdToolsError(Exception):
    """Base exception for errors raised by ucd_tools"""


class MalformedInputError(UcdToolsError):
    """Exception to be raised when a line in a UCD file does not pass validation"""

    def __init__(self, message: str, source: str = None, line_no: int = None, line: str = None):
        self.message = message
        self.source = source
        self.line_no = line_no
        self.line = line
        super().__init__(message)

    def __str__(self) -> str:
        location = self.source or '<input>'
        if self.line_no is not None:
            location = f'{location}:{self.line_no}'
        if self.line is not None:
            return f'{location}: {self.message} (line={self.line[:40]!r})'
        return f'{location}: {self.message}'


class DuplicateCodePointError(MalformedInputError):
    """Raised when the primary data source defines the same code point more than once"""

    def __init__(self, code_point: int, source: str = None, line_no: int = None, line: str = None):
        self.code_point = code_point
        super().__init__(f'point U+{code_point:04X} reused', source, line_no, line)


class InvariantViolation(UcdToolsError):
    """Raised when a derived structure would violate an invariant that well-formed data never violates"""

    def __init__(self, code_point: int, message: str):
        self.code_point = code_point
        self.message = message
        super().__init__(f'U+{code_point:04X}: {message}')


class UnknownTableError(UcdToolsError):
    """Raised when a requested category, script, or property name does not exist in the loaded data"""

    def __init__(self, kind: str, names: Iterable[str]):
        self.kind = kind
        self.names = sorted(names)
        super().__init__(f'Unknown {kind}: {", ".join(self.names)}')


class DataSourceError(UcdToolsError):
    """Raised when a UCD file could not be retrieved"""
