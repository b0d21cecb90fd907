"""
Property flags for the Latin-1 range, used by consumers to answer category questions for U+0000..U+00FF without a
range table lookup.
"""

from __future__ import annotations

from ..core.exceptions import InvariantViolation
from .chars import CharacterTable
from .constants import MAX_LATIN1

__all__ = ['latin_properties', 'LATIN_CATEGORY_PROPERTIES']

LATIN_CATEGORY_PROPERTIES = {
    'Cc': 'pC',
    '': 'pC',  # NUL has no category
    'Cf': '0',  # soft hyphen, unique category, not printable
    'Ll': 'pLl | pp',
    'Lo': 'pLo | pp',
    'Lu': 'pLu | pp',
    'Nd': 'pN | pp',
    'No': 'pN | pp',
    **dict.fromkeys(('Pc', 'Pd', 'Pe', 'Pf', 'Pi', 'Po', 'Ps'), 'pP | pp'),
    **dict.fromkeys(('Sc', 'Sk', 'Sm', 'So'), 'pS | pp'),
    'Zs': 'pZ',
}


def latin_properties(chars: CharacterTable) -> list[str]:
    """
    :param chars: A populated CharacterTable
    :return: List of property flag expressions for each code point in U+0000..U+00FF
    """
    properties = []
    for code_point in range(MAX_LATIN1 + 1):
        category = chars.categories[code_point]
        try:
            prop = LATIN_CATEGORY_PROPERTIES[category]
        except KeyError:
            raise InvariantViolation(code_point, f'unknown Latin-1 category {category!r}') from None
        if code_point == 0x20:  # space is printable
            prop = 'pZ | pp'
        properties.append(prop)
    return properties
