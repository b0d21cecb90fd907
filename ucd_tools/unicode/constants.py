"""
Constants related to the Unicode code point space and the UCD files that are used to build tables.
"""

__all__ = [
    'MAX_CHAR',
    'MAX_LATIN1',
    'MAX_R16',
    'DOMAIN_SIZE',
    'CATEGORY_GROUPS',
    'CATEGORY_ALIASES',
    'SUBCATEGORY_ALIASES',
]

MAX_CHAR = 0x10FFFF     # Anything above this should not exist
MAX_LATIN1 = 0xFF
MAX_R16 = 0xFFFF        # Highest code point that may be stored in a 16-bit range entry
DOMAIN_SIZE = MAX_CHAR + 1

# One-character names identify merged categories
CATEGORY_GROUPS = {
    'L': ('Lu', 'Ll', 'Lt', 'Lm', 'Lo'),
    'P': ('Pc', 'Pd', 'Ps', 'Pe', 'Pi', 'Pf', 'Po'),
    'M': ('Mn', 'Mc', 'Me'),
    'N': ('Nd', 'Nl', 'No'),
    'S': ('Sm', 'Sc', 'Sk', 'So'),
    'Z': ('Zs', 'Zl', 'Zp'),
    'C': ('Cc', 'Cf', 'Cs', 'Co', 'Cn'),
}

# Descriptive names that consumers may use instead of the category name
CATEGORY_ALIASES = {
    'C': 'other',
    'L': 'letter',
    'M': 'mark',
    'N': 'number',
    'P': 'punct',
    'S': 'symbol',
    'Z': 'space',
}
SUBCATEGORY_ALIASES = {
    'Nd': 'digit',
    'Lu': 'upper',
    'Ll': 'lower',
    'Lt': 'title',
}
