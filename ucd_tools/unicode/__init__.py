"""
Table compaction and case orbit construction for Unicode character data.
"""

from importlib import import_module

__attr_module_map = {
    # chars
    'CharacterRecord': 'chars',
    'CharacterTable': 'chars',
    # ranges
    'Range': 'ranges',
    'RangeTable': 'ranges',
    'RangeCounter': 'ranges',
    'compact': 'ranges',
    'compact_ranges': 'ranges',
    'fold_adjacent': 'ranges',
    # cases
    'CaseDeltaRange': 'cases',
    'UPPER_LOWER': 'cases',
    'compact_case_deltas': 'cases',
    # folding
    'CaseOrbitBuilder': 'folding',
    'FoldTables': 'folding',
    'build_orbits': 'folding',
}

# noinspection PyUnresolvedReferences
__all__ = ['cases', 'chars', 'constants', 'folding', 'latin', 'ranges']
__all__.extend(__attr_module_map.keys())


def __dir__():
    return sorted(__all__ + list(globals().keys()))


def __getattr__(name):
    try:
        module_name = __attr_module_map[name]
    except KeyError:
        raise AttributeError(f'module {__name__!r} has no attribute {name!r}')
    else:
        module = import_module(f'.{module_name}', __name__)
        return getattr(module, name)
