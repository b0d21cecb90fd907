"""
Helpers for serializing generated tables to YAML
"""

from collections import UserDict
from collections.abc import Mapping, KeysView, ValuesView
from enum import Enum

import yaml

__all__ = ['IndentedYamlDumper', 'prep_for_yaml', 'yaml_dump']


class IndentedYamlDumper(yaml.SafeDumper):
    """This indents lists that are nested in dicts in the same way as the Perl yaml library"""
    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def prep_for_yaml(obj):
    if isinstance(obj, UserDict):
        obj = obj.data
    if hasattr(obj, '__serializable__'):
        return prep_for_yaml(obj.__serializable__())
    # noinspection PyTypeChecker
    if isinstance(obj, Mapping):
        return {prep_for_yaml(k): prep_for_yaml(v) for k, v in obj.items()}
    elif isinstance(obj, (set, frozenset, KeysView)):
        return [prep_for_yaml(v) for v in sorted(obj)]
    elif isinstance(obj, (list, tuple, map, ValuesView)):
        return [prep_for_yaml(v) for v in obj]
    elif isinstance(obj, Enum):
        return obj.name
    elif isinstance(obj, bytes):
        return obj.decode('utf-8')
    elif isinstance(obj, type):
        return str(obj)
    else:
        return obj


def yaml_dump(data, force_single_yaml=False, indent_nested_lists=False, default_flow_style=None, **kwargs):
    """
    Serialize the given data as YAML

    :param data: Data structure to be serialized
    :param bool force_single_yaml: Force a single YAML document to be created instead of multiple ones when the
      top-level data structure is not a dict
    :param bool indent_nested_lists: Indent lists that are nested in dicts in the same way as the Perl yaml library
    :return str: Yaml-formatted data
    """
    content = prep_for_yaml(data)
    kwargs.setdefault('explicit_start', True)
    kwargs.setdefault('width', float('inf'))
    kwargs.setdefault('allow_unicode', True)
    kwargs.setdefault('sort_keys', False)
    if indent_nested_lists:
        kwargs['Dumper'] = IndentedYamlDumper
    else:
        kwargs.setdefault('Dumper', yaml.SafeDumper)

    if isinstance(content, (dict, str)) or force_single_yaml:
        kwargs.setdefault('default_flow_style', False if default_flow_style is None else default_flow_style)
        formatted = yaml.dump(content, **kwargs)
    else:
        kwargs.setdefault('default_flow_style', True if default_flow_style is None else default_flow_style)
        formatted = yaml.dump_all(content, **kwargs)
    if formatted.endswith('...\n'):
        formatted = formatted[:-4]
    if formatted.endswith('\n'):
        formatted = formatted[:-1]
    return formatted
