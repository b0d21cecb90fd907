"""
This module provides a recipe for building classes to keep track of configuration info, and to perform basic
validation / normalization of config values.

The :class:`ConfigSection` class is intended to be used as a base class for configuration classes, and the
:class:`ConfigItem` descriptor is intended to be used to define each configurable option in subclasses of ConfigSection.
"""

from __future__ import annotations

from collections import ChainMap
from typing import Union, Callable, Iterable, Any, Mapping, Generic, Type, TypeVar, overload

__all__ = [
    'ConfigItem', 'NestedSection', 'ConfigSection', 'ConfigException', 'InvalidConfigError', 'MissingConfigItemError'
]

CV = TypeVar('CV')
DV = TypeVar('DV')
ConfigValue = Union[CV, DV]
Kwargs = Union[Mapping[str, Any], None]
ConfigMap = Union[Mapping[str, Any], 'ConfigSection', None]

_NotSet = object()


class ConfigItem(Generic[CV, DV]):
    __slots__ = ('name', 'type', 'default', 'default_func')

    def __init__(
        self, default: DV = _NotSet, type: Callable[..., CV] = None, default_func: Callable[[], DV] = None  # noqa
    ):
        self.type = type
        self.default = default
        self.default_func = default_func

    def __set_name__(self, owner: Type[ConfigSection], name: str):
        self.name = name
        owner._config_items_[name] = self

    @overload
    def __get__(self, instance: None, owner: Type[ConfigSection]) -> ConfigItem[CV, DV]:
        ...

    @overload
    def __get__(self, instance: ConfigSection, owner: Type[ConfigSection]) -> ConfigValue:
        ...

    def __get__(self, instance, owner):
        try:
            return instance.__dict__[self.name]
        except AttributeError:  # instance is None
            return self
        except KeyError as e:
            if self.default is not _NotSet:
                return self.default
            elif self.default_func is not None:
                instance.__dict__[self.name] = value = self.default_func()
                return value
            raise MissingConfigItemError(self.name) from e

    def __set__(self, instance: ConfigSection, value: ConfigValue):
        if self.type is not None and value is not None:
            try:
                value = self.type(value)
            except (TypeError, ValueError) as e:
                raise InvalidConfigError(f'Invalid value for {self.name}={value!r}: {e}') from e
        instance.__dict__[self.name] = value

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}({self.default!r}, type={self.type!r})>'


class NestedSection(ConfigItem):
    __slots__ = ()

    def __init__(self, section_cls: Type[ConfigSection]):
        super().__init__(type=section_cls, default_func=section_cls)

    def __set_name__(self, owner: Type[ConfigSection], name: str):
        super().__set_name__(owner, name)
        owner._nested_config_sections_[name] = self

    def __set__(self, instance: ConfigSection, value: ConfigMap):
        if isinstance(value, self.type):
            instance.__dict__[self.name] = value
        else:
            super().__set__(instance, value)


class ConfigMeta(type):
    """
    Metaclass for ConfigSections.  Necessary to initialize the ``_config_items_`` and ``_nested_config_sections_`` dicts
    for ConfigItem registration because the contents of a class is evaluated before ``__init_subclass__`` is called.
    """
    _config_items_: dict[str, ConfigItem | NestedSection]
    _nested_config_sections_: dict[str, NestedSection]

    @classmethod
    def __prepare__(mcs, name: str, bases: Iterable[type], **kwargs) -> dict[str, Any]:
        """Called before ``__new__`` and before evaluating the contents of a class."""
        config_items, nested_sections = {}, {}
        for base in bases:
            if isinstance(base, mcs):
                config_items.update(base._config_items_)
                nested_sections.update(base._nested_config_sections_)
        return {'_config_items_': config_items, '_nested_config_sections_': nested_sections}


class ConfigSection(metaclass=ConfigMeta):
    _config_items_: dict[str, ConfigItem | NestedSection]
    _nested_config_sections_: dict[str, NestedSection]

    def __init__(self, config: ConfigMap = None, **kwargs):
        self._update_(config, **kwargs)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}({self._as_dict_(include_defaults=False)})>'

    def _update_(self, config: ConfigMap = None, **kwargs):
        """
        Update this section with the given content.  If any of the provided keys are not expected, then an
        :class:`InvalidConfigError` will be raised.  Values for keys that correspond with nested sections are merged
        with the existing values for those nested sections.

        :param config: A dict or other mapping containing values that should be used in this section
        :param kwargs: Additional keyword arguments for values that should be used in this section
        """
        if isinstance(config, ConfigSection):
            config = config._as_dict_(include_defaults=False)
        if not (config_map := ChainMap(kwargs, config) if config and kwargs else (config or kwargs)):
            return
        if bad := set(config_map).difference(self._config_items_):
            raise InvalidConfigError(f'Invalid configuration - unsupported options: {", ".join(sorted(bad))}')

        for key, val in config_map.items():
            if key in self._nested_config_sections_ and isinstance(val, Mapping):
                getattr(self, key)._update_(val)
            else:
                setattr(self, key, val)

    update = _update_

    def _as_dict_(self, recursive: bool = True, include_defaults: bool = True) -> dict[str, Any]:
        keys = set(self._config_items_) if include_defaults else set(self.__dict__)
        config_map = {}
        for key in sorted(keys):
            value = getattr(self, key)
            if isinstance(value, ConfigSection):
                if recursive:
                    config_map[key] = value._as_dict_(recursive, include_defaults)
            else:
                config_map[key] = value
        return config_map


# region Exceptions


class ConfigException(Exception):
    """Base exception for config-related errors"""


class InvalidConfigError(ConfigException):
    """Raised when invalid config items are provided when initializing a ConfigSection"""


class MissingConfigItemError(ConfigException):
    """Raised if a required config item is accessed when no value was provided for it"""


# endregion
