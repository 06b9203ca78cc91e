"""
Layered option resolution for tables and columns.

An :class:`OptionsResolver` holds a declared option schema (defaults,
required keys, allowed types) and turns partial user input into a
validated, read-only :class:`ResolvedOptions` mapping.

Defaults wrapped with :func:`lazy` are computed during resolution from the
other options::

    resolver = OptionsResolver()
    resolver.set_required("link_text_field")
    resolver.set_default("url_field", lazy(lambda options: options["link_text_field"]))
    resolver.resolve({"link_text_field": "name"})["url_field"]  # "name"
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .exceptions import (
    CircularOptionDependencyError,
    InvalidOptionTypeError,
    MissingOptionError,
    UndefinedOptionError,
)

logger = logging.getLogger(__name__)


class LazyOption:
    """A default computed from the other options at resolution time."""

    __slots__ = ("provider",)

    def __init__(self, provider: Callable[["Options"], Any]):
        if not callable(provider):
            raise TypeError("Lazy option provider must be callable")
        self.provider = provider

    def __call__(self, options: "Options") -> Any:
        return self.provider(options)

    def __repr__(self) -> str:
        name = getattr(self.provider, "__qualname__", repr(self.provider))
        return f"<LazyOption {name}>"


def lazy(provider: Callable[["Options"], Any]) -> LazyOption:
    """Mark ``provider`` as a lazy default instead of a plain callable value."""
    return LazyOption(provider)


class ResolvedOptions(Mapping):
    """Read-only mapping returned by :meth:`OptionsResolver.resolve`."""

    def __init__(self, values: Dict[str, Any]):
        self._values = dict(values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedOptions({self._values!r})"


class Options(Mapping):
    """
    The options being resolved, as seen by a lazy provider.

    Reading a key resolves it on demand, so providers may depend on any other
    declared option regardless of declaration order.
    """

    def __init__(self, resolution: "_Resolution"):
        self._resolution = resolution

    def __getitem__(self, key: str) -> Any:
        return self._resolution.get(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._resolution.available_keys())

    def __len__(self) -> int:
        return len(self._resolution.available_keys())

    def __contains__(self, key: object) -> bool:
        return key in self._resolution.values


class _Resolution:
    """State of a single ``resolve()`` call."""

    def __init__(self, resolver: "OptionsResolver", values: Dict[str, Any]):
        self.resolver = resolver
        self.values = values
        self.resolved: Dict[str, Any] = {}
        self.resolving: List[str] = []

    def available_keys(self) -> List[str]:
        return [key for key in self.resolver._defined if key in self.values]

    def get(self, key: str) -> Any:
        if key in self.resolved:
            return self.resolved[key]
        if key not in self.resolver._defined:
            raise UndefinedOptionError(
                f'The option "{key}" does not exist. Defined options are: '
                f"{self.resolver._format_keys(self.resolver._defined)}.",
                key,
            )
        if key in self.resolving:
            chain = self.resolving[self.resolving.index(key):] + [key]
            raise CircularOptionDependencyError(
                f"Circular dependency between lazy options: {' -> '.join(chain)}.",
                chain,
            )
        if key not in self.values:
            raise MissingOptionError(
                f'The option "{key}" is defined but has no value.', key
            )

        value = self.values[key]
        if isinstance(value, LazyOption):
            self.resolving.append(key)
            try:
                value = value(Options(self))
            finally:
                self.resolving.pop()

        self.resolver._validate_type(key, value)
        self.resolved[key] = value
        return value


AllowedType = Union[type, None, Callable[..., Any]]


class OptionsResolver:
    """
    Declares an option schema and resolves input against it.

    ``resolve()`` never changes the declared schema, so one resolver can
    resolve any number of independent inputs.
    """

    def __init__(self):
        self._defined: Dict[str, None] = {}
        self._defaults: Dict[str, Any] = {}
        self._required: Dict[str, None] = {}
        self._allowed_types: Dict[str, Tuple[AllowedType, ...]] = {}

    def set_defaults(self, defaults: Dict[str, Any]) -> "OptionsResolver":
        for key, value in defaults.items():
            self.set_default(key, value)
        return self

    def set_default(self, key: str, value: Any) -> "OptionsResolver":
        self._defined.setdefault(key, None)
        self._defaults[key] = value
        return self

    def set_required(self, keys: Union[str, Iterable[str]]) -> "OptionsResolver":
        for key in self._as_keys(keys):
            self._defined.setdefault(key, None)
            self._required.setdefault(key, None)
        return self

    def set_defined(self, keys: Union[str, Iterable[str]]) -> "OptionsResolver":
        for key in self._as_keys(keys):
            self._defined.setdefault(key, None)
        return self

    def set_allowed_types(self, key: str, types: Any) -> "OptionsResolver":
        if key not in self._defined:
            raise UndefinedOptionError(
                f'The option "{key}" does not exist. Defined options are: '
                f"{self._format_keys(self._defined)}.",
                key,
            )
        if not isinstance(types, (list, tuple, set, frozenset)):
            types = (types,)
        self._allowed_types[key] = tuple(types)
        return self

    def is_defined(self, key: str) -> bool:
        return key in self._defined

    def is_required(self, key: str) -> bool:
        return key in self._required

    def has_default(self, key: str) -> bool:
        return key in self._defaults

    def get_defined_options(self) -> List[str]:
        return list(self._defined)

    def resolve(self, options: Optional[Dict[str, Any]] = None) -> ResolvedOptions:
        """
        Merge ``options`` over the declared defaults and validate the result.

        Raises:
            UndefinedOptionError: an input key was never declared.
            MissingOptionError: a required option has no value.
            InvalidOptionTypeError: a value does not match its allowed types.
            CircularOptionDependencyError: lazy defaults depend on each other.
        """
        options = dict(options or {})

        undefined = [key for key in options if key not in self._defined]
        if undefined:
            raise UndefinedOptionError(
                f"The option(s) {self._format_keys(undefined)} do not exist. "
                f"Defined options are: {self._format_keys(self._defined)}.",
                undefined[0],
            )

        values = dict(self._defaults)
        values.update(options)

        missing = [key for key in self._required if key not in values]
        if missing:
            raise MissingOptionError(
                f"The required option(s) {self._format_keys(missing)} are missing.",
                missing[0],
            )

        resolution = _Resolution(self, values)
        for key in self._defined:
            if key in values:
                resolution.get(key)

        resolved = {key: resolution.resolved[key] for key in self._defined if key in resolution.resolved}
        logger.debug("Resolved options: %s", ", ".join(resolved))
        return ResolvedOptions(resolved)

    def _validate_type(self, key: str, value: Any) -> None:
        allowed = self._allowed_types.get(key)
        if not allowed:
            return
        for expected in allowed:
            if expected is None:
                if value is None:
                    return
            elif expected is callable:
                if callable(value):
                    return
            elif isinstance(expected, type) and isinstance(value, expected):
                return
        names = ", ".join(self._type_name(expected) for expected in allowed)
        raise InvalidOptionTypeError(
            f'The option "{key}" with value {value!r} is expected to be of type '
            f'"{names}", but is of type "{type(value).__name__}".',
            key,
            value=value,
            allowed_types=allowed,
        )

    @staticmethod
    def _type_name(expected: AllowedType) -> str:
        if expected is None:
            return "None"
        if expected is callable:
            return "callable"
        return getattr(expected, "__name__", repr(expected))

    @staticmethod
    def _as_keys(keys: Union[str, Iterable[str]]) -> List[str]:
        if isinstance(keys, str):
            return [keys]
        return list(keys)

    @staticmethod
    def _format_keys(keys: Iterable[str]) -> str:
        return ", ".join(f'"{key}"' for key in keys)


__all__ = [
    "LazyOption",
    "lazy",
    "Options",
    "OptionsResolver",
    "ResolvedOptions",
]
