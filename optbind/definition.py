"""Compile the :class:`~optbind.Option` declarations of an options record into definitions and slots."""

import collections.abc
import inspect
import typing
from enum import Enum
from functools import lru_cache
from pathlib import PurePath
from types import UnionType
from typing import Any, Union, get_args, get_origin

from attrs import define, evolve, field

from optbind.exceptions import DefinitionError
from optbind.option import Option
from optbind.token import Source, Token
from optbind.utils import frozen

NoneType = type(None)

SCALAR_TYPES = (bool, int, float, str)

# Abstract collection kinds that are auto-initialized with a list.
_ORDERED_ABSTRACT_COLLECTIONS = frozenset(
    {
        collections.abc.Iterable,
        collections.abc.Collection,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
    }
)

_UNSUPPORTED_COLLECTIONS = (str, bytes, bytearray, tuple, collections.abc.Mapping)
_MUTABLE_COLLECTIONS = (collections.abc.MutableSequence, collections.abc.MutableSet)


def resolve_optional(hint: Any) -> Any:
    """Strip ``None`` from ``Optional[X]``/``X | None`` hints."""
    origin = get_origin(hint)
    if origin is Union or origin is UnionType:
        args = tuple(x for x in get_args(hint) if x is not NoneType)
        if len(args) == 1:
            return args[0]
    return hint


def _is_supported_value_type(hint: Any) -> bool:
    if get_origin(hint) is not None or not inspect.isclass(hint):
        return False
    return hint in SCALAR_TYPES or issubclass(hint, (PurePath, Enum))


def _collection_kind(hint: Any) -> tuple[type, Any] | None:
    """Return ``(origin, element_type)`` if ``hint`` is a collection annotation."""
    origin = get_origin(hint) or hint
    if not inspect.isclass(origin) or not issubclass(origin, collections.abc.Iterable):
        return None
    if issubclass(origin, _UNSUPPORTED_COLLECTIONS):
        return None
    args = get_args(hint)
    return origin, resolve_optional(args[0]) if args else str


def _is_abstract(origin: type) -> bool:
    return inspect.isabstract(origin) or origin.__module__ in ("collections.abc", "typing")


def _container_factory(origin: type) -> type | None:
    """Concrete container used to auto-initialize an empty collection slot.

    Returns :obj:`None` for abstract kinds that cannot be auto-initialized.
    """
    if origin in _ORDERED_ABSTRACT_COLLECTIONS:
        return list
    if _is_abstract(origin):
        return None
    return origin


class Kind(str, Enum):
    SCALAR = "scalar"
    COLLECTION = "collection"
    POSITIONAL = "positional"


@frozen(kw_only=True)
class OptionDefinition:
    """Compiled metadata for one logical bindable slot."""

    name: str
    short_name: str
    kind: Kind
    value_type: type
    """Scalar type, or the element type of a collection."""

    container: type | None = None
    """Factory used to auto-initialize an uninitialized collection slot."""

    optional: bool = False
    overridable: bool = False
    mutex: tuple[str, ...] = ()
    min_elements: int = 0
    max_elements: int | None = None
    doc: str = ""
    default_present: bool = False

    targets: tuple[Option, ...] = field(default=(), eq=False)
    """Physical storage locations; the most-derived declaration first."""

    @property
    def collection(self) -> bool:
        return self.kind is not Kind.SCALAR

    @property
    def positional(self) -> bool:
        return self.kind is Kind.POSITIONAL

    @property
    def keys(self) -> tuple[str, ...]:
        """Keys that address this definition on the command line."""
        if self.positional:
            return ()
        if self.short_name == self.name:
            return (self.name,)
        return (self.name, self.short_name)

    @property
    def required(self) -> bool:
        """Whether this definition must be supplied on its own.

        Definitions with mutex peers are instead satisfied collectively.
        """
        if self.collection:
            return self.min_elements > 0
        return not (self.optional or self.default_present or self.mutex)

    def bounds_description(self) -> str:
        if self.max_elements is None:
            return f"at least {self.min_elements} time(s)"
        if self.min_elements == self.max_elements:
            return f"exactly {self.min_elements} time(s)"
        return f"between {self.min_elements} and {self.max_elements} times"


@define
class Slot:
    """Mutable binding state for one :class:`OptionDefinition` on one record instance."""

    definition: OptionDefinition
    record: Any
    source: Source | None = None
    """Provenance of the most recent successful write."""

    tokens: list[Token] = field(factory=list)

    def initialize(self):
        """Apply defaults and auto-initialize collections, making all targets agree."""
        value = self.get()
        if self.definition.collection:
            value = self._mutable_container(value)
        self.set(value)

    def _mutable_container(self, value: Any) -> Any:
        if isinstance(value, _MUTABLE_COLLECTIONS):
            return value
        container = self.definition.container
        if container is None:
            owner = self.definition.targets[0].owner
            raise DefinitionError(
                f'Option "{self.definition.name}" on {owner.__qualname__ if owner else "?"} '
                "is an abstract collection that cannot be auto-initialized; supply a mutable instance."
            )
        return container() if value is None else container(value)

    def reset(self):
        self.source = None
        self.tokens.clear()

    def get(self) -> Any:
        return self.definition.targets[0].__get__(self.record, type(self.record))

    def set(self, value: Any):
        for target in self.definition.targets:
            target.__set__(self.record, value)

    def add(self, value: Any):
        if not self.definition.collection:
            self.set(value)
            return
        container = self.get()
        if isinstance(container, collections.abc.MutableSet):
            container.add(value)
        else:
            container.append(value)
        self.set(container)

    def clear(self):
        if self.definition.collection:
            container = self.get()
            container.clear()
            self.set(container)
        else:
            self.set(None)

    def has_value(self) -> bool:
        value = self.get()
        if self.definition.collection:
            return bool(value)
        return value is not None

    @property
    def explicit(self) -> bool:
        """Whether the slot was written during the most recent parse."""
        return bool(self.tokens)


def _declared_options(record_type: type) -> list[tuple[type, Option]]:
    declared = []
    for cls in reversed(record_type.__mro__):
        if cls is object:
            continue
        for value in vars(cls).values():
            if isinstance(value, Option):
                declared.append((cls, value))
    return declared


def _annotation(cls: type, option: Option) -> Any:
    try:
        hints = typing.get_type_hints(cls)
    except NameError as e:
        raise DefinitionError(f"Unable to resolve annotations of {cls.__qualname__}: {e}") from e
    try:
        return hints[option.attr]
    except KeyError:
        raise DefinitionError(f'Option "{option.attr}" on {cls.__qualname__} has no type annotation.') from None


def _compile(cls: type, option: Option, targets: tuple[Option, ...]) -> OptionDefinition:
    hint = resolve_optional(_annotation(cls, option))
    where = f'Option "{option.attr}" on {cls.__qualname__}'

    if collection := _collection_kind(hint):
        origin, value_type = collection
        kind = Kind.POSITIONAL if option.positional else Kind.COLLECTION
        container = _container_factory(origin)
        if not (container is None or issubclass(container, _MUTABLE_COLLECTIONS)):
            raise DefinitionError(f"{where}: collection type {origin!r} is immutable.")
    elif option.positional:
        raise DefinitionError(f"{where}: positional arguments must be a collection, not {hint!r}.")
    else:
        kind, value_type, container = Kind.SCALAR, hint, None
        if option.min_elements or option.max_elements is not None:
            raise DefinitionError(f"{where}: min_elements/max_elements only apply to collections.")

    if not _is_supported_value_type(value_type):
        raise DefinitionError(f"{where}: unsupported type {value_type!r}.")
    if option.max_elements is not None and option.max_elements < option.min_elements:
        raise DefinitionError(f"{where}: max_elements must be >= min_elements.")

    return OptionDefinition(
        name=option.attr,
        short_name=option.short_name or option.attr,
        kind=kind,
        value_type=value_type,
        container=container,
        optional=option.optional,
        overridable=option.overridable,
        mutex=option.mutex,
        min_elements=option.min_elements,
        max_elements=option.max_elements,
        doc=option.doc,
        default_present=option.default_present,
        targets=targets,
    )


def _check_case_clashes(definitions: list[OptionDefinition]):
    seen: dict[str, OptionDefinition] = {}
    for definition in definitions:
        for key in definition.keys:
            other = seen.setdefault(key.lower(), definition)
            if other is not definition:
                raise DefinitionError(
                    f'Option key "{key}" of "{definition.name}" clashes with "{other.name}"; '
                    "keys must be unique ignoring case."
                )


def _canonicalize_mutex(definitions: list[OptionDefinition]) -> list[OptionDefinition]:
    lookup = {key: d.name for d in definitions for key in d.keys}
    out = []
    for definition in definitions:
        peers = []
        for peer in definition.mutex:
            try:
                peers.append(lookup[peer])
            except KeyError:
                raise DefinitionError(f'Option "{definition.name}" declares unknown mutex peer "{peer}".') from None
        out.append(definition if tuple(peers) == definition.mutex else evolve(definition, mutex=tuple(peers)))
    return out


@lru_cache
def discover(record_type: type) -> tuple[OptionDefinition, ...]:
    """Compile every :class:`~optbind.Option` declared on ``record_type`` and its ancestors.

    Parameters
    ----------
    record_type: type
        Options record class.

    Raises
    ------
    DefinitionError
        The declaration is malformed: a case-insensitive key clash, redeclaration of a
        non-overridable ancestor option, more than one positional declaration, an unknown
        mutex peer, or an unsupported annotation.

    Returns
    -------
    tuple[OptionDefinition, ...]
        Definitions in declaration order, ancestors first.
    """
    compiled: dict[str, OptionDefinition] = {}
    for cls, option in _declared_options(record_type):
        previous = compiled.get(option.attr)
        if previous is None:
            compiled[option.attr] = _compile(cls, option, (option,))
            continue
        if not previous.overridable:
            raise DefinitionError(
                f'Option "{option.attr}" redeclared on {cls.__qualname__} '
                f"but {previous.targets[0].owner.__qualname__} did not declare it overridable."  # pyright: ignore
            )
        compiled[option.attr] = _compile(cls, option, (option, *previous.targets))

    definitions = list(compiled.values())
    positionals = [d.name for d in definitions if d.positional]
    if len(positionals) > 1:
        raise DefinitionError(f"{record_type.__qualname__} declares more than one positional option: {positionals}.")

    _check_case_clashes(definitions)
    return tuple(_canonicalize_mutex(definitions))
