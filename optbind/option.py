import copy
from collections.abc import Callable, Iterable
from typing import Any

from attrs import define, field

from optbind.utils import UNSET, to_tuple_converter


def _min_elements_validator(instance, attribute, value):
    if value < 0:
        raise ValueError(f"{attribute.name} must be >=0.")


@define(eq=False)
class Option:
    """Declares a bindable slot on an options record.

    The slot's value type comes from the class annotation.

    Example usage:

    .. code-block:: python

        from optbind import CommandLineParser, Option


        class FrobnicateOptions:
            FROBNICATION_THRESHOLD: int = Option(short_name="T", default=20, doc="Frobnication threshold setting.")
            SHMIGGLE_TYPE: list[str] = Option(min_elements=1, max_elements=3)


        options = FrobnicateOptions()
        CommandLineParser(options).parse_arguments(["T=17", "SHMIGGLE_TYPE=shmiggle1"])

    Values are stored per declaring class in the instance ``__dict__``; an ancestor's
    overridable option and a descendant's redeclaration therefore occupy two storage
    locations, which the parser keeps identical.
    """

    short_name: str | None = field(default=None, kw_only=True)
    doc: str = field(default="", kw_only=True)
    optional: bool = field(default=False, kw_only=True)
    overridable: bool = field(default=False, kw_only=True)

    # This can ONLY ever be a Tuple[str, ...]
    mutex: None | str | Iterable[str] = field(default=(), converter=to_tuple_converter, kw_only=True)

    min_elements: int = field(default=0, validator=_min_elements_validator, kw_only=True)
    max_elements: int | None = field(default=None, kw_only=True)
    """Maximum number of values for a collection; :obj:`None` means unbounded."""

    default: Any = field(default=UNSET, kw_only=True)
    factory: Callable[[], Any] | None = field(default=None, kw_only=True)

    _owner: type | None = field(default=None, init=False, repr=False)
    _attr: str = field(default="", init=False, repr=False)

    positional = False

    def __attrs_post_init__(self):
        if self.default is not UNSET and self.factory is not None:
            raise ValueError("Cannot specify both default and factory.")

    def __set_name__(self, owner: type, name: str):
        self._owner = owner
        self._attr = name

    @property
    def owner(self) -> type | None:
        """Class that declared this option."""
        return self._owner

    @property
    def attr(self) -> str:
        return self._attr

    @property
    def storage_key(self) -> str:
        assert self._owner is not None
        return f"{self._owner.__qualname__}.{self._attr}"

    @property
    def default_present(self) -> bool:
        return self.factory is not None or (self.default is not UNSET and self.default is not None)

    def initial_value(self) -> Any:
        if self.factory is not None:
            return self.factory()
        if self.default is UNSET:
            return None
        return copy.copy(self.default)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        storage = instance.__dict__
        try:
            return storage[self.storage_key]
        except KeyError:
            value = storage[self.storage_key] = self.initial_value()
            return value

    def __set__(self, instance, value):
        instance.__dict__[self.storage_key] = value


@define(eq=False)
class Positional(Option):
    """Declares the record's positional-argument collection.

    At most one may be declared per options record.
    """

    positional = True
