"""To prevent circular dependencies, this module should never import anything else from optbind."""

import functools
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Literal

# https://threeofwands.com/attra-iv-zero-overhead-frozen-attrs-classes/
if TYPE_CHECKING:
    from attrs import frozen
    from rich.console import Console
else:
    from attrs import define

    frozen = functools.partial(define, unsafe_hash=True)


class _UnsetMeta(type):
    def __repr__(cls) -> str:
        return "<UNSET>"

    def __bool__(cls) -> Literal[False]:
        return False


class UNSET(metaclass=_UnsetMeta):
    """Marks an :class:`~optbind.Option` declared without a ``default``. Never instantiated."""


def to_tuple_converter(value: None | Any | Iterable[Any]) -> tuple[Any, ...]:
    """Convert a single element or an iterable of elements into a tuple.

    Intended to be used in an ``attrs.Field``. If :obj:`None` is provided, returns an empty tuple.
    If a single element is provided, returns a tuple containing just that element.
    If an iterable is provided, converts it into a tuple.
    """
    if value is None:
        return ()
    elif isinstance(value, Iterable) and not isinstance(value, str):
        return tuple(value)
    else:
        return (value,)


def join(separator: str, objects: Iterable[Any]) -> str:
    """Join the ``str`` of each object with ``separator``.

    Returns an empty string for an empty iterable.
    """
    return separator.join(str(x) for x in objects)


def error_console_for(console: "Console") -> "Console":
    """Stderr console sharing the width and terminal settings of ``console``."""
    from rich.console import Console

    return Console(
        stderr=True,
        color_system=console.color_system or "auto",  # type: ignore[arg-type]
        force_terminal=getattr(console, "_force_terminal", None),
        soft_wrap=console.soft_wrap,
        width=console._width,
        highlight=False,
    )


def is_class_and_subclass(hint, target_class) -> bool:
    """Safely check if a type is both a class and a subclass of target_class."""
    try:
        return isinstance(hint, type) and issubclass(hint, target_class)
    except TypeError:
        # issubclass() raises TypeError for non-class arguments like Union types
        return False
