import re
from enum import Enum
from pathlib import PurePath
from typing import Any

from optbind.exceptions import CoercionError
from optbind.token import Token
from optbind.utils import is_class_and_subclass

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _bool(s: str) -> bool:
    s = s.lower()
    if s == "true":
        return True
    elif s == "false":
        return False
    else:
        raise CoercionError(target_type=bool)


def _int(s: str) -> int:
    if not _INTEGER.fullmatch(s.strip()):
        raise CoercionError(target_type=int)
    return int(s)


def _float(s: str) -> float:
    try:
        return float(s)
    except ValueError:
        raise CoercionError(target_type=float) from None


def _enum(type_: type[Enum], s: str) -> Enum:
    # Symbolic names are matched exactly (case-sensitive).
    try:
        return type_[s]
    except KeyError:
        raise CoercionError(target_type=type_, choices=tuple(type_.__members__)) from None


_converters = {
    bool: _bool,
    int: _int,
    float: _float,
    str: str,
}


def convert(type_: type, token: Token) -> Any:
    """Coerce a token's raw string value into ``type_``.

    Raises
    ------
    CoercionError
        The value does not lex as ``type_``.
    """
    try:
        if is_class_and_subclass(type_, Enum):
            return _enum(type_, token.value)
        elif is_class_and_subclass(type_, PurePath):
            return type_(token.value)
        return _converters[type_](token.value)
    except CoercionError as e:
        e.token = token
        raise
