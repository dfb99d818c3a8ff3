from pathlib import Path

import pytest
from records import FrobnicationFlavor

from optbind import CoercionError, Token
from optbind._convert import convert


@pytest.mark.parametrize(
    "type_, value, expected",
    [
        (bool, "true", True),
        (bool, "FALSE", False),
        (int, "17", 17),
        (int, "-3", -3),
        (int, "+5", 5),
        (float, "2.5", 2.5),
        (float, "1e3", 1000.0),
        (str, "anything", "anything"),
        (Path, "a/b.txt", Path("a/b.txt")),
        (FrobnicationFlavor, "BAZ", FrobnicationFlavor.BAZ),
    ],
)
def test_convert(type_, value, expected):
    assert convert(type_, Token(keyword="K", value=value)) == expected


@pytest.mark.parametrize(
    "type_, value",
    [
        (bool, "yes"),
        (bool, "1"),
        (int, "1.5"),
        (int, "0x10"),
        (int, ""),
        (float, "abc"),
    ],
)
def test_convert_invalid(type_, value):
    token = Token(keyword="K", value=value)
    with pytest.raises(CoercionError) as e:
        convert(type_, token)
    assert e.value.token is token
    assert e.value.target_type is type_


def test_convert_enum_is_case_sensitive():
    token = Token(keyword="FLAVOR", value="foo")
    with pytest.raises(CoercionError) as e:
        convert(FrobnicationFlavor, token)
    assert e.value.choices == ("FOO", "BAR", "BAZ")
    assert str(e.value) == 'Invalid value for "FLAVOR": unable to convert "foo" into one of {FOO, BAR, BAZ}.'
