from collections import deque
from collections.abc import Collection, MutableSet, Sequence
from collections.abc import Set as AbcSet
from enum import Enum
from pathlib import Path

import pytest
from records import FrobnicateOptions, OverridePropagation, StaticParent

from optbind import CommandLineParser, DefinitionError, Option, Positional, discover
from optbind.definition import Kind


def test_discover_frobnicate():
    definitions = {d.name: d for d in discover(FrobnicateOptions)}
    assert list(definitions) == [
        "positional_arguments",
        "FROBNICATION_THRESHOLD",
        "FROBNICATION_FLAVOR",
        "SHMIGGLE_TYPE",
        "TRUTHINESS",
    ]

    threshold = definitions["FROBNICATION_THRESHOLD"]
    assert threshold.kind is Kind.SCALAR
    assert threshold.keys == ("FROBNICATION_THRESHOLD", "T")
    assert threshold.value_type is int
    assert threshold.default_present
    assert not threshold.required

    positional = definitions["positional_arguments"]
    assert positional.kind is Kind.POSITIONAL
    assert positional.keys == ()
    assert positional.value_type is Path
    assert (positional.min_elements, positional.max_elements) == (2, 2)

    assert definitions["SHMIGGLE_TYPE"].required
    assert definitions["TRUTHINESS"].required
    assert definitions["TRUTHINESS"].short_name == "TRUTHINESS"


def test_option_definition_case_clash():
    class OptionsWithCaseClash:
        FROB: str = Option()
        frob: str = Option()

    with pytest.raises(DefinitionError):
        CommandLineParser(OptionsWithCaseClash())


def test_option_definition_short_name_clash():
    class Options:
        ALPHA: str = Option(short_name="X")
        BETA: str = Option(short_name="x")

    with pytest.raises(DefinitionError):
        discover(Options)


def test_same_short_name_is_not_a_clash():
    class OptionsWithSameShortName:
        SAME_SHORT_NAME: str = Option(short_name="SAME_SHORT_NAME", overridable=True, optional=True)
        DIFF_SHORT_NAME: str = Option(short_name="SOMETHING_ELSE", overridable=True, optional=True)

    definitions = discover(OptionsWithSameShortName)
    assert [d.keys for d in definitions] == [("SAME_SHORT_NAME",), ("DIFF_SHORT_NAME", "SOMETHING_ELSE")]


def test_uninitialized_collections(parse):
    class UninitializedCollectionOptions:
        LIST: list[str] = Option()
        SEQUENCE: Sequence[str] = Option()
        HASH_SET: set[str] = Option()
        DEQUE: deque[str] = Option()
        COLLECTION: Collection[Path] = Positional()

    o = UninitializedCollectionOptions()
    args = ["LIST=L1", "LIST=L2", "SEQUENCE=S1", "HASH_SET=HS1", "HASH_SET=HS1", "DEQUE=D1", "P1", "P2"]
    assert parse(o, args)
    assert o.LIST == ["L1", "L2"]
    assert o.SEQUENCE == ["S1"]
    assert o.HASH_SET == {"HS1"}
    assert o.DEQUE == deque(["D1"])
    assert o.COLLECTION == [Path("P1"), Path("P2")]


def test_collections_initialized_after_discovery():
    class Options:
        LIST: list[int] = Option()
        HASH_SET: set[int] = Option()

    o = Options()
    CommandLineParser(o)
    assert o.LIST == []
    assert o.HASH_SET == set()


@pytest.mark.parametrize("hint", [AbcSet[str], MutableSet[str]])
def test_collection_that_cannot_be_auto_initialized(hint):
    class Options:
        SET: hint = Option()  # pyright: ignore

    with pytest.raises(DefinitionError):
        CommandLineParser(Options())


def test_abstract_collection_with_supplied_instance(parse):
    class Options:
        SET: MutableSet[str] = Option(factory=set)

    o = Options()
    assert parse(o, ["SET=a"])
    assert o.SET == {"a"}


def test_immutable_default_copied_into_mutable_container(parse):
    class Options:
        NAMES: Sequence[str] = Option(default=("a", "b"))

    o = Options()
    assert parse(o, ["NAMES=c"])
    assert o.NAMES == ["a", "b", "c"]

    o = Options()
    assert parse(o, ["NAMES=null", "NAMES=d"])
    assert o.NAMES == ["d"]


def test_immutable_instance_for_abstract_set():
    class Options:
        SET: AbcSet[str] = Option(default=frozenset({"a"}))

    with pytest.raises(DefinitionError):
        CommandLineParser(Options())


def test_overridden_options(console):
    overridden = OverridePropagation()
    parser = CommandLineParser(overridden, console=console, error_console=console)

    assert parser.parse_arguments([])
    assert overridden.STRING3 == "String3Overriden"
    assert super(OverridePropagation, overridden).STRING3 == "String3Overriden"

    assert parser.parse_arguments(["STRING3=String3Supplied"])
    assert parser.record.STRING3 == "String3Supplied"
    assert super(OverridePropagation, parser.record).STRING3 == "String3Supplied"
    assert overridden.STRING1 == "String1ParentDefault"


def test_override_merges_metadata():
    (string1, string2, string3) = discover(OverridePropagation)
    assert string3.name == "STRING3"
    assert len(string3.targets) == 2
    assert string3.targets[0] is vars(OverridePropagation)["STRING3"]
    assert string3.targets[1] is vars(StaticParent)["STRING3"]
    assert not string3.overridable


def test_redeclare_non_overridable():
    class Child(StaticParent):
        STRING1: str = Option()

    with pytest.raises(DefinitionError):
        discover(Child)


def test_multiple_positional():
    class Options:
        FIRST: list[str] = Positional()
        SECOND: list[str] = Positional()

    with pytest.raises(DefinitionError):
        discover(Options)


def test_scalar_positional():
    class Options:
        FIRST: str = Positional()

    with pytest.raises(DefinitionError):
        discover(Options)


def test_unknown_mutex_peer():
    class Options:
        A: str = Option(mutex=["DOES_NOT_EXIST"])

    with pytest.raises(DefinitionError):
        discover(Options)


def test_max_less_than_min():
    class Options:
        LIST: list[str] = Option(min_elements=3, max_elements=1)

    with pytest.raises(DefinitionError):
        discover(Options)


def test_cardinality_on_scalar():
    class Options:
        VALUE: str = Option(min_elements=1)

    with pytest.raises(DefinitionError):
        discover(Options)


@pytest.mark.parametrize("hint", [dict[str, str], tuple[int, ...], complex, list[complex], frozenset[str]])
def test_unsupported_annotation(hint):
    class Options:
        VALUE: hint = Option()  # pyright: ignore

    with pytest.raises(DefinitionError):
        discover(Options)


def test_missing_annotation():
    class Options:
        VALUE = Option()

    with pytest.raises(DefinitionError):
        discover(Options)


def test_optional_annotation():
    class Color(Enum):
        RED = 1

    class Options:
        COLOR: Color | None = Option()
        NUMBERS: list[int | None] = Option()

    color, numbers = discover(Options)
    assert color.value_type is Color
    assert numbers.value_type is int


def test_options_file_key_clash():
    class Options:
        options_file: str = Option()

    with pytest.raises(DefinitionError):
        CommandLineParser(Options())


@pytest.mark.parametrize(
    "option, expected",
    [
        (Option(), True),
        (Option(default=None), True),
        (Option(default=0), False),
        (Option(optional=True), False),
        (Option(factory=str), False),
    ],
)
def test_scalar_required(option, expected):
    Options = type("Options", (), {"__annotations__": {"VALUE": int}, "VALUE": option})
    (definition,) = discover(Options)
    assert definition.required is expected


def test_option_default_and_factory_exclusive():
    with pytest.raises(ValueError):
        Option(default=[], factory=list)
