"""Options records shared across tests."""

from enum import Enum
from pathlib import Path

from optbind import Option, Positional, program


class FrobnicationFlavor(Enum):
    FOO = "foo"
    BAR = "bar"
    BAZ = "baz"


@program(
    summary="Usage: frobnicate [options] input-file output-file\n\nRead input-file, frobnicate it, and write frobnicated results to output-file\n",
    one_line_summary="Read input-file, frobnicate it, and write frobnicated results to output-file",
)
class FrobnicateOptions:
    positional_arguments: list[Path] = Positional(min_elements=2, max_elements=2)
    FROBNICATION_THRESHOLD: int = Option(short_name="T", default=20, doc="Frobnication threshold setting.")
    FROBNICATION_FLAVOR: FrobnicationFlavor = Option()
    SHMIGGLE_TYPE: list[str] = Option(doc="Allowed shmiggle types.", min_elements=1, max_elements=3)
    TRUTHINESS: bool = Option()


class FrobnicateOptionsWithNullList:
    positional_arguments: list[Path] = Positional(min_elements=2, max_elements=2)
    FROBNICATION_THRESHOLD: int = Option(short_name="T", default=20, doc="Frobnication threshold setting.")
    FROBNICATION_FLAVOR: FrobnicationFlavor = Option()
    SHMIGGLE_TYPE: list[str] = Option(doc="Allowed shmiggle types.", min_elements=0, max_elements=3, factory=list)
    TRUTHINESS: bool = Option()


@program(summary="Usage: framistat [options]\n\nCompute the plebnick of the freebozzle.\n")
class OptionsWithoutPositional:
    FROBNICATION_THRESHOLD: int = Option(short_name="T", default=20, doc="Frobnication threshold setting.")
    FROBNICATION_FLAVOR: FrobnicationFlavor = Option()
    SHMIGGLE_TYPE: list[str] = Option(doc="Allowed shmiggle types.", min_elements=1, max_elements=3)
    TRUTHINESS: bool = Option()


class MutexOptions:
    A: str = Option(mutex=["M", "N", "Y", "Z"])
    B: str = Option(mutex=["M", "N", "Y", "Z"])
    M: str = Option(mutex=["A", "B", "Y", "Z"])
    N: str = Option(mutex=["A", "B", "Y", "Z"])
    Y: str = Option(mutex=["A", "B", "M", "N"])
    Z: str = Option(mutex=["A", "B", "M", "N"])


class StaticParent:
    STRING1: str = Option(default="String1ParentDefault")
    STRING2: str = Option(default="String2ParentDefault")
    STRING3: str = Option(default="String3ParentDefault", overridable=True)


class OverridePropagation(StaticParent):
    STRING3: str = Option(default="String3Overriden")
