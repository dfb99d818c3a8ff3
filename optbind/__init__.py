__version__ = "0.1.0"

__all__ = [
    "CardinalityError",
    "CoercionError",
    "CommandLineParser",
    "DefinitionError",
    "DocMarkupError",
    "MissingArgumentError",
    "MutuallyExclusiveError",
    "NullPositionalError",
    "OptbindError",
    "Option",
    "OptionDefinition",
    "OptionsFileError",
    "OptionsFileOverrideError",
    "Positional",
    "ProgramGroup",
    "ProgramProperties",
    "ProgramRegistry",
    "Slot",
    "Source",
    "Token",
    "UNSET",
    "UnexpectedPositionalError",
    "UnknownOptionError",
    "convert_from_html",
    "discover",
    "html_unescape",
    "program",
]

from optbind.definition import OptionDefinition, Slot, discover
from optbind.exceptions import (
    CardinalityError,
    CoercionError,
    DefinitionError,
    DocMarkupError,
    MissingArgumentError,
    MutuallyExclusiveError,
    NullPositionalError,
    OptbindError,
    OptionsFileError,
    OptionsFileOverrideError,
    UnexpectedPositionalError,
    UnknownOptionError,
)
from optbind.markup import convert_from_html, html_unescape
from optbind.option import Option, Positional
from optbind.parser import CommandLineParser
from optbind.program import ProgramGroup, ProgramProperties, ProgramRegistry, program
from optbind.token import Source, Token
from optbind.utils import UNSET
