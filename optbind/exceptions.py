from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Optional

from attrs import define, field

from optbind.token import Token

if TYPE_CHECKING:
    from optbind.definition import OptionDefinition


__all__ = [
    "CardinalityError",
    "CoercionError",
    "DefinitionError",
    "DocMarkupError",
    "MissingArgumentError",
    "MutuallyExclusiveError",
    "NullPositionalError",
    "OptbindError",
    "OptionsFileError",
    "OptionsFileOverrideError",
    "UnexpectedPositionalError",
    "UnknownOptionError",
]


class DefinitionError(Exception):
    """The options record declaration itself is malformed."""

    # This doesn't derive from OptbindError since this is a developer error
    # rather than a runtime error.


class DocMarkupError(Exception):
    """Documentation text did not render to printable ASCII."""


def _provided_by(token: Token | None) -> str:
    if token is None or not token.from_options_file:
        return ""
    return f' from options file "{token.path}"'


@define(kw_only=True)
class OptbindError(Exception):
    """Root exception for runtime parse errors.

    These are always caused by user input and are reported, never raised, by
    :meth:`CommandLineParser.parse_arguments`.
    """

    msg: str | None = None
    """
    If set, override automatic message generation.
    """

    token: Token | None = None
    """Token being processed when the error was detected."""

    definition: Optional["OptionDefinition"] = None
    """Matched option definition."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return ""


@define(kw_only=True)
class UnknownOptionError(OptbindError):
    """Unknown/unregistered option provided directly on the command line.

    A nearest-neighbor option suggestion may be appended.
    """

    candidates: tuple[str, ...] = ()

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.token is not None
        keyword = self.token.keyword or self.token.value
        response = f'Unknown option: "{keyword}"{_provided_by(self.token)}.'

        import difflib

        close_matches = difflib.get_close_matches(keyword, self.candidates, n=1, cutoff=0.6)
        if not close_matches:
            # Keys are case-sensitive; a case-only mismatch is the most common mistake.
            close_matches = [x for x in self.candidates if x.lower() == keyword.lower()]
        if close_matches:
            response += f' Did you mean "{close_matches[0]}"?'
        return response


@define(kw_only=True)
class CoercionError(OptbindError):
    """A token could not be converted into the option's value type."""

    target_type: Any = None

    choices: tuple[str, ...] = ()
    """Legal symbolic values for enumerated types."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.token is not None
        name = self.token.keyword or (self.definition.name if self.definition else "positional argument")
        if self.choices:
            target = "one of {" + ", ".join(self.choices) + "}"
        else:
            target = getattr(self.target_type, "__name__", str(self.target_type))
        return f'Invalid value for "{name}"{_provided_by(self.token)}: unable to convert "{self.token.value}" into {target}.'


@define(kw_only=True)
class MissingArgumentError(OptbindError):
    """A required option was not provided."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.definition is not None
        if self.definition.mutex:
            peers = ", ".join(self.definition.mutex)
            return f'Option "{self.definition.name}" is required unless one of {{{peers}}} is supplied.'
        return f'Option "{self.definition.name}" is required.'


@define(kw_only=True)
class CardinalityError(OptbindError):
    """A collection received too few or too many values."""

    count: int = 0

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.definition is not None
        bounds = self.definition.bounds_description()
        what = "Positional arguments" if self.definition.positional else f'Option "{self.definition.name}"'
        return f"{what} must be specified {bounds}; got {self.count}."


@define(kw_only=True)
class MutuallyExclusiveError(OptbindError):
    """An option and at least one of its mutex peers both hold values."""

    conflicts: tuple[str, ...] = ()

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.definition is not None
        offenders = "{" + ", ".join(self.conflicts) + "}"
        return f'Option "{self.definition.name}" cannot be used in conjunction with {offenders}.'


@define(kw_only=True)
class OptionsFileOverrideError(OptbindError):
    """An options file attempted to override a value supplied directly on the command line."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.token is not None
        return (
            f'Option "{self.token.keyword}" was set on the command line and may not be overridden'
            f"{_provided_by(self.token)}."
        )


@define(kw_only=True)
class NullPositionalError(OptbindError):
    """The clear sentinel was supplied as a positional value."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.token is not None
        return f'"{self.token.value}" is not allowed as a positional argument.'


@define(kw_only=True)
class UnexpectedPositionalError(OptbindError):
    """A positional value was supplied but the record declares no positional arguments."""

    def __str__(self):
        if self.msg is not None:
            return self.msg
        assert self.token is not None
        return f'Unexpected positional argument "{self.token.value}"{_provided_by(self.token)}.'


@define(kw_only=True)
class OptionsFileError(OptbindError):
    """An options file could not be read."""

    path: str = ""
    reason: str = ""
    include_chain: tuple[str, ...] = field(factory=tuple)

    def __str__(self):
        if self.msg is not None:
            return self.msg
        message = f'Unable to read options file "{self.path}"'
        if self.reason:
            message += f": {self.reason}"
        if self.include_chain:
            message += f" (included from {' -> '.join(self.include_chain)})"
        return message + "."


def format_errors(errors: Iterable[OptbindError]) -> str:
    return "\n".join(str(e) for e in errors)
