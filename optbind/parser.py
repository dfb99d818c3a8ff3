import shlex
import sys
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Optional

from attrs import define, field

from optbind.assemble import DEFAULT_OPTIONS_FILE_KEY, TextReader, assemble, bare_arguments, read_lines
from optbind.bind import CLEAR_SENTINEL, Binder
from optbind.definition import OptionDefinition, Slot, discover
from optbind.exceptions import DefinitionError, OptbindError, format_errors
from optbind.help import format_usage
from optbind.program import ProgramProperties, ProgramRegistry, get_program_name, get_program_properties
from optbind.serialize import command_line
from optbind.utils import error_console_for, to_tuple_converter
from optbind.validate import validate

if TYPE_CHECKING:
    from rich.console import Console


@define
class CommandLineParser:
    """Binds ``KEY=VALUE`` command-line arguments onto an options record.

    Definition errors in the record are raised on construction; user-input
    errors are reported by :meth:`parse_arguments` through its return value.

    Example usage:

    .. code-block:: python

        options = FrobnicateOptions()
        parser = CommandLineParser(options)
        if not parser.parse_arguments(sys.argv[1:]):
            parser.usage()
            sys.exit(1)
    """

    record: Any

    _console: Optional["Console"] = field(default=None, kw_only=True, alias="console")
    _error_console: Optional["Console"] = field(default=None, kw_only=True, alias="error_console")

    reader: TextReader = field(default=read_lines, kw_only=True)
    options_file_key: str = field(default=DEFAULT_OPTIONS_FILE_KEY, kw_only=True)
    clear_sentinel: str = field(default=CLEAR_SENTINEL, kw_only=True)

    help_flags: tuple[str, ...] = field(default=("-h", "--help"), converter=to_tuple_converter, kw_only=True)
    version_flags: tuple[str, ...] = field(default=("--version",), converter=to_tuple_converter, kw_only=True)

    registry: ProgramRegistry | None = field(default=None, kw_only=True)

    errors: list[OptbindError] = field(factory=list, init=False)
    """Errors from the most recent :meth:`parse_arguments` call."""

    _bound_slots: tuple[Slot, ...] = field(init=False, repr=False)

    def __attrs_post_init__(self):
        definitions = discover(type(self.record))
        for definition in definitions:
            if any(key.lower() == self.options_file_key.lower() for key in definition.keys):
                raise DefinitionError(f'Option "{definition.name}" clashes with "{self.options_file_key}".')
        self._bound_slots = tuple(Slot(definition, self.record) for definition in definitions)
        for slot in self._bound_slots:
            slot.initialize()
        if self.registry is not None:
            self.registry.register(type(self.record))

    @property
    def console(self) -> "Console":
        if self._console is None:
            from rich.console import Console

            self._console = Console(highlight=False)
        return self._console

    @property
    def error_console(self) -> "Console":
        if self._error_console is None:
            self._error_console = error_console_for(self.console)
        return self._error_console

    @property
    def definitions(self) -> tuple[OptionDefinition, ...]:
        return tuple(slot.definition for slot in self._bound_slots)

    @property
    def slots(self) -> tuple[Slot, ...]:
        return self._bound_slots

    @property
    def properties(self) -> ProgramProperties:
        return get_program_properties(type(self.record))

    @property
    def program_name(self) -> str:
        return get_program_name(type(self.record))

    @property
    def version(self) -> str:
        if self.properties.version:
            return self.properties.version
        from optbind import __version__

        return __version__

    def parse_arguments(self, arguments: None | str | Iterable[str] = None, *, print_error: bool = True) -> bool:
        """Parse ``arguments`` into the options record.

        Parameters
        ----------
        arguments: None | str | Iterable[str]
            Command-line arguments. A string is split with :func:`shlex.split`.
            Defaults to ``sys.argv[1:]``.
        print_error: bool
            Print any errors to :attr:`error_console`.

        Returns
        -------
        bool
            :obj:`True` if every argument bound and all constraints hold.
            Help and version requests print their output and return :obj:`False`.
        """
        if arguments is None:
            arguments = sys.argv[1:]
        elif isinstance(arguments, str):
            arguments = shlex.split(arguments)
        arguments = list(arguments)

        self.errors = []
        for slot in self._bound_slots:
            slot.reset()

        flags = set(bare_arguments(arguments))
        if flags.intersection(self.help_flags):
            self.usage()
            return False
        if flags.intersection(self.version_flags):
            self._print(self.console, self.version)
            return False

        try:
            tokens = assemble(arguments, reader=self.reader, options_file_key=self.options_file_key)
        except OptbindError as e:
            self.errors.append(e)
        else:
            binder = Binder(self._bound_slots, clear_sentinel=self.clear_sentinel)
            if binder.bind(tokens):
                self.errors.extend(validate(self._bound_slots))
            else:
                self.errors.extend(binder.errors)

        if self.errors and print_error:
            self.print_errors()
        return not self.errors

    def print_errors(self) -> None:
        """Print :attr:`errors` to :attr:`error_console` inside a rounded red panel."""
        from rich import box
        from rich.panel import Panel
        from rich.text import Text

        panel = Panel(
            Text(format_errors(self.errors), "default"),
            title="Error",
            style="red",
            box=box.ROUNDED,
            title_align="left",
        )
        self.error_console.print(panel)

    def format_usage(self, print_defaults: bool = True) -> str:
        return format_usage(
            self.program_name,
            self.properties,
            self._bound_slots,
            print_defaults=print_defaults,
            help_flags=self.help_flags,
            version_flags=self.version_flags,
            options_file_key=self.options_file_key,
            clear_sentinel=self.clear_sentinel,
        )

    def usage(self, print_defaults: bool = True, console: Optional["Console"] = None) -> None:
        """Print the usage page. Does not require a prior parse."""
        self._print(console or self.console, self.format_usage(print_defaults))

    def get_command_line(self) -> str:
        """Canonical, re-parsable representation of the bound arguments."""
        return command_line(self.program_name, self._bound_slots, clear_sentinel=self.clear_sentinel)

    @staticmethod
    def _print(console: "Console", text: str) -> None:
        console.print(text, markup=False, highlight=False, soft_wrap=True, end="" if text.endswith("\n") else "\n")
