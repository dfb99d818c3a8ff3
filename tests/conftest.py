import pytest
from rich.console import Console

from optbind import CommandLineParser


@pytest.fixture
def console():
    return Console(width=70, force_terminal=True, highlight=False, color_system=None, legacy_windows=False)


@pytest.fixture
def parse(console):
    """Parse ``args`` into ``record`` and return the boolean result."""

    def inner(record, args, **kwargs):
        parser = CommandLineParser(record, console=console, error_console=console, **kwargs)
        return parser.parse_arguments(args, print_error=False)

    return inner


@pytest.fixture
def options_file(tmp_path):
    """Write ``lines`` to a new options file and return its path as a string."""
    counter = 0

    def inner(*lines: str) -> str:
        nonlocal counter
        counter += 1
        path = tmp_path / f"clp.{counter}.options"
        path.write_text("".join(f"{line}\n" for line in lines))
        return str(path)

    return inner
