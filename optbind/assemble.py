"""Turn raw arguments into a flat, provenance-tagged token stream."""

import logging
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

from optbind.exceptions import OptionsFileError
from optbind.token import Source, Token

logger = logging.getLogger(__name__)

TextReader = Callable[[str], list[str]]
"""Given a path, return its lines.

Raises :exc:`OSError` if the resource cannot be read, or :exc:`UnicodeDecodeError` if it is not text.
"""

DEFAULT_OPTIONS_FILE_KEY = "OPTIONS_FILE"


def read_lines(path: str) -> list[str]:
    return Path(path).read_text(encoding="utf-8").splitlines()


def split_argument(argument: str) -> tuple[str | None, str]:
    """Split ``KEY=VALUE`` on the first ``=``; tokens without ``=`` have no key."""
    key, sep, value = argument.partition("=")
    if not sep:
        return None, argument
    return key, value


def bare_arguments(arguments: Sequence[str]) -> Iterator[str]:
    """Yield the arguments that are not ``KEY=VALUE`` pairs or the value of a preceding ``KEY=``."""
    remaining = iter(arguments)
    for argument in remaining:
        key, value = split_argument(argument)
        if key is None:
            yield argument
        elif not value:
            next(remaining, None)


def _expand_options_file(
    path: str,
    reader: TextReader,
    options_file_key: str,
    include_chain: tuple[str, ...],
) -> Iterator[Token]:
    if path in include_chain:
        raise OptionsFileError(path=path, reason="file includes itself", include_chain=include_chain)

    logger.debug("Expanding options file %s", path)
    try:
        lines = reader(path)
    except OSError as e:
        raise OptionsFileError(path=path, reason=e.strerror or str(e), include_chain=include_chain) from e
    except UnicodeDecodeError as e:
        raise OptionsFileError(path=path, reason=f"not valid {e.encoding}", include_chain=include_chain) from e

    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, value = split_argument(line)
        if key is None:
            logger.warning("%s:%d: ignoring line without '=': %r", path, lineno, line)
            continue
        if key == options_file_key:
            yield from _expand_options_file(value, reader, options_file_key, (*include_chain, path))
        else:
            yield Token(keyword=key, value=value, source=Source.OPTIONS_FILE, path=path)


def assemble(
    arguments: Sequence[str],
    *,
    reader: TextReader = read_lines,
    options_file_key: str = DEFAULT_OPTIONS_FILE_KEY,
) -> list[Token]:
    """Build the token stream, expanding options-file directives in place.

    A ``KEY=`` argument with an empty value takes the following argument as its value.

    Parameters
    ----------
    arguments: Sequence[str]
        Raw command-line arguments.
    reader: TextReader
        Reads the lines of an options file.
    options_file_key: str
        Key whose value names an options file to splice into the stream.

    Raises
    ------
    OptionsFileError
        An options file could not be read.
    """
    tokens = []
    remaining = iter(arguments)
    for argument in remaining:
        key, value = split_argument(argument)
        if key is None:
            tokens.append(Token(value=value))
            continue
        if not value:
            value = next(remaining, "")
        if key == options_file_key:
            tokens.extend(_expand_options_file(value, reader, options_file_key, ()))
        else:
            tokens.append(Token(keyword=key, value=value))
    return tokens
