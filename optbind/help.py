"""Usage-page layout."""

import textwrap
from collections.abc import Sequence
from enum import Enum
from pathlib import PurePath
from typing import Any

from attrs import define

from optbind.definition import Slot
from optbind.markup import convert_from_html
from optbind.program import ProgramProperties
from optbind.utils import join

ARGUMENT_COLUMN_WIDTH = 30
DESCRIPTION_COLUMN_WIDTH = 90

_TYPE_NAMES = {
    bool: "Boolean",
    int: "Integer",
    float: "Double",
    str: "String",
}


def type_name(type_: type) -> str:
    if type_ in _TYPE_NAMES:
        return _TYPE_NAMES[type_]
    if issubclass(type_, PurePath):
        return "File"
    return type_.__name__


def format_value(value: Any) -> str:
    """Render a bound value the way it would be typed on the command line."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    return str(value)


@define
class HelpEntry:
    names: tuple[str, ...]
    description: str


def _describe(slot: Slot, print_defaults: bool, clear_sentinel: str) -> str:
    definition = slot.definition
    parts = []
    if doc := convert_from_html(definition.doc):
        parts.append(doc)

    if isinstance(definition.value_type, type) and issubclass(definition.value_type, Enum):
        parts.append(f"Possible values: {{{join(', ', definition.value_type.__members__)}}}")

    if definition.positional:
        parts.append(f"Must be specified {definition.bounds_description()}.")
    elif definition.collection:
        parts.append(f"This option may be specified {definition.bounds_description()}.")
        if print_defaults and slot.has_value():
            parts.append(f"Default value: [{join(', ', (format_value(x) for x in slot.get()))}].")
        parts.append(f"This option can be set to '{clear_sentinel}' to clear the default list.")
    elif print_defaults and slot.has_value():
        parts.append(f"Default value: {format_value(slot.get())}.")
        parts.append(f"This option can be set to '{clear_sentinel}' to clear the default value.")

    if definition.mutex:
        parts.append(f"Cannot be used in conjunction with option(s) {join(' ', definition.mutex)}.")
        if not definition.optional:
            parts.append(f"Required unless one of {{{join(', ', definition.mutex)}}} is specified.")
    elif definition.required:
        parts.append("Required.")
    else:
        parts.append("Optional.")
    return " ".join(parts)


def _entry(slot: Slot, print_defaults: bool, clear_sentinel: str) -> HelpEntry:
    definition = slot.definition
    kind = type_name(definition.value_type)
    if definition.positional:
        names = (f"<{definition.name}>={kind}",)
    else:
        names = tuple(f"{key}={kind}" for key in definition.keys)
    return HelpEntry(names, _describe(slot, print_defaults, clear_sentinel))


def _wrap(text: str) -> list[str]:
    lines = []
    for paragraph in text.split("\n"):
        lines.extend(textwrap.wrap(paragraph, DESCRIPTION_COLUMN_WIDTH, replace_whitespace=False) or [""])
    return lines


def _format_entry(entry: HelpEntry) -> str:
    names = list(entry.names)
    description = _wrap(entry.description)
    indent = " " * ARGUMENT_COLUMN_WIDTH
    lines = names[:-1]
    last = names[-1]
    if len(last) < ARGUMENT_COLUMN_WIDTH and description:
        lines.append(f"{last:<{ARGUMENT_COLUMN_WIDTH}}{description[0]}".rstrip())
        description = description[1:]
    else:
        lines.append(last)
    lines.extend(f"{indent}{line}".rstrip() for line in description)
    return "\n".join(lines)


def format_usage(
    program_name: str,
    properties: ProgramProperties,
    slots: Sequence[Slot],
    *,
    print_defaults: bool = True,
    help_flags: Sequence[str] = (),
    version_flags: Sequence[str] = (),
    options_file_key: str = "",
    clear_sentinel: str = "null",
) -> str:
    """Build the usage page.

    The page consists of the program name line, the converted summary, the
    program version (if any), and a table of options.
    """
    out = f"USAGE: {program_name} [options]\n\n"
    if properties.summary:
        out += convert_from_html(properties.summary) + "\n"
    if properties.version:
        out += f"Version: {properties.version}\n"

    entries = []
    if help_flags:
        entries.append(HelpEntry(tuple(help_flags), "Displays options specific to this tool."))
    if version_flags:
        entries.append(HelpEntry(tuple(version_flags), "Displays program version."))
    if options_file_key:
        entries.append(
            HelpEntry(
                (f"{options_file_key}=File",),
                "File of OPTION_NAME=value pairs. No positional parameters allowed. Unlike command-line options, "
                "unrecognized options are ignored. A single-valued option set in an options file may be overridden "
                "by a subsequent command-line option. A line starting with '#' is considered a comment.",
            )
        )
    entries.extend(_entry(slot, print_defaults, clear_sentinel) for slot in slots)

    out += "\nOptions:\n\n"
    out += "\n\n".join(_format_entry(entry) for entry in entries)
    return out + "\n"
