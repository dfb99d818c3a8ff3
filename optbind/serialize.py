"""Reconstruct a re-parsable command line from bound slots."""

import shlex
from collections.abc import Sequence

from optbind.definition import Slot
from optbind.help import format_value


def _render(slot: Slot, clear_sentinel: str) -> list[str]:
    definition = slot.definition
    value = slot.get()
    if definition.positional:
        return [format_value(x) for x in value]
    if definition.collection:
        if not value:
            return [f"{definition.name}={clear_sentinel}"]
        return [f"{definition.name}={format_value(x)}" for x in value]
    return [f"{definition.name}={format_value(value)}"]


def command_line(program_name: str, slots: Sequence[Slot], *, clear_sentinel: str = "null") -> str:
    """Render ``program_name`` followed by the bound arguments.

    Positional values and explicitly supplied options come first; options still
    holding a non-empty default follow after four spaces. Every option is
    rendered under its primary name, so options whose short name equals their
    name stay distinguishable from aliased ones. Elements are shell-quoted so the
    line splits back into the same arguments.
    """
    explicit = [program_name]
    defaults = []
    for slot in slots:
        if slot.definition.positional:
            explicit.extend(_render(slot, clear_sentinel))
        elif slot.explicit:
            explicit.extend(_render(slot, clear_sentinel))
        elif slot.has_value():
            defaults.extend(_render(slot, clear_sentinel))

    line = shlex.join(explicit)
    if defaults:
        line += "    " + shlex.join(defaults)
    return line
