from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, TypeVar

from attrs import define, field

from optbind.exceptions import DefinitionError
from optbind.utils import frozen

if TYPE_CHECKING:
    from rich.console import Console

T = TypeVar("T", bound=type)

_PROPERTIES_ATTRIBUTE = "__optbind_program__"


@frozen
class ProgramGroup:
    """Named group used to organize programs in a :class:`ProgramRegistry` listing."""

    name: str
    description: str = ""


@frozen(kw_only=True)
class ProgramProperties:
    summary: str = ""
    """Detailed documentation markup shown on the usage page."""

    one_line_summary: str = ""
    """Short markup used in program listings."""

    group: ProgramGroup | None = None
    version: str | None = None
    name: str | None = None
    """Program name; defaults to the options record's class name."""


def program(
    summary: str = "",
    one_line_summary: str = "",
    *,
    group: ProgramGroup | None = None,
    version: str | None = None,
    name: str | None = None,
) -> Callable[[T], T]:
    """Class decorator attaching :class:`ProgramProperties` to an options record."""

    def decorator(cls: T) -> T:
        setattr(
            cls,
            _PROPERTIES_ATTRIBUTE,
            ProgramProperties(
                summary=summary,
                one_line_summary=one_line_summary,
                group=group,
                version=version,
                name=name,
            ),
        )
        return cls

    return decorator


def get_program_properties(record_type: type) -> ProgramProperties:
    return getattr(record_type, _PROPERTIES_ATTRIBUTE, None) or ProgramProperties()


def get_program_name(record_type: type) -> str:
    return get_program_properties(record_type).name or record_type.__name__


@define
class ProgramRegistry:
    """Explicit collection of options records, grouped by :class:`ProgramGroup`.

    Passed to :class:`~optbind.CommandLineParser` rather than living as process-wide state.
    """

    _programs: dict[str, type] = field(factory=dict, init=False)

    def register(self, record_type: T) -> T:
        """Register an options record class. May be used as a class decorator."""
        name = get_program_name(record_type)
        existing = self._programs.get(name)
        if existing is not None and existing is not record_type:
            raise DefinitionError(f'Program "{name}" is already registered by {existing.__qualname__}.')
        self._programs[name] = record_type
        return record_type

    def __contains__(self, name: str) -> bool:
        return name in self._programs

    def __getitem__(self, name: str) -> type:
        return self._programs[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._programs)

    def __len__(self) -> int:
        return len(self._programs)

    def groups(self) -> dict[ProgramGroup | None, list[type]]:
        """Registered programs keyed by group, in registration order."""
        out: dict[ProgramGroup | None, list[type]] = {}
        for record_type in self._programs.values():
            out.setdefault(get_program_properties(record_type).group, []).append(record_type)
        return out

    def format_listing(self) -> str:
        from optbind.markup import html_unescape

        lines = []
        groups = self.groups()
        for group in sorted(groups, key=lambda g: "" if g is None else g.name):
            title = "Ungrouped" if group is None else group.name
            if group is not None and group.description:
                title += f":  {html_unescape(group.description)}"
            lines.append(title)
            for record_type in sorted(groups[group], key=get_program_name):
                summary = html_unescape(get_program_properties(record_type).one_line_summary)
                lines.append(f"    {get_program_name(record_type):<40}{summary}".rstrip())
        return "\n".join(lines)

    def print_listing(self, console: "Console") -> None:
        console.print(self.format_listing(), markup=False, highlight=False, soft_wrap=True)
