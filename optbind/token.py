from enum import Enum

from attrs import field

from optbind.utils import frozen


class Source(str, Enum):
    """Where a token came from."""

    DIRECT = "cli"
    OPTIONS_FILE = "options-file"


@frozen(kw_only=True)
class Token:
    """Tracks how a user supplied a value to the application.

    A token without a ``keyword`` is a positional value.
    """

    keyword: str | None = None
    value: str = ""
    source: Source = Source.DIRECT
    path: str | None = field(default=None)
    """Options file the token was read from, if any."""

    @property
    def from_options_file(self) -> bool:
        return self.source is Source.OPTIONS_FILE

    def __str__(self):
        if self.keyword is None:
            return self.value
        return f"{self.keyword}={self.value}"
