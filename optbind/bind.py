"""Apply a token stream to the slots of an options record."""

import logging
from collections.abc import Iterable, Sequence

from attrs import define, field

from optbind._convert import convert
from optbind.definition import Slot
from optbind.exceptions import (
    CoercionError,
    NullPositionalError,
    OptbindError,
    OptionsFileOverrideError,
    UnexpectedPositionalError,
    UnknownOptionError,
)
from optbind.token import Source, Token

logger = logging.getLogger(__name__)

CLEAR_SENTINEL = "null"


@define
class Binder:
    """Consumes tokens in order, mutating slots and recording provenance.

    User-input problems are collected in :attr:`errors` rather than raised.
    """

    slots: Sequence[Slot]
    clear_sentinel: str = field(default=CLEAR_SENTINEL, kw_only=True)
    errors: list[OptbindError] = field(factory=list, init=False)

    _by_key: dict[str, Slot] = field(init=False, repr=False)
    _positional: Slot | None = field(init=False, repr=False)

    def __attrs_post_init__(self):
        self._by_key = {key: slot for slot in self.slots for key in slot.definition.keys}
        self._positional = next((slot for slot in self.slots if slot.definition.positional), None)

    def bind(self, tokens: Iterable[Token]) -> bool:
        """Bind every token, returning :obj:`True` if none failed."""
        for token in tokens:
            try:
                self.bind_token(token)
            except OptbindError as e:
                self.errors.append(e)
        return not self.errors

    def _lookup(self, token: Token) -> Slot | None:
        if token.keyword is None:
            if self._positional is None:
                raise UnexpectedPositionalError(token=token)
            if token.value == self.clear_sentinel:
                raise NullPositionalError(token=token, definition=self._positional.definition)
            return self._positional

        try:
            return self._by_key[token.keyword]
        except KeyError:
            pass
        if token.from_options_file:
            logger.warning('Ignoring unknown option "%s" from options file %s', token.keyword, token.path)
            return None
        raise UnknownOptionError(token=token, candidates=tuple(self._by_key))

    def bind_token(self, token: Token):
        slot = self._lookup(token)
        if slot is None:
            return

        if slot.source is Source.DIRECT and token.from_options_file:
            raise OptionsFileOverrideError(token=token, definition=slot.definition)

        if token.keyword is not None and token.value == self.clear_sentinel:
            slot.clear()
        else:
            try:
                value = convert(slot.definition.value_type, token)
            except CoercionError as e:
                e.definition = slot.definition
                raise
            slot.add(value)

        slot.source = token.source
        slot.tokens.append(token)
