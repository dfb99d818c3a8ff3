"""Post-binding structural checks: required values, cardinality and mutual exclusion."""

from collections.abc import Sequence

from optbind.definition import Slot
from optbind.exceptions import CardinalityError, MissingArgumentError, MutuallyExclusiveError, OptbindError


def validate(slots: Sequence[Slot]) -> list[OptbindError]:
    """Check every slot, returning all violations found.

    Mutex peers are evaluated strictly from each definition's own declared list;
    a definition with peers is only required when none of its peers hold a value.
    """
    by_name = {slot.definition.name: slot for slot in slots}
    errors: list[OptbindError] = []

    for slot in slots:
        definition = slot.definition
        peers = [by_name[name] for name in definition.mutex]
        relieved = any(peer.has_value() for peer in peers)

        if slot.has_value():
            if conflicts := tuple(peer.definition.name for peer in peers if peer.has_value()):
                errors.append(MutuallyExclusiveError(definition=definition, conflicts=conflicts))
        elif not definition.collection and not (definition.optional or definition.default_present or relieved):
            errors.append(MissingArgumentError(definition=definition))

        if definition.collection and not (relieved and not slot.has_value()):
            count = len(slot.get())
            maximum = definition.max_elements
            if count < definition.min_elements or (maximum is not None and count > maximum):
                errors.append(CardinalityError(definition=definition, count=count))

    return errors
