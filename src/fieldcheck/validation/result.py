"""Validation result model.

A Result describes one validated subtree: a field rule, a record, a collection
element or a whole ``validate`` call. Results are immutable; merging returns a
new parent and leaves the child untouched, so a merged child is simply never
looked at again.

Nested failures are folded into flat text with three wrappers:

- ``label(message)``   failures inside a nested record reached through a field
- ``[message]``        failures of a collection
- ``{message}``        failures of one collection element

e.g. ``lines([{qty integer part must not exceed 3 digits}])``.
"""

from dataclasses import dataclass, replace
from typing import Any, Iterable

MESSAGE_SEPARATOR = ","


@dataclass(frozen=True)
class Result:
    """Validity and formatted error messages of one subtree.

    Attributes:
        description: Label used when this result is nested into a parent
        error_messages: Messages in the order they were found
    """

    description: str | None = None
    error_messages: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        """True iff there are no error messages."""
        return not self.error_messages

    @property
    def error_message(self) -> str:
        return MESSAGE_SEPARATOR.join(self.error_messages)

    def with_error(self, message: str | None) -> "Result":
        """Add a message; empty messages are ignored."""
        if not message:
            return self
        return replace(self, error_messages=self.error_messages + (message,))

    def merge(self, child: "Result", in_collection: bool = False) -> "Result":
        """Fold a child result into this one (scalar merge).

        Valid children change nothing. Otherwise the child's message is
        wrapped as ``{message}`` for a collection element, as
        ``description(message)`` when the child has a description, or used
        as is.
        """
        if child.valid:
            return self
        message = child.error_message
        if in_collection:
            message = "{" + message + "}"
        elif child.description:
            message = f"{child.description}({message})"
        return self.with_error(message)

    def merge_list(self, children: Iterable["Result"]) -> "Result":
        """Fold the results of every element of a collection (list merge)."""
        elements = Result()
        for child in children:
            elements = elements.merge(child, in_collection=True)
        if elements.valid:
            return self
        return self.merge(Result(error_messages=(f"[{elements.error_message}]",)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "description": self.description,
            "errorMessages": list(self.error_messages),
            "errorMessage": self.error_message,
        }
