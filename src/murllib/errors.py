"""Error kinds raised by murllib.

StructuralError: the text handed to a parser cannot form a URI.
StateError: the pending edits of a MURL, once merged, do not re-parse.
"""

import enum

from typing import Self


class ErrorKind(enum.Enum):
    STRUCTURAL = "structural"
    STATE = "state"


class URIError(ValueError):
    kind: ErrorKind

    def __init__(self: Self, reason: str, text: str | None = None) -> None:
        self.reason: str = reason
        self.text: str | None = text
        if text is None:
            super().__init__(reason)
        else:
            super().__init__(f"Cannot parse as URI: {text!r}. Reason: {reason}")


class StructuralError(URIError):
    kind = ErrorKind.STRUCTURAL


class StateError(URIError):
    kind = ErrorKind.STATE
