# src/mwproto/errors.py
from __future__ import annotations

from typing import Optional


class ProtocolError(RuntimeError):
    """Base for every error raised by the schema layer. Never fatal to the process."""

    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code


class MalformedMessage(ProtocolError):
    """A wire payload that does not map onto exactly one message variant.

    Attributes:
      code: machine-readable reason (unknown_cmd, missing_field, invalid_enum, ...)
      cmd:  the discriminator of the offending message, when it was readable
      path: dotted field path of the offending value, e.g. "items[2].flags"
    """

    def __init__(self, code: str, msg: str, *, cmd: Optional[str] = None, path: Optional[str] = None) -> None:
        super().__init__(code, msg)
        self.cmd = cmd
        self.path = path


class WireEncodeError(ProtocolError):
    pass


class MissingRequiredField(ProtocolError):
    """Raised when a hint conversion needs a field the source message left out."""

    def __init__(self, field: str, cmd: str) -> None:
        super().__init__("missing_required_field", f"`{field}` field is required, but missing from {cmd} packet")
        self.field = field
        self.cmd = cmd
