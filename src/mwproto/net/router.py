from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

from mwproto.config import CodecLimits, load_codec_limits
from mwproto.errors import MalformedMessage
from mwproto.net.codec import (
    CLIENT_REGISTRY,
    SERVER_REGISTRY,
    decode_client_messages,
    decode_server_messages,
)
from mwproto.net.messages import ClientCmd, InvalidPacket, ServerCmd
from mwproto.net.net_logging import log_event

_LOG = logging.getLogger("mwproto.router")

Direction = Literal["client", "server"]

# A handler receives one decoded message and may return a reply message.
Handler = Callable[[Any], Optional[Any]]

# Discriminator problems are reported as "cmd", everything else as "arguments".
_CMD_ERROR_CODES = frozenset({"invalid_message", "missing_cmd", "unknown_cmd", "invalid_batch"})


class RouterError(RuntimeError):
    pass


def invalid_packet_for(err: MalformedMessage) -> InvalidPacket:
    kind = "cmd" if err.code in _CMD_ERROR_CODES else "arguments"
    return InvalidPacket(type=kind, original_cmd=err.cmd, text=str(err))


@dataclass
class CommandRouter:
    """
    Dispatch decoded messages of one direction by their cmd.

    direction="client" routes messages a server receives from clients;
    direction="server" routes messages a client receives from a server.
    A malformed frame never raises out of handle_payload: it is logged and
    answered with a single InvalidPacket.
    """

    direction: Direction
    limits: CodecLimits = field(default_factory=load_codec_limits)
    handlers: Dict[str, Handler] = field(default_factory=dict)

    last_error: Optional[str] = None

    def on(self, cmd: ClientCmd | ServerCmd | str, handler: Handler) -> None:
        key = cmd.value if isinstance(cmd, (ClientCmd, ServerCmd)) else str(cmd)
        known = CLIENT_REGISTRY if self.direction == "client" else SERVER_REGISTRY
        if key not in {c.value for c in known}:
            raise RouterError(f"cmd {key!r} is not a {self.direction} message")
        self.handlers[key] = handler

    def decode(self, payload: bytes | str) -> List[Any]:
        if self.direction == "client":
            return list(decode_client_messages(payload, limits=self.limits))
        return list(decode_server_messages(payload, limits=self.limits))

    def handle_payload(self, payload: bytes | str, *, peer: str = "") -> List[Any]:
        try:
            msgs = self.decode(payload)
        except MalformedMessage as e:
            self.last_error = e.code
            log_event(
                _LOG,
                "malformed_message",
                peer=peer,
                direction=self.direction,
                code=e.code,
                cmd=e.cmd,
                path=e.path,
                text=str(e),
            )
            return [invalid_packet_for(e)]

        replies: List[Any] = []
        for msg in msgs:
            handler = self.handlers.get(msg.CMD.value)
            if handler is None:
                continue
            reply = handler(msg)
            if reply is not None:
                replies.append(reply)
        return replies
