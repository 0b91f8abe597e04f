# src/mwproto/net/__init__.py
"""
Multiworld protocol: network schema package

  - types: shared value types (versions, players, items, slots, permissions, data packages)
  - messages: client and server message variants (frozen dataclasses), keyed by cmd
  - codec: strict JSON decoding/encoding + registry dispatch
  - hints: importance predicate and HintData converters
  - room: RoomUpdate merge onto RoomInfo
  - router: cmd dispatch, malformed frames answered with InvalidPacket

Transport, sessions and persistence live outside this package and consume
these types as plain values.
"""

from __future__ import annotations

__all__ = [
    "types",
    "messages",
    "codec",
    "hints",
    "room",
    "router",
    "net_logging",
]
