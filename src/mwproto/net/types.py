from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

# Arbitrary JSON (null/bool/number/string/array/object). Carried opaquely.
JsonValue = Any

GameName = str
SlotId = int


class Permission(IntEnum):
    DISABLED = 0
    ENABLED = 1
    GOAL = 2
    # bit-flag-like: 6 = auto, 7 = auto | enabled
    AUTO = 6
    AUTO_ENABLED = 7


class SlotType(IntEnum):
    SPECTATOR = 0
    PLAYER = 1
    GROUP = 2


class ClientStatus(IntEnum):
    CLIENT_UNKNOWN = 0
    CLIENT_CONNECTED = 5
    CLIENT_READY = 10
    CLIENT_PLAYING = 20
    CLIENT_GOAL = 30


class ItemFlags(IntFlag):
    NONE = 0
    PROGRESSION = 0b001
    USEFUL = 0b010
    TRAP = 0b100


@dataclass(frozen=True, slots=True)
class NetworkVersion:
    major: int
    minor: int
    build: int
    # Wire key is "class"; value is always "Version".
    class_: Literal["Version"] = field(default="Version", metadata={"wire": "class"})

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, self.build)


def network_version() -> NetworkVersion:
    return NetworkVersion(major=0, minor=5, build=0)


@dataclass(frozen=True, slots=True)
class NetworkPlayer:
    team: int
    slot: SlotId
    alias: str
    name: str


@dataclass(frozen=True, slots=True)
class NetworkItem:
    """Item `item` sits at `location` in the world of `player`, with property bits `flags`."""

    item: int
    location: int
    player: SlotId
    flags: int


@dataclass(frozen=True, slots=True)
class NetworkSlot:
    name: str
    game: GameName
    type: SlotType
    group_members: Tuple[SlotId, ...] = ()


@dataclass(frozen=True, slots=True)
class PermissionsMap:
    release: Permission
    collect: Permission
    remaining: Permission


PERMISSION_NAMES: Tuple[str, ...] = ("release", "collect", "remaining")


@dataclass(frozen=True, slots=True)
class JSONMessagePart:
    type: Optional[str] = None
    text: Optional[str] = None
    color: Optional[str] = None
    flags: Optional[int] = None
    player: Optional[SlotId] = None


@dataclass(frozen=True, slots=True)
class DataStorageOperation:
    # Operation kind ("replace", "default", "add", "max", ...). Interpreted by the server.
    replace: str
    value: JsonValue


@dataclass(frozen=True, slots=True)
class GameData:
    item_name_to_id: Dict[str, int]
    location_name_to_id: Dict[str, int]
    checksum: Optional[str] = None

    def item_name(self, item_id: int) -> Optional[str]:
        for name, i in self.item_name_to_id.items():
            if i == item_id:
                return name
        return None

    def location_name(self, location_id: int) -> Optional[str]:
        for name, i in self.location_name_to_id.items():
            if i == location_id:
                return name
        return None


@dataclass(frozen=True, slots=True)
class DataPackageObject:
    games: Dict[GameName, GameData]

    def stale_games(self, checksums: Mapping[GameName, str]) -> List[GameName]:
        """
        Names of games whose locally cached tables cannot be trusted against a
        room's advertised `datapackage_checksums`: missing from the cache, or
        cached with a different (or no) checksum.
        """
        out: List[GameName] = []
        for game, checksum in checksums.items():
            cached = self.games.get(game)
            if cached is None or cached.checksum != checksum:
                out.append(game)
        return sorted(out)


@dataclass(frozen=True, slots=True)
class Hint:
    """Flat legacy hint record. Importance is never carried; it is derived from item_flags."""

    receiving_player: SlotId
    finding_player: SlotId
    location: int
    item: int
    found: bool
    entrance: str
    item_flags: int


@dataclass(frozen=True, slots=True)
class HintData:
    receiving: SlotId
    item: NetworkItem
    found: bool
    is_important: bool
