from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple

from mwproto.net.types import (
    ClientStatus,
    DataPackageObject,
    DataStorageOperation,
    GameName,
    JSONMessagePart,
    JsonValue,
    NetworkItem,
    NetworkPlayer,
    NetworkSlot,
    NetworkVersion,
    Permission,
    PermissionsMap,
    SlotId,
)


class ClientCmd(str, Enum):
    CONNECT = "Connect"
    CONNECT_UPDATE = "ConnectUpdate"
    SYNC = "Sync"
    LOCATION_CHECKS = "LocationChecks"
    LOCATION_SCOUTS = "LocationScouts"
    STATUS_UPDATE = "StatusUpdate"
    SAY = "Say"
    GET_DATA_PACKAGE = "GetDataPackage"
    BOUNCE = "Bounce"
    GET = "Get"
    SET = "Set"
    SET_NOTIFY = "SetNotify"


class ServerCmd(str, Enum):
    ROOM_INFO = "RoomInfo"
    CONNECTION_REFUSED = "ConnectionRefused"
    CONNECTED = "Connected"
    RECEIVED_ITEMS = "ReceivedItems"
    LOCATION_INFO = "LocationInfo"
    ROOM_UPDATE = "RoomUpdate"
    PRINT = "Print"
    PRINT_JSON = "PrintJSON"
    DATA_PACKAGE = "DataPackage"
    BOUNCED = "Bounced"
    INVALID_PACKET = "InvalidPacket"
    RETRIEVED = "Retrieved"
    SET_REPLY = "SetReply"


@dataclass(frozen=True, slots=True)
class ClientMessage:
    CMD: ClassVar[ClientCmd]


@dataclass(frozen=True, slots=True)
class ServerMessage:
    CMD: ClassVar[ServerCmd]


# ----------------------------
# Client -> server
# ----------------------------

@dataclass(frozen=True, slots=True, kw_only=True)
class Connect(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.CONNECT

    password: Optional[str] = None
    name: str
    version: NetworkVersion
    items_handling: Optional[int] = None
    tags: Tuple[str, ...]
    uuid: str
    game: GameName
    slot_data: bool


@dataclass(frozen=True, slots=True, kw_only=True)
class ConnectUpdate(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.CONNECT_UPDATE

    items_handling: int
    tags: Tuple[str, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class Sync(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.SYNC


@dataclass(frozen=True, slots=True, kw_only=True)
class LocationChecks(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.LOCATION_CHECKS

    locations: Tuple[int, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class LocationScouts(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.LOCATION_SCOUTS

    locations: Tuple[int, ...]
    create_as_hint: int


@dataclass(frozen=True, slots=True, kw_only=True)
class StatusUpdate(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.STATUS_UPDATE

    status: ClientStatus


@dataclass(frozen=True, slots=True, kw_only=True)
class Say(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.SAY

    text: str


@dataclass(frozen=True, slots=True, kw_only=True)
class GetDataPackage(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.GET_DATA_PACKAGE

    games: Optional[Tuple[GameName, ...]] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Bounce(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.BOUNCE

    games: Optional[Tuple[GameName, ...]] = None
    # Slot filters travel as strings here; Bounced echoes them as ints.
    slots: Optional[Tuple[str, ...]] = None
    tags: Optional[Tuple[str, ...]] = None
    data: JsonValue


@dataclass(frozen=True, slots=True, kw_only=True)
class Get(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.GET

    keys: Tuple[str, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class Set(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.SET

    key: str
    default: JsonValue
    want_reply: bool
    operations: Tuple[DataStorageOperation, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class SetNotify(ClientMessage):
    CMD: ClassVar[ClientCmd] = ClientCmd.SET_NOTIFY

    keys: Tuple[str, ...]


# ----------------------------
# Server -> client
# ----------------------------

@dataclass(frozen=True, slots=True, kw_only=True)
class RoomInfo(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.ROOM_INFO

    version: NetworkVersion
    generator_version: NetworkVersion
    tags: Tuple[str, ...]
    password: bool
    permissions: PermissionsMap
    hint_cost: int
    location_check_points: int
    games: Optional[Tuple[GameName, ...]] = None
    datapackage_checksums: Dict[GameName, str]
    seed_name: str
    time: float


@dataclass(frozen=True, slots=True, kw_only=True)
class ConnectionRefused(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.CONNECTION_REFUSED

    errors: Tuple[str, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class Connected(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.CONNECTED

    team: int
    slot: SlotId
    players: Tuple[NetworkPlayer, ...]
    missing_locations: Tuple[int, ...]
    checked_locations: Tuple[int, ...]
    slot_data: JsonValue
    # Keys are slot ids rendered as strings, as JSON object keys must be.
    slot_info: Dict[str, NetworkSlot]


@dataclass(frozen=True, slots=True, kw_only=True)
class ReceivedItems(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.RECEIVED_ITEMS

    index: int
    items: Tuple[NetworkItem, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class LocationInfo(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.LOCATION_INFO

    locations: Tuple[NetworkItem, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class RoomUpdate(ServerMessage):
    """Sparse diff of RoomInfo. Every field may be absent (None)."""

    CMD: ClassVar[ServerCmd] = ServerCmd.ROOM_UPDATE

    # RoomInfo fields
    version: Optional[NetworkVersion] = None
    generator_version: Optional[NetworkVersion] = None
    tags: Optional[Tuple[str, ...]] = None
    password: Optional[bool] = None
    permissions: Optional[Dict[str, Permission]] = None
    hint_cost: Optional[int] = None
    location_check_points: Optional[int] = None
    games: Optional[Tuple[GameName, ...]] = None
    datapackage_checksums: Optional[Dict[GameName, str]] = None
    # legacy integer versioning, superseded by datapackage_checksums
    datapackage_versions: Optional[Dict[GameName, int]] = None
    seed_name: Optional[str] = None
    time: Optional[float] = None

    # RoomUpdate only
    hint_points: Optional[int] = None
    players: Optional[Tuple[NetworkPlayer, ...]] = None
    checked_locations: Optional[Tuple[int, ...]] = None
    missing_locations: Optional[Tuple[int, ...]] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class Print(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.PRINT

    text: str


@dataclass(frozen=True, slots=True, kw_only=True)
class PrintJSON(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.PRINT_JSON

    data: Tuple[JSONMessagePart, ...]
    type: Optional[str] = None
    receiving: Optional[SlotId] = None
    item: Optional[NetworkItem] = None
    found: Optional[bool] = None
    countdown: Optional[int] = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DataPackage(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.DATA_PACKAGE

    data: DataPackageObject


@dataclass(frozen=True, slots=True, kw_only=True)
class Bounced(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.BOUNCED

    games: Optional[Tuple[GameName, ...]] = None
    slots: Optional[Tuple[SlotId, ...]] = None
    tags: Optional[Tuple[str, ...]] = None
    # The originating Bounce payload, without its cmd key.
    data: Bounce


@dataclass(frozen=True, slots=True, kw_only=True)
class InvalidPacket(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.INVALID_PACKET

    type: str
    original_cmd: Optional[str] = None
    text: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Retrieved(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.RETRIEVED

    keys: Dict[str, JsonValue]


@dataclass(frozen=True, slots=True, kw_only=True)
class SetReply(ServerMessage):
    CMD: ClassVar[ServerCmd] = ServerCmd.SET_REPLY

    key: str
    value: JsonValue
    original_value: JsonValue
