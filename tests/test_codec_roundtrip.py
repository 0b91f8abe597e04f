from __future__ import annotations

import json
from typing import Any, List

import pytest

from mwproto.net.codec import (
    decode_client_message,
    decode_server_message,
    encode_message,
    message_to_wire,
)
from mwproto.net.messages import (
    Bounce,
    Bounced,
    ClientMessage,
    Connect,
    ConnectUpdate,
    Connected,
    ConnectionRefused,
    DataPackage,
    Get,
    GetDataPackage,
    InvalidPacket,
    LocationChecks,
    LocationInfo,
    LocationScouts,
    Print,
    PrintJSON,
    ReceivedItems,
    Retrieved,
    RoomInfo,
    RoomUpdate,
    Say,
    Set,
    SetNotify,
    SetReply,
    StatusUpdate,
    Sync,
)
from mwproto.net.types import (
    ClientStatus,
    DataPackageObject,
    DataStorageOperation,
    GameData,
    JSONMessagePart,
    NetworkItem,
    NetworkPlayer,
    NetworkSlot,
    Permission,
    PermissionsMap,
    SlotType,
    network_version,
)


def _perms() -> PermissionsMap:
    return PermissionsMap(release=Permission.AUTO_ENABLED, collect=Permission.GOAL, remaining=Permission.DISABLED)


def _item(n: int = 1) -> NetworkItem:
    return NetworkItem(item=100 + n, location=200 + n, player=n, flags=n % 8)


def _player(slot: int) -> NetworkPlayer:
    return NetworkPlayer(team=0, slot=slot, alias=f"P{slot}", name=f"Player{slot}")


CLIENT_SAMPLES: List[ClientMessage] = [
    Connect(name="Alice", version=network_version(), tags=(), uuid="u-1", game="Clique", slot_data=False),
    Connect(
        password="hunter2",
        name="Alice",
        version=network_version(),
        items_handling=0b111,
        tags=("AP", "DeathLink"),
        uuid="u-1",
        game="Clique",
        slot_data=True,
    ),
    ConnectUpdate(items_handling=7, tags=("Tracker",)),
    Sync(),
    LocationChecks(locations=()),
    LocationChecks(locations=(1, 2, 3)),
    LocationScouts(locations=(10, 11), create_as_hint=2),
    StatusUpdate(status=ClientStatus.CLIENT_GOAL),
    Say(text="!hint Sword"),
    GetDataPackage(),
    GetDataPackage(games=("Clique", "Archipelago")),
    Bounce(data={"time": 1.5, "cause": None}),
    Bounce(games=("Clique",), slots=("1", "2"), tags=("DeathLink",), data=[1, "two", None]),
    Get(keys=("_read_hints_0_1", "custom")),
    Set(key="k", default=None, want_reply=False, operations=()),
    Set(
        key="counter",
        default=0,
        want_reply=True,
        operations=(
            DataStorageOperation(replace="add", value=1),
            DataStorageOperation(replace="max", value={"nested": [1, 2]}),
        ),
    ),
    SetNotify(keys=("counter",)),
]


def _room_info(**kw: Any) -> RoomInfo:
    base = dict(
        version=network_version(),
        generator_version=network_version(),
        tags=("AP",),
        password=False,
        permissions=_perms(),
        hint_cost=10,
        location_check_points=1,
        datapackage_checksums={"Clique": "abc123"},
        seed_name="S1",
        time=1700000000.25,
    )
    base.update(kw)
    return RoomInfo(**base)


SERVER_SAMPLES = [
    _room_info(),
    _room_info(games=("Clique", "Archipelago"), password=True),
    ConnectionRefused(errors=()),
    ConnectionRefused(errors=("InvalidSlot", "InvalidPassword")),
    Connected(
        team=0,
        slot=1,
        players=(_player(1), _player(2)),
        missing_locations=(5, 6),
        checked_locations=(),
        slot_data={"goal": 1, "options": {"hard_mode": True}},
        slot_info={
            "1": NetworkSlot(name="Alice", game="Clique", type=SlotType.PLAYER, group_members=()),
            "3": NetworkSlot(name="Team", game="Clique", type=SlotType.GROUP, group_members=(1, 2)),
        },
    ),
    ReceivedItems(index=0, items=(_item(1), _item(2))),
    LocationInfo(locations=(_item(3),)),
    RoomUpdate(),
    RoomUpdate(
        version=network_version(),
        generator_version=network_version(),
        tags=("AP",),
        password=True,
        permissions={"release": Permission.ENABLED},
        hint_cost=5,
        location_check_points=2,
        games=("Clique",),
        datapackage_checksums={"Clique": "def"},
        datapackage_versions={"Clique": 3},
        seed_name="S2",
        time=12.0,
        hint_points=40,
        players=(_player(1),),
        checked_locations=(5,),
        missing_locations=(6,),
    ),
    Print(text="hello"),
    PrintJSON(data=()),
    PrintJSON(
        data=(JSONMessagePart(type="player_id", text="1"), JSONMessagePart(text=" found ", color="red", flags=1, player=2)),
        type="Hint",
        receiving=7,
        item=_item(4),
        found=False,
        countdown=3,
    ),
    DataPackage(
        data=DataPackageObject(
            games={
                "Clique": GameData(item_name_to_id={"Feeling of Satisfaction": 69696969}, location_name_to_id={"The Button": 69696969}),
                "Other": GameData(item_name_to_id={}, location_name_to_id={}, checksum="ff00"),
            }
        )
    ),
    Bounced(data=Bounce(data=None)),
    Bounced(
        games=("Clique",),
        slots=(1, 2),
        tags=("DeathLink",),
        data=Bounce(games=("Clique",), slots=("1",), tags=("DeathLink",), data={"source": "Alice"}),
    ),
    InvalidPacket(type="cmd", text="unknown cmd"),
    InvalidPacket(type="arguments", original_cmd="Set", text="bad operation"),
    Retrieved(keys={}),
    Retrieved(keys={"a": None, "b": [1, {"x": 2}], "c": "s"}),
    SetReply(key="k", value=2, original_value=None),
]


@pytest.mark.parametrize("msg", CLIENT_SAMPLES, ids=lambda m: type(m).__name__)
def test_client_messages_survive_encode_decode(msg: ClientMessage) -> None:
    assert decode_client_message(encode_message(msg)) == msg


@pytest.mark.parametrize("msg", SERVER_SAMPLES, ids=lambda m: type(m).__name__)
def test_server_messages_survive_encode_decode(msg: Any) -> None:
    assert decode_server_message(encode_message(msg)) == msg


def test_cmd_is_a_sibling_of_payload_fields() -> None:
    wire = json.loads(encode_message(Say(text="hi")))
    assert wire == {"cmd": "Say", "text": "hi"}


def test_absent_optional_fields_are_omitted_not_null() -> None:
    wire = message_to_wire(CLIENT_SAMPLES[0])
    assert "password" not in wire
    assert "items_handling" not in wire
    assert wire["tags"] == []
    assert message_to_wire(RoomUpdate()) == {"cmd": "RoomUpdate"}
    assert message_to_wire(GetDataPackage()) == {"cmd": "GetDataPackage"}


def test_null_json_values_are_still_emitted() -> None:
    raw = encode_message(SetReply(key="k", value=1, original_value=None))
    assert raw == b'{"cmd":"SetReply","key":"k","value":1,"original_value":null}'


def test_enums_serialize_as_integer_codes() -> None:
    assert message_to_wire(StatusUpdate(status=ClientStatus.CLIENT_READY)) == {"cmd": "StatusUpdate", "status": 10}
    wire = message_to_wire(_room_info())
    assert wire["permissions"] == {"release": 7, "collect": 2, "remaining": 0}


def test_version_carries_class_tag_on_the_wire() -> None:
    wire = message_to_wire(_room_info())
    assert wire["version"] == {"major": 0, "minor": 5, "build": 0, "class": "Version"}


def test_field_order_follows_declaration() -> None:
    wire = message_to_wire(CLIENT_SAMPLES[1])
    assert list(wire) == ["cmd", "password", "name", "version", "items_handling", "tags", "uuid", "game", "slot_data"]
