# src/mwproto/net/codec.py
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum, IntEnum
from functools import lru_cache
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Tuple,
    Type,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from mwproto.config import DEFAULT_CODEC_LIMITS, CodecLimits
from mwproto.errors import MalformedMessage, WireEncodeError
from mwproto.net.messages import (
    Bounce,
    Bounced,
    ClientCmd,
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
    ServerCmd,
    ServerMessage,
    Set,
    SetNotify,
    SetReply,
    StatusUpdate,
    Sync,
)

Json = Dict[str, Any]

T = TypeVar("T")

# Ids, counts and enum codes are 32-bit signed on every peer.
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

AnyClientMsg = Union[
    Connect,
    ConnectUpdate,
    Sync,
    LocationChecks,
    LocationScouts,
    StatusUpdate,
    Say,
    GetDataPackage,
    Bounce,
    Get,
    Set,
    SetNotify,
]

AnyServerMsg = Union[
    RoomInfo,
    ConnectionRefused,
    Connected,
    ReceivedItems,
    LocationInfo,
    RoomUpdate,
    Print,
    PrintJSON,
    DataPackage,
    Bounced,
    InvalidPacket,
    Retrieved,
    SetReply,
]

CLIENT_REGISTRY: Dict[ClientCmd, Type[ClientMessage]] = {
    ClientCmd.CONNECT: Connect,
    ClientCmd.CONNECT_UPDATE: ConnectUpdate,
    ClientCmd.SYNC: Sync,
    ClientCmd.LOCATION_CHECKS: LocationChecks,
    ClientCmd.LOCATION_SCOUTS: LocationScouts,
    ClientCmd.STATUS_UPDATE: StatusUpdate,
    ClientCmd.SAY: Say,
    ClientCmd.GET_DATA_PACKAGE: GetDataPackage,
    ClientCmd.BOUNCE: Bounce,
    ClientCmd.GET: Get,
    ClientCmd.SET: Set,
    ClientCmd.SET_NOTIFY: SetNotify,
}

SERVER_REGISTRY: Dict[ServerCmd, Type[ServerMessage]] = {
    ServerCmd.ROOM_INFO: RoomInfo,
    ServerCmd.CONNECTION_REFUSED: ConnectionRefused,
    ServerCmd.CONNECTED: Connected,
    ServerCmd.RECEIVED_ITEMS: ReceivedItems,
    ServerCmd.LOCATION_INFO: LocationInfo,
    ServerCmd.ROOM_UPDATE: RoomUpdate,
    ServerCmd.PRINT: Print,
    ServerCmd.PRINT_JSON: PrintJSON,
    ServerCmd.DATA_PACKAGE: DataPackage,
    ServerCmd.BOUNCED: Bounced,
    ServerCmd.INVALID_PACKET: InvalidPacket,
    ServerCmd.RETRIEVED: Retrieved,
    ServerCmd.SET_REPLY: SetReply,
}


# ----------------------------
# Raw JSON
# ----------------------------

def dumps_json(obj: Any) -> bytes:
    try:
        return json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise WireEncodeError("encode_failed", f"encode failed: {e}") from e


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-JSON constant {token}")


def loads_json(data: bytes | str, *, limits: Optional[CodecLimits] = None) -> Any:
    lim = limits or DEFAULT_CODEC_LIMITS
    try:
        size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
        if size > lim.max_payload_bytes:
            raise MalformedMessage("payload_too_large", f"payload of {size} bytes exceeds {lim.max_payload_bytes}")
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        raw = json.loads(data, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise MalformedMessage("invalid_json", f"invalid json: {e}") from e
    except (UnicodeDecodeError, UnicodeEncodeError) as e:
        raise MalformedMessage("invalid_utf8", f"invalid utf-8: {e}") from e
    except RecursionError as e:
        raise MalformedMessage("too_deep", "json nesting exceeds parser recursion limit") from e
    except ValueError as e:
        # NaN/Infinity, integer literals past the interpreter's digit limit
        raise MalformedMessage("invalid_json", f"invalid json: {e}") from e
    _check_depth(raw, lim.max_json_depth)
    return raw


def _check_depth(raw: Any, max_depth: int) -> None:
    stack: List[Tuple[Any, int]] = [(raw, 1)]
    while stack:
        v, depth = stack.pop()
        if isinstance(v, dict):
            children = list(v.values())
        elif isinstance(v, list):
            children = v
        else:
            continue
        if depth > max_depth:
            raise MalformedMessage("too_deep", f"json nesting exceeds {max_depth} levels")
        stack.extend((c, depth + 1) for c in children)


# ----------------------------
# Field coercion
# ----------------------------

def _fail(code: str, msg: str, cmd: Optional[str], path: str) -> MalformedMessage:
    where = f" at '{path}'" if path else ""
    return MalformedMessage(code, f"{msg}{where}", cmd=cmd, path=path or None)


def _coerce_int(v: Any, cmd: Optional[str], path: str) -> int:
    if isinstance(v, bool) or not isinstance(v, int):
        raise _fail("invalid_type", f"expected int, got {type(v).__name__}", cmd, path)
    if not INT32_MIN <= v <= INT32_MAX:
        raise _fail("invalid_type", f"int {v} outside 32-bit range", cmd, path)
    return v


def _coerce_float(v: Any, cmd: Optional[str], path: str) -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise _fail("invalid_type", f"expected number, got {type(v).__name__}", cmd, path)
    return float(v)


def _coerce_bool(v: Any, cmd: Optional[str], path: str) -> bool:
    if not isinstance(v, bool):
        raise _fail("invalid_type", f"expected bool, got {type(v).__name__}", cmd, path)
    return v


def _coerce_str(v: Any, cmd: Optional[str], path: str) -> str:
    if not isinstance(v, str):
        raise _fail("invalid_type", f"expected str, got {type(v).__name__}", cmd, path)
    return v


def _coerce_enum(enum_cls: Type[IntEnum], v: Any, cmd: Optional[str], path: str) -> IntEnum:
    code = _coerce_int(v, cmd, path)
    try:
        return enum_cls(code)
    except ValueError as e:
        raise _fail("invalid_enum", f"bad value provided for {enum_cls.__name__} ({code})", cmd, path) from e


def _tupleize(v: Any, cmd: Optional[str], path: str) -> list:
    if not isinstance(v, list):
        raise _fail("invalid_type", f"expected list, got {type(v).__name__}", cmd, path)
    return v


def _optional_inner(tp: Any) -> Optional[Any]:
    """Return X for Optional[X], else None."""
    if get_origin(tp) is not Union or type(None) not in get_args(tp):
        return None
    rest = [a for a in get_args(tp) if a is not type(None)]
    return rest[0] if len(rest) == 1 else None


@lru_cache(maxsize=None)
def _field_specs(cls: type) -> Tuple[Tuple[str, str, Any, bool], ...]:
    """(attr name, wire key, type, optional) per dataclass field, in declaration order."""
    hints = get_type_hints(cls)
    out = []
    for f in fields(cls):
        tp = hints[f.name]
        out.append((f.name, f.metadata.get("wire", f.name), tp, _optional_inner(tp) is not None))
    return tuple(out)


def _decode_value(tp: Any, v: Any, cmd: Optional[str], path: str) -> Any:
    if tp is Any:
        return v

    inner = _optional_inner(tp)
    if inner is not None:
        if v is None:
            return None
        return _decode_value(inner, v, cmd, path)

    if isinstance(tp, type) and issubclass(tp, IntEnum):
        return _coerce_enum(tp, v, cmd, path)
    if tp is bool:
        return _coerce_bool(v, cmd, path)
    if tp is int:
        return _coerce_int(v, cmd, path)
    if tp is float:
        return _coerce_float(v, cmd, path)
    if tp is str:
        return _coerce_str(v, cmd, path)
    if is_dataclass(tp):
        return _decode_dataclass(tp, v, cmd, path)

    origin = get_origin(tp)
    if origin is Literal:
        if v not in get_args(tp):
            raise _fail("invalid_literal", f"expected one of {list(get_args(tp))!r}, got {v!r}", cmd, path)
        return v
    if origin is tuple:
        (elem_tp, _ellipsis) = get_args(tp)
        items = _tupleize(v, cmd, path)
        return tuple(_decode_value(elem_tp, x, cmd, f"{path}[{i}]") for (i, x) in enumerate(items))
    if origin is dict:
        (_key_tp, val_tp) = get_args(tp)
        if not isinstance(v, dict):
            raise _fail("invalid_type", f"expected object, got {type(v).__name__}", cmd, path)
        return {k: _decode_value(val_tp, x, cmd, f"{path}.{k}" if path else k) for (k, x) in v.items()}

    raise _fail("unsupported_type", f"no decoder for {tp!r}", cmd, path)


def _decode_dataclass(cls: Type[T], raw: Any, cmd: Optional[str], path: str) -> T:
    if not isinstance(raw, dict):
        raise _fail("invalid_type", f"expected object for {cls.__name__}, got {type(raw).__name__}", cmd, path)

    kwargs: Json = {}
    for (name, wire, tp, optional) in _field_specs(cls):
        fpath = f"{path}.{wire}" if path else wire
        if wire not in raw:
            if optional:
                kwargs[name] = None
                continue
            raise _fail("missing_field", "missing required field", cmd, fpath)
        kwargs[name] = _decode_value(tp, raw[wire], cmd, fpath)
    # unknown keys are ignored for forward compatibility
    return cls(**kwargs)


def value_from_wire(cls: Type[T], raw: Any) -> T:
    """Decode a standalone value type (e.g. a flat Hint pulled from data storage)."""
    return _decode_dataclass(cls, raw, None, "")


# ----------------------------
# Messages
# ----------------------------

def _read_cmd(raw: Any) -> str:
    if not isinstance(raw, dict):
        raise MalformedMessage("invalid_message", "wire message must be an object")
    cmd = raw.get("cmd")
    if cmd is None:
        raise MalformedMessage("missing_cmd", "wire message missing 'cmd'")
    if not isinstance(cmd, str):
        raise MalformedMessage("missing_cmd", f"invalid 'cmd' field: {type(cmd).__name__}")
    return cmd


def client_message_from_wire(raw: Any) -> AnyClientMsg:
    cmd = _read_cmd(raw)
    try:
        cls = CLIENT_REGISTRY[ClientCmd(cmd)]
    except ValueError as e:
        raise MalformedMessage("unknown_cmd", f"unknown client cmd: {cmd}", cmd=cmd) from e
    return _decode_dataclass(cls, raw, cmd, "")  # type: ignore[return-value]


def server_message_from_wire(raw: Any) -> AnyServerMsg:
    cmd = _read_cmd(raw)
    try:
        cls = SERVER_REGISTRY[ServerCmd(cmd)]
    except ValueError as e:
        raise MalformedMessage("unknown_cmd", f"unknown server cmd: {cmd}", cmd=cmd) from e
    return _decode_dataclass(cls, raw, cmd, "")  # type: ignore[return-value]


def _batch(raw: Any) -> list:
    if isinstance(raw, dict):
        return [raw]
    if isinstance(raw, list):
        return raw
    raise MalformedMessage("invalid_batch", f"frame must be an object or a list of objects, got {type(raw).__name__}")


def decode_client_message(payload: bytes | str, *, limits: Optional[CodecLimits] = None) -> AnyClientMsg:
    return client_message_from_wire(loads_json(payload, limits=limits))


def decode_server_message(payload: bytes | str, *, limits: Optional[CodecLimits] = None) -> AnyServerMsg:
    return server_message_from_wire(loads_json(payload, limits=limits))


def decode_client_messages(payload: bytes | str, *, limits: Optional[CodecLimits] = None) -> List[AnyClientMsg]:
    """Decode a frame (JSON array of commands, or one bare command). Fails on the first bad command."""
    return [client_message_from_wire(m) for m in _batch(loads_json(payload, limits=limits))]


def decode_server_messages(payload: bytes | str, *, limits: Optional[CodecLimits] = None) -> List[AnyServerMsg]:
    return [server_message_from_wire(m) for m in _batch(loads_json(payload, limits=limits))]


# ----------------------------
# Encoding
# ----------------------------

def _encode_value(v: Any) -> Any:
    if v is None or isinstance(v, (bool, str)):
        return v
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, (int, float)):
        return v
    if is_dataclass(v) and not isinstance(v, type):
        return value_to_wire(v)
    if isinstance(v, (tuple, list)):
        return [_encode_value(x) for x in v]
    if isinstance(v, dict):
        return {str(k): _encode_value(x) for (k, x) in v.items()}
    raise WireEncodeError("unsupported_value", f"cannot encode {type(v).__name__}")


def value_to_wire(obj: Any) -> Json:
    if not is_dataclass(obj) or isinstance(obj, type):
        raise WireEncodeError("not_dataclass", "value must be a dataclass instance")
    out: Json = {}
    for (name, wire, _tp, optional) in _field_specs(type(obj)):
        v = getattr(obj, name)
        if v is None and optional:
            continue
        out[wire] = _encode_value(v)
    return out


def message_to_wire(msg: ClientMessage | ServerMessage) -> Json:
    cmd = getattr(type(msg), "CMD", None)
    if not isinstance(cmd, (ClientCmd, ServerCmd)):
        raise WireEncodeError("not_message", f"{type(msg).__name__} is not a message variant")
    out: Json = {"cmd": cmd.value}
    out.update(value_to_wire(msg))
    return out


def encode_message(msg: ClientMessage | ServerMessage) -> bytes:
    return dumps_json(message_to_wire(msg))


def encode_messages(msgs: List[ClientMessage] | List[ServerMessage]) -> bytes:
    return dumps_json([message_to_wire(m) for m in msgs])
