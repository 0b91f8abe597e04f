from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict

from mwproto.errors import MalformedMessage
from mwproto.net.messages import RoomInfo, RoomUpdate
from mwproto.net.types import PERMISSION_NAMES, PermissionsMap

# RoomUpdate fields that overwrite the RoomInfo field of the same name.
_ROOM_INFO_FIELDS = (
    "version",
    "generator_version",
    "tags",
    "password",
    "hint_cost",
    "location_check_points",
    "games",
    "datapackage_checksums",
    "seed_name",
    "time",
)


def _merge_permissions(prior: PermissionsMap, update: Dict[str, Any]) -> PermissionsMap:
    unknown = sorted(k for k in update if k not in PERMISSION_NAMES)
    if unknown:
        raise MalformedMessage(
            "invalid_permission",
            f"unknown permission name(s): {', '.join(unknown)}",
            cmd=RoomUpdate.CMD.value,
            path="permissions",
        )
    return replace(prior, **update)


def merge_room_update(info: RoomInfo, update: RoomUpdate) -> RoomInfo:
    """Apply the non-absent RoomInfo fields of `update` onto `info`.

    RoomUpdate-only fields (hint_points, players, checked/missing locations,
    datapackage_versions) have no RoomInfo counterpart and are left to the caller.
    """
    changes: Dict[str, Any] = {}
    for name in _ROOM_INFO_FIELDS:
        v = getattr(update, name)
        if v is not None:
            changes[name] = v
    if update.permissions is not None:
        changes["permissions"] = _merge_permissions(info.permissions, update.permissions)
    if not changes:
        return info
    return replace(info, **changes)
