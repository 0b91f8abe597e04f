# src/mwproto/net/hints.py
"""
Hint normalization.

Two wire shapes describe the same fact:
  - a hint-styled PrintJSON (receiving / item / found as optional fields)
  - the flat Hint record kept in server data storage

Both converge on HintData. Importance is never trusted from the wire; it is
recomputed from item flags through one predicate, which a game-logic layer
may replace.
"""

from __future__ import annotations

from typing import Callable, Union

from mwproto.errors import MissingRequiredField
from mwproto.net.messages import PrintJSON
from mwproto.net.types import Hint, HintData, ItemFlags, NetworkItem

ImportancePredicate = Callable[[int], bool]


def is_important(flags: int) -> bool:
    return bool(flags & ItemFlags.PROGRESSION)


def hint_from_print_json(msg: PrintJSON, predicate: ImportancePredicate = is_important) -> HintData:
    cmd = msg.CMD.value
    if msg.item is None:
        raise MissingRequiredField("item", cmd)
    if msg.receiving is None:
        raise MissingRequiredField("receiving", cmd)
    if msg.found is None:
        raise MissingRequiredField("found", cmd)
    return HintData(
        receiving=msg.receiving,
        item=msg.item,
        found=msg.found,
        is_important=predicate(msg.item.flags),
    )


def hint_from_flat(hint: Hint, predicate: ImportancePredicate = is_important) -> HintData:
    item = NetworkItem(
        item=hint.item,
        location=hint.location,
        player=hint.finding_player,
        flags=hint.item_flags,
    )
    return HintData(
        receiving=hint.receiving_player,
        item=item,
        found=hint.found,
        is_important=predicate(hint.item_flags),
    )


def to_hint_data(value: Union[PrintJSON, Hint], predicate: ImportancePredicate = is_important) -> HintData:
    if isinstance(value, PrintJSON):
        return hint_from_print_json(value, predicate)
    if isinstance(value, Hint):
        return hint_from_flat(value, predicate)
    raise TypeError(f"cannot build HintData from {type(value).__name__}")
