"""Codec limits.

Decoding untrusted frames bounds payload size and JSON nesting depth before
any field is looked at. Defaults suit a websocket peer; deployments override
them through the environment:

    MWPROTO_MAX_PAYLOAD_BYTES   (default 16 MiB)
    MWPROTO_MAX_JSON_DEPTH      (default 64)
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mwproto.env import load_dotenv_if_present


class CodecLimits(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    max_payload_bytes: int = Field(default=16 * 1024 * 1024, ge=1, description="Largest accepted frame")
    max_json_depth: int = Field(default=64, ge=1, description="Deepest accepted array/object nesting")


DEFAULT_CODEC_LIMITS = CodecLimits()


def _env_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def load_codec_limits() -> CodecLimits:
    """Build CodecLimits from the environment (after loading .env if present).

    Raises ValueError (pydantic ValidationError) on non-integer or non-positive values.
    """
    load_dotenv_if_present()
    overrides = {}
    size = _env_int("MWPROTO_MAX_PAYLOAD_BYTES")
    if size is not None:
        overrides["max_payload_bytes"] = size
    depth = _env_int("MWPROTO_MAX_JSON_DEPTH")
    if depth is not None:
        overrides["max_json_depth"] = depth
    return CodecLimits(**overrides)
