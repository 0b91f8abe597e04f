# src/mwproto/__init__.py
"""
mwproto: multiworld coordination protocol, message schema layer.

  - mwproto.net: message taxonomy, value types, codec, hint converters
  - mwproto.errors: error taxonomy
  - mwproto.config: codec limits
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["net", "errors", "config", "env"]
