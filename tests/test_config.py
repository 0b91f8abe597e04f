from __future__ import annotations

import os
from pathlib import Path

import pytest

from mwproto import env
from mwproto.config import DEFAULT_CODEC_LIMITS, CodecLimits, load_codec_limits


def test_defaults_without_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MWPROTO_MAX_PAYLOAD_BYTES", raising=False)
    monkeypatch.delenv("MWPROTO_MAX_JSON_DEPTH", raising=False)
    assert load_codec_limits() == DEFAULT_CODEC_LIMITS
    assert DEFAULT_CODEC_LIMITS.max_payload_bytes == 16 * 1024 * 1024
    assert DEFAULT_CODEC_LIMITS.max_json_depth == 64


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MWPROTO_MAX_PAYLOAD_BYTES", "1024")
    monkeypatch.setenv("MWPROTO_MAX_JSON_DEPTH", " 8 ")
    assert load_codec_limits() == CodecLimits(max_payload_bytes=1024, max_json_depth=8)


@pytest.mark.parametrize("raw", ["abc", "0", "-5", "1.5"])
def test_invalid_environment_values_raise(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("MWPROTO_MAX_JSON_DEPTH", raw)
    with pytest.raises(ValueError):
        load_codec_limits()


def test_limits_are_frozen() -> None:
    with pytest.raises(Exception):
        DEFAULT_CODEC_LIMITS.max_json_depth = 1  # type: ignore[misc]


def test_dotenv_file_is_loaded_once_without_overriding(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    dotenv = tmp_path / "limits.env"
    dotenv.write_text("MWPROTO_TEST_DOTENV_MARKER=from-file\nMWPROTO_TEST_DOTENV_KEEP=from-file\n", encoding="utf-8")
    monkeypatch.setattr(env, "_LOADED", False)
    monkeypatch.setenv("MWPROTO_TEST_DOTENV_KEEP", "from-env")
    try:
        assert env.load_dotenv_if_present(str(dotenv)) is True
        assert os.environ["MWPROTO_TEST_DOTENV_MARKER"] == "from-file"
        assert os.environ["MWPROTO_TEST_DOTENV_KEEP"] == "from-env"
        assert env.load_dotenv_if_present(str(dotenv)) is False
    finally:
        os.environ.pop("MWPROTO_TEST_DOTENV_MARKER", None)


def test_missing_dotenv_file_is_not_an_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(env, "_LOADED", False)
    assert env.load_dotenv_if_present(str(tmp_path / "nope.env")) is False
