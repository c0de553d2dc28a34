"""Tests for the config module."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from sheetcalc import SettingsError, Spreadsheet
from sheetcalc import _config, _snapshot, _spreadsheet
from sheetcalc._config import ENV_VARS, Settings


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestFromEnv:
    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        s = Settings.from_env()
        assert s.default_version == "default"
        assert s.snapshot_encoding == "utf-8"
        assert s.snapshot_indent == 2

    def test_values(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SHEETCALC_VERSION", "v3")
        clean_env.setenv("SHEETCALC_ENCODING", "latin-1")
        clean_env.setenv("SHEETCALC_INDENT", " 4 ")
        s = Settings.from_env()
        assert s.default_version == "v3"
        assert s.snapshot_encoding == "latin-1"
        assert s.snapshot_indent == 4

    def test_blank_indent_means_compact(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SHEETCALC_INDENT", "  ")
        assert Settings.from_env().snapshot_indent is None

    @pytest.mark.parametrize("raw", ["abc", "-3", "1.5"])
    def test_bad_indent(self, clean_env: pytest.MonkeyPatch, raw: str) -> None:
        clean_env.setenv("SHEETCALC_INDENT", raw)
        with pytest.raises(SettingsError, match="SHEETCALC_INDENT") as exc:
            Settings.from_env()
        assert exc.value.variable == "SHEETCALC_INDENT"
        assert isinstance(exc.value.__cause__, ValidationError)

    def test_unknown_encoding(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SHEETCALC_ENCODING", "no-such-codec")
        with pytest.raises(SettingsError, match="SHEETCALC_ENCODING"):
            Settings.from_env()


class TestLoadSettings:
    def test_bad_environment_falls_back_to_defaults(
        self, clean_env: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        clean_env.setenv("SHEETCALC_INDENT", "abc")
        with caplog.at_level(logging.WARNING, logger="sheetcalc._config"):
            s = _config._load_settings()
        assert s == Settings()
        assert "SHEETCALC_INDENT" in caplog.text

    def test_good_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("SHEETCALC_VERSION", "v7")
        assert _config._load_settings().default_version == "v7"


class TestSettings:
    def test_explicit_values(self) -> None:
        s = Settings(default_version="v2", snapshot_encoding="latin-1", snapshot_indent=None)
        assert s.default_version == "v2"
        assert s.snapshot_encoding == "latin-1"
        assert s.snapshot_indent is None

    def test_negative_indent_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(snapshot_indent=-3)

    def test_module_instance(self) -> None:
        assert isinstance(_config.settings, Settings)

    def test_default_version_used_by_new_sheets(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(_spreadsheet, "settings", Settings(default_version="v9"))
        assert Spreadsheet().version == "v9"
        assert Spreadsheet(version="explicit").version == "explicit"

    def test_compact_output(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(_snapshot, "settings", Settings(snapshot_indent=None))
        s = Spreadsheet()
        s.set_contents_of_cell("A1", "1")
        path = tmp_path / "compact.json"
        s.save(path)
        text = path.read_text(encoding="utf-8")
        assert "\n" not in text
        assert json.loads(text)["cells"]["A1"]["stringForm"] == "1"
