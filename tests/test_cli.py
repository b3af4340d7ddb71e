from __future__ import annotations

from pathlib import Path

import pytest

from lectern.gui.cli import config_from_settings, parse_cli


def test_parse_cli_reads_config_and_overrides(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"locale": "fr-FR", "rate": 0.8}', encoding="utf-8")

    settings, namespace, version = parse_cli(
        ["example.com", "--config", str(path), "--rate", "1.5"]
    )
    assert namespace.url == "example.com"
    assert settings["locale"] == "fr-FR"
    assert settings["rate"] == 1.5
    assert version is False


def test_parse_cli_version_flag(tmp_path: Path) -> None:
    _, namespace, version = parse_cli(["-V", "--config", str(tmp_path / "none.json")])
    assert version is True
    assert namespace.url == ""


def test_invalid_settings_exit() -> None:
    with pytest.raises(SystemExit):
        config_from_settings({"max_chars": -5})
