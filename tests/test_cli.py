"""
Tests de la ligne de commande.
"""

import json
from unittest.mock import patch

import pytest

from conftest import read_locale, write_locale
from locale_sync.__main__ import build_parser, main


@pytest.fixture
def cli_workspace(workspace, monkeypatch):
    """Workspace avec un fichier de réglages et sans variable LOCALE_SYNC_* parasite."""
    for name in ("LOCALE_SYNC_LANGUAGES", "LOCALE_SYNC_DEFAULT_LANGUAGE", "LOCALE_SYNC_LOCALES_DIR"):
        monkeypatch.delenv(name, raising=False)
    config = {"languages": ["zh-CN", "en-US"], "apiKey": "sk-test", "batchDelay": 0}
    (workspace / ".locale-sync.json").write_text(json.dumps(config), encoding="utf-8")
    return workspace


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_translate_requires_files():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["translate"])


def test_clean_with_yes(cli_workspace):
    write_locale(cli_workspace, "en-US", {"你好": "Hello", "再见": "Goodbye"})
    source = cli_workspace / "src" / "App.tsx"
    source.parent.mkdir()
    source.write_text("intl.t('你好')", encoding="utf-8")

    with patch("locale_sync.config.load_dotenv"):
        code = main(["--workspace", str(cli_workspace), "clean", "--yes"])

    assert code == 0
    assert read_locale(cli_workspace, "zh-CN") == {"你好": "你好"}
    assert read_locale(cli_workspace, "en-US") == {"你好": "Hello"}


def test_clean_declined_interactively(cli_workspace):
    with patch("locale_sync.config.load_dotenv"), patch("builtins.input", return_value="n"):
        code = main(["--workspace", str(cli_workspace), "clean"])

    assert code == 0
    assert "再见" in read_locale(cli_workspace, "zh-CN")


def test_missing_baseline_returns_error_code(cli_workspace, capsys):
    (cli_workspace / "locales" / "zh-CN.json").unlink()

    with patch("locale_sync.config.load_dotenv"):
        code = main(["--workspace", str(cli_workspace), "sync"])

    assert code == 1
    assert "Erreur" in capsys.readouterr().out


def test_invalid_config_file_returns_error_code(cli_workspace, capsys):
    (cli_workspace / ".locale-sync.json").write_text("{oops", encoding="utf-8")

    code = main(["--workspace", str(cli_workspace), "sync"])

    assert code == 1
    assert "illisible" in capsys.readouterr().out
