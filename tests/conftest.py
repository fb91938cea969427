"""
Configuration pytest pour les tests locale-sync.

Ce fichier contient les fixtures communes à tous les tests.
"""

import json
import re

import pytest

from locale_sync.config import SyncSettings
from locale_sync.logger import LogSession

NUMBERED_LINE = re.compile(r"^(\d+)\. (.*)$")


class FakeRemote:
    """
    Traducteur distant scripté qui enregistre ses appels.

    Sans réponse scriptée, chaque ligne numérotée "N. texte" est traduite
    via mapping (ou préfixée par la langue cible si absente du mapping),
    numérotation conservée.

    Args:
        mapping: Traductions connues {texte source: traduction}
        responses: Réponses (ou exceptions) renvoyées dans l'ordre, avant
            le comportement par défaut
    """

    def __init__(self, mapping=None, responses=None):
        self.mapping = dict(mapping or {})
        self.responses = list(responses or [])
        self.calls = []

    async def translate(self, text, source_lang, target_lang):
        self.calls.append((text, source_lang, target_lang))
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return self.render(text, target_lang)

    def render(self, text, target_lang):
        lines = []
        for line in text.split("\n"):
            match = NUMBERED_LINE.match(line)
            if match:
                lines.append(f"{match.group(1)}. {self.lookup(match.group(2), target_lang)}")
            else:
                lines.append(self.lookup(line, target_lang))
        return "\n".join(lines)

    def lookup(self, text, target_lang):
        return self.mapping.get(text, f"[{target_lang}] {text}")

    @property
    def requests(self):
        return [call[0] for call in self.calls]


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Redirige les journaux de session vers un dossier temporaire."""
    monkeypatch.setenv("LOCALE_SYNC_LOG_DIR", str(tmp_path / "logs"))
    LogSession.reset()
    yield
    LogSession.reset()


@pytest.fixture
def fake_remote():
    return FakeRemote()


@pytest.fixture
def settings():
    """Réglages de test : deux langues, sans délais."""
    return SyncSettings(
        languages=("zh-CN", "en-US"),
        api_key="sk-test",
        batch_delay=0,
        debounce_delay=0.01,
    )


@pytest.fixture
def workspace(tmp_path):
    """
    Workspace minimal avec un fichier de base zh-CN.

    Returns:
        Racine du workspace (contient locales/zh-CN.json)
    """
    root = tmp_path / "project"
    locales = root / "locales"
    locales.mkdir(parents=True)
    write_locale(root, "zh-CN", {"你好": "你好", "再见": "再见"})
    return root


def write_locale(root, lang, table):
    path = root / "locales" / f"{lang}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(table, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def read_locale(root, lang):
    path = root / "locales" / f"{lang}.json"
    return json.loads(path.read_text(encoding="utf-8"))
