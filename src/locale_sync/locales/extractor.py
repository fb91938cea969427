"""
Extraction des clés de traduction depuis le code source.

Deux dialectes d'appel sont reconnus :
- di18n : intl.t('clé', options)
- i18next : i18next.t('clé', options) et t('clé', options), hors intl.t
"""

import re
from typing import Iterable

from ..config import I18nLibrary

DI18N_PATTERN = re.compile(r"""intl\.t\(\s*['"]([\s\S]*?)['"]\s*(?:,\s*([^)]*))?\)""")

I18NEXT_PATTERN = re.compile(
    r"""(?:^|\s|\(|\.|;|,|\{|\})(?:i18next\.t|(?<!intl\.)t)\(\s*['"]([\s\S]*?)['"]\s*(?:,\s*([^)]*))?\)"""
)


def wildcard_to_regex(pattern: str) -> re.Pattern[str]:
    """
    Convertit un motif à jokers * en expression régulière ancrée.

    Example:
        >>> bool(wildcard_to_regex("src/legacy/*").match("src/legacy/a.ts"))
        True
    """
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile("^" + ".*".join(parts) + "$", re.DOTALL)


def _matches_any(value: str, patterns: Iterable[str]) -> bool:
    for pattern in patterns:
        if "*" in pattern:
            if wildcard_to_regex(pattern).match(value):
                return True
        elif value == pattern:
            return True
    return False


class KeyExtractor:
    """
    Extrait les clés des appels de traduction et applique les règles d'exclusion.

    Attributes:
        dialect: Dialecte d'appel ("di18n" ou "i18next")
        ignore_keys: Clés ignorées (exactes ou avec jokers *)
        ignore_paths: Chemins ignorés (exacts ou avec jokers *)

    Example:
        >>> extractor = KeyExtractor("di18n")
        >>> extractor.extract_keys("intl.t('你好'); intl.t('你好', {})")
        ['你好']
    """

    def __init__(
        self,
        dialect: I18nLibrary | str = I18nLibrary.DI18N,
        ignore_keys: Iterable[str] = (),
        ignore_paths: Iterable[str] = (),
    ) -> None:
        self.dialect = I18nLibrary(dialect)
        self.ignore_keys = tuple(ignore_keys)
        self.ignore_paths = tuple(ignore_paths)

    @property
    def pattern(self) -> re.Pattern[str]:
        return I18NEXT_PATTERN if self.dialect is I18nLibrary.I18NEXT else DI18N_PATTERN

    def extract_keys(self, text: str) -> list[str]:
        """Clés trouvées dans le texte, dédupliquées dans l'ordre d'apparition."""
        keys = (match.group(1) for match in self.pattern.finditer(text))
        return list(dict.fromkeys(key for key in keys if key))

    def should_ignore_key(self, key: str) -> bool:
        return _matches_any(key, self.ignore_keys)

    def should_ignore_path(self, path: str) -> bool:
        return _matches_any(str(path), self.ignore_paths)

    def is_key_used(self, text: str, key: str) -> bool:
        """
        Indique si la clé est utilisée par un appel de traduction du texte.

        Utilisé par le nettoyage des clés inutilisées : l'appel peut avoir
        des options (t('clé', {...})) ou non (t('clé')).
        """
        escaped = re.escape(key)
        if self.dialect is I18nLibrary.I18NEXT:
            patterns = [
                rf"""i18next\.t\(\s*['"]{escaped}['"]\s*[,)]""",
                rf"""(?<!intl\.)\bt\(\s*['"]{escaped}['"]\s*[,)]""",
            ]
        else:
            patterns = [rf"""intl\.t\(\s*['"]{escaped}['"]\s*[,)]"""]
        return any(re.search(pattern, text) for pattern in patterns)
