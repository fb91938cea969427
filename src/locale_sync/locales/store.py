"""
Stockage des fichiers de langue.

Chaque langue possède un fichier JSON plat {clé: texte} :
<workspace>/<locales_dir>/<code langue>.json

Le moteur ne modifie jamais une table en place : il lit un instantané
complet, fusionne les nouvelles valeurs et réécrit le fichier entier.
"""

import json
import re
from pathlib import Path
from typing import Any, Iterable, Mapping

from ..errors import StorageError
from ..logger import get_logger
from ..translation.parser import QUOTE_CHARS

logger = get_logger(__name__)

_QUOTE_ONLY_PATTERN = re.compile(f"^[{re.escape(QUOTE_CHARS)}]+$")


def is_invalid_value(value: Any) -> bool:
    """
    Indique si une valeur traduite doit être considérée comme manquante.

    Une valeur absente, vide après trim, ou composée uniquement de
    guillemets est à retraduire. Approximation connue : une traduction
    légitimement composée de guillemets est aussi considérée manquante.

    Example:
        >>> is_invalid_value("「」")
        True
        >>> is_invalid_value("Hello")
        False
    """
    if value is None:
        return True
    text = str(value).strip()
    if not text:
        return True
    return bool(_QUOTE_ONLY_PATTERN.match(text))


def find_missing_keys(keys: Iterable[str], table: Mapping[str, Any]) -> list[str]:
    """Clés absentes de la table ou portant une valeur invalide, dans l'ordre de keys."""
    return [key for key in keys if key not in table or is_invalid_value(table[key])]


class LocaleStore:
    """
    Lecture/écriture des fichiers de langue d'un workspace.

    Attributes:
        workspace_root: Racine du workspace
        locales_dir: Dossier des fichiers de langue, relatif à la racine

    Example:
        >>> store = LocaleStore("/projet", "locales")
        >>> table = store.read("en-US")
        >>> store.write("en-US", LocaleStore.merge(table, {"你好": "Hello"}))
    """

    def __init__(self, workspace_root: str | Path, locales_dir: str = "locales") -> None:
        self.workspace_root = Path(workspace_root)
        self.locales_dir = locales_dir

    @property
    def directory(self) -> Path:
        return self.workspace_root / self.locales_dir

    def path_for(self, lang: str) -> Path:
        return self.directory / f"{lang}.json"

    def exists(self, lang: str) -> bool:
        return self.path_for(lang).exists()

    def read(self, lang: str) -> dict[str, str]:
        """
        Lit la table d'une langue.

        Returns:
            Mapping ordonné {clé: texte}, vide si le fichier n'existe pas

        Raises:
            StorageError: Fichier illisible ou JSON invalide
        """
        path = self.path_for(lang)
        if not path.exists():
            return {}

        try:
            content = path.read_text(encoding="utf-8")
            data = json.loads(content) if content.strip() else {}
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"❌ Lecture du fichier de langue impossible : {path} ({e})")
            raise StorageError(f"Lecture impossible : {path} ({e})", path) from e

        if not isinstance(data, dict):
            raise StorageError(f"Le fichier de langue doit contenir un objet JSON : {path}", path)
        return data

    def write(
        self, lang: str, table: Mapping[str, str], preserve_order: bool = True
    ) -> Path:
        """
        Réécrit la table complète d'une langue.

        Args:
            lang: Code langue
            table: Table complète à écrire
            preserve_order: True = ordre d'insertion, False = clés triées

        Raises:
            StorageError: Écriture impossible
        """
        path = self.path_for(lang)
        data = dict(table) if preserve_order else dict(sorted(table.items()))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"❌ Écriture du fichier de langue impossible : {path} ({e})")
            raise StorageError(f"Écriture impossible : {path} ({e})", path) from e

        logger.debug(f"💾 {path.name} écrit ({len(data)} clé(s))")
        return path

    @staticmethod
    def merge(original: Mapping[str, str], updates: Mapping[str, str]) -> dict[str, str]:
        """
        Union avec priorité à droite.

        Les clés existantes gardent leur position, les nouvelles sont
        ajoutées à la fin dans l'ordre de updates.
        """
        return {**original, **updates}

    def remove_keys(self, lang: str, keys: Iterable[str]) -> int:
        """
        Retire des clés du fichier d'une langue (ordre des autres conservé).

        Returns:
            Nombre de clés effectivement retirées (0 si le fichier n'existe pas)
        """
        if not self.exists(lang):
            return 0

        table = self.read(lang)
        removed = 0
        for key in keys:
            if key in table:
                del table[key]
                removed += 1

        if removed:
            self.write(lang, table, preserve_order=True)
            logger.info(f"🧹 {removed} clé(s) retirée(s) de {lang}.json")
        return removed
