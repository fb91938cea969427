"""
Recherche des clés de traduction qui ne sont plus utilisées dans le code.
"""

from pathlib import Path
from typing import Iterable, Iterator

from ..logger import get_logger
from .extractor import KeyExtractor

logger = get_logger(__name__)

DEFAULT_SOURCE_PATTERNS = ("*.js", "*.jsx", "*.ts", "*.tsx")
DEFAULT_EXCLUDE_DIRS = ("node_modules",)


def iter_source_files(
    source_root: str | Path,
    patterns: Iterable[str] = DEFAULT_SOURCE_PATTERNS,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> Iterator[Path]:
    """Parcourt les fichiers source correspondant aux motifs, hors dossiers exclus."""
    root = Path(source_root)
    excluded = set(exclude_dirs)
    seen: set[Path] = set()
    for pattern in patterns:
        for path in sorted(root.rglob(pattern)):
            if path in seen or not path.is_file():
                continue
            if excluded.intersection(path.relative_to(root).parts):
                continue
            seen.add(path)
            yield path


def find_unused_keys(
    keys: Iterable[str],
    source_root: str | Path,
    extractor: KeyExtractor,
    patterns: Iterable[str] = DEFAULT_SOURCE_PATTERNS,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[str]:
    """
    Retourne les clés qui n'apparaissent dans aucun appel de traduction.

    Args:
        keys: Clés du fichier de langue de base (ordre conservé)
        source_root: Racine des sources à parcourir
        extractor: Définit le dialecte des appels recherchés
        patterns: Motifs glob des fichiers source
        exclude_dirs: Dossiers ignorés (à n'importe quelle profondeur)

    Returns:
        Clés inutilisées, dans l'ordre de keys

    Note:
        Le parcours s'arrête dès que toutes les clés ont été trouvées.
        Un fichier illisible est journalisé puis ignoré.
    """
    ordered = list(dict.fromkeys(keys))
    remaining = set(ordered)
    scanned = 0

    for path in iter_source_files(source_root, patterns, exclude_dirs):
        if not remaining:
            break
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"⚠️ Fichier source illisible, ignoré : {path} ({e})")
            continue

        scanned += 1
        found = {key for key in remaining if key in text and extractor.is_key_used(text, key)}
        remaining -= found

    logger.debug(f"🔍 {scanned} fichier(s) analysé(s), {len(remaining)} clé(s) inutilisée(s)")
    return [key for key in ordered if key in remaining]
