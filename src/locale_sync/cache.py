"""
Cache persistant des traductions.

Ce module fournit TranslationCache, qui mémorise chaque traduction réussie
pour un triplet (langue source, langue cible, texte source) afin de ne
jamais rappeler le traducteur distant pour un texte déjà traduit.

Format de stockage:
    Un unique fichier JSON plat {empreinte: traduction}, placé par défaut à
    côté des fichiers de langue : <workspace>/<locales_dir>/.locale-sync-cache.json

Notes d'implémentation:
    - L'empreinte est un SHA-256 de "source\\ntarget\\ntexte" : les codes de
      langue ne contiennent jamais de saut de ligne, la concaténation est donc
      non ambiguë.
    - Les écritures disque sont limitées : écriture immédiate dès 50 entrées
      modifiées, sinon 500 ms après la première modification non écrite.
    - Les entrées ne sont jamais évincées (croissance non bornée assumée).
"""

import asyncio
import hashlib
import json
from pathlib import Path
from typing import Optional

from .logger import get_logger

logger = get_logger(__name__)

CACHE_FILENAME = ".locale-sync-cache.json"
DEFAULT_FLUSH_THRESHOLD = 50
DEFAULT_FLUSH_DELAY = 0.5


class TranslationCache:
    """
    Cache des traductions, en mémoire et recopié sur disque.

    Attributes:
        cache_path: Fichier JSON de persistance
        enabled: Si False, get() manque toujours et set() ne fait rien
        flush_threshold: Nombre d'écritures déclenchant une sauvegarde immédiate
        flush_delay: Délai (s) avant sauvegarde après la première écriture

    Example:
        >>> cache = TranslationCache(Path("locales/.locale-sync-cache.json"))
        >>> cache.set("zh-CN", "en-US", "你好", "Hello")
        >>> cache.get("zh-CN", "en-US", "你好")
        'Hello'
    """

    def __init__(
        self,
        cache_path: str | Path,
        enabled: bool = True,
        flush_threshold: int = DEFAULT_FLUSH_THRESHOLD,
        flush_delay: float = DEFAULT_FLUSH_DELAY,
    ) -> None:
        self.cache_path = Path(cache_path)
        self.enabled = enabled
        self.flush_threshold = flush_threshold
        self.flush_delay = flush_delay

        self._entries: dict[str, str] = {}
        self._loaded = False
        self._dirty_count = 0
        self._flush_handle: Optional[asyncio.TimerHandle] = None

    @staticmethod
    def make_key(source: str, target: str, text: str) -> str:
        """Empreinte SHA-256 du triplet (source, cible, texte)."""
        digest = hashlib.sha256()
        digest.update(source.encode("utf-8"))
        digest.update(b"\n")
        digest.update(target.encode("utf-8"))
        digest.update(b"\n")
        digest.update(text.encode("utf-8"))
        return digest.hexdigest()

    def _ensure_loaded(self) -> None:
        """
        Charge le fichier au premier accès.

        Un fichier corrompu est renommé en .backup et le cache repart vide :
        au pire quelques textes seront retraduits.
        """
        if self._loaded:
            return
        self._loaded = True

        if not self.cache_path.exists():
            self._entries = {}
            return

        try:
            raw = self.cache_path.read_text(encoding="utf-8")
            data = json.loads(raw or "{}")
            if not isinstance(data, dict):
                raise ValueError("le contenu n'est pas un objet JSON")
            self._entries = {str(k): str(v) for k, v in data.items()}
            logger.debug(
                f"📦 Cache chargé : {len(self._entries)} entrée(s) ({self.cache_path})"
            )
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Cache illisible, réinitialisation : {self.cache_path} ({e})")
            self._entries = {}
            self._backup_corrupted_file()

    def _backup_corrupted_file(self) -> None:
        backup_path = self.cache_path.with_name(self.cache_path.name + ".backup")
        try:
            self.cache_path.replace(backup_path)
        except OSError as e:
            logger.warning(f"⚠️ Impossible de sauvegarder le cache corrompu : {e}")

    def get(self, source: str, target: str, text: str) -> Optional[str]:
        """
        Retourne la traduction mémorisée, ou None.

        Example:
            >>> cache.get("zh-CN", "fr-FR", "未知")  # None si absent
        """
        if not self.enabled:
            return None
        self._ensure_loaded()
        return self._entries.get(self.make_key(source, target, text))

    def set(self, source: str, target: str, text: str, translation: str) -> None:
        """
        Mémorise (ou remplace) une traduction et planifie la sauvegarde.

        La sauvegarde n'est pas synchrone : appeler flush() en fin de passe.
        """
        if not self.enabled:
            return
        self._ensure_loaded()
        self._entries[self.make_key(source, target, text)] = translation
        self._dirty_count += 1
        self._schedule_flush()

    def _schedule_flush(self) -> None:
        if self._dirty_count >= self.flush_threshold:
            self._flush_internal()
            return
        if self._flush_handle is not None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Hors boucle asyncio : seuil ou flush() explicite uniquement
            return
        self._flush_handle = loop.call_later(self.flush_delay, self._flush_internal)

    def _cancel_timer(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    def _flush_internal(self) -> None:
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_path, "w", encoding="utf-8") as f:
                json.dump(self._entries, f, ensure_ascii=False, indent=2)
            logger.debug(
                f"💾 Cache sauvegardé ({self._dirty_count} modification(s), "
                f"{len(self._entries)} entrée(s))"
            )
        except OSError as e:
            logger.warning(f"⚠️ Échec d'écriture du cache {self.cache_path} : {e}")
        finally:
            self._dirty_count = 0
            self._cancel_timer()

    @property
    def dirty(self) -> bool:
        return self._dirty_count > 0

    def flush(self) -> None:
        """Force la sauvegarde si des entrées n'ont pas encore été écrites."""
        if self._dirty_count > 0:
            self._flush_internal()

    def close(self) -> None:
        """Fin de session : sauvegarde et annule le minuteur éventuel."""
        self.flush()
        self._cancel_timer()

    def __len__(self) -> int:
        if not self.enabled:
            return 0
        self._ensure_loaded()
        return len(self._entries)

    def __contains__(self, triple: tuple[str, str, str]) -> bool:
        return self.get(*triple) is not None

    def __repr__(self) -> str:
        return (
            f"TranslationCache(path={str(self.cache_path)!r}, "
            f"enabled={self.enabled}, dirty={self._dirty_count})"
        )
