"""
Contexte d'une session de synchronisation.

Regroupe l'état partagé par toutes les passes d'une session hôte : verrou
exclusif, cache, stockage des fichiers de langue, extracteur de clés,
reporter et traducteur distant. Il n'existe aucun état global au niveau
du module : l'hôte crée un SyncContext et le ferme en fin de session.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .cache import CACHE_FILENAME, TranslationCache
from .lock import ExclusiveLock
from .locales.extractor import KeyExtractor
from .locales.store import LocaleStore
from .logger import get_logger
from .progress import RecordingReporter

if TYPE_CHECKING:
    from .config import SyncSettings
    from .progress import ProgressReporter
    from .translation.translator import RemoteTranslator

logger = get_logger(__name__)


class SyncContext:
    """
    État partagé d'une session.

    Attributes:
        settings: Réglages de la session
        workspace_root: Racine du workspace (None = aucun workspace ouvert)
        lock: Verrou exclusif partagé par le mode auto et la synchronisation
        cache: Cache des traductions (désactivé sans workspace)
        store: Stockage des fichiers de langue (None sans workspace)
        extractor: Extraction des clés et règles d'exclusion
        reporter: Puits de progression et de notifications

    Example:
        >>> async with SyncContext(settings, "/projet") as context:
        ...     engine = TranslationEngine(context)
        ...     await engine.sync_from_baseline()
    """

    def __init__(
        self,
        settings: "SyncSettings",
        workspace_root: Optional[str | Path],
        remote: Optional["RemoteTranslator"] = None,
        reporter: Optional["ProgressReporter"] = None,
    ):
        self.settings = settings
        self.workspace_root = Path(workspace_root) if workspace_root is not None else None
        self.lock = ExclusiveLock()
        self.reporter: "ProgressReporter" = reporter if reporter is not None else RecordingReporter()
        self.extractor = KeyExtractor(
            settings.i18n_library, settings.ignore_keys, settings.ignore_paths
        )

        if self.workspace_root is not None:
            self.store: Optional[LocaleStore] = LocaleStore(
                self.workspace_root, settings.locales_dir
            )
            self.cache = TranslationCache(
                self.store.directory / CACHE_FILENAME, enabled=settings.enable_cache
            )
        else:
            self.store = None
            self.cache = TranslationCache(CACHE_FILENAME, enabled=False)

        self._remote = remote
        self._closed = False

    @property
    def remote(self) -> "RemoteTranslator":
        """Traducteur distant, créé depuis les réglages au premier usage."""
        if self._remote is None:
            from .llm import LLM

            self._remote = LLM(
                model_name=self.settings.model_name,
                url=self.settings.api_url,
                api_key=self.settings.api_key,
                max_tokens=self.settings.max_tokens,
            )
            logger.debug(f"Traducteur distant créé : {self.settings.model_name}")
        return self._remote

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Fin de session : sauvegarde le cache et annule sa sauvegarde différée."""
        if self._closed:
            return
        self._closed = True
        self.cache.close()
        logger.debug("Contexte de synchronisation fermé")

    async def __aenter__(self) -> "SyncContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
