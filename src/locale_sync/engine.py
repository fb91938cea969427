"""
Point d'entrée du moteur de synchronisation.

TranslationEngine assemble, pour un SyncContext donné :
- BatchTranslator : traduction par lots, cache, validation, repli ;
- TaskCoalescer : regroupement des sauvegardes (mode auto et commande manuelle) ;
- SyncOrchestrator : synchronisation complète depuis la langue de base.

Example:
    >>> async with SyncContext(settings, "/projet", reporter=TqdmReporter()) as context:
    ...     engine = TranslationEngine(context)
    ...     await engine.translate_document(SavedDocument.from_file("src/App.tsx"))
"""

import asyncio
from pathlib import Path
from typing import Callable, Iterable, Optional

from .coalescer import SavedDocument, TaskCoalescer
from .config import TranslationMode
from .context import SyncContext
from .errors import ConfigurationError
from .locales.cleaner import find_unused_keys
from .logger import get_logger
from .orchestrator import SyncOrchestrator, SyncResult
from .translation.translator import BatchTranslator

logger = get_logger(__name__)

SOURCE_SUFFIXES = (".js", ".jsx", ".ts", ".tsx")

ConfirmCallback = Callable[[list[str]], bool]


class _ContextRemote:
    """Délègue au traducteur distant du contexte, résolu au premier appel."""

    def __init__(self, context: SyncContext):
        self.context = context

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        return await self.context.remote.translate(text, source_lang, target_lang)


class TranslationEngine:
    """
    Moteur de synchronisation d'une session.

    Attributes:
        context: Contexte de session
        translator: Traducteur par lots partagé
        coalescer: File des sauvegardes en attente
        orchestrator: Synchronisation complète
    """

    def __init__(self, context: SyncContext):
        self.context = context
        settings = context.settings

        self.translator = BatchTranslator(
            _ContextRemote(context),
            context.cache,
            char_limit=settings.batch_char_limit,
            batch_delay=settings.batch_delay,
        )
        self.orchestrator = SyncOrchestrator(context, self.translator)
        self.coalescer = TaskCoalescer(
            context.lock,
            context.extractor,
            self.translate_new_keys,
            reporter=context.reporter,
            debounce_delay=settings.debounce_delay,
            is_enabled=lambda: self.context.settings.enabled,
        )

    # -----------------------------------
    # 🔹 Entrées hôte
    # -----------------------------------
    def on_document_saved(self, document: SavedDocument) -> Optional[asyncio.Future]:
        """
        Réagit à une sauvegarde en mode auto.

        Returns:
            Future de la passe, ou None si la sauvegarde est ignorée
            (mode manuel ou fichier qui n'est pas du code JS/TS)
        """
        if self.context.settings.translation_mode is not TranslationMode.AUTO:
            return None
        if Path(document.path).suffix.lower() not in SOURCE_SUFFIXES:
            return None
        return self.coalescer.submit(document)

    async def translate_document(self, document: SavedDocument) -> int:
        """Commande manuelle : traduit les nouvelles clés d'un document."""
        return await self.coalescer.handle_file_saved(document)

    async def sync_from_baseline(self) -> SyncResult:
        return await self.orchestrator.sync_from_baseline()

    def is_syncing(self) -> bool:
        return self.orchestrator.is_syncing()

    # -----------------------------------
    # 🔹 Passe du mode auto
    # -----------------------------------
    async def translate_new_keys(
        self, keys: list[str], workspace_root: Optional[Path] = None
    ) -> int:
        """
        Ajoute de nouvelles clés à toutes les langues configurées.

        Les clés absentes du fichier de base y sont écrites telles quelles
        (la valeur de base est la clé), puis traduites dans chaque autre
        langue où elles manquent.

        Doit s'exécuter sous context.lock (le TaskCoalescer l'appelle
        depuis sa section exclusive).

        Args:
            keys: Clés extraites des documents sauvegardés
            workspace_root: Workspace des documents (doit être celui du contexte)

        Returns:
            Nombre de traductions écrites hors langue de base

        Raises:
            ConfigurationError: Pas de workspace ou langue de base non configurée
            StorageError: Fichier de base illisible/inscriptible, ou échec
                d'écriture d'une langue cible
        """
        if not keys:
            return 0

        context = self.context
        if (
            workspace_root is not None
            and context.workspace_root is not None
            and Path(workspace_root).resolve() != context.workspace_root.resolve()
        ):
            logger.warning(
                f"⚠️ Document hors du workspace de la session ({workspace_root}), "
                f"clés écrites dans {context.workspace_root}"
            )

        orchestrator = self.orchestrator
        store = orchestrator.require_store()
        settings = context.settings
        baseline_lang = settings.default_language

        baseline = store.read(baseline_lang)
        new_keys = [key for key in keys if key not in baseline]
        if not new_keys:
            logger.debug("Aucune nouvelle clé")
            return 0

        logger.info(f"🆕 {len(new_keys)} nouvelle(s) clé(s)")
        store.write(baseline_lang, store.merge(baseline, {key: key for key in new_keys}))

        plans, failed = orchestrator.plan_languages(store, new_keys, settings.target_languages)
        result = await orchestrator.apply_plans(store, plans, {key: key for key in new_keys})
        result.failed = failed + result.failed
        orchestrator.finish(result, label=f"{len(new_keys)} clé(s) ajoutée(s) à {baseline_lang}")
        return result.written

    # -----------------------------------
    # 🔹 Nettoyage des clés inutilisées
    # -----------------------------------
    async def clean_unused_keys(
        self,
        source_root: Optional[str | Path] = None,
        confirm: ConfirmCallback = lambda keys: True,
        exclude_dirs: Iterable[str] = ("node_modules",),
    ) -> int:
        """
        Retire de toutes les langues les clés absentes du code source.

        Args:
            source_root: Racine des sources (défaut : racine du workspace)
            confirm: Reçoit les clés inutilisées, retourne True pour supprimer
            exclude_dirs: Dossiers ignorés lors du parcours

        Returns:
            Nombre total de suppressions (toutes langues)

        Raises:
            ConfigurationError: Pas de workspace ou fichier de base introuvable
        """
        context = self.context
        store = self.orchestrator.require_baseline()
        settings = context.settings
        root = Path(source_root) if source_root is not None else context.workspace_root
        if root is None:
            raise ConfigurationError("Aucun dossier source à analyser")

        keys = list(store.read(settings.default_language))
        if not keys:
            context.reporter.info("Aucune clé dans le fichier de base")
            return 0

        # Le dossier des fichiers de langue n'est pas du code source
        excluded = tuple(exclude_dirs) + (Path(settings.locales_dir).name,)
        unused = find_unused_keys(keys, root, context.extractor, exclude_dirs=excluded)
        if not unused:
            context.reporter.info("Aucune clé inutilisée")
            return 0

        logger.info(f"🔍 {len(unused)} clé(s) inutilisée(s)")
        if not confirm(unused):
            context.reporter.info("Nettoyage annulé")
            return 0

        async def body() -> int:
            removed = 0
            for lang in settings.languages:
                removed += store.remove_keys(lang, unused)
            return removed

        removed = await context.lock.run_exclusive(body)
        context.reporter.info(f"{removed} entrée(s) supprimée(s) ({len(unused)} clé(s))")
        return removed
