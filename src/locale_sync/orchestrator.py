"""
Synchronisation complète des fichiers de langue depuis la langue de base.

Déroulement de sync_from_baseline() :
1. Vérifications structurelles (workspace, langue de base, fichier de base)
   avant tout appel distant ;
2. sous le verrou exclusif : calcul des clés manquantes par langue cible ;
3. traduction par lots de ces clés, fusion et réécriture de chaque table ;
4. progression globale en pourcentage sur le total des clés manquantes.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping, Optional

from .errors import ConfigurationError, StorageError
from .locales.store import LocaleStore, find_missing_keys, is_invalid_value
from .logger import get_logger

if TYPE_CHECKING:
    from .context import SyncContext
    from .translation.translator import BatchTranslator

logger = get_logger(__name__)


@dataclass
class SyncResult:
    """
    Bilan d'une passe de synchronisation.

    Attributes:
        written: Nombre de traductions écrites (toutes langues confondues)
        languages: Langues dont le fichier a été réécrit
        skipped: Langues déjà complètes
        failed: Langues non mises à jour suite à une erreur de stockage
    """

    written: int = 0
    languages: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


@dataclass
class LanguagePlan:
    """Table courante d'une langue cible et clés à y traduire."""

    lang: str
    table: dict[str, str]
    missing: list[str]


class PercentProgress:
    """
    Convertit un nombre d'éléments traités en incréments de pourcentage.

    Les incréments sont la différence entre deux pourcentages entiers
    successifs : leur somme vaut exactement 100 une fois total atteint.
    """

    def __init__(self, total: int):
        self.total = total
        self.done = 0
        self.percent = 0

    def advance(self, count: int) -> int:
        if self.total <= 0:
            return 0
        self.done = min(self.total, self.done + count)
        percent = self.done * 100 // self.total
        increment = percent - self.percent
        self.percent = percent
        return increment


class SyncOrchestrator:
    """
    Orchestre la synchronisation des langues cibles depuis la langue de base.

    Attributes:
        context: Contexte de session (réglages, verrou, stockage, reporter)
        translator: Traducteur par lots partagé

    Example:
        >>> orchestrator = SyncOrchestrator(context, translator)
        >>> result = await orchestrator.sync_from_baseline()
        >>> result.written
        12
    """

    def __init__(self, context: "SyncContext", translator: "BatchTranslator"):
        self.context = context
        self.translator = translator
        self._syncing = False

    def is_syncing(self) -> bool:
        return self._syncing

    # -----------------------------------
    # 🔹 Vérifications structurelles
    # -----------------------------------
    def require_store(self) -> LocaleStore:
        """
        Retourne le stockage du workspace après vérification de la configuration.

        Raises:
            ConfigurationError: Pas de workspace ou langue de base non configurée
        """
        settings = self.context.settings
        store = self.context.store
        if store is None:
            self._fail("Aucun workspace ouvert : impossible de localiser les fichiers de langue")
        if settings.default_language not in settings.languages:
            self._fail(
                f"La langue de base {settings.default_language} ne fait pas partie "
                f"des langues configurées ({', '.join(settings.languages)})"
            )
        return store

    def require_baseline(self) -> LocaleStore:
        """
        Comme require_store(), et vérifie en plus la présence du fichier de base.

        Raises:
            ConfigurationError: Fichier de la langue de base introuvable
        """
        store = self.require_store()
        baseline = self.context.settings.default_language
        if not store.exists(baseline):
            self._fail(f"Fichier de la langue de base introuvable : {store.path_for(baseline)}")
        return store

    def _fail(self, message: str) -> None:
        logger.error(f"❌ {message}")
        self.context.reporter.error(message)
        raise ConfigurationError(message)

    # -----------------------------------
    # 🔹 Synchronisation complète
    # -----------------------------------
    async def sync_from_baseline(self) -> SyncResult:
        """
        Traduit dans chaque langue cible les clés absentes ou invalides.

        Returns:
            Bilan de la passe

        Raises:
            ConfigurationError: Erreur structurelle (aucun appel distant effectué)
            StorageError: Lecture du fichier de base impossible, ou une
                ou plusieurs langues n'ont pas pu être écrites
        """
        store = self.require_baseline()

        async def body() -> SyncResult:
            self._syncing = True
            try:
                return await self._sync_locked(store)
            finally:
                self._syncing = False

        return await self.context.lock.run_exclusive(body)

    async def _sync_locked(self, store: LocaleStore) -> SyncResult:
        settings = self.context.settings
        reporter = self.context.reporter
        extractor = self.context.extractor

        baseline = store.read(settings.default_language)
        keys = [key for key in baseline if not extractor.should_ignore_key(key)]
        if not keys:
            logger.info("ℹ️ Aucune clé dans le fichier de base")
            reporter.info("Aucune clé à synchroniser dans le fichier de base")
            return SyncResult()

        plans, failed = self.plan_languages(store, keys, settings.target_languages)
        sources = {
            key: key if is_invalid_value(baseline.get(key)) else baseline[key]
            for key in keys
        }
        result = await self.apply_plans(store, plans, sources)
        result.failed = failed + result.failed
        return self.finish(result)

    # -----------------------------------
    # 🔹 Étapes partagées avec le mode auto
    # -----------------------------------
    def plan_languages(
        self, store: LocaleStore, keys: list[str], languages: Iterable[str]
    ) -> tuple[list[LanguagePlan], list[str]]:
        """
        Calcule les clés manquantes de chaque langue.

        Returns:
            (plans, langues dont la lecture a échoué)
        """
        plans: list[LanguagePlan] = []
        failed: list[str] = []
        for lang in languages:
            try:
                table = store.read(lang)
            except StorageError as e:
                logger.error(f"❌ {lang} ignorée : {e}")
                failed.append(lang)
                continue
            plans.append(LanguagePlan(lang, table, find_missing_keys(keys, table)))
        return plans, failed

    async def apply_plans(
        self,
        store: LocaleStore,
        plans: list[LanguagePlan],
        sources: Mapping[str, str],
    ) -> SyncResult:
        """
        Traduit puis écrit les clés manquantes de chaque langue.

        Une erreur d'écriture n'interrompt pas les autres langues : la
        langue est ajoutée à result.failed.

        Args:
            store: Stockage des fichiers de langue
            plans: Langues et clés manquantes (voir plan_languages)
            sources: Texte source de chaque clé
        """
        settings = self.context.settings
        reporter = self.context.reporter
        result = SyncResult()

        total = sum(len(plan.missing) for plan in plans)
        result.skipped = [plan.lang for plan in plans if not plan.missing]
        if total == 0:
            logger.info("✅ Fichiers de langue à jour")
            return result

        progress = PercentProgress(total)
        logger.info(f"🔄 {total} traduction(s) manquante(s) sur {len(plans)} langue(s)")

        for plan in plans:
            if not plan.missing:
                continue
            lang = plan.lang

            def on_progress(count: int, lang: str = lang) -> None:
                increment = progress.advance(count)
                if increment:
                    reporter.report(f"Traduction {lang} ({progress.percent}%)", increment)

            translations = await self.translator.translate_many(
                plan.missing,
                [sources[key] for key in plan.missing],
                settings.default_language,
                lang,
                on_progress=on_progress,
            )
            try:
                store.write(lang, LocaleStore.merge(plan.table, translations))
            except StorageError as e:
                logger.error(f"❌ Mise à jour de {lang} abandonnée : {e}")
                result.failed.append(lang)
                continue

            result.written += len(translations)
            result.languages.append(lang)
            logger.info(f"💾 {lang} : {len(translations)} traduction(s) écrite(s)")

        # Les incréments non émis (langue en échec) complètent la barre
        remaining = progress.advance(total)
        if remaining:
            reporter.report("Écriture des fichiers de langue", remaining)
        return result

    def finish(self, result: SyncResult, label: Optional[str] = None) -> SyncResult:
        """
        Persiste le cache, émet le message final et signale les échecs.

        Raises:
            StorageError: Si au moins une langue n'a pas pu être mise à jour
        """
        reporter = self.context.reporter
        self.context.cache.flush()

        if result.written == 0 and not result.failed:
            reporter.info(label or "Aucune mise à jour nécessaire")
        elif result.written:
            message = f"{result.written} traduction(s) écrite(s) ({', '.join(result.languages)})"
            logger.info(f"✅ {message}")
            reporter.info(message)

        if result.failed:
            message = f"Échec de mise à jour pour : {', '.join(result.failed)}"
            reporter.error(message)
            raise StorageError(message)
        return result
