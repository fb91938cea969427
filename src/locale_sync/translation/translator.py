"""
Traduction par lots des clés manquantes.

Ce module transforme une liste de couples (clé, texte source) en mapping
clé -> traduction, en minimisant les appels au traducteur distant :

1. conversion déterministe pour les paires connues (zh-CN -> zh-TW) ;
2. consultation du cache persistant ;
3. regroupement des textes restants en lots bornés en caractères (un
   texte sur plusieurs lignes est traduit seul) ;
4. un appel distant par lot, réponse validée ligne par ligne ;
5. en cas d'échec du lot, retraduction texte par texte, puis repli sur
   le texte source : aucune clé n'est jamais perdue.
"""

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Sequence

from ..checks import ValidationContext, ValidationPipeline
from ..errors import ConfigurationError, ValidationError, ValidationMismatch
from ..logger import get_logger
from ..segment import DEFAULT_CHAR_LIMIT, Batch, BatchItem, Segmentator
from .parser import (
    clean_line,
    is_multiline,
    parse_numbered_response,
    strip_wrapping_quotes,
)
from .variants import Converter, convert_safely, find_converter

if TYPE_CHECKING:
    from ..cache import TranslationCache

logger = get_logger(__name__)

ProgressCallback = Callable[[int], None]

# Pause entre deux lots, pour rester sous les limites de débit de l'API
DEFAULT_BATCH_DELAY = 1.0


class RemoteTranslator(Protocol):
    """Opération distante opaque : un texte en entrée, sa traduction en sortie."""

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        ...


@dataclass
class TranslationStats:
    """
    Compteurs cumulés d'un BatchTranslator.

    Attributes:
        remote_calls: Appels au traducteur distant (lots + retraductions)
        cache_hits: Textes servis par le cache
        converted: Textes servis par une conversion de variante
        batches: Lots envoyés
        failed_batches: Lots rejetés (erreur distante ou validation)
        fallback_items: Textes retraduits seuls après échec d'un lot
        multiline_items: Textes sur plusieurs lignes, traduits seuls
        fallback_failures: Textes laissés en langue source
    """

    remote_calls: int = 0
    cache_hits: int = 0
    converted: int = 0
    batches: int = 0
    failed_batches: int = 0
    fallback_items: int = 0
    multiline_items: int = 0
    fallback_failures: int = 0


class BatchTranslator:
    """
    Client de traduction par lots avec validation et repli.

    Attributes:
        remote: Traducteur distant (ex: LLM)
        cache: Cache persistant (None = pas de cache)
        char_limit: Budget en caractères d'un lot
        batch_delay: Pause (s) entre deux lots
        converters: Conversions déterministes par paire de langues
        stats: Compteurs cumulés

    Example:
        >>> translator = BatchTranslator(llm, cache, char_limit=1800)
        >>> await translator.translate_many(["你好"], ["你好"], "zh-CN", "en-US")
        {'你好': 'Hello'}
    """

    def __init__(
        self,
        remote: RemoteTranslator,
        cache: Optional["TranslationCache"] = None,
        char_limit: int = DEFAULT_CHAR_LIMIT,
        batch_delay: float = DEFAULT_BATCH_DELAY,
        converters: Optional[dict[tuple[str, str], Converter]] = None,
    ):
        self.remote = remote
        self.cache = cache
        self.char_limit = char_limit
        self.batch_delay = batch_delay
        self.converters = converters
        self.stats = TranslationStats()

        self._batch_pipeline = ValidationPipeline.for_batch()
        self._single_pipeline = ValidationPipeline.for_single()

    async def translate_many(
        self,
        keys: Sequence[str],
        source_texts: Sequence[str],
        source_lang: str,
        target_lang: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> dict[str, str]:
        """
        Traduit des textes et retourne le mapping clé -> traduction.

        Aucune erreur de traduction ne remonte : un texte intraduisible
        garde sa valeur source. Les nouvelles traductions sont écrites dans
        le cache sans sauvegarde synchrone (flush() à la charge de l'appelant).

        Args:
            keys: Clés de traduction
            source_texts: Textes source, alignés sur keys
            source_lang: Code de la langue source (ex: "zh-CN")
            target_lang: Code de la langue cible (ex: "en-US")
            on_progress: Appelé avec le nombre d'éléments traités

        Returns:
            Mapping {clé: traduction}, dans l'ordre de keys

        Raises:
            ValidationError: Si keys et source_texts n'ont pas la même longueur
            ConfigurationError: Traducteur distant non configuré (clé API absente)
        """
        if len(keys) != len(source_texts):
            raise ValidationError(
                f"Nombre de clés ({len(keys)}) différent du nombre de textes "
                f"({len(source_texts)})"
            )

        def advance(count: int) -> None:
            if on_progress is not None and count > 0:
                on_progress(count)

        result: dict[str, str] = {}
        if not keys:
            return result

        converter = find_converter(source_lang, target_lang, self.converters)
        if converter is not None:
            logger.info(
                f"🔤 Conversion {source_lang} -> {target_lang} de {len(keys)} texte(s)"
            )
            for key, text in zip(keys, source_texts):
                result[key] = convert_safely(converter, text)
                self.stats.converted += 1
                advance(1)
            return result

        pending: list[BatchItem] = []
        multiline: list[BatchItem] = []
        for key, text in zip(keys, source_texts):
            cached = (
                self.cache.get(source_lang, target_lang, text)
                if self.cache is not None
                else None
            )
            if cached is not None:
                result[key] = cached
                self.stats.cache_hits += 1
                advance(1)
            elif is_multiline(text):
                # Une ligne par texte dans un lot numéroté
                multiline.append(BatchItem(key, text))
            else:
                pending.append(BatchItem(key, text))

        remaining = len(pending) + len(multiline)
        if remaining:
            logger.info(
                f"🌐 {remaining} texte(s) à traduire {source_lang} -> {target_lang} "
                f"({len(keys) - remaining} depuis le cache)"
            )

        sent = 0

        async def pause() -> None:
            nonlocal sent
            if sent and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)
            sent += 1

        for item in multiline:
            await pause()
            self.stats.multiline_items += 1
            result[item.key] = await self._translate_single(item, source_lang, target_lang)
            advance(1)

        for batch in Segmentator(pending, self.char_limit):
            await pause()

            try:
                translations = await self._translate_batch(batch, source_lang, target_lang)
            except ValidationMismatch as e:
                logger.warning(
                    f"⚠️ Lot {batch.index} rejeté ({len(batch)} texte(s)) : {e}"
                )
                translations = None
            except ConfigurationError:
                # Traducteur non configuré : erreur structurelle, pas de repli
                raise
            except Exception as e:
                logger.warning(
                    f"⚠️ Échec de l'appel distant pour le lot {batch.index} "
                    f"({len(batch)} texte(s)) : {e}"
                )
                translations = None

            if translations is not None:
                for item, translated in zip(batch.items, translations):
                    result[item.key] = translated
                    self._remember(source_lang, target_lang, item.text, translated)
                    advance(1)
                continue

            self.stats.failed_batches += 1
            for item in batch.items:
                self.stats.fallback_items += 1
                result[item.key] = await self._translate_single(
                    item, source_lang, target_lang
                )
            advance(len(batch))

        return {key: result[key] for key in keys}

    async def _translate_batch(
        self, batch: Batch, source_lang: str, target_lang: str
    ) -> list[str]:
        """
        Traduit un lot en un appel et valide la réponse.

        Raises:
            ValidationMismatch: Réponse rejetée par le pipeline
            Exception: Erreur de l'appel distant (propagée telle quelle)
        """
        request = str(batch)
        self.stats.batches += 1
        self.stats.remote_calls += 1
        response = await self.remote.translate(request, source_lang, target_lang)

        raw_lines = parse_numbered_response(response, len(batch))
        translations = [clean_line(line) if line is not None else None for line in raw_lines]

        context = ValidationContext(
            source_texts=batch.texts,
            request=request,
            response=response,
            translations=translations,
            source_lang=source_lang,
            target_lang=target_lang,
        )
        check = self._batch_pipeline.run(context)
        if not check.is_valid:
            raise ValidationMismatch(check)

        logger.debug(f"✅ Lot {batch.index} accepté ({len(batch)} texte(s))")
        return [t for t in translations if t is not None]

    async def _translate_single(
        self, item: BatchItem, source_lang: str, target_lang: str
    ) -> str:
        """Traduit un texte seul ; en cas d'échec, retourne le texte source."""
        self.stats.remote_calls += 1
        try:
            response = await self.remote.translate(item.text, source_lang, target_lang)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning(f"⚠️ Traduction unitaire échouée pour {item.key!r} : {e}")
            self.stats.fallback_failures += 1
            return item.text

        translated = strip_wrapping_quotes(response)
        context = ValidationContext(
            source_texts=[item.text],
            request=item.text,
            response=response,
            translations=[translated or None],
            source_lang=source_lang,
            target_lang=target_lang,
        )
        check = self._single_pipeline.run(context)
        if not check.is_valid:
            logger.warning(
                f"⚠️ Traduction unitaire rejetée pour {item.key!r}, "
                f"texte source conservé : {check.error_message}"
            )
            self.stats.fallback_failures += 1
            return item.text

        self._remember(source_lang, target_lang, item.text, translated)
        return translated

    def _remember(
        self, source_lang: str, target_lang: str, text: str, translated: str
    ) -> None:
        # Un écho ou un texte invariant n'apprend rien au cache
        if self.cache is not None and translated != text:
            self.cache.set(source_lang, target_lang, text, translated)
