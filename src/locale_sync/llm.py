import asyncio
import datetime
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from jinja2 import Environment, FileSystemLoader, select_autoescape
from openai import APIError, APITimeoutError, AsyncOpenAI, OpenAIError, RateLimitError
from openai.types.chat import ChatCompletionMessageParam

from .config import TemplateNames
from .errors import ConfigurationError, RemoteCallError
from .logger import get_logger, get_session_log_path

logger = get_logger(__name__)

API_KEY_ENV = "LOCALE_SYNC_API_KEY"
DEFAULT_PROMPT_DIR = Path(__file__).parent / "templates"

# Plafond de tokens de la réponse, dimensionné pour un lot complet
DEFAULT_MAX_TOKENS = 4096


def get_api_key() -> str:
    # Charger les variables d'environnement depuis .env
    load_dotenv()

    api_key = os.getenv(API_KEY_ENV)
    if not api_key:
        raise ConfigurationError(
            f"❌ La clé API de traduction n'est pas définie.\n"
            f"  1. Créez un fichier .env à la racine du projet\n"
            f"  2. Ajoutez-y : {API_KEY_ENV}=sk-votre-cle\n"
            f"  ou renseignez \"apiKey\" dans le fichier .locale-sync.json"
        )
    return api_key


class LLM:
    """
    Traducteur distant asynchrone (API compatible OpenAI) avec :
      - prompt système rendu depuis un template Jinja2,
      - un fichier de log par requête dans le répertoire de session,
      - retry avec backoff exponentiel sur timeout et limite de débit.

    Implémente l'opération opaque translate(text, source, target) utilisée
    par le BatchTranslator.
    """

    def __init__(
        self,
        model_name: str,
        url: str,
        api_key: Optional[str] = None,
        prompt_dir: str | Path = DEFAULT_PROMPT_DIR,
        temperature: float = 0.3,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model_name = model_name
        self.url = url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        if client is None:
            client = AsyncOpenAI(
                api_key=api_key or get_api_key(), base_url=url, timeout=timeout
            )
        self.client = client

        # Config Jinja2
        self.env = Environment(
            loader=FileSystemLoader(str(prompt_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )

        # Compteur pour nommage unique des logs
        self._log_counter = 0

    # -----------------------------------
    # 🔹 Rendu du template
    # -----------------------------------
    def render_prompt(self, template_name: str, **kwargs) -> str:
        """Rend un template Jinja2 avec les variables données."""
        template = self.env.get_template(template_name)
        return template.render(**kwargs)

    # -----------------------------------
    # 🔹 Gestion du log
    # -----------------------------------
    def _create_log(self, prompt: str, content: str, context: Optional[str] = None) -> Path:
        """
        Écrit l'en-tête du journal d'une requête et retourne son chemin.

        Args:
            prompt: Prompt système envoyé
            content: Texte à traduire
            context: Contexte optionnel pour nommer le fichier (ex: "en-US")
        """
        timestamp = datetime.datetime.now().isoformat().replace(":", "-")

        self._log_counter += 1
        if context:
            filename = f"llm_{context}_{self._log_counter:04d}_{timestamp}.log"
        else:
            filename = f"llm_{self._log_counter:04d}_{timestamp}.log"

        log_path = get_session_log_path(filename)

        header = (
            f"=== LLM REQUEST LOG ===\n"
            f"Timestamp : {timestamp}\n"
            f"Model     : {self.model_name}\n"
            f"Prompt len: {len(prompt)} chars\n"
            f"{'-'*40}\n\n"
            f"--- PROMPT ---\n{prompt}\n\n"
            f"--- CONTENT ---\n{content}\n\n"
            f"--- RESPONSE ---\n"
        )
        with open(log_path, "w", encoding="utf-8") as f:
            f.write(header)
        return log_path

    def _append_response(self, log_path: Path, response: str):
        """Ajoute la réponse à la fin du log existant."""
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(response.strip() + "\n")

    # -----------------------------------
    # 🔹 Requêtes
    # -----------------------------------
    async def query(
        self,
        system_prompt: str,
        content: str,
        context: Optional[str] = None,
    ) -> str:
        """
        Envoie une requête au modèle avec retry automatique.

        Args:
            system_prompt: Prompt système
            content: Contenu à traiter
            context: Contexte optionnel pour nommer le fichier de log

        Returns:
            Réponse du modèle (espaces de bord retirés)

        Raises:
            RemoteCallError: Erreur API, réponse vide ou retries épuisés

        Note:
            Timeout et RateLimitError déclenchent un retry avec backoff
            exponentiel ; les autres erreurs API ne sont pas retentées.
        """
        log_path = self._create_log(system_prompt, content, context)
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                messages: list[ChatCompletionMessageParam] = [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": content},
                ]
                resp = await self.client.chat.completions.create(
                    model=self.model_name,
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
                result = resp.choices[0].message.content if resp.choices else None
                if result is None or not result.strip():
                    self._append_response(log_path, "[RÉPONSE VIDE]")
                    raise RemoteCallError("Réponse vide du modèle", attempts=attempt + 1)

                response_text = result.strip()
                if attempt > 0:
                    logger.info(
                        f"✅ Requête LLM réussie après {attempt + 1} tentative(s) "
                        f"({len(content)} chars)"
                    )
                else:
                    logger.info(f"✅ Requête LLM réussie ({len(content)} chars)")

                self._append_response(log_path, response_text)
                return response_text

            except APITimeoutError as e:
                last_error = e
                logger.warning(
                    f"⏱️ Timeout API (tentative {attempt + 1}/{self.max_retries}): {e}"
                )
                if attempt < self.max_retries - 1:
                    delay = self.retry_delay * (2**attempt)
                    logger.info(f"⏳ Attente de {delay:.1f}s avant nouvelle tentative...")
                    await asyncio.sleep(delay)
                    continue

            except RateLimitError as e:
                last_error = e
                logger.warning(
                    f"🚦 Limite de débit atteinte (tentative {attempt + 1}/{self.max_retries}): {e}"
                )
                if attempt < self.max_retries - 1:
                    # Pour rate limit, attendre plus longtemps
                    delay = self.retry_delay * (3**attempt)
                    logger.info(f"⏳ Attente de {delay:.1f}s avant nouvelle tentative...")
                    await asyncio.sleep(delay)
                    continue

            except APIError as e:
                logger.error(f"❌ Erreur API: {e}")
                self._append_response(log_path, f"[ERREUR API: {e}]")
                raise RemoteCallError(f"Erreur API: {e}", attempts=attempt + 1) from e

            except OpenAIError as e:
                logger.error(f"❌ Erreur OpenAI générique: {e}")
                self._append_response(log_path, f"[ERREUR OPENAI: {e}]")
                raise RemoteCallError(f"Erreur OpenAI: {e}", attempts=attempt + 1) from e

        if isinstance(last_error, APITimeoutError):
            message = (
                f"Timeout après {self.max_retries} tentatives - "
                f"le serveur n'a pas répondu à temps"
            )
        elif isinstance(last_error, RateLimitError):
            message = (
                f"Rate limit après {self.max_retries} tentatives - "
                f"trop de requêtes, veuillez patienter"
            )
        else:
            message = f"Échec après {self.max_retries} tentatives"

        logger.error(f"❌ Échec définitif après {self.max_retries} tentatives")
        self._append_response(log_path, f"[ERREUR: {message}]")
        raise RemoteCallError(message, attempts=self.max_retries) from last_error

    async def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        """
        Traduit un texte (ou un bloc de lignes numérotées).

        Example:
            >>> await llm.translate("1. 你好", "zh-CN", "en-US")
            '1. Hello'
        """
        prompt = self.render_prompt(
            TemplateNames.Translate_Template,
            source_language=source_lang,
            target_language=target_lang,
        )
        return await self.query(prompt, text, context=target_lang)
