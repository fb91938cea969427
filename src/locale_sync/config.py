"""
Configuration de locale-sync.

Deux niveaux de configuration cohabitent :
- les constantes de processus (noms de templates, niveaux de log), exposées
  comme singletons verrouillables via ConfigBase ;
- l'instantané de configuration d'une session (SyncSettings), lu depuis un
  fichier JSON optionnel et les variables d'environnement LOCALE_SYNC_*.
"""

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


class ConfigBase:
    # Attribut de classe pour le singleton
    _instance = None
    _locked: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def lock(self):
        if not self._locked:
            self._locked = True

    def __setattr__(self, name, value):
        if getattr(self, "_locked", False):
            raise AttributeError("Configuration is locked")
        super().__setattr__(name, value)


class TemplateNames(ConfigBase):
    Translate_Template: str = "translate.jinja"


class Logger_Level(ConfigBase):
    level: int = logging.INFO
    console_level: int = logging.ERROR
    file_level: int = logging.DEBUG


def lock_config():
    """Verrouille la configuration pour empêcher les modifications ultérieures."""
    Logger_Level().lock()
    TemplateNames().lock()


class TranslationMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class I18nLibrary(str, Enum):
    DI18N = "di18n"
    I18NEXT = "i18next"


DEFAULT_LANGUAGES = ("zh-CN", "en-US", "es-ES", "fr-FR", "zh-TW")
DEFAULT_CONFIG_FILENAME = ".locale-sync.json"
ENV_PREFIX = "LOCALE_SYNC_"

# Noms camelCase hérités des réglages de l'éditeur -> champs SyncSettings
_CAMEL_CASE_ALIASES = {
    "translationMode": "translation_mode",
    "defaultLanguage": "default_language",
    "apiKey": "api_key",
    "apiUrl": "api_url",
    "modelName": "model_name",
    "batchCharLimit": "batch_char_limit",
    "batchDelay": "batch_delay",
    "maxTokens": "max_tokens",
    "debounceDelay": "debounce_delay",
    "enableCache": "enable_cache",
    "localesDir": "locales_dir",
    "i18nLibrary": "i18n_library",
    "ignoreKeys": "ignore_keys",
    "ignorePaths": "ignore_paths",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class SyncSettings:
    """
    Instantané en lecture seule de la configuration d'une session.

    Attributes:
        translation_mode: "auto" (traduction à la sauvegarde) ou "manual"
        enabled: Active/désactive l'extraction de clés à la sauvegarde
        default_language: Langue de base, dont les valeurs sont les clés
        languages: Langues configurées, langue de base incluse
        api_key: Clé de l'API de traduction (None = lue via .env au besoin)
        api_url: URL de l'API compatible OpenAI
        model_name: Modèle utilisé pour la traduction
        batch_char_limit: Budget en caractères d'un lot envoyé au modèle
        batch_delay: Pause (s) entre deux lots, pour les limites de débit
        max_tokens: Plafond de tokens de la réponse du modèle pour un lot
        debounce_delay: Fenêtre (s) de regroupement des sauvegardes
        enable_cache: Active le cache persistant des traductions
        locales_dir: Dossier des fichiers de langue, relatif au workspace
        i18n_library: Dialecte des appels de traduction ("di18n"/"i18next")
        ignore_keys: Clés ignorées (correspondance exacte ou joker *)
        ignore_paths: Chemins ignorés (correspondance exacte ou joker *)
    """

    translation_mode: TranslationMode = TranslationMode.AUTO
    enabled: bool = True
    default_language: str = "zh-CN"
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    api_key: Optional[str] = None
    api_url: str = "https://api.siliconflow.cn/v1"
    model_name: str = "Qwen/Qwen2-7B-Instruct"
    batch_char_limit: int = 1800
    batch_delay: float = 1.0
    max_tokens: int = 4096
    debounce_delay: float = 0.5
    enable_cache: bool = True
    locales_dir: str = "locales"
    i18n_library: I18nLibrary = I18nLibrary.DI18N
    ignore_keys: tuple[str, ...] = ()
    ignore_paths: tuple[str, ...] = ()

    def __post_init__(self):
        # Normalisation des types venant de JSON ou de l'environnement
        try:
            object.__setattr__(
                self, "translation_mode", TranslationMode(self.translation_mode)
            )
            object.__setattr__(self, "i18n_library", I18nLibrary(self.i18n_library))
        except ValueError as e:
            raise ConfigurationError(f"Valeur de configuration invalide : {e}") from e

        object.__setattr__(self, "languages", tuple(self.languages))
        object.__setattr__(self, "ignore_keys", tuple(self.ignore_keys))
        object.__setattr__(self, "ignore_paths", tuple(self.ignore_paths))

        if self.batch_char_limit < 1:
            raise ConfigurationError(
                f"batch_char_limit doit être positif (reçu {self.batch_char_limit})"
            )
        if self.max_tokens < 1:
            raise ConfigurationError(f"max_tokens doit être positif (reçu {self.max_tokens})")
        if self.batch_delay < 0 or self.debounce_delay < 0:
            raise ConfigurationError("Les délais doivent être positifs ou nuls")

    @property
    def target_languages(self) -> tuple[str, ...]:
        """Langues configurées, hors langue de base."""
        return tuple(lang for lang in self.languages if lang != self.default_language)

    def with_overrides(self, **overrides: Any) -> "SyncSettings":
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncSettings":
        """
        Construit les réglages depuis un dictionnaire (fichier JSON).

        Accepte les noms snake_case et les noms camelCase des réglages
        d'éditeur (ex: "defaultLanguage"), avec ou sans préfixe
        "locale-sync.". Les noms inconnus sont ignorés.

        Example:
            >>> SyncSettings.from_dict({"defaultLanguage": "zh-CN"}).default_language
            'zh-CN'
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for raw_name, value in data.items():
            name = raw_name.removeprefix("locale-sync.")
            name = _CAMEL_CASE_ALIASES.get(name, name)
            if name in known:
                values[name] = value
        return cls(**values)

    @classmethod
    def load(
        cls,
        config_file: Optional[str | Path] = None,
        environ: Optional[dict[str, str]] = None,
    ) -> "SyncSettings":
        """
        Charge les réglages : fichier JSON puis variables LOCALE_SYNC_*.

        Les variables d'environnement (éventuellement issues d'un .env)
        surchargent le fichier.

        Args:
            config_file: Fichier JSON de réglages (None = aucun)
            environ: Environnement à utiliser (None = os.environ après .env)

        Raises:
            ConfigurationError: Fichier illisible ou valeur invalide
        """
        data: dict[str, Any] = {}
        if config_file is not None:
            path = Path(config_file)
            try:
                data = json.loads(path.read_text(encoding="utf-8") or "{}")
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigurationError(
                    f"Fichier de configuration illisible : {path} ({e})"
                ) from e
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Le fichier de configuration doit contenir un objet JSON : {path}"
                )

        if environ is None:
            load_dotenv()
            environ = dict(os.environ)

        settings = cls.from_dict(data)
        return settings.with_overrides(**_read_environ(environ))


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} : booléen attendu, reçu {raw!r}")


def _parse_list(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _read_environ(environ: dict[str, str]) -> dict[str, Any]:
    """Extrait les surcharges LOCALE_SYNC_* d'un environnement."""
    overrides: dict[str, Any] = {}
    for f in fields(SyncSettings):
        env_name = ENV_PREFIX + f.name.upper()
        raw = environ.get(env_name)
        if raw is None:
            continue
        try:
            if f.name in ("enabled", "enable_cache"):
                overrides[f.name] = _parse_bool(env_name, raw)
            elif f.name in ("languages", "ignore_keys", "ignore_paths"):
                overrides[f.name] = _parse_list(raw)
            elif f.name in ("batch_char_limit", "max_tokens"):
                overrides[f.name] = int(raw)
            elif f.name in ("batch_delay", "debounce_delay"):
                overrides[f.name] = float(raw)
            else:
                overrides[f.name] = raw
        except ValueError as e:
            raise ConfigurationError(f"{env_name} invalide : {raw!r}") from e
    return overrides
