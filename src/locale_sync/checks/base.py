"""
Types de base et interfaces pour la validation des réponses du traducteur.

Ce module définit les dataclasses et le protocole partagés par tous les
checks et par le pipeline de validation.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol, TypedDict


class LineErrorDetail(TypedDict):
    """
    Détail d'une ligne rejetée.

    Attributes:
        position: Position de la ligne dans le lot (commence à 0)
        source_text: Texte source de la ligne
        translated_text: Traduction nettoyée (None si absente)
    """

    position: int
    source_text: str
    translated_text: Optional[str]


class PlaceholderErrorDetail(LineErrorDetail):
    """
    Détail d'une ligne ayant perdu des placeholders.

    Attributes:
        missing_placeholders: Placeholders du texte source absents de la traduction
    """

    missing_placeholders: list[str]


@dataclass
class CheckResult:
    """
    Résultat d'un check de validation.

    Attributes:
        is_valid: True si la validation a réussi
        check_name: Nom unique du check (ex: "echo", "placeholder")
        error_message: Message descriptif si invalide, None sinon
        error_data: Données détaillées de l'erreur (format propre au check)

    Example:
        >>> CheckResult(is_valid=False, check_name="echo", error_message="Réponse identique")
        ❌ echo: Réponse identique
    """

    is_valid: bool
    check_name: str
    error_message: Optional[str] = None
    error_data: dict = field(default_factory=dict)

    def __repr__(self) -> str:
        if self.is_valid:
            return f"✅ {self.check_name}: OK"
        return f"❌ {self.check_name}: {self.error_message}"


@dataclass
class ValidationContext:
    """
    Tout ce qu'un check doit savoir sur une requête et sa réponse.

    Attributes:
        source_texts: Textes envoyés, dans l'ordre du lot
        request: Texte exact envoyé au traducteur
        response: Réponse brute du traducteur
        translations: Traduction nettoyée par position (None si absente)
        source_lang: Code de la langue source
        target_lang: Code de la langue cible
    """

    source_texts: list[str]
    request: str
    response: str
    translations: list[Optional[str]]
    source_lang: str = ""
    target_lang: str = ""


class Check(Protocol):
    """
    Interface de tous les checks.

    Example:
        >>> class AlwaysOk:
        ...     @property
        ...     def name(self) -> str:
        ...         return "always_ok"
        ...
        ...     def validate(self, context: ValidationContext) -> CheckResult:
        ...         return CheckResult(is_valid=True, check_name=self.name)
    """

    @property
    def name(self) -> str:
        """Identifiant unique du check."""
        ...

    def validate(self, context: ValidationContext) -> CheckResult:
        """Retourne is_valid=False avec error_data si la réponse est rejetée."""
        ...
