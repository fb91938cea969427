"""
Check de conservation des placeholders.

Les placeholders ({slot0}, {{x}}...) sont substitués à l'exécution par le
code appelant : une traduction qui en perd un est inutilisable.
"""

from ..translation.parser import extract_placeholders
from .base import CheckResult, PlaceholderErrorDetail, ValidationContext


class PlaceholderCheck:
    """
    Vérifie que chaque placeholder du texte source figure dans sa traduction.

    Les lignes absentes sont ignorées ici (c'est le rôle de LineCountCheck).

    Example:
        >>> context = ValidationContext(
        ...     source_texts=["等于{slot0}"],
        ...     request="1. 等于{slot0}",
        ...     response="1. equal to {slot}",
        ...     translations=["equal to {slot}"],
        ... )
        >>> PlaceholderCheck().validate(context).is_valid
        False
    """

    @property
    def name(self) -> str:
        return "placeholder"

    def validate(self, context: ValidationContext) -> CheckResult:
        errors: list[PlaceholderErrorDetail] = []

        for position, source_text in enumerate(context.source_texts):
            placeholders = extract_placeholders(source_text)
            if not placeholders:
                continue
            translated = (
                context.translations[position]
                if position < len(context.translations)
                else None
            )
            if translated is None:
                continue

            missing = [p for p in dict.fromkeys(placeholders) if p not in translated]
            if missing:
                errors.append(
                    {
                        "position": position,
                        "source_text": source_text,
                        "translated_text": translated,
                        "missing_placeholders": missing,
                    }
                )

        if not errors:
            return CheckResult(is_valid=True, check_name=self.name)

        first = errors[0]
        return CheckResult(
            is_valid=False,
            check_name=self.name,
            error_message=(
                f"Placeholders perdus sur {len(errors)} ligne(s)\n"
                f"  • Première erreur: ligne {first['position'] + 1}\n"
                f"    - Manquants: {', '.join(first['missing_placeholders'])}"
            ),
            error_data={"errors": errors},
        )
