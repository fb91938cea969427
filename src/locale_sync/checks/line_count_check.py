"""
Check de présence des lignes.

Chaque position du lot doit avoir reçu une traduction non vide une fois
la numérotation et les guillemets retirés.
"""

from .base import CheckResult, LineErrorDetail, ValidationContext


class LineCountCheck:
    """
    Vérifie qu'aucune ligne n'est manquante ou vide.

    Example:
        >>> context = ValidationContext(
        ...     source_texts=["你好", "再见"],
        ...     request="1. 你好\\n2. 再见",
        ...     response="1. Hello",
        ...     translations=["Hello", None],
        ... )
        >>> LineCountCheck().validate(context).error_data["errors"][0]["position"]
        1
    """

    @property
    def name(self) -> str:
        return "line_count"

    def validate(self, context: ValidationContext) -> CheckResult:
        errors: list[LineErrorDetail] = []

        for position, source_text in enumerate(context.source_texts):
            translated = (
                context.translations[position]
                if position < len(context.translations)
                else None
            )
            if not translated:
                errors.append(
                    {
                        "position": position,
                        "source_text": source_text,
                        "translated_text": translated,
                    }
                )

        if not errors:
            return CheckResult(is_valid=True, check_name=self.name)

        positions = ", ".join(str(e["position"] + 1) for e in errors)
        return CheckResult(
            is_valid=False,
            check_name=self.name,
            error_message=(
                f"{len(errors)}/{len(context.source_texts)} ligne(s) manquante(s) "
                f"ou vide(s) : {positions}"
            ),
            error_data={"errors": errors},
        )
