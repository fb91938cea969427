"""
Check de détection d'écho.

Certains modèles renvoient le bloc reçu au lieu de le traduire. Une réponse
identique à la requête fait échouer tout le lot.
"""

from .base import CheckResult, ValidationContext


class EchoCheck:
    """Rejette une réponse identique (aux espaces près) au bloc envoyé."""

    @property
    def name(self) -> str:
        return "echo"

    def validate(self, context: ValidationContext) -> CheckResult:
        if context.response.strip() != context.request.strip():
            return CheckResult(is_valid=True, check_name=self.name)

        return CheckResult(
            is_valid=False,
            check_name=self.name,
            error_message=(
                f"Réponse identique à la requête ({len(context.source_texts)} ligne(s))"
            ),
            error_data={"line_count": len(context.source_texts)},
        )
