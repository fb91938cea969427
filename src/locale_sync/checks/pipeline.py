"""
Pipeline de validation des réponses du traducteur.

Les checks sont exécutés dans l'ordre et le pipeline s'arrête à la première
erreur. Il n'y a pas de correction ici : un échec déclenche le fallback
ligne par ligne du BatchTranslator.
"""

from ..logger import get_logger
from .base import Check, CheckResult, ValidationContext
from .echo_check import EchoCheck
from .line_count_check import LineCountCheck
from .placeholder_check import PlaceholderCheck

logger = get_logger(__name__)


class ValidationPipeline:
    """
    Exécute une liste ordonnée de checks.

    Attributes:
        checks: Checks à exécuter (l'ordre compte)

    Example:
        >>> pipeline = ValidationPipeline.for_batch()
        >>> result = pipeline.run(context)
        >>> if not result.is_valid:
        ...     raise ValidationMismatch(result)
    """

    def __init__(self, checks: list[Check]):
        self.checks = checks

    @classmethod
    def for_batch(cls) -> "ValidationPipeline":
        """Pipeline d'un lot numéroté : écho, lignes, placeholders."""
        return cls([EchoCheck(), LineCountCheck(), PlaceholderCheck()])

    @classmethod
    def for_single(cls) -> "ValidationPipeline":
        """
        Pipeline d'un texte traduit seul.

        Pas de check d'écho : un écho vaut le texte source, qui est de
        toute façon la valeur de repli.
        """
        return cls([LineCountCheck(), PlaceholderCheck()])

    def run(self, context: ValidationContext) -> CheckResult:
        """
        Valide le contexte.

        Returns:
            Le premier CheckResult en échec, sinon un résultat valide
            nommé "pipeline"
        """
        for check in self.checks:
            result = check.validate(context)
            if not result.is_valid:
                logger.debug(f"{result!r}")
                return result
            logger.debug(f"✅ {check.name}: OK")

        return CheckResult(is_valid=True, check_name="pipeline")
