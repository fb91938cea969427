"""
Validation des réponses du traducteur.

Ce module fournit un pipeline composable de checks appliqué à chaque
réponse avant d'accepter une traduction.
"""

from .base import (
    Check,
    CheckResult,
    ValidationContext,
    LineErrorDetail,
    PlaceholderErrorDetail,
)
from .pipeline import ValidationPipeline
from .echo_check import EchoCheck
from .line_count_check import LineCountCheck
from .placeholder_check import PlaceholderCheck

__all__ = [
    "Check",
    "CheckResult",
    "ValidationContext",
    "ValidationPipeline",
    "EchoCheck",
    "LineCountCheck",
    "PlaceholderCheck",
    # TypedDicts pour error_data
    "LineErrorDetail",
    "PlaceholderErrorDetail",
]
