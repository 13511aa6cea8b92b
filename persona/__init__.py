"""Rule-based persona classification."""

from .classifier import PersonaClassifier, classify
from .rules import RULES, Rule
from .signals import Cadence, ProfileSignals, extract_signals
from .suggestions import CONTENT_SUGGESTIONS

__all__ = [
    "CONTENT_SUGGESTIONS",
    "Cadence",
    "PersonaClassifier",
    "ProfileSignals",
    "RULES",
    "Rule",
    "classify",
    "extract_signals",
]
