"""Deterministic persona classifier.

``classify`` never performs I/O and never raises for missing data: unknown
signals simply stop contributing to the confidence score.
"""

from __future__ import annotations

from typing import List, Optional

from config.settings import PersonaSettings
from core import Persona, PersonaResult, ProfileRecord, SignalReport

from .rules import RULES, SIGNAL_SUPPORT, Rule, first_match
from .signals import ProfileSignals, extract_signals
from .suggestions import suggestions_for


BASE_CONFIDENCE = 32
SIGNAL_WEIGHT = 17


def _describe(name: str, signals: ProfileSignals) -> str:
    if name == "cadence":
        return signals.cadence.value
    if name == "network_size":
        return "unknown" if signals.network_size is None else f"{signals.network_size:,}"
    if name == "keywords":
        return ", ".join(signals.promo_markers) or "none"
    return str(signals.post_count)


def score_signals(
    persona: Persona,
    signals: ProfileSignals,
    settings: PersonaSettings,
) -> List[SignalReport]:
    reports: List[SignalReport] = []
    for name, support in SIGNAL_SUPPORT:
        personas = support(signals, settings)
        reports.append(
            SignalReport(
                name=name,
                value=_describe(name, signals),
                agrees=bool(personas and persona in personas),
                evaluated=personas is not None,
            )
        )
    return reports


def confidence_from(reports: List[SignalReport]) -> int:
    agreeing = sum(1 for report in reports if report.agrees)
    return max(0, min(100, BASE_CONFIDENCE + SIGNAL_WEIGHT * agreeing))


def _reasoning(persona: Persona, rule: Rule, reports: List[SignalReport]) -> str:
    labels = {
        "cadence": "posting cadence",
        "network_size": "network size",
        "keywords": "promotional markers",
        "post_count": "post count",
    }
    observed = "; ".join(f"{labels[report.name]} {report.value}" for report in reports)
    agreeing = [labels[report.name] for report in reports if report.agrees]
    missing = [labels[report.name] for report in reports if not report.evaluated]

    text = f"Classified as {persona.value} by rule '{rule.name}' ({rule.description}). Observed: {observed}."
    if agreeing:
        text += f" Supporting signals: {', '.join(agreeing)} ({len(agreeing)} of {len(reports)})."
    else:
        text += f" No signal supports this persona directly (0 of {len(reports)})."
    if missing:
        text += f" Unavailable: {', '.join(missing)}."
    return text


def classify(profile: ProfileRecord, settings: Optional[PersonaSettings] = None) -> PersonaResult:
    """Classify a profile into one of the four personas."""
    settings = settings or PersonaSettings()
    signals = extract_signals(profile, settings)
    rule, persona = first_match(signals, settings, RULES)
    reports = score_signals(persona, signals, settings)

    return PersonaResult(
        persona=persona,
        confidence=confidence_from(reports),
        reasoning=_reasoning(persona, rule, reports),
        content_suggestions=suggestions_for(persona),
        rule=rule.name,
        signals=reports,
    )


class PersonaClassifier:
    """Settings-bound wrapper used by the orchestrator."""

    def __init__(self, settings: Optional[PersonaSettings] = None) -> None:
        self.settings = settings or PersonaSettings()

    def classify(self, profile: ProfileRecord) -> PersonaResult:
        return classify(profile, self.settings)
