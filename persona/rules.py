"""Ordered persona decision rules and the signal agreement table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, Optional, Tuple

from config.settings import PersonaSettings
from core import Persona

from .signals import Cadence, ProfileSignals


Decision = Callable[[ProfileSignals, PersonaSettings], Optional[Persona]]


@dataclass(frozen=True)
class Rule:
    name: str
    description: str
    decide: Decision


def _high_activity_network(signals: ProfileSignals, settings: PersonaSettings) -> Optional[Persona]:
    network = signals.network_size or 0
    if signals.cadence != Cadence.VERY_ACTIVE or network <= settings.high_network_threshold:
        return None
    return Persona.HUSTLER if signals.promo_markers else Persona.NETWORKER


def _inactive(signals: ProfileSignals, settings: PersonaSettings) -> Optional[Persona]:
    if signals.cadence == Cadence.INACTIVE or signals.post_count <= 1:
        return Persona.GHOST
    return None


def _occasional_poster(signals: ProfileSignals, settings: PersonaSettings) -> Optional[Persona]:
    if 2 <= signals.post_count <= 10:
        return Persona.LURKER
    return None


def _prolific_poster(signals: ProfileSignals, settings: PersonaSettings) -> Optional[Persona]:
    if signals.post_count <= 10:
        return None
    network = signals.network_size or 0
    return Persona.HUSTLER if network <= settings.medium_network_threshold else Persona.NETWORKER


def _fallback(signals: ProfileSignals, settings: PersonaSettings) -> Optional[Persona]:
    return Persona.GHOST


RULES: Tuple[Rule, ...] = (
    Rule(
        name="high_activity_network",
        description="very active poster with a large network, split on promotional language",
        decide=_high_activity_network,
    ),
    Rule(
        name="inactive",
        description="inactive cadence or at most one post",
        decide=_inactive,
    ),
    Rule(
        name="occasional_poster",
        description="between 2 and 10 posts",
        decide=_occasional_poster,
    ),
    Rule(
        name="prolific_poster",
        description="more than 10 posts, split on network size",
        decide=_prolific_poster,
    ),
    Rule(
        name="fallback",
        description="no other rule matched",
        decide=_fallback,
    ),
)


def first_match(
    signals: ProfileSignals,
    settings: PersonaSettings,
    rules: Tuple[Rule, ...] = RULES,
) -> Tuple[Rule, Persona]:
    for rule in rules:
        persona = rule.decide(signals, settings)
        if persona is not None:
            return rule, persona
    return (rules[-1] if rules else RULES[-1]), Persona.GHOST


# Which personas each signal supports; None means the signal could not be evaluated.

def cadence_support(signals: ProfileSignals, settings: PersonaSettings) -> Optional[FrozenSet[Persona]]:
    table = {
        Cadence.VERY_ACTIVE: frozenset({Persona.NETWORKER, Persona.HUSTLER}),
        Cadence.ACTIVE: frozenset({Persona.NETWORKER, Persona.LURKER}),
        Cadence.OCCASIONAL: frozenset({Persona.LURKER}),
        Cadence.INACTIVE: frozenset({Persona.GHOST}),
    }
    return table.get(signals.cadence)


def network_support(signals: ProfileSignals, settings: PersonaSettings) -> Optional[FrozenSet[Persona]]:
    network = signals.network_size
    if network is None:
        return None
    if network > settings.high_network_threshold:
        return frozenset({Persona.NETWORKER, Persona.HUSTLER})
    if network > settings.medium_network_threshold:
        return frozenset({Persona.NETWORKER, Persona.LURKER})
    if network > 0:
        return frozenset({Persona.HUSTLER, Persona.LURKER, Persona.GHOST})
    return frozenset({Persona.GHOST})


def keyword_support(signals: ProfileSignals, settings: PersonaSettings) -> Optional[FrozenSet[Persona]]:
    if signals.promo_markers:
        return frozenset({Persona.HUSTLER})
    if signals.inspected_texts:
        return frozenset({Persona.NETWORKER, Persona.LURKER})
    return frozenset({Persona.GHOST})


def post_count_support(signals: ProfileSignals, settings: PersonaSettings) -> Optional[FrozenSet[Persona]]:
    if signals.post_count <= 1:
        return frozenset({Persona.GHOST})
    if signals.post_count <= 10:
        return frozenset({Persona.LURKER})
    return frozenset({Persona.NETWORKER, Persona.HUSTLER})


SIGNAL_SUPPORT = (
    ("cadence", cadence_support),
    ("network_size", network_support),
    ("keywords", keyword_support),
    ("post_count", post_count_support),
)
