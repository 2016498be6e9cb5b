"""Action categorization for free-text care logs.

Each log is mapped to exactly one ``ActionCategory`` by walking an ordered
vocabulary. A keyword matches at the start of a word, so "fed" matches
"fed the cat" but not "infected".
"""

import re
from enum import StrEnum

from bloomie.engine.schema import ActivityLog


class ActionCategory(StrEnum):
    FERTILIZING = "fertilizing"
    WATERING = "watering"
    FEEDING = "feeding"
    WALK = "walk"
    SLEEP = "sleep"
    DIAPER = "diaper"
    MEDICINE = "medicine"
    GROOMING = "grooming"
    OTHER = "other"


# First match wins. Fertilizing precedes feeding so "plant food" is not a meal.
VOCABULARY: list[tuple[ActionCategory, tuple[str, ...]]] = [
    (ActionCategory.FERTILIZING, ("fertili", "plant food")),
    (ActionCategory.WATERING, ("water", "irrigat", "sula")),
    (ActionCategory.FEEDING, ("feed", "fed", "food", "meal", "milk", "bottle", "breastf", "formula", "mama", "besle", "emzir")),
    (ActionCategory.WALK, ("walk", "exercise", "stroll", "gezdir")),
    (ActionCategory.SLEEP, ("sleep", "slept", "nap")),
    (ActionCategory.DIAPER, ("diaper", "nappy")),
    (ActionCategory.MEDICINE, ("medic", "vaccin", "pill", "dose", "vitamin")),
    (ActionCategory.GROOMING, ("groom", "bath", "brush", "nail")),
]

_PATTERNS = [
    (category, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + ")", re.IGNORECASE))
    for category, keywords in VOCABULARY
]


def categorize_text(text: str | None) -> ActionCategory | None:
    """Return the first vocabulary category matching ``text``, or None."""
    if not text:
        return None
    for category, pattern in _PATTERNS:
        if pattern.search(text):
            return category
    return None


def categorize(log: ActivityLog) -> ActionCategory:
    """Categorize by parsed action, then raw input, then notes."""
    for text in (log.parsed_action, log.raw_input, log.parsed_notes):
        category = categorize_text(text)
        if category is not None:
            return category
    return ActionCategory.OTHER
