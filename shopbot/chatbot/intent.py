# -*- coding: utf-8 -*-
"""
Intent classifier for the shopping assistant.

Lexical scoring over each intent's pattern list. Per pattern, the first tier
that applies is counted:

  exact   (utterance == pattern)               weight x 3
  phrase  (pattern bounded by spaces / edges)  weight x 2
  partial (pattern is any substring)           weight x 1

Navigation and support cue phrases add a flat bonus to their intents. The
best tag wins on a strictly higher score, so ties go to the intent seen
first in corpus order. No intent above zero → "general".
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from shopbot.chatbot.schemas import ClassificationResult, Intent
from shopbot.utils.logger import get_logger

logger = get_logger(__name__)

GENERAL_TAG = "general"

# Tunable constants, kept as-is for behavioural compatibility.
_EXACT_MULTIPLIER   = 3
_PHRASE_MULTIPLIER  = 2
_PARTIAL_MULTIPLIER = 1
_CUE_BONUS          = 2
_DEFAULT_WEIGHT     = 1.0

_NAVIGATION_CUES = ("go to", "take me", "visit", "open")
_SUPPORT_CUES    = ("contact", "customer care", "support")


@dataclass(frozen=True)
class WeightedPattern:
    pattern: str
    weight:  float = _DEFAULT_WEIGHT


def _is_phrase_match(message: str, pattern: str) -> bool:
    return (
        f" {pattern} " in message
        or message.startswith(f"{pattern} ")
        or message.endswith(f" {pattern}")
    )


class IntentClassifier:
    """Scores every intent of a corpus against one utterance.

    The pattern index is derived from the intents and rebuilt in full by
    update_patterns(); it is never patched in place.
    """

    def __init__(
        self,
        intents: Sequence[Intent],
        weights: Optional[Dict[str, float]] = None,
    ):
        self._weights = dict(weights or {})
        self.intents: List[Intent] = []
        self.patterns: Dict[str, List[WeightedPattern]] = {}
        self.update_patterns(intents)

    def build_pattern_index(self, intents: Sequence[Intent]) -> Dict[str, List[WeightedPattern]]:
        index: Dict[str, List[WeightedPattern]] = {}
        for intent in intents:
            weight = self._weights.get(intent.tag, _DEFAULT_WEIGHT)
            index[intent.tag] = [
                WeightedPattern(p.lower(), weight)
                for p in intent.patterns
                if p.strip()
            ]
        return index

    def update_patterns(self, intents: Sequence[Intent]) -> None:
        self.intents  = list(intents)
        self.patterns = self.build_pattern_index(self.intents)

    @property
    def total_patterns(self) -> int:
        # Raw corpus count, blank patterns included; confidence divides by it.
        return sum(len(i.patterns) for i in self.intents)

    def all_intents(self) -> List[str]:
        return list(self.patterns.keys())

    def classify(self, message: str) -> ClassificationResult:
        lower = message.lower()
        scores:  Dict[str, float]     = {}
        matches: Dict[str, List[str]] = {}

        for tag, patterns in self.patterns.items():
            scores[tag]  = 0.0
            matches[tag] = []
            for wp in patterns:
                if lower == wp.pattern:
                    scores[tag] += wp.weight * _EXACT_MULTIPLIER
                    matches[tag].append(f"EXACT: {wp.pattern}")
                elif _is_phrase_match(lower, wp.pattern):
                    scores[tag] += wp.weight * _PHRASE_MULTIPLIER
                    matches[tag].append(f"PHRASE: {wp.pattern}")
                elif wp.pattern in lower:
                    scores[tag] += wp.weight * _PARTIAL_MULTIPLIER
                    matches[tag].append(f"PARTIAL: {wp.pattern}")

        if any(cue in lower for cue in _NAVIGATION_CUES):
            scores["navigation"] = scores.get("navigation", 0.0) + _CUE_BONUS
            matches.setdefault("navigation", []).append("NAVIGATION_BONUS")

        if any(cue in lower for cue in _SUPPORT_CUES):
            scores["customer_service"] = scores.get("customer_service", 0.0) + _CUE_BONUS
            matches.setdefault("customer_service", []).append("SERVICE_BONUS")

        best_intent = GENERAL_TAG
        best_score  = 0.0
        for tag, score in scores.items():
            if score > best_score:
                best_score  = score
                best_intent = tag

        confidence = min(best_score / max(self.total_patterns * 0.5, 1), 1.0)

        logger.debug(
            "Intent: '%s' → %s (%d%%) | scores=%s | matches=%s",
            lower[:60], best_intent, round(confidence * 100),
            {t: s for t, s in scores.items() if s}, {t: m for t, m in matches.items() if m},
        )
        return ClassificationResult(
            intent=best_intent,
            confidence=confidence,
            scores=scores,
            matches=matches,
        )
