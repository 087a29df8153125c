# -*- coding: utf-8 -*-
"""
Template response selection for the shopping assistant.

Picks one of the classified intent's reply templates through an injected
random source; intents without templates fall back to a fixed table.
"""
from __future__ import annotations

import random
from typing import Dict, Optional, Protocol, Sequence

from shopbot.chatbot.schemas import ClassificationResult, Intent


class RandomSource(Protocol):
    def randrange(self, stop: int) -> int: ...


_DEFAULT_RESPONSES = {
    "greeting":         "Hello! How can I help you today?",
    "customer_service": "I'm here to help! What seems to be the problem?",
    "product_search":   "What kind of product are you looking for?",
    "navigation":       "Where would you like to go?",
    "price_inquiry":    "I can help you find products in your budget!",
    "general":          "I'm here to help with any questions you have!",
}


def default_response(intent: str) -> str:
    return _DEFAULT_RESPONSES.get(intent, _DEFAULT_RESPONSES["general"])


class ResponseGenerator:

    def __init__(self, intents: Sequence[Intent], rng: Optional[RandomSource] = None):
        self._rng = rng or random.Random()
        self.update_intents(intents)

    def update_intents(self, intents: Sequence[Intent]) -> None:
        self._by_tag: Dict[str, Intent] = {}
        for intent in intents:
            self._by_tag.setdefault(intent.tag, intent)

    def generate(self, classification: ClassificationResult) -> str:
        intent = self._by_tag.get(classification.intent)
        if intent is None or not intent.responses:
            return default_response(classification.intent)
        return intent.responses[self._rng.randrange(len(intent.responses))]
