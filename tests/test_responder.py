"""
test_responder.py
-----------------
Unit tests for template response selection.
"""

import random

import pytest

from helpers import FixedRandom, make_intent
from shopbot.chatbot.responder import ResponseGenerator, default_response
from shopbot.chatbot.schemas import ClassificationResult


def classified(tag: str) -> ClassificationResult:
    return ClassificationResult(intent=tag, confidence=0.5)


class TestResponseGenerator:

    @pytest.fixture
    def intents(self):
        return [
            make_intent("greeting", ["hi"], ["first", "second", "third"]),
            make_intent("category_browse", ["categories"], []),
        ]

    def test_pinned_choice(self, intents):
        gen = ResponseGenerator(intents, rng=FixedRandom(1, 2, 0))
        assert [gen.generate(classified("greeting")) for _ in range(3)] == [
            "second", "third", "first",
        ]

    def test_seeded_rng_is_deterministic(self, intents):
        a = ResponseGenerator(intents, rng=random.Random(42))
        b = ResponseGenerator(intents, rng=random.Random(42))
        picks_a = [a.generate(classified("greeting")) for _ in range(10)]
        picks_b = [b.generate(classified("greeting")) for _ in range(10)]
        assert picks_a == picks_b
        assert set(picks_a) <= {"first", "second", "third"}

    def test_default_rng(self, intents):
        assert ResponseGenerator(intents).generate(classified("greeting")) in {
            "first", "second", "third",
        }

    def test_unknown_intent_uses_default_table(self, intents):
        gen = ResponseGenerator(intents)
        assert gen.generate(classified("navigation")) == "Where would you like to go?"
        assert gen.generate(classified("price_inquiry")) == default_response("price_inquiry")

    def test_intent_without_responses_falls_back_to_general(self, intents):
        gen = ResponseGenerator(intents)
        assert gen.generate(classified("category_browse")) == default_response("general")

    def test_unrecognised_tag_falls_back_to_general(self):
        assert default_response("weather") == "I'm here to help with any questions you have!"

    def test_update_intents(self, intents):
        gen = ResponseGenerator(intents, rng=FixedRandom(0))
        gen.update_intents([make_intent("greeting", ["hi"], ["replaced"])])
        assert gen.generate(classified("greeting")) == "replaced"
