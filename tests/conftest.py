"""
Shared fixtures for the assistant tests.

All tests are offline: the corpus comes from in-memory dicts or tmp files,
and randomness is pinned with FixedRandom.
"""

import copy

import pytest

from helpers import FixedRandom
from shopbot.chatbot.corpus import StaticCorpusSource
from shopbot.chatbot.schemas import TrainingCorpus
from shopbot.chatbot.service import ChatbotModel
from shopbot.schemas import ProductRecord


CORPUS = {
    "intents": [
        {
            "tag": "greeting",
            "patterns": ["hello", "hi", "good morning"],
            "responses": ["Hello! How can I help you today?", "Hi there!"],
        },
        {
            "tag": "product_search",
            "patterns": ["laptop", "looking for", "i want", "earbuds"],
            "responses": ["Here are my top recommendations:"],
        },
        {
            "tag": "customer_service",
            "patterns": ["refund", "help"],
            "responses": ["I'm here to help!"],
        },
        {
            "tag": "navigation",
            "patterns": ["go to", "cart"],
            "responses": ["Where would you like to go?"],
        },
        {
            "tag": "category_browse",
            "patterns": ["categories"],
            "responses": [],
        },
    ],
    "products": [
        {
            "id": "seed-1",
            "name": "Stainless Water Bottle",
            "priceCents": 1599,
            "category": "Outdoors",
            "keywords": ["bottle", "hydration"],
        },
    ],
    "training_metadata": {"version": "test"},
}

CATALOG = [
    {
        "id": "p1",
        "name": "Wireless Earbuds",
        "priceCents": 4999,
        "category": "Electronics",
        "keywords": ["earbuds", "audio"],
        "rating": {"stars": 4.6, "count": 120},
    },
    {
        "id": "p2",
        "name": "Desk Lamp",
        "priceCents": 2599,
        "category": "Home",
    },
    {
        "id": "p3",
        "name": "Noise Cancelling Headphones",
        "priceCents": 19999,
        "category": "Electronics",
        "keywords": ["headphones", "audio"],
        "rating": {"stars": 4.2, "count": 80},
    },
]


@pytest.fixture
def corpus_data():
    return copy.deepcopy(CORPUS)


@pytest.fixture
def corpus(corpus_data):
    return TrainingCorpus.model_validate(corpus_data)


@pytest.fixture
def intents(corpus):
    return corpus.intents


@pytest.fixture
def catalog():
    return [ProductRecord.model_validate(p) for p in CATALOG]


@pytest.fixture
def make_model(corpus_data, catalog):
    def _make(products=None, data=None, **kwargs):
        kwargs.setdefault("store_intents", [])
        kwargs.setdefault("rng", FixedRandom(0))
        return ChatbotModel(
            products=catalog if products is None else products,
            corpus_source=StaticCorpusSource(corpus_data if data is None else data),
            **kwargs,
        )
    return _make
