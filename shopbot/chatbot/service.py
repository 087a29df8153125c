# -*- coding: utf-8 -*-
"""
Chatbot orchestrator for the shopping assistant.

predict(message) runs, strictly in sequence:
  classify → pick template → match products (product_search only)
  → enrich template with top products → log turn → suggestions.

The corpus is loaded once, on first use. If it cannot be loaded the model
runs in basic mode and every prediction gets the apology response.
predict() never raises.
"""
from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence, Union

from shopbot.chatbot.corpus import (
    CorpusError, CorpusSource, IntentAddition, LoadedCorpus,
    StoreIntentRegistry, combine_training_data,
)
from shopbot.chatbot.intent import IntentClassifier
from shopbot.chatbot.responder import RandomSource, ResponseGenerator
from shopbot.chatbot.schemas import (
    ChatResponse, ConversationTurn, TrainingCorpus, TrainingExport,
)
from shopbot.chatbot.search import DEFAULT_TOP_N, ProductMatcher
from shopbot.schemas import MatchedProduct, ProductRecord
from shopbot.utils.logger import get_logger
from shopbot.utils.money import CurrencyFormatter, default_formatter

logger = get_logger(__name__)

PRODUCT_SEARCH_TAG   = "product_search"
UNKNOWN_TAG          = "unknown"
REINFORCE_THRESHOLD  = 0.7
ENRICHMENT_LIMIT     = 3
_ENRICHMENT_TRIGGER  = "recommendations"
_ENRICHMENT_CTA      = (
    "Which one interests you most? I can provide more details "
    "or help you add it to your cart! 🛒"
)
_FALLBACK_RESPONSE   = "I'm having trouble understanding. Could you try rephrasing your question?"

_SUGGESTIONS = {
    "product_search": [
        "Ask for more details about any product",
        "Compare prices between products",
        "Add items to your cart",
    ],
    "customer_service": [
        "Contact our support team",
        "Request a refund or exchange",
        "Track your order status",
    ],
    "navigation": [
        "Browse our product categories",
        "Check your cart",
        "View your order history",
    ],
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _coerce_products(products: Optional[Iterable[Union[ProductRecord, dict]]]) -> List[ProductRecord]:
    return [
        p if isinstance(p, ProductRecord) else ProductRecord.model_validate(p)
        for p in products or []
    ]


def _coerce_turn(turn: Union[ConversationTurn, dict]) -> ConversationTurn:
    if isinstance(turn, ConversationTurn):
        return turn
    return ConversationTurn.model_validate(turn)


class ChatbotModel:

    def __init__(
        self,
        products:      Optional[Sequence[Union[ProductRecord, dict]]] = None,
        corpus_source: Optional[Any]                                   = None,
        store_intents: Optional[Sequence[IntentAddition]]              = None,
        rng:           Optional[RandomSource]                          = None,
        formatter:     Optional[CurrencyFormatter]                     = None,
        top_n:         int                                             = DEFAULT_TOP_N,
    ):
        self.is_model_loaded = False
        self.unavailable_reason: Optional[str] = None
        self.training_data:      Optional[TrainingCorpus]    = None
        self.intent_classifier:  Optional[IntentClassifier]  = None
        self.response_generator: Optional[ResponseGenerator] = None
        self.product_matcher:    Optional[ProductMatcher]    = None
        self.store_products = _coerce_products(products)

        self._history: List[ConversationTurn] = []
        self._source        = corpus_source or CorpusSource.from_settings()
        self._store_intents = store_intents
        self._rng           = rng
        self._formatter     = formatter or default_formatter()
        self._top_n         = top_n
        self._load_lock: Optional[asyncio.Lock] = None   # lazily created inside the running loop
        self._state_lock    = threading.RLock()

    # ── Loading ──────────────────────────────────────────────────────────────

    @property
    def degraded(self) -> bool:
        return self.is_model_loaded and self.intent_classifier is None

    async def ensure_loaded(self) -> None:
        if self.is_model_loaded:
            return
        if self._load_lock is None:
            self._load_lock = asyncio.Lock()
        async with self._load_lock:
            if not self.is_model_loaded:
                await self.load_training_data()

    async def load_training_data(self) -> None:
        result = await self._source.load()
        if not isinstance(result, LoadedCorpus):
            self.fallback_to_basic_model(result.reason)
            return

        try:
            additions = self._store_intents
            if additions is None:
                additions = StoreIntentRegistry.from_settings().all()
            combined = combine_training_data(result.corpus, self.store_products, additions)
            self.initialize_model(combined)
        except Exception as e:
            logger.error("Failed to initialise model: %s", str(e)[:150])
            self.fallback_to_basic_model(str(e)[:150])

    def initialize_model(self, corpus: TrainingCorpus) -> None:
        with self._state_lock:
            self.training_data      = corpus
            self.intent_classifier  = IntentClassifier(corpus.intents)
            self.response_generator = ResponseGenerator(corpus.intents, rng=self._rng)
            products = self.store_products if self.store_products else corpus.products
            self.product_matcher    = ProductMatcher(products)
            self.is_model_loaded    = True
            self.unavailable_reason = None
        logger.info(
            "Model initialised: %d intents, %d patterns, %d products for matching",
            len(corpus.intents), self.intent_classifier.total_patterns,
            len(self.product_matcher.products),
        )

    def fallback_to_basic_model(self, reason: str = "") -> None:
        logger.warning("Falling back to basic model: %s", reason or "corpus unavailable")
        self.unavailable_reason = reason or "corpus unavailable"
        self.is_model_loaded    = True

    # ── Prediction ───────────────────────────────────────────────────────────

    async def predict(self, message: str) -> ChatResponse:
        try:
            if not self.is_model_loaded:
                await self.ensure_loaded()
            # State lock may be held by another thread (train / hot update);
            # wait for it off the event loop.
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self._locked_predict, message)
        except Exception as e:
            logger.error("Prediction failed: %s", str(e)[:150])
            return self._fallback_response()

    def _locked_predict(self, message: str) -> ChatResponse:
        with self._state_lock:
            return self._predict(message)

    def _predict(self, message: str) -> ChatResponse:
        if self.intent_classifier is None:
            logger.warning("Basic model mode — no classifier (%s)", self.unavailable_reason)
            return self._fallback_response()

        classification = self.intent_classifier.classify(message)
        template       = self.response_generator.generate(classification)

        products: List[MatchedProduct] = []
        if classification.intent == PRODUCT_SEARCH_TAG:
            products = self.product_matcher.find_matches(message, self._top_n)

        response = self.enhance_response(template, products, message)

        self._history.append(ConversationTurn(
            user_message=message,
            intent=classification.intent,
            confidence=classification.confidence,
            response=response,
            timestamp=_now(),
        ))

        logger.info(
            "Chat: '%s' → %s (%.2f), %d products",
            message[:60], classification.intent, classification.confidence, len(products),
        )
        return ChatResponse(
            response=response,
            intent=classification.intent,
            confidence=classification.confidence,
            products=products,
            suggestions=self.generate_suggestions(classification.intent, products),
        )

    @staticmethod
    def _fallback_response() -> ChatResponse:
        return ChatResponse(
            response=_FALLBACK_RESPONSE,
            intent=UNKNOWN_TAG,
            confidence=0.0,
            products=[],
            suggestions=[],
        )

    def enhance_response(
        self,
        base_response: str,
        products:      Sequence[ProductRecord],
        query:         str,
    ) -> str:
        if not products or _ENRICHMENT_TRIGGER not in base_response:
            return base_response

        lower_query = query.lower()
        blocks = []
        for i, product in enumerate(products[:ENRICHMENT_LIMIT], 1):
            marker = "🎯" if lower_query in product.name.lower() else "✨"
            if product.rating is not None:
                stars, count = f"{product.rating.stars:g}", product.rating.count
            else:
                stars, count = "N/A", 0
            category = product.category if product.category is not None else "N/A"
            blocks.append(
                f"{i}. **{product.name}** {marker}\n"
                f"   💰 {self._formatter.format(product.price_cents)}\n"
                f"   📂 {category}\n"
                f"   ⭐ {stars} stars ({count} reviews)"
            )
        product_list = "\n\n".join(blocks)
        return f"{base_response}\n\n{product_list}\n\n{_ENRICHMENT_CTA}"

    @staticmethod
    def generate_suggestions(intent: str, products: Sequence[ProductRecord]) -> List[str]:
        if intent == PRODUCT_SEARCH_TAG and not products:
            return []
        return list(_SUGGESTIONS.get(intent, []))

    # ── Catalog + learning ───────────────────────────────────────────────────

    def update_store_products(
        self,
        new_products: Optional[Sequence[Union[ProductRecord, dict]]],
    ) -> bool:
        if self.product_matcher is None:
            logger.warning("Product matcher not initialised yet, skipping update")
            return False
        if not new_products:
            return False

        products = _coerce_products(new_products)
        with self._state_lock:
            self.store_products = products
            self.product_matcher.update_products(products)
        logger.info("Updated chatbot model with %d store products", len(products))
        return True

    def train_model(
        self,
        new_conversations: Optional[Iterable[Union[ConversationTurn, dict]]] = None,
    ) -> int:
        """Append high-confidence user messages as literal patterns.

        Returns the number of patterns added. With no argument the model
        learns from its own conversation history.
        """
        if self.training_data is None or self.intent_classifier is None:
            return 0

        with self._state_lock:
            source = self._history if new_conversations is None else new_conversations
            turns  = [_coerce_turn(t) for t in list(source)]

            intents = [i.model_copy(deep=True) for i in self.training_data.intents]
            by_tag  = {i.tag: i for i in intents}
            added   = 0
            for turn in turns:
                if turn.confidence <= REINFORCE_THRESHOLD:
                    continue
                intent  = by_tag.get(turn.intent)
                pattern = turn.user_message.lower()
                if intent is not None and pattern not in intent.patterns:
                    intent.patterns.append(pattern)
                    added += 1

            self.training_data = self.training_data.model_copy(update={"intents": intents})
            self.intent_classifier.update_patterns(intents)
            self.response_generator.update_intents(intents)

        logger.info("Model training completed: %d new patterns from %d turns", added, len(turns))
        return added

    # ── Diagnostics ──────────────────────────────────────────────────────────

    @property
    def conversation_history(self) -> List[ConversationTurn]:
        return list(self._history)

    def export_training_data(self) -> TrainingExport:
        """Snapshot of the loaded corpus and history. Requires a loaded model (see ensure_loaded)."""
        if self.training_data is None:
            raise CorpusError("no training data loaded")
        with self._state_lock:
            snapshot = self.training_data.model_copy(deep=True)
            history  = [t.model_copy() for t in self._history]
        return TrainingExport(
            intents=snapshot.intents,
            products=snapshot.products,
            conversation_history=history,
            exported_at=_now(),
        )
