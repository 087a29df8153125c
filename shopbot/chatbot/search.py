# -*- coding: utf-8 -*-
"""
Catalog product matcher for the shopping assistant.

Holds a read-only snapshot of the storefront catalog plus a token index
(name words, category, keywords, leading description words). The index is
rebuilt in full whenever the snapshot is replaced.

find_matches() scores every product against the whole query:

  name == query          +100  ┐
  name contains query     +50  ├ first that applies
  query contains name     +30  ┘
  category ⊂ query / query ⊂ category           +20
  each keyword ⊂ query / query ⊂ keyword        +15
  description contains query                    +10
  rating >= 4.5 stars                            +5
  more than 100 reviews                          +3

Zero-score products are dropped; the rest are stably sorted by score, so
equal scores keep snapshot order. Empty snapshot → [] for every query.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from shopbot.schemas import MatchedProduct, ProductRecord
from shopbot.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TOP_N = 5

# Tunable constants, kept as-is for behavioural compatibility.
_SCORE_EXACT_NAME       = 100
_SCORE_NAME_HAS_QUERY   = 50
_SCORE_QUERY_HAS_NAME   = 30
_SCORE_CATEGORY         = 20
_SCORE_KEYWORD          = 15
_SCORE_DESCRIPTION      = 10
_SCORE_TOP_RATED        = 5
_SCORE_POPULAR          = 3
_TOP_RATED_STARS        = 4.5
_POPULAR_REVIEW_COUNT   = 100
_DESCRIPTION_INDEX_WORDS = 10


def _score_product(product: ProductRecord, query: str) -> int:
    """Holistic score of one product against a lowercased query."""
    score = 0
    name  = product.name.lower()

    if name == query:
        score += _SCORE_EXACT_NAME
    elif query in name:
        score += _SCORE_NAME_HAS_QUERY
    elif name in query:
        score += _SCORE_QUERY_HAS_NAME

    if product.category is not None:
        category = product.category.lower()
        if query in category or category in query:
            score += _SCORE_CATEGORY

    if product.keywords is not None:
        for keyword in product.keywords:
            kw = keyword.lower()
            if kw in query or query in kw:
                score += _SCORE_KEYWORD

    if product.description is not None and query in product.description.lower():
        score += _SCORE_DESCRIPTION

    if product.rating is not None:
        if product.rating.stars >= _TOP_RATED_STARS:
            score += _SCORE_TOP_RATED
        if product.rating.count > _POPULAR_REVIEW_COUNT:
            score += _SCORE_POPULAR

    return score


class ProductMatcher:

    def __init__(self, products: Optional[Sequence[ProductRecord]] = None):
        self.products: List[ProductRecord] = list(products or [])
        self.product_index: Dict[str, List[ProductRecord]] = self.build_index(self.products)

    @staticmethod
    def build_index(products: Sequence[ProductRecord]) -> Dict[str, List[ProductRecord]]:
        index: Dict[str, List[ProductRecord]] = {}

        def add(token: str, product: ProductRecord):
            bucket = index.setdefault(token, [])
            if not any(p is product for p in bucket):
                bucket.append(product)

        for product in products or []:
            for word in product.name.lower().split():
                add(word, product)
            if product.category is not None:
                add(product.category.lower(), product)
            if product.keywords is not None:
                for keyword in product.keywords:
                    add(keyword, product)
            if product.description is not None:
                for word in product.description.lower().split()[:_DESCRIPTION_INDEX_WORDS]:
                    add(word, product)

        return index

    def lookup(self, token: str) -> List[ProductRecord]:
        return list(self.product_index.get(token, []))

    def find_matches(self, query: str, top_n: int = DEFAULT_TOP_N) -> List[MatchedProduct]:
        if not self.products:
            return []

        lower  = query.lower()
        scored: List[MatchedProduct] = []
        for product in self.products:
            score = _score_product(product, lower)
            if score > 0:
                scored.append(MatchedProduct.from_product(product, score))

        scored.sort(key=lambda m: m.match_score, reverse=True)
        logger.debug(
            "Matcher: '%s' → %d candidates, top=%s",
            lower[:60], len(scored),
            [(m.name[:30], m.match_score) for m in scored[:top_n]],
        )
        return scored[:max(top_n, 0)]

    def update_products(self, new_products: Optional[Sequence[ProductRecord]]) -> bool:
        if not new_products:
            return False
        self.products      = list(new_products)
        self.product_index = self.build_index(self.products)
        logger.info("Updated product matcher with %d products", len(self.products))
        return True
