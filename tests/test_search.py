"""
test_search.py
--------------
Unit tests for the catalog product matcher.

Run with:
    pytest tests/test_search.py -v
"""

import pytest

from shopbot.chatbot.search import ProductMatcher
from shopbot.schemas import ProductRecord


def make_product(pid, name, **fields) -> ProductRecord:
    return ProductRecord(id=pid, name=name, **fields)


# ===========================================================================
# Scoring
# ===========================================================================

class TestScoring:

    @pytest.fixture
    def matcher(self, catalog):
        return ProductMatcher(catalog)

    def test_query_contains_name_plus_bonuses(self, matcher):
        # +30 (query ⊃ name) +15 (keyword "earbuds") +5 (4.6★) +3 (120 reviews)
        results = matcher.find_matches("I want wireless earbuds")
        assert [p.id for p in results] == ["p1"]
        assert results[0].match_score == 53
        assert results[0].match_score >= 50

    def test_exact_name_match(self, matcher):
        results = matcher.find_matches("Wireless Earbuds")
        assert results[0].id == "p1"
        assert results[0].match_score == 100 + 15 + 5 + 3

    def test_name_contains_query(self, matcher):
        results = matcher.find_matches("lamp")
        assert results[0].id == "p2"
        assert results[0].match_score == 50

    def test_name_tiers_are_exclusive(self):
        matcher = ProductMatcher([make_product("x", "Lamp")])
        # exact also satisfies "contains" both ways; only +100 counts
        assert matcher.find_matches("lamp")[0].match_score == 100

    def test_category_match_both_directions(self):
        matcher = ProductMatcher([make_product("c", "Speaker", category="Audio")])
        assert matcher.find_matches("audio gear")[0].match_score == 20
        assert matcher.find_matches("aud")[0].match_score == 20

    def test_each_keyword_scores(self):
        product = make_product("k", "Thing", keywords=["red", "blue", "green"])
        matcher = ProductMatcher([product])
        assert matcher.find_matches("red and blue")[0].match_score == 30

    def test_description_match(self):
        product = make_product("d", "Trail Shoe", description="Great for running and travel")
        matcher = ProductMatcher([product])
        assert matcher.find_matches("running")[0].match_score == 10

    def test_popularity_alone_surfaces_product(self):
        product = make_product(
            "r", "Mystery Box", rating={"stars": 4.8, "count": 500},
        )
        assert ProductMatcher([product]).find_matches("zzz")[0].match_score == 8

    def test_zero_score_excluded(self, catalog):
        # p1 is popular enough to score on any query; p2 and p3 are not
        assert [p.id for p in ProductMatcher(catalog).find_matches("teapot")] == ["p1"]
        assert ProductMatcher(catalog[1:]).find_matches("teapot") == []

    def test_result_keeps_catalog_fields(self, matcher):
        result = matcher.find_matches("lamp")[0]
        assert result.name == "Desk Lamp"
        assert result.price_cents == 2599
        assert result.model_dump(by_alias=True)["matchScore"] == 50


# ===========================================================================
# Ranking
# ===========================================================================

class TestRanking:

    def test_sorted_descending(self, catalog):
        results = ProductMatcher(catalog).find_matches("audio")
        scores = [p.match_score for p in results]
        assert scores == sorted(scores, reverse=True)
        assert results[0].id == "p1"

    def test_ties_keep_snapshot_order(self):
        a = make_product("a", "Desk Lamp", category="Home")
        b = make_product("b", "Desk Lamp", category="Home")
        assert [p.id for p in ProductMatcher([a, b]).find_matches("desk lamp")] == ["a", "b"]
        assert [p.id for p in ProductMatcher([b, a]).find_matches("desk lamp")] == ["b", "a"]

    def test_top_n_limit(self):
        products = [make_product(f"id{i}", f"Lamp {i}") for i in range(8)]
        matcher = ProductMatcher(products)
        assert len(matcher.find_matches("lamp")) == 5
        assert len(matcher.find_matches("lamp", top_n=2)) == 2
        assert matcher.find_matches("lamp", top_n=0) == []


# ===========================================================================
# Index + snapshot
# ===========================================================================

class TestIndex:

    def test_empty_snapshot(self):
        for matcher in (ProductMatcher([]), ProductMatcher(None), ProductMatcher()):
            assert matcher.product_index == {}
            assert matcher.find_matches("anything") == []
            assert matcher.find_matches("") == []

    def test_name_words_lowercased(self, catalog):
        matcher = ProductMatcher(catalog)
        assert [p.id for p in matcher.lookup("wireless")] == ["p1"]
        assert {p.id for p in matcher.lookup("electronics")} == {"p1", "p3"}

    def test_keywords_indexed_verbatim(self):
        matcher = ProductMatcher([make_product("k", "Thing", keywords=["Audio"])])
        assert matcher.lookup("Audio")
        assert matcher.lookup("audio") == []

    def test_description_first_words_indexed(self):
        words = " ".join(f"w{i}" for i in range(15))
        matcher = ProductMatcher([make_product("d", "Thing", description=words)])
        assert matcher.lookup("w9")
        assert matcher.lookup("w10") == []

    def test_product_listed_once_per_token(self):
        product = make_product("x", "Case case", keywords=["case"])
        assert len(ProductMatcher([product]).lookup("case")) == 1

    def test_update_products_rebuilds(self, catalog):
        matcher = ProductMatcher(catalog)
        assert matcher.update_products([make_product("n", "Yoga Mat")]) is True
        assert [p.id for p in matcher.products] == ["n"]
        assert matcher.lookup("wireless") == []
        assert [p.id for p in matcher.lookup("yoga")] == ["n"]

    @pytest.mark.parametrize("empty", [[], None])
    def test_update_with_nothing_is_noop(self, catalog, empty):
        matcher = ProductMatcher(catalog)
        index_before = matcher.product_index
        assert matcher.update_products(empty) is False
        assert [p.id for p in matcher.products] == ["p1", "p2", "p3"]
        assert matcher.product_index is index_before
