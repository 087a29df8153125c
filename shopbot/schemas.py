# -*- coding: utf-8 -*-
"""
Catalog schemas shared by the matcher, the orchestrator and the API layer.

Product records are owned by the storefront; the assistant only ever holds
read-only snapshots of them. Optional fields stay None when absent.

Pydantic v2 compliant.
"""
from __future__ import annotations
from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════════════════
# CATALOG
# ═══════════════════════════════════════════════════════════════════════════════


class Rating(BaseModel):
    stars: float = 0.0
    count: int   = 0


class ProductRecord(BaseModel):
    """A single storefront product as supplied by the catalog service."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    id:          Union[str, int]
    name:        str
    price_cents: int                 = Field(0, alias="priceCents")
    category:    Optional[str]       = None
    keywords:    Optional[List[str]] = None
    description: Optional[str]       = None
    rating:      Optional[Rating]    = None
    image:       Optional[str]       = None


class MatchedProduct(ProductRecord):
    """Catalog record annotated with the matcher's score for one query."""

    match_score: int = Field(0, alias="matchScore")

    @classmethod
    def from_product(cls, product: ProductRecord, score: int) -> "MatchedProduct":
        data = product.model_dump(by_alias=True)
        data["matchScore"] = score
        return cls.model_validate(data)
