# -*- coding: utf-8 -*-
"""
Pydantic V2 schemas for the shopping assistant.

Corpus types (Intent, TrainingCorpus), per-turn types (ClassificationResult,
ConversationTurn) and the request/response bodies of the chat API.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shopbot.schemas import MatchedProduct, ProductRecord


# ── Corpus ───────────────────────────────────────────────────────────────────


class Intent(BaseModel):
    """A conversational category: its example phrases and reply templates."""

    tag:       str       = Field(..., min_length=1)
    patterns:  List[str] = Field(..., description="Example phrases, matched lowercased")
    responses: List[str] = Field(default_factory=list)

    @field_validator("patterns", mode="after")
    @classmethod
    def lowercase_patterns(cls, v: List[str]) -> List[str]:
        return [p.lower() for p in v]


class TrainingCorpus(BaseModel):
    """Base training document: intents, seed products and free-form metadata."""

    intents:           List[Intent]         = Field(default_factory=list)
    products:          List[ProductRecord]  = Field(default_factory=list)
    training_metadata: Dict[str, Any]       = Field(default_factory=dict)

    @model_validator(mode="after")
    def unique_tags(self) -> "TrainingCorpus":
        seen = set()
        for intent in self.intents:
            if intent.tag in seen:
                raise ValueError(f"duplicate intent tag: {intent.tag!r}")
            seen.add(intent.tag)
        return self

    def find_intent(self, tag: str) -> Optional[Intent]:
        for intent in self.intents:
            if intent.tag == tag:
                return intent
        return None


# ── Per-turn results ─────────────────────────────────────────────────────────


class ClassificationResult(BaseModel):
    intent:     str
    confidence: float                  = Field(0.0, ge=0.0, le=1.0)
    scores:     Dict[str, float]       = Field(default_factory=dict)
    matches:    Dict[str, List[str]]   = Field(
        default_factory=dict,
        description="Per-tag match traces, e.g. 'EXACT: hello'",
    )


class ConversationTurn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_message: str   = Field(..., alias="userMessage")
    intent:       str
    confidence:   float = 0.0
    response:     str   = ""
    timestamp:    str   = ""


# ── API bodies ───────────────────────────────────────────────────────────────


class ChatRequest(BaseModel):
    """Incoming chat message from the storefront widget."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="User's current message",
    )


class ChatResponse(BaseModel):
    """Structured reply consumed by the storefront UI."""

    response:    str                  = Field(..., description="Reply text, possibly enriched")
    intent:      str                  = Field(..., description="Classified intent tag")
    confidence:  float                = Field(0.0, ge=0.0, le=1.0)
    products:    List[MatchedProduct] = Field(default_factory=list)
    suggestions: List[str]            = Field(default_factory=list)


class TrainRequest(BaseModel):
    conversations: Optional[List[ConversationTurn]] = Field(
        default=None,
        description="Turns to learn from; omitted → the model's own history",
    )


class ProductsUpdate(BaseModel):
    products: List[ProductRecord] = Field(default_factory=list)


class TrainingExport(BaseModel):
    """One-way diagnostics snapshot of the model's corpus and history."""

    model_config = ConfigDict(populate_by_name=True)

    intents:              List[Intent]
    products:             List[ProductRecord]
    conversation_history: List[ConversationTurn] = Field(default_factory=list, alias="conversationHistory")
    exported_at:          str                    = Field(..., alias="exportedAt")
