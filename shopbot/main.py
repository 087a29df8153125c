# -*- coding: utf-8 -*-
"""
FastAPI application — storefront shopping assistant.

Endpoints:
  POST /api/chat           → classify + reply + matching products
  POST /api/chat/train     → reinforce patterns from high-confidence turns
  PUT  /api/chat/products  → replace the catalog snapshot
  GET  /api/chat/export    → corpus + history snapshot
  GET  /                   → Service info
  GET  /health             → Health check

All handlers are coroutines on one event loop; the model's state changes
happen without awaiting, so predict/train/update never interleave.
"""
import json
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from shopbot.chatbot.corpus import CorpusError, CorpusSource
from shopbot.chatbot.schemas import (
    ChatRequest, ChatResponse, ProductsUpdate, TrainRequest, TrainingExport,
)
from shopbot.chatbot.service import ChatbotModel
from shopbot.config import settings
from shopbot.schemas import ProductRecord
from shopbot.utils.logger import get_logger

logger = get_logger(__name__)


def _load_catalog(path: str) -> List[ProductRecord]:
    """Initial catalog snapshot from a JSON list (or {"products": [...]})."""
    if not path.strip():
        return []
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, dict):
            raw = raw.get("products", [])
        products = [ProductRecord.model_validate(p) for p in raw]
        logger.info("Catalog snapshot: %d products from %s", len(products), path)
        return products
    except Exception as e:
        logger.error("Catalog load failed (%s): %s", path, str(e)[:120])
        return []


# ── Lifespan ──────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=== Startup: Storefront Shopping Assistant ===")

    model = ChatbotModel(
        products=_load_catalog(settings.catalog_path),
        corpus_source=CorpusSource.from_settings(),
        top_n=settings.matcher_top_n,
    )
    await model.ensure_loaded()
    if model.degraded:
        logger.error("Assistant running in basic mode: %s", model.unavailable_reason)
    else:
        logger.info(
            "Assistant ready ✓ (%d intents, %d products)",
            len(model.training_data.intents), len(model.product_matcher.products),
        )
    app.state.chatbot = model

    yield

    logger.info("=== Shutdown ===")


# ── App ───────────────────────────────────────────────────────────────────────


app = FastAPI(
    title="Storefront Shopping Assistant",
    description="Lexical intent classification and catalog matching for the store chat widget",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _model(request: Request) -> ChatbotModel:
    return request.app.state.chatbot


# ═══════════════════════════════════════════════════════════════════════════════
# Chatbot Assistant endpoints
# ═══════════════════════════════════════════════════════════════════════════════


@app.post("/api/chat", response_model=ChatResponse)
async def chat_endpoint(chat_req: ChatRequest, request: Request):
    """POST /api/chat → Chatbot Assistant. Never fails on engine errors."""
    return await _model(request).predict(chat_req.message)


@app.post("/api/chat/train")
async def train_endpoint(train_req: TrainRequest, request: Request):
    added = _model(request).train_model(train_req.conversations)
    return {"patterns_added": added}


@app.put("/api/chat/products")
async def update_products(update: ProductsUpdate, request: Request):
    model   = _model(request)
    updated = model.update_store_products(update.products)
    count   = len(model.product_matcher.products) if model.product_matcher else 0
    return {"updated": updated, "products": count}


@app.get("/api/chat/export", response_model=TrainingExport)
async def export_training_data(request: Request):
    try:
        return _model(request).export_training_data()
    except CorpusError as e:
        raise HTTPException(status_code=503, detail=str(e))


# ═══════════════════════════════════════════════════════════════════════════════
# Info / Health endpoints
# ═══════════════════════════════════════════════════════════════════════════════


@app.get("/")
async def root():
    return {
        "name": "Storefront Shopping Assistant",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health(request: Request):
    model = _model(request)
    return {
        "status": "degraded" if model.degraded else "ok",
        "model_loaded": model.is_model_loaded,
        "degraded": model.degraded,
        "reason": model.unavailable_reason,
        "intents": len(model.training_data.intents) if model.training_data else 0,
        "products": len(model.product_matcher.products) if model.product_matcher else 0,
        "history": len(model.conversation_history),
    }
