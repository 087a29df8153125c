# -*- coding: utf-8 -*-
"""
Corpus loading and merging for the shopping assistant.

CorpusSource.load() reads the base training document (bundled JSON file,
custom path, or HTTP URL) and always returns one of two states:
LoadedCorpus(corpus) or CorpusUnavailable(reason). It never raises.

combine_training_data() merges a loaded corpus with the storefront's live
catalog and the store-specific intent additions from YAML, returning a new
corpus and leaving its inputs untouched.
"""
from __future__ import annotations

import asyncio
import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import requests
import yaml
from pydantic import ValidationError

from shopbot.chatbot.schemas import TrainingCorpus
from shopbot.config import settings
from shopbot.schemas import ProductRecord
from shopbot.utils.logger import get_logger

logger = get_logger(__name__)

_PACKAGE_DIR          = Path(__file__).parent
DEFAULT_CORPUS_PATH   = _PACKAGE_DIR / "data" / "training_data.json"
DEFAULT_STORE_INTENTS = _PACKAGE_DIR / "configs" / "store_intents.yaml"


class CorpusError(Exception):
    """Raised when a corpus or store-intent file cannot be used."""


# ═══════════════════════════════════════════════════════════════════════════════
# Load result states
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class LoadedCorpus:
    corpus: TrainingCorpus


@dataclass
class CorpusUnavailable:
    reason: str


CorpusLoadResult = Union[LoadedCorpus, CorpusUnavailable]


# ═══════════════════════════════════════════════════════════════════════════════
# Sources
# ═══════════════════════════════════════════════════════════════════════════════


class CorpusSource:
    """Reads the base corpus from a file path or an HTTP URL.

    URL wins when both are given. Blocking I/O runs in the default executor.
    """

    def __init__(
        self,
        path:    Optional[Union[str, Path]] = None,
        url:     Optional[str]              = None,
        timeout: float                      = 10.0,
    ):
        self.path    = Path(path) if path else DEFAULT_CORPUS_PATH
        self.url     = url or None
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "CorpusSource":
        return cls(
            path=settings.training_data_path or None,
            url=settings.training_data_url or None,
            timeout=settings.training_data_timeout,
        )

    @property
    def location(self) -> str:
        return self.url or str(self.path)

    def _fetch(self) -> dict:
        if self.url:
            resp = requests.get(self.url, timeout=self.timeout)
            if not resp.ok:
                raise CorpusError(f"Failed to load training data: {resp.status_code}")
            return resp.json()
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    async def load(self) -> CorpusLoadResult:
        logger.info("Loading training corpus from %s", self.location)
        try:
            loop = asyncio.get_event_loop()
            raw  = await loop.run_in_executor(None, self._fetch)
            corpus = TrainingCorpus.model_validate(raw)
        except ValidationError as e:
            logger.error("Training corpus rejected: %s", str(e)[:200])
            return CorpusUnavailable(f"invalid corpus: {e.error_count()} error(s)")
        except Exception as e:
            logger.error("Failed to load training corpus: %s", str(e)[:150])
            return CorpusUnavailable(str(e)[:150])

        logger.info(
            "Loaded training corpus: %d intents, %d products",
            len(corpus.intents), len(corpus.products),
        )
        return LoadedCorpus(corpus)


class StaticCorpusSource:
    """Corpus held in memory (already parsed JSON), validated on load."""

    def __init__(self, data: Union[dict, TrainingCorpus]):
        self._data = data

    async def load(self) -> CorpusLoadResult:
        try:
            if isinstance(self._data, TrainingCorpus):
                return LoadedCorpus(self._data.model_copy(deep=True))
            return LoadedCorpus(TrainingCorpus.model_validate(self._data))
        except ValidationError as e:
            logger.error("Training corpus rejected: %s", str(e)[:200])
            return CorpusUnavailable(f"invalid corpus: {e.error_count()} error(s)")


# ═══════════════════════════════════════════════════════════════════════════════
# Store-specific intent additions
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class IntentAddition:
    tag:       str
    patterns:  List[str] = field(default_factory=list)
    responses: List[str] = field(default_factory=list)


class StoreIntentRegistry:
    """Store-specific patterns and responses appended to existing intents."""

    def __init__(self, path: Optional[Union[str, Path]] = None, strict: bool = False):
        self._path   = Path(path) if path else DEFAULT_STORE_INTENTS
        self._strict = strict
        self._additions: Dict[str, IntentAddition] = {}
        self.reload()

    @classmethod
    def from_settings(cls) -> "StoreIntentRegistry":
        return cls(settings.store_intents_path or None)

    def reload(self):
        self._additions.clear()
        if not os.path.isfile(self._path):
            logger.warning(f"Store intents file not found: {self._path}")
            if self._strict:
                raise CorpusError(f"store intents file not found: {self._path}")
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            for tag, body in (raw.get("intents") or {}).items():
                body = body or {}
                self._additions[tag] = IntentAddition(
                    tag=tag,
                    patterns=[str(p).lower() for p in body.get("patterns") or []],
                    responses=[str(r) for r in body.get("responses") or []],
                )
        except Exception as e:
            logger.error(f"Failed to load store intents {self._path}: {e}")
            self._additions.clear()
            if self._strict:
                raise CorpusError(str(e)) from e
            return
        logger.info(f"Store intents: {len(self._additions)} intents extended")

    def all(self) -> List[IntentAddition]:
        return list(self._additions.values())

    def get(self, tag: str) -> Optional[IntentAddition]:
        return self._additions.get(tag)


# ═══════════════════════════════════════════════════════════════════════════════
# Merge
# ═══════════════════════════════════════════════════════════════════════════════


def _extend_unique(target: List[str], additions: Sequence[str]) -> int:
    added = 0
    for item in additions:
        if item not in target:
            target.append(item)
            added += 1
    return added


def add_store_specific_intents(
    corpus:    TrainingCorpus,
    additions: Sequence[IntentAddition],
) -> None:
    """Append store patterns/responses to intents already in *corpus* (in place)."""
    for addition in additions:
        intent = corpus.find_intent(addition.tag)
        if intent is None:
            continue
        p = _extend_unique(intent.patterns, addition.patterns)
        r = _extend_unique(intent.responses, addition.responses)
        logger.debug("Store intent '%s': +%d patterns, +%d responses", addition.tag, p, r)


def combine_training_data(
    external:       TrainingCorpus,
    store_products: Optional[Sequence[ProductRecord]] = None,
    store_intents:  Optional[Sequence[IntentAddition]] = None,
) -> TrainingCorpus:
    """Merge the external corpus with the live catalog and store intents.

    Products are de-duplicated by id: corpus entries win, catalog products
    with an unseen id are appended in catalog order.
    """
    combined = external.model_copy(deep=True)

    if store_products:
        existing_ids = {p.id for p in combined.products}
        new_products = []
        for p in store_products:
            if p.id not in existing_ids:
                existing_ids.add(p.id)
                new_products.append(p)
        combined.products = combined.products + new_products

        combined.training_metadata["total_products"]       = len(combined.products)
        combined.training_metadata["store_products_added"] = len(new_products)
        combined.training_metadata["last_updated"]         = datetime.now(timezone.utc).isoformat()
        logger.info("Added %d store products to training data", len(new_products))

    if store_intents:
        add_store_specific_intents(combined, store_intents)

    logger.info(
        "Combined training data: %d intents, %d products",
        len(combined.intents), len(combined.products),
    )
    return combined
