# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import List, Any
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    # ── Training corpus ──────────────────────────────────────────────────────
    training_data_path:    str   = ""     # empty → bundled shopbot/chatbot/data/training_data.json
    training_data_url:     str   = ""     # e.g. https://cdn.example.com/training_data.json
    training_data_timeout: float = 10.0
    store_intents_path:    str   = ""     # empty → bundled shopbot/chatbot/configs/store_intents.yaml

    # ── Catalog ──────────────────────────────────────────────────────────────
    catalog_path:  str = ""               # optional JSON list of products for startup
    matcher_top_n: int = 5

    # ── Currency formatting ──────────────────────────────────────────────────
    currency_symbol:   str  = "$"
    currency_grouping: bool = True

    # ── CORS ─────────────────────────────────────────────────────────────────
    allowed_origins: List[str] = [
        "http://127.0.0.1:8000",
        "http://localhost:8000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # ── App ───────────────────────────────────────────────────────────────────
    debug:     bool = False
    log_level: str  = "INFO"

    # ── Validator: accept both JSON array AND comma-separated string ──────────
    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, v: Any) -> List[str]:
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            v = v.strip()
            # JSON array format: ["a","b"]
            if v.startswith("["):
                import json
                return json.loads(v)
            # Comma-separated format: a,b,c
            return [o.strip() for o in v.split(",") if o.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
