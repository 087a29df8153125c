# -*- coding: utf-8 -*-
"""
Currency formatting for prices stored as integer cents.

The formatter is chosen once (from settings or by the caller) and handed to
whatever needs it, instead of each caller probing the environment.
"""
from __future__ import annotations

from dataclasses import dataclass

from shopbot.config import settings


@dataclass(frozen=True)
class CurrencyFormatter:
    symbol:   str  = "$"
    grouping: bool = True     # 1,234.56 vs 1234.56

    def format(self, cents: int) -> str:
        amount = abs(cents) / 100
        body   = f"{amount:,.2f}" if self.grouping else f"{amount:.2f}"
        sign   = "-" if cents < 0 else ""
        return f"{sign}{self.symbol}{body}"

    __call__ = format


def default_formatter() -> CurrencyFormatter:
    return CurrencyFormatter(
        symbol=settings.currency_symbol,
        grouping=settings.currency_grouping,
    )
