from __future__ import annotations

from decimal import Decimal

from tycoon.core.catalog import (
    Catalog,
    PERK_GOLDEN_ERA,
    PERK_LEGENDARY_REPUTATION,
    PERK_START_CAPITAL,
    PERK_TIMELESS_RESEARCH,
)
from tycoon.core.ledger import Ledger, ZERO


def perk_value(ledger: Ledger, catalog: Catalog, perk_id: str, default: Decimal) -> Decimal:
    """
    level 0 → default；否则取 values[level − 1]（下标语义不可改）
    """
    level = ledger.ascension.perk_level(perk_id)
    if level <= 0:
        return default

    perk = catalog.perks.get(perk_id)
    if perk is None:
        return default
    return perk.values[min(level, perk.max_level) - 1]


def start_capital_multiplier(ledger: Ledger, catalog: Catalog) -> Decimal:
    return perk_value(ledger, catalog, PERK_START_CAPITAL, ZERO)


def research_duration_reduction(ledger: Ledger, catalog: Catalog) -> Decimal:
    return perk_value(ledger, catalog, PERK_TIMELESS_RESEARCH, ZERO)


def premium_bonus(ledger: Ledger, catalog: Catalog) -> Decimal:
    return perk_value(ledger, catalog, PERK_GOLDEN_ERA, ZERO)


def start_reputation(ledger: Ledger, catalog: Catalog, default: int = 50) -> int:
    return int(perk_value(ledger, catalog, PERK_LEGENDARY_REPUTATION, Decimal(default)))
