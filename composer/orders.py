"""Orders submitted by a run.

By default the runner submits the built-in batch below. A YAML file can
replace it:

    orders:
      - provider: polymarket
        marketIdOrSlug: "519068"
        positionIdOrName: "YES"
        buyOrSell: SELL
        usdcFlowAbs: 6
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple, Union

import yaml

from composer.schemas import OrderRequest, Side

DEFAULT_ORDERS: Tuple[OrderRequest, ...] = (
    OrderRequest("polymarket", "519068", "YES", Side.SELL, 6),
    OrderRequest("polymarket", "519066", "NO", Side.SELL, 6),
    OrderRequest("polymarket", "535793", "YES", Side.SELL, 6),
    OrderRequest("polymarket", "will-the-indiana-pacers-win-the-2025-nba-finals", "YES", Side.SELL, 6),
    OrderRequest("polymarket", "will-xai-have-the-top-ai-model-on-december-31", "NO", Side.SELL, 6),
)


def load_orders(path: Optional[Union[str, Path]] = None) -> List[OrderRequest]:
    """Orders in submission order."""
    if path is None:
        return list(DEFAULT_ORDERS)

    orders_path = Path(path)
    if not orders_path.exists():
        raise ValueError(f"Orders file not found: {orders_path}")

    with open(orders_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("orders") if isinstance(data, dict) else data
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"{orders_path}: expected a non-empty 'orders' list")

    orders = []
    for i, entry in enumerate(entries):
        try:
            orders.append(OrderRequest.from_dict(entry))
        except ValueError as e:
            raise ValueError(f"{orders_path}: order #{i + 1}: {e}") from e
    return orders
