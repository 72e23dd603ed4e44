"""
Order Schemas - Request/response structures for the Polynance API

These dataclasses define the JSON shapes used for:
1. Describing an order we want to place (OrderRequest)
2. The server-built order after the wallet signs it (SignedOrder)
3. The outcome reported by the execution endpoint (ExecutionResult)
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
import math


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


def _pick(data: dict, *keys, default=None):
    """First present key wins (accepts snake_case and camelCase)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _identifier(data: dict, *keys) -> str:
    """String field that YAML may have loaded as an int (market ids)."""
    value = _pick(data, *keys, default="")
    # bool is an int subclass; unquoted YES/NO/on/off load as bools
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError(f"{keys[-1]} must be a string, got {value!r}; quote it in YAML")
    return str(value)


@dataclass(frozen=True)
class OrderRequest:
    """
    A single trade intent.

    usdc_flow_abs is the absolute USDC amount moving in or out of the
    position; the direction comes from buy_or_sell.
    """
    provider: str                    # e.g. "polymarket"
    market_id_or_slug: str           # e.g. "519068" or "will-xai-have-..."
    position_id_or_name: str         # e.g. "YES" / "NO" or a token id
    buy_or_sell: Side
    usdc_flow_abs: float

    def __post_init__(self):
        for name in ("provider", "market_id_or_slug", "position_id_or_name"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"OrderRequest.{name} must be a non-empty string")
        side = self.buy_or_sell
        if not isinstance(side, Side):
            try:
                side = Side(str(side).strip().upper())
            except ValueError:
                raise ValueError(f"OrderRequest.buy_or_sell must be BUY or SELL, got {self.buy_or_sell!r}")
        object.__setattr__(self, "buy_or_sell", side)

        try:
            amount = float(self.usdc_flow_abs)
        except (TypeError, ValueError):
            raise ValueError(f"OrderRequest.usdc_flow_abs must be a number, got {self.usdc_flow_abs!r}")
        if not math.isfinite(amount) or amount <= 0:
            raise ValueError(f"OrderRequest.usdc_flow_abs must be a positive finite number, got {amount}")
        object.__setattr__(self, "usdc_flow_abs", amount)

    @classmethod
    def from_dict(cls, data: dict) -> "OrderRequest":
        if not isinstance(data, dict):
            raise ValueError(f"Order entry must be a mapping, got {type(data).__name__}")
        return cls(
            provider=_identifier(data, "provider"),
            market_id_or_slug=_identifier(data, "market_id_or_slug", "marketIdOrSlug"),
            position_id_or_name=_identifier(data, "position_id_or_name", "positionIdOrName"),
            buy_or_sell=_pick(data, "buy_or_sell", "buyOrSell", default=""),
            usdc_flow_abs=_pick(data, "usdc_flow_abs", "usdcFlowAbs", default=0),
        )

    def to_dict(self) -> dict:
        """Wire form (camelCase, as the API server expects)."""
        return {
            "provider": self.provider,
            "marketIdOrSlug": self.market_id_or_slug,
            "positionIdOrName": self.position_id_or_name,
            "buyOrSell": self.buy_or_sell.value,
            "usdcFlowAbs": self.usdc_flow_abs,
        }

    def label(self) -> str:
        return (
            f"{self.provider}:{self.market_id_or_slug} "
            f"{self.buy_or_sell.value} {self.position_id_or_name} ${self.usdc_flow_abs:.2f}"
        )


@dataclass
class SignedOrder:
    """An order built by the server and signed by our wallet"""
    request: OrderRequest
    payload: dict = field(default_factory=dict)
    signature: str = ""
    signer: str = ""

    def to_dict(self) -> dict:
        return {
            "request": self.request.to_dict(),
            "order": self.payload,
            "signature": self.signature,
            "signer": self.signer,
        }


@dataclass
class ExecutionResult:
    """Result from the execution endpoint"""
    success: bool = False
    order_id: str = ""
    status: str = ""
    tx_hash: str = ""
    error: str = ""
    raw_response: dict = field(default_factory=dict)

    @classmethod
    def from_response(cls, resp: dict) -> "ExecutionResult":
        """Parse from API response"""
        if resp.get("status") == "error":
            return cls(
                success=False,
                status="error",
                order_id=str(_pick(resp, "orderId", "order_id", default="")),
                error=resp.get("error", "Unknown error"),
                raw_response=resp,
            )

        return cls(
            success=bool(resp.get("success", True)),
            order_id=str(_pick(resp, "orderId", "order_id", "id", default="")),
            status=str(resp.get("status", "")),
            tx_hash=str(_pick(resp, "txHash", "tx_hash", default="")),
            error=str(resp.get("error") or ""),
            raw_response=resp,
        )

    def to_dict(self) -> dict:
        return asdict(self)

