"""Trading backend used by the runner.

The runner only needs six calls: build, execute, a log projection of the
execution result, and the three pending-price calls used by the verifier.
`TradingBackend` names that capability set; `PolynanceClient` implements it
against the local Polynance API server, which does the market routing,
price proposal and oracle transactions on its side.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

import requests

from composer.config import API_BASE_URL_DEFAULT, LOG_HTTP_PAYLOADS
from composer.http_client import HttpClient
from composer.schemas import ExecutionResult, OrderRequest, SignedOrder
from composer.wallet import Wallet

logger = logging.getLogger(__name__)


class PolynanceAPIError(Exception):
    """Raised when the API server rejects a call or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


@runtime_checkable
class TradingBackend(Protocol):
    def build_order(self, request: OrderRequest) -> SignedOrder: ...

    def execute_order(self, signed_order: SignedOrder) -> ExecutionResult: ...

    def as_context(self, result: ExecutionResult) -> Dict[str, Any]: ...

    def scan_pending_price_data(self) -> bool: ...

    def get_pending_order_ids(self) -> List[str]: ...

    def verify_price(self) -> List[str]: ...


def _ids(values: Iterable[Any]) -> List[str]:
    return [str(v) for v in values if v is not None and str(v) != ""]


class PolynanceClient:
    """HTTP client for the Polynance API server."""

    def __init__(
        self,
        wallet: Wallet,
        api_base_url: str = API_BASE_URL_DEFAULT,
        http: Optional[HttpClient] = None,
        timeout: Any = None,
    ):
        self.wallet = wallet
        self.http = http or HttpClient(api_base_url, timeout=timeout)
        # Orders executed by this client that still await price verification
        self._pending: set[str] = set()
        self._lock = threading.Lock()

    @property
    def api_base_url(self) -> str:
        return self.http.base_url

    def _post(self, path: str, payload: dict) -> dict:
        if LOG_HTTP_PAYLOADS:
            logger.debug("[HTTP] POST %s %s", path, payload)
        try:
            resp = self.http.request("POST", path, json=payload)
        except requests.RequestException as exc:
            raise PolynanceAPIError(f"POST {path} failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            detail = data.get("error") if isinstance(data, dict) else resp.text
            raise PolynanceAPIError(
                f"POST {path} returned {resp.status_code}: {detail}",
                status_code=resp.status_code,
                payload=data,
            )
        if not isinstance(data, dict):
            raise PolynanceAPIError(f"POST {path} returned a non-JSON-object body", status_code=resp.status_code)
        return data

    # ─────────────────────────────────────────────────────────────
    # Orders
    # ─────────────────────────────────────────────────────────────

    def build_order(self, request: OrderRequest) -> SignedOrder:
        """Ask the server to build the order, then sign it locally."""
        data = self._post(
            "/orders/build",
            {
                "order": request.to_dict(),
                "signer": self.wallet.address,
                "chainId": self.wallet.chain_id,
            },
        )
        payload = data.get("order")
        if not isinstance(payload, dict):
            raise PolynanceAPIError("Build response is missing the 'order' object", payload=data)

        return SignedOrder(
            request=request,
            payload=payload,
            signature=self.wallet.sign_payload(payload),
            signer=self.wallet.address,
        )

    def execute_order(self, signed_order: SignedOrder) -> ExecutionResult:
        """Submit a signed order; the server proposes the price as part of this."""
        data = self._post("/orders/execute", signed_order.to_dict())
        result = ExecutionResult.from_response(data)
        if not result.success:
            raise PolynanceAPIError(
                f"Order execution failed: {result.error or result.status or 'unknown error'}",
                payload=data,
            )
        if result.order_id:
            with self._lock:
                self._pending.add(result.order_id)
        return result

    def as_context(self, result: ExecutionResult) -> Dict[str, Any]:
        return {
            "orderId": result.order_id,
            "status": result.status,
            "success": result.success,
            "txHash": result.tx_hash or None,
            "error": result.error or None,
        }

    # ─────────────────────────────────────────────────────────────
    # Pending price verification
    # ─────────────────────────────────────────────────────────────

    def get_pending_order_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._pending)

    def scan_pending_price_data(self) -> bool:
        """True if the server has price data ready for any pending order."""
        order_ids = self.get_pending_order_ids()
        if not order_ids:
            return False
        data = self._post("/prices/pending", {"orderIds": order_ids})
        ready = _ids(data.get("readyOrderIds") or [])
        return bool(ready) or bool(data.get("verifyAble"))

    def verify_price(self) -> List[str]:
        """Have the server send the oracle transaction for ready orders.

        Returns the ids the server reports as verified; those stop being
        tracked as pending.
        """
        order_ids = self.get_pending_order_ids()
        data = self._post("/prices/verify", {"orderIds": order_ids, "signer": self.wallet.address})
        verified = _ids(data.get("verifiedOrderIds") or [])
        with self._lock:
            self._pending.difference_update(verified)
        if data.get("txHash"):
            logger.info("[VERIFY] Oracle tx %s verified %d order(s)", data["txHash"], len(verified))
        return verified

    def close(self) -> None:
        self.http.close()
