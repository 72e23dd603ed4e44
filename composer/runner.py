"""Order runner - bootstrap, sequential order batch, then price verification.

Phases:
1. Bootstrap: settings from the environment, one wallet, one backend client
2. Batch: build -> execute each order in list order, one at a time
3. Polling: PriceVerifier ticks until stop()

A failure in phase 1 or 2 is logged and ends the run in an explicit failed
state; polling is only ever started after the whole batch succeeded.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence

from composer.backend import PolynanceClient, TradingBackend
from composer.config import Settings
from composer.orders import load_orders
from composer.schemas import ExecutionResult, OrderRequest
from composer.verifier import PriceVerifier
from composer.wallet import Wallet

log = logging.getLogger(__name__)

BackendFactory = Callable[[Settings, Wallet], TradingBackend]


class RunState(str, Enum):
    CREATED = "created"
    BOOT_FAILED = "boot_failed"        # config/wallet/client could not be set up
    BATCH_FAILED = "batch_failed"      # an order failed; later orders skipped, no polling
    POLLING = "polling"
    STOPPED = "stopped"


def default_backend_factory(settings: Settings, wallet: Wallet) -> TradingBackend:
    return PolynanceClient(
        wallet,
        api_base_url=settings.api_base_url,
        timeout=(3.05, settings.http_timeout_seconds),
    )


def bootstrap(settings: Optional[Settings] = None, backend_factory: Optional[BackendFactory] = None) -> TradingBackend:
    """Build the wallet and the single backend client for this process.

    Raises:
        ConfigError: POLYGON_RPC or PRIVATE_KEY is missing (nothing is built).
        ValueError: the private key is malformed.
    """
    settings = settings or Settings.from_env()
    wallet = Wallet(settings.private_key, settings.polygon_rpc)
    log.info("[BOOT] Wallet %s on %s", wallet.address, settings.polygon_rpc)

    factory = backend_factory or default_backend_factory
    backend = factory(settings, wallet)
    log.info("[BOOT] Backend ready at %s", settings.api_base_url)
    return backend


def submit_batch(backend: TradingBackend, orders: Sequence[OrderRequest]) -> List[ExecutionResult]:
    """Build and execute each order strictly in sequence.

    The first exception propagates; orders after the failing one are not
    attempted.
    """
    results = []
    total = len(orders)
    for i, order in enumerate(orders, start=1):
        log.info("[ORDER %d/%d] Building %s", i, total, order.label())
        signed_order = backend.build_order(order)
        log.info("[ORDER %d/%d] Executing order... %s", i, total, signed_order)

        result = backend.execute_order(signed_order)
        log.info("[ORDER %d/%d] open order: %s", i, total, backend.as_context(result))
        results.append(result)
    return results


class OrderRunner:
    """Owns the backend and the verifier for one run of the script."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        orders: Optional[Sequence[OrderRequest]] = None,
        backend_factory: Optional[BackendFactory] = None,
    ):
        self.settings = settings
        self.orders = list(orders) if orders is not None else None
        self.backend_factory = backend_factory
        self.backend: Optional[TradingBackend] = None
        self.verifier: Optional[PriceVerifier] = None
        self.results: List[ExecutionResult] = []
        self.state = RunState.CREATED
        self.error: Optional[BaseException] = None
        self._blocking = False
        self._stop_requested = False

    def _fail(self, state: RunState, error: Exception) -> RunState:
        log.error("Error in main function: %s", error, exc_info=log.isEnabledFor(logging.DEBUG))
        self.state = state
        self.error = error
        return state

    def run(self, block: bool = False, poll: bool = True) -> RunState:
        """Run bootstrap and the batch, then start polling.

        With poll=False the run ends in STOPPED right after the batch.

        With block=True the verifier runs on the calling thread and this
        returns once stop() is called; otherwise it runs on a daemon thread.
        """
        try:
            settings = self.settings or Settings.from_env()
            orders = self.orders if self.orders is not None else load_orders(settings.orders_file)
            self.backend = bootstrap(settings, self.backend_factory)
        except Exception as e:
            return self._fail(RunState.BOOT_FAILED, e)

        try:
            self.results = submit_batch(self.backend, orders)
        except Exception as e:
            return self._fail(RunState.BATCH_FAILED, e)

        log.info("[BATCH] %d order(s) executed", len(self.results))
        if self._stop_requested or not poll:
            self._close_backend()
            self.state = RunState.STOPPED
            return self.state

        self._blocking = block
        log.info("[BATCH] Starting price verification every %gs", settings.verify_interval_seconds)
        self.verifier = PriceVerifier(self.backend, interval_seconds=settings.verify_interval_seconds)
        self.state = RunState.POLLING
        # stop() may have landed while the verifier was being built
        if self._stop_requested:
            self.verifier.stop()

        if block:
            self.verifier.loop()
            self._close_backend()
            self.state = RunState.STOPPED
        else:
            self.verifier.start()
            if not self.verifier.is_running:
                self._close_backend()
                self.state = RunState.STOPPED
        return self.state

    def stop(self):
        """Stop polling deterministically.

        Called before polling starts, it keeps polling from starting at all.
        """
        self._stop_requested = True
        if self.verifier is None:
            return
        self.verifier.stop()
        # In blocking mode run() finishes the shutdown once loop() returns
        if self._blocking:
            return
        if self.state == RunState.POLLING and not self.verifier.is_running:
            self._close_backend()
            self.state = RunState.STOPPED

    def _close_backend(self):
        close = getattr(self.backend, "close", None)
        if callable(close):
            close()
