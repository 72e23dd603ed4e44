"""Price Verifier - periodic pending-price check.

After the order batch, executed orders wait for the server to collect price
data. Every interval this loop asks the backend whether any pending order is
ready and, if so, has it verify the price (the server sends the oracle
transaction).

Ticks never overlap: a tick that runs past the next slot causes that slot to
be skipped, and the schedule stays aligned to the time the loop started.
Errors in a tick are logged and the next tick runs on schedule.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from composer.backend import TradingBackend
from composer.config import VERIFY_INTERVAL_SECONDS_DEFAULT

log = logging.getLogger(__name__)


@dataclass
class VerifierStats:
    ticks: int = 0
    verifications: int = 0
    errors: int = 0
    skipped: int = 0


class PriceVerifier:
    """Polls the backend for pending price data on a fixed interval."""

    def __init__(
        self,
        backend: TradingBackend,
        interval_seconds: float = VERIFY_INTERVAL_SECONDS_DEFAULT,
        clock: Callable[[], float] = time.monotonic,
        stop_event: Optional[threading.Event] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.backend = backend
        self.interval = float(interval_seconds)
        self._clock = clock
        self._stop_event = stop_event or threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.stats = VerifierStats()

    def run_once(self) -> bool:
        """Run one tick.

        Returns:
            True if verify_price was called and succeeded this tick.
        """
        self.stats.ticks += 1
        try:
            verify_able = self.backend.scan_pending_price_data()
            order_ids = self.backend.get_pending_order_ids()
            log.info("[VERIFY] scanPendingPriceData: %s", verify_able)
            log.info("[VERIFY] pendingPriceData: %s", order_ids)

            if not verify_able:
                log.info("[VERIFY] no pending price data")
                return False

            verified = self.backend.verify_price()
            self.stats.verifications += 1
            log.info("[VERIFY] verifyPrice done: %s", verified)
            return True

        except Exception as e:
            self.stats.errors += 1
            log.error("Error in verification interval: %s", e, exc_info=log.isEnabledFor(logging.DEBUG))
            return False

    def loop(self):
        """Main loop - runs until stop() is called."""
        log.info(f"Price verifier started (interval {self.interval:g}s)")

        next_tick = self._clock() + self.interval
        while not self._stop_event.is_set():
            remaining = next_tick - self._clock()
            # Wait for next slot (interruptible)
            if remaining > 0 and self._stop_event.wait(remaining):
                break
            if self._stop_event.is_set():
                break

            self.run_once()

            next_tick += self.interval
            overrun = self._clock() - next_tick
            if overrun > 0:
                missed = int(overrun // self.interval) + 1
                self.stats.skipped += missed
                next_tick += missed * self.interval
                log.warning(f"[VERIFY] Tick overran by {overrun:.2f}s, skipping {missed} slot(s)")

        log.info(
            "Price verifier stopped (ticks=%d verifications=%d errors=%d skipped=%d)",
            self.stats.ticks,
            self.stats.verifications,
            self.stats.errors,
            self.stats.skipped,
        )

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start the verifier in a background thread.

        A verifier that has been stopped stays stopped; build a new one to
        poll again.
        """
        if self.is_running:
            log.warning("Price verifier already running")
            return
        if self._stop_event.is_set():
            log.info("Price verifier was stopped before it started")
            return

        self._thread = threading.Thread(target=self.loop, name="price-verifier", daemon=True)
        self._thread.start()
        log.info("Price verifier thread started")

    def stop(self, timeout: float = 5.0):
        """Stop the verifier and wait for the current tick to finish."""
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                log.warning("Price verifier thread did not stop within %.1fs", timeout)
                return
        self._thread = None
