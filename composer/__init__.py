# Index Composer order runner
#
# Submits a fixed batch of prediction-market orders through the Polynance API
# server and then polls for pending price data to verify.
#
# runner.OrderRunner sequences the phases; verifier.PriceVerifier owns the
# polling loop; backend.PolynanceClient is the HTTP client for the server.

from .schemas import (
    ExecutionResult,
    OrderRequest,
    Side,
    SignedOrder,
)

from .config import ConfigError, Settings
from .backend import PolynanceAPIError, PolynanceClient, TradingBackend
from .orders import DEFAULT_ORDERS, load_orders
from .runner import OrderRunner, RunState, bootstrap, submit_batch
from .verifier import PriceVerifier
from .wallet import Wallet
