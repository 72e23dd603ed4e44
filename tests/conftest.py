import pytest

from composer.config import Settings
from composer.schemas import ExecutionResult, SignedOrder

# Well-known local dev key (hardhat account #0); never funded on mainnet.
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class FakeBackend:
    """Records every call in order; failures are injected per call name."""

    def __init__(self):
        self.calls = []
        self.fail_on = {}          # (name, call_number) -> exception
        self.verify_able = False
        self.pending = []
        self.hooks = {}            # name -> callable run before the call returns
        self._counts = {}

    def _record(self, name, arg=None):
        n = self._counts.get(name, 0) + 1
        self._counts[name] = n
        self.calls.append((name, arg))
        hook = self.hooks.get(name)
        if hook:
            hook()
        exc = self.fail_on.get((name, n))
        if exc is not None:
            raise exc

    def count(self, name):
        return self._counts.get(name, 0)

    def build_order(self, request):
        self._record("build_order", request.market_id_or_slug)
        return SignedOrder(request=request, payload={"market": request.market_id_or_slug}, signature="0xsig")

    def execute_order(self, signed_order):
        self._record("execute_order", signed_order.request.market_id_or_slug)
        return ExecutionResult(success=True, order_id=f"id-{signed_order.request.market_id_or_slug}")

    def as_context(self, result):
        return {"orderId": result.order_id}

    def scan_pending_price_data(self):
        self._record("scan_pending_price_data")
        return self.verify_able

    def get_pending_order_ids(self):
        self._record("get_pending_order_ids")
        return list(self.pending)

    def verify_price(self):
        self._record("verify_price")
        return list(self.pending)


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def wallet_env(monkeypatch):
    monkeypatch.setenv("POLYGON_RPC", "http://127.0.0.1:8545")
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)


@pytest.fixture
def test_key():
    return TEST_PRIVATE_KEY


@pytest.fixture
def test_address():
    return TEST_ADDRESS


@pytest.fixture
def settings():
    return Settings(
        polygon_rpc="http://127.0.0.1:8545",
        private_key=TEST_PRIVATE_KEY,
        verify_interval_seconds=60.0,
    )
