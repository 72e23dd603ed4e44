import pytest

# Variables read by composer.config.Settings.from_env
_CONFIG_ENV_VARS = (
    "POLYGON_RPC",
    "PRIVATE_KEY",
    "POLYNANCE_API_BASE_URL",
    "VERIFY_INTERVAL_SECONDS",
    "ORDERS_FILE",
    "HTTP_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep a developer's .env / shell from leaking into tests."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
