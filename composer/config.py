"""Runtime configuration for the order runner.

Secrets come from the process environment (or a repo-root .env file);
everything else has a sensible default so a bare checkout can point at a
local Polynance API server.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

# " # note" after an unquoted value; a '#' glued to the value is kept
_TRAILING_COMMENT = re.compile(r"\s+#.*$")


def _parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export "):]

    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None

    value = value.strip()
    if value[:1] in ("'", '"'):
        closing = value.find(value[0], 1)
        if closing > 0:
            return key, value[1:closing]
    return key, _TRAILING_COMMENT.sub("", value)


def load_env_file(path: Path) -> int:
    """Apply KEY=VALUE lines from ``path`` without overriding the environment.

    Returns the number of keys that were read.
    """
    if not path.exists():
        return 0

    pairs = [_parse_env_line(line) for line in path.read_text(encoding="utf-8").splitlines()]
    pairs = [pair for pair in pairs if pair is not None]
    for key, value in pairs:
        os.environ.setdefault(key, value)
    return len(pairs)


load_env_file(ENV_FILE)


class ConfigError(RuntimeError):
    """Raised when required configuration is missing."""
    pass


def _float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a float")


def _bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes"}


def require_env(name: str) -> str:
    val = os.getenv(name)
    if not val or not val.strip():
        raise ConfigError(f"Missing required env var: {name}")
    return val.strip()


API_BASE_URL_DEFAULT = "http://localhost:9000"
VERIFY_INTERVAL_SECONDS_DEFAULT = 2.0
HTTP_TIMEOUT_SECONDS_DEFAULT = 10.0

REQUIRED_ENV_VARS = ("POLYGON_RPC", "PRIVATE_KEY")

# Log every HTTP payload at DEBUG (noisy; signatures included)
LOG_HTTP_PAYLOADS = _bool("LOG_HTTP_PAYLOADS", False)


@dataclass(frozen=True)
class Settings:
    polygon_rpc: str
    private_key: str
    api_base_url: str = API_BASE_URL_DEFAULT
    verify_interval_seconds: float = VERIFY_INTERVAL_SECONDS_DEFAULT
    orders_file: Optional[str] = None
    http_timeout_seconds: float = HTTP_TIMEOUT_SECONDS_DEFAULT

    @staticmethod
    def from_env() -> "Settings":
        missing = [name for name in REQUIRED_ENV_VARS if not (os.getenv(name) or "").strip()]
        if missing:
            raise ConfigError(
                f"Missing required env var(s): {', '.join(missing)}. "
                "Set them in the session or add them to the repo-root .env."
            )

        interval = _float("VERIFY_INTERVAL_SECONDS", VERIFY_INTERVAL_SECONDS_DEFAULT)
        if interval <= 0:
            raise ValueError("Environment variable VERIFY_INTERVAL_SECONDS must be positive")

        http_timeout = _float("HTTP_TIMEOUT_SECONDS", HTTP_TIMEOUT_SECONDS_DEFAULT)
        if not http_timeout > 0:
            raise ConfigError("Environment variable HTTP_TIMEOUT_SECONDS must be positive")

        return Settings(
            polygon_rpc=require_env("POLYGON_RPC"),
            private_key=require_env("PRIVATE_KEY"),
            api_base_url=os.getenv("POLYNANCE_API_BASE_URL") or API_BASE_URL_DEFAULT,
            verify_interval_seconds=interval,
            orders_file=os.getenv("ORDERS_FILE") or None,
            http_timeout_seconds=http_timeout,
        )

    def masked(self) -> dict:
        """Settings safe to log (private key redacted)."""
        return {
            "polygon_rpc": self.polygon_rpc,
            "private_key": "***",
            "api_base_url": self.api_base_url,
            "verify_interval_seconds": self.verify_interval_seconds,
            "orders_file": self.orders_file,
            "http_timeout_seconds": self.http_timeout_seconds,
        }
