from __future__ import annotations

import json
import sys
from typing import Any, Optional

from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3


def _normalize_pk(pk: str) -> str:
    pk = pk.strip()
    if not pk:
        raise ValueError("Empty private key")
    if pk.startswith("0x"):
        pk = pk[2:]
    if len(pk) != 64:
        raise ValueError("Private key must be 32 bytes (64 hex chars), optionally prefixed by 0x")
    try:
        int(pk, 16)
    except ValueError:
        raise ValueError("Private key must be hex encoded")
    return "0x" + pk


def canonical_json(payload: Any) -> str:
    """Stable JSON encoding so the server can re-derive the signed message."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)


class Wallet:
    """Signing identity bound to a Polygon RPC endpoint.

    Nothing here touches the network until chain_id is read.
    """

    def __init__(self, private_key: str, rpc_url: str, web3: Optional[Web3] = None):
        if not rpc_url or not rpc_url.strip():
            raise ValueError("RPC URL is required")
        self.rpc_url = rpc_url.strip()
        self._account = Account.from_key(_normalize_pk(private_key))
        self.web3 = web3 or Web3(Web3.HTTPProvider(self.rpc_url))
        self._chain_id: Optional[int] = None

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = int(self.web3.eth.chain_id)
        return self._chain_id

    def sign_payload(self, payload: Any) -> str:
        message = encode_defunct(text=canonical_json(payload))
        signed = self._account.sign_message(message)
        return "0x" + bytes(signed.signature).hex()

    def __repr__(self) -> str:
        return f"Wallet(address={self.address}, rpc_url={self.rpc_url})"


def recover_signer(payload: Any, signature: str) -> str:
    """Address that produced ``signature`` over ``payload``."""
    message = encode_defunct(text=canonical_json(payload))
    return Account.recover_message(message, signature=signature)


def main(argv: Optional[list[str]] = None) -> int:
    from composer.config import ConfigError, require_env

    argv = argv if argv is not None else sys.argv[1:]
    expected = None
    env_var = "PRIVATE_KEY"

    for arg in argv:
        if arg.startswith("--expected="):
            expected = arg.split("=", 1)[1].strip()
        elif arg.startswith("--env="):
            env_var = arg.split("=", 1)[1].strip()

    try:
        pk = require_env(env_var)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    addr = Account.from_key(_normalize_pk(pk)).address
    print(addr)

    if expected:
        # Compare case-insensitively; checksum casing may differ.
        if addr.lower() != expected.lower():
            print(f"ERROR: derived address does not match expected {expected}", file=sys.stderr)
            return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
