"""JSON-RPC transport to a cluster endpoint over a ``requests`` session."""

from __future__ import annotations

import base64
import itertools
import logging
from typing import Any, Sequence

import requests

from hellochain.chain.keypair import PublicKey
from hellochain.errors import RpcError
from hellochain.types import SessionLike

log = logging.getLogger(__name__)


def _build_payload(request_id: int, method: str, params: Sequence[Any] | None) -> dict:
    """Assemble one JSON-RPC 2.0 request body."""
    return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": list(params or [])}


def _parse_response(method: str, body: Any) -> Any:
    """Return the ``result`` member of a JSON-RPC response or raise ``RpcError``."""
    if not isinstance(body, dict):
        raise RpcError(-32700, f"Malformed response to {method}: {body!r}")
    error = body.get("error")
    if error is not None:
        raise RpcError(int(error.get("code", -32000)), str(error.get("message", "unknown error")))
    if "result" not in body:
        raise RpcError(-32700, f"Response to {method} carries no result")
    return body["result"]


class RpcClient:
    """Typed wrappers for the cluster JSON-RPC methods the program client needs."""

    def __init__(
        self,
        url: str,
        *,
        session: SessionLike | None = None,
        commitment: str = "confirmed",
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self.commitment = commitment
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self._ids = itertools.count(1)

    def call(self, method: str, params: Sequence[Any] | None = None) -> Any:
        """
        Perform one JSON-RPC call and return its result.

        Raises:
            requests.RequestException: On transport failures and non-2xx responses.
            RpcError: When the endpoint answers with an error object.
        """
        payload = _build_payload(next(self._ids), method, params)
        log.debug("RPC %s %s", method, payload["params"])
        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        return _parse_response(method, response.json())

    def get_version(self) -> dict:
        return self.call("getVersion")

    def get_balance(self, pubkey: PublicKey) -> int:
        result = self.call("getBalance", [str(pubkey), {"commitment": self.commitment}])
        return int(result["value"])

    def get_account_info(self, pubkey: PublicKey) -> dict | None:
        """
        Fetch an account and decode its data.

        Returns:
            dict | None: ``None`` when the account does not exist, otherwise the account
            fields with ``data`` replaced by raw bytes.
        """
        result = self.call(
            "getAccountInfo",
            [str(pubkey), {"encoding": "base64", "commitment": self.commitment}],
        )
        value = result.get("value")
        if value is None:
            return None
        data, _encoding = value["data"]
        return {**value, "data": base64.b64decode(data)}

    def get_minimum_balance_for_rent_exemption(self, space: int) -> int:
        return int(self.call("getMinimumBalanceForRentExemption", [space]))

    def get_latest_blockhash(self) -> str:
        result = self.call("getLatestBlockhash", [{"commitment": self.commitment}])
        return result["value"]["blockhash"]

    def request_airdrop(self, pubkey: PublicKey, lamports: int) -> str:
        return self.call("requestAirdrop", [str(pubkey), lamports])

    def send_transaction(self, wire: bytes) -> str:
        encoded = base64.b64encode(wire).decode("ascii")
        return self.call(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": self.commitment}],
        )

    def get_signature_status(self, signature: str) -> dict | None:
        """Return the status entry for ``signature``, or ``None`` while it is unknown."""
        result = self.call(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        statuses = result.get("value") or [None]
        return statuses[0]
