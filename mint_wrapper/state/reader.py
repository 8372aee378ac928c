"""
Mint Wrapper Ledger Access

Collaborator interfaces for reading ledger state and submitting batches,
plus a JSON-RPC account reader.
"""

from __future__ import annotations
import base64
import binascii
import itertools
import logging
from typing import Any, Optional, Protocol, Sequence

import httpx
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from mint_wrapper.config import RpcConfig
from mint_wrapper.core.envelope import TransactionEnvelope
from mint_wrapper.errors import DecodeError, RpcError

logger = logging.getLogger(__name__)


class AccountReader(Protocol):
    """Reads raw account data from the ledger."""

    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        """Account bytes, or None when no account exists at `address`."""
        ...

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        ...


class BatchSubmitter(Protocol):
    """Signs and submits one atomic batch; at most once per call."""

    async def submit(
        self,
        tx: TransactionEnvelope,
        signers: Sequence[Keypair] = ()
    ) -> str:
        """Returns the ledger's identifier for the executed batch."""
        ...


class RpcAccountReader:
    """
    AccountReader over the ledger's JSON-RPC API.

    Performs exactly one HTTP request per call and never retries.
    """

    def __init__(
        self,
        config: Optional[RpcConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config or RpcConfig()
        self._client = client
        self._owns_client = client is None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "RpcAccountReader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_sec)
        return self._client

    async def _call(self, method: str, params: list) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug(f"RPC {method} -> {self.config.url}")

        try:
            resp = await self._get_client().post(self.config.url, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"RPC {method} transport failure: {e}")
            raise RpcError(method, str(e)) from e

        if resp.status_code != 200:
            logger.warning(f"RPC {method} returned HTTP {resp.status_code}")
            raise RpcError(method, f"HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as e:
            raise RpcError(method, "response is not JSON") from e

        if "error" in body:
            error = body["error"] or {}
            raise RpcError(method, error.get("message", "unknown error"), error.get("code"))

        return body.get("result")

    async def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        result = await self._call(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self.config.commitment}],
        )
        value = (result or {}).get("value")
        if value is None:
            return None

        data = value.get("data")
        if not isinstance(data, list) or len(data) != 2 or data[1] != "base64":
            raise DecodeError("AccountInfo", f"unexpected data encoding for {address}")
        try:
            return base64.b64decode(data[0], validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError("AccountInfo", f"invalid base64 for {address}") from e

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        result = await self._call(
            "getMinimumBalanceForRentExemption",
            [size, {"commitment": self.config.commitment}],
        )
        if not isinstance(result, int):
            raise DecodeError("RentExemption", f"expected integer lamports, got {result!r}")
        return result
