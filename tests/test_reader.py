"""
Mint Wrapper JSON-RPC Reader Tests
"""

import base64
import json

import httpx
import pytest
from solders.keypair import Keypair

from mint_wrapper.config import RpcConfig
from mint_wrapper.errors import DecodeError, RpcError, ErrorCode
from mint_wrapper.state.reader import RpcAccountReader


def make_reader(handler) -> RpcAccountReader:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RpcAccountReader(RpcConfig(url="http://ledger.test"), client=client)


def rpc_result(request: httpx.Request, result) -> httpx.Response:
    body = json.loads(request.content)
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


class TestGetAccountData:
    """Tests for getAccountInfo."""

    @pytest.mark.asyncio
    async def test_existing_account(self):
        """Test base64 data is decoded."""
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            payload = base64.b64encode(b"wrapper-bytes").decode()
            return rpc_result(request, {"context": {"slot": 1}, "value": {"data": [payload, "base64"]}})

        address = Keypair().pubkey()
        async with make_reader(handler) as reader:
            data = await reader.get_account_data(address)

        assert data == b"wrapper-bytes"
        assert seen["method"] == "getAccountInfo"
        assert seen["params"][0] == str(address)
        assert seen["params"][1] == {"encoding": "base64", "commitment": "confirmed"}

    @pytest.mark.asyncio
    async def test_missing_account(self):
        """Test a null value reads as None."""
        reader = make_reader(lambda request: rpc_result(request, {"context": {"slot": 1}, "value": None}))
        assert await reader.get_account_data(Keypair().pubkey()) is None

    @pytest.mark.asyncio
    async def test_unexpected_encoding(self):
        """Test a non-base64 payload raises."""
        reader = make_reader(
            lambda request: rpc_result(request, {"value": {"data": "raw"}})
        )
        with pytest.raises(DecodeError):
            await reader.get_account_data(Keypair().pubkey())

    @pytest.mark.asyncio
    async def test_invalid_base64(self):
        """Test corrupt base64 raises."""
        reader = make_reader(
            lambda request: rpc_result(request, {"value": {"data": ["!!!", "base64"]}})
        )
        with pytest.raises(DecodeError):
            await reader.get_account_data(Keypair().pubkey())


class TestRpcFailures:
    """Tests for transport and protocol errors."""

    @pytest.mark.asyncio
    async def test_error_object(self):
        """Test a JSON-RPC error object raises RpcError."""
        def handler(request):
            return httpx.Response(200, json={
                "jsonrpc": "2.0",
                "id": 1,
                "error": {"code": -32602, "message": "Invalid param"},
            })

        with pytest.raises(RpcError) as exc_info:
            await make_reader(handler).get_account_data(Keypair().pubkey())
        assert exc_info.value.code == ErrorCode.RPC_ERROR
        assert exc_info.value.details["rpc_code"] == -32602

    @pytest.mark.asyncio
    async def test_http_status(self):
        """Test non-200 responses raise."""
        reader = make_reader(lambda request: httpx.Response(503, text="busy"))
        with pytest.raises(RpcError):
            await reader.get_account_data(Keypair().pubkey())

    @pytest.mark.asyncio
    async def test_transport_error(self):
        """Test connection failures raise RpcError."""
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RpcError):
            await make_reader(handler).get_account_data(Keypair().pubkey())

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """Test an unparsable body raises."""
        reader = make_reader(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(RpcError):
            await reader.get_account_data(Keypair().pubkey())

    @pytest.mark.asyncio
    async def test_single_request_per_call(self):
        """Test no retries happen."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        with pytest.raises(RpcError):
            await make_reader(handler).get_account_data(Keypair().pubkey())
        assert len(calls) == 1


class TestRentExemption:
    """Tests for getMinimumBalanceForRentExemption."""

    @pytest.mark.asyncio
    async def test_rent(self):
        """Test the lamport amount is returned."""
        reader = make_reader(lambda request: rpc_result(request, 1461600))
        assert await reader.get_minimum_balance_for_rent_exemption(82) == 1461600

    @pytest.mark.asyncio
    async def test_non_integer(self):
        """Test a malformed result raises."""
        reader = make_reader(lambda request: rpc_result(request, "lots"))
        with pytest.raises(DecodeError):
            await reader.get_minimum_balance_for_rent_exemption(82)
