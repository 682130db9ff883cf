"""Ethereum JSON-RPC client utilities."""

from typing import Any

import httpx

from src.helpers.parsers import parse_hex_int, to_hex_quantity
from src.helpers.rpc_models import (
    EthBlockNumberRequest,
    EthCallRequest,
    EthGasPriceRequest,
    EthGetBlockByNumberRequest,
    JsonRpcRequest,
)


class RPCError(ValueError):
    """The node answered with a JSON-RPC error object."""

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__(f"RPC error: {error}")


class RPCClient:
    """Ethereum JSON-RPC client over a shared httpx connection pool."""

    def __init__(self, rpc_url: str, timeout: float = 30.0) -> None:
        """Initialize RPC client.

        Args:
            rpc_url: Ethereum JSON-RPC endpoint URL
            timeout: Default timeout for requests in seconds

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout

    async def send(
        self,
        client: httpx.AsyncClient,
        request: JsonRpcRequest,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a JSON-RPC request and return its result.

        Args:
            client: HTTP client instance
            request: Request model
            timeout: Optional timeout override

        Returns:
            RPC result value (None when the node returns a null result)

        Raises:
            httpx.HTTPError: If the HTTP request fails
            RPCError: If the RPC response contains an error or is not a
                JSON-RPC object
        """
        response = await client.post(
            self.rpc_url,
            json=request.model_dump(),
            timeout=timeout or self.timeout,
        )
        response.raise_for_status()
        try:
            result = response.json()
        except ValueError as e:
            msg = f"invalid JSON-RPC response: {e}"
            raise RPCError(msg) from e

        if not isinstance(result, dict):
            msg = f"invalid JSON-RPC response: expected an object, got {type(result).__name__}"
            raise RPCError(msg)
        if "error" in result:
            raise RPCError(result["error"])

        return result.get("result")

    async def get_block_number(self, client: httpx.AsyncClient) -> int:
        """Get the latest block number."""
        result = await self.send(client, EthBlockNumberRequest())
        return parse_hex_int(result) if result else 0

    async def get_block_by_number(
        self,
        client: httpx.AsyncClient,
        block_number: int,
        *,
        full_transactions: bool = False,
    ) -> dict[str, Any] | None:
        """Get a block by number.

        Args:
            client: HTTP client instance
            block_number: Block number
            full_transactions: Embed transaction objects instead of hashes

        Returns:
            Raw block object, or None if the block is not mined yet
        """
        request = EthGetBlockByNumberRequest(
            params=[to_hex_quantity(block_number), full_transactions]
        )
        return await self.send(client, request)

    async def get_gas_price(self, client: httpx.AsyncClient) -> int:
        """Get the current gas price in wei."""
        result = await self.send(client, EthGasPriceRequest())
        return parse_hex_int(result)

    async def eth_call(
        self,
        client: httpx.AsyncClient,
        to: str,
        data: str,
        block: str = "latest",
    ) -> str:
        """Execute a read-only contract call.

        Args:
            client: HTTP client instance
            to: Contract address
            data: ABI-encoded calldata
            block: Block tag or hex block number

        Returns:
            Hex-encoded return data ("0x" when the call returned nothing)
        """
        request = EthCallRequest(params=[{"to": to, "data": data}, block])
        result = await self.send(client, request)
        return result or "0x"


__all__ = [
    "RPCClient",
    "RPCError",
]
