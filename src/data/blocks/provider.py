"""Provider adapter: the remote ledger as seen by the crawler."""

from typing import Any, Protocol, Self

import httpx

from src.helpers.constants import LATEST_ANSWER_SELECTOR
from src.helpers.errors import ConversionError, OracleCallError, TransientFetchError
from src.helpers.logging import get_logger
from src.helpers.parsers import decode_int256
from src.helpers.rpc import RPCClient, RPCError


logger = get_logger(__name__)


class BlockProvider(Protocol):
    """Operations the crawler needs from the remote ledger.

    Blocks are returned as raw JSON-RPC objects; normalization happens in
    src.data.blocks.models.
    """

    async def get_block_number(self) -> int: ...

    async def get_block(self, block_number: int) -> dict[str, Any] | None: ...

    async def get_block_with_transactions(
        self, block_number: int
    ) -> dict[str, Any] | None: ...

    async def get_gas_price(self) -> int: ...

    async def latest_answer(self, feed_address: str) -> int: ...


class RpcBlockProvider:
    """BlockProvider backed by an Ethereum JSON-RPC endpoint.

    Network and RPC failures become TransientFetchError, except for the
    oracle call whose failures become OracleCallError.
    """

    def __init__(self, rpc_client: RPCClient, http_client: httpx.AsyncClient) -> None:
        """Initialize the provider.

        Args:
            rpc_client: JSON-RPC client holding the endpoint URL
            http_client: Pooled HTTP client reused for every call
        """
        self.rpc = rpc_client
        self.client = http_client

    @classmethod
    def from_url(cls, rpc_url: str, timeout: float = 30.0) -> Self:
        """Build a provider with its own HTTP client. Close it with aclose()."""
        return cls(RPCClient(rpc_url, timeout=timeout), httpx.AsyncClient(timeout=timeout))

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def get_block_number(self) -> int:
        """Get the current chain height."""
        try:
            return await self.rpc.get_block_number(self.client)
        except (httpx.HTTPError, RPCError) as e:
            msg = f"Failed to get block number: {e}"
            raise TransientFetchError(msg) from e

    async def _get_block(
        self, block_number: int, *, full_transactions: bool
    ) -> dict[str, Any] | None:
        try:
            return await self.rpc.get_block_by_number(
                self.client, block_number, full_transactions=full_transactions
            )
        except (httpx.HTTPError, RPCError) as e:
            msg = f"Failed to get block {block_number}: {e}"
            raise TransientFetchError(msg) from e

    async def get_block(self, block_number: int) -> dict[str, Any] | None:
        """Get a header-only block (transaction hashes only)."""
        return await self._get_block(block_number, full_transactions=False)

    async def get_block_with_transactions(
        self, block_number: int
    ) -> dict[str, Any] | None:
        """Get a block with its transaction objects."""
        return await self._get_block(block_number, full_transactions=True)

    async def get_gas_price(self) -> int:
        """Get the current gas price in wei."""
        try:
            return await self.rpc.get_gas_price(self.client)
        except (httpx.HTTPError, RPCError) as e:
            msg = f"Failed to get gas price: {e}"
            raise TransientFetchError(msg) from e

    async def latest_answer(self, feed_address: str) -> int:
        """Call latestAnswer() on a Chainlink aggregator.

        Returns:
            Signed answer with the feed's decimals (8 for USD feeds)

        Raises:
            OracleCallError: If the call fails or returns no data
        """
        try:
            data = await self.rpc.eth_call(
                self.client, feed_address, LATEST_ANSWER_SELECTOR
            )
            return decode_int256(data)
        except (httpx.HTTPError, RPCError, ConversionError) as e:
            logger.error("Oracle call to %s failed: %s", feed_address, e)
            msg = f"latestAnswer() call to {feed_address} failed: {e}"
            raise OracleCallError(msg) from e


__all__ = ["BlockProvider", "RpcBlockProvider"]
