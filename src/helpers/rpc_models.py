"""Pydantic models for JSON-RPC requests."""

from typing import Any

from pydantic import BaseModel, Field


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(default=1, description="Request ID")


class EthBlockNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_blockNumber."""

    method: str = Field(default="eth_blockNumber", frozen=True)
    params: list[Any] = Field(default_factory=list, frozen=True)


class EthGetBlockByNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBlockByNumber.

    params: [block number as hex quantity, include full transactions]
    """

    method: str = Field(default="eth_getBlockByNumber", frozen=True)


class EthGasPriceRequest(JsonRpcRequest):
    """JSON-RPC request for eth_gasPrice."""

    method: str = Field(default="eth_gasPrice", frozen=True)
    params: list[Any] = Field(default_factory=list, frozen=True)


class EthCallRequest(JsonRpcRequest):
    """JSON-RPC request for eth_call.

    params: [{"to": address, "data": calldata}, block tag]
    """

    method: str = Field(default="eth_call", frozen=True)


__all__ = [
    "EthBlockNumberRequest",
    "EthCallRequest",
    "EthGasPriceRequest",
    "EthGetBlockByNumberRequest",
    "JsonRpcRequest",
]
