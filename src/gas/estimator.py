"""Gas price in USD, using a Chainlink ETH/USD price oracle.

Amounts stay integers until the very end: wei (18 decimals) times the oracle
price (8 decimals) is divided by 10**18, formatted as an 8-decimal string and
only then parsed as a float for display. ETH amounts routinely exceed the
exact integer range of a float, so converting earlier would lose precision.
"""

from pydantic import BaseModel, ConfigDict

from src.data.blocks.provider import BlockProvider
from src.helpers.constants import (
    ETH_DECIMALS,
    ETH_USD_FEED,
    GWEI_DECIMALS,
    TRANSFER_GAS_UNITS,
    UINT256_MAX,
    USD_PRICE_DECIMALS,
)
from src.helpers.errors import ConversionError
from src.helpers.logging import get_logger
from src.helpers.parsers import format_units, format_units_float, parse_float


logger = get_logger(__name__)


class GasPriceEstimate(BaseModel):
    """Current gas price and the USD cost of a standard transfer."""

    wei_per_gas: int
    usd_per_eth: int
    gwei: float
    usd_per_gas: float
    transfer_cost_usd: float
    transfer_gas_units: int = TRANSFER_GAS_UNITS

    model_config = ConfigDict(frozen=True)


def usd_value(amount: int, price_usd: int) -> float:
    """Convert a wei amount to USD.

    Multiplies before dividing so that small amounts are not truncated.

    Args:
        amount: Amount in wei (18 decimals)
        price_usd: USD price of one ETH (8 decimals)

    Returns:
        float: USD value with 8 decimals of precision

    Raises:
        ConversionError: If an input or the product does not fit in uint256,
            or the formatted value cannot be parsed

    Example:
        >>> usd_value(10**18, 200_00000000)
        200.0
    """
    if amount < 0 or price_usd < 0:
        msg = f"Amounts must be unsigned, got {amount} and {price_usd}"
        raise ConversionError(msg)

    product = amount * price_usd
    if product > UINT256_MAX:
        msg = f"{amount} * {price_usd} overflows uint256"
        raise ConversionError(msg)

    value = product // 10**ETH_DECIMALS
    return parse_float(format_units(value, USD_PRICE_DECIMALS))


async def estimate_gas_price(
    provider: BlockProvider, oracle_address: str = ETH_USD_FEED
) -> GasPriceEstimate:
    """Get the current gas price and its USD value.

    Args:
        provider: Remote ledger adapter
        oracle_address: Chainlink ETH/USD aggregator address

    Returns:
        GasPriceEstimate

    Raises:
        OracleCallError: If the price feed cannot be called
        TransientFetchError: If the gas price cannot be fetched
        ConversionError: If the oracle answer is negative or a value cannot
            be formatted
    """
    usd_per_eth = await provider.latest_answer(oracle_address)
    if usd_per_eth < 0:
        msg = f"Oracle returned a negative price: {usd_per_eth}"
        raise ConversionError(msg)

    wei_per_gas = await provider.get_gas_price()

    # Gas stations report gas price in gwei (1 gwei = 10**9 wei)
    gwei = format_units_float(wei_per_gas, GWEI_DECIMALS)
    usd_per_gas = usd_value(wei_per_gas, usd_per_eth)
    transfer_cost_usd = usd_value(wei_per_gas * TRANSFER_GAS_UNITS, usd_per_eth)

    logger.debug(
        "Gas price %s gwei at %s USD/ETH",
        format_units(wei_per_gas, GWEI_DECIMALS),
        format_units(usd_per_eth, USD_PRICE_DECIMALS),
    )
    return GasPriceEstimate(
        wei_per_gas=wei_per_gas,
        usd_per_eth=usd_per_eth,
        gwei=gwei,
        usd_per_gas=usd_per_gas,
        transfer_cost_usd=transfer_cost_usd,
    )


def format_gas_estimate(estimate: GasPriceEstimate) -> str:
    """Render an estimate for the terminal."""
    return (
        "Gas price\n"
        "---------------\n"
        f"{estimate.gwei:>10.2f} gwei\n"
        f"{estimate.usd_per_gas:>10.8f} usd\n"
        "\n"
        "Total gas estimated\n"
        "---------------\n"
        f"{estimate.transfer_cost_usd:>5.2f} usd "
        f"(for {estimate.transfer_gas_units} unit)\n"
    )


__all__ = [
    "GasPriceEstimate",
    "estimate_gas_price",
    "format_gas_estimate",
    "usd_value",
]
