"""Exception hierarchy shared by the crawler components."""


class CrawlerError(Exception):
    """Base class for every error raised by the crawler."""


class TransientFetchError(CrawlerError):
    """The remote ledger was unreachable or the request failed.

    The ingestion pipeline retries these up to its fetch budget.
    """


class StoreQueryError(CrawlerError):
    """A query against the block store failed. Never retried."""


class DuplicateBlockError(StoreQueryError):
    """A block with the same number is already stored."""

    def __init__(self, block_number: int) -> None:
        self.block_number = block_number
        super().__init__(f"Block {block_number} is already stored")


class OracleCallError(CrawlerError):
    """The price feed contract call failed."""


class ConversionError(CrawlerError):
    """A fixed-point value could not be formatted or parsed."""


class NormalizationError(CrawlerError):
    """A raw block does not have the expected structure."""


__all__ = [
    "ConversionError",
    "CrawlerError",
    "DuplicateBlockError",
    "NormalizationError",
    "OracleCallError",
    "StoreQueryError",
    "TransientFetchError",
]
