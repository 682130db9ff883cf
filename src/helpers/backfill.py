"""Base classes and utilities for backfill operations."""

from abc import ABC, abstractmethod
from typing import Any

from rich.console import Console


class BackfillBase(ABC):
    """Abstract base class for backfill operations.

    Provides common functionality for all backfill classes including:
    - Console initialization for progress display
    - Retry configuration

    Subclasses must implement:
    - run(): Main backfill orchestration logic
    """

    def __init__(
        self,
        max_attempts: int,
        retry_delay: float,
        console: Console | None = None,
    ) -> None:
        """Initialize backfill with common configuration.

        Args:
            max_attempts: Number of fetch attempts per item before giving up
            retry_delay: Fixed delay between two attempts in seconds
            console: Console used for progress display

        Raises:
            ValueError: If max_attempts is lower than 1 or retry_delay is negative
        """
        if max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {max_attempts}"
            raise ValueError(msg)
        if retry_delay < 0:
            msg = f"retry_delay cannot be negative, got {retry_delay}"
            raise ValueError(msg)

        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.console = console or Console()

    @abstractmethod
    async def run(self, *args: Any, **kwargs: Any) -> Any:
        """Run the backfill process.

        This method must be implemented by subclasses to define
        their specific backfill logic and orchestration.
        """
        ...


__all__ = ["BackfillBase"]
