"""Tests for the command line interface."""

from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager
from io import StringIO

import pytest

from rich.console import Console

from src import cli
from src.data.blocks.models import normalize_block
from src.helpers.config import CrawlerConfig
from tests.fakes import ALWAYS, FakeProvider, InMemoryStore, make_raw_block


@pytest.fixture
def config() -> CrawlerConfig:
    return CrawlerConfig(
        rpc_url="https://test.rpc",
        database_url="sqlite+aiosqlite://",
        history_window=5,
        retry_delay=0,
    )


@pytest.fixture
def console() -> Console:
    return Console(file=StringIO(), force_terminal=False, width=200)


def output(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def services(
    monkeypatch: pytest.MonkeyPatch,
    fake_provider: FakeProvider,
    memory_store: InMemoryStore,
) -> Iterator[tuple[FakeProvider, InMemoryStore]]:
    """Replace the real provider and store opened by commands."""

    @asynccontextmanager
    async def fake_open_services(
        config: CrawlerConfig,
    ) -> AsyncIterator[tuple[FakeProvider, InMemoryStore]]:
        yield fake_provider, memory_store

    monkeypatch.setattr(cli, "open_services", fake_open_services)
    yield fake_provider, memory_store


class TestBuildParser:
    """Tests for build_parser function."""

    def test_download_range(self) -> None:
        """Test parsing of the download range."""
        args = cli.build_parser().parse_args(
            ["download", "--from-block", "10", "--to-block", "20"]
        )

        assert args.command == "download"
        assert args.from_block == 10
        assert args.to_block == 20

    def test_no_command_opens_menu(self) -> None:
        """Test that no subcommand selects the interactive menu."""
        args = cli.build_parser().parse_args([])

        assert args.command is None

    def test_global_options(self) -> None:
        """Test parsing of connection options."""
        args = cli.build_parser().parse_args(
            ["--rpc-url", "https://x.rpc", "--log-level", "DEBUG", "serve", "--port", "9000"]
        )

        assert args.rpc_url == "https://x.rpc"
        assert args.log_level == "DEBUG"
        assert args.port == 9000


class TestActions:
    """Tests for the actions behind commands and menu entries."""

    @pytest.mark.asyncio
    async def test_download_defaults_to_history_window(
        self,
        console: Console,
        fake_provider: FakeProvider,
        memory_store: InMemoryStore,
        config: CrawlerConfig,
    ) -> None:
        """Test that the default range ends at the head."""
        summary = await cli.download(console, fake_provider, memory_store, config)

        assert (summary.from_block, summary.to_block) == (95, 100)
        assert sorted(memory_store.blocks) == list(range(95, 101))
        assert "6 blocks downloaded" in output(console)

    @pytest.mark.asyncio
    async def test_download_reports_skipped_blocks(
        self, console: Console, memory_store: InMemoryStore, config: CrawlerConfig
    ) -> None:
        """Test that skipped blocks are listed."""
        provider = FakeProvider(failures={3: ALWAYS})

        summary = await cli.download(console, provider, memory_store, config, 1, 4)

        assert not summary.is_complete
        assert "Block 3 skipped" in output(console)

    @pytest.mark.asyncio
    async def test_show_gas_price(
        self, console: Console, fake_provider: FakeProvider, config: CrawlerConfig
    ) -> None:
        """Test that the gas estimate is printed."""
        await cli.show_gas_price(console, fake_provider, config)

        assert "20.00 gwei" in output(console)

    @pytest.mark.asyncio
    async def test_show_history(self, console: Console, memory_store: InMemoryStore) -> None:
        """Test that stored blocks are printed."""
        memory_store.blocks[7] = normalize_block(make_raw_block(7), with_transactions=True)

        await cli.show_history(console, memory_store)

        assert "'number': 7" in output(console)

    @pytest.mark.asyncio
    async def test_clear_store(self, console: Console, memory_store: InMemoryStore) -> None:
        """Test that the number of deleted blocks is printed."""
        memory_store.blocks[1] = normalize_block(make_raw_block(1), with_transactions=True)

        assert await cli.clear_store(console, memory_store) == 1
        assert "1 Deleted" in output(console)
        assert memory_store.blocks == {}


class TestInteractiveMenu:
    """Tests for interactive_menu function."""

    @pytest.mark.asyncio
    async def test_runs_choices_until_quit(
        self,
        monkeypatch: pytest.MonkeyPatch,
        console: Console,
        fake_provider: FakeProvider,
        memory_store: InMemoryStore,
        config: CrawlerConfig,
    ) -> None:
        """Test that choices are run in order until 0 is entered."""
        answers = iter(["4", "5", "6", "0"])
        monkeypatch.setattr(cli.Prompt, "ask", lambda *args, **kwargs: next(answers))

        await cli.interactive_menu(console, fake_provider, memory_store, config)

        text = output(console)
        assert "6 blocks downloaded" in text
        assert "6 Deleted" in text
        assert "exiting" in text
        assert memory_store.blocks == {}

    @pytest.mark.asyncio
    async def test_errors_do_not_exit_menu(
        self,
        monkeypatch: pytest.MonkeyPatch,
        console: Console,
        memory_store: InMemoryStore,
        config: CrawlerConfig,
    ) -> None:
        """Test that a failing action is reported and the menu continues."""
        answers = iter(["1", "0"])
        monkeypatch.setattr(cli.Prompt, "ask", lambda *args, **kwargs: next(answers))
        provider = FakeProvider(oracle_error=True)

        await cli.interactive_menu(console, provider, memory_store, config)

        text = output(console)
        assert "Error: execution reverted" in text
        assert "exiting" in text


class TestMain:
    """Tests for main entry point."""

    def test_missing_configuration_returns_one(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a missing RPC URL is reported with exit code 1."""
        monkeypatch.delenv("ETH_RPC_URL", raising=False)

        assert cli.main(["--database-url", "sqlite+aiosqlite://", "gas"]) == 1

    def test_invalid_log_level_returns_one(self) -> None:
        """Test that an unknown log level is reported with exit code 1."""
        argv = [
            "--rpc-url",
            "https://test.rpc",
            "--database-url",
            "sqlite+aiosqlite://",
            "--log-level",
            "LOUD",
            "gas",
        ]

        assert cli.main(argv) == 1

    @pytest.mark.usefixtures("services")
    def test_download_complete_returns_zero(self) -> None:
        """Test that a complete download exits with 0."""
        argv = [
            "--rpc-url",
            "https://test.rpc",
            "--database-url",
            "sqlite+aiosqlite://",
            "download",
            "--from-block",
            "1",
            "--to-block",
            "3",
        ]

        assert cli.main(argv) == 0

    def test_download_incomplete_returns_two(
        self, monkeypatch: pytest.MonkeyPatch, services: tuple[FakeProvider, InMemoryStore]
    ) -> None:
        """Test that a download with skipped blocks exits with 2."""
        provider, _ = services
        provider.failures[2] = ALWAYS
        monkeypatch.setenv("RETRY_DELAY", "0")
        argv = [
            "--rpc-url",
            "https://test.rpc",
            "--database-url",
            "sqlite+aiosqlite://",
            "download",
            "--from-block",
            "1",
            "--to-block",
            "3",
        ]

        assert cli.main(argv) == 2

    def test_crawler_error_returns_one(
        self, services: tuple[FakeProvider, InMemoryStore]
    ) -> None:
        """Test that a failing command exits with 1."""
        provider, _ = services
        provider.oracle_error = True
        argv = ["--rpc-url", "https://test.rpc", "--database-url", "sqlite+aiosqlite://", "gas"]

        assert cli.main(argv) == 1
