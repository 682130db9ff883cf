"""Command line interface and interactive menu.

Usage:
    eth-history                      # interactive menu
    eth-history gas
    eth-history blocks
    eth-history transactions
    eth-history download [--from-block N] [--to-block M]
    eth-history history
    eth-history clear
    eth-history serve [--host H] [--port P]
"""

import asyncio
from argparse import ArgumentParser, Namespace
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from rich.console import Console
from rich.prompt import Prompt

from src.api.main import create_app
from src.data.blocks.backfill import BackfillBlocks, BackfillSummary
from src.data.blocks.provider import BlockProvider, RpcBlockProvider
from src.data.blocks.recent import get_latest_blocks, get_latest_transactions
from src.data.blocks.store import BlockStore, SqlBlockStore
from src.gas.estimator import estimate_gas_price, format_gas_estimate
from src.helpers.config import CrawlerConfig, load_config
from src.helpers.db import create_db_engine
from src.helpers.errors import CrawlerError
from src.helpers.logging import get_logger, set_log_level


logger = get_logger(__name__)

MENU = """
Menu
1) Gas Price
2) Get the latest blocks
3) Get the latest transactions
4) Download history data to the database (takes some time)
5) Fetch history from the database
6) Clear data from the database
7) Run the web server
0) Quit"""

MENU_CHOICES = ["0", "1", "2", "3", "4", "5", "6", "7"]


@asynccontextmanager
async def open_services(
    config: CrawlerConfig,
) -> AsyncIterator[tuple[RpcBlockProvider, SqlBlockStore]]:
    """Open the provider and the store for the duration of a command."""
    provider = RpcBlockProvider.from_url(config.rpc_url, timeout=config.rpc_timeout)
    engine = create_db_engine(config.database_url)
    store = SqlBlockStore(engine)
    try:
        await store.create_schema()
        yield provider, store
    finally:
        await provider.aclose()
        await engine.dispose()


async def show_gas_price(
    console: Console, provider: BlockProvider, config: CrawlerConfig
) -> None:
    estimate = await estimate_gas_price(provider, config.oracle_address)
    console.print(format_gas_estimate(estimate))


async def show_latest_blocks(console: Console, provider: BlockProvider) -> None:
    for block in await get_latest_blocks(provider):
        console.print(block.model_dump())


async def show_latest_transactions(console: Console, provider: BlockProvider) -> None:
    for transaction in await get_latest_transactions(provider):
        console.print(transaction.model_dump())


async def download(
    console: Console,
    provider: BlockProvider,
    store: BlockStore,
    config: CrawlerConfig,
    from_block: int | None = None,
    to_block: int | None = None,
) -> BackfillSummary:
    """Download a block range; defaults to the last history_window blocks."""
    if to_block is None:
        to_block = await provider.get_block_number()
    if from_block is None:
        from_block = max(to_block - config.history_window, 0)

    backfill = BackfillBlocks.from_config(config, provider, store, console=console)
    summary = await backfill.run(from_block, to_block)

    console.print(
        f"{len(summary.stored)} blocks downloaded, "
        f"{len(summary.existing)} already stored, "
        f"{len(summary.skipped)} skipped"
    )
    for outcome in summary.skipped:
        console.print(f"[yellow]Block {outcome.block_number} skipped: {outcome.reason}")
    return summary


async def show_history(console: Console, store: BlockStore) -> None:
    for block in await store.fetch_all():
        console.print(block.model_dump())


async def clear_store(console: Console, store: BlockStore) -> int:
    deleted = await store.delete_all()
    console.print(f"{deleted} Deleted")
    return deleted


async def serve(
    config: CrawlerConfig,
    provider: BlockProvider | None = None,
    store: BlockStore | None = None,
    host: str | None = None,
    port: int | None = None,
) -> None:
    app = create_app(config, provider=provider, store=store)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=host or config.api_host,
            port=port or config.api_port,
            log_level=config.log_level.lower(),
        )
    )
    await server.serve()


async def interactive_menu(
    console: Console,
    provider: BlockProvider,
    store: BlockStore,
    config: CrawlerConfig,
) -> None:
    """Prompt for actions until the user quits."""
    while True:
        console.print(MENU)
        choice = Prompt.ask("Please enter your choice", choices=MENU_CHOICES, console=console)
        console.print()

        try:
            match choice:
                case "0":
                    console.print("exiting")
                    return
                case "1":
                    await show_gas_price(console, provider, config)
                case "2":
                    await show_latest_blocks(console, provider)
                case "3":
                    await show_latest_transactions(console, provider)
                case "4":
                    await download(console, provider, store, config)
                case "5":
                    await show_history(console, store)
                case "6":
                    await clear_store(console, store)
                case "7":
                    console.print(
                        f"Serving on http://{config.api_host}:{config.api_port}"
                    )
                    await serve(config, provider=provider, store=store)
        except CrawlerError as e:
            logger.error("Action %s failed: %s", choice, e)
            console.print(f"[red]Error: {e}")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="eth-history",
        description="Download Ethereum blocks and transactions into a database",
    )
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint (default: ETH_RPC_URL)")
    parser.add_argument(
        "--database-url", help="SQLAlchemy URL (default: DATABASE_URL or POSTGRE_*)"
    )
    parser.add_argument("--log-level", help="Log level (default: LOG_LEVEL or INFO)")

    commands = parser.add_subparsers(dest="command")
    commands.add_parser("gas", help="Show the gas price in gwei and USD")
    commands.add_parser("blocks", help="Show the latest blocks")
    commands.add_parser("transactions", help="Show the latest transactions")

    download_parser = commands.add_parser("download", help="Download a block range")
    download_parser.add_argument(
        "--from-block", type=int, help="First block (default: head - HISTORY_WINDOW)"
    )
    download_parser.add_argument(
        "--to-block", type=int, help="Last block, inclusive (default: head)"
    )

    commands.add_parser("history", help="Show every stored block")
    commands.add_parser("clear", help="Delete every stored block")

    serve_parser = commands.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", help="Bind address (default: API_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: API_PORT)")

    return parser


async def run_command(args: Namespace, config: CrawlerConfig, console: Console) -> int:
    if args.command == "serve":
        await serve(config, host=args.host, port=args.port)
        return 0

    async with open_services(config) as (provider, store):
        match args.command:
            case "gas":
                await show_gas_price(console, provider, config)
            case "blocks":
                await show_latest_blocks(console, provider)
            case "transactions":
                await show_latest_transactions(console, provider)
            case "download":
                summary = await download(
                    console, provider, store, config, args.from_block, args.to_block
                )
                return 0 if summary.is_complete else 2
            case "history":
                await show_history(console, store)
            case "clear":
                await clear_store(console, store)
            case _:
                await interactive_menu(console, provider, store, config)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point of the eth-history command."""
    args = build_parser().parse_args(argv)
    console = Console()

    try:
        config = load_config(args.rpc_url, args.database_url)
        set_log_level(args.log_level or config.log_level)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}")
        return 1

    try:
        return asyncio.run(run_command(args, config, console))
    except CrawlerError as e:
        logger.error("%s failed: %s", args.command or "menu", e)
        console.print(f"[red]Error: {e}")
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
