"""REST API exposing recent chain data and the stored history.

Responses are BlockRecord and TransactionRecord serialized as is: snake_case
field names (`transaction_count`, `from_address`, `to_address`, `gas_price`)
and amounts, gas and timestamps as exact decimal JSON integers. They are not
the hex-encoded JSON-RPC shape, so a client written for the node format has
to read these names and must not parse the numbers as hex.

Usage:
    uvicorn src.api.main:app --port 8080
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from rich.console import Console

from src.data.blocks.backfill import BackfillBlocks
from src.data.blocks.models import BlockRecord, TransactionRecord
from src.data.blocks.provider import BlockProvider, RpcBlockProvider
from src.data.blocks.recent import get_latest_blocks, get_latest_transactions
from src.data.blocks.store import BlockStore, SqlBlockStore
from src.helpers.config import CrawlerConfig, load_config
from src.helpers.db import create_db_engine
from src.helpers.errors import (
    CrawlerError,
    NormalizationError,
    OracleCallError,
    TransientFetchError,
)
from src.helpers.logging import get_logger


logger = get_logger(__name__)


def create_app(
    config: CrawlerConfig | None = None,
    provider: BlockProvider | None = None,
    store: BlockStore | None = None,
) -> FastAPI:
    """Create the API application.

    Collaborators that are not given are built from the configuration on
    startup and released on shutdown.

    Args:
        config: Crawler configuration (loaded from the environment if None)
        provider: Remote ledger adapter
        store: Block store adapter
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = config or load_config()
        app.state.config = settings

        owned_provider: RpcBlockProvider | None = None
        engine = None

        if provider is None:
            owned_provider = RpcBlockProvider.from_url(
                settings.rpc_url, timeout=settings.rpc_timeout
            )
            app.state.provider = owned_provider
        else:
            app.state.provider = provider

        if store is None:
            engine = create_db_engine(settings.database_url)
            sql_store = SqlBlockStore(engine)
            await sql_store.create_schema()
            app.state.store = sql_store
        else:
            app.state.store = store

        logger.info("API ready, RPC endpoint %s", settings.rpc_url)
        try:
            yield
        finally:
            if owned_provider is not None:
                await owned_provider.aclose()
            if engine is not None:
                await engine.dispose()

    app = FastAPI(title="Ethereum History", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CrawlerError)
    async def crawler_error_handler(request: Request, exc: CrawlerError) -> JSONResponse:
        upstream = (TransientFetchError, OracleCallError, NormalizationError)
        status_code = 502 if isinstance(exc, upstream) else 500
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/blocks", response_model=list[BlockRecord])
    async def latest_blocks(request: Request) -> list[BlockRecord]:
        """The 10 most recent blocks, without their transactions."""
        blocks = await get_latest_blocks(request.app.state.provider)
        logger.info("GET latest blocks: %d", len(blocks))
        return blocks

    @app.get("/transactions", response_model=list[TransactionRecord])
    async def latest_transactions(request: Request) -> list[TransactionRecord]:
        """The first 10 transactions of the latest block."""
        transactions = await get_latest_transactions(request.app.state.provider)
        logger.info("GET latest transactions: %d", len(transactions))
        return transactions

    @app.get("/historic-data", response_model=list[BlockRecord])
    async def historic_data(request: Request) -> list[BlockRecord]:
        """Every stored block, downloading history first if nothing is stored."""
        settings: CrawlerConfig = request.app.state.config
        backfill = BackfillBlocks.from_config(
            settings,
            request.app.state.provider,
            request.app.state.store,
            console=Console(stderr=True),
        )
        return await backfill.ensure_history(settings.default_from_block)

    return app


# Module-level application for `uvicorn src.api.main:app`
app = create_app()


__all__ = ["app", "create_app"]
