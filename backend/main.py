"""
Tensai Agent Backend
FastAPI app exposing wallet, ERC-20, Morpho Blue and SushiSwap actions to agents
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from actions import (
    AgentKit,
    ERC20ActionProvider,
    MorphoActionProvider,
    MorphoSubgraphActionProvider,
    SushiSwapActionProvider,
    WalletActionProvider,
)
from api.actions_router import router as actions_router
from config import (
    default_morpho_config,
    default_network_registry,
    default_sushi_swap_config,
    load_settings,
)
from config.settings import Settings
from execution import TokenOperationExecutor
from integrations import MorphoApiClient, SushiSwapClient
from wallets import create_wallet_provider

load_dotenv()

logger = logging.getLogger(__name__)


async def build_agent_kit(settings: Settings) -> AgentKit:
    """Wallet from settings plus every action provider, sharing one executor."""
    registry = default_network_registry()
    wallet = await create_wallet_provider(settings, registry)
    executor = TokenOperationExecutor(registry)
    sushi = SushiSwapClient(default_sushi_swap_config(settings.sushi_api_url, settings.sushi_subgraph_api_key))
    morpho = default_morpho_config(settings.morpho_api_url)

    return AgentKit.from_config(wallet, [
        WalletActionProvider(),
        ERC20ActionProvider(executor),
        MorphoActionProvider(morpho, executor),
        MorphoSubgraphActionProvider(morpho, MorphoApiClient(morpho)),
        SushiSwapActionProvider(sushi, executor, registry),
    ])


def create_app(kit: Optional[AgentKit] = None) -> FastAPI:
    """Build the app; when no kit is given it is created from the environment on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if kit is None:
            settings = load_settings()
            app.state.agent_kit = await build_agent_kit(settings)
            wallet = app.state.agent_kit.wallet
            logger.info(f"[Startup] {wallet.get_name()} {wallet.get_address()} on {wallet.get_network().network_id}")
        else:
            app.state.agent_kit = kit
        yield

    app = FastAPI(
        title="Tensai Agent API",
        description="On-chain actions for AI agents",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(","),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(actions_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "tensai-agent"}

    return app


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging(load_settings())

app = create_app()


# ============================================
# RUN
# ============================================

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
