"""
Wallet factory: builds the configured wallet variant from Settings.
"""

import logging
from typing import Optional

import httpx

from common.errors import ErrorCode, create_error
from config.networks import Network, NetworkRegistry, default_network_registry
from config.settings import Settings
from wallets.base import WalletProvider
from wallets.chain_client import ChainClient
from wallets.local_wallet import LocalWalletProvider
from wallets.privy_auth import PrivyRpcClient
from wallets.privy_embedded_wallet import PrivyEmbeddedWalletProvider
from wallets.privy_server_wallet import PrivyServerWalletProvider

logger = logging.getLogger(__name__)


async def configure_privy_wallet(
    privy: PrivyRpcClient,
    network: Network,
    chain: ChainClient,
    wallet_type: str = "server",
    wallet_id: Optional[str] = None,
    address: Optional[str] = None
) -> WalletProvider:
    """Dispatch on Privy wallet type: "server" (default) or "embedded"."""
    if wallet_type == "server":
        return await PrivyServerWalletProvider.configure_with_wallet(privy, network, chain, wallet_id)
    if wallet_type == "embedded":
        return await PrivyEmbeddedWalletProvider.configure_with_wallet(
            privy, network, chain, wallet_id, address
        )
    raise create_error(f"Invalid wallet type: {wallet_type}", ErrorCode.INVALID_INPUT)


async def create_wallet_provider(
    settings: Settings,
    registry: Optional[NetworkRegistry] = None,
    http_client: Optional[httpx.AsyncClient] = None
) -> WalletProvider:
    """
    Build the wallet named by settings.wallet_type.

    Raises:
        TensaiError(INVALID_NETWORK) for an unknown network/chain
        TensaiError(INVALID_INPUT) for missing credentials or wallet type
    """
    registry = registry or default_network_registry()
    network = registry.network_for(settings.network_id, settings.chain_id)
    rpc_url = settings.rpc_url or registry.rpc_url(network, settings.katana_rpc_api_key)
    chain = ChainClient.from_rpc_url(rpc_url)

    logger.info(f"[WalletFactory] {settings.wallet_type} wallet on {network.network_id} ({network.chain_id})")

    if settings.wallet_type == "local":
        return LocalWalletProvider(settings.wallet_private_key, network, chain)

    if settings.wallet_type in ("privy-server", "privy-embedded"):
        if not settings.privy_app_id or not settings.privy_app_secret:
            raise create_error("PRIVY_APP_ID and PRIVY_APP_SECRET are required", ErrorCode.INVALID_INPUT)
        privy = PrivyRpcClient(
            app_id=settings.privy_app_id,
            app_secret=settings.privy_app_secret,
            authorization_key=settings.privy_authorization_private_key,
            api_url=settings.privy_api_url,
            client=http_client,
        )
        return await configure_privy_wallet(
            privy,
            network,
            chain,
            wallet_type=settings.wallet_type.split("-", 1)[1],
            wallet_id=settings.privy_wallet_id,
            address=settings.privy_wallet_address,
        )

    raise create_error(f"Invalid wallet type: {settings.wallet_type}", ErrorCode.INVALID_INPUT)
