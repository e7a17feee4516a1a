"""
Runtime settings, read from the environment (.env is loaded by main.py)
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel

WALLET_TYPES = ("local", "privy-server", "privy-embedded")

PRIVY_API_URL = "https://api.privy.io"


class Settings(BaseModel):
    wallet_type: str = "local"
    network_id: Optional[str] = None
    chain_id: Optional[str] = None
    rpc_url: Optional[str] = None
    katana_rpc_api_key: str = ""

    # Local signer
    wallet_private_key: Optional[str] = None

    # Privy server / embedded wallets
    privy_app_id: Optional[str] = None
    privy_app_secret: Optional[str] = None
    privy_wallet_id: Optional[str] = None
    privy_wallet_address: Optional[str] = None
    privy_authorization_private_key: Optional[str] = None
    privy_api_url: str = PRIVY_API_URL

    sushi_api_url: Optional[str] = None
    sushi_subgraph_api_key: Optional[str] = None
    morpho_api_url: Optional[str] = None
    log_level: str = "INFO"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from environment variables (unset values keep defaults)."""
    env = os.environ if environ is None else environ

    def get(name: str, default=None):
        value = env.get(name)
        return value if value not in (None, "") else default

    return Settings(
        wallet_type=get("WALLET_TYPE", "local").lower(),
        network_id=get("NETWORK_ID"),
        chain_id=get("CHAIN_ID"),
        rpc_url=get("RPC_URL"),
        katana_rpc_api_key=get("KATANA_RPC_API_KEY", ""),
        wallet_private_key=get("WALLET_PRIVATE_KEY"),
        privy_app_id=get("PRIVY_APP_ID"),
        privy_app_secret=get("PRIVY_APP_SECRET"),
        privy_wallet_id=get("PRIVY_WALLET_ID"),
        privy_wallet_address=get("PRIVY_WALLET_ADDRESS"),
        privy_authorization_private_key=get("PRIVY_AUTHORIZATION_PRIVATE_KEY"),
        privy_api_url=get("PRIVY_API_URL", PRIVY_API_URL),
        sushi_api_url=get("SUSHI_API_URL"),
        sushi_subgraph_api_key=get("SUSHI_SUBGRAPH_API_KEY"),
        morpho_api_url=get("MORPHO_API_URL"),
        log_level=get("LOG_LEVEL", "INFO").upper(),
    )
