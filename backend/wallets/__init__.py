"""
Wallet providers: one signer capability, three variants
"""

from .base import WalletProvider
from .chain_client import ChainClient
from .factory import configure_privy_wallet, create_wallet_provider
from .local_wallet import LocalWalletProvider
from .privy_embedded_wallet import PrivyEmbeddedWalletProvider
from .privy_server_wallet import PrivyServerWalletProvider

__all__ = [
    "WalletProvider",
    "ChainClient",
    "LocalWalletProvider",
    "PrivyServerWalletProvider",
    "PrivyEmbeddedWalletProvider",
    "configure_privy_wallet",
    "create_wallet_provider",
]
