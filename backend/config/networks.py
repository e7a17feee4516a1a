"""
Network Configuration
Chain-id <-> network-id registry and default RPC endpoints.
The registry is passed into wallets and providers; nothing here is mutated at runtime.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from common.errors import ErrorCode, create_error


@dataclass(frozen=True)
class Network:
    """The chain a wallet or action targets."""
    protocol_family: str
    network_id: Optional[str] = None
    chain_id: Optional[str] = None


@dataclass(frozen=True)
class ChainInfo:
    chain_id: int
    network_id: str
    name: str
    rpc_url: str
    native_symbol: str = "ETH"
    native_decimals: int = 18


# ============================================
# KNOWN CHAINS
# ============================================

KATANA_MAINNET = ChainInfo(
    chain_id=747474,
    network_id="katana-mainnet",
    name="Katana",
    rpc_url="https://rpc.katana.network/",
)

KATANA_TESTNET = ChainInfo(
    chain_id=129399,
    network_id="katana-testnet",
    name="Katana Tatara",
    rpc_url="https://rpc.tatara.katanarpc.com/",
)

POLYGON_MAINNET = ChainInfo(
    chain_id=137,
    network_id="polygon-mainnet",
    name="Polygon PoS",
    rpc_url="https://polygon-rpc.com/",
    native_symbol="POL",
)

BASE_MAINNET = ChainInfo(
    chain_id=8453,
    network_id="base-mainnet",
    name="Base",
    rpc_url="https://mainnet.base.org",
)

DEFAULT_NETWORK_ID = KATANA_TESTNET.network_id


@dataclass(frozen=True)
class NetworkRegistry:
    """Lookup table for supported EVM chains."""
    chains: Mapping[int, ChainInfo] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "chains", MappingProxyType(dict(self.chains)))

    def by_chain_id(self, chain_id) -> ChainInfo:
        try:
            key = int(chain_id)
        except (TypeError, ValueError):
            raise create_error(f"Invalid chain ID: {chain_id!r}", ErrorCode.INVALID_NETWORK)

        chain = self.chains.get(key)
        if chain is None:
            raise create_error(f"Chain with ID {chain_id} not found", ErrorCode.INVALID_NETWORK)
        return chain

    def by_network_id(self, network_id: str) -> ChainInfo:
        for chain in self.chains.values():
            if chain.network_id == network_id:
                return chain
        raise create_error(f"Unknown network ID: {network_id}", ErrorCode.INVALID_NETWORK)

    def network_for(self, network_id: Optional[str] = None, chain_id: Optional[str] = None) -> Network:
        """Resolve a Network from either identifier, checking they agree."""
        if chain_id is not None:
            chain = self.by_chain_id(chain_id)
            if network_id is not None and network_id != chain.network_id:
                raise create_error(
                    f"Network ID {network_id} does not match chain ID {chain_id}",
                    ErrorCode.INVALID_NETWORK
                )
        else:
            chain = self.by_network_id(network_id or DEFAULT_NETWORK_ID)

        return Network(
            protocol_family="evm",
            network_id=chain.network_id,
            chain_id=str(chain.chain_id),
        )

    def native_decimals(self, network: Network) -> int:
        if network.chain_id is None:
            return 18
        return self.by_chain_id(network.chain_id).native_decimals

    def rpc_url(self, network: Network, api_key: str = "") -> str:
        chain = self.by_chain_id(network.chain_id)
        if chain.chain_id == KATANA_TESTNET.chain_id and api_key:
            return f"{chain.rpc_url}{api_key}"
        return chain.rpc_url


def default_network_registry() -> NetworkRegistry:
    return NetworkRegistry({
        c.chain_id: c for c in (KATANA_MAINNET, KATANA_TESTNET, POLYGON_MAINNET, BASE_MAINNET)
    })
