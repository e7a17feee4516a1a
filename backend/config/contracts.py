"""
Tensai Protocol Configuration
Contract addresses and endpoints per chain, grouped into config objects
that are injected into the action providers.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional

from common.errors import ErrorCode, create_error

# ============================================
# MORPHO BLUE
# ============================================

MORPHO_BLUE_ADDRESSES = {
    129399: "0xC263190b99ceb7e2b7409059D24CB573e3bB9021",  # Katana testnet
    747474: "0xD50F2DffFd62f94Ee4AEd9ca05C61d0753268aBc",  # Katana mainnet
    137: "0x1bF0c2541F820E775182832f06c0B7Fc27A25f67",     # Polygon PoS
}

MORPHO_SUPPORTED_NETWORKS = frozenset({
    "polygon-mainnet",
    "katana-mainnet",
    "katana-testnet",
})

# Morpho Blue API (markets, vaults, curators, user positions)
MORPHO_API_URL = "https://api.morpho.org/graphql"
MORPHO_SUBGRAPH_NETWORKS = frozenset({"polygon-mainnet"})


@dataclass(frozen=True)
class MorphoConfig:
    contract_addresses: Mapping[int, str] = field(default_factory=dict)
    supported_networks: FrozenSet[str] = frozenset()
    api_url: str = MORPHO_API_URL
    subgraph_networks: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "contract_addresses", MappingProxyType(dict(self.contract_addresses)))

    def contract_address(self, chain_id) -> str:
        address = self.contract_addresses.get(int(chain_id))
        if address is None:
            raise create_error(f"{chain_id} not supported for Morpho Blue.", ErrorCode.INVALID_NETWORK)
        return address


def default_morpho_config(api_url: Optional[str] = None) -> MorphoConfig:
    return MorphoConfig(
        MORPHO_BLUE_ADDRESSES,
        MORPHO_SUPPORTED_NETWORKS,
        api_url or MORPHO_API_URL,
        MORPHO_SUBGRAPH_NETWORKS,
    )


# ============================================
# SUSHISWAP
# ============================================

SUSHI_API_URL = "https://api.sushi.com"

# Default RouteProcessor spender; zkSync-family chains use their own deployment
SUSHI_DEFAULT_SPENDER = "0xAC4c6e212A361c968F1725b4d055b47E63F80b75"
SUSHI_SPENDERS = {
    324: "0x35E98C2b3894D71D3D4D7edb8b30E4f36E2f9179",     # zkSync
    810181: "0x35E98C2b3894D71D3D4D7edb8b30E4f36E2f9179",  # zkLink Nova
}

DEFAULT_MAX_SLIPPAGE = 0.005  # 0.5%

SUSHI_SUBGRAPH_URLS = {
    129399: "https://gateway-arbitrum.network.thegraph.com/api/subgraphs/id/2YG7eSFHx1Wm9SHKdcrM8HR23JQpVe8fNNdmDHMXyVYR",
}


@dataclass(frozen=True)
class SushiSwapConfig:
    api_url: str = SUSHI_API_URL
    default_spender: str = SUSHI_DEFAULT_SPENDER
    spenders: Mapping[int, str] = field(default_factory=dict)
    default_max_slippage: float = DEFAULT_MAX_SLIPPAGE
    subgraph_urls: Mapping[int, str] = field(default_factory=dict)
    subgraph_api_key: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "spenders", MappingProxyType(dict(self.spenders)))
        object.__setattr__(self, "subgraph_urls", MappingProxyType(dict(self.subgraph_urls)))

    def spender(self, chain_id) -> str:
        return self.spenders.get(int(chain_id), self.default_spender)

    def subgraph_url(self, chain_id) -> str:
        url = self.subgraph_urls.get(int(chain_id))
        if url is None:
            raise create_error(f"{chain_id} has no SushiSwap subgraph.", ErrorCode.INVALID_NETWORK)
        return url


def default_sushi_swap_config(
    api_url: Optional[str] = None,
    subgraph_api_key: Optional[str] = None
) -> SushiSwapConfig:
    return SushiSwapConfig(
        api_url=api_url or SUSHI_API_URL,
        spenders=SUSHI_SPENDERS,
        subgraph_urls=SUSHI_SUBGRAPH_URLS,
        subgraph_api_key=subgraph_api_key,
    )


# ============================================
# ERC20 ABI (balances, approvals, metadata)
# ============================================

ERC20_ABI = [
    {
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"name": "owner", "type": "address"}, {"name": "spender", "type": "address"}],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "account", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "name": "transfer",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function"
    }
]
