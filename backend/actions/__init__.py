"""
Action providers and the dispatcher that exposes them to agents
"""

from .agent_kit import AgentKit, list_actions
from .erc20_actions import ERC20ActionProvider
from .morpho_actions import (
    MorphoActionProvider,
    MorphoProtocolActionProvider,
    MorphoSubgraphActionProvider,
    MorphoWriteActionProvider,
    morpho_action_provider,
)
from .provider import Action, ActionProvider
from .sushi_swap_actions import (
    SushiSwapActionProvider,
    SushiSwapExecuteActionProvider,
    SushiSwapLiquidityActionProvider,
    SushiSwapSwapActionProvider,
    SushiSwapTokenActionProvider,
)
from .wallet_actions import WalletActionProvider

__all__ = [
    "Action",
    "ActionProvider",
    "AgentKit",
    "list_actions",
    "WalletActionProvider",
    "ERC20ActionProvider",
    "MorphoActionProvider",
    "MorphoProtocolActionProvider",
    "MorphoWriteActionProvider",
    "MorphoSubgraphActionProvider",
    "morpho_action_provider",
    "SushiSwapActionProvider",
    "SushiSwapSwapActionProvider",
    "SushiSwapTokenActionProvider",
    "SushiSwapLiquidityActionProvider",
    "SushiSwapExecuteActionProvider",
]
