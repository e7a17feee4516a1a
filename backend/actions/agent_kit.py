"""
Agent Kit
Combines a wallet with action providers and exposes the actions valid on
the wallet's network.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from actions.provider import Action, ActionProvider
from actions.wallet_actions import WalletActionProvider
from common.errors import ErrorCode, create_error
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)


def list_actions(wallet: WalletProvider, providers: Sequence[ActionProvider]) -> List[Action]:
    """
    Actions of every provider that supports the wallet's network, in order.

    Skipped providers are reported in a single warning.
    """
    network = wallet.get_network()
    actions: List[Action] = []
    unsupported: List[str] = []

    for provider in providers:
        if provider.supports_network(network):
            actions.extend(provider.get_actions(wallet))
        else:
            unsupported.append(provider.name)

    if unsupported:
        logger.warning(
            f"[AgentKit] The following action providers are not supported on the current network "
            f"and will be skipped: {', '.join(unsupported)} (network: {network.network_id}, "
            f"chain_id: {network.chain_id}, protocol_family: {network.protocol_family})"
        )

    return actions


class AgentKit:

    def __init__(self, wallet: WalletProvider, action_providers: Optional[List[ActionProvider]] = None):
        self.wallet = wallet
        self.action_providers = list(action_providers) if action_providers is not None else [WalletActionProvider()]

    @classmethod
    def from_config(
        cls,
        wallet: Optional[WalletProvider] = None,
        action_providers: Optional[List[ActionProvider]] = None
    ) -> "AgentKit":
        if wallet is None:
            raise create_error("A wallet provider is required to initialize AgentKit", ErrorCode.INVALID_INPUT)
        return cls(wallet, action_providers)

    def get_actions(self) -> List[Action]:
        return list_actions(self.wallet, self.action_providers)

    def get_action(self, name: str) -> Action:
        network = self.wallet.get_network()
        for provider in self.action_providers:
            if not provider.supports_network(network):
                continue
            for action in provider.get_actions(self.wallet):
                if action.name == name:
                    return action
        raise create_error(f"Unknown action: {name}", ErrorCode.INVALID_INPUT)

    async def invoke(self, name: str, args: Optional[Dict[str, Any]] = None) -> str:
        return await self.get_action(name).invoke(args)
