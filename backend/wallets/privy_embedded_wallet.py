"""
Privy Delegated Embedded Wallet Provider
Acts on a user's embedded wallet through a delegation. The raw key never
leaves Privy; every request carries an authorization-key signature.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from common.errors import ErrorCode, create_error, handle_error
from config.networks import Network
from wallets.base import WalletProvider
from wallets.chain_client import ChainClient
from wallets.privy_auth import PrivyRpcClient
from wallets.privy_signer import PrivyRpcSigner

logger = logging.getLogger(__name__)


class PrivyEmbeddedWalletProvider(WalletProvider):

    def __init__(
        self,
        privy: PrivyRpcClient,
        wallet_id: str,
        address: str,
        network: Network,
        chain: ChainClient
    ):
        if not wallet_id or not address:
            raise create_error("A Privy wallet ID and address are required", ErrorCode.INVALID_INPUT)
        self.privy = privy
        self.wallet_id = wallet_id
        self._address = address
        self._network = network
        self.chain = chain
        self.signer = PrivyRpcSigner(privy, "/v1/wallets/rpc", self._envelope, address, network.chain_id)

    def _envelope(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "address": self._address,
            "chain_type": "ethereum",
            "method": method,
            "params": params,
        }

    @classmethod
    async def configure_with_wallet(
        cls,
        privy: PrivyRpcClient,
        network: Network,
        chain: ChainClient,
        wallet_id: str,
        address: Optional[str] = None
    ) -> "PrivyEmbeddedWalletProvider":
        """
        Validate credentials and resolve the delegated wallet.

        Args:
            wallet_id: Privy user ID owning the embedded wallet
            address: Skip the user lookup when the address is already known
        """
        if not wallet_id:
            raise create_error(
                "wallet_id is required for PrivyEmbeddedWalletProvider",
                ErrorCode.INVALID_INPUT
            )
        if not privy.app_id or not privy.app_secret:
            raise create_error(
                "app_id and app_secret are required for PrivyEmbeddedWalletProvider",
                ErrorCode.INVALID_INPUT
            )
        if not privy.authorization_key:
            raise create_error(
                "authorization_private_key is required for PrivyEmbeddedWalletProvider",
                ErrorCode.INVALID_INPUT
            )

        if not address:
            address = await cls._resolve_address(privy, wallet_id)

        return cls(privy, wallet_id, address, network, chain)

    @staticmethod
    async def _resolve_address(privy: PrivyRpcClient, wallet_id: str) -> str:
        try:
            user = await privy.get(f"/v1/users/{wallet_id}")
        except Exception as e:
            raise handle_error("Failed to configure Privy embedded wallet provider", e, ErrorCode.API_CALL_FAILED)

        for account in user.get("linked_accounts", []):
            if account.get("type") == "wallet" and account.get("wallet_client_type") == "privy":
                logger.info(f"[PrivyEmbeddedWallet] Resolved {account['address']} for {wallet_id}")
                return account["address"]

        raise create_error(
            f"Could not find wallet address for wallet ID {wallet_id}",
            ErrorCode.INVALID_INPUT
        )

    def get_address(self) -> str:
        return self._address

    def get_network(self) -> Network:
        return self._network

    def get_name(self) -> str:
        return "privy_evm_embedded_wallet_provider"

    async def get_balance(self) -> int:
        return await self.chain.get_balance(self._address)

    async def sign_message(self, message: Union[str, bytes]) -> str:
        return await self.signer.sign_message(message)

    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        return await self.signer.sign_typed_data(typed_data)

    async def sign_transaction(self, transaction: Dict[str, Any]) -> str:
        return await self.signer.sign_transaction(transaction)

    async def send_transaction(self, transaction: Dict[str, Any]) -> str:
        return await self.signer.send_transaction(transaction)

    async def wait_for_transaction_receipt(self, tx_hash: str) -> Dict[str, Any]:
        return await self.chain.wait_for_receipt(tx_hash)

    async def read_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Optional[Sequence[Any]] = None
    ) -> Any:
        return await self.chain.read_contract(address, abi, function_name, args)

    async def call(self, transaction: Dict[str, Any]) -> str:
        tx = dict(transaction)
        tx.setdefault("from", self._address)
        return await self.chain.call(tx)

    def export_wallet(self) -> Dict[str, Optional[str]]:
        return {
            "wallet_id": self.wallet_id,
            "authorization_private_key": self.privy.authorization_key,
            "network_id": self._network.network_id,
            "chain_id": self._network.chain_id,
        }
