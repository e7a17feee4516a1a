"""
Privy Server Wallet Provider
Custodial wallet held by Privy and addressed by wallet ID.
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


class PrivyServerWalletProvider(WalletProvider):
    """Signing and sending go to Privy; reads and receipts go to the chain client."""

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
        self.signer = PrivyRpcSigner(
            privy,
            f"/v1/wallets/{wallet_id}/rpc",
            lambda method, params: {"method": method, "params": params},
            address,
            network.chain_id,
        )

    @classmethod
    async def configure_with_wallet(
        cls,
        privy: PrivyRpcClient,
        network: Network,
        chain: ChainClient,
        wallet_id: Optional[str] = None
    ) -> "PrivyServerWalletProvider":
        """
        Attach to an existing server wallet, or create one when no ID is given.

        Raises:
            TensaiError(INVALID_INPUT) when app credentials are missing
            TensaiError(API_CALL_FAILED) when Privy rejects the lookup
        """
        if not privy.app_id or not privy.app_secret:
            raise create_error(
                "app_id and app_secret are required for PrivyServerWalletProvider",
                ErrorCode.INVALID_INPUT
            )

        try:
            if wallet_id:
                wallet = await privy.get(f"/v1/wallets/{wallet_id}")
            else:
                wallet = await privy.post("/v1/wallets", {"chain_type": "ethereum"})
                logger.info(f"[PrivyServerWallet] Created wallet {wallet.get('id')}")
        except Exception as e:
            raise handle_error("Failed to configure Privy server wallet provider", e, ErrorCode.API_CALL_FAILED)

        if not wallet.get("id") or not wallet.get("address"):
            raise create_error(
                "Failed to configure Privy server wallet provider: wallet has no id or address",
                ErrorCode.API_CALL_FAILED,
                {"response": wallet},
            )

        return cls(privy, wallet["id"], wallet["address"], network, chain)

    def get_address(self) -> str:
        return self._address

    def get_network(self) -> Network:
        return self._network

    def get_name(self) -> str:
        return "privy_evm_wallet_provider"

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
