"""
Local Wallet Provider
Signs with a private key held in process (eth_account) and broadcasts
through the chain client.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_account import Account
from eth_account.messages import encode_defunct

from common.errors import ErrorCode, create_error, handle_error
from config.networks import Network
from wallets.base import WalletProvider
from wallets.chain_client import ChainClient

logger = logging.getLogger(__name__)


class LocalWalletProvider(WalletProvider):
    """Wallet backed by an in-memory eth_account LocalAccount."""

    def __init__(self, private_key: str, network: Network, chain: ChainClient):
        if not private_key:
            raise create_error("A private key is required for the local wallet", ErrorCode.INVALID_INPUT)
        try:
            self._account = Account.from_key(private_key)
        except Exception as e:
            raise handle_error("Invalid private key", e, ErrorCode.INVALID_INPUT)

        self._network = network
        self.chain = chain
        logger.info(f"[LocalWallet] Loaded {self._account.address} on {network.network_id}")

    def get_address(self) -> str:
        return self._account.address

    def get_network(self) -> Network:
        return self._network

    def get_name(self) -> str:
        return "local_wallet_provider"

    async def get_balance(self) -> int:
        return await self.chain.get_balance(self._account.address)

    async def sign_message(self, message: Union[str, bytes]) -> str:
        if isinstance(message, str):
            signable = encode_defunct(text=message)
        else:
            signable = encode_defunct(primitive=bytes(message))
        signed = self._account.sign_message(signable)
        return "0x" + bytes(signed.signature).hex()

    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        try:
            signed = self._account.sign_typed_data(full_message=typed_data)
        except Exception as e:
            raise handle_error("Failed to sign typed data", e, ErrorCode.INVALID_INPUT)
        return "0x" + bytes(signed.signature).hex()

    async def sign_transaction(self, transaction: Dict[str, Any]) -> str:
        tx = await self.chain.fill_transaction(self._account.address, transaction)
        tx.pop("from", None)
        signed = self._account.sign_transaction(tx)
        return "0x" + bytes(signed.raw_transaction).hex()

    async def send_transaction(self, transaction: Dict[str, Any]) -> str:
        raw = await self.sign_transaction(transaction)
        tx_hash = await self.chain.send_raw(raw)
        logger.info(f"[LocalWallet] Sent {tx_hash}")
        return tx_hash

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
        tx.setdefault("from", self._account.address)
        return await self.chain.call(tx)
