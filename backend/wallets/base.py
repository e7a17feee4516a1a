"""
Signer Capability
The one interface every wallet variant satisfies. Action providers and the
token executor only ever talk to a WalletProvider.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union

from common.amounts import parse_amount, to_atomic_units, validate_address
from common.errors import ErrorCode, create_error, handle_error
from config.networks import Network


class WalletProvider(ABC):
    """
    Abstract wallet capability for EVM chains.

    Address and network are fixed for the lifetime of an instance. Signing
    methods never broadcast; send_transaction does.
    """

    @abstractmethod
    def get_address(self) -> str:
        """Checksummed address of the wallet."""

    @abstractmethod
    def get_network(self) -> Network:
        """Network the wallet is bound to."""

    @abstractmethod
    def get_name(self) -> str:
        """Provider name, e.g. local_wallet_provider."""

    @abstractmethod
    async def get_balance(self) -> int:
        """Native asset balance in wei."""

    @abstractmethod
    async def sign_message(self, message: Union[str, bytes]) -> str:
        """EIP-191 personal_sign, returns 0x-prefixed signature."""

    @abstractmethod
    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        """EIP-712 signature over {domain, types, primaryType, message}."""

    @abstractmethod
    async def sign_transaction(self, transaction: Dict[str, Any]) -> str:
        """Signed raw transaction as 0x hex."""

    @abstractmethod
    async def send_transaction(self, transaction: Dict[str, Any]) -> str:
        """Broadcast and return the transaction hash."""

    @abstractmethod
    async def wait_for_transaction_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """Block until the chain reports the transaction as included."""

    @abstractmethod
    async def read_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Optional[Sequence[Any]] = None
    ) -> Any:
        """View/pure call; never mutates chain state."""

    @abstractmethod
    async def call(self, transaction: Dict[str, Any]) -> str:
        """eth_call dry run of a would-be transaction, returns raw output hex."""

    async def native_transfer(self, to: str, value: str) -> str:
        """
        Transfer the native asset.

        Args:
            to: Destination address
            value: Amount in whole units, e.g. "0.1"

        Returns:
            Hash of the confirmed transaction
        """
        validate_address(to)
        wei = to_atomic_units(parse_amount(value), 18)

        try:
            tx_hash = await self.send_transaction({"to": to, "value": wei})
            receipt = await self.wait_for_transaction_receipt(tx_hash)
        except Exception as e:
            raise handle_error("Native transfer failed", e)

        if not receipt or receipt.get("status") != 1:
            raise create_error(
                f"Native transfer failed: transaction {tx_hash} reverted",
                ErrorCode.CONTRACT_ERROR,
                {"tx_hash": tx_hash, "receipt": receipt},
            )
        return tx_hash
