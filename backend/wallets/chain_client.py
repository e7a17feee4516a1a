"""
Chain Client
Thin async wrapper around web3.py used by every wallet variant for reads,
gas/fee filling, broadcast and receipt polling.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted

from common.errors import ErrorCode, create_error, handle_error

logger = logging.getLogger(__name__)


def _to_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    value = str(value)
    return value if value.startswith("0x") else "0x" + value


class ChainClient:
    """
    Read/broadcast access to one EVM chain.

    Args:
        w3: AsyncWeb3 instance (tests inject a mock)
        receipt_timeout: Seconds to wait for a receipt, None waits until inclusion
    """

    def __init__(self, w3: AsyncWeb3, receipt_timeout: Optional[float] = None):
        self.w3 = w3
        self.receipt_timeout = receipt_timeout

    @classmethod
    def from_rpc_url(cls, rpc_url: str, receipt_timeout: Optional[float] = None) -> "ChainClient":
        w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        return cls(w3, receipt_timeout=receipt_timeout)

    # ============================================
    # READS
    # ============================================

    async def get_balance(self, address: str) -> int:
        try:
            return int(await self.w3.eth.get_balance(AsyncWeb3.to_checksum_address(address)))
        except Exception as e:
            raise handle_error(f"Failed to get balance for {address}", e, ErrorCode.NETWORK_ERROR)

    async def read_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Optional[Sequence[Any]] = None
    ) -> Any:
        contract = self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)
        try:
            fn = contract.get_function_by_name(function_name)
            return await fn(*(args or [])).call()
        except ContractLogicError as e:
            raise create_error(
                f"Contract call {function_name} reverted on {address}: {e}",
                ErrorCode.CONTRACT_ERROR
            )
        except Exception as e:
            raise handle_error(f"Failed to read {function_name} on {address}", e, ErrorCode.CONTRACT_ERROR)

    async def call(self, transaction: Dict[str, Any]) -> str:
        """eth_call dry run; reverts surface as CONTRACT_ERROR."""
        try:
            result = await self.w3.eth.call(transaction)
        except ContractLogicError as e:
            raise create_error(f"Simulation reverted: {e}", ErrorCode.CONTRACT_ERROR)
        except Exception as e:
            raise handle_error("Simulation failed", e, ErrorCode.CONTRACT_ERROR)
        return _to_hex(result)

    # ============================================
    # WRITES
    # ============================================

    async def fill_transaction(self, sender: str, transaction: Dict[str, Any]) -> Dict[str, Any]:
        """Fill nonce, chainId, gas and EIP-1559 fees on a copy of the request."""
        tx = dict(transaction)
        tx["from"] = AsyncWeb3.to_checksum_address(sender)
        if tx.get("to"):
            tx["to"] = AsyncWeb3.to_checksum_address(tx["to"])
        tx.setdefault("value", 0)
        if "data" in tx and not tx["data"]:
            tx.pop("data")

        try:
            if "nonce" not in tx:
                tx["nonce"] = await self.w3.eth.get_transaction_count(tx["from"], "pending")
            if "chainId" not in tx:
                tx["chainId"] = await self.w3.eth.chain_id
            if "gas" not in tx:
                tx["gas"] = await self.w3.eth.estimate_gas(tx)
            if "gasPrice" not in tx and "maxFeePerGas" not in tx:
                block = await self.w3.eth.get_block("latest")
                priority_fee = await self.w3.eth.max_priority_fee
                base_fee = block.get("baseFeePerGas")
                if base_fee is None:
                    tx["gasPrice"] = await self.w3.eth.gas_price
                else:
                    tx["maxPriorityFeePerGas"] = priority_fee
                    tx["maxFeePerGas"] = base_fee * 2 + priority_fee
        except ContractLogicError as e:
            raise create_error(f"Gas estimation reverted: {e}", ErrorCode.CONTRACT_ERROR)
        except Exception as e:
            raise handle_error("Failed to prepare transaction", e, ErrorCode.NETWORK_ERROR)

        return tx

    async def send_raw(self, raw_transaction: Any) -> str:
        try:
            tx_hash = await self.w3.eth.send_raw_transaction(HexBytes(raw_transaction))
        except Exception as e:
            raise handle_error("Failed to broadcast transaction", e, ErrorCode.NETWORK_ERROR)
        return _to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                HexBytes(tx_hash),
                timeout=self.receipt_timeout
            )
        except TimeExhausted as e:
            raise create_error(
                f"Timed out waiting for receipt of {tx_hash}: {e}",
                ErrorCode.NETWORK_ERROR,
                {"tx_hash": tx_hash}
            )
        except Exception as e:
            raise handle_error(f"Failed to get receipt for {tx_hash}", e, ErrorCode.NETWORK_ERROR)
        return dict(receipt)
