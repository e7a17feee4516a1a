"""
ERC-20 helpers shared by every token-moving action: decimals, allowance, approve
"""

import logging
from typing import Any, Dict, List, Sequence

from web3 import Web3

from common.amounts import is_native_token
from common.errors import ErrorCode, create_error, handle_error
from config.contracts import ERC20_ABI
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)

# Offline instance, used only for ABI encoding
_ENCODER = Web3()


def encode_call(abi: List[Dict[str, Any]], function_name: str, args: Sequence[Any]) -> str:
    """ABI-encode a contract call as 0x calldata."""
    contract = _ENCODER.eth.contract(abi=abi)
    try:
        return contract.encode_abi(function_name, args=list(args))
    except Exception as e:
        raise handle_error(f"Failed to encode {function_name} call", e, ErrorCode.INVALID_INPUT)


def encode_erc20_call(function_name: str, args: Sequence[Any]) -> str:
    return encode_call(ERC20_ABI, function_name, args)


async def read_decimals(wallet: WalletProvider, token_address: str, native_decimals: int = 18) -> int:
    if is_native_token(token_address):
        return native_decimals
    try:
        return int(await wallet.read_contract(token_address, ERC20_ABI, "decimals", []))
    except Exception as e:
        raise handle_error(
            f"Failed to read decimals for token {token_address}",
            e,
            ErrorCode.TOKEN_METADATA_ERROR
        )


async def get_allowance(wallet: WalletProvider, token_address: str, spender: str) -> int:
    owner = wallet.get_address()
    try:
        amount = int(await wallet.read_contract(token_address, ERC20_ABI, "allowance", [owner, spender]))
    except Exception as e:
        raise create_error(
            f"Failed to fetch allowance from contract: {e}",
            ErrorCode.CONTRACT_ERROR
        )
    logger.info(f"[TokenAllowance] Spender: {spender} | Owner: {owner} | Allowance: {amount}")
    return amount


async def approve(wallet: WalletProvider, token_address: str, spender: str, amount: int) -> str:
    """
    Approve spender for exactly amount and wait for inclusion.

    Returns:
        Approval transaction hash

    Raises:
        TensaiError(CONTRACT_ERROR) if sending fails or the approval reverts
    """
    data = encode_erc20_call("approve", [Web3.to_checksum_address(spender), amount])
    try:
        tx_hash = await wallet.send_transaction({"to": token_address, "data": data})
        receipt = await wallet.wait_for_transaction_receipt(tx_hash)
    except Exception as e:
        raise handle_error(f"Error approving tokens for {spender}", e, ErrorCode.CONTRACT_ERROR)

    if not receipt or receipt.get("status") != 1:
        raise create_error(
            f"Error approving tokens for {spender}: approval {tx_hash} reverted",
            ErrorCode.CONTRACT_ERROR,
            {"tx_hash": tx_hash, "receipt": receipt},
        )

    logger.info(f"[TokenApproval] {spender} is now allowed to spend up to {amount} of {token_address} ({tx_hash})")
    return tx_hash
