"""
Token Operation Executor
Runs every "move value that may need an approval first" operation the same way:
parse amount -> resolve token -> decimals -> allowance/approve -> build ->
(simulate) -> send -> wait.
"""

import asyncio
import logging
import weakref
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from common.amounts import is_native_token, parse_amount, to_atomic_units
from common.errors import ErrorCode, TensaiError, create_error, handle_error
from config.networks import NetworkRegistry, default_network_registry
from execution.token_ops import approve, get_allowance, read_decimals
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionIntent:
    to: str
    data: str = "0x"
    value: int = 0

    def to_transaction(self) -> Dict[str, Any]:
        tx: Dict[str, Any] = {"to": self.to, "value": self.value}
        if self.data and self.data != "0x":
            tx["data"] = self.data
        return tx


@dataclass(frozen=True)
class ResolvedToken:
    """Token to move and who must be approved to pull it (None = no approval)."""
    token_address: str
    spender: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TokenOperation:
    label: str
    amount: Any
    resolve: Callable[[], Awaitable[ResolvedToken]]
    build: Callable[[ResolvedToken, int], Awaitable[TransactionIntent]]
    simulate: bool = False


@dataclass
class TokenOperationResult:
    token_address: str
    tx_hash: str
    receipt: Dict[str, Any]
    atomic_amount: int
    amount: Decimal
    approval_tx_hash: Optional[str] = None
    simulation: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)


class TokenOperationExecutor:
    """
    Executes TokenOperations against a wallet.

    Check-and-approve for the same (owner, token, spender) is serialized per
    executor instance so two concurrent runs cannot both observe a low
    allowance and overwrite each other's approval.
    """

    def __init__(self, registry: Optional[NetworkRegistry] = None):
        self.registry = registry or default_network_registry()
        # entries disappear once no run holds or waits on the lock
        self._approval_locks: "weakref.WeakValueDictionary[Tuple[str, str, str], asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _approval_lock(self, owner: str, token: str, spender: str) -> asyncio.Lock:
        key = (owner.lower(), token.lower(), spender.lower())
        lock = self._approval_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._approval_locks[key] = lock
        return lock

    async def execute(self, wallet: WalletProvider, operation: TokenOperation) -> TokenOperationResult:
        label = operation.label

        # 1. amount, before anything touches the network
        amount = parse_amount(operation.amount)

        # 2. resolve token / spender
        try:
            resolved = await operation.resolve()
        except Exception as e:
            raise handle_error(f"{label}: failed to resolve token", e, ErrorCode.INVALID_INPUT) from e

        token = resolved.token_address
        native = is_native_token(token)

        # 3. decimals and atomic amount
        native_decimals = self.registry.native_decimals(wallet.get_network())
        decimals = await read_decimals(wallet, token, native_decimals)
        atomic_amount = to_atomic_units(amount, decimals)
        if atomic_amount == 0:
            raise create_error(
                f"{label}: amount {amount} is below the smallest unit of a {decimals}-decimals token",
                ErrorCode.INVALID_INPUT
            )

        # 4. allowance
        approval_tx_hash = None
        if resolved.spender and not native:
            approval_tx_hash = await self._ensure_allowance(
                wallet, token, resolved.spender, atomic_amount, label
            )

        tx_hash = None
        try:
            # 5. calldata
            intent = await operation.build(resolved, atomic_amount)
            tx = intent.to_transaction()

            # 6. dry run
            simulation = None
            if operation.simulate:
                try:
                    simulation = await wallet.call(tx)
                except Exception as e:
                    raise handle_error(f"{label}: simulation failed", e, ErrorCode.CONTRACT_ERROR) from e
                logger.info(f"[TokenExecutor] {label}: simulation succeeded")

            # 7. broadcast and wait
            tx_hash = await wallet.send_transaction(tx)
            logger.info(f"[TokenExecutor] {label}: sent {tx_hash}")
            receipt = await wallet.wait_for_transaction_receipt(tx_hash)
        except Exception as e:
            error = handle_error(f"Error in {label}", e)
            if tx_hash:
                error.details.setdefault("tx_hash", tx_hash)
            if approval_tx_hash:
                error.details.setdefault("approval_tx_hash", approval_tx_hash)
                logger.warning(
                    f"[TokenExecutor] {label} failed after approval {approval_tx_hash}; "
                    f"the approval stays on chain"
                )
            raise error from e

        if not receipt or receipt.get("status") != 1:
            details = {"tx_hash": tx_hash, "receipt": receipt}
            if approval_tx_hash:
                details["approval_tx_hash"] = approval_tx_hash
            raise create_error(
                f"{label}: transaction {tx_hash} reverted",
                ErrorCode.CONTRACT_ERROR,
                details,
            )

        # 8.
        return TokenOperationResult(
            token_address=token,
            tx_hash=tx_hash,
            receipt=receipt,
            atomic_amount=atomic_amount,
            amount=amount,
            approval_tx_hash=approval_tx_hash,
            simulation=simulation,
            context=dict(resolved.context),
        )

    async def _ensure_allowance(
        self,
        wallet: WalletProvider,
        token: str,
        spender: str,
        atomic_amount: int,
        label: str
    ) -> Optional[str]:
        """Approve exactly atomic_amount when the current allowance is lower."""
        async with self._approval_lock(wallet.get_address(), token, spender):
            current = await get_allowance(wallet, token, spender)
            if current >= atomic_amount:
                logger.info(f"[TokenExecutor] {label}: allowance {current} sufficient, skipping approval")
                return None

            try:
                return await approve(wallet, token, spender, atomic_amount)
            except TensaiError as e:
                raise create_error(
                    f"Error approving {spender} as spender: {e.message}",
                    ErrorCode.CONTRACT_ERROR,
                    e.details,
                ) from e
