"""
ERC-20 actions: balance lookup and transfer.
Transfers run through the token executor without an approval step.
"""

import logging
from typing import Optional

from web3 import Web3

from actions.provider import ActionProvider
from actions.schemas import GetBalanceSchema, TransferSchema
from common.amounts import format_units
from common.errors import handle_error
from common.formatting import wrap_and_stringify
from config.contracts import ERC20_ABI
from config.networks import Network
from execution.executor import ResolvedToken, TokenOperation, TokenOperationExecutor, TransactionIntent
from execution.token_ops import encode_erc20_call, read_decimals
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)


class ERC20ActionProvider(ActionProvider):

    def __init__(self, executor: Optional[TokenOperationExecutor] = None):
        super().__init__("erc20")
        self.executor = executor or TokenOperationExecutor()
        self.register_action(
            "get_balance",
            "Get the balance of an ERC20 asset in the wallet. Takes the token contract address.",
            GetBalanceSchema,
            self.get_balance,
        )
        self.register_action(
            "transfer",
            """
            Transfer an ERC20 token from the wallet to another onchain address.

            Inputs:
            - amount: the amount to transfer, in whole units
            - contractAddress: the token contract
            - destination: the receiving address

            Ensure sufficient balance of the asset and of the native asset for gas.
            """,
            TransferSchema,
            self.transfer,
        )

    def supports_network(self, network: Network) -> bool:
        return network.protocol_family == "evm"

    async def get_balance(self, wallet: WalletProvider, args: GetBalanceSchema) -> str:
        try:
            balance = await wallet.read_contract(
                args.contract_address, ERC20_ABI, "balanceOf", [wallet.get_address()]
            )
            decimals = await read_decimals(wallet, args.contract_address)
        except Exception as e:
            raise handle_error("Error getting balance", e)

        return wrap_and_stringify("erc20.get_balance", {
            "summary": f"Balance of {args.contract_address} is {format_units(balance, decimals)}",
            "token_address": args.contract_address,
            "balance": format_units(balance, decimals),
            "atomic_balance": str(balance),
            "decimals": decimals,
        })

    async def transfer(self, wallet: WalletProvider, args: TransferSchema) -> str:
        destination = Web3.to_checksum_address(args.destination)

        async def resolve() -> ResolvedToken:
            return ResolvedToken(token_address=args.contract_address)

        async def build(resolved: ResolvedToken, atomic_amount: int) -> TransactionIntent:
            return TransactionIntent(
                to=resolved.token_address,
                data=encode_erc20_call("transfer", [destination, atomic_amount]),
            )

        try:
            result = await self.executor.execute(wallet, TokenOperation(
                label="ERC20 transfer",
                amount=args.amount,
                resolve=resolve,
                build=build,
            ))
        except Exception as e:
            raise handle_error("Error transferring the asset", e)

        return wrap_and_stringify("erc20.transfer", {
            "summary": f"Transferred {args.amount} of {args.contract_address} to {destination}",
            "token_address": result.token_address,
            "destination": destination,
            "atomic_amount": str(result.atomic_amount),
            "tx_hash": result.tx_hash,
            "receipt": result.receipt,
        })
