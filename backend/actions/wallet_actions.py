"""
Wallet actions: details and native transfers. Available on every network.
"""

import logging

from actions.provider import ActionProvider
from actions.schemas import GetWalletDetailsSchema, NativeTransferSchema
from common.amounts import format_units
from common.errors import handle_error
from common.formatting import wrap_and_stringify
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)


class WalletActionProvider(ActionProvider):

    def __init__(self):
        super().__init__("wallet")
        self.register_action(
            "get_wallet_details",
            """
            Get details about the connected wallet: provider, address, network
            and native balance.
            """,
            GetWalletDetailsSchema,
            self.get_wallet_details,
        )
        self.register_action(
            "native_transfer",
            """
            Transfer the network's native asset (e.g. ETH) to another address.

            Inputs:
            - to: destination address
            - value: amount in whole units, e.g. 0.01

            Leave enough balance for gas.
            """,
            NativeTransferSchema,
            self.native_transfer,
        )

    async def get_wallet_details(self, wallet: WalletProvider, args: GetWalletDetailsSchema) -> str:
        try:
            balance = await wallet.get_balance()
        except Exception as e:
            raise handle_error("Error getting wallet details", e)

        network = wallet.get_network()
        return wrap_and_stringify("wallet.get_wallet_details", {
            "provider": wallet.get_name(),
            "address": wallet.get_address(),
            "network": {
                "protocol_family": network.protocol_family,
                "network_id": network.network_id,
                "chain_id": network.chain_id,
            },
            "native_balance_wei": str(balance),
            "native_balance": format_units(balance, 18),
        })

    async def native_transfer(self, wallet: WalletProvider, args: NativeTransferSchema) -> str:
        tx_hash = await wallet.native_transfer(args.to, args.value)
        logger.info(f"[WalletActions] Transferred {args.value} native to {args.to}: {tx_hash}")
        return wrap_and_stringify("wallet.native_transfer", {
            "summary": f"Transferred {args.value} of the native asset to {args.to}",
            "to": args.to,
            "value": args.value,
            "tx_hash": tx_hash,
        })
