"""
SushiSwap action providers
- sushi_swap.swap: quote and execute
- sushi_swap.token: token metadata, prices and the subgraph token list
- sushi_swap.liquidity: liquidity providers
- sushi_swap: all of the above
- sushi_swap.execute_only: execute without the read actions
"""

import logging
from typing import Any, Optional

from actions.provider import ActionProvider
from actions.schemas import (
    ExecuteSwapSchema,
    GetAllSushiTokensSchema,
    GetAllTokenPricesSchema,
    GetLiquidityProvidersSchema,
    GetSwapQuoteSchema,
    GetTokenDetailsSchema,
    GetTokenPriceSchema,
)
from common.amounts import parse_amount, to_atomic_units
from common.errors import ErrorCode, create_error, handle_error
from common.formatting import wrap_and_stringify
from config.networks import Network, NetworkRegistry, default_network_registry
from execution.executor import ResolvedToken, TokenOperation, TokenOperationExecutor, TransactionIntent
from execution.token_ops import read_decimals
from integrations.sushi_swap import SushiSwapClient
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)

EXECUTE_SWAP_DESCRIPTION = """
Execute a token swap on SushiSwap. Approves the SushiSwap router for the
input amount when needed, simulates the routed transaction and only then
broadcasts it.

Inputs:
- tokenIn: input token address (0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE for the native asset)
- tokenOut: output token address
- amount: amount of the input token, e.g. 3.5
- maxSlippage: optional, e.g. 0.005 for 0.5% (default 0.005)

This broadcasts a transaction and consumes gas.
"""


def _to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, str):
        return int(value, 0)
    return int(value)


def _chain_id(wallet: WalletProvider) -> str:
    network = wallet.get_network()
    if not network.chain_id or not network.network_id:
        raise create_error("Invalid or missing network", ErrorCode.INVALID_NETWORK)
    return network.chain_id


class _EvmOnlyMixin:

    def supports_network(self, network: Network) -> bool:
        return network.protocol_family == "evm"


class SushiSwapSwapActionProvider(_EvmOnlyMixin, ActionProvider):

    def __init__(
        self,
        client: Optional[SushiSwapClient] = None,
        executor: Optional[TokenOperationExecutor] = None,
        registry: Optional[NetworkRegistry] = None,
        name: str = "sushi_swap.swap",
        include_quote: bool = True
    ):
        super().__init__(name)
        self.client = client or SushiSwapClient()
        self.registry = registry or default_network_registry()
        self.executor = executor or TokenOperationExecutor(self.registry)

        if include_quote:
            self.register_action(
                "get_swap_quote",
                """
                Get a swap quote for a token pair and amount on the wallet's chain.

                Inputs:
                - tokenIn, tokenOut: token addresses
                - amount: amount of the input token, e.g. 3.5
                - maxSlippage: optional, e.g. 0.005 for 0.5%
                """,
                GetSwapQuoteSchema,
                self.get_swap_quote,
            )
        self.register_action("execute_swap", EXECUTE_SWAP_DESCRIPTION, ExecuteSwapSchema, self.execute_swap)

    async def get_swap_quote(self, wallet: WalletProvider, args: GetSwapQuoteSchema) -> str:
        try:
            chain_id = _chain_id(wallet)
            amount = parse_amount(args.amount)
            decimals = await read_decimals(
                wallet, args.token_in, self.registry.native_decimals(wallet.get_network())
            )
            quote = await self.client.get_swap_quote(
                chain_id,
                args.token_in,
                args.token_out,
                to_atomic_units(amount, decimals),
                args.max_slippage,
            )
        except Exception as e:
            raise handle_error("Failed to generate swap quote", e)
        return wrap_and_stringify("sushi_swap.get_swap_quote", quote)

    async def execute_swap(self, wallet: WalletProvider, args: ExecuteSwapSchema) -> str:
        chain_id = _chain_id(wallet)

        async def resolve() -> ResolvedToken:
            return ResolvedToken(token_address=args.token_in, spender=self.client.spender(chain_id))

        async def build(resolved: ResolvedToken, atomic_amount: int) -> TransactionIntent:
            tx = await self.client.get_swap(
                chain_id,
                args.token_in,
                args.token_out,
                atomic_amount,
                wallet.get_address(),
                args.max_slippage,
            )
            return TransactionIntent(to=tx["to"], data=tx.get("data") or "0x", value=_to_int(tx.get("value")))

        try:
            result = await self.executor.execute(wallet, TokenOperation(
                label="sushi_swap.execute_swap",
                amount=args.amount,
                resolve=resolve,
                build=build,
                simulate=True,
            ))
        except Exception as e:
            raise handle_error("Failed to execute swap", e)

        return wrap_and_stringify("sushi_swap.execute_swap", {
            "summary": f"Swapped {args.amount} of {args.token_in} for {args.token_out}",
            "token_address": result.token_address,
            "token_out": args.token_out,
            "atomic_amount": str(result.atomic_amount),
            "approval_tx_hash": result.approval_tx_hash,
            "simulation": result.simulation,
            "tx_hash": result.tx_hash,
            "receipt": result.receipt,
        })


class SushiSwapTokenActionProvider(_EvmOnlyMixin, ActionProvider):

    def __init__(self, client: Optional[SushiSwapClient] = None):
        super().__init__("sushi_swap.token")
        self.client = client or SushiSwapClient()
        self.register_action(
            "get_token_details",
            "Get metadata (name, symbol, decimals) of a token from SushiSwap.",
            GetTokenDetailsSchema,
            self.get_token_details,
        )
        self.register_action(
            "get_token_price",
            "Get the USD price of a token from SushiSwap.",
            GetTokenPriceSchema,
            self.get_token_price,
        )
        self.register_action(
            "get_all_token_prices",
            "Get the USD prices of every token SushiSwap prices on the wallet's chain.",
            GetAllTokenPricesSchema,
            self.get_all_token_prices,
        )
        self.register_action(
            "get_all_sushi_tokens",
            """
            List the tokens known to the SushiSwap subgraph on the wallet's chain.

            Inputs:
            - skip: number of tokens to skip
            - first: number of tokens to fetch (max 100)

            Requires a subgraph API key (SUSHI_SUBGRAPH_API_KEY).
            """,
            GetAllSushiTokensSchema,
            self.get_all_sushi_tokens,
        )

    async def get_token_details(self, wallet: WalletProvider, args: GetTokenDetailsSchema) -> str:
        try:
            metadata = await self.client.get_token_metadata(_chain_id(wallet), args.token_address)
        except Exception as e:
            raise handle_error("Failed to fetch token details", e)
        return wrap_and_stringify("sushi_swap.get_token_details", metadata)

    async def get_token_price(self, wallet: WalletProvider, args: GetTokenPriceSchema) -> str:
        try:
            price = await self.client.get_price(_chain_id(wallet), args.token_address)
        except Exception as e:
            raise handle_error("Failed to fetch token price", e)
        return wrap_and_stringify("sushi_swap.get_token_price", {
            "token_address": args.token_address,
            "price_usd": price,
        })

    async def get_all_token_prices(self, wallet: WalletProvider, args: GetAllTokenPricesSchema) -> str:
        try:
            prices = await self.client.get_all_prices(_chain_id(wallet))
        except Exception as e:
            raise handle_error("Failed to fetch all token prices", e)
        return wrap_and_stringify("sushi_swap.get_all_token_prices", prices)

    async def get_all_sushi_tokens(self, wallet: WalletProvider, args: GetAllSushiTokensSchema) -> str:
        try:
            tokens = await self.client.get_all_tokens(_chain_id(wallet), args.first, args.skip)
        except Exception as e:
            raise handle_error("Failed to fetch all tokens", e)
        return wrap_and_stringify("sushi_swap.get_all_sushi_tokens", tokens)


class SushiSwapLiquidityActionProvider(_EvmOnlyMixin, ActionProvider):

    def __init__(self, client: Optional[SushiSwapClient] = None):
        super().__init__("sushi_swap.liquidity")
        self.client = client or SushiSwapClient()
        self.register_action(
            "get_liquidity_providers",
            "List the liquidity providers SushiSwap routes through on the wallet's chain.",
            GetLiquidityProvidersSchema,
            self.get_liquidity_providers,
        )

    async def get_liquidity_providers(self, wallet: WalletProvider, args: GetLiquidityProvidersSchema) -> str:
        try:
            providers = await self.client.get_liquidity_providers(_chain_id(wallet))
        except Exception as e:
            raise handle_error("Failed to retrieve liquidity providers", e)
        return wrap_and_stringify("sushi_swap.get_liquidity_providers", providers)


class SushiSwapActionProvider(_EvmOnlyMixin, ActionProvider):

    def __init__(
        self,
        client: Optional[SushiSwapClient] = None,
        executor: Optional[TokenOperationExecutor] = None,
        registry: Optional[NetworkRegistry] = None
    ):
        client = client or SushiSwapClient()
        super().__init__("sushi_swap", [
            SushiSwapSwapActionProvider(client, executor, registry),
            SushiSwapTokenActionProvider(client),
            SushiSwapLiquidityActionProvider(client),
        ])


class SushiSwapExecuteActionProvider(SushiSwapSwapActionProvider):
    """Only execute_swap, for agents that should not browse quotes."""

    def __init__(
        self,
        client: Optional[SushiSwapClient] = None,
        executor: Optional[TokenOperationExecutor] = None,
        registry: Optional[NetworkRegistry] = None
    ):
        super().__init__(client, executor, registry, name="sushi_swap.execute_only", include_quote=False)
