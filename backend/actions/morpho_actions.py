"""
Morpho Blue action providers
- morpho.protocol: market params, market state, positions (reads)
- morpho.write_action: supply / withdraw / collateral / borrow / repay
- morpho: both of the above
- morpho.subgraph: markets, vaults, curators and portfolios from the Morpho API
"""

import logging
from typing import Optional

from actions.provider import ActionHandler, ActionProvider
from actions.schemas import (
    BorrowSchema,
    GetActiveMarketsSchema,
    GetCuratorsSchema,
    GetMarketInfoSchema,
    GetMarketStateByUniqueKeySchema,
    GetMarketStateSchema,
    GetPositionSchema,
    GetUserPortfolioDataSchema,
    GetWhitelistedVaultsSchema,
    MarketAssetsSchema,
    RepaySchema,
    SupplyCollateralSchema,
    SupplySchema,
    WithdrawCollateralSchema,
    WithdrawSchema,
)
from common.errors import ErrorCode, create_error, handle_error
from common.formatting import wrap_and_stringify
from config.contracts import MorphoConfig, default_morpho_config
from config.networks import Network
from execution.executor import ResolvedToken, TokenOperation, TokenOperationExecutor, TransactionIntent
from integrations.morpho_api import MorphoApiClient
from protocols.morpho_blue import MarketConfig, MorphoBlue
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)


class _MorphoNetworkMixin:
    config: MorphoConfig

    def supports_network(self, network: Network) -> bool:
        return network.protocol_family == "evm" and network.network_id in self.config.supported_networks


# ============================================
# READS
# ============================================

class MorphoProtocolActionProvider(_MorphoNetworkMixin, ActionProvider):

    def __init__(self, config: Optional[MorphoConfig] = None):
        super().__init__("morpho.protocol")
        self.config = config or default_morpho_config()
        self.register_action(
            "get_market_info",
            """
            Fetch the parameters of a Morpho Blue market: loan token, collateral
            token, oracle, interest rate model and LLTV.
            """,
            GetMarketInfoSchema,
            self.get_market_info,
        )
        self.register_action(
            "get_market_state",
            "Fetch total supply/borrow assets and shares, last update and fee of a Morpho Blue market.",
            GetMarketStateSchema,
            self.get_market_state,
        )
        self.register_action(
            "get_position",
            "Fetch supply shares, borrow shares and collateral of an account in a Morpho Blue market.",
            GetPositionSchema,
            self.get_position,
        )

    async def get_market_info(self, wallet: WalletProvider, args: GetMarketInfoSchema) -> str:
        try:
            market = await MorphoBlue(wallet, self.config).fetch_market_config(args.market_id)
        except Exception as e:
            raise handle_error("Error fetching Morpho market information", e)
        return wrap_and_stringify("morpho.get_market_info", market.to_dict())

    async def get_market_state(self, wallet: WalletProvider, args: GetMarketStateSchema) -> str:
        try:
            state = await MorphoBlue(wallet, self.config).get_market_state(args.market_id)
        except Exception as e:
            raise handle_error("Error fetching states for Morpho market", e)
        return wrap_and_stringify("morpho.get_market_state", state)

    async def get_position(self, wallet: WalletProvider, args: GetPositionSchema) -> str:
        try:
            position = await MorphoBlue(wallet, self.config).get_position(args.market_id, args.user)
        except Exception as e:
            raise handle_error("Error fetching Morpho market positions", e)
        return wrap_and_stringify("morpho.get_position", position)


# ============================================
# WRITES
# ============================================

class MorphoWriteActionProvider(_MorphoNetworkMixin, ActionProvider):
    """
    Lending writes. Supply, supply collateral and repay approve the Morpho
    Blue contract for exactly the amount first; the others move no wallet
    tokens and skip approval.
    """

    def __init__(
        self,
        config: Optional[MorphoConfig] = None,
        executor: Optional[TokenOperationExecutor] = None
    ):
        super().__init__("morpho.write_action")
        self.config = config or default_morpho_config()
        self.executor = executor or TokenOperationExecutor()

        self.register_action(
            "supply_loan_asset",
            """
            Supply loan tokens into a Morpho Blue market.

            Inputs:
            - assets: amount of loanToken, in whole units
            - marketId: bytes32 market ID
            """,
            SupplySchema,
            self._write_handler("supply_loan_asset", "build_supply", collateral=False, approve=True),
        )
        self.register_action(
            "withdraw_loan_asset",
            "Withdraw supplied loan tokens from a Morpho Blue market to the wallet.",
            WithdrawSchema,
            self._write_handler("withdraw_loan_asset", "build_withdraw", collateral=False, approve=False),
        )
        self.register_action(
            "supply_collateral_loan_asset",
            "Supply collateral tokens into a Morpho Blue market.",
            SupplyCollateralSchema,
            self._write_handler(
                "supply_collateral_loan_asset", "build_supply_collateral", collateral=True, approve=True
            ),
        )
        self.register_action(
            "withdraw_collateral_loan_asset",
            "Withdraw collateral tokens from a Morpho Blue market to the wallet.",
            WithdrawCollateralSchema,
            self._write_handler(
                "withdraw_collateral_loan_asset", "build_withdraw_collateral", collateral=True, approve=False
            ),
        )
        self.register_action(
            "borrow_loan_asset",
            "Borrow loan tokens from a Morpho Blue market against supplied collateral.",
            BorrowSchema,
            self._write_handler("borrow_loan_asset", "build_borrow", collateral=False, approve=False),
        )
        self.register_action(
            "repay_loan_asset",
            "Repay borrowed loan tokens to a Morpho Blue market.",
            RepaySchema,
            self._write_handler("repay_loan_asset", "build_repay", collateral=False, approve=True),
        )

    def _write_handler(self, action: str, builder: str, collateral: bool, approve: bool) -> ActionHandler:
        async def handler(wallet: WalletProvider, args: MarketAssetsSchema) -> str:
            return await self._execute_write(wallet, args, action, builder, collateral, approve)
        return handler

    async def _execute_write(
        self,
        wallet: WalletProvider,
        args: MarketAssetsSchema,
        action: str,
        builder: str,
        collateral: bool,
        approve: bool
    ) -> str:
        morpho = MorphoBlue(wallet, self.config)

        async def resolve() -> ResolvedToken:
            market = await morpho.fetch_market_config(args.market_id)
            token = market.params.collateral_token if collateral else market.params.loan_token
            return ResolvedToken(
                token_address=token,
                spender=market.morpho_blue_address if approve else None,
                context={"market": market},
            )

        async def build(resolved: ResolvedToken, atomic_amount: int) -> TransactionIntent:
            market: MarketConfig = resolved.context["market"]
            data = getattr(morpho, builder)(market, atomic_amount)
            return TransactionIntent(to=market.morpho_blue_address, data=data)

        try:
            result = await self.executor.execute(wallet, TokenOperation(
                label=f"morpho.{action}",
                amount=args.assets,
                resolve=resolve,
                build=build,
            ))
        except Exception as e:
            raise handle_error(f"Error executing morpho.{action}", e)

        token_kind = "collateralToken" if collateral else "loanToken"
        return wrap_and_stringify(f"morpho.{action}", {
            "summary": f"{action}: {args.assets} {token_kind} in market {args.market_id}",
            "market_id": args.market_id,
            "token_address": result.token_address,
            "atomic_amount": str(result.atomic_amount),
            "approval_tx_hash": result.approval_tx_hash,
            "tx_hash": result.tx_hash,
            "receipt": result.receipt,
        })


# ============================================
# MORPHO API READS
# ============================================

class MorphoSubgraphActionProvider(ActionProvider):
    """
    Read-only market, vault, curator and portfolio data from the Morpho
    API. Available only on the networks the API indexes.
    """

    def __init__(self, config: Optional[MorphoConfig] = None, client: Optional[MorphoApiClient] = None):
        super().__init__("morpho.subgraph")
        self.config = config or default_morpho_config()
        self.client = client or MorphoApiClient(self.config)

        self.register_action(
            "get_active_markets",
            """
            Fetch whitelisted Morpho Blue markets on the wallet's chain, ordered
            by borrow APY.

            Inputs:
            - skip: number of entries to skip
            - first: number of entries to fetch (max 100)

            Each market has loan/collateral token metadata, oracle and IRM,
            LLTV, supply and borrow APYs, utilization and reward APRs.
            """,
            GetActiveMarketsSchema,
            self.get_active_markets,
        )
        self.register_action(
            "get_whitelisted_vaults",
            """
            Fetch whitelisted Morpho vaults on the wallet's chain, ordered by
            total assets.

            Inputs:
            - skip: number of entries to skip
            - first: number of entries to fetch (max 100)
            """,
            GetWhitelistedVaultsSchema,
            self.get_whitelisted_vaults,
        )
        self.register_action(
            "get_market_state_by_unique_key",
            """
            Fetch the state of a Morpho Blue market by its unique key: collateral,
            borrow, supply and liquidity (raw and USD), daily, yearly and
            all-time APYs and reward APRs.
            """,
            GetMarketStateByUniqueKeySchema,
            self.get_market_state_by_unique_key,
        )
        self.register_action(
            "get_user_portfolio_data",
            "Fetch the wallet's Morpho market positions, vault positions and recent transactions.",
            GetUserPortfolioDataSchema,
            self.get_user_portfolio_data,
        )
        self.register_action(
            "get_curators",
            "Fetch the Morpho vault curators on the wallet's chain with AUM and verification status.",
            GetCuratorsSchema,
            self.get_curators,
        )

    def supports_network(self, network: Network) -> bool:
        return network.protocol_family == "evm" and network.network_id in self.config.subgraph_networks

    def _chain_id(self, wallet: WalletProvider) -> str:
        network = wallet.get_network()
        if not network.chain_id or not network.network_id:
            raise create_error("Invalid or missing network", ErrorCode.INVALID_NETWORK)
        if network.network_id not in self.config.subgraph_networks:
            raise create_error("Network not supported!", ErrorCode.INVALID_NETWORK)
        return network.chain_id

    async def get_active_markets(self, wallet: WalletProvider, args: GetActiveMarketsSchema) -> str:
        try:
            markets = await self.client.get_whitelisted_markets(self._chain_id(wallet), args.first, args.skip)
        except Exception as e:
            raise handle_error("Error fetching Morpho markets", e)
        return wrap_and_stringify("morpho.subgraph.get_active_markets", markets)

    async def get_whitelisted_vaults(self, wallet: WalletProvider, args: GetWhitelistedVaultsSchema) -> str:
        try:
            vaults = await self.client.get_whitelisted_vaults(self._chain_id(wallet), args.first, args.skip)
        except Exception as e:
            raise handle_error("Error fetching Morpho vaults", e)
        return wrap_and_stringify("morpho.subgraph.get_whitelisted_vaults", vaults)

    async def get_market_state_by_unique_key(
        self,
        wallet: WalletProvider,
        args: GetMarketStateByUniqueKeySchema
    ) -> str:
        try:
            market = await self.client.get_market_by_unique_key(self._chain_id(wallet), args.unique_key)
        except Exception as e:
            raise handle_error("Error fetching market state by unique key", e)
        return wrap_and_stringify("morpho.subgraph.get_market_state_by_unique_key", market)

    async def get_user_portfolio_data(self, wallet: WalletProvider, args: GetUserPortfolioDataSchema) -> str:
        try:
            user = await self.client.get_user_by_address(self._chain_id(wallet), wallet.get_address())
        except Exception as e:
            raise handle_error("Error fetching user portfolio data", e)
        return wrap_and_stringify("morpho.subgraph.get_user_portfolio_data", user)

    async def get_curators(self, wallet: WalletProvider, args: GetCuratorsSchema) -> str:
        try:
            curators = await self.client.get_curators(self._chain_id(wallet))
        except Exception as e:
            raise handle_error("Error fetching curators", e)
        return wrap_and_stringify("morpho.subgraph.get_curators", curators)


# ============================================
# COMPOSITE
# ============================================

class MorphoActionProvider(_MorphoNetworkMixin, ActionProvider):

    def __init__(
        self,
        config: Optional[MorphoConfig] = None,
        executor: Optional[TokenOperationExecutor] = None
    ):
        self.config = config or default_morpho_config()
        super().__init__("morpho", [
            MorphoProtocolActionProvider(self.config),
            MorphoWriteActionProvider(self.config, executor),
        ])


def morpho_action_provider(
    config: Optional[MorphoConfig] = None,
    executor: Optional[TokenOperationExecutor] = None
) -> MorphoActionProvider:
    return MorphoActionProvider(config, executor)
