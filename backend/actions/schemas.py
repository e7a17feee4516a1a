"""
Input schemas for every action. Field names are snake_case; the camelCase
names agents usually send are accepted as aliases.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DECIMAL_PATTERN = r"^\d+(\.\d+)?$"
ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
MARKET_ID_PATTERN = r"^0x[a-fA-F0-9]{64}$"


class ActionSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True, extra="ignore")


# ============================================
# WALLET
# ============================================

class GetWalletDetailsSchema(ActionSchema):
    pass


class NativeTransferSchema(ActionSchema):
    to: str = Field(pattern=ADDRESS_PATTERN, description="The destination address")
    value: str = Field(
        pattern=DECIMAL_PATTERN,
        description="Amount of the native asset to send, in whole units (e.g. 0.01)"
    )


# ============================================
# ERC20
# ============================================

class GetBalanceSchema(ActionSchema):
    contract_address: str = Field(
        alias="contractAddress",
        pattern=ADDRESS_PATTERN,
        description="The contract address of the token"
    )


class TransferSchema(ActionSchema):
    amount: str = Field(pattern=DECIMAL_PATTERN, description="The amount to transfer, in whole units")
    contract_address: str = Field(
        alias="contractAddress",
        pattern=ADDRESS_PATTERN,
        description="The contract address of the token to transfer"
    )
    destination: str = Field(pattern=ADDRESS_PATTERN, description="Where to send the funds")


# ============================================
# MORPHO
# ============================================

class MarketIdSchema(ActionSchema):
    market_id: str = Field(
        alias="marketId",
        pattern=MARKET_ID_PATTERN,
        description="The market ID (bytes32 hex)"
    )


class GetMarketInfoSchema(MarketIdSchema):
    pass


class GetMarketStateSchema(MarketIdSchema):
    pass


class GetPositionSchema(MarketIdSchema):
    user: Optional[str] = Field(
        None,
        pattern=ADDRESS_PATTERN,
        description="Account to inspect; defaults to the wallet address"
    )


class MarketAssetsSchema(MarketIdSchema):
    assets: str = Field(pattern=DECIMAL_PATTERN, description="Amount of tokens, in whole units")


class SupplySchema(MarketAssetsSchema):
    """Input schema for Morpho Blue supply action"""


class WithdrawSchema(MarketAssetsSchema):
    """Input schema for Morpho Blue withdraw action"""


class SupplyCollateralSchema(MarketAssetsSchema):
    """Input schema for Morpho Blue supply collateral action"""


class WithdrawCollateralSchema(MarketAssetsSchema):
    """Input schema for Morpho Blue withdraw collateral action"""


class BorrowSchema(MarketAssetsSchema):
    """Input schema for Morpho Blue borrow action"""


class RepaySchema(MarketAssetsSchema):
    """Input schema for Morpho Blue repay action"""


class PaginationSchema(ActionSchema):
    skip: int = Field(0, ge=0, description="Number of entries to skip")
    first: int = Field(20, ge=1, le=100, description="Number of entries to fetch (max 100)")


class GetActiveMarketsSchema(PaginationSchema):
    pass


class GetWhitelistedVaultsSchema(PaginationSchema):
    pass


class GetMarketStateByUniqueKeySchema(ActionSchema):
    unique_key: str = Field(
        alias="uniqueKey",
        pattern=MARKET_ID_PATTERN,
        description="Unique key of the market (bytes32 hex)"
    )


class GetUserPortfolioDataSchema(ActionSchema):
    pass


class GetCuratorsSchema(ActionSchema):
    pass


# ============================================
# SUSHISWAP
# ============================================

class GetTokenDetailsSchema(ActionSchema):
    token_address: str = Field(
        alias="tokenAddress",
        pattern=ADDRESS_PATTERN,
        description="The address of the token to retrieve metadata for"
    )


class GetTokenPriceSchema(ActionSchema):
    token_address: str = Field(
        alias="tokenAddress",
        pattern=ADDRESS_PATTERN,
        description="The address of the token to fetch the price for"
    )


class GetAllTokenPricesSchema(ActionSchema):
    pass


class GetAllSushiTokensSchema(PaginationSchema):
    pass


class GetLiquidityProvidersSchema(ActionSchema):
    pass


class SwapSchema(ActionSchema):
    token_in: str = Field(alias="tokenIn", pattern=ADDRESS_PATTERN, description="Input token address")
    token_out: str = Field(alias="tokenOut", pattern=ADDRESS_PATTERN, description="Output token address")
    amount: str = Field(
        pattern=DECIMAL_PATTERN,
        description="Amount of the input token to swap, e.g. 3.5 (converted using token decimals)"
    )
    max_slippage: Optional[float] = Field(
        None,
        alias="maxSlippage",
        gt=0,
        le=1,
        description="Maximum allowed slippage, e.g. 0.005 for 0.5%"
    )


class GetSwapQuoteSchema(SwapSchema):
    pass


class ExecuteSwapSchema(SwapSchema):
    pass
