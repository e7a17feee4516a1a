"""
Morpho Blue API Integration
Whitelisted markets and vaults, market state by unique key, curators and
user portfolios from the Morpho GraphQL API.
https://docs.morpho.org/
"""

import logging
from typing import Any, Dict, Optional

import httpx

from common.errors import ErrorCode, handle_error
from common.http import DEFAULT_HTTP_TIMEOUT, query_graphql
from config.contracts import MorphoConfig, default_morpho_config

logger = logging.getLogger(__name__)


WHITELISTED_MARKETS_QUERY = """
query Markets($skip: Int!, $first: Int!, $chainId: Int!) {
  markets(
    first: $first
    skip: $skip
    where: { whitelisted: true, chainId_in: [$chainId] }
    orderBy: BorrowApy
    orderDirection: Desc
  ) {
    items {
      id
      uniqueKey
      whitelisted
      lltv
      oracleAddress
      irmAddress
      creatorAddress
      supplyingVaults { id symbol name }
      loanAsset { address symbol decimals }
      collateralAsset { address symbol decimals }
      state {
        fee
        utilization
        supplyShares
        supplyAssets
        supplyAssetsUsd
        borrowShares
        borrowAssets
        borrowAssetsUsd
        collateralAssets
        collateralAssetsUsd
        supplyApy
        borrowApy
        netBorrowApy
        netSupplyApy
        dailyNetBorrowApy
        dailyNetSupplyApy
        rewards { supplyApr borrowApr }
      }
    }
    pageInfo { count countTotal limit skip }
  }
}
"""

WHITELISTED_VAULTS_QUERY = """
query Vaults($skip: Int!, $first: Int!, $chainId: Int!) {
  vaults(
    first: $first
    skip: $skip
    where: { chainId_in: [$chainId], whitelisted: true }
    orderBy: TotalAssetsUsd
    orderDirection: Desc
  ) {
    items {
      id
      address
      name
      whitelisted
      creatorAddress
      metadata { description image }
      warnings { level type }
      state {
        totalAssets
        totalAssetsUsd
        totalSupply
        apy
        netApy
        fee
        dailyApy
        dailyNetApy
        yearlyApy
        yearlyNetApy
        rewards { supplyApr }
      }
    }
    pageInfo { count countTotal limit skip }
  }
}
"""

MARKET_BY_UNIQUE_KEY_QUERY = """
query MarketByUniqueKey($uniqueKey: String!, $chainId: Int!) {
  marketByUniqueKey(uniqueKey: $uniqueKey, chainId: $chainId) {
    state {
      collateralAssets
      collateralAssetsUsd
      borrowAssets
      borrowAssetsUsd
      supplyAssets
      supplyAssetsUsd
      liquidityAssets
      liquidityAssetsUsd
      totalLiquidity
      totalLiquidityUsd
      supplyApy
      borrowApy
      allTimeBorrowApy
      allTimeNetBorrowApy
      allTimeNetSupplyApy
      allTimeSupplyApy
      yearlyBorrowApy
      yearlyNetBorrowApy
      yearlyNetSupplyApy
      yearlySupplyApy
      dailyBorrowApy
      dailyNetBorrowApy
      dailyNetSupplyApy
      dailyPriceVariation
      dailySupplyApy
      rewards { supplyApr borrowApr }
    }
  }
}
"""

CURATORS_QUERY = """
query Curators($chainId: Int!) {
  curators(where: { chainId_in: [$chainId] }) {
    items {
      id
      name
      image
      verified
      state { aum }
    }
  }
}
"""

USER_BY_ADDRESS_QUERY = """
query UserByAddress($address: String!, $chainId: Int!) {
  userByAddress(chainId: $chainId, address: $address) {
    address
    marketPositions {
      market { uniqueKey }
      state {
        borrowAssets
        borrowAssetsUsd
        supplyAssets
        supplyAssetsUsd
        collateralUsd
        pnl
        pnlUsd
      }
    }
    vaultPositions {
      vault { address name }
      state { assets assetsUsd shares }
    }
    transactions { hash timestamp type }
  }
}
"""


class MorphoApiClient:
    """
    Client for the Morpho Blue GraphQL API

    Every method returns the requested field of the response, or None when
    the API has nothing for it.
    """

    def __init__(self, config: Optional[MorphoConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or default_morpho_config()
        self.client = client or httpx.AsyncClient(timeout=DEFAULT_HTTP_TIMEOUT)

    async def _query(self, field: str, query: str, variables: Dict[str, Any], context: str) -> Any:
        try:
            data = await query_graphql(self.client, self.config.api_url, query, variables)
        except Exception as e:
            raise handle_error(context, e, ErrorCode.API_CALL_FAILED)

        logger.debug(f"[MorphoApi] {field} {variables}")
        if not data or not data.get(field):
            return None
        return data[field]

    async def get_whitelisted_markets(self, chain_id, first: int, skip: int) -> Any:
        return await self._query(
            "markets",
            WHITELISTED_MARKETS_QUERY,
            {"chainId": int(chain_id), "first": first, "skip": skip},
            "Failed to fetch whitelisted markets",
        )

    async def get_whitelisted_vaults(self, chain_id, first: int, skip: int) -> Any:
        return await self._query(
            "vaults",
            WHITELISTED_VAULTS_QUERY,
            {"chainId": int(chain_id), "first": first, "skip": skip},
            "Failed to fetch whitelisted vaults",
        )

    async def get_market_by_unique_key(self, chain_id, unique_key: str) -> Any:
        return await self._query(
            "marketByUniqueKey",
            MARKET_BY_UNIQUE_KEY_QUERY,
            {"chainId": int(chain_id), "uniqueKey": unique_key},
            "Failed to fetch market state by unique key",
        )

    async def get_curators(self, chain_id) -> Any:
        return await self._query(
            "curators",
            CURATORS_QUERY,
            {"chainId": int(chain_id)},
            "Failed to fetch curators from Morpho API",
        )

    async def get_user_by_address(self, chain_id, address: str) -> Any:
        return await self._query(
            "userByAddress",
            USER_BY_ADDRESS_QUERY,
            {"chainId": int(chain_id), "address": address},
            "Failed to fetch user data from Morpho API",
        )

    async def aclose(self):
        await self.client.aclose()
