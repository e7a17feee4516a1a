"""
SushiSwap Integration
Token metadata, prices, liquidity providers, quotes and routed swap
transactions from the SushiSwap REST API, and the token list from the
SushiSwap subgraph.
https://docs.sushi.com/
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from common.errors import ErrorCode, create_error, handle_error
from common.http import DEFAULT_HTTP_TIMEOUT, fetch_from_api, query_graphql
from config.contracts import SushiSwapConfig, default_sushi_swap_config

logger = logging.getLogger(__name__)

TOKEN_LIST_QUERY = """
query TokenList($chainId: TokenListChainId!, $first: Int, $skip: Int) {
  tokenList(chainId: $chainId, first: $first, skip: $skip) {
    address
    symbol
    name
    decimals
    approved
  }
}
"""


class SushiSwapClient:
    """
    Client for the SushiSwap API

    Amounts passed in and out are atomic integer units.
    """

    def __init__(self, config: Optional[SushiSwapConfig] = None, client: Optional[httpx.AsyncClient] = None):
        self.config = config or default_sushi_swap_config()
        self.api_base = self.config.api_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=DEFAULT_HTTP_TIMEOUT)

    @property
    def quote_endpoint(self) -> str:
        return f"{self.api_base}/quote/v7"

    @property
    def swap_endpoint(self) -> str:
        return f"{self.api_base}/swap/v7"

    @property
    def token_endpoint(self) -> str:
        return f"{self.api_base}/token/v1"

    @property
    def price_endpoint(self) -> str:
        return f"{self.api_base}/price/v1"

    @property
    def liquidity_endpoint(self) -> str:
        return f"{self.api_base}/liquidity-providers/v7"

    async def get_token_metadata(self, chain_id, token_address: str) -> Dict[str, Any]:
        """
        Returns:
            {chainId, address, decimals, symbol, name}

        Raises:
            TensaiError(API_CALL_FAILED) when the lookup fails
            TensaiError(TOKEN_METADATA_ERROR) when decimals are missing
        """
        try:
            metadata = await fetch_from_api(self.client, f"{self.token_endpoint}/{chain_id}/{token_address}")
        except Exception as e:
            raise handle_error("Failed to fetch token information", e, ErrorCode.API_CALL_FAILED)

        if not isinstance(metadata, dict) or metadata.get("decimals") is None:
            raise create_error(
                f"Failed to fetch token decimals for {token_address}",
                ErrorCode.TOKEN_METADATA_ERROR
            )
        return metadata

    async def get_price(self, chain_id, token_address: str) -> Any:
        """USD price of a token."""
        try:
            return await fetch_from_api(self.client, f"{self.price_endpoint}/{chain_id}/{token_address}")
        except Exception as e:
            raise handle_error("Failed to fetch token price", e, ErrorCode.API_CALL_FAILED)

    async def get_all_prices(self, chain_id) -> Dict[str, Any]:
        """USD prices of every token SushiSwap prices on the chain, keyed by address."""
        try:
            return await fetch_from_api(self.client, f"{self.price_endpoint}/{chain_id}")
        except Exception as e:
            raise handle_error("Failed to fetch all token prices", e, ErrorCode.API_CALL_FAILED)

    async def get_liquidity_providers(self, chain_id) -> Any:
        try:
            return await fetch_from_api(self.client, f"{self.liquidity_endpoint}/{chain_id}")
        except Exception as e:
            raise handle_error("Failed to fetch liquidity providers", e, ErrorCode.API_CALL_FAILED)

    async def get_all_tokens(self, chain_id, first: int, skip: int) -> Optional[List[Dict[str, Any]]]:
        """
        Page through the token list of the chain's SushiSwap subgraph.

        Raises:
            TensaiError(INVALID_NETWORK) when the chain has no subgraph
            TensaiError(API_CALL_FAILED) when the query fails
        """
        url = self.config.subgraph_url(chain_id)
        variables = {"chainId": int(chain_id), "first": first, "skip": skip}
        try:
            data = await query_graphql(self.client, url, TOKEN_LIST_QUERY, variables, self.config.subgraph_api_key)
        except Exception as e:
            raise handle_error("Failed to fetch all tokens from subgraph", e, ErrorCode.API_CALL_FAILED)

        if not data or not data.get("tokenList"):
            return None
        return data["tokenList"]

    async def get_swap_quote(
        self,
        chain_id,
        token_in: str,
        token_out: str,
        amount: int,
        max_slippage: Optional[float] = None
    ) -> Dict[str, Any]:
        params = {
            "tokenIn": token_in,
            "tokenOut": token_out,
            "amount": str(amount),
            "maxSlippage": str(max_slippage if max_slippage is not None else self.config.default_max_slippage),
        }
        try:
            quote = await fetch_from_api(self.client, f"{self.quote_endpoint}/{chain_id}", params=params)
        except Exception as e:
            raise handle_error("Failed to fetch swap quote", e, ErrorCode.SWAP_QUOTE_FAILED)

        logger.info(f"[SushiSwap] Quote {amount} {token_in} -> {token_out}: {quote.get('status') if isinstance(quote, dict) else quote}")
        return quote

    async def get_swap(
        self,
        chain_id,
        token_in: str,
        token_out: str,
        amount: int,
        sender: str,
        max_slippage: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Fetch a routed swap for sender.

        Returns:
            tx dict {from, to, data, value}

        Raises:
            TensaiError(SWAP_QUOTE_FAILED) when no route is returned
        """
        params = {
            "tokenIn": token_in,
            "tokenOut": token_out,
            "amount": str(amount),
            "maxSlippage": str(max_slippage if max_slippage is not None else self.config.default_max_slippage),
            "sender": sender,
        }
        try:
            swap = await fetch_from_api(self.client, f"{self.swap_endpoint}/{chain_id}", params=params)
        except Exception as e:
            raise handle_error("Failed to fetch swap route", e, ErrorCode.SWAP_QUOTE_FAILED)

        if not isinstance(swap, dict) or swap.get("status") != "Success" or not swap.get("tx"):
            status = swap.get("status") if isinstance(swap, dict) else None
            raise create_error(
                f"Swap quote generation failed (status: {status})",
                ErrorCode.SWAP_QUOTE_FAILED,
                {"response": swap},
            )
        return swap["tx"]

    def spender(self, chain_id) -> str:
        return self.config.spender(chain_id)

    async def aclose(self):
        await self.client.aclose()
