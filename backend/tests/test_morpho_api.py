"""
Morpho API Action Tests
=======================

- morpho.subgraph is offered only where the Morpho API indexes markets
- each read posts its GraphQL query with the wallet's chain ID
- empty responses come back as null data, GraphQL errors as API_CALL_FAILED

Run: python -m pytest tests/test_morpho_api.py -v --tb=short
"""

import json

import httpx
import pytest

from actions.agent_kit import AgentKit, list_actions
from actions.morpho_actions import MorphoSubgraphActionProvider
from common.errors import ErrorCode, TensaiError
from config.contracts import MORPHO_API_URL, default_morpho_config
from config.networks import Network
from integrations.morpho_api import MorphoApiClient

from conftest import FakeWallet, OWNER, TOKEN

POLYGON_MAINNET = Network(protocol_family="evm", network_id="polygon-mainnet", chain_id="137")
UNIQUE_KEY = "0x" + "cd" * 32

RESPONSES = {
    "markets": {"items": [{"uniqueKey": UNIQUE_KEY, "loanAsset": {"address": TOKEN, "symbol": "USDC"}}],
                "pageInfo": {"count": 1, "countTotal": 1, "limit": 5, "skip": 0}},
    "vaults": {"items": [{"address": TOKEN, "name": "Steakhouse USDC"}],
               "pageInfo": {"count": 1, "countTotal": 1, "limit": 20, "skip": 0}},
    "marketByUniqueKey": {"state": {"supplyApy": 0.041, "borrowApy": 0.055}},
    "curators": {"items": [{"id": "steakhouse", "name": "Steakhouse", "verified": True}]},
    "userByAddress": {"address": OWNER, "marketPositions": [], "vaultPositions": [], "transactions": []},
}


def morpho_transport(requests, responses=None):
    responses = RESPONSES if responses is None else responses

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        query = json.loads(request.content)["query"]
        for field, value in responses.items():
            if f"{field}(" in query:
                return httpx.Response(200, json={"data": {field: value}})
        return httpx.Response(200, json={"data": {}})
    return httpx.MockTransport(handler)


def make_kit(wallet, requests, responses=None):
    config = default_morpho_config()
    client = MorphoApiClient(config, httpx.AsyncClient(transport=morpho_transport(requests, responses)))
    return AgentKit.from_config(wallet, [MorphoSubgraphActionProvider(config, client)])


def sent_body(request: httpx.Request):
    return json.loads(request.content)


@pytest.fixture
def polygon_wallet():
    return FakeWallet(network=POLYGON_MAINNET)


# =============================================================================
# TEST: NETWORK GATING
# =============================================================================

class TestMorphoApiNetworks:

    def test_only_polygon_is_indexed(self):
        provider = MorphoSubgraphActionProvider()
        assert provider.supports_network(POLYGON_MAINNET)
        assert not provider.supports_network(Network("evm", "katana-testnet", "129399"))
        assert not provider.supports_network(Network("evm", "base-mainnet", "8453"))

    def test_skipped_on_katana(self, wallet):
        assert list_actions(wallet, [MorphoSubgraphActionProvider()]) == []

    def test_actions_listed_on_polygon(self, polygon_wallet):
        names = [a.name for a in list_actions(polygon_wallet, [MorphoSubgraphActionProvider()])]
        assert names == [
            "morpho.subgraph.get_active_markets",
            "morpho.subgraph.get_whitelisted_vaults",
            "morpho.subgraph.get_market_state_by_unique_key",
            "morpho.subgraph.get_user_portfolio_data",
            "morpho.subgraph.get_curators",
        ]

    @pytest.mark.asyncio
    async def test_direct_call_off_network_is_invalid_network(self, wallet):
        requests = []
        config = default_morpho_config()
        client = MorphoApiClient(config, httpx.AsyncClient(transport=morpho_transport(requests)))
        provider = MorphoSubgraphActionProvider(config, client)
        action = provider.get_actions(wallet)[0]

        with pytest.raises(TensaiError) as exc:
            await action.invoke({})
        assert exc.value.code == ErrorCode.INVALID_NETWORK
        assert requests == []


# =============================================================================
# TEST: READS
# =============================================================================

class TestMorphoApiReads:

    @pytest.mark.asyncio
    async def test_active_markets(self, polygon_wallet):
        requests = []
        kit = make_kit(polygon_wallet, requests)
        payload = json.loads(await kit.invoke("morpho.subgraph.get_active_markets", {"first": 5, "skip": 0}))

        assert payload["action"] == "morpho.subgraph.get_active_markets"
        assert payload["data"]["items"][0]["uniqueKey"] == UNIQUE_KEY
        assert str(requests[0].url) == MORPHO_API_URL
        body = sent_body(requests[0])
        assert "whitelisted: true" in body["query"]
        assert body["variables"] == {"chainId": 137, "first": 5, "skip": 0}

    @pytest.mark.asyncio
    async def test_whitelisted_vaults_default_page(self, polygon_wallet):
        requests = []
        kit = make_kit(polygon_wallet, requests)
        payload = json.loads(await kit.invoke("morpho.subgraph.get_whitelisted_vaults", {}))

        assert payload["data"]["items"][0]["name"] == "Steakhouse USDC"
        assert sent_body(requests[0])["variables"] == {"chainId": 137, "first": 20, "skip": 0}

    @pytest.mark.asyncio
    async def test_market_state_by_unique_key(self, polygon_wallet):
        requests = []
        kit = make_kit(polygon_wallet, requests)
        payload = json.loads(await kit.invoke(
            "morpho.subgraph.get_market_state_by_unique_key", {"uniqueKey": UNIQUE_KEY}
        ))

        assert payload["data"]["state"]["supplyApy"] == 0.041
        assert sent_body(requests[0])["variables"] == {"chainId": 137, "uniqueKey": UNIQUE_KEY}

    @pytest.mark.asyncio
    async def test_bad_unique_key_rejected_by_schema(self, polygon_wallet):
        requests = []
        kit = make_kit(polygon_wallet, requests)
        with pytest.raises(TensaiError) as exc:
            await kit.invoke("morpho.subgraph.get_market_state_by_unique_key", {"uniqueKey": "0x12"})
        assert exc.value.code == ErrorCode.INVALID_INPUT
        assert requests == []

    @pytest.mark.asyncio
    async def test_user_portfolio_uses_wallet_address(self, polygon_wallet):
        requests = []
        kit = make_kit(polygon_wallet, requests)
        payload = json.loads(await kit.invoke("morpho.subgraph.get_user_portfolio_data", {}))

        assert payload["data"]["address"] == OWNER
        assert sent_body(requests[0])["variables"] == {"chainId": 137, "address": OWNER}

    @pytest.mark.asyncio
    async def test_curators(self, polygon_wallet):
        requests = []
        kit = make_kit(polygon_wallet, requests)
        payload = json.loads(await kit.invoke("morpho.subgraph.get_curators", {}))

        assert payload["data"]["items"][0]["verified"] is True
        assert sent_body(requests[0])["variables"] == {"chainId": 137}

    @pytest.mark.asyncio
    async def test_missing_data_is_null(self, polygon_wallet):
        kit = make_kit(polygon_wallet, [], responses={})
        payload = json.loads(await kit.invoke("morpho.subgraph.get_curators", {}))
        assert payload["data"] is None

    @pytest.mark.asyncio
    async def test_graphql_errors_are_api_call_failed(self, polygon_wallet):
        transport = httpx.MockTransport(
            lambda r: httpx.Response(200, json={"errors": [{"message": "Cannot query field \"foo\""}]})
        )
        config = default_morpho_config()
        client = MorphoApiClient(config, httpx.AsyncClient(transport=transport))
        kit = AgentKit.from_config(polygon_wallet, [MorphoSubgraphActionProvider(config, client)])

        with pytest.raises(TensaiError) as exc:
            await kit.invoke("morpho.subgraph.get_active_markets", {})
        assert exc.value.code == ErrorCode.API_CALL_FAILED
        assert exc.value.details["errors"][0]["message"] == "Cannot query field \"foo\""

    @pytest.mark.asyncio
    async def test_http_failure_is_api_call_failed(self, polygon_wallet):
        transport = httpx.MockTransport(lambda r: httpx.Response(503, text="maintenance"))
        client = MorphoApiClient(client=httpx.AsyncClient(transport=transport))
        with pytest.raises(TensaiError) as exc:
            await client.get_curators(137)
        assert exc.value.code == ErrorCode.API_CALL_FAILED
        assert exc.value.details["status_code"] == 503
