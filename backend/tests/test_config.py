"""
Settings / Network Registry / Wallet Factory Tests

Run: python -m pytest tests/test_config.py -v --tb=short
"""

import logging

import httpx
import pytest

from common.errors import ErrorCode, TensaiError
from config.networks import default_network_registry
from config.settings import load_settings
from wallets.factory import create_wallet_provider
from wallets.local_wallet import LocalWalletProvider
from wallets.privy_server_wallet import PrivyServerWalletProvider

from conftest import OWNER


class TestSettings:

    def test_defaults(self):
        settings = load_settings({})
        assert settings.wallet_type == "local"
        assert settings.network_id is None
        assert settings.privy_api_url == "https://api.privy.io"

    def test_empty_values_keep_defaults(self):
        settings = load_settings({"WALLET_TYPE": "PRIVY-SERVER", "LOG_LEVEL": "", "CHAIN_ID": "747474"})
        assert settings.wallet_type == "privy-server"
        assert settings.log_level == "INFO"
        assert settings.chain_id == "747474"

    def test_log_level_configures_logging(self):
        settings = load_settings({"LOG_LEVEL": "debug"})
        assert settings.log_level == "DEBUG"
        assert logging.getLevelName(settings.log_level) == logging.DEBUG

    def test_app_logging_follows_setting(self, monkeypatch):
        import main

        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
        main.configure_logging(load_settings({"LOG_LEVEL": "warning"}))
        assert calls[0]["level"] == "WARNING"


class TestNetworkRegistry:

    def test_default_network_is_katana_testnet(self):
        network = default_network_registry().network_for()
        assert network.network_id == "katana-testnet"
        assert network.chain_id == "129399"

    def test_mismatched_ids_rejected(self):
        with pytest.raises(TensaiError) as exc:
            default_network_registry().network_for("base-mainnet", "137")
        assert exc.value.code == ErrorCode.INVALID_NETWORK

    def test_unknown_chain(self):
        with pytest.raises(TensaiError) as exc:
            default_network_registry().by_chain_id(1)
        assert exc.value.code == ErrorCode.INVALID_NETWORK

    def test_katana_testnet_rpc_key_appended(self):
        registry = default_network_registry()
        network = registry.network_for(chain_id="129399")
        assert registry.rpc_url(network, "abc").endswith("abc")
        assert registry.rpc_url(network) == "https://rpc.tatara.katanarpc.com/"


class TestWalletFactory:

    @pytest.mark.asyncio
    async def test_local_wallet(self):
        settings = load_settings({"WALLET_PRIVATE_KEY": "0x" + "11" * 32, "NETWORK_ID": "polygon-mainnet"})
        wallet = await create_wallet_provider(settings)
        assert isinstance(wallet, LocalWalletProvider)
        assert wallet.get_network().chain_id == "137"

    @pytest.mark.asyncio
    async def test_privy_server_wallet(self):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"id": "w1", "address": OWNER}))
        settings = load_settings({
            "WALLET_TYPE": "privy-server",
            "PRIVY_APP_ID": "app",
            "PRIVY_APP_SECRET": "secret",
            "PRIVY_WALLET_ID": "w1",
        })
        wallet = await create_wallet_provider(settings, http_client=httpx.AsyncClient(transport=transport))
        assert isinstance(wallet, PrivyServerWalletProvider)
        assert wallet.get_address() == OWNER

    @pytest.mark.asyncio
    async def test_privy_without_credentials(self):
        with pytest.raises(TensaiError) as exc:
            await create_wallet_provider(load_settings({"WALLET_TYPE": "privy-embedded"}))
        assert exc.value.code == ErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_unknown_wallet_type(self):
        with pytest.raises(TensaiError) as exc:
            await create_wallet_provider(load_settings({"WALLET_TYPE": "ledger"}))
        assert exc.value.code == ErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_missing_private_key(self):
        with pytest.raises(TensaiError) as exc:
            await create_wallet_provider(load_settings({}))
        assert exc.value.code == ErrorCode.INVALID_INPUT
