"""
Local Wallet / Chain Client Tests
=================================

- messages and transactions are signed by the configured key
- fee filling prefers EIP-1559 and falls back to gasPrice
- receipt timeouts surface as NETWORK_ERROR with the hash

Run: python -m pytest tests/test_local_wallet.py -v --tb=short
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct
from web3.exceptions import TimeExhausted

from common.errors import ErrorCode, TensaiError
from wallets.chain_client import ChainClient
from wallets.local_wallet import LocalWalletProvider

from conftest import DESTINATION, KATANA_TESTNET

PRIVATE_KEY = "0x" + "11" * 32
TX_HASH = "0x" + "ab" * 32


class FakeEth:
    """Just enough of AsyncWeb3.eth for fill/send/wait."""

    def __init__(self, base_fee=10):
        self.base_fee = base_fee
        self.raw_sent = []
        self.receipt_error = None

    @property
    async def chain_id(self):
        return 129399

    @property
    async def max_priority_fee(self):
        return 2

    @property
    async def gas_price(self):
        return 50

    async def get_transaction_count(self, address, block_identifier):
        return 7

    async def estimate_gas(self, transaction):
        return 21000

    async def get_block(self, block_identifier):
        return {"baseFeePerGas": self.base_fee}

    async def send_raw_transaction(self, raw):
        self.raw_sent.append(raw)
        return bytes.fromhex("ab" * 32)

    async def wait_for_transaction_receipt(self, tx_hash, timeout=None):
        if self.receipt_error:
            raise self.receipt_error
        return {"transactionHash": tx_hash, "status": 1}


@pytest.fixture
def eth():
    return FakeEth()


@pytest.fixture
def local_wallet(eth):
    return LocalWalletProvider(PRIVATE_KEY, KATANA_TESTNET, ChainClient(SimpleNamespace(eth=eth)))


class TestLocalWallet:

    def test_address_and_name(self, local_wallet):
        assert local_wallet.get_address() == Account.from_key(PRIVATE_KEY).address
        assert local_wallet.get_name() == "local_wallet_provider"

    def test_invalid_key_is_invalid_input(self):
        with pytest.raises(TensaiError) as exc:
            LocalWalletProvider("0x1234", KATANA_TESTNET, AsyncMock())
        assert exc.value.code == ErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_sign_message_recovers_address(self, local_wallet):
        signature = await local_wallet.sign_message("hello")
        recovered = Account.recover_message(encode_defunct(text="hello"), signature=signature)
        assert recovered == local_wallet.get_address()

    @pytest.mark.asyncio
    async def test_send_signs_filled_transaction(self, local_wallet, eth):
        tx_hash = await local_wallet.send_transaction({"to": DESTINATION, "value": 10**15})

        assert tx_hash == TX_HASH
        raw = bytes(eth.raw_sent[0])
        assert Account.recover_transaction(raw) == local_wallet.get_address()

    @pytest.mark.asyncio
    async def test_native_transfer_waits_for_receipt(self, local_wallet, eth):
        tx_hash = await local_wallet.native_transfer(DESTINATION, "0.001")
        assert tx_hash == TX_HASH
        assert len(eth.raw_sent) == 1


class TestChainClient:

    @pytest.mark.asyncio
    async def test_fill_uses_eip1559_fees(self, eth):
        chain = ChainClient(SimpleNamespace(eth=eth))
        tx = await chain.fill_transaction(DESTINATION, {"to": DESTINATION, "data": ""})

        assert tx["nonce"] == 7
        assert tx["chainId"] == 129399
        assert tx["gas"] == 21000
        assert tx["maxPriorityFeePerGas"] == 2
        assert tx["maxFeePerGas"] == 22
        assert tx["value"] == 0
        assert "data" not in tx
        assert "gasPrice" not in tx

    @pytest.mark.asyncio
    async def test_fill_falls_back_to_gas_price(self):
        chain = ChainClient(SimpleNamespace(eth=FakeEth(base_fee=None)))
        tx = await chain.fill_transaction(DESTINATION, {"to": DESTINATION})
        assert tx["gasPrice"] == 50
        assert "maxFeePerGas" not in tx

    @pytest.mark.asyncio
    async def test_receipt_timeout_is_network_error(self, eth):
        eth.receipt_error = TimeExhausted("not mined")
        chain = ChainClient(SimpleNamespace(eth=eth), receipt_timeout=1)

        with pytest.raises(TensaiError) as exc:
            await chain.wait_for_receipt(TX_HASH)

        assert exc.value.code == ErrorCode.NETWORK_ERROR
        assert exc.value.details["tx_hash"] == TX_HASH
