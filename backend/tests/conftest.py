"""
Shared fixtures: a recording in-memory wallet that answers ERC-20 and
Morpho reads from dictionaries and counts every RPC it would have made.
"""

from typing import Any, Dict, List, Optional, Sequence

import pytest

from config.networks import Network
from wallets.base import WalletProvider

OWNER = "0x1111111111111111111111111111111111111111"
TOKEN = "0x2222222222222222222222222222222222222222"
SPENDER = "0x3333333333333333333333333333333333333333"
DESTINATION = "0x4444444444444444444444444444444444444444"
COLLATERAL = "0x5555555555555555555555555555555555555555"
NATIVE = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"

KATANA_TESTNET = Network(protocol_family="evm", network_id="katana-testnet", chain_id="129399")
BASE_MAINNET = Network(protocol_family="evm", network_id="base-mainnet", chain_id="8453")


class FakeWallet(WalletProvider):
    """
    Deterministic wallet for executor and provider tests.

    reads:      every read_contract call as (address, function_name, args)
    sent:       every send_transaction request
    calls:      every simulation request
    """

    def __init__(self, network: Network = KATANA_TESTNET, address: str = OWNER):
        self.address = address
        self.network = network
        self.decimals: Dict[str, int] = {}
        self.allowances: Dict[tuple, int] = {}
        self.balances: Dict[str, int] = {}
        self.contract_results: Dict[str, Any] = {}
        self.receipt_status: Dict[str, int] = {}
        self.fail_send_after: Optional[int] = None
        self.call_error: Optional[Exception] = None
        self.call_result = "0x"
        self.native_balance = 10**18

        self.reads: List[tuple] = []
        self.sent: List[Dict[str, Any]] = []
        self.calls: List[Dict[str, Any]] = []
        self.waited: List[str] = []

    @property
    def rpc_count(self) -> int:
        return len(self.reads) + len(self.sent) + len(self.calls) + len(self.waited)

    def get_address(self) -> str:
        return self.address

    def get_network(self) -> Network:
        return self.network

    def get_name(self) -> str:
        return "fake_wallet_provider"

    async def get_balance(self) -> int:
        return self.native_balance

    async def sign_message(self, message) -> str:
        return "0x" + "ab" * 65

    async def sign_typed_data(self, typed_data) -> str:
        return "0x" + "cd" * 65

    async def sign_transaction(self, transaction) -> str:
        return "0x02f8"

    async def send_transaction(self, transaction: Dict[str, Any]) -> str:
        if self.fail_send_after is not None and len(self.sent) >= self.fail_send_after:
            raise RuntimeError("nonce too low")
        self.sent.append(dict(transaction))
        tx_hash = "0x" + f"{len(self.sent):064x}"

        # approvals take effect once mined
        data = transaction.get("data") or ""
        if data.startswith("0x095ea7b3"):
            spender = "0x" + data[10 + 24:10 + 64]
            amount = int(data[10 + 64:10 + 128], 16)
            self.allowances[(transaction["to"].lower(), spender.lower())] = amount
        return tx_hash

    async def wait_for_transaction_receipt(self, tx_hash: str) -> Dict[str, Any]:
        self.waited.append(tx_hash)
        return {"transactionHash": tx_hash, "status": self.receipt_status.get(tx_hash, 1)}

    async def read_contract(
        self,
        address: str,
        abi: List[Dict[str, Any]],
        function_name: str,
        args: Optional[Sequence[Any]] = None
    ) -> Any:
        args = list(args or [])
        self.reads.append((address, function_name, args))

        if function_name == "decimals":
            return self.decimals[address.lower()]
        if function_name == "allowance":
            return self.allowances.get((address.lower(), args[1].lower()), 0)
        if function_name == "balanceOf":
            return self.balances.get(address.lower(), 0)
        if function_name in self.contract_results:
            result = self.contract_results[function_name]
            if isinstance(result, Exception):
                raise result
            return result
        raise RuntimeError(f"unexpected read {function_name}")

    async def call(self, transaction: Dict[str, Any]) -> str:
        self.calls.append(dict(transaction))
        if self.call_error is not None:
            raise self.call_error
        return self.call_result

    def sent_selectors(self) -> List[str]:
        return [(tx.get("data") or "0x")[:10] for tx in self.sent]


@pytest.fixture
def wallet():
    w = FakeWallet()
    w.decimals[TOKEN.lower()] = 6
    w.decimals[COLLATERAL.lower()] = 18
    return w
