"""
Privy RPC Signer
Turns sign/send requests into Privy wallet RPC calls. Each Privy wallet
variant owns one and supplies its endpoint path and body envelope.
"""

import logging
from typing import Any, Callable, Dict, Union

from wallets.privy_auth import PrivyRpcClient, to_rpc_transaction

logger = logging.getLogger(__name__)

Envelope = Callable[[str, Dict[str, Any]], Dict[str, Any]]


class PrivyRpcSigner:

    def __init__(self, privy: PrivyRpcClient, path: str, envelope: Envelope, address: str, chain_id: str):
        self.privy = privy
        self.path = path
        self.envelope = envelope
        self.address = address
        self.caip2 = f"eip155:{chain_id}"

    async def _rpc(self, method: str, params: Dict[str, Any], field: str, **extra) -> Any:
        body = self.envelope(method, params)
        body.update(extra)
        return await self.privy.rpc(self.path, body, field)

    async def sign_message(self, message: Union[str, bytes]) -> str:
        if isinstance(message, (bytes, bytearray)):
            params = {"message": "0x" + bytes(message).hex(), "encoding": "hex"}
        else:
            params = {"message": message, "encoding": "utf-8"}
        return await self._rpc("personal_sign", params, "signature")

    async def sign_typed_data(self, typed_data: Dict[str, Any]) -> str:
        params = {
            "typed_data": {
                "domain": typed_data.get("domain", {}),
                "types": typed_data.get("types", {}),
                "primary_type": typed_data.get("primaryType") or typed_data.get("primary_type"),
                "message": typed_data.get("message", {}),
            }
        }
        return await self._rpc("eth_signTypedData_v4", params, "signature")

    async def sign_transaction(self, transaction: Dict[str, Any]) -> str:
        params = {"transaction": to_rpc_transaction(transaction, self.address)}
        return await self._rpc("eth_signTransaction", params, "signed_transaction")

    async def send_transaction(self, transaction: Dict[str, Any]) -> str:
        params = {"transaction": to_rpc_transaction(transaction, self.address)}
        tx_hash = await self._rpc("eth_sendTransaction", params, "hash", caip2=self.caip2)
        logger.info(f"[PrivySigner] Sent {tx_hash} via {self.path}")
        return tx_hash
