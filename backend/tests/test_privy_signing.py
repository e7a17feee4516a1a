"""
Privy Wallet Tests
==================

- authorization signatures are deterministic and verify with the public key
- requests carry basic auth, the app id and the signature header
- non-2xx responses and missing data fields are API_CALL_FAILED
- embedded wallets resolve their address from the user's linked accounts

Run: python -m pytest tests/test_privy_signing.py -v --tb=short
"""

import base64
import json
from unittest.mock import AsyncMock

import httpx
import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from common.errors import ErrorCode, TensaiError
from wallets.privy_auth import (
    PrivyRpcClient,
    basic_auth_header,
    build_request_descriptor,
    canonicalize,
    generate_authorization_signature,
    to_rpc_transaction,
)
from wallets.privy_embedded_wallet import PrivyEmbeddedWalletProvider
from wallets.privy_server_wallet import PrivyServerWalletProvider

from conftest import DESTINATION, KATANA_TESTNET, OWNER

APP_ID = "app-123"
APP_SECRET = "secret-456"
API_URL = "https://api.privy.io"


def encode_key(private_key) -> str:
    der = private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return "wallet-auth:" + base64.b64encode(der).decode("ascii")


@pytest.fixture
def p256_key():
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def auth_key(p256_key):
    return encode_key(p256_key)


def privy_client(handler, authorization_key=None):
    return PrivyRpcClient(
        app_id=APP_ID,
        app_secret=APP_SECRET,
        authorization_key=authorization_key,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


# =============================================================================
# TEST: SIGNATURES
# =============================================================================

class TestAuthorizationSignature:

    def test_canonical_json_sorts_and_compacts(self):
        assert canonicalize({"b": 1, "a": {"d": [1, 2], "c": "x"}}) == b'{"a":{"c":"x","d":[1,2]},"b":1}'

    def test_p256_signature_is_deterministic(self, auth_key):
        body = {"method": "personal_sign", "params": {"message": "hello", "encoding": "utf-8"}}
        url = f"{API_URL}/v1/wallets/w1/rpc"
        first = generate_authorization_signature(auth_key, url, body, APP_ID)
        second = generate_authorization_signature(auth_key, url, body, APP_ID)
        assert first == second

    def test_p256_signature_verifies(self, p256_key, auth_key):
        body = {"method": "eth_sendTransaction", "params": {"transaction": {"to": DESTINATION}}}
        url = f"{API_URL}/v1/wallets/rpc"
        signature = base64.b64decode(generate_authorization_signature(auth_key, url, body, APP_ID))

        message = canonicalize(build_request_descriptor(url, body, APP_ID))
        p256_key.public_key().verify(signature, message, ec.ECDSA(hashes.SHA256()))

    def test_key_without_prefix_accepted(self, p256_key, auth_key):
        bare = auth_key[len("wallet-auth:"):]
        body = {"method": "personal_sign"}
        assert generate_authorization_signature(bare, "u", body, APP_ID) == \
            generate_authorization_signature(auth_key, "u", body, APP_ID)

    def test_ed25519_signature_verifies(self):
        key = ed25519.Ed25519PrivateKey.generate()
        body = {"method": "personal_sign"}
        signature = base64.b64decode(generate_authorization_signature(encode_key(key), "u", body, APP_ID))
        key.public_key().verify(signature, canonicalize(build_request_descriptor("u", body, APP_ID)))

    def test_garbage_key_is_invalid_input(self):
        with pytest.raises(TensaiError) as exc:
            generate_authorization_signature("wallet-auth:bm90LWEta2V5", "u", {}, APP_ID)
        assert exc.value.code == ErrorCode.INVALID_INPUT

    def test_rpc_transaction_hex_quantities(self):
        tx = to_rpc_transaction({"to": DESTINATION, "value": 10**17, "data": b"\x01\x02"}, OWNER)
        assert tx == {"to": DESTINATION, "value": "0x16345785d8a0000", "data": "0x0102", "from": OWNER}


# =============================================================================
# TEST: CLIENT
# =============================================================================

class TestPrivyRpcClient:

    @pytest.mark.asyncio
    async def test_request_headers(self, p256_key, auth_key):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"data": {"signature": "0xsig"}})

        privy = privy_client(handler, auth_key)
        body = {"method": "personal_sign", "params": {"message": "hi", "encoding": "utf-8"}}
        assert await privy.rpc("/v1/wallets/w1/rpc", body, "signature") == "0xsig"

        request = captured[0]
        assert request.headers["authorization"] == basic_auth_header(APP_ID, APP_SECRET)
        assert request.headers["privy-app-id"] == APP_ID
        signature = base64.b64decode(request.headers["privy-authorization-signature"])
        message = canonicalize(build_request_descriptor(f"{API_URL}/v1/wallets/w1/rpc", body, APP_ID))
        p256_key.public_key().verify(signature, message, ec.ECDSA(hashes.SHA256()))

    @pytest.mark.asyncio
    async def test_no_signature_without_key(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"data": {"hash": "0xabc"}})

        await privy_client(handler).rpc("/v1/wallets/w1/rpc", {"method": "eth_sendTransaction"}, "hash")
        assert "privy-authorization-signature" not in captured[0].headers

    @pytest.mark.asyncio
    async def test_non_2xx_is_api_call_failed(self):
        privy = privy_client(lambda r: httpx.Response(401, json={"error": "Invalid app secret"}))
        with pytest.raises(TensaiError) as exc:
            await privy.rpc("/v1/wallets/w1/rpc", {"method": "personal_sign"}, "signature")
        assert exc.value.code == ErrorCode.API_CALL_FAILED
        assert "401" in exc.value.message

    @pytest.mark.asyncio
    async def test_missing_field_is_api_call_failed(self):
        privy = privy_client(lambda r: httpx.Response(200, json={"data": {}}))
        with pytest.raises(TensaiError) as exc:
            await privy.rpc("/v1/wallets/w1/rpc", {"method": "eth_sendTransaction"}, "hash")
        assert exc.value.code == ErrorCode.API_CALL_FAILED
        assert "data.hash" in exc.value.message


# =============================================================================
# TEST: PROVIDERS
# =============================================================================

class TestPrivyServerWallet:

    @pytest.mark.asyncio
    async def test_configure_and_send(self):
        captured = []

        def handler(request):
            captured.append(request)
            if request.method == "GET":
                return httpx.Response(200, json={"id": "w1", "address": OWNER, "chain_type": "ethereum"})
            return httpx.Response(200, json={"data": {"hash": "0x" + "12" * 32}})

        wallet = await PrivyServerWalletProvider.configure_with_wallet(
            privy_client(handler), KATANA_TESTNET, AsyncMock(), "w1"
        )
        tx_hash = await wallet.send_transaction({"to": DESTINATION, "value": 1})

        assert wallet.get_address() == OWNER
        assert tx_hash == "0x" + "12" * 32
        assert captured[0].url.path == "/v1/wallets/w1"
        sent = json.loads(captured[1].content)
        assert captured[1].url.path == "/v1/wallets/w1/rpc"
        assert sent["method"] == "eth_sendTransaction"
        assert sent["caip2"] == "eip155:129399"
        assert sent["params"]["transaction"] == {"to": DESTINATION, "value": "0x1", "from": OWNER}

    @pytest.mark.asyncio
    async def test_creates_wallet_without_id(self):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"id": "new", "address": OWNER})

        wallet = await PrivyServerWalletProvider.configure_with_wallet(
            privy_client(handler), KATANA_TESTNET, AsyncMock()
        )
        assert wallet.wallet_id == "new"
        assert captured[0].method == "POST"
        assert json.loads(captured[0].content) == {"chain_type": "ethereum"}

    @pytest.mark.asyncio
    async def test_typed_data_payload(self):
        captured = []

        def handler(request):
            captured.append(json.loads(request.content))
            return httpx.Response(200, json={"data": {"signature": "0xsig"}})

        wallet = PrivyServerWalletProvider(privy_client(handler), "w1", OWNER, KATANA_TESTNET, AsyncMock())
        await wallet.sign_typed_data({"domain": {"name": "T"}, "types": {}, "primaryType": "Mail", "message": {}})

        assert captured[0]["method"] == "eth_signTypedData_v4"
        assert captured[0]["params"]["typed_data"]["primary_type"] == "Mail"


class TestPrivyEmbeddedWallet:

    @pytest.mark.asyncio
    async def test_resolves_address_from_linked_accounts(self, auth_key):
        def handler(request):
            return httpx.Response(200, json={"id": "did:privy:u1", "linked_accounts": [
                {"type": "email", "address": "a@b.c"},
                {"type": "wallet", "wallet_client_type": "metamask", "address": DESTINATION},
                {"type": "wallet", "wallet_client_type": "privy", "address": OWNER},
            ]})

        wallet = await PrivyEmbeddedWalletProvider.configure_with_wallet(
            privy_client(handler, auth_key), KATANA_TESTNET, AsyncMock(), "did:privy:u1"
        )
        assert wallet.get_address() == OWNER
        assert wallet.get_name() == "privy_evm_embedded_wallet_provider"

    @pytest.mark.asyncio
    async def test_requires_authorization_key(self):
        with pytest.raises(TensaiError) as exc:
            await PrivyEmbeddedWalletProvider.configure_with_wallet(
                privy_client(lambda r: httpx.Response(200, json={})), KATANA_TESTNET, AsyncMock(), "did:privy:u1"
            )
        assert exc.value.code == ErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_no_embedded_wallet_is_invalid_input(self, auth_key):
        privy = privy_client(lambda r: httpx.Response(200, json={"linked_accounts": []}), auth_key)
        with pytest.raises(TensaiError) as exc:
            await PrivyEmbeddedWalletProvider.configure_with_wallet(
                privy, KATANA_TESTNET, AsyncMock(), "did:privy:u1"
            )
        assert exc.value.code == ErrorCode.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_rpc_envelope_and_export(self, auth_key):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"data": {"signature": "0xsig"}})

        wallet = await PrivyEmbeddedWalletProvider.configure_with_wallet(
            privy_client(handler, auth_key), KATANA_TESTNET, AsyncMock(), "did:privy:u1", address=OWNER
        )
        assert await wallet.sign_message("hello") == "0xsig"

        body = json.loads(captured[0].content)
        assert captured[0].url.path == "/v1/wallets/rpc"
        assert body == {
            "address": OWNER,
            "chain_type": "ethereum",
            "method": "personal_sign",
            "params": {"message": "hello", "encoding": "utf-8"},
        }
        assert "privy-authorization-signature" in captured[0].headers
        assert wallet.export_wallet() == {
            "wallet_id": "did:privy:u1",
            "authorization_private_key": auth_key,
            "network_id": "katana-testnet",
            "chain_id": "129399",
        }

    @pytest.mark.asyncio
    async def test_reads_go_to_chain(self, auth_key):
        chain = AsyncMock()
        chain.get_balance.return_value = 42
        wallet = PrivyEmbeddedWalletProvider(
            privy_client(lambda r: httpx.Response(500)), "did:privy:u1", OWNER, KATANA_TESTNET, chain
        )
        assert await wallet.get_balance() == 42
        chain.get_balance.assert_awaited_once_with(OWNER)
