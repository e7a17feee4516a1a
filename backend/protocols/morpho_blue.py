"""
Morpho Blue Protocol Integration
Market config, market state and position reads, plus calldata for the six
lending writes (supply, withdraw, supplyCollateral, withdrawCollateral,
borrow, repay).

Morpho Blue is a trustless lending primitive with isolated markets.
Each market has: loanToken, collateralToken, oracle, irm, lltv
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from hexbytes import HexBytes
from web3 import Web3

from common.errors import ErrorCode, create_error, handle_error
from config.contracts import MorphoConfig
from execution.token_ops import encode_call
from wallets.base import WalletProvider

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# ==========================================
# MORPHO BLUE ABI
# ==========================================
MARKET_PARAMS_INPUT = {
    "components": [
        {"name": "loanToken", "type": "address"},
        {"name": "collateralToken", "type": "address"},
        {"name": "oracle", "type": "address"},
        {"name": "irm", "type": "address"},
        {"name": "lltv", "type": "uint256"}
    ],
    "name": "marketParams",
    "type": "tuple"
}

ASSETS_AND_SHARES_OUTPUTS = [
    {"name": "", "type": "uint256"},
    {"name": "", "type": "uint256"}
]

MORPHO_ABI = [
    # supply(MarketParams, uint256 assets, uint256 shares, address onBehalf, bytes data)
    {
        "inputs": [
            MARKET_PARAMS_INPUT,
            {"name": "assets", "type": "uint256"},
            {"name": "shares", "type": "uint256"},
            {"name": "onBehalf", "type": "address"},
            {"name": "data", "type": "bytes"}
        ],
        "name": "supply",
        "outputs": ASSETS_AND_SHARES_OUTPUTS,
        "stateMutability": "nonpayable",
        "type": "function"
    },
    # withdraw(MarketParams, uint256 assets, uint256 shares, address onBehalf, address receiver)
    {
        "inputs": [
            MARKET_PARAMS_INPUT,
            {"name": "assets", "type": "uint256"},
            {"name": "shares", "type": "uint256"},
            {"name": "onBehalf", "type": "address"},
            {"name": "receiver", "type": "address"}
        ],
        "name": "withdraw",
        "outputs": ASSETS_AND_SHARES_OUTPUTS,
        "stateMutability": "nonpayable",
        "type": "function"
    },
    # supplyCollateral(MarketParams, uint256 assets, address onBehalf, bytes data)
    {
        "inputs": [
            MARKET_PARAMS_INPUT,
            {"name": "assets", "type": "uint256"},
            {"name": "onBehalf", "type": "address"},
            {"name": "data", "type": "bytes"}
        ],
        "name": "supplyCollateral",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    # withdrawCollateral(MarketParams, uint256 assets, address onBehalf, address receiver)
    {
        "inputs": [
            MARKET_PARAMS_INPUT,
            {"name": "assets", "type": "uint256"},
            {"name": "onBehalf", "type": "address"},
            {"name": "receiver", "type": "address"}
        ],
        "name": "withdrawCollateral",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    # borrow(MarketParams, uint256 assets, uint256 shares, address onBehalf, address receiver)
    {
        "inputs": [
            MARKET_PARAMS_INPUT,
            {"name": "assets", "type": "uint256"},
            {"name": "shares", "type": "uint256"},
            {"name": "onBehalf", "type": "address"},
            {"name": "receiver", "type": "address"}
        ],
        "name": "borrow",
        "outputs": ASSETS_AND_SHARES_OUTPUTS,
        "stateMutability": "nonpayable",
        "type": "function"
    },
    # repay(MarketParams, uint256 assets, uint256 shares, address onBehalf, bytes data)
    {
        "inputs": [
            MARKET_PARAMS_INPUT,
            {"name": "assets", "type": "uint256"},
            {"name": "shares", "type": "uint256"},
            {"name": "onBehalf", "type": "address"},
            {"name": "data", "type": "bytes"}
        ],
        "name": "repay",
        "outputs": ASSETS_AND_SHARES_OUTPUTS,
        "stateMutability": "nonpayable",
        "type": "function"
    },
    # position(bytes32 id, address user) -> (uint256 supplyShares, uint128 borrowShares, uint128 collateral)
    {
        "inputs": [
            {"name": "id", "type": "bytes32"},
            {"name": "user", "type": "address"}
        ],
        "name": "position",
        "outputs": [
            {"name": "supplyShares", "type": "uint256"},
            {"name": "borrowShares", "type": "uint128"},
            {"name": "collateral", "type": "uint128"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    # market(bytes32 id) -> Market struct
    {
        "inputs": [{"name": "id", "type": "bytes32"}],
        "name": "market",
        "outputs": [
            {"name": "totalSupplyAssets", "type": "uint128"},
            {"name": "totalSupplyShares", "type": "uint128"},
            {"name": "totalBorrowAssets", "type": "uint128"},
            {"name": "totalBorrowShares", "type": "uint128"},
            {"name": "lastUpdate", "type": "uint128"},
            {"name": "fee", "type": "uint128"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    # idToMarketParams(bytes32 id) -> (loanToken, collateralToken, oracle, irm, lltv)
    {
        "inputs": [{"name": "id", "type": "bytes32"}],
        "name": "idToMarketParams",
        "outputs": [
            {"name": "loanToken", "type": "address"},
            {"name": "collateralToken", "type": "address"},
            {"name": "oracle", "type": "address"},
            {"name": "irm", "type": "address"},
            {"name": "lltv", "type": "uint256"}
        ],
        "stateMutability": "view",
        "type": "function"
    }
]


@dataclass(frozen=True)
class MarketParams:
    loan_token: str
    collateral_token: str
    oracle: str
    irm: str
    lltv: int

    def as_tuple(self):
        return (
            Web3.to_checksum_address(self.loan_token),
            Web3.to_checksum_address(self.collateral_token),
            Web3.to_checksum_address(self.oracle),
            Web3.to_checksum_address(self.irm),
            int(self.lltv)
        )


@dataclass(frozen=True)
class MarketConfig:
    """Market params plus the Morpho Blue deployment they were read from."""
    market_id: str
    morpho_blue_address: str
    params: MarketParams

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marketId": self.market_id,
            "morphoBlueContractAddress": self.morpho_blue_address,
            "loanToken": self.params.loan_token,
            "collateralToken": self.params.collateral_token,
            "oracle": self.params.oracle,
            "irm": self.params.irm,
            "lltv": str(self.params.lltv),
        }


def _market_id_bytes(market_id: str) -> bytes:
    try:
        raw = bytes(HexBytes(market_id))
    except (ValueError, TypeError) as e:
        raise create_error(f"Invalid marketId: {market_id!r} ({e})", ErrorCode.INVALID_INPUT)
    if len(raw) != 32:
        raise create_error(f"Invalid marketId (bytes32 hex): {market_id!r}", ErrorCode.INVALID_INPUT)
    return raw


class MorphoBlue:
    """
    Morpho Blue reads and calldata builders for the wallet's chain.
    """

    def __init__(self, wallet: WalletProvider, config: MorphoConfig):
        self.wallet = wallet
        self.config = config

    @property
    def contract_address(self) -> str:
        chain_id = self.wallet.get_network().chain_id
        if not chain_id:
            raise create_error("Invalid or missing network", ErrorCode.INVALID_NETWORK)
        return self.config.contract_address(chain_id)

    # ==========================================
    # READS
    # ==========================================

    async def fetch_market_config(self, market_id: str) -> MarketConfig:
        """
        Read idToMarketParams for a market.

        Raises:
            TensaiError(INVALID_INPUT) for an unknown market or failed lookup
            TensaiError(INVALID_NETWORK) when Morpho is not deployed on the chain
        """
        address = self.contract_address
        try:
            params = await self.wallet.read_contract(
                address, MORPHO_ABI, "idToMarketParams", [_market_id_bytes(market_id)]
            )
        except Exception as e:
            raise handle_error("Error fetching Morpho market information", e, ErrorCode.INVALID_INPUT)

        if not params or params[0] == ZERO_ADDRESS:
            raise create_error(
                "Invalid market id or missing market information",
                ErrorCode.INVALID_INPUT,
                {"market_id": market_id},
            )

        logger.info(f"[MorphoBlue] Market {market_id[:10]}... loanToken={params[0]} collateralToken={params[1]}")
        return MarketConfig(
            market_id=market_id,
            morpho_blue_address=address,
            params=MarketParams(params[0], params[1], params[2], params[3], int(params[4])),
        )

    async def get_market_state(self, market_id: str) -> Dict[str, Any]:
        """Market totals from on-chain."""
        try:
            state = await self.wallet.read_contract(
                self.contract_address, MORPHO_ABI, "market", [_market_id_bytes(market_id)]
            )
        except Exception as e:
            raise handle_error("Error fetching states for Morpho market", e, ErrorCode.CONTRACT_ERROR)

        if not state:
            raise create_error("Invalid market id or missing market information", ErrorCode.INVALID_INPUT)
        return {
            "marketId": market_id,
            "totalSupplyAssets": str(state[0]),
            "totalSupplyShares": str(state[1]),
            "totalBorrowAssets": str(state[2]),
            "totalBorrowShares": str(state[3]),
            "lastUpdate": str(state[4]),
            "fee": str(state[5]),
        }

    async def get_position(self, market_id: str, user_address: Optional[str] = None) -> Dict[str, Any]:
        """User's position in a market (defaults to the wallet address)."""
        user = Web3.to_checksum_address(user_address or self.wallet.get_address())
        try:
            position = await self.wallet.read_contract(
                self.contract_address, MORPHO_ABI, "position", [_market_id_bytes(market_id), user]
            )
        except Exception as e:
            raise handle_error("Error fetching Morpho market positions", e, ErrorCode.CONTRACT_ERROR)

        if not position:
            raise create_error("Invalid market id or missing market information", ErrorCode.INVALID_INPUT)
        return {
            "marketId": market_id,
            "user": user,
            "supplyShares": str(position[0]),
            "borrowShares": str(position[1]),
            "collateral": str(position[2]),
        }

    # ==========================================
    # CALLDATA
    # ==========================================

    def build_supply(self, market: MarketConfig, assets: int) -> str:
        user = self.wallet.get_address()
        return encode_call(MORPHO_ABI, "supply", [market.params.as_tuple(), assets, 0, user, b""])

    def build_withdraw(self, market: MarketConfig, assets: int) -> str:
        user = self.wallet.get_address()
        return encode_call(MORPHO_ABI, "withdraw", [market.params.as_tuple(), assets, 0, user, user])

    def build_supply_collateral(self, market: MarketConfig, assets: int) -> str:
        user = self.wallet.get_address()
        return encode_call(MORPHO_ABI, "supplyCollateral", [market.params.as_tuple(), assets, user, b""])

    def build_withdraw_collateral(self, market: MarketConfig, assets: int) -> str:
        user = self.wallet.get_address()
        return encode_call(MORPHO_ABI, "withdrawCollateral", [market.params.as_tuple(), assets, user, user])

    def build_borrow(self, market: MarketConfig, assets: int) -> str:
        user = self.wallet.get_address()
        return encode_call(MORPHO_ABI, "borrow", [market.params.as_tuple(), assets, 0, user, user])

    def build_repay(self, market: MarketConfig, assets: int) -> str:
        user = self.wallet.get_address()
        return encode_call(MORPHO_ABI, "repay", [market.params.as_tuple(), assets, 0, user, b""])
