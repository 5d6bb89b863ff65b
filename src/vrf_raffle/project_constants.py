"""
Network-wide parameters for the VRF raffle.

These values define the public rules of each deployment.
Changing them changes the raffle economics and MUST be publicly announced.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

WEI_PER_ETHER = 10**18


def parse_ether(amount: str) -> int:
    """Converts a decimal ether string (e.g. "0.01") into wei."""
    return int(Decimal(amount) * WEI_PER_ETHER)


def to_ether(raw_amount: int) -> float:
    return round(raw_amount / WEI_PER_ETHER, 6)


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    entrance_fee: int
    gas_lane: str
    callback_gas_limit: int
    interval: int
    vrf_coordinator: Optional[str] = None
    subscription_id: Optional[int] = None
    eth_usd_price_feed: Optional[str] = None


# Keyed by chain id
NETWORK_CONFIG: Dict[int, NetworkConfig] = {
    11155111: NetworkConfig(
        name="sepolia",
        eth_usd_price_feed="0x694AA1769357215DE4FAC081bf1f309aDC325306",
        vrf_coordinator="0x8103B0A8A00be2DDC778e6e7eaa21791Cd364625",
        entrance_fee=parse_ether("0.01"),
        gas_lane="0x474e34a077df58807dbe9c96d3c009b23b3c6d0cce433e59bbf5b34f823bc56c",
        subscription_id=6819,
        callback_gas_limit=5_000_000,
        interval=30,
    ),
    31337: NetworkConfig(
        name="hardhat",
        entrance_fee=parse_ether("0.01"),
        gas_lane="0x474e34a077df58807dbe9c96d3c009b23b3c6d0cce433e59bbf5b34f823bc56c",
        interval=30,
        callback_gas_limit=500_000,
    ),
}

DEVELOPMENT_CHAINS = ("hardhat", "localhost")

# localhost shares the hardhat chain id
LOCALHOST_CHAIN_ID = 31337

VERIFICATION_BLOCK_CONFIRMATIONS = 6

# LINK used to fund the mock subscription on development chains
VRF_SUB_FUND_AMOUNT = parse_ether("2")

# Mock coordinator pricing (LINK wei)
MOCK_BASE_FEE = parse_ether("0.25")
MOCK_GAS_PRICE_LINK = 10**9

ZERO_ADDRESS = "0x" + "00" * 20


def chain_id_for_network(name: str) -> int:
    if name == "localhost":
        return LOCALHOST_CHAIN_ID
    for chain_id, cfg in NETWORK_CONFIG.items():
        if cfg.name == name:
            return chain_id
    known = ", ".join(sorted({c.name for c in NETWORK_CONFIG.values()} | {"localhost"}))
    raise RuntimeError(f"Unknown network {name!r}. Known networks: {known}")


def network_config_for_chain(chain_id: int) -> NetworkConfig:
    cfg = NETWORK_CONFIG.get(chain_id)
    if cfg is None:
        raise RuntimeError(f"No network config for chain id {chain_id}.")
    return cfg


def is_development_network(name: str) -> bool:
    return name in DEVELOPMENT_CHAINS
