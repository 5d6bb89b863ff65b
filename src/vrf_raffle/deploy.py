from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, cast

from .coordinator import VRFCoordinator, VRFCoordinatorMock
from .ledger import Ledger
from .project_constants import (
    VERIFICATION_BLOCK_CONFIRMATIONS,
    VRF_SUB_FUND_AMOUNT,
    NetworkConfig,
    chain_id_for_network,
    is_development_network,
    network_config_for_chain,
)
from .raffle import Raffle

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Deployment:
    raffle: Raffle
    coordinator: VRFCoordinator
    network: NetworkConfig
    chain_id: int
    subscription_id: int
    wait_confirmations: int


def deploy_raffle(
    ledger: Ledger,
    network_name: str,
    deployer: str,
    chain_id: Optional[int] = None,
) -> Deployment:
    """
    Deploys a raffle wired to the network's coordinator.

    On development networks a mock coordinator is deployed and a funded
    subscription is created for the raffle. Elsewhere the configured
    coordinator must already be deployed on the ledger and the subscription
    owner adds the raffle as consumer out of band.
    """
    if chain_id is None:
        chain_id = chain_id_for_network(network_name)
    cfg = network_config_for_chain(chain_id)
    is_dev = is_development_network(network_name)

    if is_dev:
        mock = ledger.deploy(VRFCoordinatorMock, deployer)
        coordinator: VRFCoordinator = mock
        subscription_id = mock.create_subscription(sender=deployer)
        # Usually you'd need LINK on a real network
        mock.fund_subscription(subscription_id, VRF_SUB_FUND_AMOUNT)
    else:
        if cfg.vrf_coordinator is None or cfg.subscription_id is None:
            raise RuntimeError(
                f"Network {cfg.name} has no coordinator/subscription configured."
            )
        coordinator = cast(VRFCoordinator, ledger.contract_at(cfg.vrf_coordinator))
        subscription_id = cfg.subscription_id

    raffle = ledger.deploy(
        Raffle,
        deployer,
        coordinator.address,
        cfg.entrance_fee,
        cfg.gas_lane,
        subscription_id,
        cfg.callback_gas_limit,
        cfg.interval,
    )

    if is_dev:
        mock.add_consumer(sender=deployer, sub_id=subscription_id, consumer=raffle.address)
    else:
        log.info(
            "Add %s as consumer of subscription %d before the first draw.",
            raffle.address,
            subscription_id,
        )

    log.info("Raffle deployed at %s on %s (chain %d)", raffle.address, network_name, chain_id)
    return Deployment(
        raffle=raffle,
        coordinator=coordinator,
        network=cfg,
        chain_id=chain_id,
        subscription_id=subscription_id,
        wait_confirmations=1 if is_dev else VERIFICATION_BLOCK_CONFIRMATIONS,
    )
