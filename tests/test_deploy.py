import pytest

from vrf_raffle.coordinator import VRFCoordinatorMock
from vrf_raffle.deploy import deploy_raffle
from vrf_raffle.errors import InvalidSubscription, UnknownContract
from vrf_raffle.project_constants import (
    NETWORK_CONFIG,
    VRF_SUB_FUND_AMOUNT,
    chain_id_for_network,
    parse_ether,
)
from vrf_raffle.raffle import RaffleState

SEPOLIA = 11155111


def test_development_deploy_funds_mock_subscription(deployment):
    coordinator = deployment.coordinator
    sub = coordinator.get_subscription(deployment.subscription_id)

    assert isinstance(coordinator, VRFCoordinatorMock)
    assert deployment.subscription_id == 1
    assert sub.balance == VRF_SUB_FUND_AMOUNT
    assert coordinator.consumer_is_added(deployment.subscription_id, deployment.raffle.address)
    assert deployment.chain_id == 31337
    assert deployment.wait_confirmations == 1


def test_localhost_is_development(ledger, deployer):
    deployment = deploy_raffle(ledger, "localhost", deployer)
    assert deployment.network.name == "hardhat"
    assert isinstance(deployment.coordinator, VRFCoordinatorMock)


def test_live_deploy_uses_configured_coordinator(ledger, deployer, make_player):
    cfg = NETWORK_CONFIG[SEPOLIA]
    coordinator = ledger.deploy(VRFCoordinatorMock, deployer, address=cfg.vrf_coordinator)

    deployment = deploy_raffle(ledger, "sepolia", deployer)
    raffle = deployment.raffle

    assert deployment.coordinator is coordinator
    assert deployment.subscription_id == 6819
    assert deployment.wait_confirmations == 6
    assert raffle.entrance_fee == parse_ether("0.01")
    assert raffle.callback_gas_limit == 5_000_000

    # The configured subscription does not exist on this ledger.
    raffle.enter_raffle(sender=make_player(), value=raffle.entrance_fee)
    ledger.time_travel(raffle.interval + 1)
    with pytest.raises(InvalidSubscription):
        raffle.perform_upkeep(sender=deployer)
    assert raffle.raffle_state == RaffleState.OPEN


def test_live_deploy_without_coordinator(ledger, deployer):
    with pytest.raises(UnknownContract):
        deploy_raffle(ledger, "sepolia", deployer)


def test_unknown_network(ledger, deployer):
    with pytest.raises(RuntimeError, match="Unknown network"):
        deploy_raffle(ledger, "mainnet", deployer)

    with pytest.raises(RuntimeError, match="No network config"):
        deploy_raffle(ledger, "mainnet", deployer, chain_id=1)


def test_chain_ids():
    assert chain_id_for_network("sepolia") == SEPOLIA
    assert chain_id_for_network("hardhat") == 31337
    assert chain_id_for_network("localhost") == 31337


def test_deployment_coordinator_serves_requests(ledger, deployment, entered_players):
    raffle = deployment.raffle
    ledger.time_travel(raffle.interval + 1)
    request_id = raffle.perform_upkeep(sender=entered_players[0])
    assert deployment.coordinator.requests[request_id].consumer == raffle.address
