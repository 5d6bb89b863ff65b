"""Shared fixtures: a ledger with a raffle deployed on the hardhat network."""

import pytest

from vrf_raffle.deploy import deploy_raffle
from vrf_raffle.ledger import Ledger
from vrf_raffle.project_constants import WEI_PER_ETHER

START_TIME = 1_700_000_000
PLAYER_FUNDS = 10 * WEI_PER_ETHER


@pytest.fixture
def ledger():
    return Ledger(timestamp=START_TIME)


@pytest.fixture
def deployer(ledger):
    return ledger.generate_address("deployer")


@pytest.fixture
def deployment(ledger, deployer):
    return deploy_raffle(ledger, "hardhat", deployer)


@pytest.fixture
def raffle(deployment):
    return deployment.raffle


@pytest.fixture
def coordinator(deployment):
    return deployment.coordinator


@pytest.fixture
def make_player(ledger):
    def _make(funds=PLAYER_FUNDS):
        player = ledger.generate_address("player")
        ledger.set_balance(player, funds)
        return player

    return _make


@pytest.fixture
def entered_players(raffle, make_player):
    players = [make_player() for _ in range(3)]
    for p in players:
        raffle.enter_raffle(sender=p, value=raffle.entrance_fee)
    return players
