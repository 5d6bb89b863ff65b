import pytest

from vrf_raffle.coordinator import VRFCoordinatorMock, derive_random_word
from vrf_raffle.errors import (
    InsufficientSubscriptionBalance,
    InvalidConsumer,
    InvalidNumWords,
    InvalidSubscription,
    MustBeSubOwner,
    NonexistentRequest,
)
from vrf_raffle.project_constants import MOCK_BASE_FEE, MOCK_GAS_PRICE_LINK, parse_ether
from vrf_raffle.raffle import Raffle, RaffleState

GAS_LANE = "0x" + "ab" * 32


@pytest.fixture
def mock(ledger, deployer):
    return ledger.deploy(VRFCoordinatorMock, deployer)


def _raffle_on(ledger, deployer, mock, sub_id):
    return ledger.deploy(
        Raffle, deployer, mock.address, parse_ether("0.01"), GAS_LANE, sub_id, 100_000, 30
    )


def test_subscription_ids_start_at_one(mock, deployer):
    assert mock.create_subscription(sender=deployer) == 1
    assert mock.create_subscription(sender=deployer) == 2
    assert mock.get_subscription(1).owner == deployer


def test_fund_subscription(ledger, mock, deployer):
    sub_id = mock.create_subscription(sender=deployer)
    mock.fund_subscription(sub_id, 100)
    mock.fund_subscription(sub_id, 50)

    assert mock.get_subscription(sub_id).balance == 150
    funded = ledger.events_named("SubscriptionFunded", mock.address)
    assert funded[-1].args == {"sub_id": sub_id, "old_balance": 100, "new_balance": 150}


def test_fund_unknown_subscription(mock):
    with pytest.raises(InvalidSubscription):
        mock.fund_subscription(7, 100)


def test_only_owner_manages_consumers(ledger, mock, deployer):
    sub_id = mock.create_subscription(sender=deployer)
    stranger = ledger.generate_address("stranger")

    with pytest.raises(MustBeSubOwner):
        mock.add_consumer(sender=stranger, sub_id=sub_id, consumer=stranger)

    mock.add_consumer(sender=deployer, sub_id=sub_id, consumer=stranger)
    mock.add_consumer(sender=deployer, sub_id=sub_id, consumer=stranger)
    assert mock.get_subscription(sub_id).consumers == [stranger]

    mock.remove_consumer(sender=deployer, sub_id=sub_id, consumer=stranger)
    assert not mock.consumer_is_added(sub_id, stranger)
    with pytest.raises(InvalidConsumer):
        mock.remove_consumer(sender=deployer, sub_id=sub_id, consumer=stranger)


def test_request_requires_registered_consumer(ledger, mock, deployer):
    sub_id = mock.create_subscription(sender=deployer)
    outsider = ledger.generate_address("outsider")

    with pytest.raises(InvalidConsumer):
        mock.request_random_words(outsider, GAS_LANE, sub_id, 3, 100_000, 1)
    with pytest.raises(InvalidSubscription):
        mock.request_random_words(outsider, GAS_LANE, 42, 3, 100_000, 1)
    assert mock.requests == {}


def test_request_rejects_too_many_words(mock, deployer):
    sub_id = mock.create_subscription(sender=deployer)
    mock.add_consumer(sender=deployer, sub_id=sub_id, consumer=deployer)

    with pytest.raises(InvalidNumWords):
        mock.request_random_words(deployer, GAS_LANE, sub_id, 3, 100_000, 501)


def test_request_emits_event(ledger, mock, deployer):
    sub_id = mock.create_subscription(sender=deployer)
    mock.add_consumer(sender=deployer, sub_id=sub_id, consumer=deployer)

    request_id = mock.request_random_words(deployer, GAS_LANE, sub_id, 3, 100_000, 2)

    event = ledger.events_named("RandomWordsRequested", mock.address)[-1]
    assert event.args["request_id"] == request_id
    assert event.args["num_words"] == 2
    assert event.args["sender"] == deployer


def test_fulfill_unknown_request(mock, deployer):
    with pytest.raises(NonexistentRequest):
        mock.fulfill_random_words(1, deployer)


def test_fulfill_charges_subscription(ledger, mock, deployer, make_player):
    sub_id = mock.create_subscription(sender=deployer)
    mock.fund_subscription(sub_id, parse_ether("2"))
    raffle = _raffle_on(ledger, deployer, mock, sub_id)
    mock.add_consumer(sender=deployer, sub_id=sub_id, consumer=raffle.address)

    raffle.enter_raffle(sender=make_player(), value=raffle.entrance_fee)
    ledger.time_travel(31)
    request_id = raffle.perform_upkeep(sender=deployer)

    assert mock.fulfill_random_words(request_id, raffle.address)

    payment = MOCK_BASE_FEE + MOCK_GAS_PRICE_LINK * 100_000
    assert mock.get_subscription(sub_id).balance == parse_ether("2") - payment
    assert request_id not in mock.requests
    event = ledger.events_named("RandomWordsFulfilled", mock.address)[-1]
    assert event.args["payment"] == payment
    assert event.args["success"] is True

    with pytest.raises(NonexistentRequest):
        mock.fulfill_random_words(request_id, raffle.address)


def test_underfunded_subscription_reverts_fulfillment(ledger, mock, deployer, make_player):
    sub_id = mock.create_subscription(sender=deployer)
    raffle = _raffle_on(ledger, deployer, mock, sub_id)
    mock.add_consumer(sender=deployer, sub_id=sub_id, consumer=raffle.address)
    player = make_player()
    raffle.enter_raffle(sender=player, value=raffle.entrance_fee)
    ledger.time_travel(31)
    request_id = raffle.perform_upkeep(sender=deployer)

    with pytest.raises(InsufficientSubscriptionBalance):
        mock.fulfill_random_words_with_override(request_id, raffle.address, [0])

    # The winner payout is undone together with the fulfillment.
    assert raffle.raffle_state == RaffleState.CALCULATING
    assert raffle.players == [player]
    assert request_id in mock.requests


def test_override_word_count_must_match(ledger, deployment, raffle, coordinator, entered_players):
    ledger.time_travel(raffle.interval + 1)
    request_id = raffle.perform_upkeep(sender=entered_players[0])

    with pytest.raises(InvalidNumWords):
        coordinator.fulfill_random_words_with_override(request_id, raffle.address, [1, 2])
    assert request_id in coordinator.requests


def test_derived_words_are_deterministic():
    assert derive_random_word(1, 0) == derive_random_word(1, 0)
    assert derive_random_word(1, 0) != derive_random_word(1, 1)
    assert derive_random_word(1, 0) < 2**256
