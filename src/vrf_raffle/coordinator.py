"""
Randomness oracle (VRF coordinator) for the raffle.

`VRFCoordinator` is the request surface a consumer depends on. The mock
below is what development networks deploy in place of the real oracle:
it keeps subscriptions and a table of pending requests, and a test or an
operator drives fulfillment by hand.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

from .errors import (
    InsufficientSubscriptionBalance,
    InvalidConsumer,
    InvalidNumWords,
    InvalidSubscription,
    MustBeSubOwner,
    NonexistentRequest,
    RaffleError,
)
from .ledger import Contract, Ledger
from .project_constants import MOCK_BASE_FEE, MOCK_GAS_PRICE_LINK

log = logging.getLogger(__name__)

MAX_NUM_WORDS = 500


class VRFCoordinator(Protocol):
    address: str

    def request_random_words(
        self,
        sender: str,
        key_hash: str,
        sub_id: int,
        minimum_request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
    ) -> int: ...


@dataclass
class Subscription:
    owner: str
    balance: int = 0
    consumers: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RandomWordsRequest:
    request_id: int
    sub_id: int
    consumer: str
    key_hash: str
    minimum_request_confirmations: int
    callback_gas_limit: int
    num_words: int
    block_number: int


def derive_random_word(request_id: int, index: int) -> int:
    digest = hashlib.sha256(f"{request_id}:{index}".encode("utf-8")).digest()
    return int.from_bytes(digest, "big")


class VRFCoordinatorMock(Contract):
    def __init__(
        self,
        ledger: Ledger,
        address: str,
        base_fee: int = MOCK_BASE_FEE,
        gas_price_link: int = MOCK_GAS_PRICE_LINK,
    ) -> None:
        super().__init__(ledger, address)
        self.base_fee = base_fee
        self.gas_price_link = gas_price_link
        self.subscriptions: Dict[int, Subscription] = {}
        self.requests: Dict[int, RandomWordsRequest] = {}
        self._current_sub_id = 0
        self._next_request_id = 1

    # Subscriptions

    def create_subscription(self, sender: str) -> int:
        with self.ledger.transaction():
            self._current_sub_id += 1
            sub_id = self._current_sub_id
            self.subscriptions[sub_id] = Subscription(owner=sender)
            self.ledger.emit(self.address, "SubscriptionCreated", sub_id=sub_id, owner=sender)
        log.debug("Created subscription %d for %s", sub_id, sender)
        return sub_id

    def fund_subscription(self, sub_id: int, amount: int) -> None:
        with self.ledger.transaction():
            sub = self._subscription(sub_id)
            old_balance = sub.balance
            sub.balance += amount
            self.ledger.emit(
                self.address,
                "SubscriptionFunded",
                sub_id=sub_id,
                old_balance=old_balance,
                new_balance=sub.balance,
            )

    def add_consumer(self, sender: str, sub_id: int, consumer: str) -> None:
        with self.ledger.transaction():
            sub = self._owned_subscription(sender, sub_id)
            if consumer in sub.consumers:
                return
            sub.consumers.append(consumer)
            self.ledger.emit(self.address, "ConsumerAdded", sub_id=sub_id, consumer=consumer)

    def remove_consumer(self, sender: str, sub_id: int, consumer: str) -> None:
        with self.ledger.transaction():
            sub = self._owned_subscription(sender, sub_id)
            if consumer not in sub.consumers:
                raise InvalidConsumer(sub_id, consumer)
            sub.consumers.remove(consumer)
            self.ledger.emit(self.address, "ConsumerRemoved", sub_id=sub_id, consumer=consumer)

    def get_subscription(self, sub_id: int) -> Subscription:
        sub = self._subscription(sub_id)
        return Subscription(owner=sub.owner, balance=sub.balance, consumers=list(sub.consumers))

    def consumer_is_added(self, sub_id: int, consumer: str) -> bool:
        return consumer in self._subscription(sub_id).consumers

    def _subscription(self, sub_id: int) -> Subscription:
        sub = self.subscriptions.get(sub_id)
        if sub is None:
            raise InvalidSubscription(sub_id)
        return sub

    def _owned_subscription(self, sender: str, sub_id: int) -> Subscription:
        sub = self._subscription(sub_id)
        if sub.owner != sender:
            raise MustBeSubOwner(sub.owner)
        return sub

    # Requests

    def request_random_words(
        self,
        sender: str,
        key_hash: str,
        sub_id: int,
        minimum_request_confirmations: int,
        callback_gas_limit: int,
        num_words: int,
    ) -> int:
        with self.ledger.transaction():
            sub = self._subscription(sub_id)
            if sender not in sub.consumers:
                raise InvalidConsumer(sub_id, sender)
            if num_words > MAX_NUM_WORDS:
                raise InvalidNumWords(num_words, MAX_NUM_WORDS)

            request_id = self._next_request_id
            self._next_request_id += 1
            self.requests[request_id] = RandomWordsRequest(
                request_id=request_id,
                sub_id=sub_id,
                consumer=sender,
                key_hash=key_hash,
                minimum_request_confirmations=minimum_request_confirmations,
                callback_gas_limit=callback_gas_limit,
                num_words=num_words,
                block_number=self.ledger.block_number + 1,
            )
            self.ledger.emit(
                self.address,
                "RandomWordsRequested",
                key_hash=key_hash,
                request_id=request_id,
                sub_id=sub_id,
                minimum_request_confirmations=minimum_request_confirmations,
                callback_gas_limit=callback_gas_limit,
                num_words=num_words,
                sender=sender,
            )
        log.debug("Request %d from %s (sub %d)", request_id, sender, sub_id)
        return request_id

    def fulfill_random_words(self, request_id: int, consumer: str) -> bool:
        return self.fulfill_random_words_with_override(request_id, consumer, None)

    def fulfill_random_words_with_override(
        self,
        request_id: int,
        consumer: str,
        words: Optional[Sequence[int]],
    ) -> bool:
        """
        Delivers random words to the consumer and charges the subscription.

        Returns whether the consumer callback succeeded. A failing callback is
        rolled back on its own and reported, it does not revert the
        fulfillment. An underfunded subscription reverts everything.
        """
        with self.ledger.transaction():
            request = self.requests.get(request_id)
            if request is None:
                raise NonexistentRequest(request_id)

            if words is None:
                words = [derive_random_word(request_id, i) for i in range(request.num_words)]
            elif len(words) != request.num_words:
                raise InvalidNumWords(len(words), request.num_words)

            del self.requests[request_id]

            target = self.ledger.contract_at(consumer)
            success = True
            try:
                target.raw_fulfill_random_words(
                    sender=self.address,
                    request_id=request_id,
                    random_words=list(words),
                )
            except (RaffleError, ValueError) as e:
                log.warning("Callback for request %d reverted: %s", request_id, e)
                success = False

            payment = self.base_fee + self.gas_price_link * request.callback_gas_limit
            sub = self._subscription(request.sub_id)
            if sub.balance < payment:
                raise InsufficientSubscriptionBalance(request.sub_id, sub.balance, payment)
            sub.balance -= payment

            self.ledger.emit(
                self.address,
                "RandomWordsFulfilled",
                request_id=request_id,
                output_seed=request_id,
                payment=payment,
                success=success,
            )
        return success
