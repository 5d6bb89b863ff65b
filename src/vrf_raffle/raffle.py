"""
Raffle state machine.

Players pay the entrance fee to enter while the raffle is OPEN. Once the
interval has elapsed and there is at least one player, anyone may trigger
a draw: the raffle closes (CALCULATING) and asks the coordinator for a
random word. The coordinator later calls back with the word, the winner at
`word % players` receives the whole pot and a new round opens.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Dict, List, Sequence, Tuple, cast

from .coordinator import VRFCoordinator
from .draw import pick_winner
from .errors import (
    InsufficientPayment,
    OnlyCoordinatorCanFulfill,
    RaffleNotOpen,
    TransferFailed,
    UnknownRequest,
    UpkeepNotNeeded,
)
from .ledger import Contract, Ledger
from .project_constants import ZERO_ADDRESS

log = logging.getLogger(__name__)


class RaffleState(IntEnum):
    OPEN = 0
    CALCULATING = 1


class Raffle(Contract):
    REQUEST_CONFIRMATIONS = 3
    NUM_WORDS = 1

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        vrf_coordinator: str,
        entrance_fee: int,
        gas_lane: str,
        subscription_id: int,
        callback_gas_limit: int,
        interval: int,
    ) -> None:
        super().__init__(ledger, address)
        self._vrf_coordinator = vrf_coordinator
        self._entrance_fee = entrance_fee
        self._gas_lane = gas_lane
        self._subscription_id = subscription_id
        self._callback_gas_limit = callback_gas_limit
        self._interval = interval

        self._players: List[str] = []
        self._state = RaffleState.OPEN
        self._last_timestamp = ledger.timestamp
        self._recent_winner = ZERO_ADDRESS
        # request id -> player count when the draw was requested
        self._pending_requests: Dict[int, int] = {}

    # Entry

    def enter_raffle(self, sender: str, value: int) -> None:
        with self.ledger.transaction():
            if value < self._entrance_fee:
                raise InsufficientPayment(value, self._entrance_fee)
            if self._state != RaffleState.OPEN:
                raise RaffleNotOpen()
            self.ledger.transfer(sender, self.address, value)
            self._players.append(sender)
            self.ledger.emit(self.address, "RaffleEnter", player=sender)
        log.debug("%s entered raffle %s", sender, self.address)

    # Upkeep

    def check_upkeep(self, check_data: bytes = b"") -> Tuple[bool, bytes]:
        """
        Whether a draw should be triggered now.

        True only when the raffle is open, more than `interval` seconds have
        passed since the last draw, and there are players and funds.
        """
        is_open = self._state == RaffleState.OPEN
        time_passed = (self.ledger.timestamp - self._last_timestamp) > self._interval
        has_players = len(self._players) > 0
        has_balance = self.balance > 0
        return is_open and time_passed and has_players and has_balance, b""

    def perform_upkeep(self, sender: str, perform_data: bytes = b"") -> int:
        with self.ledger.transaction():
            upkeep_needed, _ = self.check_upkeep(b"")
            if not upkeep_needed:
                raise UpkeepNotNeeded(self.balance, len(self._players), int(self._state))

            self._state = RaffleState.CALCULATING
            coordinator = cast(VRFCoordinator, self.ledger.contract_at(self._vrf_coordinator))
            request_id = coordinator.request_random_words(
                sender=self.address,
                key_hash=self._gas_lane,
                sub_id=self._subscription_id,
                minimum_request_confirmations=self.REQUEST_CONFIRMATIONS,
                callback_gas_limit=self._callback_gas_limit,
                num_words=self.NUM_WORDS,
            )
            self._pending_requests[request_id] = len(self._players)
            self.ledger.emit(self.address, "RequestedRaffleWinner", request_id=request_id)
        log.info("Raffle %s requested winner (request %d, triggered by %s)", self.address, request_id, sender)
        return request_id

    # Oracle callback

    def raw_fulfill_random_words(
        self, sender: str, request_id: int, random_words: Sequence[int]
    ) -> str:
        if sender != self._vrf_coordinator:
            raise OnlyCoordinatorCanFulfill(sender, self._vrf_coordinator)
        return self._fulfill_random_words(request_id, random_words)

    def _fulfill_random_words(self, request_id: int, random_words: Sequence[int]) -> str:
        with self.ledger.transaction():
            if request_id not in self._pending_requests:
                raise UnknownRequest(request_id)

            _, winner = pick_winner(random_words, self._players)
            self._recent_winner = winner
            self._state = RaffleState.OPEN
            self._players = []
            self._last_timestamp = self.ledger.timestamp
            del self._pending_requests[request_id]

            prize = self.balance
            if not self.ledger.send(self.address, winner, prize):
                raise TransferFailed(winner, prize)
            self.ledger.emit(self.address, "WinnerPicked", winner=winner)
        log.info("Raffle %s winner %s (prize %d wei)", self.address, winner, prize)
        return winner

    # Views

    @property
    def entrance_fee(self) -> int:
        return self._entrance_fee

    @property
    def interval(self) -> int:
        return self._interval

    def get_player(self, index: int) -> str:
        if index < 0 or index >= len(self._players):
            raise IndexError(f"No player at index {index}")
        return self._players[index]

    @property
    def players(self) -> List[str]:
        return list(self._players)

    @property
    def number_of_players(self) -> int:
        return len(self._players)

    @property
    def recent_winner(self) -> str:
        return self._recent_winner

    @property
    def raffle_state(self) -> RaffleState:
        return self._state

    @property
    def last_timestamp(self) -> int:
        return self._last_timestamp

    @property
    def num_words(self) -> int:
        return self.NUM_WORDS

    @property
    def request_confirmations(self) -> int:
        return self.REQUEST_CONFIRMATIONS

    @property
    def vrf_coordinator(self) -> str:
        return self._vrf_coordinator

    @property
    def gas_lane(self) -> str:
        return self._gas_lane

    @property
    def subscription_id(self) -> int:
        return self._subscription_id

    @property
    def callback_gas_limit(self) -> int:
        return self._callback_gas_limit

    def pending_request_players(self, request_id: int) -> int:
        if request_id not in self._pending_requests:
            raise UnknownRequest(request_id)
        return self._pending_requests[request_id]
