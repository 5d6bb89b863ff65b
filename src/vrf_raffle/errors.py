from __future__ import annotations


class RaffleError(Exception):
    """Base class for every error that reverts a ledger transaction."""


# Raffle


class InsufficientPayment(RaffleError):
    def __init__(self, sent: int, required: int) -> None:
        super().__init__(f"Raffle: sent {sent} wei, entrance fee is {required} wei")
        self.sent = sent
        self.required = required


class RaffleNotOpen(RaffleError):
    def __init__(self) -> None:
        super().__init__("Raffle: not open")


class UpkeepNotNeeded(RaffleError):
    def __init__(self, balance: int, player_count: int, state: int) -> None:
        super().__init__(
            f"Raffle: upkeep not needed (balance={balance}, "
            f"players={player_count}, state={state})"
        )
        self.balance = balance
        self.player_count = player_count
        self.state = state


class TransferFailed(RaffleError):
    def __init__(self, recipient: str, amount: int) -> None:
        super().__init__(f"Raffle: transfer of {amount} wei to {recipient} failed")
        self.recipient = recipient
        self.amount = amount


class OnlyCoordinatorCanFulfill(RaffleError):
    def __init__(self, have: str, want: str) -> None:
        super().__init__(f"Only coordinator {want} can fulfill (caller {have})")
        self.have = have
        self.want = want


class UnknownRequest(RaffleError):
    def __init__(self, request_id: int) -> None:
        super().__init__(f"Raffle: no pending request {request_id}")
        self.request_id = request_id


# Ledger


class InsufficientBalance(RaffleError):
    def __init__(self, account: str, balance: int, needed: int) -> None:
        super().__init__(f"{account}: balance {balance} is below {needed}")
        self.account = account
        self.balance = balance
        self.needed = needed


class UnknownContract(RaffleError):
    def __init__(self, address: str) -> None:
        super().__init__(f"No contract deployed at {address}")
        self.address = address


# Coordinator


class InvalidSubscription(RaffleError):
    def __init__(self, sub_id: int) -> None:
        super().__init__(f"Coordinator: invalid subscription {sub_id}")
        self.sub_id = sub_id


class InvalidConsumer(RaffleError):
    def __init__(self, sub_id: int, consumer: str) -> None:
        super().__init__(f"Coordinator: {consumer} is not a consumer of subscription {sub_id}")
        self.sub_id = sub_id
        self.consumer = consumer


class InvalidNumWords(RaffleError):
    def __init__(self, have: int, want: int) -> None:
        super().__init__(f"Coordinator: requested {have} words, max is {want}")
        self.have = have
        self.want = want


class MustBeSubOwner(RaffleError):
    def __init__(self, owner: str) -> None:
        super().__init__(f"Coordinator: must be subscription owner {owner}")
        self.owner = owner


class NonexistentRequest(RaffleError):
    def __init__(self, request_id: int) -> None:
        super().__init__(f"Coordinator: nonexistent request {request_id}")
        self.request_id = request_id


class InsufficientSubscriptionBalance(RaffleError):
    def __init__(self, sub_id: int, balance: int, payment: int) -> None:
        super().__init__(
            f"Coordinator: subscription {sub_id} balance {balance} cannot cover {payment}"
        )
        self.sub_id = sub_id
        self.balance = balance
        self.payment = payment
