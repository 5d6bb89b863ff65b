from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence


@dataclass(frozen=True)
class DrawAudit:
    raffle: str
    request_id: int
    random_words: List[int]
    players: List[str]
    winner_index: int
    winner: str
    prize: int
    timestamp: int

    def to_json(self) -> Dict[str, Any]:
        out = asdict(self)
        # uint256 words do not survive every JSON reader; store as strings.
        out["random_words"] = [str(w) for w in self.random_words]
        return out

    @staticmethod
    def from_json(data: Dict[str, Any]) -> "DrawAudit":
        return DrawAudit(
            raffle=data["raffle"],
            request_id=int(data["request_id"]),
            random_words=[int(w) for w in data["random_words"]],
            players=list(data["players"]),
            winner_index=int(data["winner_index"]),
            winner=data["winner"],
            prize=int(data["prize"]),
            timestamp=int(data["timestamp"]),
        )


def winner_index(random_word: int, player_count: int) -> int:
    if player_count <= 0:
        raise ValueError("Cannot pick a winner without players.")
    return random_word % player_count


def pick_winner(random_words: Sequence[int], players: Sequence[str]) -> tuple[int, str]:
    if not random_words:
        raise ValueError("No random words delivered.")
    idx = winner_index(random_words[0], len(players))
    return idx, players[idx]
