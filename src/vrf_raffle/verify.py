from __future__ import annotations

import json
from typing import Any, Dict

from .draw import DrawAudit, pick_winner


def write_audit(audit: DrawAudit, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(audit.to_json(), f, indent=2)


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = DrawAudit.from_json(json.load(f))

    if not audit.players:
        raise RuntimeError("Audit lists no players.")
    if not audit.random_words:
        raise RuntimeError("Audit lists no random words.")

    idx, winner = pick_winner(audit.random_words, audit.players)
    if idx != audit.winner_index:
        raise RuntimeError(
            f"Winner index mismatch: audit={audit.winner_index} recomputed={idx}"
        )
    if winner != audit.winner:
        raise RuntimeError(f"Winner mismatch: audit={audit.winner} recomputed={winner}")

    return {
        "ok": True,
        "raffle": audit.raffle,
        "request_id": audit.request_id,
        "winner": winner,
        "winner_index": idx,
        "players": len(audit.players),
        "prize": audit.prize,
    }
