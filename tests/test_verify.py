import json

import pytest

from vrf_raffle.draw import DrawAudit, pick_winner, winner_index
from vrf_raffle.verify import verify_audit, write_audit

PLAYERS = ["0xaaa", "0xbbb", "0xccc"]


def _audit(**overrides):
    fields = dict(
        raffle="0xraffle",
        request_id=1,
        random_words=[7],
        players=PLAYERS,
        winner_index=1,
        winner="0xbbb",
        prize=3 * 10**16,
        timestamp=1_700_000_040,
    )
    fields.update(overrides)
    return DrawAudit(**fields)


def test_winner_index():
    assert winner_index(7, 3) == 1
    assert winner_index(2**256 - 1, 1) == 0
    with pytest.raises(ValueError):
        winner_index(7, 0)


def test_pick_winner_uses_first_word():
    assert pick_winner([7, 0], PLAYERS) == (1, "0xbbb")
    with pytest.raises(ValueError):
        pick_winner([], PLAYERS)


def test_audit_stores_words_as_strings(tmp_path):
    path = tmp_path / "audit.json"
    write_audit(_audit(random_words=[2**255]), str(path))

    data = json.loads(path.read_text())
    assert data["random_words"] == [str(2**255)]
    assert DrawAudit.from_json(data).random_words == [2**255]


def test_verify_valid_audit(tmp_path):
    path = tmp_path / "audit.json"
    write_audit(_audit(), str(path))

    result = verify_audit(str(path))
    assert result["ok"]
    assert result["winner"] == "0xbbb"
    assert result["winner_index"] == 1
    assert result["players"] == 3


def test_verify_detects_tampered_winner(tmp_path):
    path = tmp_path / "audit.json"
    write_audit(_audit(winner="0xccc"), str(path))
    with pytest.raises(RuntimeError, match="Winner mismatch"):
        verify_audit(str(path))


def test_verify_detects_tampered_index(tmp_path):
    path = tmp_path / "audit.json"
    write_audit(_audit(winner_index=2), str(path))
    with pytest.raises(RuntimeError, match="Winner index mismatch"):
        verify_audit(str(path))


def test_verify_rejects_audit_without_players(tmp_path):
    path = tmp_path / "audit.json"
    write_audit(_audit(players=[]), str(path))
    with pytest.raises(RuntimeError, match="no players"):
        verify_audit(str(path))
