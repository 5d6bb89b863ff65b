from __future__ import annotations

import argparse
import logging
from typing import Optional

from .config import Settings
from .coordinator import derive_random_word
from .deploy import deploy_raffle
from .draw import DrawAudit, winner_index
from .errors import RaffleError
from .keeper import Keeper
from .ledger import Ledger
from .project_constants import (
    NETWORK_CONFIG,
    WEI_PER_ETHER,
    is_development_network,
    to_ether,
)
from .rpc import RpcClient
from .verify import verify_audit, write_audit

# Starting balance of each simulated player
PLAYER_FUNDS = 10 * WEI_PER_ETHER


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def cmd_networks(args: argparse.Namespace) -> int:
    for chain_id, cfg in sorted(NETWORK_CONFIG.items()):
        kind = "development" if is_development_network(cfg.name) else "live"
        print(f"{cfg.name} (chain {chain_id}, {kind})")
        print(f"  Entrance fee      : {to_ether(cfg.entrance_fee)} ETH")
        print(f"  Interval          : {cfg.interval} s")
        print(f"  Gas lane          : {cfg.gas_lane}")
        print(f"  Callback gas limit: {cfg.callback_gas_limit}")
        if cfg.vrf_coordinator:
            print(f"  Coordinator       : {cfg.vrf_coordinator}")
            print(f"  Subscription      : {cfg.subscription_id}")
    return 0


def cmd_chain_info(args: argparse.Namespace) -> int:
    settings = Settings.from_env(rpc_url_override=args.rpc_url)
    if not settings.rpc_url:
        raise SystemExit("Missing RPC_URL. Put it in .env or pass --rpc-url.")

    rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
    try:
        chain_id = rpc.get_chain_id()
        block_number = rpc.get_block_number()
        timestamp = rpc.get_block_timestamp(block_number)
    finally:
        rpc.close()

    cfg = NETWORK_CONFIG.get(chain_id)
    print(f"Chain id      : {chain_id}")
    print(f"Network       : {cfg.name if cfg else '(not configured)'}")
    print(f"Latest block  : {block_number}")
    print(f"Block time    : {timestamp}")
    return 0


def cmd_simulate(args: argparse.Namespace) -> int:
    settings = Settings.from_env(network_override=args.network, rpc_url_override=args.rpc_url)
    log = logging.getLogger("simulate")

    start_time: Optional[int] = None
    chain_id: Optional[int] = None
    if settings.rpc_url:
        rpc = RpcClient(settings.rpc_url, timeout_s=args.timeout)
        try:
            chain_id = rpc.get_chain_id()
            start_time = rpc.get_block_timestamp("latest")
        finally:
            rpc.close()
        log.info("Chain id          : %d", chain_id)
        log.info("Chain time        : %d", start_time)

    network = settings.network
    if chain_id is not None and not args.network and chain_id in NETWORK_CONFIG:
        network = NETWORK_CONFIG[chain_id].name

    ledger = Ledger(timestamp=start_time)
    deployer = ledger.generate_address("deployer")
    try:
        deployment = deploy_raffle(ledger, network, deployer, chain_id=chain_id)
    except (RaffleError, RuntimeError) as e:
        raise SystemExit(f"Deployment failed: {e}")
    raffle = deployment.raffle
    coordinator = deployment.coordinator

    if args.players <= 0:
        raise SystemExit("Need at least one player.")
    for i in range(args.players):
        player = ledger.generate_address(f"player{i}")
        ledger.set_balance(player, PLAYER_FUNDS)
        raffle.enter_raffle(sender=player, value=raffle.entrance_fee)
    log.info("Players entered   : %d", raffle.number_of_players)

    ledger.time_travel(raffle.interval + 1)
    ledger.mine()

    keeper = Keeper(raffle, ledger.generate_address("keeper"))
    request_id = keeper.poll()
    if request_id is None:
        raise SystemExit("Upkeep was not needed; nothing drawn.")

    if not hasattr(coordinator, "fulfill_random_words_with_override"):
        raise SystemExit("Only development coordinators can be fulfilled locally.")

    players = raffle.players
    prize = raffle.balance
    words = [args.random_word] if args.random_word is not None else None
    ok = coordinator.fulfill_random_words_with_override(request_id, raffle.address, words)
    if not ok:
        raise SystemExit("Randomness callback reverted; raffle is still calculating.")

    fulfilled = ledger.events_named("RandomWordsFulfilled", coordinator.address)[-1]
    random_words = (
        list(words) if words is not None else _derived_words(request_id, raffle.num_words)
    )
    audit = DrawAudit(
        raffle=raffle.address,
        request_id=request_id,
        random_words=random_words,
        players=players,
        winner_index=winner_index(random_words[0], len(players)),
        winner=raffle.recent_winner,
        prize=prize,
        timestamp=fulfilled.timestamp,
    )
    write_audit(audit, args.out)

    print("========================================")
    print("🔒 VRF RAFFLE DRAW")
    print("========================================")
    print(f"Network       : {deployment.network.name}")
    print(f"Raffle        : {raffle.address}")
    print(f"Request id    : {request_id}")
    print(f"Random word   : {random_words[0]}")
    print("----------------------------------------")
    print("🏆 WINNER")
    print(f"Address       : {audit.winner}")
    print(f"Index         : {audit.winner_index} of {len(players)}")
    print(f"Prize         : {to_ether(prize)} ETH")
    print("----------------------------------------")
    print(f"🧾 Wrote audit: {args.out}")
    return 0


def _derived_words(request_id: int, count: int) -> list[int]:
    return [derive_random_word(request_id, i) for i in range(count)]


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("✅ AUDIT VERIFIED")
    print(f"Raffle        : {result['raffle']}")
    print(f"Request id    : {result['request_id']}")
    print(f"Winner        : {result['winner']}")
    print(f"Winner index  : {result['winner_index']} of {result['players']}")
    print(f"Prize         : {to_ether(result['prize'])} ETH")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vrf-raffle",
        description="Provably fair raffle driven by a VRF coordinator.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env).")
    p.add_argument("--timeout", type=float, default=60.0, help="RPC timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    n = sub.add_parser("networks", help="List configured networks.")
    n.set_defaults(func=cmd_networks)

    c = sub.add_parser("chain-info", help="Show chain id and latest block of the RPC node.")
    c.set_defaults(func=cmd_chain_info)

    s = sub.add_parser(
        "simulate", help="Deploy on a local ledger, run one round and write an audit JSON."
    )
    s.add_argument("--network", default=None, help="Network name (else RAFFLE_NETWORK).")
    s.add_argument("--players", type=int, default=3, help="Number of entrants.")
    s.add_argument(
        "--random-word",
        type=int,
        default=None,
        help="Random word the mock coordinator delivers (else derived from request id).",
    )
    s.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    s.set_defaults(func=cmd_simulate)

    v = sub.add_parser("verify", help="Verify an existing audit.json deterministically.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
