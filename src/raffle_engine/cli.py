from __future__ import annotations

import argparse
import json
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List

from .batch import BatchRaffleEngine
from .config import Settings
from .draw import make_rng, seed_to_int
from .eligibility import eligible
from .models import Participant, Round, build_participants
from .odds import format_odds, odds_by_round, odds_for_round
from .project_constants import TOOL_NAME, TOOL_VERSION
from .raffle_models import get_raffle_model
from .rounds import default_rounds, generate_optimal_rounds, validate_rounds
from .tickets import total_tickets
from .verify import verify_audit


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def load_json_list(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise SystemExit(f"{path}: expected a JSON list of records.")
    return data


def load_teams(path: str) -> List[Participant]:
    return build_participants(load_json_list(path))


def load_rounds(path: str | None) -> List[Round]:
    if not path:
        return default_rounds()
    return validate_rounds(Round.from_record(r) for r in load_json_list(path))


def cmd_odds(args: argparse.Namespace) -> int:
    settings = Settings.from_env(model_override=args.model)
    model = get_raffle_model(settings.model_type)
    teams = load_teams(args.teams)
    rounds = load_rounds(args.rounds)

    if args.round is not None:
        table = odds_for_round(teams, rounds, args.round, model=model)
        print(f"Round id {args.round}")
        for team in teams:
            print(f"{team.id:<30} {team.tickets:>6} tickets  {format_odds(table[team.id])}")
        return 0

    matrix = odds_by_round(teams, rounds, model=model)
    print("Team".ljust(30) + "".join(r.name[:12].rjust(14) for r in rounds))
    for team in teams:
        row = "".join(format_odds(v).rjust(14) for v in matrix[team.id])
        print(team.id[:30].ljust(30) + row)
    print("-" * (30 + 14 * len(rounds)))
    print(
        "Pool size".ljust(30)
        + "".join(str(len(eligible(teams, r))).rjust(14) for r in rounds)
    )
    return 0


def cmd_rounds(args: argparse.Namespace) -> int:
    settings = Settings.from_env(model_override=args.model)
    teams = load_teams(args.teams) if args.teams else []
    rounds = generate_optimal_rounds(
        [t.points for t in teams], args.count, settings.model_type
    )
    text = json.dumps([r.to_record() for r in rounds], indent=2)
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"Wrote {len(rounds)} rounds: {args.out}")
    else:
        print(text)
    return 0


def cmd_draw(args: argparse.Namespace) -> int:
    settings = Settings.from_env(seed_override=args.seed, model_override=args.model)
    log = logging.getLogger("draw")

    seed = settings.seed or secrets.token_hex(16)
    _, seed_hash_hex = seed_to_int(seed)
    log.info("Seed             : %s", seed)
    log.info("Seed SHA-256     : %s", seed_hash_hex)

    teams = load_teams(args.teams)
    rounds = load_rounds(args.rounds)
    model = get_raffle_model(settings.model_type)
    log.info("Participants     : %d", len(teams))
    log.info("Total tickets    : %d", total_tickets(teams))
    log.info("Model            : %s", model.name)

    entrants = [
        {
            "Team": t.id,
            "Points": t.points,
            "Submissions": t.submissions,
            "Last Submission": t.last_submission,
        }
        for t in teams
    ]

    engine = BatchRaffleEngine(
        teams,
        rounds,
        model_type=model.type,
        rng=make_rng(seed),
        shuffle_passes=settings.shuffle_passes,
    )
    result = engine.run_all(winner_count=args.winners_per_round)

    audit: Dict[str, Any] = {
        "metadata": {
            "tool": TOOL_NAME,
            "version": TOOL_VERSION,
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "seed": seed,
            "seed_hash_hex": seed_hash_hex,
            "model": model.type.value,
            "shuffle_passes": settings.shuffle_passes,
            "winners_per_round": args.winners_per_round,
            "total_participants": result.total_participants,
            "total_tickets": total_tickets(teams),
        },
        "rounds": [r.to_record() for r in rounds],
        # Entrants in input order so anyone can re-run the draw.
        "all_entrants": entrants,
        "round_results": [r.to_dict() for r in result.rounds],
        "final_winners": [
            {"team": p.id, "round": p.won_in_round, "points": p.points}
            for p in result.final_winners
        ],
    }

    with open(args.out, "w", encoding="utf-8") as f:
        json.dump(audit, f, indent=2)

    print("========================================")
    print("RAFFLE DRAW")
    print("========================================")
    print(f"Model         : {model.name}")
    print(f"Seed          : {seed}")
    print(f"Seed SHA-256  : {seed_hash_hex}")
    print("----------------------------------------")
    for record in result.rounds:
        name = rounds[record.round_number - 1].name
        winners = ", ".join(record.winners) or "(no eligible participants)"
        print(f"{name:<14}: {winners}")
        if record.eliminated:
            print(f"{'':<14}  eliminated {len(record.eliminated)}")
    print("----------------------------------------")
    print(f"Wrote audit: {args.out}")
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    result = verify_audit(args.audit)
    print("AUDIT VERIFIED")
    print(f"Model         : {result['model']}")
    print(f"Rounds        : {result['rounds']}")
    print(f"Winners       : {', '.join(result['winners'])}")
    print(f"Seed SHA-256  : {result['seed_hash_hex']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="raffle-engine",
        description="Ticket-weighted, round-gated raffle drawing tool.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument("--seed", default=None, help="Seed text (else RAFFLE_SEED or random).")
    p.add_argument(
        "--model",
        default=None,
        help="Raffle model: weighted_continuous or uniform_elimination (else RAFFLE_MODEL).",
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    o = sub.add_parser("odds", help="Show each team's odds per round.")
    o.add_argument("--teams", required=True, help="Path to teams JSON.")
    o.add_argument("--rounds", default=None, help="Path to rounds JSON (else defaults).")
    o.add_argument("--round", type=int, default=None, help="Only this round id.")
    o.set_defaults(func=cmd_odds)

    r = sub.add_parser("rounds", help="Generate a round configuration.")
    r.add_argument("--teams", default=None, help="Path to teams JSON.")
    r.add_argument("--count", type=int, required=True, help="Number of rounds.")
    r.add_argument("--out", default=None, help="Write rounds JSON here (else stdout).")
    r.set_defaults(func=cmd_rounds)

    d = sub.add_parser("draw", help="Run every round and write an audit JSON.")
    d.add_argument("--teams", required=True, help="Path to teams JSON.")
    d.add_argument("--rounds", default=None, help="Path to rounds JSON (else defaults).")
    d.add_argument("--winners-per-round", type=int, default=1)
    d.add_argument("--out", default="audit.json", help="Audit output JSON path.")
    d.set_defaults(func=cmd_draw)

    v = sub.add_parser("verify", help="Replay an audit.json from its seed.")
    v.add_argument("--audit", required=True, help="Path to audit.json.")
    v.set_defaults(func=cmd_verify)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    raise SystemExit(args.func(args))
