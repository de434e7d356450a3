from __future__ import annotations

import json
from typing import Any, Dict, List

from .batch import BatchRaffleEngine
from .draw import make_rng, seed_to_int
from .exceptions import AuditVerificationError
from .models import Round, build_participants


def verify_audit(audit_path: str) -> Dict[str, Any]:
    with open(audit_path, "r", encoding="utf-8") as f:
        audit = json.load(f)

    meta = audit["metadata"]
    seed = meta["seed"]
    _, seed_hash_hex = seed_to_int(seed)
    if seed_hash_hex != meta["seed_hash_hex"]:
        raise AuditVerificationError(
            f"Seed hash mismatch: audit={meta['seed_hash_hex']} recomputed={seed_hash_hex}"
        )

    # Recreate the roster and rounds exactly as recorded
    participants = build_participants(audit["all_entrants"])
    rounds = [Round.from_record(r) for r in audit["rounds"]]
    engine = BatchRaffleEngine(
        participants,
        rounds,
        model_type=meta["model"],
        rng=make_rng(seed),
        shuffle_passes=int(meta["shuffle_passes"]),
    )
    result = engine.run_all(winner_count=int(meta["winners_per_round"]))

    expected: List[Dict[str, Any]] = audit["round_results"]
    if len(expected) != len(result.rounds):
        raise AuditVerificationError(
            f"Round count mismatch: audit={len(expected)} recomputed={len(result.rounds)}"
        )
    for want, got in zip(expected, result.rounds):
        if want["winners"] != got.winners:
            raise AuditVerificationError(
                f"Round {got.round_number} winners mismatch: "
                f"audit={want['winners']} recomputed={got.winners}"
            )
        if want["eliminated"] != got.eliminated:
            raise AuditVerificationError(
                f"Round {got.round_number} eliminations mismatch: "
                f"audit={want['eliminated']} recomputed={got.eliminated}"
            )

    return {
        "ok": True,
        "seed_hash_hex": seed_hash_hex,
        "model": meta["model"],
        "rounds": len(result.rounds),
        "winners": [w for r in result.rounds for w in r.winners],
    }
