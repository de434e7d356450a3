from __future__ import annotations

import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

from raffle_engine.cli import build_parser
from raffle_engine.config import Settings
from raffle_engine.exceptions import AuditVerificationError, UnknownRaffleModelError
from raffle_engine.project_constants import DEFAULT_SHUFFLE_PASSES
from raffle_engine.raffle_models import RaffleModelType
from raffle_engine.verify import verify_audit

TEAMS = [
    {"Team": f"Team {i}", "Points": 250 * i, "Submissions": i, "Last Submission": "2024-06-01"}
    for i in range(1, 13)
]

_CLEAN_ENV = {"RAFFLE_SEED": "", "RAFFLE_MODEL": "", "RAFFLE_SHUFFLE_PASSES": ""}


class DrawAuditTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name
        self.teams_path = os.path.join(self.tmp, "teams.json")
        with open(self.teams_path, "w", encoding="utf-8") as f:
            json.dump(TEAMS, f)
        self.audit_path = os.path.join(self.tmp, "audit.json")
        self._env = mock.patch.dict(os.environ, _CLEAN_ENV)
        self._env.start()

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def _run(self, *argv: str) -> int:
        args = build_parser().parse_args(list(argv))
        with redirect_stdout(io.StringIO()):
            return args.func(args)

    def _draw(self, model: str) -> dict:
        code = self._run(
            "--seed", "spring-gala", "--model", model,
            "draw", "--teams", self.teams_path, "--out", self.audit_path,
        )
        self.assertEqual(code, 0)
        with open(self.audit_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def test_draw_writes_verifiable_audit(self) -> None:
        for model in ("weighted_continuous", "uniform_elimination"):
            audit = self._draw(model)
            self.assertEqual(audit["metadata"]["model"], model)
            self.assertEqual(audit["metadata"]["seed"], "spring-gala")
            self.assertEqual(len(audit["round_results"]), 5)
            self.assertEqual(len(audit["all_entrants"]), len(TEAMS))

            result = verify_audit(self.audit_path)
            self.assertTrue(result["ok"])
            self.assertEqual(
                result["winners"],
                [w for r in audit["round_results"] for w in r["winners"]],
            )

    def test_tampered_audit_fails(self) -> None:
        audit = self._draw("weighted_continuous")
        first = audit["round_results"][0]["winners"][0]
        other = next(t["Team"] for t in TEAMS if t["Team"] != first)
        audit["round_results"][0]["winners"] = [other]
        with open(self.audit_path, "w", encoding="utf-8") as f:
            json.dump(audit, f)
        with self.assertRaises(AuditVerificationError):
            verify_audit(self.audit_path)

    def test_tampered_seed_hash_fails(self) -> None:
        audit = self._draw("weighted_continuous")
        audit["metadata"]["seed_hash_hex"] = "00" * 32
        with open(self.audit_path, "w", encoding="utf-8") as f:
            json.dump(audit, f)
        with self.assertRaises(AuditVerificationError):
            verify_audit(self.audit_path)

    def test_odds_and_rounds_commands(self) -> None:
        self.assertEqual(self._run("odds", "--teams", self.teams_path), 0)
        self.assertEqual(self._run("odds", "--teams", self.teams_path, "--round", "5"), 0)

        rounds_path = os.path.join(self.tmp, "rounds.json")
        self.assertEqual(
            self._run("rounds", "--teams", self.teams_path, "--count", "3", "--out", rounds_path),
            0,
        )
        with open(rounds_path, "r", encoding="utf-8") as f:
            rounds = json.load(f)
        self.assertEqual([r["pointThreshold"] for r in rounds], [0, 0, 0])


class SettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict(os.environ, _CLEAN_ENV):
            settings = Settings.from_env()
        self.assertIsNone(settings.seed)
        self.assertEqual(settings.model_type, RaffleModelType.WEIGHTED_CONTINUOUS)
        self.assertEqual(settings.shuffle_passes, DEFAULT_SHUFFLE_PASSES)

    def test_environment_and_overrides(self) -> None:
        env = {
            "RAFFLE_SEED": "from-env",
            "RAFFLE_MODEL": "uniform_elimination",
            "RAFFLE_SHUFFLE_PASSES": "3",
        }
        with mock.patch.dict(os.environ, env):
            settings = Settings.from_env()
            overridden = Settings.from_env(
                seed_override="cli", model_override="weighted_continuous"
            )
        self.assertEqual(settings.seed, "from-env")
        self.assertEqual(settings.model_type, RaffleModelType.UNIFORM_ELIMINATION)
        self.assertEqual(settings.shuffle_passes, 3)
        self.assertEqual(overridden.seed, "cli")
        self.assertEqual(overridden.model_type, RaffleModelType.WEIGHTED_CONTINUOUS)

    def test_invalid_values(self) -> None:
        with mock.patch.dict(os.environ, dict(_CLEAN_ENV, RAFFLE_SHUFFLE_PASSES="many")):
            with self.assertRaises(RuntimeError):
                Settings.from_env()
        with mock.patch.dict(os.environ, dict(_CLEAN_ENV, RAFFLE_MODEL="lucky_dip")):
            with self.assertRaises(UnknownRaffleModelError):
                Settings.from_env()


if __name__ == "__main__":
    unittest.main()
