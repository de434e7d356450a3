from __future__ import annotations

import unittest

from raffle_engine.eligibility import eligible, pool_statuses
from raffle_engine.exceptions import ParticipantDataError
from raffle_engine.models import Participant, ParticipantStatus, Round
from raffle_engine.raffle_models import (
    RaffleModel,
    RaffleModelProperties,
    RaffleModelType,
    get_raffle_model,
)
from raffle_engine.tickets import tickets, total_tickets


class TicketCalculatorTests(unittest.TestCase):
    def test_one_ticket_per_full_hundred(self) -> None:
        self.assertEqual(tickets(0), 0)
        self.assertEqual(tickets(99), 0)
        self.assertEqual(tickets(100), 1)
        self.assertEqual(tickets(6950), 69)

    def test_invalid_points_raise(self) -> None:
        with self.assertRaises(ParticipantDataError):
            tickets(-1)
        with self.assertRaises(ParticipantDataError):
            tickets(12.5)  # type: ignore[arg-type]
        with self.assertRaises(ParticipantDataError):
            tickets(True)  # type: ignore[arg-type]

    def test_participant_tickets_follow_points(self) -> None:
        for points in (0, 50, 100, 1234, 6900):
            self.assertEqual(Participant("t", points).tickets, points // 100)

    def test_total_tickets(self) -> None:
        roster = [Participant("a", 250), Participant("b", 99), Participant("c", 1000)]
        self.assertEqual(total_tickets(roster), 12)


class ParticipantRecordTests(unittest.TestCase):
    def test_from_record(self) -> None:
        p = Participant.from_record(
            {
                "Team": " Falcons ",
                "Points": 6900.0,
                "Submissions": 12,
                "Last Submission": "2024-05-01",
            }
        )
        self.assertEqual(p.id, "Falcons")
        self.assertEqual(p.points, 6900)
        self.assertEqual(p.tickets, 69)
        self.assertEqual(p.status, ParticipantStatus.ELIGIBLE)
        self.assertEqual(p.to_record()["Last Submission"], "2024-05-01")

    def test_bad_records_raise(self) -> None:
        with self.assertRaises(ParticipantDataError):
            Participant.from_record({"Points": 100})
        with self.assertRaises(ParticipantDataError):
            Participant.from_record({"Team": "x"})
        with self.assertRaises(ParticipantDataError):
            Participant.from_record({"Team": "x", "Points": -5})
        with self.assertRaises(ParticipantDataError):
            Participant.from_record({"Team": "x", "Points": 100, "status": "champion"})


class EligibilityFilterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.rounds = [Round(1, "R1", 0), Round(2, "R2", 250), Round(3, "R3", 500)]

    def test_threshold_gates_low_scorers(self) -> None:
        low = Participant("low", 100)
        high = Participant("high", 1500)
        roster = [low, high]

        self.assertEqual(eligible(roster, self.rounds[0]), [low, high])
        self.assertEqual(eligible(roster, self.rounds[1]), [high])
        self.assertEqual(eligible(roster, self.rounds[2]), [high])

    def test_zero_ticket_participants_never_qualify(self) -> None:
        roster = [Participant("zero", 99), Participant("one", 100)]
        self.assertEqual([p.id for p in eligible(roster, self.rounds[0])], ["one"])

    def test_non_pool_statuses_are_excluded(self) -> None:
        roster = [Participant(name, 1000) for name in "abcde"]
        roster[1].status = ParticipantStatus.WINNER
        roster[2].status = ParticipantStatus.WITHDRAWN
        roster[3].status = ParticipantStatus.PENDING_WINNER
        roster[4].status = ParticipantStatus.REMOVED
        self.assertEqual([p.id for p in eligible(roster, self.rounds[0])], ["a"])

    def test_empty_result_is_not_an_error(self) -> None:
        self.assertEqual(eligible([], self.rounds[0]), [])
        self.assertEqual(eligible([Participant("a", 100)], Round(9, "Hi", 10_000)), [])

    def test_model_that_keeps_winners_in_pool(self) -> None:
        keep_winners = RaffleModel(
            type=RaffleModelType.WEIGHTED_CONTINUOUS,
            name="Keep winners",
            description="",
            properties=RaffleModelProperties(
                remove_winners=False, weighted_system=True, drop_off_after_round=False
            ),
        )
        winner = Participant("w", 500)
        winner.status = ParticipantStatus.WINNER
        self.assertEqual(eligible([winner], self.rounds[0], keep_winners), [winner])
        self.assertEqual(eligible([winner], self.rounds[0]), [])
        self.assertIn(ParticipantStatus.WINNER, pool_statuses(keep_winners))
        self.assertNotIn(
            ParticipantStatus.WINNER,
            pool_statuses(get_raffle_model(RaffleModelType.WEIGHTED_CONTINUOUS)),
        )


if __name__ == "__main__":
    unittest.main()
