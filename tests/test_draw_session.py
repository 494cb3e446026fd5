from __future__ import annotations

import random
import threading
import unittest

from luckydraw.draw import DrawSession, Participant, Prize
from luckydraw.errors import (
    AlreadyDrawn,
    InvalidNumber,
    InvalidPrizeAmount,
    MalformedRecord,
    NoAvailableParticipants,
    NoWinnersToRevoke,
    RedrawAmountExceedsCapacity,
    RevokedWinnerMismatch,
    UnknownPrize,
    WinnersNotYetDrawn,
)


def _ids(participants):
    return {p.id for p in participants}


class DrawSessionTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.draw = DrawSession("office-party", rng=random.Random(1234))
        self.draw.load_participants([("A", "Alice"), ("B", "Bob"), ("C", "Carol")])

    def assert_winners_disjoint(self) -> None:
        seen: set[str] = set()
        for winners in self.draw.all_winners().values():
            ids = [w.id for w in winners]
            self.assertEqual(len(ids), len(set(ids)))
            self.assertFalse(seen & set(ids))
            seen.update(ids)


class RegistryTests(DrawSessionTestCase):
    def test_set_prize_overwrites(self) -> None:
        self.draw.set_prize(1, "Bike", 1, "Road bike")
        self.draw.set_prize(1, "Car", 2, "Small car")
        self.assertEqual(self.draw.prize(1), Prize(no=1, name="Car", amount=2, desc="Small car"))
        self.assertIsNone(self.draw.prize(2))

    def test_prizes_sorted_by_number(self) -> None:
        self.draw.load_prizes([("3", "C", "1", ""), ("1", "A", "1", ""), ("2", "B", "1", "")])
        self.assertEqual([p.no for p in self.draw.prizes()], [1, 2, 3])
        self.assertEqual([p.no for p in self.draw.prizes(descending=True)], [3, 2, 1])

    def test_load_prizes_trims_numbers(self) -> None:
        self.draw.load_prizes([(" 7 ", "Lamp", " 4", "Desk lamp")])
        self.assertEqual(self.draw.prize(7), Prize(no=7, name="Lamp", amount=4, desc="Desk lamp"))

    def test_load_prizes_replaces_previous_map(self) -> None:
        self.draw.set_prize(9, "Old", 1, "")
        self.draw.load_prizes([("1", "New", "1", "")])
        self.assertEqual([p.no for p in self.draw.prizes()], [1])

    def test_load_prizes_wrong_field_count(self) -> None:
        with self.assertRaises(MalformedRecord):
            self.draw.load_prizes([("1", "Bike", "1")])

    def test_load_prizes_invalid_number_keeps_previous_map(self) -> None:
        self.draw.set_prize(5, "Kept", 1, "")
        with self.assertRaises(InvalidNumber):
            self.draw.load_prizes([("1", "Bike", "1", ""), ("2", "Car", "two", "")])
        self.assertEqual([p.no for p in self.draw.prizes()], [5])

    def test_load_participants_wrong_field_count_keeps_previous_map(self) -> None:
        with self.assertRaises(MalformedRecord):
            self.draw.load_participants([("X", "Xavier"), ("Y",)])
        self.assertEqual(_ids(self.draw.participants()), {"A", "B", "C"})

    def test_participants_in_registration_order(self) -> None:
        self.assertEqual(
            self.draw.participants(),
            [Participant("A", "Alice"), Participant("B", "Bob"), Participant("C", "Carol")],
        )


class DrawTests(DrawSessionTestCase):
    def test_draw_scenario(self) -> None:
        self.draw.set_prize(1, "Bike", 2, "")
        winners = self.draw.draw(1)
        self.assertEqual(len(winners), 2)
        self.assertTrue(_ids(winners) <= {"A", "B", "C"})

        available = self.draw.available_participants()
        self.assertEqual(len(available), 1)
        self.assertEqual(_ids(available) | _ids(winners), {"A", "B", "C"})

    def test_draw_unknown_prize(self) -> None:
        with self.assertRaises(UnknownPrize):
            self.draw.draw(42)

    def test_draw_invalid_amount(self) -> None:
        self.draw.set_prize(1, "Nothing", 0, "")
        with self.assertRaises(InvalidPrizeAmount):
            self.draw.draw(1)
        self.assertFalse(self.draw.is_drawn(1))

    def test_second_draw_rejected(self) -> None:
        self.draw.set_prize(1, "Bike", 1, "")
        first = self.draw.draw(1)
        with self.assertRaises(AlreadyDrawn):
            self.draw.draw(1)
        self.assertEqual(self.draw.winners(1), first)

    def test_draw_caps_at_available(self) -> None:
        self.draw.set_prize(1, "Pens", 10, "")
        winners = self.draw.draw(1)
        self.assertEqual(_ids(winners), {"A", "B", "C"})
        self.assertEqual(self.draw.available_participants(), [])

    def test_draw_without_available_participants(self) -> None:
        self.draw.set_prize(1, "Pens", 3, "")
        self.draw.set_prize(2, "Mug", 1, "")
        self.draw.draw(1)
        with self.assertRaises(NoAvailableParticipants):
            self.draw.draw(2)
        self.assertFalse(self.draw.is_drawn(2))

    def test_winners_never_repeat_across_prizes(self) -> None:
        self.draw.load_participants([(f"P{i}", f"Name {i}") for i in range(20)])
        for no, amount in ((1, 3), (2, 5), (3, 4)):
            self.draw.set_prize(no, f"Prize {no}", amount, "")
            self.draw.draw(no)
        self.assert_winners_disjoint()
        self.assertEqual(len(self.draw.available_participants()), 8)

    def test_winners_of_undrawn_prize_is_empty(self) -> None:
        self.draw.set_prize(1, "Bike", 1, "")
        self.assertEqual(self.draw.winners(1), [])
        self.assertFalse(self.draw.is_drawn(1))

    def test_returned_winners_are_copies(self) -> None:
        self.draw.set_prize(1, "Bike", 2, "")
        winners = self.draw.draw(1)
        winners.clear()
        self.draw.winners(1).clear()
        self.draw.all_winners()[1].clear()
        self.assertEqual(len(self.draw.winners(1)), 2)


class RevokeTests(DrawSessionTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.draw.load_participants([("A", "Alice"), ("B", "Bob")])
        self.draw.set_prize(1, "Bike", 2, "")
        self.draw.draw(1)

    def test_revoke_scenario(self) -> None:
        self.draw.revoke(1, [Participant("A", "Alice")])
        self.assertEqual(self.draw.winners(1), [Participant("B", "Bob")])
        with self.assertRaises(RevokedWinnerMismatch):
            self.draw.revoke(1, [Participant("A", "Alice")])
        self.assertEqual(self.draw.winners(1), [Participant("B", "Bob")])

    def test_revoke_accepts_ids(self) -> None:
        self.draw.revoke(1, ["B"])
        self.assertEqual(_ids(self.draw.winners(1)), {"A"})

    def test_revoke_is_all_or_nothing(self) -> None:
        before = self.draw.winners(1)
        with self.assertRaises(RevokedWinnerMismatch):
            self.draw.revoke(1, ["A", "Z"])
        self.assertEqual(self.draw.winners(1), before)

    def test_revoke_same_winner_twice_in_one_call(self) -> None:
        with self.assertRaises(RevokedWinnerMismatch):
            self.draw.revoke(1, ["A", "A"])
        self.assertEqual(len(self.draw.winners(1)), 2)

    def test_revoke_all_keeps_prize_drawn(self) -> None:
        self.draw.revoke(1, ["A", "B"])
        self.assertEqual(self.draw.winners(1), [])
        self.assertTrue(self.draw.is_drawn(1))
        with self.assertRaises(AlreadyDrawn):
            self.draw.draw(1)

    def test_revoke_keeps_remaining_order(self) -> None:
        self.draw.load_participants([(c, c) for c in "ABCDE"])
        # A and B already won prize 1, leaving C, D and E
        self.draw.set_prize(2, "Mugs", 3, "")
        drawn = self.draw.draw(2)
        self.draw.revoke(2, [drawn[1]])
        self.assertEqual(self.draw.winners(2), [drawn[0], drawn[2]])

    def test_revoke_before_draw(self) -> None:
        self.draw.set_prize(2, "Mug", 1, "")
        with self.assertRaises(NoWinnersToRevoke):
            self.draw.revoke(2, [])

    def test_revoke_invalid_amount(self) -> None:
        before = self.draw.winners(1)
        self.draw.set_prize(1, "Bike", 0, "")
        with self.assertRaises(InvalidPrizeAmount):
            self.draw.revoke(1, ["A"])
        self.assertEqual(self.draw.winners(1), before)

    def test_revoke_unknown_prize(self) -> None:
        with self.assertRaises(UnknownPrize):
            self.draw.revoke(99, ["A"])

    def test_revoked_winner_becomes_available(self) -> None:
        self.draw.revoke(1, ["A"])
        self.assertEqual(_ids(self.draw.available_participants()), {"A"})


class RedrawTests(DrawSessionTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.draw.load_participants([(c, c) for c in "ABCDEF"])
        self.draw.set_prize(1, "Bike", 3, "")

    def test_redraw_scenario(self) -> None:
        self.draw.draw(1)
        self.draw.revoke(1, [self.draw.winners(1)[0]])
        self.assertEqual(len(self.draw.winners(1)), 2)

        with self.assertRaises(RedrawAmountExceedsCapacity):
            self.draw.redraw(1, 2)
        self.assertEqual(len(self.draw.winners(1)), 2)

        existing = self.draw.winners(1)
        added = self.draw.redraw(1, 1)
        self.assertEqual(len(added), 1)
        self.assertEqual(self.draw.winners(1), existing + added)
        self.assert_winners_disjoint()

    def test_redraw_before_draw(self) -> None:
        with self.assertRaises(WinnersNotYetDrawn):
            self.draw.redraw(1, 1)

    def test_redraw_on_full_prize(self) -> None:
        self.draw.draw(1)
        with self.assertRaises(RedrawAmountExceedsCapacity):
            self.draw.redraw(1, 1)

    def test_redraw_never_exceeds_amount(self) -> None:
        self.draw.draw(1)
        for _ in range(5):
            winners = self.draw.winners(1)
            self.draw.revoke(1, winners[:2])
            self.draw.redraw(1, 2)
            self.assertLessEqual(len(self.draw.winners(1)), 3)
            self.assert_winners_disjoint()

    def test_redraw_after_clear_winners(self) -> None:
        self.draw.draw(1)
        self.draw.clear_winners(1)
        added = self.draw.redraw(1, 3)
        self.assertEqual(len(added), 3)
        self.assertEqual(self.draw.winners(1), added)

    def test_redraw_without_available_participants(self) -> None:
        self.draw.set_prize(2, "Pens", 10, "")
        self.draw.draw(1)
        self.draw.draw(2)
        self.draw.revoke(1, [self.draw.winners(1)[0]])
        revoked_left = self.draw.available_participants()
        self.draw.set_prize(3, "Mug", 5, "")
        self.draw.draw(3)
        self.assertEqual(_ids(self.draw.winners(3)), _ids(revoked_left))
        with self.assertRaises(NoAvailableParticipants):
            self.draw.redraw(1, 1)

    def test_redraw_caps_at_available(self) -> None:
        self.draw.set_prize(2, "Pens", 10, "")
        self.draw.draw(1)
        self.draw.draw(2)
        self.assertEqual(len(self.draw.winners(2)), 3)
        self.draw.revoke(1, [self.draw.winners(1)[0]])
        left = self.draw.available_participants()
        self.assertEqual(len(left), 1)

        existing = self.draw.winners(2)
        added = self.draw.redraw(2, 5)
        self.assertEqual(added, left)
        self.assertEqual(self.draw.winners(2), existing + left)
        self.assert_winners_disjoint()

    def test_redraw_invalid_amount(self) -> None:
        self.draw.set_prize(2, "Broken", 0, "")
        with self.assertRaises(InvalidPrizeAmount):
            self.draw.redraw(2, 1)


class ClearTests(DrawSessionTestCase):
    def test_clear_winners_marks_prize_drawn(self) -> None:
        self.draw.set_prize(1, "Bike", 1, "")
        self.draw.clear_winners(1)
        self.assertTrue(self.draw.is_drawn(1))
        self.assertEqual(self.draw.winners(1), [])
        with self.assertRaises(AlreadyDrawn):
            self.draw.draw(1)

    def test_clear_all_winners_resets_every_prize(self) -> None:
        self.draw.set_prize(1, "Bike", 1, "")
        self.draw.set_prize(2, "Mug", 1, "")
        self.draw.draw(1)
        self.draw.draw(2)
        self.draw.clear_all_winners()
        self.assertEqual(self.draw.all_winners(), {})
        self.assertEqual(len(self.draw.available_participants()), 3)
        self.draw.draw(1)


class ConcurrencyTests(DrawSessionTestCase):
    def test_concurrent_draws_keep_winners_disjoint(self) -> None:
        self.draw.load_participants([(f"P{i}", f"Name {i}") for i in range(200)])
        for no in range(1, 41):
            self.draw.set_prize(no, f"Prize {no}", 5, "")

        errors: list[BaseException] = []

        def worker(prize_no: int) -> None:
            try:
                self.draw.draw(prize_no)
            except BaseException as exc:  # pragma: no cover - reported below
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(no,)) for no in range(1, 41)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assert_winners_disjoint()
        self.assertEqual(self.draw.available_participants(), [])


if __name__ == "__main__":
    unittest.main()
