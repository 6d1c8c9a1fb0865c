import unittest

from exam_engine.errors import IndexOutOfRange, UnknownQuestion
from exam_engine.models.session import AnswerRecord, AnswerStatus
from exam_engine.services.ledger import (
    AnswerLedger,
    CreditTime,
    Select,
    SetMark,
    Visit,
    transition,
)

from tests.factories import FIXED_NOW, make_config


class TransitionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.fresh = AnswerRecord(question_id="q1")

    def test_first_visit_marks_question_seen(self) -> None:
        record = transition(self.fresh, Visit(FIXED_NOW))
        self.assertEqual(record.status, AnswerStatus.NOT_ANSWERED)
        self.assertEqual(record.visit_count, 1)
        self.assertEqual(record.last_visited, FIXED_NOW)

    def test_revisit_keeps_status_and_counts_visit(self) -> None:
        answered = transition(transition(self.fresh, Visit(FIXED_NOW)), Select("B"))
        revisited = transition(answered, Visit(FIXED_NOW))
        self.assertEqual(revisited.status, AnswerStatus.ANSWERED)
        self.assertEqual(revisited.visit_count, 2)

    def test_select_and_clear(self) -> None:
        answered = transition(self.fresh, Select("C"))
        self.assertEqual(answered.status, AnswerStatus.ANSWERED)
        self.assertEqual(answered.selected_answer, "C")

        cleared = transition(answered, Select(None))
        self.assertEqual(cleared.status, AnswerStatus.NOT_ANSWERED)
        self.assertIsNone(cleared.selected_answer)

    def test_mark_then_answer_then_clear_returns_to_marked(self) -> None:
        record = transition(self.fresh, Visit(FIXED_NOW))
        record = transition(record, SetMark(True))
        self.assertEqual(record.status, AnswerStatus.MARKED)

        record = transition(record, Select("A"))
        self.assertEqual(record.status, AnswerStatus.MARKED_ANSWERED)

        record = transition(record, Select(None))
        self.assertEqual(record.status, AnswerStatus.MARKED)

    def test_unmark(self) -> None:
        marked_answered = transition(transition(self.fresh, Select("A")), SetMark(True))
        self.assertEqual(marked_answered.status, AnswerStatus.MARKED_ANSWERED)
        self.assertEqual(transition(marked_answered, SetMark(False)).status, AnswerStatus.ANSWERED)

        marked = transition(self.fresh, SetMark(True))
        self.assertEqual(transition(marked, SetMark(False)).status, AnswerStatus.NOT_ANSWERED)

    def test_changing_a_marked_answer_stays_marked(self) -> None:
        record = transition(transition(self.fresh, SetMark(True)), Select("A"))
        record = transition(record, Select("D"))
        self.assertEqual(record.status, AnswerStatus.MARKED_ANSWERED)
        self.assertEqual(record.selected_answer, "D")

    def test_original_record_is_not_modified(self) -> None:
        transition(self.fresh, Select("A"))
        self.assertEqual(self.fresh.status, AnswerStatus.NOT_VISITED)
        self.assertIsNone(self.fresh.selected_answer)

    def test_credit_time(self) -> None:
        record = transition(transition(self.fresh, CreditTime(3)), CreditTime(2))
        self.assertEqual(record.time_spent, 5)
        self.assertEqual(record.status, AnswerStatus.NOT_VISITED)
        with self.assertRaises(ValueError):
            transition(self.fresh, CreditTime(-1))

    def test_no_event_sequence_returns_to_not_visited(self) -> None:
        events = [
            Visit(FIXED_NOW), SetMark(True), Select("A"), SetMark(False),
            Select(None), SetMark(True), SetMark(False), Select(None), Visit(FIXED_NOW),
        ]
        record = self.fresh
        for event in events:
            record = transition(record, event)
            self.assertNotEqual(record.status, AnswerStatus.NOT_VISITED)


class AnswerLedgerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = make_config(section_sizes=(2, 3))
        self.ledger = AnswerLedger.for_exam(self.config)

    def test_for_exam_aligns_with_flattened_questions(self) -> None:
        self.assertEqual(len(self.ledger), 5)
        self.assertEqual(
            [r.question_id for r in self.ledger.records],
            [q.id for q in self.config.questions],
        )
        self.assertEqual(self.ledger.count(AnswerStatus.NOT_VISITED), 5)

    def test_operations_return_new_ledger(self) -> None:
        updated = self.ledger.select("s1q0", "B").toggle_mark("s1q0").visit(0, FIXED_NOW)
        self.assertEqual(updated.get("s1q0").status, AnswerStatus.MARKED_ANSWERED)
        self.assertEqual(updated[0].status, AnswerStatus.NOT_ANSWERED)
        self.assertEqual(self.ledger.get("s1q0").status, AnswerStatus.NOT_VISITED)
        self.assertEqual(len(updated), len(self.ledger))

    def test_toggle_mark_twice(self) -> None:
        ledger = self.ledger.toggle_mark("s0q1").toggle_mark("s0q1")
        self.assertEqual(ledger.get("s0q1").status, AnswerStatus.NOT_ANSWERED)

    def test_unknown_question(self) -> None:
        with self.assertRaises(UnknownQuestion):
            self.ledger.select("missing", "A")
        with self.assertRaises(UnknownQuestion):
            self.ledger.toggle_mark("missing")

    def test_index_out_of_range(self) -> None:
        with self.assertRaises(IndexOutOfRange):
            self.ledger.visit(5, FIXED_NOW)
        with self.assertRaises(IndexOutOfRange):
            self.ledger.credit_time(-1)


if __name__ == "__main__":
    unittest.main()
