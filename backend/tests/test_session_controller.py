import unittest
from unittest import mock

from exam_engine.errors import (
    IndexOutOfRange,
    InvalidConfigError,
    NoActiveSession,
    SectionSwitchDenied,
    SessionClosed,
    UnknownQuestion,
)
from exam_engine.models.exam import ExamConfig, MarkingScheme
from exam_engine.models.session import AnswerStatus
from exam_engine.services import scoring
from exam_engine.services.clock import SimulatedClock
from exam_engine.services.countdown import CountdownState
from exam_engine.services.session_controller import SessionController

from tests.factories import FIXED_NOW, make_config


class ControllerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = SimulatedClock()
        self.controller = SessionController(self.clock, now=lambda: FIXED_NOW)
        self.events: dict[str, list] = {}
        for event in ("overall_tick", "section_tick", "overall_complete", "section_complete", "submitted"):
            self.events[event] = []
            self.controller.subscribe(event, self.events[event].append)


class StartExamTests(ControllerTestCase):
    def test_builds_session(self) -> None:
        config = make_config(section_sizes=(2, 3), section_durations=(60, 90), total_duration=300, sectional=True)
        session = self.controller.start_exam(config)

        self.assertEqual(session.exam_id, config.id)
        self.assertEqual(session.start_time, FIXED_NOW)
        self.assertEqual(len(session.answers), 5)
        self.assertTrue(all(a.status == AnswerStatus.NOT_VISITED for a in session.answers))
        self.assertEqual(session.time_remaining, 300)
        self.assertEqual(session.section_time_remaining, 60)
        self.assertEqual(session.current_question_index, 0)
        self.assertEqual(session.current_section_index, 0)
        self.assertFalse(session.is_submitted)
        self.assertEqual(self.controller.overall_timer.state, CountdownState.RUNNING)
        self.assertEqual(self.controller.section_timer.state, CountdownState.RUNNING)

    def test_no_sectional_timer_without_sectional_timing(self) -> None:
        session = self.controller.start_exam(make_config())
        self.assertIsNone(session.section_time_remaining)
        self.assertIsNone(self.controller.section_timer)

    def test_rejects_empty_config(self) -> None:
        empty = ExamConfig(id="empty", title="Empty", sections=(), total_duration=600)
        with self.assertRaises(InvalidConfigError):
            self.controller.start_exam(empty)

        no_time = make_config(total_duration=0, section_durations=(60,))
        with self.assertRaises(InvalidConfigError):
            self.controller.start_exam(no_time)
        self.assertIsNone(self.controller.session)

    def test_rejects_duplicate_question_ids(self) -> None:
        config = make_config(section_sizes=(2,))
        duplicated = config.model_copy(update={"sections": config.sections + config.sections})
        with self.assertRaises(InvalidConfigError):
            self.controller.start_exam(duplicated)

    def test_starting_again_replaces_session(self) -> None:
        first = self.controller.start_exam(make_config())
        old_timer = self.controller.overall_timer
        second = self.controller.start_exam(make_config())

        self.assertNotEqual(first.id, second.id)
        self.assertEqual(old_timer.state, CountdownState.IDLE)
        self.clock.advance(1)
        self.assertEqual(self.controller.session.time_remaining, 599)


class NavigationTests(ControllerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.config = make_config(
            section_sizes=(2, 3), section_durations=(60, 90), total_duration=300,
            sectional=True, allow_switch=False,
        )
        self.controller.start_exam(self.config)

    def test_navigate_visits_question(self) -> None:
        session = self.controller.navigate_to(1)
        record = session.answers[1]
        self.assertEqual(session.current_question_index, 1)
        self.assertEqual(record.status, AnswerStatus.NOT_ANSWERED)
        self.assertEqual(record.visit_count, 1)
        self.assertEqual(record.last_visited, FIXED_NOW)

        session = self.controller.navigate_to(1)
        self.assertEqual(session.answers[1].visit_count, 2)

    def test_navigate_out_of_range(self) -> None:
        before = self.controller.session
        for index in (5, -1):
            with self.assertRaises(IndexOutOfRange):
                self.controller.navigate_to(index)
        self.assertIs(self.controller.session, before)

    def test_navigate_into_locked_section_is_denied(self) -> None:
        before = self.controller.session
        with self.assertRaises(SectionSwitchDenied):
            self.controller.navigate_to(2)
        self.assertIs(self.controller.session, before)
        self.assertEqual(self.controller.session.answers[2].status, AnswerStatus.NOT_VISITED)

    def test_switch_section_denied(self) -> None:
        self.controller.navigate_to(1)
        with self.assertRaises(SectionSwitchDenied):
            self.controller.switch_section(1)
        self.assertEqual(self.controller.session.current_section_index, 0)
        self.assertEqual(self.controller.session.current_question_index, 1)

    def test_switch_to_current_section_is_allowed(self) -> None:
        self.controller.navigate_to(1)
        self.clock.advance(5)
        session = self.controller.switch_section(0)
        self.assertEqual(session.current_question_index, 0)
        self.assertEqual(session.section_time_remaining, 55)

    def test_switch_section_out_of_range(self) -> None:
        with self.assertRaises(IndexOutOfRange):
            self.controller.switch_section(2)

    def test_current_accessors(self) -> None:
        self.controller.navigate_to(1)
        self.assertEqual(self.controller.current_question.id, "s0q1")
        self.assertEqual(self.controller.current_section.id, "section_0")


class SectionSwitchTests(ControllerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.config = make_config(
            section_sizes=(2, 3), section_durations=(60, 90), total_duration=300,
            sectional=True, allow_switch=True,
        )
        self.controller.start_exam(self.config)

    def test_switch_resets_section_timer(self) -> None:
        self.clock.advance(10)
        self.assertEqual(self.controller.session.section_time_remaining, 50)

        session = self.controller.switch_section(1)
        self.assertEqual(session.current_section_index, 1)
        self.assertEqual(session.current_question_index, 2)
        self.assertEqual(session.section_time_remaining, 90)

        # No tick from the section just left may leak through
        self.clock.advance(1)
        self.assertEqual(self.controller.session.section_time_remaining, 89)
        self.assertEqual(self.controller.session.time_remaining, 289)
        self.assertEqual(self.events["section_tick"][-1], 89)

    def test_navigate_across_sections_updates_section(self) -> None:
        self.clock.advance(10)
        session = self.controller.navigate_to(3)
        self.assertEqual(session.current_section_index, 1)
        self.assertEqual(session.section_time_remaining, 90)
        self.assertEqual(session.answers[3].status, AnswerStatus.NOT_ANSWERED)

    def test_section_completion_only_notifies(self) -> None:
        self.clock.advance(60)
        self.assertEqual(self.events["section_complete"], [0])
        self.assertFalse(self.controller.session.is_submitted)
        self.assertEqual(self.controller.session.section_time_remaining, 0)

        self.controller.switch_section(1)
        self.clock.advance(1)
        self.assertEqual(self.controller.session.section_time_remaining, 89)


class AnswerTests(ControllerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.controller.start_exam(make_config(section_sizes=(3,)))

    def test_mark_answer_clear_scenario(self) -> None:
        self.controller.navigate_to(0)
        session = self.controller.toggle_mark("s0q0")
        self.assertEqual(session.answers[0].status, AnswerStatus.MARKED)

        session = self.controller.set_answer("s0q0", "B")
        self.assertEqual(session.answers[0].status, AnswerStatus.MARKED_ANSWERED)

        session = self.controller.set_answer("s0q0", None)
        self.assertEqual(session.answers[0].status, AnswerStatus.MARKED)

    def test_unknown_question_leaves_state(self) -> None:
        before = self.controller.session
        with self.assertRaises(UnknownQuestion):
            self.controller.set_answer("nope", "A")
        with self.assertRaises(UnknownQuestion):
            self.controller.toggle_mark("nope")
        self.assertIs(self.controller.session, before)

    def test_answers_accessor_matches_session(self) -> None:
        self.controller.set_answer("s0q2", "C")
        self.assertEqual(self.controller.answers, self.controller.session.answers)
        self.assertEqual(self.controller.answers[2].selected_answer, "C")

    def test_record_count_never_changes(self) -> None:
        c = self.controller
        operations = [
            lambda: c.navigate_to(1),
            lambda: c.set_answer("s0q1", "A"),
            lambda: c.toggle_mark("s0q2"),
            lambda: c.navigate_to(2),
            lambda: c.set_answer("s0q2", None),
            lambda: self.clock.advance(3),
            lambda: c.pause(),
            lambda: c.resume(),
        ]
        visited: set[int] = set()
        for operation in operations:
            operation()
            answers = c.session.answers
            self.assertEqual(len(answers), 3)
            for i, record in enumerate(answers):
                if record.status != AnswerStatus.NOT_VISITED:
                    visited.add(i)
            for i in visited:
                self.assertNotEqual(answers[i].status, AnswerStatus.NOT_VISITED)


class TimerTests(ControllerTestCase):
    def test_overall_ticks_credit_the_visited_question(self) -> None:
        self.controller.start_exam(make_config(section_sizes=(2,)))
        self.clock.advance(2)
        self.assertEqual(self.controller.session.answers[0].time_spent, 0)

        self.controller.navigate_to(0)
        self.clock.advance(3)
        self.controller.navigate_to(1)
        self.clock.advance(4)

        answers = self.controller.session.answers
        self.assertEqual(answers[0].time_spent, 3)
        self.assertEqual(answers[1].time_spent, 4)
        self.assertEqual(self.controller.session.time_remaining, 591)
        self.assertEqual(self.events["overall_tick"][-1], 591)

    def test_pause_and_resume(self) -> None:
        self.controller.start_exam(make_config(section_sizes=(2,), total_duration=300, sectional=True))
        self.clock.advance(1)
        session = self.controller.pause()
        self.assertTrue(session.is_paused)
        self.assertIs(self.controller.pause(), session)

        self.clock.advance(5)
        self.assertEqual(self.controller.session.time_remaining, 299)
        self.assertEqual(self.controller.session.section_time_remaining, 299)

        self.assertFalse(self.controller.resume().is_paused)
        self.controller.resume()
        self.clock.advance(1)
        self.assertEqual(self.controller.session.time_remaining, 298)
        self.assertEqual(self.controller.session.section_time_remaining, 298)

    def test_time_up_submits_once(self) -> None:
        self.controller.start_exam(make_config(total_duration=5, section_durations=(5,)))
        self.clock.advance(5)

        session = self.controller.session
        self.assertTrue(session.is_submitted)
        self.assertEqual(session.end_time, FIXED_NOW)
        self.assertEqual(session.time_remaining, 0)
        self.assertEqual(len(self.events["overall_complete"]), 1)
        self.assertEqual(len(self.events["submitted"]), 1)
        self.assertEqual(self.controller.result.time_taken, 5)

        self.clock.advance(3)
        self.assertEqual(len(self.events["submitted"]), 1)

    def test_overall_zero_submits_even_when_paused(self) -> None:
        self.controller.start_exam(make_config())
        self.controller.pause()
        self.controller.tick_overall(0)
        self.assertTrue(self.controller.session.is_submitted)
        self.assertIsNotNone(self.controller.result)

    def test_pausing_on_the_last_tick_still_submits(self) -> None:
        def pause_at_zero(remaining: int) -> None:
            if remaining == 0:
                self.controller.pause()

        self.controller.subscribe("overall_tick", pause_at_zero)
        self.controller.start_exam(make_config(total_duration=3, section_durations=(3,)))
        self.clock.advance(3)

        self.assertTrue(self.controller.session.is_submitted)
        self.assertEqual(len(self.events["submitted"]), 1)

    def test_unsubscribe_twice(self) -> None:
        ticks: list[int] = []
        unsubscribe = self.controller.subscribe("overall_tick", ticks.append)
        self.controller.start_exam(make_config())
        self.clock.advance(1)
        unsubscribe()
        unsubscribe()
        self.clock.advance(1)
        self.assertEqual(ticks, [599])

    def test_manual_ticks(self) -> None:
        self.controller.start_exam(make_config(sectional=True))
        self.controller.tick_overall(120)
        self.controller.tick_section(30)
        self.assertEqual(self.controller.session.time_remaining, 120)
        self.assertEqual(self.controller.session.section_time_remaining, 30)
        self.assertFalse(self.controller.session.is_submitted)


class SubmitTests(ControllerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.config = make_config(section_sizes=(2,), marking=MarkingScheme(correct=2, incorrect=-0.5))
        self.controller.start_exam(self.config)

    def test_submit_is_idempotent(self) -> None:
        self.controller.set_answer("s0q0", "A")
        with mock.patch(
            "exam_engine.services.session_controller.score", wraps=scoring.score
        ) as scorer:
            first = self.controller.submit()
            second = self.controller.submit()

        self.assertIs(first, second)
        self.assertEqual(scorer.call_count, 1)
        self.assertEqual(first.total_score, 2)
        self.assertEqual(len(self.events["submitted"]), 1)

    def test_submit_stops_timers(self) -> None:
        timer = self.controller.overall_timer
        self.controller.submit()
        self.assertEqual(timer.state, CountdownState.IDLE)
        remaining = self.controller.session.time_remaining
        self.clock.advance(5)
        self.assertEqual(self.controller.session.time_remaining, remaining)

    def test_commands_rejected_after_submit(self) -> None:
        self.controller.submit()
        submitted = self.controller.session
        for command in (
            lambda: self.controller.navigate_to(0),
            lambda: self.controller.switch_section(0),
            lambda: self.controller.set_answer("s0q0", "A"),
            lambda: self.controller.toggle_mark("s0q0"),
            lambda: self.controller.pause(),
            lambda: self.controller.resume(),
        ):
            with self.assertRaises(SessionClosed):
                command()
        self.assertIs(self.controller.session, submitted)


class ResetTests(ControllerTestCase):
    def test_reset_discards_everything(self) -> None:
        self.controller.start_exam(make_config(sectional=True))
        overall = self.controller.overall_timer
        sectional = self.controller.section_timer
        self.controller.submit()
        self.controller.reset()

        self.assertIsNone(self.controller.session)
        self.assertIsNone(self.controller.result)
        self.assertIsNone(self.controller.config)
        self.assertEqual(self.controller.answers, ())
        self.assertEqual(overall.state, CountdownState.IDLE)
        self.assertEqual(sectional.state, CountdownState.IDLE)

    def test_no_stale_ticks_after_reset(self) -> None:
        self.controller.start_exam(make_config())
        self.clock.advance(3)
        self.controller.reset()
        self.clock.advance(3)
        self.assertEqual(len(self.events["overall_tick"]), 3)

        self.controller.start_exam(make_config())
        self.clock.advance(1)
        self.assertEqual(self.controller.session.time_remaining, 599)

    def test_commands_without_session(self) -> None:
        with self.assertRaises(NoActiveSession):
            self.controller.navigate_to(0)
        with self.assertRaises(NoActiveSession):
            self.controller.submit()
        with self.assertRaises(NoActiveSession):
            self.controller.tick_overall(10)
        self.controller.reset()


class RestoreTests(ControllerTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.config = make_config(section_sizes=(2, 2), total_duration=400, sectional=True)
        self.controller.start_exam(self.config)
        self.controller.navigate_to(0)
        self.controller.set_answer("s0q0", "A")
        self.clock.advance(10)

    def test_restore_continues_countdown(self) -> None:
        snapshot = self.controller.session
        self.controller.reset()

        other = SessionController(self.clock, now=lambda: FIXED_NOW)
        session = other.restore(self.config, snapshot)
        self.assertEqual(session, snapshot)
        self.clock.advance(1)
        self.assertEqual(other.session.time_remaining, 389)
        self.assertEqual(other.session.section_time_remaining, 189)
        self.assertEqual(other.session.answers[0].time_spent, 11)

    def test_restore_keeps_pause(self) -> None:
        snapshot = self.controller.pause()
        self.controller.reset()

        other = SessionController(self.clock)
        other.restore(self.config, snapshot)
        self.clock.advance(5)
        self.assertEqual(other.session.time_remaining, 390)
        other.resume()
        self.clock.advance(1)
        self.assertEqual(other.session.time_remaining, 389)

    def test_restore_submitted_session_rescores(self) -> None:
        result = self.controller.submit()
        snapshot = self.controller.session

        other = SessionController(self.clock)
        other.restore(self.config, snapshot)
        self.assertIsNone(other.overall_timer)
        self.assertEqual(other.result, result)

    def test_restore_rejects_mismatched_session(self) -> None:
        snapshot = self.controller.session
        other_exam = make_config(section_sizes=(3,), exam_id="other")
        with self.assertRaises(InvalidConfigError):
            SessionController(self.clock).restore(other_exam, snapshot)

        truncated = snapshot.model_copy(update={"answers": snapshot.answers[:2]})
        with self.assertRaises(InvalidConfigError):
            SessionController(self.clock).restore(self.config, truncated)


if __name__ == "__main__":
    unittest.main()
