"""
Tests for the two-pool retry scheduler behind Write mode.
"""
import pytest

from conftest import make_cards
from intellideck.engine.errors import SessionStateError
from intellideck.engine.grader import EmptyAnswerError
from intellideck.engine.retry_queue import RetryQueue
from intellideck.engine.shuffle import Shuffler


def assert_partition(queue):
    pools = queue.pools()
    ids = pools["remaining"] + pools["missed"] + pools["correct"]
    if queue.answer_state != "unanswered":
        ids.append(queue.current.id)
    assert sorted(ids) == sorted(c.id for c in queue.snapshot)


class TestRetryQueueStart:

    def test_empty_snapshot_is_complete(self):
        queue = RetryQueue([], Shuffler(seed=1))
        assert queue.is_complete
        assert queue.current is None

    def test_starts_with_every_card_remaining(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        assert not queue.is_complete
        assert sorted(queue.pools()["remaining"]) == sorted(c.id for c in cards)
        assert queue.pools()["missed"] == []
        assert queue.current.id == queue.pools()["remaining"][0]
        assert queue.round == 1

    def test_current_is_a_peek(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        assert queue.current is queue.current
        assert len(queue.pools()["remaining"]) == len(cards)


class TestRetryQueueAnswers:

    def test_missed_card_returns_next_round(self):
        cards = make_cards(3)
        miss_id = cards[1].id
        queue = RetryQueue(cards, Shuffler(seed=3))

        seen = []
        while queue.round == 1:
            card = queue.current
            seen.append(card.id)
            queue.submit("zzzz" if card.id == miss_id else card.term)
            queue.advance()
            assert_partition(queue)

        assert sorted(seen) == sorted(c.id for c in cards)
        assert queue.round == 2
        assert queue.current.id == miss_id
        assert not queue.is_complete

        queue.submit("still wrong")
        queue.advance()
        assert queue.round == 3
        assert queue.current.id == miss_id

        queue.submit(cards[1].term)
        assert queue.advance() is None
        assert queue.is_complete
        assert queue.correct_count == 3

    def test_single_card_completes_after_one_correct_answer(self):
        cards = make_cards(1)
        queue = RetryQueue(cards, Shuffler(seed=1))
        outcome = queue.submit(cards[0].term.upper())
        assert outcome.is_correct
        queue.advance()
        assert queue.is_complete
        assert queue.round == 1

    def test_typo_is_forgiven(self):
        cards = make_cards(1)
        queue = RetryQueue(cards, Shuffler(seed=1))
        assert queue.submit("Mitocondria").is_correct

    def test_outcome_carries_advance_delay(self):
        cards = make_cards(2)
        queue = RetryQueue(cards, Shuffler(seed=1), correct_delay_ms=10, incorrect_delay_ms=20)
        right = queue.submit(queue.current.term)
        assert right.advance_after_ms == 10
        assert right.correct_term == queue.current.term
        queue.advance()
        wrong = queue.submit("nope nope nope")
        assert wrong.advance_after_ms == 20
        assert not wrong.is_correct

    def test_default_delays(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        assert queue.submit(queue.current.term).advance_after_ms == 1200
        queue.advance()
        assert queue.submit("qqqqqqqqqqqqqq").advance_after_ms == 2500

    def test_answered_card_stays_current_until_advance(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        card = queue.current
        queue.submit("wrong wrong")
        assert queue.current is card
        assert queue.answer_state == "incorrect"
        assert card.id not in queue.pools()["remaining"]
        assert_partition(queue)

    def test_record_accepts_external_grading(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        card = queue.current
        queue.record(False)
        queue.advance()
        assert queue.pools()["missed"] == [card.id]


class TestRetryQueuePreconditions:

    def test_blank_answer_rejected(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        with pytest.raises(EmptyAnswerError):
            queue.submit("   ")
        assert queue.answer_state == "unanswered"

    def test_cannot_answer_twice(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        queue.submit(queue.current.term)
        with pytest.raises(SessionStateError):
            queue.submit("again")

    def test_cannot_advance_before_answering(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        with pytest.raises(SessionStateError):
            queue.advance()

    def test_cannot_answer_when_complete(self):
        queue = RetryQueue([], Shuffler(seed=1))
        with pytest.raises(SessionStateError):
            queue.submit("anything")


class TestRetryQueueRestart:

    def test_restart_resets_pools_and_bumps_epoch(self, cards, shuffler):
        queue = RetryQueue(cards, shuffler)
        queue.submit("wrong")
        queue.advance()
        queue.restart()
        assert queue.epoch == 1
        assert queue.round == 1
        assert queue.correct_count == 0
        assert queue.pools()["missed"] == []
        assert len(queue.pools()["remaining"]) == len(cards)
