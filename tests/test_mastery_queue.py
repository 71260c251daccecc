"""
Tests for the three-pool mastery scheduler behind Learn mode.
"""
import pytest

from conftest import make_cards
from intellideck.engine.errors import SessionStateError
from intellideck.engine.mastery_queue import MasteryQueue, build_options, fallback_distractors
from intellideck.engine.shuffle import Shuffler


def assert_partition(queue):
    pools = queue.pools()
    ids = pools["unseen"] + pools["learning"] + pools["known"]
    if queue.current is not None:
        ids.append(queue.current.id)
    assert sorted(ids) == sorted(c.id for c in queue.snapshot)


class TestMasteryQueueStart:

    def test_empty_snapshot_is_complete(self):
        queue = MasteryQueue([], Shuffler(seed=1))
        assert queue.is_complete
        assert queue.current is None

    def test_first_card_comes_from_unseen(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        assert queue.current_pool == "unseen"
        assert queue.pool_sizes() == {"unseen": 7, "learning": 0, "known": 0}
        assert_partition(queue)


class TestMasteryQueueFlow:

    def test_confirm_requires_choice(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        with pytest.raises(SessionStateError):
            queue.confirm(True)

    def test_choose_only_once(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        queue.choose(queue.current.term)
        with pytest.raises(SessionStateError):
            queue.choose("other")

    def test_choice_is_advisory(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        card = queue.current
        assert queue.choose("definitely not it") is False
        assert queue.was_correct is False
        queue.confirm(True)
        assert card.id in queue.pools()["known"]

    def test_correct_choice_can_still_be_marked_unknown(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        card = queue.current
        assert queue.choose(card.term) is True
        queue.confirm(False)
        assert card.id in queue.pools()["learning"]

    def test_confirm_resets_step(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        queue.present_options(build_options(queue.current.term, ["a", "b", "c"], shuffler))
        queue.choose(queue.current.term)
        queue.confirm(True)
        assert queue.options == []
        assert queue.selected_answer is None
        assert queue.was_correct is None
        assert not queue.is_post_answer

    def test_knowing_everything_completes(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        steps = 0
        while not queue.is_complete:
            queue.choose(queue.current.term)
            queue.confirm(True)
            steps += 1
            assert_partition(queue)
        assert steps == len(cards)
        assert queue.pool_sizes() == {"unseen": 0, "learning": 0, "known": len(cards)}

    def test_missed_card_not_repeated_immediately(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        missed = queue.current
        queue.choose("wrong")
        queue.confirm(False)
        assert queue.current.id != missed.id
        assert missed.id in queue.pools()["learning"]

    def test_learning_cards_come_back_before_unseen(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        first = queue.current
        queue.choose("wrong")
        queue.confirm(False)
        queue.choose(queue.current.term)
        queue.confirm(True)
        assert queue.current.id == first.id
        assert queue.current_pool == "learning"

    def test_single_card_is_relearned(self):
        cards = make_cards(1)
        queue = MasteryQueue(cards, Shuffler(seed=5))
        queue.choose("nope")
        queue.confirm(False)
        assert queue.current.id == cards[0].id
        assert queue.current_pool == "learning"
        assert not queue.is_complete
        queue.choose(cards[0].term)
        queue.confirm(True)
        assert queue.is_complete

    def test_partition_holds_over_mixed_answers(self, cards):
        queue = MasteryQueue(cards, Shuffler(seed=99))
        steps = 0
        while not queue.is_complete:
            # Every third report is "did not know"
            queue.choose(queue.current.term)
            queue.confirm(steps % 3 != 2)
            assert_partition(queue)
            steps += 1
            assert steps < 100
        assert len(queue.pools()["known"]) == len(cards)

    def test_cannot_act_after_completion(self):
        queue = MasteryQueue(make_cards(1), Shuffler(seed=1))
        queue.choose("Mitochondria")
        queue.confirm(True)
        with pytest.raises(SessionStateError):
            queue.choose("Mitochondria")
        with pytest.raises(SessionStateError):
            queue.confirm(True)

    def test_restart(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        queue.choose("x")
        queue.confirm(True)
        queue.restart()
        assert queue.epoch == 1
        assert queue.pool_sizes() == {"unseen": 7, "learning": 0, "known": 0}


class TestOptions:

    def test_present_options_requires_term(self, cards, shuffler):
        queue = MasteryQueue(cards, shuffler)
        with pytest.raises(ValueError):
            queue.present_options(["a", "b", "c", "d"])

    def test_build_options_contains_term_once(self, shuffler):
        options = build_options("Nucleus", ["Ribosome", "Vacuole", "Lysosome"], shuffler)
        assert sorted(options) == ["Lysosome", "Nucleus", "Ribosome", "Vacuole"]

    def test_fallback_excludes_term_case_insensitively(self, shuffler):
        terms = ["Nucleus", "nucleus", "Ribosome", "Vacuole", "Lysosome", "Cytoplasm"]
        picks = fallback_distractors("NUCLEUS", terms, shuffler)
        assert len(picks) == 3
        assert all(p.lower() != "nucleus" for p in picks)
        assert len(set(picks)) == 3

    def test_fallback_with_few_terms(self, shuffler):
        assert fallback_distractors("Nucleus", ["Nucleus", "Ribosome"], shuffler) == ["Ribosome"]
        assert fallback_distractors("Nucleus", ["Nucleus"], shuffler) == []
