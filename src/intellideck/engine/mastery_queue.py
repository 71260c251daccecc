"""
Three-pool mastery scheduler used by Learn mode.

Each card sits in exactly one of `unseen`, `learning` or `known`, except the
card currently on screen, which is held aside until the learner reports on it.
Presenting a card is a two-step exchange: the learner picks a multiple-choice
option (graded only as feedback), then says whether they knew it. Only that
second step moves the card between pools.
"""
from typing import Dict, List, Literal, Optional, Sequence

from intellideck.engine.errors import SessionStateError
from intellideck.engine.grader import distinct_other_terms
from intellideck.engine.shuffle import Shuffler
from intellideck.models.flashcard_models import Card

Pool = Literal["unseen", "learning"]

DISTRACTOR_COUNT = 3


def fallback_distractors(term: str, all_terms: Sequence[str], shuffler: Shuffler) -> List[str]:
    """Random sample of other terms, used when no generated distractors are available"""
    return shuffler.sample(distinct_other_terms(term, all_terms), DISTRACTOR_COUNT)


def build_options(term: str, distractors: Sequence[str], shuffler: Shuffler) -> List[str]:
    """Shuffle the correct term in with its distractors"""
    return shuffler.permute([term, *distractors])


class MasteryQueue:
    def __init__(self, cards: Sequence[Card], shuffler: Optional[Shuffler] = None):
        self.snapshot: List[Card] = list(cards)
        self.shuffler = shuffler or Shuffler()
        self.epoch = 0
        self._start()

    def _start(self) -> None:
        self._unseen: List[Card] = self.shuffler.permute(self.snapshot)
        self._learning: List[Card] = []
        self._known: List[Card] = []
        self._current: Optional[Card] = None
        self._source: Optional[Pool] = None
        self._reset_step()
        self._take_next(exclude=None)

    def _reset_step(self) -> None:
        self.options: List[str] = []
        self.selected_answer: Optional[str] = None
        self.was_correct: Optional[bool] = None

    def restart(self) -> None:
        self.epoch += 1
        self._start()

    @property
    def current(self) -> Optional[Card]:
        return self._current

    @property
    def current_pool(self) -> Optional[Pool]:
        """The pool the current card was drawn from"""
        return self._source

    @property
    def is_complete(self) -> bool:
        return self._current is None and not self._unseen and not self._learning

    @property
    def all_terms(self) -> List[str]:
        return [c.term for c in self.snapshot]

    @property
    def is_post_answer(self) -> bool:
        return self.selected_answer is not None

    def present_options(self, options: Sequence[str]) -> None:
        """Attach the multiple-choice options shown for the current card"""
        if self._current is None:
            raise SessionStateError("This session is complete.")
        if self._current.term not in options:
            raise ValueError("Options must include the correct term.")
        self.options = list(options)

    def choose(self, answer: str) -> bool:
        """Record the learner's pick; the result is feedback only"""
        if self._current is None:
            raise SessionStateError("This session is complete.")
        if self.is_post_answer:
            raise SessionStateError("An answer was already chosen for this card.")
        self.selected_answer = answer
        self.was_correct = answer == self._current.term
        return self.was_correct

    def confirm(self, knew: bool) -> Optional[Card]:
        """
        Apply the learner's self-report and pick the next card.

        Args:
            knew: True moves the card to `known`, False keeps it in `learning`

        Returns:
            The next card, or None when every card is known
        """
        if self._current is None:
            raise SessionStateError("This session is complete.")
        if not self.is_post_answer:
            raise SessionStateError("Choose an answer before rating this card.")

        card = self._current
        if knew:
            self._known.append(card)
        else:
            self._learning.append(card)
        self._current = None
        self._source = None
        self._reset_step()

        self._take_next(exclude=card.id)
        return self._current

    def _take_next(self, exclude: Optional[str]) -> None:
        # A card just sent back to learning is not repeated while anything else is waiting
        retry = [c for c in self._learning if c.id != exclude]
        if retry:
            card = self.shuffler.choice(retry)
            self._learning.remove(card)
            self._current, self._source = card, "learning"
        elif self._unseen:
            self._current, self._source = self._unseen.pop(0), "unseen"
        elif self._learning:
            self._current, self._source = self._learning.pop(0), "learning"

    def pools(self) -> Dict[str, List[str]]:
        return {
            "unseen": [c.id for c in self._unseen],
            "learning": [c.id for c in self._learning],
            "known": [c.id for c in self._known],
        }

    def pool_sizes(self) -> Dict[str, int]:
        return {name: len(ids) for name, ids in self.pools().items()}
