"""
Two-pool retry scheduler used by Write mode.

Cards are consumed from the front of `remaining`. A missed card goes to
`missed`; when `remaining` runs out, `missed` is reshuffled into a new round.
The session completes once every card has been answered correctly in the
round it was last shown.
"""
from typing import Dict, List, Literal, Optional, Sequence

from intellideck.engine.errors import SessionStateError
from intellideck.engine.grader import grade, require_answer
from intellideck.engine.shuffle import Shuffler
from intellideck.models.flashcard_models import Card
from intellideck.models.study_models import AnswerOutcome

AnswerState = Literal["unanswered", "correct", "incorrect"]

CORRECT_DELAY_MS = 1200
INCORRECT_DELAY_MS = 2500


class RetryQueue:
    def __init__(
        self,
        cards: Sequence[Card],
        shuffler: Optional[Shuffler] = None,
        correct_delay_ms: int = CORRECT_DELAY_MS,
        incorrect_delay_ms: int = INCORRECT_DELAY_MS,
    ):
        self.snapshot: List[Card] = list(cards)
        self.shuffler = shuffler or Shuffler()
        self.correct_delay_ms = correct_delay_ms
        self.incorrect_delay_ms = incorrect_delay_ms
        self.epoch = 0
        self._start()

    def _start(self) -> None:
        self._remaining: List[Card] = self.shuffler.permute(self.snapshot)
        self._missed: List[Card] = []
        self._correct: List[Card] = []
        self._in_flight: Optional[Card] = None
        self.answer_state: AnswerState = "unanswered"
        self.round = 1

    def restart(self) -> None:
        """Begin a fresh session over the same snapshot"""
        self.epoch += 1
        self._start()

    @property
    def current(self) -> Optional[Card]:
        if self._in_flight is not None:
            return self._in_flight
        return self._remaining[0] if self._remaining else None

    @property
    def is_complete(self) -> bool:
        return self._in_flight is None and not self._remaining and not self._missed

    @property
    def correct_count(self) -> int:
        return len(self._correct)

    @property
    def total(self) -> int:
        return len(self.snapshot)

    def submit(self, answer: str) -> AnswerOutcome:
        """Grade a typed answer for the current card, tolerating typos"""
        require_answer(answer)
        card = self._require_unanswered()
        return self.record(grade(answer, card.term))

    def record(self, is_correct: bool) -> AnswerOutcome:
        """Record an outcome for the current card; the card stays shown until advance()"""
        card = self._require_unanswered()
        self._in_flight = self._remaining.pop(0)
        self.answer_state = "correct" if is_correct else "incorrect"
        return AnswerOutcome(
            card_id=card.id,
            is_correct=is_correct,
            correct_term=card.term,
            advance_after_ms=self.correct_delay_ms if is_correct else self.incorrect_delay_ms,
        )

    def advance(self) -> Optional[Card]:
        """Place the answered card and move to the next one; None when complete"""
        if self._in_flight is None:
            raise SessionStateError("Answer the current card before moving on.")

        if self.answer_state == "correct":
            self._correct.append(self._in_flight)
        else:
            self._missed.append(self._in_flight)
        self._in_flight = None
        self.answer_state = "unanswered"

        if not self._remaining and self._missed:
            self._remaining = self.shuffler.permute(self._missed)
            self._missed = []
            self.round += 1

        return self.current

    def pools(self) -> Dict[str, List[str]]:
        return {
            "remaining": [c.id for c in self._remaining],
            "missed": [c.id for c in self._missed],
            "correct": [c.id for c in self._correct],
        }

    def _require_unanswered(self) -> Card:
        if self.is_complete:
            raise SessionStateError("This session is complete.")
        if self.answer_state != "unanswered":
            raise SessionStateError("The current card has already been answered.")
        return self._remaining[0]
