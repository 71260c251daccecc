"""
Test mode: question building and scoring.

Half the cards (rounded down) become multiple-choice questions, the rest
free-text. Both kinds are graded by exact, case-insensitive comparison;
Test mode does not forgive typos.
"""
from typing import Dict, List, Optional, Sequence

from intellideck.engine.errors import SessionStateError
from intellideck.engine.grader import distinct_other_terms, grade_exact
from intellideck.engine.shuffle import Shuffler
from intellideck.models.flashcard_models import Card
from intellideck.models.study_models import GradedTest, Question, QuestionResult

MAX_DISTRACTORS = 3


def build_questions(cards: Sequence[Card], shuffler: Shuffler) -> List[Question]:
    shuffled = shuffler.permute(cards)
    mc_count = len(cards) // 2
    questions: List[Question] = []

    for index, card in enumerate(shuffled):
        if index < mc_count:
            candidates = distinct_other_terms(card.term, [c.term for c in cards])
            distractors = shuffler.sample(candidates, min(MAX_DISTRACTORS, len(candidates)))
            questions.append(Question(
                id=card.id,
                kind="multiple_choice",
                card=card,
                options=shuffler.permute([card.term, *distractors]),
            ))
        else:
            questions.append(Question(id=card.id, kind="free_text", card=card))

    return shuffler.permute(questions)


def score_questions(questions: Sequence[Question], answers: Dict[str, str]) -> GradedTest:
    results: List[QuestionResult] = []
    for q in questions:
        user_answer = answers.get(q.id)
        results.append(QuestionResult(
            question_id=q.id,
            kind=q.kind,
            user_answer=user_answer,
            correct_term=q.card.term,
            is_correct=user_answer is not None and grade_exact(user_answer, q.card.term),
        ))
    return GradedTest(
        score=sum(1 for r in results if r.is_correct),
        total=len(results),
        results=results,
    )


class PracticeTest:
    """One sitting of a test built from a snapshot; retakes reuse the questions"""

    def __init__(self, cards: Sequence[Card], shuffler: Optional[Shuffler] = None):
        self.shuffler = shuffler or Shuffler()
        self.questions: List[Question] = build_questions(list(cards), self.shuffler)
        self.answers: Dict[str, str] = {}
        self.result: Optional[GradedTest] = None
        self.epoch = 0

    @property
    def is_submitted(self) -> bool:
        return self.result is not None

    def answer(self, question_id: str, text: str) -> None:
        if self.is_submitted:
            raise SessionStateError("The test was already submitted.")
        if question_id not in {q.id for q in self.questions}:
            raise KeyError(question_id)
        self.answers[question_id] = text

    def submit(self) -> GradedTest:
        self.result = score_questions(self.questions, self.answers)
        return self.result

    def retake(self) -> None:
        self.epoch += 1
        self.questions = self.shuffler.permute(self.questions)
        self.answers = {}
        self.result = None

    def restart(self) -> None:
        self.retake()
