from pydantic import BaseModel, ConfigDict
from typing import Dict, List, Literal, Optional

from intellideck.models.flashcard_models import Card


class Question(BaseModel):
    """A Test mode question; multiple-choice questions carry their options"""
    model_config = ConfigDict(frozen=True)

    id: str
    kind: Literal["multiple_choice", "free_text"]
    card: Card
    options: Optional[List[str]] = None


class QuestionResult(BaseModel):
    question_id: str
    kind: Literal["multiple_choice", "free_text"]
    user_answer: Optional[str] = None
    correct_term: str
    is_correct: bool


class GradedTest(BaseModel):
    score: int
    total: int
    results: List[QuestionResult]


class AnswerOutcome(BaseModel):
    """Result of grading a Write mode answer"""
    card_id: str
    is_correct: bool
    correct_term: str
    advance_after_ms: int


class MatchTile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: Literal["term", "definition"]
    content: str
    card_id: str


class SelectionResult(BaseModel):
    status: Literal["ignored", "selected", "matched", "mismatch", "completed"]
    tile_id: str
    matched_card_id: Optional[str] = None
    duration_ms: Optional[int] = None
    is_new_record: bool = False


# ============= SESSION VIEWS =============

class WriteSessionView(BaseModel):
    session_id: str
    mode: Literal["write"] = "write"
    current: Optional[Card] = None
    answer_state: Literal["unanswered", "correct", "incorrect"]
    round: int
    correct_count: int
    total: int
    is_complete: bool


class LearnSessionView(BaseModel):
    session_id: str
    mode: Literal["learn"] = "learn"
    current: Optional[Card] = None
    options: List[str]
    selected_answer: Optional[str] = None
    was_correct: Optional[bool] = None
    pool_sizes: Dict[str, int]
    total: int
    is_complete: bool


class PracticeTestView(BaseModel):
    session_id: str
    mode: Literal["test"] = "test"
    questions: List[Question]
    answers: Dict[str, str]
    result: Optional[GradedTest] = None


class MatchSessionView(BaseModel):
    session_id: str
    mode: Literal["match"] = "match"
    tiles: List[MatchTile]
    selected_tile_id: Optional[str] = None
    incorrect_tile_ids: List[str]
    matched_card_ids: List[str]
    elapsed_ms: int
    best_time_ms: Optional[int] = None
    is_complete: bool
    is_new_record: bool


class FlashcardSessionView(BaseModel):
    session_id: str
    mode: Literal["flashcards"] = "flashcards"
    current: Optional[Card] = None
    index: int
    total: int
    is_flipped: bool
