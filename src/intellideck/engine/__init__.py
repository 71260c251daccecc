"""
Study engines: pure, synchronous state machines over a fixed card snapshot.

None of them touch storage or the network; randomness comes from an injected
Shuffler and persistence (match best time) from an injected key-value store.
"""
from .errors import SessionStateError
from .grader import EmptyAnswerError, grade, grade_exact, levenshtein_distance
from .shuffle import Shuffler
from .retry_queue import RetryQueue
from .mastery_queue import MasteryQueue
from .question_builder import PracticeTest, build_questions
from .match_game import MatchGame
from .flashcard_deck import FlashcardDeck

__all__ = [
    "SessionStateError",
    "EmptyAnswerError",
    "grade",
    "grade_exact",
    "levenshtein_distance",
    "Shuffler",
    "RetryQueue",
    "MasteryQueue",
    "PracticeTest",
    "build_questions",
    "MatchGame",
    "FlashcardDeck",
]
