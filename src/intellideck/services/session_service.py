"""
In-memory registry of active study sessions and their views.
"""
import uuid
from dataclasses import dataclass, field
from typing import Dict, Literal, Sequence, Union

from loguru import logger

from intellideck.engine.flashcard_deck import FlashcardDeck
from intellideck.engine.mastery_queue import MasteryQueue, build_options, fallback_distractors
from intellideck.engine.match_game import MatchGame
from intellideck.engine.question_builder import PracticeTest
from intellideck.engine.retry_queue import RetryQueue
from intellideck.engine.shuffle import Shuffler
from intellideck.engine.timers import TransitionTimer
from intellideck.models.flashcard_models import Card
from intellideck.models.study_models import (
    FlashcardSessionView, LearnSessionView, MatchSessionView, PracticeTestView, WriteSessionView
)
from intellideck.services.generation_service import CardGenerator, GenerationGuard, GenerationInProgressError
from intellideck.utils.config_loader import Settings
from intellideck.utils.kv_store import BestTimeStore

StudyMode = Literal["flashcards", "learn", "write", "test", "match"]
Engine = Union[FlashcardDeck, MasteryQueue, RetryQueue, PracticeTest, MatchGame]
SessionView = Union[
    FlashcardSessionView, LearnSessionView, WriteSessionView, PracticeTestView, MatchSessionView
]


class SessionNotFoundError(LookupError):
    pass


@dataclass
class StudySession:
    session_id: str
    mode: StudyMode
    topic: str
    engine: Engine
    timer: TransitionTimer = field(default_factory=TransitionTimer)


class SessionRegistry:
    def __init__(self, settings: Settings, shuffler: Shuffler, best_times: BestTimeStore):
        self.settings = settings
        self.shuffler = shuffler
        self.best_times = best_times
        self._sessions: Dict[str, StudySession] = {}

    def start(self, mode: StudyMode, topic: str, cards: Sequence[Card]) -> StudySession:
        engine: Engine
        if mode == "write":
            engine = RetryQueue(
                cards,
                self.shuffler,
                correct_delay_ms=self.settings.write_correct_delay_ms,
                incorrect_delay_ms=self.settings.write_incorrect_delay_ms,
            )
        elif mode == "learn":
            engine = MasteryQueue(cards, self.shuffler)
        elif mode == "test":
            engine = PracticeTest(cards, self.shuffler)
        elif mode == "match":
            engine = MatchGame(
                cards, self.shuffler, best_times=self.best_times, pair_count=self.settings.match_pair_count
            )
        elif mode == "flashcards":
            engine = FlashcardDeck(cards, self.shuffler)
        else:
            raise ValueError(f"Unknown study mode '{mode}'")

        session = StudySession(session_id=uuid.uuid4().hex, mode=mode, topic=topic, engine=engine)
        self._sessions[session.session_id] = session
        logger.info(f"Started {mode} session {session.session_id} on '{topic}' ({len(cards)} cards)")
        return session

    def get(self, session_id: str) -> StudySession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session '{session_id}' not found") from None

    def restart(self, session_id: str) -> StudySession:
        """Cancel pending transitions, then restart the engine"""
        session = self.get(session_id)
        session.timer.cancel()
        session.engine.restart()
        return session

    def end(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.timer.cancel()

    def refresh_cards(self, topic: str, cards: Sequence[Card]) -> None:
        """Propagate star changes to open flashcard sessions on the same set"""
        for session in self._sessions.values():
            if session.topic == topic and isinstance(session.engine, FlashcardDeck):
                session.engine.refresh(cards)


async def prepare_learn_options(
    queue: MasteryQueue,
    generator: CardGenerator,
    guard: GenerationGuard,
    session_id: str,
) -> None:
    """Fetch distractors for the current Learn card and attach the shuffled options"""
    card = queue.current
    if card is None or queue.options:
        return
    try:
        async with guard.hold(f"distractors:{session_id}"):
            distractors = await generator.generate_distractors(card.term, card.definition, queue.all_terms)
    except GenerationInProgressError:
        logger.warning(f"Distractors already being generated for session {session_id}, using fallback")
        distractors = fallback_distractors(card.term, queue.all_terms, queue.shuffler)
    # The session may have moved on while we were waiting
    if queue.current is card and not queue.options:
        queue.present_options(build_options(card.term, distractors, queue.shuffler))


def render(session: StudySession) -> SessionView:
    engine = session.engine
    sid = session.session_id
    if isinstance(engine, RetryQueue):
        return WriteSessionView(
            session_id=sid,
            current=engine.current,
            answer_state=engine.answer_state,
            round=engine.round,
            correct_count=engine.correct_count,
            total=engine.total,
            is_complete=engine.is_complete,
        )
    if isinstance(engine, MasteryQueue):
        return LearnSessionView(
            session_id=sid,
            current=engine.current,
            options=engine.options,
            selected_answer=engine.selected_answer,
            was_correct=engine.was_correct,
            pool_sizes=engine.pool_sizes(),
            total=len(engine.snapshot),
            is_complete=engine.is_complete,
        )
    if isinstance(engine, PracticeTest):
        return PracticeTestView(
            session_id=sid,
            questions=engine.questions,
            answers=engine.answers,
            result=engine.result,
        )
    if isinstance(engine, MatchGame):
        return MatchSessionView(
            session_id=sid,
            tiles=engine.tiles,
            selected_tile_id=engine.selected.id if engine.selected else None,
            incorrect_tile_ids=engine.incorrect_tile_ids,
            matched_card_ids=engine.matched_card_ids,
            elapsed_ms=engine.elapsed_ms,
            best_time_ms=engine.best_time_ms,
            is_complete=engine.is_complete,
            is_new_record=engine.is_new_record,
        )
    return FlashcardSessionView(
        session_id=sid,
        current=engine.current,
        index=engine.index,
        total=len(engine.order),
        is_flipped=engine.is_flipped,
    )
