"""
Study session routes
Starts sessions over a set's cards and drives each study mode
"""
from typing import Literal, Type, TypeVar

from fastapi import APIRouter, HTTPException
from loguru import logger
from pydantic import BaseModel

from intellideck.api.dependencies import Context
from intellideck.engine.errors import SessionStateError
from intellideck.engine.flashcard_deck import FlashcardDeck
from intellideck.engine.mastery_queue import MasteryQueue
from intellideck.engine.match_game import MIN_CARDS, MatchGame
from intellideck.engine.question_builder import PracticeTest
from intellideck.engine.retry_queue import RetryQueue
from intellideck.services.session_service import StudyMode, StudySession, prepare_learn_options, render

router = APIRouter(prefix="/api/study", tags=["Study"])

E = TypeVar("E")


class StartSessionRequest(BaseModel):
    topic: str
    starred_only: bool = False


class AnswerRequest(BaseModel):
    answer: str


class ConfirmRequest(BaseModel):
    knew: bool


class SelectTileRequest(BaseModel):
    tile_id: str


def _engine(session: StudySession, engine_type: Type[E]) -> E:
    if not isinstance(session.engine, engine_type):
        raise SessionStateError(f"Session {session.session_id} is a {session.mode} session")
    return session.engine


async def _with_learn_options(ctx, session: StudySession) -> None:
    if isinstance(session.engine, MasteryQueue):
        await prepare_learn_options(session.engine, ctx.generator, ctx.guard, session.session_id)


@router.post("/{mode}")
async def start_session(mode: StudyMode, request: StartSessionRequest, ctx: Context):
    """
    Start a study session on a snapshot of a set's cards

    - **mode**: flashcards, learn, write, test or match
    - **topic**: Set to study
    - **starred_only**: Study only starred cards
    """
    cards = ctx.library.study_cards(request.topic, starred_only=request.starred_only)
    if mode == "match" and len(cards) < MIN_CARDS:
        raise HTTPException(status_code=400, detail=f"Match mode needs at least {MIN_CARDS} cards.")

    session = ctx.sessions.start(mode, request.topic, cards)
    await _with_learn_options(ctx, session)
    return render(session)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, ctx: Context):
    session = ctx.sessions.get(session_id)
    await _with_learn_options(ctx, session)
    return render(session)


@router.post("/sessions/{session_id}/restart")
async def restart_session(session_id: str, ctx: Context):
    """Start over on the same snapshot; pending delayed transitions are dropped"""
    session = ctx.sessions.restart(session_id)
    await _with_learn_options(ctx, session)
    return render(session)


@router.delete("/sessions/{session_id}")
async def end_session(session_id: str, ctx: Context):
    ctx.sessions.end(session_id)
    return {"message": "Session ended"}


# ============= WRITE =============

@router.post("/sessions/{session_id}/answer")
async def submit_written_answer(session_id: str, request: AnswerRequest, ctx: Context):
    """
    Grade a typed term for the current definition

    The session advances on its own after the outcome's delay, or sooner via /next.
    """
    session = ctx.sessions.get(session_id)
    queue = _engine(session, RetryQueue)
    outcome = queue.submit(request.answer)

    def auto_advance() -> None:
        if queue.answer_state != "unanswered":
            queue.advance()
            if queue.is_complete:
                logger.info(f"Write session {session_id} complete")

    session.timer.schedule("advance", outcome.advance_after_ms, queue, auto_advance)
    return {"outcome": outcome, "session": render(session)}


@router.post("/sessions/{session_id}/next")
async def next_written_card(session_id: str, ctx: Context):
    session = ctx.sessions.get(session_id)
    queue = _engine(session, RetryQueue)
    session.timer.cancel("advance")
    queue.advance()
    return render(session)


# ============= LEARN =============

@router.post("/sessions/{session_id}/choose")
async def choose_option(session_id: str, request: AnswerRequest, ctx: Context):
    """Pick a multiple-choice option; the result is feedback only"""
    session = ctx.sessions.get(session_id)
    queue = _engine(session, MasteryQueue)
    was_correct = queue.choose(request.answer)
    return {"was_correct": was_correct, "correct_term": queue.current.term, "session": render(session)}


@router.post("/sessions/{session_id}/confirm")
async def confirm_mastery(session_id: str, request: ConfirmRequest, ctx: Context):
    """
    Report whether the learner knew the card

    - **knew**: true moves the card to known, false keeps it in learning
    """
    session = ctx.sessions.get(session_id)
    queue = _engine(session, MasteryQueue)
    queue.confirm(request.knew)
    if queue.is_complete:
        logger.info(f"Learn session {session_id} complete")
    await _with_learn_options(ctx, session)
    return render(session)


# ============= TEST =============

@router.put("/sessions/{session_id}/answers/{question_id}")
async def answer_question(session_id: str, question_id: str, request: AnswerRequest, ctx: Context):
    session = ctx.sessions.get(session_id)
    test = _engine(session, PracticeTest)
    try:
        test.answer(question_id, request.answer)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Question {question_id} not found")
    return render(session)


@router.post("/sessions/{session_id}/submit")
async def submit_test(session_id: str, ctx: Context):
    session = ctx.sessions.get(session_id)
    result = _engine(session, PracticeTest).submit()
    logger.info(f"Test session {session_id} scored {result.score}/{result.total}")
    return result


# ============= MATCH =============

@router.post("/sessions/{session_id}/select")
async def select_tile(session_id: str, request: SelectTileRequest, ctx: Context):
    """Select a tile; a wrong pair flashes briefly, then both tiles are released"""
    session = ctx.sessions.get(session_id)
    game = _engine(session, MatchGame)
    try:
        result = game.select(request.tile_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Tile {request.tile_id} not found")

    if result.status == "mismatch":
        session.timer.schedule("clear_incorrect", ctx.settings.mismatch_flash_ms, game, game.clear_incorrect)
    elif result.status == "completed":
        session.timer.cancel()
        logger.info(f"Match session {session_id} finished in {result.duration_ms} ms")
    elif not game.incorrect_tile_ids:
        # The click ended the flash early
        session.timer.cancel("clear_incorrect")
    return {"result": result, "session": render(session)}


# ============= FLASHCARDS =============

@router.post("/sessions/{session_id}/deck/{action}")
async def deck_action(
    session_id: str,
    action: Literal["flip", "next", "previous", "shuffle"],
    ctx: Context,
):
    session = ctx.sessions.get(session_id)
    deck = _engine(session, FlashcardDeck)
    if action == "flip":
        deck.flip()
    elif action == "next":
        deck.next()
    elif action == "previous":
        deck.previous()
    else:
        deck.shuffle()
    return render(session)
