"""
AI-assisted card and distractor generation.

Card generation failures surface as CardGenerationError for the caller to
show. Distractor generation never fails: any problem falls back to a random
sample of the set's other terms.
"""
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional, Sequence, Set

from loguru import logger

from intellideck.data.prompts.card_prompts import (
    CARD_GENERATOR_PROMPT, CARD_GENERATOR_TEMPLATE, DISTRACTOR_PROMPT, DISTRACTOR_TEMPLATE
)
from intellideck.engine.mastery_queue import DISTRACTOR_COUNT, fallback_distractors
from intellideck.engine.shuffle import Shuffler
from intellideck.llm.base import AgentClient, build_model
from intellideck.models.flashcard_models import DistractorOptions, GeneratedCard, GeneratedCardSet
from intellideck.utils.config_loader import Settings

EMPTY_NOTES_MESSAGE = "Please paste your notes for AI generation."
GENERATION_FAILED_MESSAGE = (
    "Failed to generate flashcards. The AI may be experiencing issues or the "
    "provided text is too complex. Please try again."
)
NOT_CONFIGURED_MESSAGE = "AI generation is not configured. Set GEMINI_API_KEY and try again."


class CardGenerationError(RuntimeError):
    """Card generation failed; the message is user-facing"""


class EmptyNotesError(CardGenerationError):
    pass


class GenerationInProgressError(RuntimeError):
    pass


class GenerationGuard:
    """Rejects a generation request while another one for the same key is running"""

    def __init__(self):
        self._active: Set[str] = set()

    def is_active(self, key: str) -> bool:
        return key in self._active

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        if key in self._active:
            raise GenerationInProgressError(f"Generation already in progress for '{key}'")
        self._active.add(key)
        try:
            yield
        finally:
            self._active.discard(key)


class CardGenerator:
    def __init__(
        self,
        cards_agent: Optional[Any] = None,
        distractor_agent: Optional[Any] = None,
        shuffler: Optional[Shuffler] = None,
    ):
        self.cards_agent = cards_agent
        self.distractor_agent = distractor_agent
        self.shuffler = shuffler or Shuffler()

    @classmethod
    def from_settings(cls, settings: Settings, shuffler: Optional[Shuffler] = None) -> "CardGenerator":
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set; card generation disabled, distractors use fallback")
            return cls(shuffler=shuffler)

        cards_agent = AgentClient(
            system_prompt=CARD_GENERATOR_PROMPT,
            model=build_model(settings.cards_model, settings.gemini_api_key),
        ).create_agent(result_type=GeneratedCardSet)
        distractor_agent = AgentClient(
            system_prompt=DISTRACTOR_PROMPT,
            model=build_model(settings.distractor_model, settings.gemini_api_key),
        ).create_agent(result_type=DistractorOptions)
        return cls(cards_agent=cards_agent, distractor_agent=distractor_agent, shuffler=shuffler)

    async def generate_cards(self, notes: str) -> List[GeneratedCard]:
        """
        Turn free-form notes into term/definition pairs.

        Args:
            notes: Raw notes text; must not be blank

        Returns:
            Generated cards in the order the model produced them

        Raises:
            CardGenerationError: Blank notes, missing configuration, or an upstream failure
        """
        if not notes or not notes.strip():
            raise EmptyNotesError(EMPTY_NOTES_MESSAGE)
        if self.cards_agent is None:
            raise CardGenerationError(NOT_CONFIGURED_MESSAGE)

        logger.info(f"Generating flashcards from {len(notes)} characters of notes")
        try:
            result = await self.cards_agent.run(CARD_GENERATOR_TEMPLATE.format(notes=notes))
            flashcards = result.output.flashcards
        except Exception as e:
            logger.error(f"Error generating flashcards with Gemini: {e}")
            raise CardGenerationError(GENERATION_FAILED_MESSAGE) from e

        cards = [
            GeneratedCard(term=c.term.strip(), definition=c.definition.strip())
            for c in flashcards
            if c.term.strip() and c.definition.strip()
        ]
        if not cards:
            logger.error("AI response did not contain any usable flashcards")
            raise CardGenerationError(GENERATION_FAILED_MESSAGE)

        logger.info(f"Generated {len(cards)} flashcards")
        return cards

    async def generate_distractors(self, term: str, definition: str, all_terms: Sequence[str]) -> List[str]:
        """Three wrong options for term; falls back to other set terms on any failure"""
        if self.distractor_agent is None:
            return fallback_distractors(term, all_terms, self.shuffler)

        others = [t for t in all_terms if t.lower() != term.lower()]
        prompt = DISTRACTOR_TEMPLATE.format(
            term=term,
            definition=definition,
            known_terms="\n".join(f"- {t}" for t in others) or "(none)",
        )
        try:
            result = await self.distractor_agent.run(prompt)
            raw_options = result.output.options
        except Exception as e:
            logger.warning(f"Error generating MCQ options with Gemini, using fallback: {e}")
            return fallback_distractors(term, all_terms, self.shuffler)

        options: List[str] = []
        for option in raw_options:
            option = option.strip()
            if option and option.lower() != term.lower() and option.lower() not in {o.lower() for o in options}:
                options.append(option)

        if len(options) < DISTRACTOR_COUNT:
            logger.warning(f"AI returned {len(options)} usable options for '{term}', using fallback")
            return fallback_distractors(term, all_terms, self.shuffler)
        return options[:DISTRACTOR_COUNT]
