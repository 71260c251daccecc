"""
Study set library: creation with validation, star toggling, card filtering
and merging imported sets.
"""
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from intellideck.models.flashcard_models import Card, CardDraft, GeneratedCard, StudySet
from intellideck.utils import set_storage

MIN_VALID_CARDS = 2
TITLE_REQUIRED_MESSAGE = "Please enter a title for your study set."
TOO_FEW_CARDS_MESSAGE = "Please create at least 2 valid cards (with both term and definition)."


class SetValidationError(ValueError):
    """User input that cannot become a study set; the message is shown as-is"""


class SetNotFoundError(LookupError):
    pass


def _timestamp_ids() -> Callable[[int], str]:
    stamp = int(time.time() * 1000)
    return lambda index: f"{stamp}-{index}"


def merge_generated(drafts: Sequence[CardDraft], generated: Sequence[GeneratedCard]) -> List[CardDraft]:
    """Drop fully blank draft rows, then append the generated cards"""
    kept = [d for d in drafts if d.term or d.definition]
    return kept + [CardDraft(term=g.term, definition=g.definition) for g in generated]


class Library:
    def __init__(self, sets: Optional[Iterable[StudySet]] = None):
        self._sets: Dict[str, StudySet] = {}
        if sets:
            self.add_imported(sets)

    def list_sets(self) -> List[StudySet]:
        return list(self._sets.values())

    @property
    def topics(self) -> List[str]:
        return list(self._sets)

    def get(self, topic: str) -> StudySet:
        try:
            return self._sets[topic]
        except KeyError:
            raise SetNotFoundError(f"Study set '{topic}' not found") from None

    def create_set(
        self,
        title: str,
        drafts: Sequence[CardDraft],
        id_factory: Optional[Callable[[int], str]] = None,
    ) -> StudySet:
        """
        Validate a create-set form and add the resulting set

        Args:
            title: Set title, becomes the topic
            drafts: Card rows; rows missing a term or definition are dropped
            id_factory: Maps a row index to a card id (timestamp-based by default)

        Returns:
            The new StudySet, with every card unstarred

        Raises:
            SetValidationError: Blank title, duplicate title, or fewer than 2 valid cards
        """
        topic = title.strip()
        if not topic:
            raise SetValidationError(TITLE_REQUIRED_MESSAGE)
        if topic in self._sets:
            raise SetValidationError(f"A study set named '{topic}' already exists.")

        make_id = id_factory or _timestamp_ids()
        cards = [
            Card(id=make_id(index), term=d.term.strip(), definition=d.definition.strip(), is_starred=False)
            for index, d in enumerate(drafts)
            if d.is_complete()
        ]
        if len(cards) < MIN_VALID_CARDS:
            raise SetValidationError(TOO_FEW_CARDS_MESSAGE)

        study_set = StudySet(topic=topic, cards=cards)
        self._sets[topic] = study_set
        logger.info(f"Created study set '{topic}' with {len(cards)} cards")
        return study_set

    def toggle_star(self, topic: str, card_id: str) -> Card:
        study_set = self.get(topic)
        updated: Optional[Card] = None
        cards: List[Card] = []
        for card in study_set.cards:
            if card.id == card_id:
                card = card.model_copy(update={"is_starred": not card.is_starred})
                updated = card
            cards.append(card)
        if updated is None:
            raise SetNotFoundError(f"Card '{card_id}' not found in '{topic}'")
        self._sets[topic] = StudySet(topic=topic, cards=cards)
        return updated

    def study_cards(self, topic: str, starred_only: bool = False) -> List[Card]:
        """Snapshot of a set's cards for a study session"""
        cards = self.get(topic).cards
        if starred_only:
            return [c for c in cards if c.is_starred]
        return list(cards)

    def starred_count(self, topic: str) -> int:
        return sum(1 for c in self.get(topic).cards if c.is_starred)

    def add_imported(self, sets: Iterable[StudySet]) -> List[StudySet]:
        """Add sets whose topic is not in the library yet; the first one loaded wins"""
        added: List[StudySet] = []
        for study_set in sets:
            if study_set.topic in self._sets:
                logger.info(f"Skipping duplicate topic '{study_set.topic}'")
                continue
            self._sets[study_set.topic] = study_set
            added.append(study_set)
        return added

    def load_folder(self, folder: Path) -> List[StudySet]:
        added = self.add_imported(set_storage.load_folder(folder, existing_topics=self.topics))
        if added:
            logger.info(f"Loaded {len(added)} study set(s) from {folder}")
        return added

    def export(self, topic: str, output_dir: Path) -> Path:
        return set_storage.export_set(self.get(topic), output_dir)
