from typing import List, Optional, Sequence

from intellideck.engine.shuffle import Shuffler
from intellideck.models.flashcard_models import Card


class FlashcardDeck:
    """Flip-through browsing of a shuffled snapshot; navigation wraps around"""

    def __init__(self, cards: Sequence[Card], shuffler: Optional[Shuffler] = None):
        self.snapshot: List[Card] = list(cards)
        self.shuffler = shuffler or Shuffler()
        self.epoch = 0
        self.shuffle()

    def shuffle(self) -> None:
        self.order: List[Card] = self.shuffler.permute(self.snapshot)
        self.index = 0
        self.is_flipped = False

    def restart(self) -> None:
        self.epoch += 1
        self.shuffle()

    @property
    def current(self) -> Optional[Card]:
        return self.order[self.index] if self.order else None

    def flip(self) -> bool:
        self.is_flipped = not self.is_flipped
        return self.is_flipped

    def next(self) -> Optional[Card]:
        if self.order:
            self.is_flipped = False
            self.index = (self.index + 1) % len(self.order)
        return self.current

    def previous(self) -> Optional[Card]:
        if self.order:
            self.is_flipped = False
            self.index = (self.index - 1) % len(self.order)
        return self.current

    def refresh(self, cards: Sequence[Card]) -> None:
        """Swap in updated copies of the same cards (e.g. after a star toggle) without reordering"""
        by_id = {c.id: c for c in cards}
        self.snapshot = [by_id.get(c.id, c) for c in self.snapshot]
        self.order = [by_id.get(c.id, c) for c in self.order]
