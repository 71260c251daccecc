"""
Match mode: pair each term tile with its definition tile against the clock.
"""
import time
from typing import Callable, List, Optional, Sequence

from intellideck.engine.shuffle import Shuffler
from intellideck.models.flashcard_models import Card
from intellideck.models.study_models import MatchTile, SelectionResult
from intellideck.utils.kv_store import BestTimeStore

PAIR_COUNT = 6
MIN_CARDS = 2


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


def build_tiles(cards: Sequence[Card], shuffler: Shuffler, pair_count: int = PAIR_COUNT) -> List[MatchTile]:
    chosen = shuffler.sample(cards, pair_count)
    tiles: List[MatchTile] = []
    for card in chosen:
        tiles.append(MatchTile(id=f"{card.id}-term", kind="term", content=card.term, card_id=card.id))
        tiles.append(MatchTile(id=f"{card.id}-def", kind="definition", content=card.definition, card_id=card.id))
    return shuffler.permute(tiles)


class MatchGame:
    def __init__(
        self,
        cards: Sequence[Card],
        shuffler: Optional[Shuffler] = None,
        best_times: Optional[BestTimeStore] = None,
        clock: Callable[[], int] = _monotonic_ms,
        pair_count: int = PAIR_COUNT,
    ):
        self.snapshot: List[Card] = list(cards)
        self.shuffler = shuffler or Shuffler()
        self.best_times = best_times
        self.clock = clock
        self.pair_count = pair_count
        self.best_time_ms: Optional[int] = best_times.get() if best_times else None
        self.epoch = 0
        self._start()

    def _start(self) -> None:
        self.tiles: List[MatchTile] = build_tiles(self.snapshot, self.shuffler, self.pair_count)
        self._by_id = {tile.id: tile for tile in self.tiles}
        self.selected: Optional[MatchTile] = None
        self.matched_card_ids: List[str] = []
        self.incorrect_tile_ids: List[str] = []
        self.start_ms: Optional[int] = None
        self.end_ms: Optional[int] = None
        self.is_new_record = False

    def restart(self) -> None:
        self.epoch += 1
        self._start()

    @property
    def is_playable(self) -> bool:
        return len(self.snapshot) >= MIN_CARDS

    @property
    def is_complete(self) -> bool:
        return bool(self.tiles) and len(self.matched_card_ids) * 2 == len(self.tiles)

    @property
    def elapsed_ms(self) -> int:
        if self.start_ms is None:
            return 0
        now = self.end_ms if self.end_ms is not None else self.clock()
        return max(0, now - self.start_ms)

    def select(self, tile_id: str) -> SelectionResult:
        tile = self._by_id.get(tile_id)
        if tile is None:
            raise KeyError(tile_id)
        if self.end_ms is not None or tile.card_id in self.matched_card_ids:
            return SelectionResult(status="ignored", tile_id=tile_id)

        # A click during the mismatch flash starts a fresh pick
        if self.incorrect_tile_ids:
            self.clear_incorrect()

        if self.start_ms is None:
            self.start_ms = self.clock()

        if self.selected is None:
            self.selected = tile
            return SelectionResult(status="selected", tile_id=tile_id)

        if self.selected.card_id == tile.card_id and self.selected.kind != tile.kind:
            self.matched_card_ids.append(tile.card_id)
            self.selected = None
            if self.is_complete:
                return self._finish(tile)
            return SelectionResult(status="matched", tile_id=tile_id, matched_card_id=tile.card_id)

        self.incorrect_tile_ids = [self.selected.id, tile.id]
        return SelectionResult(status="mismatch", tile_id=tile_id)

    def clear_incorrect(self) -> None:
        """End the mismatch flash; both tiles become unselected"""
        # A pick made after the flash ended early is kept
        if not self.incorrect_tile_ids:
            return
        self.incorrect_tile_ids = []
        self.selected = None

    def _finish(self, tile: MatchTile) -> SelectionResult:
        self.end_ms = self.clock()
        duration = self.elapsed_ms
        if self.best_times is not None:
            self.is_new_record = self.best_times.record(duration)
            self.best_time_ms = self.best_times.get()
        elif self.best_time_ms is None or duration < self.best_time_ms:
            self.best_time_ms = duration
            self.is_new_record = True
        return SelectionResult(
            status="completed",
            tile_id=tile.id,
            matched_card_id=tile.card_id,
            duration_ms=duration,
            is_new_record=self.is_new_record,
        )
