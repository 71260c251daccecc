"""
Tests for Match mode: tile pairing, the mismatch flash and best times.
"""
import pytest

from conftest import FakeClock, make_cards
from intellideck.engine.match_game import MatchGame, build_tiles
from intellideck.engine.shuffle import Shuffler
from intellideck.utils.kv_store import BestTimeStore, MemoryStore


def play_perfect(game, clock, step_ms=500):
    last = None
    for card_id in [t.card_id for t in game.tiles if t.kind == "term"]:
        clock.now += step_ms
        game.select(f"{card_id}-term")
        last = game.select(f"{card_id}-def")
    return last


class TestBuildTiles:

    def test_caps_at_six_pairs(self, cards, shuffler):
        tiles = build_tiles(cards, shuffler)
        assert len(tiles) == 12
        card_ids = {t.card_id for t in tiles}
        assert len(card_ids) == 6
        for card_id in card_ids:
            kinds = sorted(t.kind for t in tiles if t.card_id == card_id)
            assert kinds == ["definition", "term"]

    def test_small_set_uses_every_card(self, shuffler):
        tiles = build_tiles(make_cards(3), shuffler)
        assert len(tiles) == 6


class TestMatchGame:

    def test_two_card_minimum(self):
        assert not MatchGame(make_cards(1), Shuffler(seed=1)).is_playable
        assert MatchGame(make_cards(2), Shuffler(seed=1)).is_playable

    def test_timer_starts_on_first_click(self, cards, shuffler):
        clock = FakeClock()
        game = MatchGame(cards, shuffler, clock=clock)
        clock.now += 5_000
        assert game.elapsed_ms == 0
        game.select(game.tiles[0].id)
        clock.now += 250
        assert game.elapsed_ms == 250

    def test_match_pair(self, shuffler):
        game = MatchGame(make_cards(3), shuffler, clock=FakeClock())
        assert game.select("c1-def").status == "selected"
        result = game.select("c1-term")
        assert result.status == "matched"
        assert result.matched_card_id == "c1"
        assert game.selected is None

    def test_matched_tiles_are_ignored(self, shuffler):
        game = MatchGame(make_cards(3), shuffler, clock=FakeClock())
        game.select("c1-def")
        game.select("c1-term")
        assert game.select("c1-term").status == "ignored"
        assert game.selected is None

    def test_same_tile_twice_is_a_mismatch(self, shuffler):
        game = MatchGame(make_cards(3), shuffler, clock=FakeClock())
        game.select("c0-term")
        assert game.select("c0-term").status == "mismatch"

    def test_mismatch_flash(self, shuffler):
        game = MatchGame(make_cards(3), shuffler, clock=FakeClock())
        game.select("c0-term")
        result = game.select("c1-def")
        assert result.status == "mismatch"
        assert game.incorrect_tile_ids == ["c0-term", "c1-def"]
        assert game.matched_card_ids == []

        game.clear_incorrect()
        assert game.incorrect_tile_ids == []
        assert game.selected is None

    def test_click_during_flash_starts_fresh(self, shuffler):
        game = MatchGame(make_cards(3), shuffler, clock=FakeClock())
        game.select("c0-term")
        game.select("c1-def")
        assert game.select("c2-term").status == "selected"
        assert game.incorrect_tile_ids == []
        assert game.selected.id == "c2-term"

    def test_unknown_tile(self, shuffler):
        game = MatchGame(make_cards(3), shuffler)
        with pytest.raises(KeyError):
            game.select("nope")

    def test_completion_records_best_time(self, cards, shuffler):
        store = BestTimeStore(MemoryStore())
        clock = FakeClock()
        game = MatchGame(cards, shuffler, best_times=store, clock=clock)

        result = play_perfect(game, clock)
        assert result.status == "completed"
        assert result.duration_ms == 2_500
        assert result.is_new_record
        assert game.is_complete
        assert store.get() == 2_500
        assert game.select(game.tiles[0].id).status == "ignored"

    def test_slower_run_keeps_record(self, cards, shuffler):
        store = BestTimeStore(MemoryStore({"intellideck-match-best-time": 1_000}))
        clock = FakeClock()
        game = MatchGame(cards, shuffler, best_times=store, clock=clock)
        assert game.best_time_ms == 1_000

        result = play_perfect(game, clock)
        assert not result.is_new_record
        assert store.get() == 1_000

    def test_equal_time_is_not_a_record(self, cards, shuffler):
        store = BestTimeStore(MemoryStore({"intellideck-match-best-time": 2_500}))
        clock = FakeClock()
        game = MatchGame(cards, shuffler, best_times=store, clock=clock)
        assert not play_perfect(game, clock).is_new_record

    def test_restart_deals_new_tiles(self, cards, shuffler):
        clock = FakeClock()
        game = MatchGame(cards, shuffler, clock=clock)
        play_perfect(game, clock)
        game.restart()
        assert game.epoch == 1
        assert game.matched_card_ids == []
        assert game.elapsed_ms == 0
        assert not game.is_complete

    def test_late_flash_clear_keeps_new_pick(self, shuffler):
        game = MatchGame(make_cards(3), shuffler, clock=FakeClock())
        game.select("c0-term")
        game.select("c1-def")
        game.select("c2-term")

        # The delayed clear from the first mismatch arrives after the new pick
        game.clear_incorrect()
        assert game.selected.id == "c2-term"
        assert game.select("c2-def").status == "matched"
