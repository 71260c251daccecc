# src/intellideck/api/app_context.py
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from intellideck.engine.shuffle import Shuffler
from intellideck.services.generation_service import CardGenerator, GenerationGuard
from intellideck.services.library_service import Library
from intellideck.services.session_service import SessionRegistry
from intellideck.utils.config_loader import Settings
from intellideck.utils.kv_store import BestTimeStore, JsonFileStore, KeyValueStore


@dataclass
class AppContext:
    settings: Settings
    library: Library
    sessions: SessionRegistry
    generator: CardGenerator
    guard: GenerationGuard = field(default_factory=GenerationGuard)

    @property
    def library_dir(self) -> Path:
        return Path(self.settings.library_dir)


def build_context(
    settings: Settings,
    generator: Optional[CardGenerator] = None,
    store: Optional[KeyValueStore] = None,
    library: Optional[Library] = None,
) -> AppContext:
    """Wire the app's collaborators; anything passed in replaces the default"""
    shuffler = Shuffler(seed=settings.seed)
    best_times = BestTimeStore(store or JsonFileStore(settings.best_time_path), key=settings.best_time_key)
    if library is None:
        library = Library()
        library.load_folder(Path(settings.library_dir))
    return AppContext(
        settings=settings,
        library=library,
        sessions=SessionRegistry(settings, shuffler, best_times),
        generator=generator or CardGenerator.from_settings(settings, shuffler),
    )
