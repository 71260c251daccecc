import os
import sys
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from intellideck.api.app_context import build_context
from intellideck.api.main import create_app
from intellideck.engine.shuffle import Shuffler
from intellideck.models.flashcard_models import Card
from intellideck.services.generation_service import CardGenerator
from intellideck.utils.config_loader import Settings
from intellideck.utils.kv_store import MemoryStore

TERMS = [
    ("Mitochondria", "Organelle that produces most of the cell's ATP"),
    ("Ribosome", "Site of protein synthesis"),
    ("Nucleus", "Holds the cell's genetic material"),
    ("Chloroplast", "Organelle where photosynthesis happens"),
    ("Golgi apparatus", "Packages and ships proteins"),
    ("Lysosome", "Digests waste inside the cell"),
    ("Vacuole", "Stores water and nutrients"),
    ("Cytoplasm", "Gel-like fluid filling the cell"),
]


def make_cards(count, starred=()):
    return [
        Card(id=f"c{i}", term=term, definition=definition, is_starred=f"c{i}" in starred)
        for i, (term, definition) in enumerate(TERMS[:count])
    ]


class FakeAgent:
    """Stands in for a pydantic-ai Agent: async run() returning an object with .output"""

    def __init__(self, output=None, error=None):
        self.output = output
        self.error = error
        self.prompts = []

    async def run(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(output=self.output)


class FakeClock:
    def __init__(self, now=1_000):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def cards():
    return make_cards(8)


@pytest.fixture
def shuffler():
    return Shuffler(seed=1234)


@pytest.fixture
def settings(tmp_path):
    # Long delays keep auto-advance timers from firing mid-test
    return Settings(
        library_dir=str(tmp_path / "library"),
        best_time_path=str(tmp_path / "best_time.json"),
        seed=7,
        write_correct_delay_ms=60_000,
        write_incorrect_delay_ms=60_000,
        mismatch_flash_ms=60_000,
    )


@pytest.fixture
def make_client(settings):
    clients = []

    def factory(generator=None):
        context = build_context(
            settings,
            generator=generator or CardGenerator(shuffler=Shuffler(seed=3)),
            store=MemoryStore(),
        )
        client = TestClient(create_app(context))
        client.__enter__()
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
