# tests/conftest.py

from __future__ import annotations

import random
from pathlib import Path

import pytest

from teemo.session import TaskService
from teemo.store import RecordStore

from .fakes import FakeCodeSender


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture()
def store(data_dir: Path) -> RecordStore:
    """Real JSON-backed store in a per-test directory."""
    return RecordStore(data_dir=str(data_dir))


@pytest.fixture()
def sender() -> FakeCodeSender:
    return FakeCodeSender()


@pytest.fixture()
def service(store: RecordStore, sender: FakeCodeSender) -> TaskService:
    """
    Logged-out service with a captured code channel and a seeded RNG,
    so recovery codes are deterministic within a test.
    """
    return TaskService(store, send_code=sender, rng=random.Random(1234))


@pytest.fixture()
def logged_in(service: TaskService) -> TaskService:
    assert service.register("a@x.com", "password1", "password1")
    return service
