# tests/conftest.py

import pytest

from attendease.logic_models import AppState, CreditPackage, Role, User
from attendease.purchases import PurchaseProcessor
from attendease.storage import JsonFileStore
from attendease.studio import StudioService

from .factories import make_session, make_trainee


@pytest.fixture
def state():
    return AppState(
        users=[
            User(id="u1", email="admin@test.com", name="Super Admin", role=Role.ADMIN, password="password123"),
            User(id="u2", email="trainer@test.com", name="John Trainer", role=Role.TRAINER, password="password123"),
            make_trainee("alice", credits=1, name="Alice Trainee"),
            make_trainee("bob", credits=5),
            make_trainee("carol", credits=5),
            make_trainee("dave", credits=0),
        ],
        classes=[make_session()],
        packages=[CreditPackage(id="p10", name="Ten Pack", credits=10, price=80)],
    )


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(str(tmp_path / "db.json"))


@pytest.fixture
def studio(store, state):
    store.save(state)
    return StudioService(store, processor=PurchaseProcessor(delay_seconds=0))
