import os
import pathlib
import sys
from datetime import date

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
os.environ.setdefault("APP_ENV", "test")

import pytest

from fleet import create_app
from fleet.config import TestingConfig
from fleet.models.store import Store

FROZEN_TODAY = date(2024, 6, 3)


@pytest.fixture(autouse=True)
def store():
    """
    Provide a single in-memory store and install it as the global singleton,
    so services called without `store=` and the Flask app all see the SAME object.
    """
    st = Store(None)
    Store.reset_instance(st)
    yield st
    Store.reset_instance(None)


@pytest.fixture
def frozen_today(monkeypatch):
    """Pin the business 'today' in every module that imported the helper."""
    from fleet.services import availability_service, reservation_service, spare_service

    for mod in (availability_service, reservation_service, spare_service):
        monkeypatch.setattr(mod, "_today", lambda: FROZEN_TODAY)
    return FROZEN_TODAY


@pytest.fixture
def client(store):
    app = create_app(TestingConfig)
    with app.test_client() as c:
        yield c
