from __future__ import annotations

from datetime import datetime

import pytest

from fakes import Store, in_memory_container
from hims_opd.main import create_app


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 1, 9, 30, 0))


@pytest.fixture
def store():
    return Store()


@pytest.fixture
def container(store, clock):
    return in_memory_container(store, clock=clock)


@pytest.fixture
def app(container):
    return create_app("hims_opd.config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()
