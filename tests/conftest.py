import datetime

import pytest

from vanishingkeys.kvbackend.memorykvbackend import MemoryKeyValueBackend
from vanishingkeys.secretstore.secretstore import SecretStore
from vanishingkeys.utils.clock import BaseClock

T0 = datetime.datetime(2024, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


class ManualClock(BaseClock):
    def __init__(self, start: datetime.datetime = T0):
        self.current = start

    def now(self) -> datetime.datetime:
        return self.current

    def advance(self, seconds: float):
        self.current += datetime.timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def memory_backend():
    return MemoryKeyValueBackend()


@pytest.fixture
def secret_store(memory_backend, clock):
    store = SecretStore(memory_backend, clock=clock)
    yield store
    store.close()


@pytest.fixture
def exactly_once_store(memory_backend, clock):
    store = SecretStore(memory_backend, clock=clock, exactly_once=True)
    yield store
    store.close()
