import pytest

from .fakes import CountingLockManager, FakeBackend


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def counting_locks():
    return CountingLockManager()
