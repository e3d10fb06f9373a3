import pytest

from tests.fakes import BlockingCapability


@pytest.fixture
def blocking_capability():
    cap = BlockingCapability()
    yield cap
    cap.release.set()
