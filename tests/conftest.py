import pytest

from Simulator import Simulator


@pytest.fixture
def simulator():
    sim = Simulator()
    yield sim
    sim.shutdown()
