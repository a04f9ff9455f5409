import sys, os

# Ensure implementation/src is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'implementation', 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)

import pytest

from tests.helpers import FakeClock, make_engine, record_events


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(clock):
    return make_engine(clock=clock)


@pytest.fixture
def state(engine):
    return engine.new_state()


__all__ = [
    "FakeClock",
    "make_engine",
    "record_events",
]
