"""
Pytest configuration for lazyseq tests.

Puts the project root on the Python path so tests can import lazyseq
without installing it, and provides the test producers shared by the
zip and pull-bridge tests.
"""

import sys
import threading
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest

from lazyseq import configure, from_drive, get_settings, reset_settings


def zeroing_values(items):
    """Push sequence over ``items`` that zeroes each element once its consumer returns True."""
    def drive(consumer):
        for i in range(len(items)):
            if not consumer(items[i]):
                break
            items[i] = 0
    return from_drive(drive)


def misbehaved_values(items):
    """Push sequence over ``items`` that never checks what its consumer returns."""
    def drive(consumer):
        for x in items:
            consumer(x)
    return from_drive(drive)


def recording_values(items, produced):
    """Push sequence over ``items`` that appends every element it produces to ``produced``."""
    def drive(consumer):
        for x in items:
            produced.append(x)
            if not consumer(x):
                return
    return from_drive(drive)


def pull_threads():
    prefix = get_settings().thread_name_prefix
    return [t for t in threading.enumerate() if t.name.startswith(prefix) and t.is_alive()]


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts from default settings"""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(params=["auto", "thread"])
def bridge(request):
    """Run a test once per pull-bridge strategy"""
    configure(bridge=request.param)
    return request.param


@pytest.fixture
def no_leaked_threads():
    """Fail the test if a pull worker thread is still alive afterwards"""
    yield
    leaked = pull_threads()
    assert leaked == [], f"Pull workers still running: {leaked}"
