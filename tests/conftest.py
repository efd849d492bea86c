import os
import sys
import asyncio
import inspect
import threading

import pytest

# Ensure project root is on sys.path so `import timber` works in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


def pytest_pyfunc_call(pyfuncitem):
    """Allow running async tests without pytest-asyncio.

    If the test function is a coroutine, run it in a fresh event loop.
    """
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(testfunction)
        # Filter only the parameters that the test function expects
        allowed = {name: funcargs[name] for name in sig.parameters.keys() if name in funcargs}
        asyncio.run(testfunction(**allowed))
        return True
    return None


class SyncRecorder:
    """Stand-in delivery step that keeps every batch it receives."""

    def __init__(self):
        self.batches = []
        self.synced = threading.Event()

    def __call__(self, logs):
        self.batches.append(list(logs))
        self.synced.set()
        return logs

    @property
    def logs(self):
        return [log for batch in self.batches for log in batch]


@pytest.fixture
def recorder():
    return SyncRecorder()


@pytest.fixture
def make_timber():
    """Build Timber clients and close them after the test."""
    from timber import Timber

    created = []

    def factory(*args, **kwargs):
        client = Timber(*args, **kwargs)
        created.append(client)
        return client

    yield factory
    for client in created:
        client.close()
