import threading

import pytest


@pytest.fixture
def cancel() -> threading.Event:
    return threading.Event()
