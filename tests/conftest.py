import pytest

from livefeed.services.status_store import StatusStore


@pytest.fixture
def status():
    return StatusStore()
