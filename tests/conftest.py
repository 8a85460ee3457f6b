import os

import pytest

from chaintest import utils

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


class FakeSession:
    """Stands in for requests.Session: returns queued responses and records calls."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def json_response():
    return utils.make_response_json
