import logging

import pytest
from fastapi.testclient import TestClient

from webhook_receiver import Settings, create_app


@pytest.fixture
def settings():
    return Settings(max_body_bytes=256)


@pytest.fixture
def logger():
    return logging.getLogger("tests.webhook")


@pytest.fixture
def client(settings, logger):
    return TestClient(create_app(settings, logger=logger))
