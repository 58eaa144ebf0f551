import pytest
from fastapi.testclient import TestClient

from vietqr.api import app
from vietqr.config import settings
from vietqr.encoder import new_encoder

ACCOUNT = "0011012345678"
BIN = "970403"


@pytest.fixture
def encoder():
    return new_encoder(ACCOUNT, BIN)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers():
    return {"x-api-key": settings.api_key}
