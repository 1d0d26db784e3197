# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from cre_returns.api.http import app  # ensures imports resolve; run tests from repo root
from fixtures.deals import reference_deal


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture
def deal():
    return reference_deal()


@pytest.fixture
def deal_payload():
    return reference_deal().model_dump()
