import pytest
from fastapi.testclient import TestClient
from payments.gateway.fake_adapter import FakeGateway
from shared.config import Settings


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def app(database, gateway):
    from app import create_app

    return create_app(Settings(env="test", payment_gateway="fake"), database=database, gateway=gateway)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
