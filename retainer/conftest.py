from unittest import mock

import pytest
from rest_framework.test import APIClient

from retainer.clients import services
from retainer.realtime import hub as hub_module
from retainer.realtime.socketio import initialize


@pytest.fixture(autouse=True)
def _reset_hub():
    hub_module.shutdown()
    yield
    hub_module.shutdown()


@pytest.fixture
def fake_server():
    """Stand-in for ``socketio.AsyncServer``; ``emit`` records deliveries."""

    server = mock.MagicMock(name="AsyncServer")
    server.emit = mock.AsyncMock(name="emit")
    return server


@pytest.fixture
def hub(fake_server):
    return initialize(fake_server)


@pytest.fixture
def make_client(db):
    def _make(name="Acme Co", total_hours="10", refill_link=""):
        return services.create_client(name, total_hours, refill_link)

    return _make


@pytest.fixture
def retainer_client(make_client):
    return make_client()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_api_client(retainer_client):
    api = APIClient()
    api.credentials(HTTP_AUTHORIZATION=f"Bearer {retainer_client.admin_token}")
    return api
