from http import HTTPStatus

import pytest


@pytest.mark.django_db
def test_schema_lists_client_endpoints(client):
    resp = client.get("/api/v1/schema/", {"format": "json"})
    assert resp.status_code == HTTPStatus.OK
    paths = resp.json()["paths"]
    assert "/api/v1/clients/" in paths
    assert "/api/v1/logs/{log_id}/" in paths
