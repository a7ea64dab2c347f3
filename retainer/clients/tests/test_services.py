import uuid
from decimal import Decimal

import pytest

from retainer.audit.models import AuditLog
from retainer.clients import services
from retainer.clients.exceptions import InvalidState
from retainer.clients.exceptions import NotFound
from retainer.clients.exceptions import ValidationFailed
from retainer.clients.models import Client
from retainer.clients.models import Refill

pytestmark = pytest.mark.django_db


def test_create_client_issues_slug_and_token():
    client = services.create_client("  Acme Co ", "40")

    assert client.name == "Acme Co"
    assert client.slug.startswith("acme-co-")
    assert len(client.admin_token) >= 32
    assert client.total_hours == Decimal("40.00")
    assert client.status == Client.Status.ACTIVE
    assert AuditLog.objects.filter(client_id=client.id, action="client_created").exists()


def test_create_client_slugs_are_unique(make_client):
    first = make_client("Acme Co")
    second = make_client("Acme Co")
    assert first.slug != second.slug
    assert first.admin_token != second.admin_token


def test_create_client_falls_back_when_name_has_no_slug_characters():
    client = services.create_client("!!!", "1")
    assert client.slug.startswith("client-")


@pytest.mark.parametrize("hours", ["0", "-3", "abc", None])
def test_create_client_rejects_bad_hours(hours):
    with pytest.raises(ValidationFailed):
        services.create_client("Acme", hours)


def test_create_client_requires_name():
    with pytest.raises(ValidationFailed, match="name"):
        services.create_client("   ", "5")


def test_unknown_token_is_not_found():
    with pytest.raises(NotFound):
        services.get_admin_view("no-such-token")
    with pytest.raises(NotFound):
        services.get_admin_view("")


def test_public_view_by_slug(retainer_client):
    assert services.get_public_view(retainer_client.slug) == retainer_client
    with pytest.raises(NotFound):
        services.get_public_view("missing-slug")


def test_add_work_log_consumes_hours(retainer_client):
    log, room = services.add_work_log(retainer_client.admin_token, "Sprint", "3.25")

    assert room == retainer_client.slug
    assert log.client_id == retainer_client.id
    retainer_client.refresh_from_db()
    assert retainer_client.used_hours == Decimal("3.25")
    assert retainer_client.remaining_hours == Decimal("6.75")


def test_overage_is_allowed(retainer_client):
    services.add_work_log(retainer_client.admin_token, "Launch week", "12")
    assert retainer_client.remaining_hours == Decimal("-2.00")


def test_add_work_log_validates_input(retainer_client):
    with pytest.raises(ValidationFailed):
        services.add_work_log(retainer_client.admin_token, "Sprint", "0")
    with pytest.raises(ValidationFailed):
        services.add_work_log(retainer_client.admin_token, "  ", "1")


def test_paused_client_rejects_new_logs_but_accepts_refills(retainer_client):
    services.update_status(retainer_client.admin_token, "PAUSED")

    with pytest.raises(InvalidState):
        services.add_work_log(retainer_client.admin_token, "Sprint", "1")
    refill, _room = services.add_refill(retainer_client.admin_token, "2")
    assert refill.client.total_hours == Decimal("12.00")


def test_archived_client_only_allows_status_change_and_delete(retainer_client):
    token = retainer_client.admin_token
    log, _room = services.add_work_log(token, "Sprint", "1")
    services.update_status(token, "ARCHIVED")

    with pytest.raises(InvalidState):
        services.add_work_log(token, "More", "1")
    with pytest.raises(InvalidState):
        services.delete_work_log(token, log.id)
    with pytest.raises(InvalidState):
        services.add_refill(token, "5")
    with pytest.raises(InvalidState):
        services.update_details(token, name="Renamed")

    client, _room = services.update_status(token, "ACTIVE")
    assert client.status == Client.Status.ACTIVE


def test_delete_work_log(retainer_client):
    log, _room = services.add_work_log(retainer_client.admin_token, "Sprint", "2")

    deleted_id, room = services.delete_work_log(retainer_client.admin_token, log.id)

    assert deleted_id == str(log.id)
    assert room == retainer_client.slug
    assert not retainer_client.logs.exists()


def test_cannot_delete_another_clients_log(make_client):
    mine = make_client("Mine")
    theirs = make_client("Theirs")
    log, _room = services.add_work_log(theirs.admin_token, "Secret", "1")

    with pytest.raises(NotFound):
        services.delete_work_log(mine.admin_token, log.id)
    with pytest.raises(NotFound):
        services.delete_work_log(mine.admin_token, uuid.uuid4())
    assert theirs.logs.count() == 1


def test_add_refill_increments_total_and_records_history(retainer_client):
    token = retainer_client.admin_token
    services.add_refill(token, "5", "Invoice 12")
    refill, _room = services.add_refill(token, "2.5")

    assert refill.client.total_hours == Decimal("17.50")
    assert Refill.objects.filter(client=retainer_client).count() == 2
    audit = AuditLog.objects.filter(action="refill_added").first()
    assert audit.before == {"totalHours": 15.0}
    assert audit.after == {"totalHours": 17.5}


def test_update_details_changes_only_given_fields(make_client):
    client = make_client("Acme", "10", "https://pay.example.com/acme")

    updated, _room = services.update_details(client.admin_token, total_hours="25")

    assert updated.name == "Acme"
    assert updated.refill_link == "https://pay.example.com/acme"
    assert updated.total_hours == Decimal("25.00")

    cleared, _room = services.update_details(client.admin_token, refill_link=None)
    assert cleared.refill_link == ""


def test_update_status_rejects_unknown_value(retainer_client):
    with pytest.raises(ValidationFailed, match="ACTIVE"):
        services.update_status(retainer_client.admin_token, "DONE")


def test_delete_client_removes_everything_but_the_audit_trail(retainer_client):
    token = retainer_client.admin_token
    client_id = retainer_client.id
    services.add_work_log(token, "Sprint", "1")

    _client, room = services.delete_client(token)

    assert room == retainer_client.slug
    assert not Client.objects.filter(pk=client_id).exists()
    actions = list(
        AuditLog.objects.filter(client_id=client_id).values_list("action", flat=True)
    )
    assert actions[0] == "client_deleted"
    with pytest.raises(NotFound):
        services.get_admin_view(token)


def test_recent_activity_is_newest_first_and_capped(retainer_client):
    token = retainer_client.admin_token
    for i in range(3):
        services.add_work_log(token, f"Task {i}", "1")

    rows = services.recent_activity(token, limit=2)
    assert [r.action for r in rows] == ["log_added", "log_added"]
    assert rows[0].message == "Task 2"
    assert len(services.recent_activity(token, limit=500)) == 4
