import pytest

from retainer.realtime.updates import DetailsUpdated
from retainer.realtime.updates import LogDeleted
from retainer.realtime.updates import ProjectDeleted
from retainer.realtime.updates import Refilled
from retainer.realtime.updates import StatusUpdated
from retainer.realtime.updates import UpdateType
from retainer.realtime.updates import build_message


def test_each_event_has_its_own_tag_and_payload():
    assert LogDeleted(log_id="log-9").data == "log-9"
    assert Refilled(total_hours=50.0).data == {"totalHours": 50.0, "refill": {}}
    assert StatusUpdated(status="PAUSED").data == {"status": "PAUSED"}
    assert ProjectDeleted().data is None
    assert DetailsUpdated(name="Acme", total_hours=12.5).data == {
        "name": "Acme",
        "totalHours": 12.5,
        "refillLink": None,
    }
    assert ProjectDeleted.type is UpdateType.PROJECT_DELETED


def test_build_message_accepts_enum_or_tag():
    assert build_message(UpdateType.REFILL, {"totalHours": 1}) == {
        "type": "REFILL",
        "data": {"totalHours": 1},
    }
    assert build_message("DELETE_LOG", "x") == {"type": "DELETE_LOG", "data": "x"}


def test_build_message_rejects_unknown_tag():
    with pytest.raises(ValueError, match="BOGUS"):
        build_message("BOGUS")
