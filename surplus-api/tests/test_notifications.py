import pytest

from app.core.errors import Forbidden, NotFound
from app.models.enums import NotificationType
from app.services import notification_service as svc


@pytest.fixture()
def notes(db, alice):
    created = [
        svc.create_notification(db, alice.id, NotificationType.SYSTEM, f"note {n}")
        for n in range(3)
    ]
    db.commit()
    return created


def test_list_newest_first(db, alice, notes):
    listed = svc.list_notifications(db, alice.id)
    assert [n.message for n in listed] == ["note 2", "note 1", "note 0"]


def test_mark_read_and_unread_filter(db, alice, notes):
    svc.mark_read(db, notes[0].id, alice.id)

    unread = svc.list_notifications(db, alice.id, unread_only=True)
    assert [n.message for n in unread] == ["note 2", "note 1"]


def test_mark_read_checks_owner(db, bob, notes):
    with pytest.raises(Forbidden):
        svc.mark_read(db, notes[0].id, bob.id)
    with pytest.raises(NotFound):
        svc.mark_read(db, 12345, bob.id)


def test_mark_all_read(db, alice, notes):
    assert svc.mark_all_read(db, alice.id) == 3
    assert svc.list_notifications(db, alice.id, unread_only=True) == []
