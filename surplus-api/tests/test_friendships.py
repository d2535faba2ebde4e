import pytest

from app.core.errors import Forbidden, InvalidRequest, InvalidState
from app.models.enums import FriendshipStatus, NotificationType
from app.models.friendship import Friendship
from app.models.notification import Notification
from app.services import friendship_service as svc


def test_request_notifies_addressee(db, emitter, alice, bob):
    request = svc.send_friend_request(db, emitter, alice.id, bob.id)

    assert request.status == FriendshipStatus.PENDING
    note = db.query(Notification).filter(Notification.user_id == "bob").one()
    assert note.type == NotificationType.FRIEND_REQUEST
    assert note.related_id == str(request.id)
    assert emitter.named("notification")[0][0] == "user_bob"


def test_request_is_idempotent_per_pair(db, emitter, alice, bob):
    first = svc.send_friend_request(db, emitter, alice.id, bob.id)
    again = svc.send_friend_request(db, emitter, bob.id, alice.id)

    assert again.id == first.id
    assert db.query(Friendship).count() == 1


def test_cannot_befriend_self(db, emitter, alice):
    with pytest.raises(InvalidRequest):
        svc.send_friend_request(db, emitter, alice.id, alice.id)


def test_accept_flow(db, emitter, alice, bob):
    request = svc.send_friend_request(db, emitter, alice.id, bob.id)

    with pytest.raises(Forbidden):
        svc.accept_friend_request(db, emitter, request.id, alice.id)

    accepted = svc.accept_friend_request(db, emitter, request.id, bob.id)
    assert accepted.status == FriendshipStatus.ACCEPTED

    note = db.query(Notification).filter(Notification.user_id == "alice").one()
    assert note.type == NotificationType.FRIEND_ACCEPT

    assert [u.id for u in svc.list_friends(db, alice.id)] == ["bob"]
    assert [u.id for u in svc.list_friends(db, bob.id)] == ["alice"]


def test_rejected_request_is_final(db, emitter, alice, bob):
    request = svc.send_friend_request(db, emitter, alice.id, bob.id)
    svc.reject_friend_request(db, request.id, bob.id)

    with pytest.raises(InvalidState):
        svc.accept_friend_request(db, emitter, request.id, bob.id)
    assert svc.list_friends(db, alice.id) == []


def test_incoming_requests(db, emitter, alice, bob, make_user):
    carol = make_user("carol")
    svc.send_friend_request(db, emitter, alice.id, bob.id)
    svc.send_friend_request(db, emitter, carol.id, bob.id)

    incoming = svc.list_incoming_requests(db, bob.id)
    assert [r.requester_id for r in incoming] == ["carol", "alice"]
    assert svc.list_incoming_requests(db, alice.id) == []
