import pytest

from app.core.errors import Forbidden, InvalidState
from app.models.enums import ClaimStatus, ItemStatus
from app.models.notification import Notification
from app.services import claim_service, item_service


@pytest.fixture()
def claimed(db, emitter, alice, bob, make_item):
    item = make_item(alice)
    claim = item_service.claim_item(db, emitter, item.id, bob.id)
    return item, claim


def test_owner_completes_claim(db, emitter, claimed, alice):
    item, claim = claimed

    done = claim_service.complete_claim(db, emitter, claim.id, alice.id)

    assert done.status == ClaimStatus.COMPLETED
    db.refresh(item)
    assert item.status == ItemStatus.CLAIMED
    assert db.query(Notification).filter(Notification.user_id == "bob").count() == 1


def test_claimer_cannot_complete(db, emitter, claimed, bob):
    _, claim = claimed
    with pytest.raises(Forbidden):
        claim_service.complete_claim(db, emitter, claim.id, bob.id)


def test_cancel_releases_item(db, emitter, claimed, bob):
    item, claim = claimed

    cancelled = claim_service.cancel_claim(db, emitter, claim.id, bob.id)

    assert cancelled.status == ClaimStatus.CANCELLED
    db.refresh(item)
    assert item.status == ItemStatus.AVAILABLE
    # the owner hears about it
    assert db.query(Notification).filter(Notification.user_id == "alice").count() == 2


def test_cancel_after_delete_keeps_item_deleted(db, emitter, claimed, alice, bob):
    item, claim = claimed
    item_service.delete_item(db, item.id, alice.id)

    claim_service.cancel_claim(db, emitter, claim.id, bob.id)

    db.refresh(item)
    assert item.status == ItemStatus.DELETED


def test_settled_claim_cannot_change(db, emitter, claimed, alice):
    _, claim = claimed
    claim_service.complete_claim(db, emitter, claim.id, alice.id)

    with pytest.raises(InvalidState):
        claim_service.cancel_claim(db, emitter, claim.id, alice.id)


def test_stranger_cannot_cancel(db, emitter, claimed, make_user):
    _, claim = claimed
    carol = make_user("carol")
    with pytest.raises(Forbidden):
        claim_service.cancel_claim(db, emitter, claim.id, carol.id)


def test_list_my_claims(db, claimed, bob, alice):
    _, claim = claimed
    assert [c.id for c in claim_service.list_my_claims(db, bob.id)] == [claim.id]
    assert claim_service.list_my_claims(db, alice.id) == []
