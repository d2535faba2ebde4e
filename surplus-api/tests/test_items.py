import pytest

from app.core.errors import Forbidden, InvalidRequest, InvalidState, NotFound
from app.models.claim import Claim
from app.models.enums import ClaimStatus, ItemStatus, NotificationType
from app.models.item import Item
from app.models.location import Location
from app.models.notification import Notification
from app.schemas.item import ItemCreateIn
from app.services import item_service


def _set_status(db, item, status):
    item.status = status
    db.commit()


def test_create_item_writes_item_and_location(db, alice, make_item):
    item = make_item(alice)

    assert item.status == ItemStatus.AVAILABLE
    assert item.location.address == "Main street 1"
    assert item.user.id == "alice"
    assert db.query(Item).count() == 1
    assert db.query(Location).count() == 1


def test_create_item_is_atomic(db, alice, new_item, monkeypatch):
    def broken_location(**kwargs):
        raise RuntimeError("location insert failed")

    monkeypatch.setattr(item_service, "Location", broken_location)

    with pytest.raises(RuntimeError):
        item_service.create_item(db, alice.id, ItemCreateIn(**new_item()))

    assert db.query(Item).count() == 0
    assert db.query(Location).count() == 0


def test_create_item_defaults_category(db, alice, make_item):
    item = make_item(alice, category=None)
    assert item.category == "Other"


def test_claim_moves_item_to_claimed(db, emitter, alice, bob, make_item):
    item = make_item(alice)

    claim = item_service.claim_item(db, emitter, item.id, bob.id)

    db.refresh(item)
    assert item.status == ItemStatus.CLAIMED
    assert claim.status == ClaimStatus.PENDING
    assert claim.claimer_id == "bob"

    note = db.query(Notification).filter(Notification.user_id == "alice").one()
    assert note.type == NotificationType.SYSTEM
    assert "Bob" in note.message
    assert emitter.named("notification")[0][0] == "user_alice"


@pytest.mark.parametrize("status", [ItemStatus.CLAIMED, ItemStatus.EXPIRED, ItemStatus.DELETED])
def test_claim_requires_available_item(db, emitter, alice, bob, make_item, status):
    item = make_item(alice)
    _set_status(db, item, status)

    with pytest.raises(InvalidState):
        item_service.claim_item(db, emitter, item.id, bob.id)

    assert db.query(Claim).count() == 0
    db.refresh(item)
    assert item.status == status


@pytest.mark.parametrize("status", list(ItemStatus))
def test_owner_can_never_claim_own_item(db, emitter, alice, make_item, status):
    item = make_item(alice)
    _set_status(db, item, status)

    with pytest.raises(Forbidden):
        item_service.claim_item(db, emitter, item.id, alice.id)

    assert db.query(Claim).count() == 0


def test_claim_unknown_item(db, emitter, bob):
    with pytest.raises(NotFound):
        item_service.claim_item(db, emitter, 999, bob.id)


def test_second_claim_fails(db, emitter, alice, bob, make_user, make_item):
    carol = make_user("carol")
    item = make_item(alice)
    item_service.claim_item(db, emitter, item.id, bob.id)

    with pytest.raises(InvalidState):
        item_service.claim_item(db, emitter, item.id, carol.id)
    with pytest.raises(InvalidState):
        item_service.claim_item(db, emitter, item.id, bob.id)

    assert db.query(Claim).count() == 1


def test_only_owner_deletes(db, alice, bob, make_item):
    item = make_item(bob)

    with pytest.raises(Forbidden):
        item_service.delete_item(db, item.id, alice.id)

    deleted = item_service.delete_item(db, item.id, bob.id)
    assert deleted.status == ItemStatus.DELETED
    # the row is kept
    assert db.get(Item, item.id) is not None

    with pytest.raises(InvalidState):
        item_service.delete_item(db, item.id, bob.id)


def test_deleted_items_are_hidden_everywhere(db, emitter, alice, bob, make_item):
    kept = make_item(alice, title="Apples")
    gone = make_item(alice, title="Milk")
    item_service.claim_item(db, emitter, gone.id, bob.id)
    item_service.delete_item(db, gone.id, alice.id)

    assert [i.id for i in item_service.list_available_items(db)] == [kept.id]
    assert [i.id for i in item_service.list_user_items(db, alice.id, "posted")] == [kept.id]
    assert item_service.list_user_items(db, bob.id, "claimed") == []
    with pytest.raises(NotFound):
        item_service.get_item(db, gone.id)


def test_list_available_filters_category_newest_first(db, emitter, alice, bob, make_item):
    bread = make_item(alice, title="Bread", category="Bakery")
    veg = make_item(alice, title="Carrots", category="Produce")
    cake = make_item(alice, title="Cake", category="Bakery")
    claimed = make_item(alice, title="Rolls", category="Bakery")
    item_service.claim_item(db, emitter, claimed.id, bob.id)

    assert [i.id for i in item_service.list_available_items(db)] == [cake.id, veg.id, bread.id]
    assert [i.id for i in item_service.list_available_items(db, "ALL")] == [cake.id, veg.id, bread.id]
    assert [i.id for i in item_service.list_available_items(db, "Bakery")] == [cake.id, bread.id]


def test_list_user_items_claimed_mode(db, emitter, alice, bob, make_item):
    first = make_item(alice, title="Bread")
    second = make_item(alice, title="Eggs")
    make_item(alice, title="Untouched")
    item_service.claim_item(db, emitter, first.id, bob.id)
    item_service.claim_item(db, emitter, second.id, bob.id)

    claimed = item_service.list_user_items(db, bob.id, "claimed")

    assert [i.id for i in claimed] == [second.id, first.id]
    assert claimed[0].location is not None
    assert claimed[0].user.id == "alice"


def test_list_user_items_rejects_unknown_mode(db, alice):
    with pytest.raises(InvalidRequest):
        item_service.list_user_items(db, alice.id, "everything")


def test_status_enum_types_are_not_bound_to_the_table_schema():
    from app.core.db import Base

    enum_columns = [
        column
        for table in Base.metadata.tables.values()
        for column in table.columns
        if hasattr(column.type, "enums")
    ]
    assert enum_columns
    for column in enum_columns:
        assert column.type.schema is None, column
