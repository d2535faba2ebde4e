import pytest

from app.core.errors import InvalidRequest, NotFound
from app.schemas.rating import RatingIn
from app.services.rating_service import rate_user, seller_rating


def test_no_ratings_means_zero(db, alice):
    summary = seller_rating(db, alice.id)
    assert summary.average == 0
    assert summary.count == 0


def test_average_is_plain_float_mean(db, alice, bob, make_user):
    carol = make_user("carol")
    for rater, score in ((bob, 5), (carol, 3), (bob, 4)):
        rate_user(db, rater.id, RatingIn(rated_user_id=alice.id, rating=score))

    summary = seller_rating(db, alice.id)
    assert summary.average == 4.0
    assert summary.count == 3


def test_average_is_not_rounded(db, alice, bob):
    for score in (5, 4, 4):
        rate_user(db, bob.id, RatingIn(rated_user_id=alice.id, rating=score))
    assert seller_rating(db, alice.id).average == pytest.approx(13 / 3)


def test_cannot_rate_self_or_ghost(db, alice):
    with pytest.raises(InvalidRequest):
        rate_user(db, alice.id, RatingIn(rated_user_id=alice.id, rating=5))
    with pytest.raises(NotFound):
        rate_user(db, alice.id, RatingIn(rated_user_id="ghost", rating=5))
