from conftest import DAY_MS, NOW

from mhyasi.services import entitlement


def test_null_window_is_not_entitled(make_user):
    user = make_user("shopA")
    assert not entitlement.is_entitled(user, NOW)


def test_window_end_is_exclusive(make_user):
    user = make_user("shopA", unlocked_until=NOW)
    assert not entitlement.is_entitled(user, NOW)
    assert entitlement.is_entitled(user, NOW - 1)


def test_future_window_is_entitled(make_user):
    user = make_user("shopA", unlocked_until=NOW + DAY_MS)
    assert entitlement.is_entitled(user, NOW)


def test_extend_overwrites_with_shorter_window(db, make_user):
    user = make_user("shopA", unlocked_until=NOW + 30 * DAY_MS)
    entitlement.extend(db, user.id, NOW + DAY_MS)
    db.commit()
    db.refresh(user)
    assert user.unlocked_until == NOW + DAY_MS
