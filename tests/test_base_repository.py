from codiro.repositories import UserRepository


def test_create_flushes_and_assigns_defaults(test_session):
    repo = UserRepository(test_session)

    user = repo.create(username="alice")

    assert user.id
    assert user.created_at is not None
    assert repo.get_by_id(user.id) is user


def test_get_by_id_missing_returns_none(test_session):
    assert UserRepository(test_session).get_by_id("no-such-id") is None
