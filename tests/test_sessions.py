from catalog_site.core.sessions import SessionStore


def test_create_and_resolve(clock):
    sessions = SessionStore(max_age_seconds=60, clock=clock)
    token = sessions.create(7)

    assert isinstance(token, str) and len(token) >= 32
    assert sessions.resolve(token) == 7
    assert sessions.resolve("unknown") is None
    assert sessions.resolve(None) is None


def test_tokens_are_unique(clock):
    sessions = SessionStore(max_age_seconds=60, clock=clock)
    assert sessions.create(1) != sessions.create(1)


def test_expiry_is_absolute(clock):
    sessions = SessionStore(max_age_seconds=60, clock=clock)
    token = sessions.create(3)

    clock.advance(59)
    assert sessions.resolve(token) == 3
    clock.advance(1)
    assert sessions.resolve(token) is None


def test_destroy_is_idempotent(clock):
    sessions = SessionStore(max_age_seconds=60, clock=clock)
    token = sessions.create(3)

    assert sessions.destroy(token) is True
    assert sessions.destroy(token) is False
    assert sessions.destroy(None) is False
    assert sessions.resolve(token) is None


def test_purge_expired(clock):
    sessions = SessionStore(max_age_seconds=60, clock=clock)
    old = sessions.create(1)
    clock.advance(30)
    fresh = sessions.create(2)
    clock.advance(30)

    assert sessions.purge_expired() == 1
    assert sessions.resolve(old) is None
    assert sessions.resolve(fresh) == 2
