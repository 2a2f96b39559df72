from social_app.utils.websocket_manager import PresenceRegistry


def test_connect_records_back_reference(make_connection):
    registry = PresenceRegistry()
    connection, _ = make_connection()

    registry.connect("alice", connection)

    assert connection.user_id == "alice"
    assert registry.lookup("alice") is connection
    assert registry.is_online("alice")


def test_reconnect_replaces_previous_handle(make_connection):
    registry = PresenceRegistry()
    first, _ = make_connection()
    second, _ = make_connection()

    registry.connect("alice", first)
    registry.connect("alice", second)

    assert registry.lookup("alice") is second
    assert len(registry) == 1

    assert registry.disconnect(second) == "alice"
    assert registry.lookup("alice") is None


def test_stale_disconnect_keeps_newer_connection(make_connection):
    registry = PresenceRegistry()
    old, _ = make_connection()
    new, _ = make_connection()

    registry.connect("alice", old)
    registry.connect("alice", new)
    registry.disconnect(old)

    assert registry.lookup("alice") is new


def test_disconnect_before_join_is_noop(make_connection):
    registry = PresenceRegistry()
    connection, _ = make_connection()

    assert registry.disconnect(connection) is None
    assert len(registry) == 0


def test_users_are_independent(make_connection):
    registry = PresenceRegistry()
    alice, _ = make_connection()
    bob, _ = make_connection()

    registry.connect("alice", alice)
    registry.connect("bob", bob)
    registry.disconnect(alice)

    assert registry.lookup("alice") is None
    assert registry.lookup("bob") is bob
    assert registry.online_user_ids() == ["bob"]


def test_rejoin_under_other_identity_moves_the_mapping(make_connection):
    registry = PresenceRegistry()
    connection, _ = make_connection()

    registry.connect("alice", connection)
    registry.connect("bob", connection)

    assert registry.lookup("alice") is None
    assert registry.lookup("bob") is connection
