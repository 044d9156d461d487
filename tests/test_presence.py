from realtime.presence import PresenceRegistry


def test_announce_and_lookup():
    presence = PresenceRegistry()
    presence.announce("u1", "sid-a")

    assert presence.sid_for("u1") == "sid-a"
    assert presence.user_for("sid-a") == "u1"
    assert presence.is_online("u1")
    assert len(presence) == 1


def test_numeric_and_string_ids_are_the_same_user():
    presence = PresenceRegistry()
    presence.announce(7, "sid-a")

    assert presence.sid_for("7") == "sid-a"
    assert presence.sid_for(7) == "sid-a"


def test_last_connection_wins():
    presence = PresenceRegistry()
    presence.announce("u1", "sid-a")
    presence.announce("u1", "sid-b")

    assert presence.sid_for("u1") == "sid-b"
    assert len(presence) == 1


def test_stale_disconnect_keeps_newer_connection():
    presence = PresenceRegistry()
    presence.announce("u1", "sid-a")
    presence.announce("u1", "sid-b")

    assert presence.release("sid-a") == "u1"
    assert presence.sid_for("u1") == "sid-b"

    presence.release("sid-b")
    assert not presence.is_online("u1")
    assert len(presence) == 0


def test_sid_reannounced_as_another_user():
    presence = PresenceRegistry()
    presence.announce("u1", "sid-a")
    presence.announce("u2", "sid-a")

    assert presence.sid_for("u1") is None
    assert presence.sid_for("u2") == "sid-a"


def test_release_of_unknown_sid():
    presence = PresenceRegistry()
    assert presence.release("nobody") is None
    assert presence.sid_for(None) is None
