"""Tests for Session records and the SessionRegistry."""
import pytest

from chat_relay.chat.exceptions import UnknownUserError
from chat_relay.chat.sessions import Session, SessionRegistry

from fakes import RecordingChannel


class TestCreateOrReset:
    def test_creates_fresh_session(self):
        registry = SessionRegistry()
        session = registry.create_or_reset("alice")
        assert session == Session(unread=0, channel=None)
        assert "alice" in registry
        assert len(registry) == 1

    def test_creates_with_given_unread(self):
        registry = SessionRegistry()
        assert registry.create_or_reset("alice", unread=3).unread == 3

    def test_reset_keeps_channel_and_resets_unread(self):
        registry = SessionRegistry()
        registry.create_or_reset("alice")
        channel = RecordingChannel()
        registry.set_channel("alice", channel)
        registry.get("alice").unread = 5

        session = registry.create_or_reset("alice")

        assert session.unread == 0
        assert session.channel is channel
        assert len(registry) == 1


class TestGet:
    def test_get_unknown_returns_none(self):
        assert SessionRegistry().get("ghost") is None

    def test_require_unknown_raises(self):
        with pytest.raises(UnknownUserError) as exc_info:
            SessionRegistry().require("ghost")
        assert exc_info.value.user_id == "ghost"


class TestChannels:
    def test_set_channel_unknown_user_raises(self):
        with pytest.raises(UnknownUserError):
            SessionRegistry().set_channel("ghost", RecordingChannel())

    def test_set_channel_replaces_previous(self):
        registry = SessionRegistry()
        registry.create_or_reset("alice")
        first, second = RecordingChannel(), RecordingChannel()
        registry.set_channel("alice", first)
        registry.set_channel("alice", second)
        assert registry.get("alice").channel is second

    def test_clear_channel_only_if_still_bound(self):
        registry = SessionRegistry()
        registry.create_or_reset("alice")
        first, second = RecordingChannel(), RecordingChannel()
        registry.set_channel("alice", first)
        registry.set_channel("alice", second)

        assert registry.clear_channel("alice", first) is False
        assert registry.get("alice").channel is second

        assert registry.clear_channel("alice", second) is True
        assert registry.get("alice").channel is None

    def test_clear_channel_unknown_user(self):
        assert SessionRegistry().clear_channel("ghost", RecordingChannel()) is False


class TestForEachMut:
    def test_applies_to_every_session(self):
        registry = SessionRegistry()
        for user in ("alice", "bob", "carol"):
            registry.create_or_reset(user)

        def bump(_user_id, session):
            session.unread += 2

        registry.for_each_mut(bump)

        assert sorted(registry.user_ids()) == ["alice", "bob", "carol"]
        assert all(registry.get(u).unread == 2 for u in registry.user_ids())
