"""Shared fixtures for the Absurdle server tests."""

from datetime import datetime, timezone

import pytest

from absurdle.services.lobby_service import LobbyService
from absurdle.services.notifier import Notifier
from absurdle.services.store import TTLStore


class FakeClock:
    """Manually advanced monotonic clock for TTLStore."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingNotifier(Notifier):
    """Notifier that keeps every event for later assertions."""

    def __init__(self):
        self.player_events = []
        self.game_events = []

    def send_to_player(self, transport_ref, event, payload):
        self.player_events.append((transport_ref, event, payload))

    def broadcast_to_game(self, game_id, event, payload):
        self.game_events.append((game_id, event, payload))

    def events_for(self, transport_ref):
        return [(event, payload) for ref, event, payload in self.player_events if ref == transport_ref]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return TTLStore(clock=clock)


@pytest.fixture
def lobby():
    return LobbyService()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fixed_now():
    return lambda: datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
