"""Shared pytest fixtures for the auction tests."""

from datetime import timedelta

import pytest
from django.apps import apps
from django.utils import timezone

from auction.engine import AuctionEngine
from auction.models import AuctionState, Bid, Player, Team, User


class RecordingBroadcaster:
    """Stands in for the channel layer and keeps every event sent"""

    def __init__(self):
        self.events = []

    def __call__(self, event, data=None):
        self.events.append((event, data))

    def names(self):
        return [event for event, _ in self.events]

    def last(self, name):
        for event, data in reversed(self.events):
            if event == name:
                return data
        raise AssertionError(f'{name} was never broadcast')


# =============================================================================
# Engine
# =============================================================================

@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def engine(broadcaster, monkeypatch):
    """Engine that always picks the first candidate, installed on the app config"""
    engine = AuctionEngine(broadcaster=broadcaster, choose=lambda seq: seq[0])
    monkeypatch.setattr(apps.get_app_config('auction'), 'engine', engine)
    return engine


# =============================================================================
# Model factories
# =============================================================================

@pytest.fixture
def make_team(db):
    counter = iter(range(1, 1000))

    def make(name=None, budget=20000, **kwargs):
        n = next(counter)
        owner = kwargs.pop('owner', None)
        if owner is None:
            owner = User.objects.create_user(
                username=f'owner{n}', password='pass1234', role=User.OWNER
            )
        return Team.objects.create(
            name=name or f'Team {n}', budget=budget, owner=owner, **kwargs
        )
    return make


@pytest.fixture
def make_player(db):
    def make(name='Player', base_price=1000, role='Batsman', **kwargs):
        return Player.objects.create(name=name, base_price=base_price, role=role, **kwargs)
    return make


@pytest.fixture
def make_bid(db):
    base = timezone.now() - timedelta(minutes=10)

    def make(player, team, amount, seconds=0):
        return Bid.objects.create(
            player=player, team=team, amount=amount,
            timestamp=base + timedelta(seconds=seconds),
        )
    return make


@pytest.fixture
def live_state(db):
    """Auction state set LIVE with default increments"""
    def make(player=None, **changes):
        state = AuctionState.load()
        state.status = AuctionState.LIVE
        state.current_player = player
        state.bid_increment_1 = 500
        state.bid_increment_2 = 1000
        for field, value in changes.items():
            setattr(state, field, value)
        state.save()
        return state
    return make


# =============================================================================
# Users and clients
# =============================================================================

@pytest.fixture
def admin_user(db):
    return User.objects.create_user(username='admin', password='admin1234', role=User.ADMIN)


@pytest.fixture
def admin_client(client, admin_user):
    client.force_login(admin_user)
    return client


@pytest.fixture
def owner_team(make_team):
    return make_team(name='Chennai', budget=20000)


@pytest.fixture
def owner_client(client, owner_team):
    client.force_login(owner_team.owner)
    return client
