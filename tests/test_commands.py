"""Tests for the management commands."""

import pytest
from django.core.management import CommandError, call_command

from auction.models import AuctionState, Bid, Player, User

pytestmark = pytest.mark.django_db


def test_reset_auction(make_team, make_player, make_bid, live_state):
    team = make_team(budget=100)
    sold = make_player(name='Sold', status=Player.SOLD, sold_to_team=team, sold_price=900)
    unsold = make_player(name='Unsold', status=Player.UNSOLD, was_unsold=True)
    live_state(unsold)
    make_bid(unsold, team, 1000)

    call_command('reset_auction', budget=5000)

    sold.refresh_from_db()
    unsold.refresh_from_db()
    team.refresh_from_db()
    assert sold.status == Player.AVAILABLE
    assert sold.sold_to_team is None
    assert unsold.was_unsold is False
    assert team.budget == 5000
    assert not Bid.objects.exists()
    state = AuctionState.load()
    assert state.status == AuctionState.STOPPED
    assert state.current_player is None


def test_reset_auction_can_keep_unsold_tags(make_player):
    player = make_player(status=Player.UNSOLD, was_unsold=True)
    call_command('reset_auction', keep_unsold_tags=True)
    player.refresh_from_db()
    assert player.status == Player.AVAILABLE
    assert player.was_unsold is True


def test_ensure_admin_creates_then_updates():
    call_command('ensure_admin', 'boss', 'first-pass')
    user = User.objects.get(username='boss')
    assert user.role == User.ADMIN
    assert user.is_staff

    call_command('ensure_admin', 'boss', 'second-pass')
    user.refresh_from_db()
    assert user.check_password('second-pass')
    assert User.objects.filter(username='boss').count() == 1


def test_ensure_admin_rejects_short_password():
    with pytest.raises(CommandError):
        call_command('ensure_admin', 'boss', 'abc')
