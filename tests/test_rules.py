"""Tests for the pure bidding rules."""

from types import SimpleNamespace

import pytest

from auction.models import AuctionState, Player
from auction.rules import (
    bid_limit,
    check_affordability,
    max_allowed_bid,
    minimum_bid,
    pick_next_player,
    validate_bid,
)


def make_state(**overrides):
    values = dict(
        status=AuctionState.LIVE,
        bidding_locked=False,
        current_player_id=1,
        bid_increment_1=500,
        bid_increment_2=1000,
        max_players_per_team=10,
        enforce_max_bid=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


PLAYER = SimpleNamespace(id=1, base_price=1000)


def team(team_id=1, budget=20000, locked=False):
    return SimpleNamespace(id=team_id, budget=budget, bidding_locked=locked)


def bid(team_id, amount):
    return SimpleNamespace(team_id=team_id, amount=amount)


# =============================================================================
# Minimum bid
# =============================================================================

class TestMinimumBid:
    def test_first_bid_can_match_base_price(self):
        assert minimum_bid(1000, None, 500, 1000) == 1000

    def test_later_bids_add_smaller_increment(self):
        assert minimum_bid(1000, 2000, 500, 1000) == 2500

    def test_increment_order_does_not_matter(self):
        assert minimum_bid(1000, 2000, 1000, 300) == 2300


# =============================================================================
# Max allowed bid
# =============================================================================

class TestMaxAllowed:
    def test_not_enforced_is_whole_budget(self):
        assert max_allowed_bid(10000, 9, 10, False) == 10000

    def test_reserve_counts_open_slots(self):
        # 3 slots left with 1,000 held per slot
        limit = bid_limit(10000, 7, 10, True)
        assert limit.remaining_slots == 3
        assert limit.reserve == 3000
        assert limit.max_allowed == 7000

    def test_never_negative(self):
        assert max_allowed_bid(2000, 0, 10, True) == 0

    def test_custom_slot_reserve(self):
        assert max_allowed_bid(10000, 8, 10, True, slot_reserve=2500) == 5000


class TestAffordability:
    def test_roster_full_rejected_even_when_not_enforced(self):
        rejection = check_affordability(100, 50000, 10, 10, False)
        assert rejection.code == 'roster_full'

    def test_roster_full_rejected_when_enforced(self):
        rejection = check_affordability(100, 50000, 11, 10, True)
        assert rejection.code == 'roster_full'

    def test_over_reserve_reports_limits(self):
        rejection = check_affordability(8000, 10000, 7, 10, True)
        assert rejection.code == 'exceeds_max_bid'
        assert rejection.extra == {
            'maxBidAllowed': 7000,
            'minimumAmountToKeep': 3000,
            'remainingPlayers': 3,
        }

    def test_over_budget(self):
        rejection = check_affordability(10001, 10000, 0, 10, False)
        assert rejection.code == 'exceeds_budget'
        assert rejection.extra['maxBidAllowed'] == 10000

    def test_exact_limit_accepted(self):
        assert check_affordability(7000, 10000, 7, 10, True) is None


# =============================================================================
# Bid validation
# =============================================================================

class TestValidateBid:
    def check(self, state=None, highest=None, bidder=None, amount=1000, sold=0):
        return validate_bid(
            state or make_state(), PLAYER, highest, bidder or team(), amount, sold_count=sold,
        )

    def test_valid_first_bid(self):
        assert self.check() is None

    @pytest.mark.parametrize('status', [AuctionState.STOPPED, AuctionState.PAUSED])
    def test_auction_must_be_live(self, status):
        assert self.check(state=make_state(status=status)).code == 'not_live'

    def test_global_lock(self):
        assert self.check(state=make_state(bidding_locked=True)).code == 'bidding_locked'

    def test_needs_current_player(self):
        rejection = validate_bid(make_state(current_player_id=None), None, None, team(), 1000, 0)
        assert rejection.code == 'no_active_player'

    def test_team_lock(self):
        assert self.check(bidder=team(locked=True)).code == 'team_locked'

    def test_below_minimum(self):
        rejection = self.check(highest=bid(2, 2000), amount=2400)
        assert rejection.code == 'below_minimum'
        assert rejection.extra == {'minimumBid': 2500}

    def test_cannot_outbid_self(self):
        rejection = self.check(highest=bid(1, 2000), amount=3000)
        assert rejection.code == 'already_highest'

    def test_outbidding_another_team(self):
        assert self.check(highest=bid(2, 2000), amount=2500) is None

    def test_rules_checked_in_order(self):
        # Locked and below minimum at once: the lock is reported
        state = make_state(bidding_locked=True)
        assert self.check(state=state, amount=1).code == 'bidding_locked'

        # Below minimum and over budget: the minimum is reported
        rejection = self.check(highest=bid(2, 2000), bidder=team(budget=100), amount=2100)
        assert rejection.code == 'below_minimum'

    def test_affordability_checked_last(self):
        rejection = self.check(bidder=team(budget=500), amount=1000)
        assert rejection.code == 'exceeds_budget'


# =============================================================================
# Next player selection
# =============================================================================

def candidate(name, status=Player.AVAILABLE, was_unsold=False):
    return SimpleNamespace(name=name, status=status, was_unsold=was_unsold)


class TestPickNextPlayer:
    def test_fresh_players_before_retried(self):
        fresh = candidate('A')
        retried = candidate('B', status=Player.UNSOLD, was_unsold=True)
        for _ in range(20):
            assert pick_next_player([retried, fresh]) is fresh

    def test_retried_when_no_fresh_left(self):
        retried = candidate('B', status=Player.UNSOLD, was_unsold=True)
        sold = candidate('C', status=Player.SOLD)
        assert pick_next_player([sold, retried]) is retried

    def test_none_when_pool_empty(self):
        assert pick_next_player([candidate('C', status=Player.SOLD)]) is None
        assert pick_next_player([]) is None

    def test_choose_picks_within_tier(self):
        a, b = candidate('A'), candidate('B')
        assert pick_next_player([a, b], choose=lambda seq: seq[-1]) is b
