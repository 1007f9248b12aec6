"""
Bidding rules for the live auction.

Everything here is pure: callers load the auction state, the player, the
leading bid and the team's sold count, and these functions decide whether a
bid stands. Nothing in this module touches the database or the channel layer.
"""
import random
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .models import AuctionState, Player

SLOT_RESERVE = 1000


@dataclass(frozen=True)
class Rejection:
    """A refused bid or settlement, with values the client can show"""
    code: str
    message: str
    extra: dict = field(default_factory=dict)

    def as_payload(self):
        return {'error': self.message, **self.extra}


@dataclass(frozen=True)
class BidLimit:
    max_allowed: int
    reserve: int
    remaining_slots: int


def minimum_bid(base_price: int, highest_amount: Optional[int], increment_1: int, increment_2: int) -> int:
    if highest_amount is None:
        return base_price
    return highest_amount + min(increment_1, increment_2)


def bid_limit(budget: int, sold_count: int, max_players: int, enforce_max_bid: bool,
              slot_reserve: int = SLOT_RESERVE) -> BidLimit:
    remaining_slots = max_players - sold_count
    if not enforce_max_bid:
        return BidLimit(max_allowed=budget, reserve=0, remaining_slots=remaining_slots)

    # The slot being bid on is still counted as open here.
    reserve = max(remaining_slots, 0) * slot_reserve
    return BidLimit(
        max_allowed=max(0, budget - reserve),
        reserve=reserve,
        remaining_slots=remaining_slots,
    )


def max_allowed_bid(budget: int, sold_count: int, max_players: int, enforce_max_bid: bool,
                    slot_reserve: int = SLOT_RESERVE) -> int:
    return bid_limit(budget, sold_count, max_players, enforce_max_bid, slot_reserve).max_allowed


def check_affordability(amount: int, budget: int, sold_count: int, max_players: int,
                        enforce_max_bid: bool, slot_reserve: int = SLOT_RESERVE) -> Optional[Rejection]:
    limit = bid_limit(budget, sold_count, max_players, enforce_max_bid, slot_reserve)

    if limit.remaining_slots <= 0:
        return Rejection(
            'roster_full',
            f'Team has already reached the maximum of {max_players} players',
            {'remainingPlayers': limit.remaining_slots},
        )

    if amount <= limit.max_allowed:
        return None

    if enforce_max_bid:
        return Rejection(
            'exceeds_max_bid',
            f'Bid exceeds maximum allowed. You need to keep {limit.reserve:,} '
            f'for {limit.remaining_slots} remaining player(s).',
            {
                'maxBidAllowed': limit.max_allowed,
                'minimumAmountToKeep': limit.reserve,
                'remainingPlayers': limit.remaining_slots,
            },
        )
    return Rejection(
        'exceeds_budget',
        f'Bid exceeds maximum allowed purse: {limit.max_allowed:,}',
        {'maxBidAllowed': limit.max_allowed},
    )


def validate_bid(state, player, highest_bid, team, amount: int, sold_count: int,
                 slot_reserve: int = SLOT_RESERVE) -> Optional[Rejection]:
    """
    Decide whether ``team`` may bid ``amount`` on the player under the hammer.

    Returns None when the bid is accepted, otherwise the first failing rule.
    """
    if state.status != AuctionState.LIVE:
        return Rejection('not_live', 'Auction is not live')
    if state.bidding_locked:
        return Rejection('bidding_locked', 'Bidding is locked')
    if player is None or state.current_player_id is None:
        return Rejection('no_active_player', 'No player is currently being auctioned')
    if team.bidding_locked:
        return Rejection('team_locked', 'Your team is locked from bidding by admin')

    required = minimum_bid(
        player.base_price,
        highest_bid.amount if highest_bid else None,
        state.bid_increment_1,
        state.bid_increment_2,
    )
    if amount < required:
        return Rejection('below_minimum', f'Bid must be at least {required}', {'minimumBid': required})

    if highest_bid is not None and highest_bid.team_id == team.id:
        return Rejection('already_highest', 'You are already the highest bidder')

    return check_affordability(
        amount,
        team.budget,
        sold_count,
        state.max_players_per_team,
        state.enforce_max_bid,
        slot_reserve,
    )


def pick_next_player(candidates: Sequence[Player],
                     choose: Callable[[Sequence[Player]], Player] = random.choice) -> Optional[Player]:
    """
    Pick the next player to put under the hammer.

    Players never marked unsold always go first; ``choose`` picks within a tier.
    """
    pending = [p for p in candidates if p.status in (Player.AVAILABLE, Player.UNSOLD)]
    fresh = [p for p in pending if not p.was_unsold]
    if fresh:
        return choose(fresh)
    retried = [p for p in pending if p.was_unsold]
    if retried:
        return choose(retried)
    return None
