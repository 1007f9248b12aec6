"""
Auction state engine.

One AuctionEngine instance is built when the app loads (see AuctionConfig)
and drives every state change of the live auction: bids, player loading,
undo/reset, settlement and the automatic pick of the next player.

Each mutating call runs in a single transaction that row-locks the auction
state (and any team whose budget it touches), so the rule checks and the
writes they guard cannot interleave with another request. Events are only
broadcast once that transaction has finished.
"""
import logging
import random
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F

from .exceptions import AuctionError, NotFoundError, RejectedError
from .models import AuctionState, Bid, Player, Team, User
from .payloads import bid_payload, player_payload, state_payload, team_payload
from .rules import Rejection, bid_limit, pick_next_player, validate_bid
from .serials import resequence
from .utils import broadcast

logger = logging.getLogger(__name__)


@dataclass
class BidResult:
    bid: Bid
    team: Team
    previous_amount: int

    @property
    def increment(self):
        return self.bid.amount - self.previous_amount


@dataclass
class SettlementResult:
    player: Player
    next_player: Optional[Player]


class AuctionEngine:

    def __init__(self, broadcaster=None, choose=random.choice, slot_reserve=None):
        self.broadcaster = broadcaster or broadcast
        self.choose = choose
        if slot_reserve is None:
            slot_reserve = settings.AUCTION['SLOT_RESERVE']
        self.slot_reserve = slot_reserve

    # ============================================================
    # Helpers
    # ============================================================

    def publish(self, events):
        for event, data in events:
            try:
                self.broadcaster(event, data)
            except Exception:
                # The write is already committed; a dead channel layer must not fail the request
                logger.exception("Broadcast of %s failed", event)

    def _locked_state(self):
        return AuctionState.load(for_update=True)

    def _get_player(self, player_id, for_update=False):
        qs = Player.objects.select_for_update() if for_update else Player.objects
        try:
            return qs.get(pk=player_id)
        except Player.DoesNotExist:
            raise NotFoundError('Player not found')

    def _get_team(self, team_id, for_update=False):
        qs = Team.objects.select_for_update() if for_update else Team.objects
        try:
            return qs.get(pk=team_id)
        except Team.DoesNotExist:
            raise NotFoundError('Team not found')

    def _require_current_player(self, state):
        if state.current_player_id is None:
            raise RejectedError(Rejection('no_active_player', 'No active player'))
        return state.current_player

    def state(self):
        return AuctionState.load()

    # ============================================================
    # Bidding
    # ============================================================

    def place_bid(self, team_id, amount):
        """Owner bid for the player under the hammer"""
        with transaction.atomic():
            state = self._locked_state()
            team = self._get_team(team_id, for_update=True)
            player = state.current_player

            highest = None
            if player is not None:
                highest = Bid.objects.for_player(player).highest()

            rejection = validate_bid(
                state, player, highest, team, amount,
                sold_count=team.sold_count(),
                slot_reserve=self.slot_reserve,
            )
            if rejection:
                logger.debug("Bid of %s by %s rejected: %s", amount, team.name, rejection.code)
                raise RejectedError(rejection)

            bid = Bid.objects.create(player=player, team=team, amount=amount)
            previous = highest.amount if highest else player.base_price

        logger.info("Bid placed: %s bid %s on %s", team.name, amount, player.name)
        data = bid_payload(bid)
        self.publish([
            ('bid-placed', {
                'bid': data,
                'playerId': player.id,
                'previousBid': previous,
                'increment': amount - previous,
            }),
            ('bid-updated', {
                'highestBid': data,
                'playerId': player.id,
                'previousBid': previous,
            }),
        ])
        return BidResult(bid=bid, team=team, previous_amount=previous)

    def admin_bid(self, team_id, amount):
        """Bid entered by the admin on a team's behalf; same rules as an owner bid"""
        result = self.place_bid(team_id, amount)
        logger.info("Admin entered bid of %s for %s", amount, result.team.name)
        return result

    def undo_last_bid(self):
        """Remove the most recently placed bid (by time, not by amount)"""
        with transaction.atomic():
            state = self._locked_state()
            player = self._require_current_player(state)

            last = Bid.objects.for_player(player).latest_placed()
            if last is None:
                raise RejectedError(Rejection('no_bids', 'No bids to undo'))
            last.delete()

            top = list(Bid.objects.for_player(player).select_related('team').ranked()[:2])
            highest = top[0] if top else None
            runner_up = top[1] if len(top) > 1 else None
            current_bid = highest.amount if highest else player.base_price

        logger.info("Undid last bid on %s, leading bid now %s", player.name, current_bid)
        self.publish([
            ('bid-updated', {
                'highestBid': bid_payload(highest),
                'playerId': player.id,
                'previousBid': runner_up.amount if runner_up else None,
                'currentBid': current_bid,
            }),
        ])
        return {
            'highestBid': bid_payload(highest),
            'previousBid': runner_up.amount if runner_up else None,
            'currentBid': current_bid,
        }

    def reset_bidding(self):
        with transaction.atomic():
            state = self._locked_state()
            player = self._require_current_player(state)
            deleted, _ = Bid.objects.for_player(player).delete()

        logger.info("Bidding reset for %s (%s bids cleared)", player.name, deleted)
        self.publish([('bidding-reset', {'playerId': player.id})])
        return player

    # ============================================================
    # Player lifecycle
    # ============================================================

    def load_player(self, player_id):
        with transaction.atomic():
            state = self._locked_state()
            player = self._get_player(player_id)

            state.current_player = player
            state.status = AuctionState.LIVE
            state.save()
            Bid.objects.for_player(player).delete()

        logger.info("Loaded player %s", player.name)
        self.publish([('player-loaded', {'player': player_payload(player)})])
        return player

    def settle(self, player_id, status, sold_price=None, sold_to_team=None):
        """
        Mark a player SOLD or UNSOLD, move the money, then load the next player.

        sold_price / sold_to_team override the leading bid when given.
        """
        if status not in (Player.SOLD, Player.UNSOLD):
            raise RejectedError(Rejection('invalid_status', 'Invalid status'))

        events = []
        with transaction.atomic():
            state = self._locked_state()
            player = self._get_player(player_id, for_update=True)

            if player.status == Player.SOLD:
                raise RejectedError(Rejection(
                    'already_sold',
                    f'{player.name} is already sold. Remove them from their team first.'
                ))

            if status == Player.SOLD:
                team = self._settle_sold(player, sold_price, sold_to_team)
                events.append(('player-marked', {
                    'playerId': player.id,
                    'status': Player.SOLD,
                    'soldPrice': player.sold_price,
                    'soldToTeam': team.id,
                }))
                events.append(('team-budget-updated', {'teamId': team.id, 'budget': team.budget}))
            else:
                player.status = Player.UNSOLD
                player.sold_price = None
                player.sold_to_team = None
                player.was_unsold = True
                player.save()
                logger.info("%s went unsold", player.name)
                events.append(('player-marked', {
                    'playerId': player.id,
                    'status': Player.UNSOLD,
                    'soldPrice': None,
                    'soldToTeam': None,
                }))

            Bid.objects.for_player(player).delete()
            next_player = self._advance(state, events)

        self.publish(events)
        return SettlementResult(player=player, next_player=next_player)

    def _settle_sold(self, player, sold_price, sold_to_team):
        highest = Bid.objects.for_player(player).highest()
        if highest is None and sold_price is None and sold_to_team is None:
            raise RejectedError(Rejection(
                'no_bids',
                'No bids found for this player. Cannot mark as SOLD without a bid.'
            ))

        final_price = sold_price if sold_price is not None else (highest.amount if highest else None)
        final_team_id = sold_to_team if sold_to_team is not None else (highest.team_id if highest else None)
        if final_team_id is None:
            raise RejectedError(Rejection('no_team', 'No team selected for sale'))
        if final_price is None:
            raise RejectedError(Rejection('no_price', 'No sale price given'))

        team = self._get_team(final_team_id, for_update=True)
        if team.budget < final_price:
            raise RejectedError(Rejection(
                'insufficient_budget',
                'Team does not have enough budget',
                {'budget': team.budget},
            ))

        Team.objects.filter(pk=team.pk).update(budget=F('budget') - final_price)
        team.refresh_from_db(fields=['budget'])

        player.status = Player.SOLD
        player.sold_price = final_price
        player.sold_to_team = team
        player.was_unsold = False
        player.save()

        logger.info("%s sold to %s for %s", player.name, team.name, final_price)
        return team

    def auto_advance(self):
        events = []
        with transaction.atomic():
            state = self._locked_state()
            next_player = self._advance(state, events)
        self.publish(events)
        return next_player

    def _advance(self, state, events):
        candidates = Player.objects.filter(status__in=[Player.AVAILABLE, Player.UNSOLD])
        next_player = pick_next_player(list(candidates), self.choose)

        if next_player is None:
            state.current_player = None
            state.status = AuctionState.STOPPED
            state.save()
            logger.info("No players left, auction stopped")
            events.append(('player-loaded', {'player': None}))
            return None

        state.current_player = next_player
        state.status = AuctionState.LIVE
        state.save()
        Bid.objects.for_player(next_player).delete()

        logger.info("Auto-loaded next player: %s", next_player.name)
        events.append(('player-loaded', {'player': player_payload(next_player)}))
        return next_player

    def remove_from_team(self, player_id):
        """Undo a sale: refund the team and send the player back to the pool"""
        with transaction.atomic():
            player = self._get_player(player_id, for_update=True)
            if player.status != Player.SOLD or player.sold_to_team_id is None:
                raise RejectedError(Rejection('not_sold', 'Player is not sold to any team'))

            team = self._get_team(player.sold_to_team_id, for_update=True)
            refund = player.sold_price or 0
            Team.objects.filter(pk=team.pk).update(budget=F('budget') + refund)
            team.refresh_from_db(fields=['budget'])

            player.status = Player.AVAILABLE
            player.sold_price = None
            player.sold_to_team = None
            player.was_unsold = True
            player.save()

        logger.info("Removed %s from %s, refunded %s", player.name, team.name, refund)
        data = player_payload(player)
        self.publish([
            ('player-removed-from-team', {'playerId': player.id, 'teamId': team.id, 'player': data}),
            ('team-budget-updated', {'teamId': team.id, 'budget': team.budget}),
            ('player-updated', {'player': data}),
        ])
        return player, team

    def reset_unsold_tag(self, player_id):
        with transaction.atomic():
            player = self._get_player(player_id, for_update=True)
            player.was_unsold = False
            if player.status == Player.UNSOLD:
                player.status = Player.AVAILABLE
            player.save()

        self.publish([('player-marked', {'playerId': player.id, 'status': player.status})])
        return player

    # ============================================================
    # Auction settings
    # ============================================================

    def _update_state(self, **changes):
        with transaction.atomic():
            state = self._locked_state()
            for field, value in changes.items():
                setattr(state, field, value)
            state.save()
        return state

    def set_status(self, status):
        if status not in dict(AuctionState.AUCTION_STATUS):
            raise RejectedError(Rejection('invalid_status', 'Invalid status'))
        state = self._update_state(status=status)
        logger.info("Auction status set to %s", status)
        self.publish([('auction-status-changed', {'status': status})])
        return state

    def lock_bidding(self, locked):
        state = self._update_state(bidding_locked=bool(locked))
        logger.info("Bidding %s", 'locked' if locked else 'unlocked')
        self.publish([('bidding-locked', {'locked': bool(locked)})])
        return state

    def set_enforce_max_bid(self, enforce):
        state = self._update_state(enforce_max_bid=bool(enforce))
        logger.info("Enforce max bid: %s", bool(enforce))
        self.publish([('enforce-max-bid-changed', {'enforceMaxBid': bool(enforce)})])
        return state

    def set_max_players(self, max_players):
        if max_players is None or not 1 <= max_players <= 50:
            raise RejectedError(Rejection(
                'invalid_max_players',
                'Invalid max players per team (must be between 1 and 50)'
            ))
        state = self._update_state(max_players_per_team=max_players)
        logger.info("Max players per team set to %s", max_players)
        self.publish([('max-players-changed', {'maxPlayersPerTeam': max_players})])
        return state

    def set_bid_increments(self, increment_1, increment_2):
        if increment_1 <= 0 or increment_2 <= 0:
            raise RejectedError(Rejection('invalid_increments', 'Bid increments must be positive'))
        state = self._update_state(bid_increment_1=increment_1, bid_increment_2=increment_2)
        logger.info("Bid increments set to %s / %s", increment_1, increment_2)
        self.publish([('bid-increments-changed', {'increment1': increment_1, 'increment2': increment_2})])
        return state

    # ============================================================
    # Roster administration
    # ============================================================

    def add_player(self, **fields):
        serial = fields.pop('serial_number', None)
        with transaction.atomic():
            if serial is not None:
                resequence(None, serial)
            player = Player.objects.create(serial_number=serial, **fields)

        logger.info("Player added: %s", player.name)
        self.publish([('player-added', {'player': player_payload(player)})])
        return player

    def update_player(self, player_id, **fields):
        with transaction.atomic():
            player = self._get_player(player_id, for_update=True)
            if 'serial_number' in fields:
                resequence(player.serial_number, fields['serial_number'], moved_id=player.id)
            for field, value in fields.items():
                setattr(player, field, value)
            player.save()

        self.publish([('player-updated', {'player': player_payload(player)})])
        return player

    def delete_player(self, player_id):
        with transaction.atomic():
            state = self._locked_state()
            player = self._get_player(player_id, for_update=True)
            if state.current_player_id == player.id:
                raise RejectedError(Rejection(
                    'player_live',
                    'Cannot delete player that is currently being auctioned'
                ))
            old_serial = player.serial_number
            player.delete()
            if old_serial is not None:
                resequence(old_serial, None, moved_id=player_id)

        logger.info("Player %s deleted", player_id)
        self.publish([('player-deleted', {'playerId': int(player_id)})])

    def delete_all_players(self):
        with transaction.atomic():
            state = self._locked_state()
            Bid.objects.all().delete()
            deleted, _ = Player.objects.all().delete()
            state.current_player = None
            state.status = AuctionState.STOPPED
            state.save()

        logger.warning("All players and bids deleted")
        self.publish([('all-players-deleted', None)])
        return deleted

    def create_team(self, name, username, password, budget=None, owner_name='', logo=''):
        with transaction.atomic():
            if User.objects.filter(username=username).exists():
                raise AuctionError('Username already taken')
            owner = User.objects.create_user(username=username, password=password, role=User.OWNER)
            team = Team(name=name, owner=owner, owner_name=owner_name, logo=logo, plain_password=password)
            if budget is not None:
                team.budget = budget
            team.save()

        logger.info("Team created: %s (owner %s)", team.name, username)
        self.publish([('team-created', {'team': team_payload(team)})])
        return team

    def update_team(self, team_id, **fields):
        with transaction.atomic():
            team = self._get_team(team_id, for_update=True)
            for field, value in fields.items():
                setattr(team, field, value)
            team.save()

        events = [('team-updated', {'team': team_payload(team)})]
        if 'budget' in fields:
            events.append(('team-budget-updated', {'teamId': team.id, 'budget': team.budget}))
        self.publish(events)
        return team

    def set_team_credentials(self, team_id, username, password):
        with transaction.atomic():
            team = self._get_team(team_id, for_update=True)
            clash = User.objects.filter(username=username)
            if team.owner_id:
                clash = clash.exclude(pk=team.owner_id)
            if clash.exists():
                raise AuctionError('Username already taken')

            owner = team.owner or User(role=User.OWNER)
            owner.username = username
            owner.set_password(password)
            owner.save()

            team.owner = owner
            team.plain_password = password
            team.save()

        logger.info("Credentials updated for %s", team.name)
        return team

    def set_staff_credentials(self, role, username, password):
        """
        Rename the admin or host account and reset its password.

        The account is created if none exists for the role yet. Returns
        ``(user, created)``.
        """
        if role not in (User.ADMIN, User.HOST):
            raise RejectedError(Rejection('invalid_role', 'Invalid target role. Must be admin or host.'))

        with transaction.atomic():
            existing = User.objects.select_for_update().filter(username=username).first()
            if existing is not None and existing.role != role:
                raise AuctionError('Username already taken by another user')

            user = existing or User.objects.select_for_update().filter(role=role).order_by('id').first()
            created = user is None
            if created:
                user = User(role=role)
            user.username = username
            user.set_password(password)
            if role == User.ADMIN:
                user.is_staff = True
            user.save()

        logger.info("%s credentials %s (%s)", role, 'created' if created else 'updated', username)
        return user, created

    def delete_team(self, team_id):
        """Delete a team that has not bid or bought yet, along with its owner login"""
        with transaction.atomic():
            team = self._get_team(team_id, for_update=True)
            if team.bids.exists() or team.players.exists():
                raise RejectedError(Rejection(
                    'team_in_use',
                    'Cannot delete team with existing bids or sold players'
                ))
            owner = team.owner
            team.delete()
            if owner is not None:
                owner.delete()

        logger.info("Team %s deleted", team_id)
        self.publish([('team-deleted', {'teamId': int(team_id)})])

    def set_team_budget(self, team_id, budget):
        if budget is None or budget < 0:
            raise RejectedError(Rejection('invalid_budget', 'Budget cannot be negative'))
        return self.update_team(team_id, budget=budget)

    def lock_team(self, team_id, locked):
        team = self.update_team(team_id, bidding_locked=bool(locked))
        self.publish([('team-bidding-locked', {'teamId': team.id, 'locked': team.bidding_locked})])
        return team

    # ============================================================
    # Snapshots
    # ============================================================

    def stats(self, team=None):
        sold = Player.objects.filter(status=Player.SOLD)
        if team is not None:
            sold = sold.filter(sold_to_team=team)
        return {
            'sold': sold.count(),
            'unsold': Player.objects.filter(status=Player.UNSOLD).count(),
            'available': Player.objects.filter(status=Player.AVAILABLE).count(),
        }

    def leading_bid(self, player):
        if player is None:
            return None
        return Bid.objects.for_player(player).select_related('team').highest()

    def current_info(self, state=None):
        if state is None:
            state = self.state()
        player = state.current_player
        highest = self.leading_bid(player)
        if highest is not None:
            current_bid = highest.amount
        else:
            current_bid = player.base_price if player else 0

        return {
            **state_payload(state),
            'player': player_payload(player),
            'highestBid': bid_payload(highest),
            'currentBid': current_bid,
            'stats': self.stats(),
        }

    def owner_info(self, team):
        state = self.state()
        info = self.current_info(state)
        highest = info['highestBid']

        committed = highest['amount'] if highest and highest['team_id'] == team.id else 0
        players_bought = team.sold_count()
        limit = bid_limit(
            team.budget,
            players_bought,
            state.max_players_per_team,
            state.enforce_max_bid,
            self.slot_reserve,
        )
        info.update({
            'stats': self.stats(team=team),
            'walletBalance': team.budget - committed,
            'totalBudget': team.budget,
            'committedAmount': committed,
            'teamBiddingLocked': team.bidding_locked,
            'totalAllowedPlayers': state.max_players_per_team,
            'playersBought': players_bought,
            'remainingPlayers': limit.remaining_slots,
            'minimumAmountToKeep': limit.reserve,
            'maxBidAllowed': limit.max_allowed,
        })
        return info
