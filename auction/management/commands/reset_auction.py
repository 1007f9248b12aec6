import logging

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from auction.models import AuctionState, Bid, Player, Team

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Put every player back in the pool, clear all bids and restore team budgets"

    def add_arguments(self, parser):
        parser.add_argument(
            '--budget',
            type=int,
            default=settings.AUCTION['DEFAULT_TEAM_BUDGET'],
            help='Budget every team is restored to',
        )
        parser.add_argument(
            '--keep-unsold-tags',
            action='store_true',
            help='Leave the "previously unsold" flag as it is',
        )

    def handle(self, *args, **options):
        if options['budget'] < 0:
            self.stderr.write(self.style.ERROR('Budget cannot be negative'))
            return

        with transaction.atomic():
            state = AuctionState.load(for_update=True)
            bids, _ = Bid.objects.all().delete()

            changes = {'status': Player.AVAILABLE, 'sold_price': None, 'sold_to_team': None}
            if not options['keep_unsold_tags']:
                changes['was_unsold'] = False
            players = Player.objects.update(**changes)
            teams = Team.objects.update(budget=options['budget'])

            state.current_player = None
            state.status = AuctionState.STOPPED
            state.bidding_locked = False
            state.save()

        logger.warning("Auction reset: %s players, %s teams, %s bids cleared", players, teams, bids)
        self.stdout.write(self.style.SUCCESS(
            f'Reset {players} players and {teams} teams (budget {options["budget"]:,}); {bids} bids deleted.'
        ))
