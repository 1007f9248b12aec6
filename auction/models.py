from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone


def default_bid_increment_1():
    return settings.AUCTION['DEFAULT_BID_INCREMENT_1']


def default_bid_increment_2():
    return settings.AUCTION['DEFAULT_BID_INCREMENT_2']


def default_max_players():
    return settings.AUCTION['DEFAULT_MAX_PLAYERS_PER_TEAM']


def default_team_budget():
    return settings.AUCTION['DEFAULT_TEAM_BUDGET']


class User(AbstractUser):
    ADMIN = 'admin'
    OWNER = 'owner'
    HOST = 'host'
    APP_OWNER = 'app_owner'

    ROLES = (
        (ADMIN, 'Administrator'),
        (OWNER, 'Team Owner'),
        (HOST, 'Host'),
        (APP_OWNER, 'App Owner'),
    )

    role = models.CharField(max_length=20, choices=ROLES, default=OWNER)

    class Meta:
        db_table = 'auth_user'

    @property
    def team(self):
        """Team owned by this user, if any"""
        return getattr(self, 'owned_team', None)


class Team(models.Model):
    name = models.CharField(max_length=100, unique=True)
    owner = models.OneToOneField(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='owned_team'
    )
    owner_name = models.CharField(max_length=100, blank=True)
    logo = models.URLField(max_length=500, blank=True)

    budget = models.PositiveIntegerField(default=default_team_budget)
    bidding_locked = models.BooleanField(default=False, help_text="Blocks every bid from this team")

    # Shown to the admin so credentials can be handed to the owner
    plain_password = models.CharField(max_length=128, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    def sold_count(self):
        return self.players.filter(status=Player.SOLD).count()


class Player(models.Model):
    AVAILABLE = 'AVAILABLE'
    SOLD = 'SOLD'
    UNSOLD = 'UNSOLD'

    PLAYER_STATUS = (
        (AVAILABLE, 'Available'),
        (SOLD, 'Sold'),
        (UNSOLD, 'Unsold'),
    )

    name = models.CharField(max_length=200)
    image = models.URLField(max_length=500, blank=True)
    role = models.CharField(max_length=50)
    country = models.CharField(max_length=100, blank=True)
    age = models.PositiveIntegerField(null=True, blank=True)
    base_price = models.PositiveIntegerField()

    status = models.CharField(max_length=20, choices=PLAYER_STATUS, default=AVAILABLE)
    sold_price = models.PositiveIntegerField(null=True, blank=True)
    sold_to_team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='players'
    )
    was_unsold = models.BooleanField(default=False, help_text="Sticky until reset by an admin")
    serial_number = models.PositiveIntegerField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['serial_number', 'id']

    def __str__(self):
        return f"{self.name} ({self.role})"


class BidQuerySet(models.QuerySet):
    def for_player(self, player):
        return self.filter(player=player)

    def ranked(self):
        """Highest amount first, most recent first on ties"""
        return self.order_by('-amount', '-timestamp', '-id')

    def latest_placed(self):
        return self.order_by('-timestamp', '-id').first()

    def highest(self):
        return self.ranked().first()


class Bid(models.Model):
    player = models.ForeignKey(Player, on_delete=models.CASCADE, related_name='bids')
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='bids')
    amount = models.PositiveIntegerField()
    timestamp = models.DateTimeField(default=timezone.now, db_index=True)

    objects = BidQuerySet.as_manager()

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['player', '-amount'], name='bid_player_amount_idx'),
        ]

    def __str__(self):
        return f"{self.team.name} bid {self.amount} for {self.player.name}"


class AuctionState(models.Model):
    STOPPED = 'STOPPED'
    LIVE = 'LIVE'
    PAUSED = 'PAUSED'

    AUCTION_STATUS = (
        (STOPPED, 'Stopped'),
        (LIVE, 'Live'),
        (PAUSED, 'Paused'),
    )

    status = models.CharField(max_length=20, choices=AUCTION_STATUS, default=STOPPED)
    current_player = models.ForeignKey(
        Player,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    bidding_locked = models.BooleanField(default=False)
    bid_increment_1 = models.PositiveIntegerField(default=default_bid_increment_1)
    bid_increment_2 = models.PositiveIntegerField(default=default_bid_increment_2)
    max_players_per_team = models.PositiveIntegerField(
        default=default_max_players,
        validators=[MinValueValidator(1), MaxValueValidator(50)]
    )
    enforce_max_bid = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Auction - {self.status}"

    @classmethod
    def load(cls, for_update=False):
        """
        Fetch the singleton row, creating it on first use.

        for_update=True row-locks it and must run inside transaction.atomic().
        """
        state_id = settings.AUCTION['STATE_ID']
        state, _ = cls.objects.get_or_create(pk=state_id)
        if for_update:
            return cls.objects.select_for_update().get(pk=state_id)
        return state

    @property
    def min_increment(self):
        return min(self.bid_increment_1, self.bid_increment_2)
