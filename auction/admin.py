# auction/admin.py
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User, Team, Player, Bid, AuctionState


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'role', 'team_display', 'is_active']
    list_filter = ['role', 'is_staff', 'is_active']
    search_fields = ['username', 'email', 'first_name', 'last_name']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Auction Role', {
            'fields': ('role',)
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Auction Role', {
            'fields': ('role',),
        }),
    )

    def team_display(self, obj):
        team = obj.team
        return team.name if team else '-'
    team_display.short_description = 'Team'


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'budget', 'players_count', 'bidding_locked']
    list_filter = ['bidding_locked']
    search_fields = ['name', 'owner__username', 'owner_name']
    readonly_fields = ['created_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'owner', 'owner_name', 'logo')
        }),
        ('Financial Details', {
            'fields': ('budget', 'bidding_locked')
        }),
        ('Credentials', {
            'fields': ('plain_password',),
            'classes': ('collapse',)
        }),
        ('Metadata', {
            'fields': ('created_at',),
            'classes': ('collapse',)
        }),
    )

    def players_count(self, obj):
        return obj.sold_count()
    players_count.short_description = 'Players Bought'


@admin.register(Player)
class PlayerAdmin(admin.ModelAdmin):
    list_display = ['serial_number', 'name', 'role', 'country', 'status', 'sold_to_team', 'base_price', 'sold_price', 'was_unsold']
    list_display_links = ['name']
    list_filter = ['status', 'role', 'was_unsold', 'sold_to_team']
    search_fields = ['name', 'country']
    readonly_fields = ['created_at']
    actions = ['clear_unsold_tag']

    fieldsets = (
        ('Player Information', {
            'fields': ('name', 'role', 'country', 'age', 'image', 'serial_number')
        }),
        ('Auction Details', {
            'fields': ('base_price', 'status', 'sold_price', 'sold_to_team', 'was_unsold')
        }),
        ('Metadata', {
            'fields': ('created_at',),
            'classes': ('collapse',)
        }),
    )

    def clear_unsold_tag(self, request, queryset):
        updated = queryset.update(was_unsold=False)
        queryset.filter(status=Player.UNSOLD).update(status=Player.AVAILABLE)
        self.message_user(request, f'Unsold tag cleared for {updated} player(s).')
    clear_unsold_tag.short_description = "Clear unsold tag"


@admin.register(Bid)
class BidAdmin(admin.ModelAdmin):
    list_display = ['player', 'team', 'amount', 'timestamp']
    list_filter = ['team', 'timestamp']
    search_fields = ['player__name', 'team__name']
    readonly_fields = ['timestamp']
    ordering = ['-timestamp']


@admin.register(AuctionState)
class AuctionStateAdmin(admin.ModelAdmin):
    list_display = ['status', 'current_player', 'bidding_locked', 'bid_increment_1', 'bid_increment_2', 'max_players_per_team', 'enforce_max_bid']
    readonly_fields = ['updated_at']

    def has_add_permission(self, request):
        return not AuctionState.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
