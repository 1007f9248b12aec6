from django.urls import path

from . import views

urlpatterns = [
    # Auth
    path('auth/csrf', views.csrf, name='csrf'),
    path('auth/login', views.user_login, name='login'),
    path('auth/logout', views.user_logout, name='logout'),
    path('auth/me', views.me, name='me'),

    # Team Owner URLs
    path('owner/current-info', views.owner_current_info, name='owner_current_info'),
    path('owner/bid', views.owner_bid, name='owner_bid'),
    path('owner/players-by-status/<str:status>', views.owner_players_by_status, name='owner_players_by_status'),
    path('owner/teams', views.owner_teams, name='owner_teams'),
    path('owner/teams/<int:team_id>/players', views.owner_team_players, name='owner_team_players'),

    # Host URLs
    path('host/current-info', views.host_current_info, name='host_current_info'),
    path('host/current-bids', views.host_current_bids, name='host_current_bids'),
    path('host/team-budgets', views.host_team_budgets, name='host_team_budgets'),

    # App Owner URLs
    path('app-owner/update-credentials', views.update_staff_credentials, name='update_staff_credentials'),

    # ========================================
    # ADMIN AUCTION CONTROL
    # ========================================
    path('admin/auction-state', views.auction_state, name='auction_state'),
    path('admin/auction-status', views.auction_status, name='auction_status'),
    path('admin/load-player', views.load_player, name='load_player'),
    path('admin/current-bid', views.current_bid, name='current_bid'),
    path('admin/bids', views.current_bids, name='current_bids'),
    path('admin/undo-bid', views.undo_bid, name='undo_bid'),
    path('admin/reset-bidding', views.reset_bidding, name='reset_bidding'),
    path('admin/lock-bidding', views.lock_bidding, name='lock_bidding'),
    path('admin/enforce-max-bid', views.enforce_max_bid, name='enforce_max_bid'),
    path('admin/max-players', views.max_players, name='max_players'),
    path('admin/bid-increments', views.bid_increments, name='bid_increments'),
    path('admin/mark-player', views.mark_player, name='mark_player'),
    path('admin/admin-bid', views.admin_bid, name='admin_bid'),
    path('admin/reset-unsold-tag/<int:player_id>', views.reset_unsold_tag, name='reset_unsold_tag'),
    path('admin/remove-player-from-team/<int:player_id>', views.remove_player_from_team,
         name='remove_player_from_team'),
    path('admin/history', views.history, name='history'),

    # ========================================
    # ADMIN PLAYER / TEAM MANAGEMENT
    # ========================================
    path('admin/players', views.players, name='players'),
    path('admin/players/<int:player_id>', views.player_detail, name='player_detail'),
    path('admin/players-all', views.delete_all_players, name='delete_all_players'),
    path('admin/players-by-status/<str:status>', views.admin_players_by_status, name='admin_players_by_status'),
    path('admin/teams', views.teams, name='teams'),
    path('admin/teams/<int:team_id>', views.team_detail, name='team_detail'),
    path('admin/teams/<int:team_id>/budget', views.team_budget, name='team_budget'),
    path('admin/teams/<int:team_id>/lock-bidding', views.team_lock_bidding, name='team_lock_bidding'),
    path('admin/teams/<int:team_id>/credentials', views.team_credentials, name='team_credentials'),
    path('admin/team-squads', views.team_squads, name='team_squads'),
]
