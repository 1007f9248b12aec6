import json
import logging
import re
from functools import wraps

from django.apps import apps
from django.contrib.auth import authenticate, login, logout
from django.db import DatabaseError
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .exceptions import AuctionError, NotFoundError
from .forms import (
    AdminBidForm, AuctionStatusForm, BidForm, BidIncrementsForm, CredentialsForm,
    EnforceMaxBidForm, LoadPlayerForm, LockForm, LoginForm, MarkPlayerForm,
    MaxPlayersForm, PlayerForm, StaffCredentialsForm, TeamBudgetForm, TeamCreationForm, TeamForm,
    first_error,
)
from .models import Bid, Player, Team, User
from .payloads import bid_payload, player_payload, state_payload, team_payload

logger = logging.getLogger(__name__)

PLAYER_STATUSES = [Player.AVAILABLE, Player.SOLD, Player.UNSOLD]


def get_engine():
    return apps.get_app_config('auction').engine


def _snake(key):
    return re.sub(r'(?<=[a-z0-9])([A-Z])', r'_\1', key).lower()


def parse_body(request):
    """JSON request body with camelCase keys turned into snake_case"""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise AuctionError('Invalid JSON data')
    if not isinstance(data, dict):
        raise AuctionError('Invalid JSON data')
    return {_snake(key): value for key, value in data.items()}


def bad_request(form):
    return JsonResponse({'error': first_error(form)}, status=400)


def json_view(*roles):
    """
    Session auth + role check, and map engine errors to JSON responses.

    400/404 come from AuctionError; store failures are logged and become 500.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            user = request.user
            if roles:
                if not user.is_authenticated:
                    return JsonResponse({'error': 'Not authenticated'}, status=401)
                if user.role not in roles:
                    return JsonResponse({'error': 'Forbidden'}, status=403)
            try:
                return view(request, *args, **kwargs)
            except AuctionError as e:
                return JsonResponse(e.as_payload(), status=e.status_code)
            except (Player.DoesNotExist, Team.DoesNotExist):
                return JsonResponse({'error': 'Not found'}, status=404)
            except DatabaseError:
                logger.exception("Database error in %s", view.__name__)
                return JsonResponse({'error': 'Database error'}, status=500)
        return wrapper
    return decorator


def owner_team(request):
    team = request.user.team
    if team is None:
        raise NotFoundError('Team not found')
    return team


# ============================================================================
# AUTH
# ============================================================================

@ensure_csrf_cookie
@require_GET
def csrf(request):
    return JsonResponse({'success': True})


@require_POST
@json_view()
def user_login(request):
    form = LoginForm(parse_body(request))
    if not form.is_valid():
        return JsonResponse({'error': 'Username and password required'}, status=400)

    user = authenticate(
        request,
        username=form.cleaned_data['username'],
        password=form.cleaned_data['password'],
    )
    if user is None:
        logger.info("Login failed for %s", form.cleaned_data['username'])
        return JsonResponse({'error': 'Invalid credentials'}, status=401)

    login(request, user)
    logger.info("Login successful: %s (%s)", user.username, user.role)
    return JsonResponse({'success': True, 'user': _user_payload(user)})


@require_POST
def user_logout(request):
    logout(request)
    return JsonResponse({'success': True})


@require_GET
@json_view(User.ADMIN, User.OWNER, User.HOST, User.APP_OWNER)
def me(request):
    return JsonResponse({'user': _user_payload(request.user)})


def _user_payload(user):
    team = user.team
    return {
        'id': user.id,
        'username': user.username,
        'role': user.role,
        'teamId': team.id if team else None,
        'teamName': team.name if team else None,
    }


# ============================================================================
# TEAM OWNER
# ============================================================================

@require_GET
@json_view(User.OWNER)
def owner_current_info(request):
    team = owner_team(request)
    return JsonResponse(get_engine().owner_info(team))


@require_POST
@json_view(User.OWNER)
def owner_bid(request):
    form = BidForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)

    team = owner_team(request)
    result = get_engine().place_bid(team.id, form.cleaned_data['amount'])
    budget = result.team.budget
    return JsonResponse({
        'success': True,
        'message': 'Bid placed successfully',
        'highestBid': bid_payload(result.bid),
        'walletBalance': budget - result.bid.amount,
        'totalBudget': budget,
        'committedAmount': result.bid.amount,
    })


@require_GET
@json_view(User.OWNER)
def owner_players_by_status(request, status):
    if status not in PLAYER_STATUSES:
        return JsonResponse({'error': 'Invalid status'}, status=400)
    players = Player.objects.filter(status=status).select_related('sold_to_team')
    if status == Player.SOLD:
        players = players.filter(sold_to_team=owner_team(request))
    return JsonResponse([player_payload(p) for p in players], safe=False)


@require_GET
@json_view(User.OWNER)
def owner_teams(request):
    teams = Team.objects.order_by('name').values('id', 'name')
    return JsonResponse(list(teams), safe=False)


@require_GET
@json_view(User.OWNER)
def owner_team_players(request, team_id):
    players = Player.objects.filter(
        sold_to_team_id=team_id,
        status=Player.SOLD
    ).order_by('serial_number', 'name').values('name', 'sold_price', 'serial_number')
    return JsonResponse(list(players), safe=False)


# ============================================================================
# HOST (public overlay)
# ============================================================================

@require_GET
@json_view(User.HOST, User.ADMIN)
def host_current_info(request):
    return JsonResponse(get_engine().current_info())


@require_GET
@json_view(User.HOST, User.ADMIN)
def host_current_bids(request):
    state = get_engine().state()
    if state.current_player_id is None:
        return JsonResponse([], safe=False)
    bids = Bid.objects.filter(player_id=state.current_player_id).select_related('team').ranked()
    return JsonResponse([bid_payload(b) for b in bids], safe=False)


@require_GET
@json_view(User.HOST, User.ADMIN)
def host_team_budgets(request):
    teams = Team.objects.order_by('name')
    return JsonResponse([team_payload(t) for t in teams], safe=False)


# ============================================================================
# ADMIN - AUCTION CONTROL
# ============================================================================

@require_GET
@json_view(User.ADMIN)
def auction_state(request):
    return JsonResponse(state_payload(get_engine().state()))


@require_POST
@json_view(User.ADMIN)
def auction_status(request):
    form = AuctionStatusForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    state = get_engine().set_status(form.cleaned_data['status'])
    return JsonResponse({'success': True, 'status': state.status})


@require_POST
@json_view(User.ADMIN)
def load_player(request):
    form = LoadPlayerForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    player = get_engine().load_player(form.cleaned_data['player_id'])
    return JsonResponse({'success': True, 'player': player_payload(player)})


@require_GET
@json_view(User.ADMIN)
def current_bid(request):
    info = get_engine().current_info()
    return JsonResponse({
        'highestBid': info['highestBid'],
        'player': info['player'],
        'currentBid': info['currentBid'],
    })


@require_GET
@json_view(User.ADMIN)
def current_bids(request):
    state = get_engine().state()
    if state.current_player_id is None:
        return JsonResponse({'bids': []})
    bids = Bid.objects.filter(player_id=state.current_player_id).select_related('team').ranked()
    return JsonResponse({'bids': [bid_payload(b) for b in bids]})


@require_POST
@json_view(User.ADMIN)
def undo_bid(request):
    result = get_engine().undo_last_bid()
    return JsonResponse({'success': True, **result})


@require_POST
@json_view(User.ADMIN)
def reset_bidding(request):
    get_engine().reset_bidding()
    return JsonResponse({'success': True})


@require_POST
@json_view(User.ADMIN)
def lock_bidding(request):
    form = LockForm(parse_body(request))
    form.is_valid()
    state = get_engine().lock_bidding(form.cleaned_data.get('locked', False))
    return JsonResponse({'success': True, 'locked': state.bidding_locked})


@require_POST
@json_view(User.ADMIN)
def enforce_max_bid(request):
    form = EnforceMaxBidForm(parse_body(request))
    form.is_valid()
    state = get_engine().set_enforce_max_bid(form.cleaned_data.get('enforce_max_bid', False))
    return JsonResponse({'success': True, 'enforceMaxBid': state.enforce_max_bid})


@require_http_methods(['GET', 'POST'])
@json_view(User.ADMIN)
def max_players(request):
    if request.method == 'GET':
        return JsonResponse({'maxPlayersPerTeam': get_engine().state().max_players_per_team})

    form = MaxPlayersForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    state = get_engine().set_max_players(form.cleaned_data['max_players_per_team'])
    return JsonResponse({'success': True, 'maxPlayersPerTeam': state.max_players_per_team})


@require_POST
@json_view(User.ADMIN)
def bid_increments(request):
    form = BidIncrementsForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    state = get_engine().set_bid_increments(
        form.cleaned_data['increment1'],
        form.cleaned_data['increment2'],
    )
    return JsonResponse({
        'success': True,
        'increments': {'increment1': state.bid_increment_1, 'increment2': state.bid_increment_2},
    })


@require_POST
@json_view(User.ADMIN)
def mark_player(request):
    form = MarkPlayerForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)

    data = form.cleaned_data
    result = get_engine().settle(
        data['player_id'],
        data['status'],
        sold_price=data.get('sold_price'),
        sold_to_team=data.get('sold_to_team'),
    )
    response = {
        'success': True,
        'player': player_payload(result.player),
        'nextPlayerLoaded': result.next_player is not None,
    }
    if result.next_player is not None:
        response['nextPlayer'] = player_payload(result.next_player)
    else:
        response['message'] = 'No more available players'
    return JsonResponse(response)


@require_POST
@json_view(User.ADMIN)
def admin_bid(request):
    form = AdminBidForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    result = get_engine().admin_bid(form.cleaned_data['team_id'], form.cleaned_data['amount'])
    return JsonResponse({'success': True, 'bid': bid_payload(result.bid)})


@require_POST
@json_view(User.ADMIN)
def reset_unsold_tag(request, player_id):
    get_engine().reset_unsold_tag(player_id)
    return JsonResponse({'success': True, 'message': 'Unsold tag reset successfully'})


@require_POST
@json_view(User.ADMIN)
def remove_player_from_team(request, player_id):
    player, _ = get_engine().remove_from_team(player_id)
    return JsonResponse({
        'success': True,
        'message': 'Player removed from team and returned to auction',
        'player': player_payload(player),
    })


@require_GET
@json_view(User.ADMIN)
def history(request):
    bids = Bid.objects.select_related('player', 'team').order_by('-timestamp', '-id')[:100]
    return JsonResponse({'history': [{
        **bid_payload(b),
        'player_name': b.player.name,
        'base_price': b.player.base_price,
    } for b in bids]})


# ============================================================================
# ADMIN - PLAYERS
# ============================================================================

@require_http_methods(['GET', 'POST'])
@json_view(User.ADMIN)
def players(request):
    if request.method == 'GET':
        qs = Player.objects.select_related('sold_to_team').order_by('id')
        return JsonResponse({'players': [player_payload(p) for p in qs]})

    form = PlayerForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    player = get_engine().add_player(**form.cleaned_data)
    return JsonResponse({'success': True, 'player': player_payload(player)})


@require_http_methods(['PUT', 'DELETE'])
@json_view(User.ADMIN)
def player_detail(request, player_id):
    if request.method == 'DELETE':
        get_engine().delete_player(player_id)
        return JsonResponse({'success': True})

    payload = parse_body(request)
    player = Player.objects.get(pk=player_id)
    form = PlayerForm({**model_to_dict(player, fields=PlayerForm._meta.fields), **payload})
    if not form.is_valid():
        return bad_request(form)

    changes = {k: form.cleaned_data[k] for k in payload if k in form.fields}
    if not changes:
        return JsonResponse({'error': 'No fields to update'}, status=400)
    player = get_engine().update_player(player_id, **changes)
    return JsonResponse({'success': True, 'player': player_payload(player)})


@require_http_methods(['DELETE'])
@json_view(User.ADMIN)
def delete_all_players(request):
    get_engine().delete_all_players()
    return JsonResponse({'success': True, 'message': 'All players and bids deleted permanently'})


@require_GET
@json_view(User.ADMIN)
def admin_players_by_status(request, status):
    if status not in PLAYER_STATUSES:
        return JsonResponse({'error': 'Invalid status'}, status=400)
    qs = Player.objects.filter(status=status).select_related('sold_to_team').order_by('name')
    return JsonResponse([player_payload(p) for p in qs], safe=False)


# ============================================================================
# ADMIN - TEAMS
# ============================================================================

@require_http_methods(['GET', 'POST'])
@json_view(User.ADMIN)
def teams(request):
    if request.method == 'GET':
        qs = Team.objects.select_related('owner').order_by('name')
        return JsonResponse([team_payload(t, include_credentials=True) for t in qs], safe=False)

    form = TeamCreationForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    data = form.cleaned_data
    team = get_engine().create_team(
        name=data['name'],
        username=data['username'],
        password=data['password'],
        budget=data.get('budget'),
        owner_name=data.get('owner_name', ''),
        logo=data.get('logo', ''),
    )
    return JsonResponse({'success': True, 'team': team_payload(team, include_credentials=True)})


@require_http_methods(['PUT', 'DELETE'])
@json_view(User.ADMIN)
def team_detail(request, team_id):
    if request.method == 'DELETE':
        get_engine().delete_team(team_id)
        return JsonResponse({'success': True})

    payload = parse_body(request)
    team = Team.objects.get(pk=team_id)
    form = TeamForm({**model_to_dict(team, fields=TeamForm._meta.fields), **payload}, instance=team)
    if not form.is_valid():
        return bad_request(form)

    changes = {k: form.cleaned_data[k] for k in payload if k in form.fields}
    if not changes:
        return JsonResponse({'error': 'No fields to update'}, status=400)
    team = get_engine().update_team(team_id, **changes)
    return JsonResponse({'success': True, 'team': team_payload(team)})


@require_http_methods(['PUT'])
@json_view(User.ADMIN)
def team_budget(request, team_id):
    form = TeamBudgetForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    team = get_engine().set_team_budget(team_id, form.cleaned_data['budget'])
    return JsonResponse({'success': True, 'budget': team.budget})


@require_http_methods(['PUT'])
@json_view(User.ADMIN)
def team_lock_bidding(request, team_id):
    form = LockForm(parse_body(request))
    form.is_valid()
    team = get_engine().lock_team(team_id, form.cleaned_data.get('locked', False))
    return JsonResponse({'success': True, 'locked': team.bidding_locked})


@require_http_methods(['PUT'])
@json_view(User.ADMIN)
def team_credentials(request, team_id):
    form = CredentialsForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)
    team = get_engine().set_team_credentials(
        team_id,
        form.cleaned_data['username'],
        form.cleaned_data['password'],
    )
    return JsonResponse({'success': True, 'team': team_payload(team, include_credentials=True)})


@require_GET
@json_view(User.ADMIN)
def team_squads(request):
    sold = Player.objects.filter(status=Player.SOLD).select_related('sold_to_team').order_by('name')
    squads = {team.id: {'team': team_payload(team), 'players': []} for team in Team.objects.order_by('name')}
    for player in sold:
        if player.sold_to_team_id in squads:
            squads[player.sold_to_team_id]['players'].append(player_payload(player))
    return JsonResponse(list(squads.values()), safe=False)


# ============================================================================
# APP OWNER
# ============================================================================

@require_POST
@json_view(User.APP_OWNER)
def update_staff_credentials(request):
    form = StaffCredentialsForm(parse_body(request))
    if not form.is_valid():
        return bad_request(form)

    role = form.cleaned_data['target_role']
    _, created = get_engine().set_staff_credentials(
        role,
        form.cleaned_data['new_username'],
        form.cleaned_data['new_password'],
    )
    verb = 'created with credentials' if created else 'credentials updated'
    return JsonResponse({'success': True, 'message': f'{role} {verb} successfully'})
