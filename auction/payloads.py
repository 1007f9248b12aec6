"""JSON shapes shared by the HTTP views and the broadcast events"""


def player_payload(player):
    if player is None:
        return None
    return {
        'id': player.id,
        'name': player.name,
        'image': player.image or None,
        'role': player.role,
        'country': player.country or None,
        'age': player.age,
        'base_price': player.base_price,
        'status': player.status,
        'sold_price': player.sold_price,
        'sold_to_team': player.sold_to_team_id,
        'team_name': player.sold_to_team.name if player.sold_to_team_id else None,
        'was_unsold': player.was_unsold,
        'serial_number': player.serial_number,
    }


def bid_payload(bid):
    if bid is None:
        return None
    return {
        'id': bid.id,
        'player_id': bid.player_id,
        'team_id': bid.team_id,
        'team_name': bid.team.name,
        'amount': bid.amount,
        'timestamp': bid.timestamp.isoformat(),
    }


def team_payload(team, include_credentials=False):
    data = {
        'id': team.id,
        'name': team.name,
        'owner_name': team.owner_name,
        'logo': team.logo or None,
        'budget': team.budget,
        'bidding_locked': team.bidding_locked,
    }
    if include_credentials:
        data['username'] = team.owner.username if team.owner_id else None
        data['plain_password'] = team.plain_password
    return data


def state_payload(state):
    return {
        'status': state.status,
        'currentPlayerId': state.current_player_id,
        'biddingLocked': state.bidding_locked,
        'bidIncrements': {
            'increment1': state.bid_increment_1,
            'increment2': state.bid_increment_2,
        },
        'maxPlayersPerTeam': state.max_players_per_team,
        'enforceMaxBid': state.enforce_max_bid,
    }
